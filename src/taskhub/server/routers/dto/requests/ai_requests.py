"""
Request DTOs for AI text endpoints.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

AnalysisType = Literal["sentiment", "keywords", "topics", "readability"]


class AIConfigMixin(BaseModel):
    """Per-request model and API key overrides."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model: Optional[str] = None
    api_key: Optional[str] = Field(None, alias="apiKey")


class GenerateRequest(AIConfigMixin):
    prompt: str = Field(..., min_length=1, max_length=2000)
    type: str = "generate"
    context: Optional[str] = Field(None, max_length=5000)
    max_length: Optional[int] = Field(None, gt=0, le=8000, alias="maxLength")
    temperature: Optional[float] = Field(None, ge=0, le=2)
    source: Optional[str] = None


class SummarizeRequest(AIConfigMixin):
    text: str = Field(..., min_length=1)
    max_length: int = Field(200, gt=0, alias="maxLength")


class RewriteRequest(AIConfigMixin):
    text: str = Field(..., min_length=1)
    style: str = "more professional and fluent"


class TranslateRequest(AIConfigMixin):
    text: str = Field(..., min_length=1)
    target_language: str = Field("English", alias="to")
    source_language: Optional[str] = Field(None, alias="from")


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., min_length=1)
    analysis_type: Optional[AnalysisType] = Field(None, alias="analysisType")


class TextRequest(BaseModel):
    text: str = Field(..., min_length=1)
