"""
AI text utility endpoints and usage history.
"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...shared.api import DataResponse, create_data_response
from ...shared.auth import get_current_user
from ...shared.exceptions import WebUIBackendException
from ...shared.utils import CurrentUser
from ..dependencies import get_ai_service, get_text_analysis_service, get_usage_tracking_service
from ..services.ai_service import AIService
from ..services.text_analysis_service import TextAnalysisService
from ..services.usage_tracking_service import UsageTrackingService, estimate_cost_cents
from ..utils.text_utils import estimate_tokens
from .dto.requests.ai_requests import (
    AnalyzeRequest,
    GenerateRequest,
    RewriteRequest,
    SummarizeRequest,
    TextRequest,
    TranslateRequest,
)
from .dto.responses.ai_responses import AIUsageLogResponse

log = logging.getLogger(__name__)

router = APIRouter()


def _estimated_usage(input_text: str, output_text: str) -> dict:
    prompt_tokens = estimate_tokens(input_text)
    completion_tokens = estimate_tokens(output_text)
    return {
        "prompt_tokens": prompt_tokens,
        "completion_tokens": completion_tokens,
        "total_tokens": prompt_tokens + completion_tokens,
    }


@router.get("/ai/stats")
async def get_usage_stats(
    user: CurrentUser = Depends(get_current_user),
    usage_service: UsageTrackingService = Depends(get_usage_tracking_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        return create_data_response(usage_service.stats_summary(user_id))
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error computing AI usage stats for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve AI usage stats",
        )


@router.post("/ai/generate")
async def generate_text(
    request: GenerateRequest,
    user: CurrentUser = Depends(get_current_user),
    ai_service: AIService = Depends(get_ai_service),
    usage_service: UsageTrackingService = Depends(get_usage_tracking_service),
) -> DataResponse:
    """
    Run a completion. Requests coming from the assistant panel are logged as
    ``assistant_qa``, everything else as ``generate``.
    """
    user_id = user.get("id")
    try:
        result = await ai_service.generate_text(
            prompt=request.prompt,
            type=request.type,
            context=request.context,
            model=request.model,
            max_length=request.max_length,
            temperature=request.temperature,
            api_key=request.api_key,
        )
        usage = result["usage"]
        usage_service.record_usage(
            user_id,
            action_type="assistant_qa" if request.source == "assistant" else "generate",
            model_name=result["model"],
            input_tokens=usage["prompt_tokens"],
            output_tokens=usage["completion_tokens"],
            cost_cents=estimate_cost_cents(usage["total_tokens"]),
        )
        return create_data_response(result, message="Text generated successfully")
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error generating text for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate text",
        )


@router.post("/ai/summarize")
async def summarize(
    request: SummarizeRequest,
    user: CurrentUser = Depends(get_current_user),
    ai_service: AIService = Depends(get_ai_service),
    usage_service: UsageTrackingService = Depends(get_usage_tracking_service),
) -> DataResponse:
    user_id = user.get("id")
    model = request.model or ai_service.default_model
    try:
        summary = await ai_service.summarize_text(
            request.text, max_length=request.max_length, model=model, api_key=request.api_key
        )
        usage_service.record_usage(
            user_id, "summarize", model_name=model, input_text=request.text, output_text=summary
        )
        return create_data_response(
            {
                "summary": summary,
                "original_length": len(request.text),
                "summary_length": len(summary),
            },
            message="Summary generated successfully",
        )
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error summarizing text for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to summarize text",
        )


@router.post("/ai/rewrite")
async def rewrite(
    request: RewriteRequest,
    user: CurrentUser = Depends(get_current_user),
    ai_service: AIService = Depends(get_ai_service),
    usage_service: UsageTrackingService = Depends(get_usage_tracking_service),
) -> DataResponse:
    user_id = user.get("id")
    model = request.model or ai_service.default_model
    try:
        rewritten = await ai_service.rewrite_text(
            request.text, style=request.style, model=model, api_key=request.api_key
        )
        usage_service.record_usage(
            user_id, "rewrite", model_name=model, input_text=request.text, output_text=rewritten
        )
        return create_data_response(
            {
                "rewritten_text": rewritten,
                "usage": _estimated_usage(request.text, rewritten),
                "model": model,
            },
            message="Text rewritten successfully",
        )
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error rewriting text for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to rewrite text",
        )


@router.post("/ai/translate")
async def translate(
    request: TranslateRequest,
    user: CurrentUser = Depends(get_current_user),
    ai_service: AIService = Depends(get_ai_service),
    usage_service: UsageTrackingService = Depends(get_usage_tracking_service),
) -> DataResponse:
    user_id = user.get("id")
    model = request.model or ai_service.default_model
    try:
        translated = await ai_service.translate_text(
            request.text,
            target_language=request.target_language,
            source_language=request.source_language,
            model=model,
            api_key=request.api_key,
        )
        usage_service.record_usage(
            user_id, "translate", model_name=model, input_text=request.text, output_text=translated
        )
        return create_data_response(
            {
                "translated_text": translated,
                "usage": _estimated_usage(request.text, translated),
                "model": model,
            },
            message="Text translated successfully",
        )
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error translating text for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to translate text",
        )


@router.post("/ai/extract-todos")
async def extract_todos(
    request: TextRequest,
    user: CurrentUser = Depends(get_current_user),
    ai_service: AIService = Depends(get_ai_service),
    usage_service: UsageTrackingService = Depends(get_usage_tracking_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        todos = await ai_service.extract_todos(request.text)
        usage_service.record_usage(
            user_id,
            "extract_todos",
            model_name=ai_service.default_model,
            input_text=request.text,
            output_text="\n".join(todos),
        )
        return create_data_response({"todos": todos})
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error extracting todos for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to extract todos",
        )


@router.post("/ai/analyze")
async def analyze(
    request: AnalyzeRequest,
    user: CurrentUser = Depends(get_current_user),
    analysis_service: TextAnalysisService = Depends(get_text_analysis_service),
    usage_service: UsageTrackingService = Depends(get_usage_tracking_service),
) -> DataResponse:
    """
    Analyze sentiment, keywords, topics and readability.

    Uses the external analyzer when it is configured and reachable, and the
    builtin analyzer otherwise.
    """
    user_id = user.get("id")
    try:
        result = await analysis_service.analyze(request.text, request.analysis_type)
        usage_service.record_usage(
            user_id,
            "analyze",
            model_name=result["model"],
            input_text=request.text,
            output_text=json.dumps(result["analysis"], ensure_ascii=False),
            cost_cents=estimate_cost_cents(result["total_tokens"]),
        )
        return create_data_response(
            {"analysis": result["analysis"], "source": result["source"]},
            message="Analysis completed",
        )
    except (HTTPException, WebUIBackendException):
        raise
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        log.error("Error analyzing text for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to analyze text",
        )


@router.post("/ai/suggestions/writing")
async def writing_suggestions(
    request: TextRequest,
    user: CurrentUser = Depends(get_current_user),
    ai_service: AIService = Depends(get_ai_service),
) -> DataResponse:
    try:
        return create_data_response(await ai_service.generate_writing_suggestions(request.text))
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error generating writing suggestions: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate writing suggestions",
        )


@router.post("/ai/suggestions/titles")
async def title_suggestions(
    request: TextRequest,
    user: CurrentUser = Depends(get_current_user),
    ai_service: AIService = Depends(get_ai_service),
) -> DataResponse:
    try:
        return create_data_response(await ai_service.generate_title_suggestions(request.text))
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error generating title suggestions: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate title suggestions",
        )


@router.post("/ai/suggestions/tags")
async def tag_suggestions(
    request: TextRequest,
    user: CurrentUser = Depends(get_current_user),
    ai_service: AIService = Depends(get_ai_service),
) -> DataResponse:
    try:
        return create_data_response(await ai_service.generate_tag_suggestions(request.text))
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error generating tag suggestions: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate tag suggestions",
        )


@router.post("/ai/embedding")
async def generate_embedding(
    request: TextRequest,
    user: CurrentUser = Depends(get_current_user),
    ai_service: AIService = Depends(get_ai_service),
) -> DataResponse:
    try:
        embedding = await ai_service.generate_embedding(request.text)
        return create_data_response({"embedding": embedding, "dimensions": len(embedding)})
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error generating embedding: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate embedding",
        )


@router.get("/ai/usage/history")
async def get_usage_history(
    action_type: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: CurrentUser = Depends(get_current_user),
    usage_service: UsageTrackingService = Depends(get_usage_tracking_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        logs = usage_service.find_by_user(user_id, action_type=action_type, limit=limit, offset=offset)
        return create_data_response({"logs": [AIUsageLogResponse.model_validate(entry) for entry in logs]})
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error fetching AI usage history for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve AI usage history",
        )


@router.get("/ai/usage/recent")
async def get_recent_usage(
    limit: int = Query(10, ge=1, le=100),
    user: CurrentUser = Depends(get_current_user),
    usage_service: UsageTrackingService = Depends(get_usage_tracking_service),
) -> DataResponse:
    user_id = user.get("id")
    try:
        logs = usage_service.recent(user_id, limit=limit)
        return create_data_response({"logs": [AIUsageLogResponse.model_validate(entry) for entry in logs]})
    except (HTTPException, WebUIBackendException):
        raise
    except Exception as e:
        log.error("Error fetching recent AI usage for user %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve recent AI usage",
        )
