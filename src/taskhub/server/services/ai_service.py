"""
Client for the third-party chat completion and embedding API.
"""

import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from ...shared.exceptions import ExternalServiceError

log = logging.getLogger(__name__)

PLACEHOLDER_API_KEY = "your-siliconflow-api-key"
DEFAULT_MAX_TOKENS = 2000
DEFAULT_TEMPERATURE = 0.7
COMPLETION_TIMEOUT_SECONDS = 60.0
EMBEDDING_TIMEOUT_SECONDS = 30.0

PROVIDER_BASE_URLS = {
    "gpt-": "https://api.openai.com/v1",
    "claude-": "https://api.anthropic.com/v1",
    "gemini-": "https://generativelanguage.googleapis.com/v1",
}

SYSTEM_PROMPTS = {
    "generate": "You are a professional writing assistant. Produce high quality content that follows the user's request.",
    "rewrite": (
        "You are a note polishing assistant. Identify the kind of note (academic, meeting, "
        "personal, work) and improve it accordingly: fix grammar and punctuation, adapt the "
        "tone, tighten the structure and expand key points where useful. For meeting and work "
        "notes, make action items explicit with owners and deadlines. Keep the original "
        "language and Markdown structure, and return only the polished note."
    ),
    "summarize": "You are a summarization assistant. Provide an accurate and concise summary of the content.",
    "extract_todos": "You are a task extraction assistant. Extract concrete, actionable todo items from the text, one per line.",
    "translate": "You are a professional translator. Provide an accurate and natural translation.",
}

TYPE_ALIASES = {
    "text": "generate",
    "note": "generate",
    "todo": "extract_todos",
    "summary": "summarize",
}

_LIST_MARKER_RE = re.compile(r"^\s*(?:[-*•]|\d+[.)、])\s*")
_TAG_SPLIT_RE = re.compile(r"[,，\n]")


def _non_empty_lines(text: str) -> List[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


class AIService:
    """
    Thin async wrapper over an OpenAI-compatible completion API.

    The base URL is chosen from the model name prefix, falling back to the
    configured provider. A per-call ``api_key`` overrides the configured key.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        default_model: str = "moonshotai/Kimi-K2-Instruct-0905",
        embedding_model: str = "BAAI/bge-large-zh-v1.5",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.default_model = default_model
        self.embedding_model = embedding_model
        self.log_identifier = "[AIService]"
        self.http_client = httpx.AsyncClient(transport=transport)

    async def close(self) -> None:
        await self.http_client.aclose()

    def resolve_base_url(self, model: str) -> str:
        for prefix, url in PROVIDER_BASE_URLS.items():
            if model.startswith(prefix):
                return url
        return self.base_url

    def _resolve_api_key(self, api_key: Optional[str]) -> str:
        key = api_key or self.api_key
        if not key or key == PLACEHOLDER_API_KEY:
            raise ExternalServiceError(
                "AI API key is not configured. Set SILICONFLOW_API_KEY or provide an API key.",
                status_code=503,
            )
        return key

    def _map_http_error(self, error: Exception, action: str) -> ExternalServiceError:
        if isinstance(error, httpx.TimeoutException):
            return ExternalServiceError("Request timed out, please try again later", status_code=504)
        if isinstance(error, httpx.HTTPStatusError):
            upstream = error.response.status_code
            if upstream == 401:
                return ExternalServiceError("Invalid API key", status_code=502)
            if upstream == 429:
                return ExternalServiceError("Too many requests, please try again later", status_code=429)
            if upstream == 400:
                return ExternalServiceError("Invalid request parameters", status_code=502)
            return ExternalServiceError(f"{action} failed: upstream returned {upstream}")
        return ExternalServiceError(f"{action} failed: {error}")

    async def generate_text(
        self,
        prompt: str,
        type: str = "generate",
        context: Optional[str] = None,
        model: Optional[str] = None,
        max_length: Optional[int] = None,
        temperature: Optional[float] = None,
        api_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Run one chat completion.

        Returns:
            ``{generated_text, reasoning_content, model, usage}``

        Raises:
            ExternalServiceError: If the key is missing or the provider call fails
        """
        key = self._resolve_api_key(api_key)
        model = model or self.default_model
        prompt_type = TYPE_ALIASES.get(type, type)
        system_prompt = SYSTEM_PROMPTS.get(prompt_type, SYSTEM_PROMPTS["generate"])

        user_message = prompt
        if context and context.strip():
            user_message = f"Context:\n{context}\n\nRequest:\n{prompt}"

        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            "max_tokens": max_length or DEFAULT_MAX_TOKENS,
            "temperature": DEFAULT_TEMPERATURE if temperature is None else temperature,
            "top_p": 0.9,
            "stream": False,
        }

        try:
            response = await self.http_client.post(
                f"{self.resolve_base_url(model)}/chat/completions",
                json=payload,
                headers={"Authorization": f"Bearer {key}"},
                timeout=COMPLETION_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            log.error("%s Text generation failed: %s", self.log_identifier, e)
            raise self._map_http_error(e, "AI generation") from e

        choices = data.get("choices") or []
        message = choices[0].get("message", {}) if choices else {}
        content = (message.get("content") or "").strip()
        if not content:
            raise ExternalServiceError("AI generation failed: no content returned")

        usage = data.get("usage") or {}
        return {
            "generated_text": content,
            "reasoning_content": message.get("reasoning_content"),
            "model": model,
            "usage": {
                "prompt_tokens": usage.get("prompt_tokens", 0),
                "completion_tokens": usage.get("completion_tokens", 0),
                "total_tokens": usage.get("total_tokens", 0),
            },
        }

    async def summarize_text(self, text: str, max_length: int = 200, **options) -> str:
        result = await self.generate_text(
            prompt=f"Summarize the following text in at most {max_length} words. Be concise and keep the key points:",
            type="summarize",
            context=text,
            **options,
        )
        return result["generated_text"]

    async def rewrite_text(self, text: str, style: str = "more professional and fluent", **options) -> str:
        result = await self.generate_text(
            prompt=f"Rewrite the following text to be {style}:",
            type="rewrite",
            context=text,
            **options,
        )
        return result["generated_text"]

    async def translate_text(
        self, text: str, target_language: str = "English", source_language: Optional[str] = None, **options
    ) -> str:
        source = f" from {source_language}" if source_language else ""
        result = await self.generate_text(
            prompt=f"Translate the following text{source} into {target_language}:",
            type="translate",
            context=text,
            **options,
        )
        return result["generated_text"]

    async def extract_todos(self, text: str, **options) -> List[str]:
        result = await self.generate_text(
            prompt="List the actionable todo items in the following text, one per line:",
            type="extract_todos",
            context=text,
            **options,
        )
        return [_LIST_MARKER_RE.sub("", line) for line in _non_empty_lines(result["generated_text"])]

    async def generate_writing_suggestions(self, text: str, **options) -> List[str]:
        result = await self.generate_text(
            prompt="Give 3 to 5 suggestions to improve the following text, one per line:",
            type="rewrite",
            context=text,
            **options,
        )
        return _non_empty_lines(result["generated_text"])[:5]

    async def generate_title_suggestions(self, text: str, **options) -> List[str]:
        result = await self.generate_text(
            prompt="Suggest 5 suitable titles for the following content, one per line:",
            type="generate",
            context=text,
            **options,
        )
        return _non_empty_lines(result["generated_text"])[:5]

    async def generate_tag_suggestions(self, text: str, **options) -> List[str]:
        result = await self.generate_text(
            prompt="Suggest 5 to 8 relevant tags for the following content, separated by commas:",
            type="generate",
            context=text,
            **options,
        )
        tags = [tag.strip() for tag in _TAG_SPLIT_RE.split(result["generated_text"])]
        return [tag for tag in tags if tag][:8]

    async def generate_embedding(self, text: str) -> List[float]:
        """
        Embed text with the configured embedding model.

        Raises:
            ExternalServiceError: If the key is missing or no embedding is returned
        """
        key = self._resolve_api_key(None)
        try:
            response = await self.http_client.post(
                f"{self.base_url}/embeddings",
                json={"model": self.embedding_model, "input": text, "encoding_format": "float"},
                headers={"Authorization": f"Bearer {key}"},
                timeout=EMBEDDING_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            log.error("%s Embedding request failed: %s", self.log_identifier, e)
            raise self._map_http_error(e, "Embedding generation") from e

        items = data.get("data") or []
        embedding = items[0].get("embedding") if items else None
        if not embedding:
            raise ExternalServiceError("Embedding generation failed: no embedding returned")
        return embedding
