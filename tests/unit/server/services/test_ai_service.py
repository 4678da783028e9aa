"""
Unit tests for AIService against a mocked completion provider.
"""

import json

import httpx
import pytest

from taskhub.server.services.ai_service import AIService, SYSTEM_PROMPTS
from taskhub.shared.exceptions import ExternalServiceError

BASE_URL = "https://llm.test/v1"


def _completion(content, usage=None, reasoning=None):
    message = {"role": "assistant", "content": content}
    if reasoning:
        message["reasoning_content"] = reasoning
    return {
        "choices": [{"message": message}],
        "usage": usage or {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
    }


class RecordingHandler:
    """Mock transport handler that records requests and replays a response."""

    def __init__(self, response):
        self.response = response
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.response, Exception):
            raise self.response
        if isinstance(self.response, httpx.Response):
            return self.response
        return httpx.Response(200, json=self.response)

    @property
    def last_payload(self):
        return json.loads(self.requests[-1].content)


def _service(handler, api_key="test-key"):
    return AIService(
        base_url=BASE_URL,
        api_key=api_key,
        default_model="default-model",
        embedding_model="embed-model",
        transport=httpx.MockTransport(handler),
    )


class TestGenerateText:
    @pytest.mark.asyncio
    async def test_returns_text_model_and_usage(self):
        handler = RecordingHandler(_completion("  Hello there  ", reasoning="thinking"))
        service = _service(handler)

        result = await service.generate_text("Say hello")

        assert result == {
            "generated_text": "Hello there",
            "reasoning_content": "thinking",
            "model": "default-model",
            "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
        }
        request = handler.requests[0]
        assert str(request.url) == f"{BASE_URL}/chat/completions"
        assert request.headers["Authorization"] == "Bearer test-key"
        payload = handler.last_payload
        assert payload["max_tokens"] == 2000
        assert payload["temperature"] == 0.7
        assert payload["messages"][0]["content"] == SYSTEM_PROMPTS["generate"]
        await service.close()

    @pytest.mark.asyncio
    async def test_context_and_overrides_are_sent(self):
        handler = RecordingHandler(_completion("ok"))
        service = _service(handler)

        await service.generate_text(
            "Summarize",
            type="summary",
            context="Long notes",
            model="custom-model",
            max_length=300,
            temperature=0.2,
            api_key="per-request-key",
        )

        payload = handler.last_payload
        assert payload["model"] == "custom-model"
        assert payload["max_tokens"] == 300
        assert payload["temperature"] == 0.2
        assert payload["messages"][0]["content"] == SYSTEM_PROMPTS["summarize"]
        assert "Long notes" in payload["messages"][1]["content"]
        assert handler.requests[0].headers["Authorization"] == "Bearer per-request-key"

    @pytest.mark.asyncio
    async def test_provider_chosen_by_model_prefix(self):
        handler = RecordingHandler(_completion("ok"))
        service = _service(handler)

        await service.generate_text("hi", model="gpt-4o")

        assert str(handler.requests[0].url) == "https://api.openai.com/v1/chat/completions"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("api_key", [None, "your-siliconflow-api-key"])
    async def test_missing_key_is_service_unavailable(self, api_key):
        handler = RecordingHandler(_completion("ok"))
        service = _service(handler, api_key=api_key)

        with pytest.raises(ExternalServiceError) as exc_info:
            await service.generate_text("hi")

        assert exc_info.value.status_code == 503
        assert handler.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "upstream,status_code,message",
        [
            (401, 502, "Invalid API key"),
            (429, 429, "Too many requests, please try again later"),
            (400, 502, "Invalid request parameters"),
            (500, 502, "AI generation failed: upstream returned 500"),
        ],
    )
    async def test_upstream_errors_are_mapped(self, upstream, status_code, message):
        service = _service(RecordingHandler(httpx.Response(upstream, json={"error": "x"})))

        with pytest.raises(ExternalServiceError) as exc_info:
            await service.generate_text("hi")

        assert exc_info.value.status_code == status_code
        assert exc_info.value.message == message

    @pytest.mark.asyncio
    async def test_timeout_is_gateway_timeout(self):
        service = _service(RecordingHandler(httpx.ReadTimeout("slow")))

        with pytest.raises(ExternalServiceError) as exc_info:
            await service.generate_text("hi")

        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_empty_content_is_an_error(self):
        service = _service(RecordingHandler({"choices": []}))

        with pytest.raises(ExternalServiceError, match="no content returned"):
            await service.generate_text("hi")


class TestHelpers:
    @pytest.mark.asyncio
    async def test_extract_todos_strips_list_markers(self):
        service = _service(RecordingHandler(_completion("- Buy milk\n2. Call Bob\n\n• Book flight")))

        assert await service.extract_todos("notes") == ["Buy milk", "Call Bob", "Book flight"]

    @pytest.mark.asyncio
    async def test_tag_suggestions_split_and_capped(self):
        service = _service(RecordingHandler(_completion("a, b，c\nd,e,f,g,h,i,j")))

        assert await service.generate_tag_suggestions("content") == ["a", "b", "c", "d", "e", "f", "g", "h"]

    @pytest.mark.asyncio
    async def test_title_suggestions_capped_at_five(self):
        service = _service(RecordingHandler(_completion("\n".join(f"Title {i}" for i in range(7)))))

        titles = await service.generate_title_suggestions("content")

        assert titles == [f"Title {i}" for i in range(5)]

    @pytest.mark.asyncio
    async def test_translate_mentions_languages(self):
        handler = RecordingHandler(_completion("Bonjour"))
        service = _service(handler)

        result = await service.translate_text("Hello", target_language="French", source_language="English")

        assert result == "Bonjour"
        assert "from English into French" in handler.last_payload["messages"][1]["content"]


class TestEmbedding:
    @pytest.mark.asyncio
    async def test_returns_vector(self):
        handler = RecordingHandler({"data": [{"embedding": [0.1, 0.2, 0.3]}]})
        service = _service(handler)

        assert await service.generate_embedding("text") == [0.1, 0.2, 0.3]
        assert str(handler.requests[0].url) == f"{BASE_URL}/embeddings"
        assert handler.last_payload["model"] == "embed-model"

    @pytest.mark.asyncio
    async def test_missing_embedding_is_an_error(self):
        service = _service(RecordingHandler({"data": []}))

        with pytest.raises(ExternalServiceError, match="no embedding returned"):
            await service.generate_embedding("text")
