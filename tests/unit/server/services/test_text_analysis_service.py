"""
Unit tests for the builtin text analyzer and the external fallback.
"""

import httpx
import pytest

from taskhub.server.services.text_analysis_service import (
    TextAnalysisService,
    analyze_readability,
    analyze_sentiment,
    builtin_analysis,
    detect_topics,
    extract_keywords,
    split_sentences,
    tokenize,
)


class TestTokenize:
    def test_lowercases_and_strips_punctuation(self):
        assert tokenize("Hello, World! The API works.") == ["hello", "world", "api", "works"]

    def test_drops_stopwords_and_single_characters(self):
        assert tokenize("a b cd and of") == ["cd"]

    def test_symbols_become_separators(self):
        assert tokenize("cost+budget=plan") == ["cost", "budget", "plan"]


class TestKeywords:
    def test_most_frequent_first_ties_in_first_seen_order(self):
        tokens = ["beta", "alpha", "beta", "gamma", "alpha", "beta"]
        assert extract_keywords(tokens) == ["beta", "alpha", "gamma"]

    def test_limit(self):
        tokens = [f"word{i}" for i in range(20)]
        assert len(extract_keywords(tokens)) == 8


class TestSentiment:
    def test_positive(self):
        result = analyze_sentiment(["great", "team", "today", "meeting"])
        assert result == {"score": 0.5, "label": "positive"}

    def test_score_is_clamped(self):
        assert analyze_sentiment(["good", "great"])["score"] == 1.0

    def test_negative(self):
        assert analyze_sentiment(["bad", "problem", "meeting", "today"])["label"] == "negative"

    def test_neutral_and_empty(self):
        assert analyze_sentiment(["meeting", "today"]) == {"score": 0.0, "label": "neutral"}
        assert analyze_sentiment([]) == {"score": 0.0, "label": "neutral"}


class TestTopicsAndReadability:
    def test_topic_rules_match_substrings(self):
        assert detect_topics("Fix the backend bug before the deadline", []) == ["technology", "work"]

    def test_falls_back_to_top_keywords(self):
        assert detect_topics("plain words", ["one", "two", "three", "four"]) == ["one", "two", "three"]

    def test_readability_grades(self):
        short = "Short one. Another."
        assert analyze_readability(short, split_sentences(short))["grade"] == "easy"

        long_text = "x" * 100
        result = analyze_readability(long_text, split_sentences(long_text))
        assert result == {"score": 50.0, "grade": "hard"}

    def test_split_sentences_handles_cjk_punctuation(self):
        assert split_sentences("第一句。第二句！\nThird?") == ["第一句", "第二句", "Third"]


class TestBuiltinAnalysis:
    def test_full_result_has_all_sections(self):
        result = builtin_analysis("The team had a great meeting about the project plan.")
        assert set(result) == {"sentiment", "keywords", "topics", "readability"}

    def test_single_type(self):
        result = builtin_analysis("Great work", "sentiment")
        assert list(result) == ["sentiment"]


class TestTextAnalysisService:
    @pytest.mark.asyncio
    async def test_builtin_when_external_not_configured(self):
        service = TextAnalysisService()
        result = await service.analyze("A good day", "sentiment")

        assert result["source"] == "builtin"
        assert result["model"] == "builtin-analysis"
        assert result["total_tokens"] == 0
        assert result["analysis"]["sentiment"]["label"] == "positive"

    @pytest.mark.asyncio
    async def test_rejects_empty_text_and_unknown_type(self):
        service = TextAnalysisService()
        with pytest.raises(ValueError, match="Text cannot be empty"):
            await service.analyze("   ")
        with pytest.raises(ValueError, match="Invalid analysis type"):
            await service.analyze("text", "grammar")

    @pytest.mark.asyncio
    async def test_external_analyzer_result_is_used(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["auth"] = request.headers["Authorization"]
            return httpx.Response(
                200,
                json={
                    "analysis": {"sentiment": {"label": "positive"}},
                    "model": "analyzer-v1",
                    "usage": {"total_tokens": 42},
                },
            )

        service = TextAnalysisService(
            api_url="https://analyzer.test/analyze",
            api_key="secret",
            transport=httpx.MockTransport(handler),
        )
        result = await service.analyze("text to analyze", "sentiment")

        assert captured["auth"] == "Bearer secret"
        assert result == {
            "analysis": {"sentiment": {"label": "positive"}},
            "source": "external",
            "model": "analyzer-v1",
            "total_tokens": 42,
        }

    @pytest.mark.asyncio
    async def test_external_failure_falls_back_to_builtin(self):
        service = TextAnalysisService(
            api_url="https://analyzer.test/analyze",
            api_key="secret",
            transport=httpx.MockTransport(lambda request: httpx.Response(500)),
        )
        result = await service.analyze("Terrible problem", "sentiment")

        assert result["source"] == "builtin"
        assert result["analysis"]["sentiment"]["label"] == "negative"
