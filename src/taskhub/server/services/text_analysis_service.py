"""
Text analysis: an optional external analyzer with a builtin lexicon-based fallback.
"""

import logging
import math
import re
import unicodedata
from collections import Counter
from typing import Any, Dict, List, Optional

import httpx

log = logging.getLogger(__name__)

ANALYSIS_TYPES = ("sentiment", "keywords", "topics", "readability")
EXTERNAL_TIMEOUT_SECONDS = 10.0
KEYWORD_LIMIT = 8

STOPWORDS = frozenset(
    [
        "the", "and", "or", "a", "an", "to", "of", "in", "on", "for", "with",
        "is", "are", "was", "were", "be", "been", "it", "this", "that", "by",
        "as", "at", "from",
        "我们", "你们", "他们", "以及", "并且", "但是", "如果", "因为", "所以",
        "就是", "还有", "一个", "一些", "这些", "那些", "什么", "没有", "可以", "能够",
    ]
)

POSITIVE_WORDS = frozenset(
    [
        "good", "great", "excellent", "amazing", "happy", "success", "positive",
        "helpful", "efficient", "love",
        "赞", "优秀", "开心", "满意", "成功", "积极", "高效", "喜欢",
    ]
)

NEGATIVE_WORDS = frozenset(
    [
        "bad", "poor", "terrible", "sad", "fail", "negative", "problem", "issue",
        "hate", "worst",
        "差", "糟糕", "难过", "失败", "消极", "问题", "困扰", "讨厌",
    ]
)

TOPIC_RULES = [
    ("technology", ["代码", "开发", "函数", "api", "bug", "frontend", "backend", "server", "database"]),
    ("work", ["项目", "会议", "计划", "任务", "deadline", "团队", "协作", "报告"]),
    ("study", ["学习", "课程", "考试", "知识", "练习", "阅读", "笔记"]),
    ("life", ["生活", "家庭", "旅行", "饮食", "健康", "休息"]),
    ("AI", ["ai", "人工智能", "模型", "训练", "推理", "prompt"]),
    ("finance", ["投资", "理财", "成本", "预算", "收入", "支出"]),
]

_SENTENCE_SPLIT_RE = re.compile(r"[。！？.!?]")
_NEWLINES_RE = re.compile(r"[\r\n]+")


def split_sentences(text: str) -> List[str]:
    flattened = _NEWLINES_RE.sub(" ", text)
    return [s.strip() for s in _SENTENCE_SPLIT_RE.split(flattened) if s.strip()]


def tokenize(text: str) -> List[str]:
    """Lowercase, blank out punctuation and symbols, split, and drop stopwords."""
    cleaned = "".join(
        " " if unicodedata.category(ch)[0] in ("P", "S") else ch for ch in text.lower()
    )
    return [t for t in cleaned.split() if t not in STOPWORDS and len(t) > 1]


def extract_keywords(tokens: List[str], limit: int = KEYWORD_LIMIT) -> List[str]:
    # Counter.most_common keeps insertion order for equal counts
    return [word for word, _ in Counter(tokens).most_common(limit)]


def analyze_sentiment(tokens: List[str]) -> Dict[str, Any]:
    score = sum(1 for t in tokens if t in POSITIVE_WORDS) - sum(1 for t in tokens if t in NEGATIVE_WORDS)
    normalized = max(-1.0, min(1.0, score / math.sqrt(len(tokens)))) if tokens else 0.0
    if normalized > 0.2:
        label = "positive"
    elif normalized < -0.2:
        label = "negative"
    else:
        label = "neutral"
    return {"score": round(normalized, 2), "label": label}


def detect_topics(text: str, keywords: List[str]) -> List[str]:
    lowered = text.lower()
    topics = [topic for topic, words in TOPIC_RULES if any(w in lowered for w in words)]
    return topics or keywords[:3]


def analyze_readability(text: str, sentences: List[str]) -> Dict[str, Any]:
    avg_sentence_length = len(text) / max(1, len(sentences))
    if avg_sentence_length < 40:
        grade = "easy"
    elif avg_sentence_length < 80:
        grade = "medium"
    else:
        grade = "hard"
    return {
        "score": round(100 - min(90, avg_sentence_length / 2), 2),
        "grade": grade,
    }


def builtin_analysis(text: str, analysis_type: Optional[str] = None) -> Dict[str, Any]:
    """
    Analyze text locally.

    Returns the full ``{sentiment, keywords, topics, readability}`` mapping, or
    a single-key mapping when ``analysis_type`` names one of them.
    """
    tokens = tokenize(text)
    keywords = extract_keywords(tokens)
    full = {
        "sentiment": analyze_sentiment(tokens),
        "keywords": keywords,
        "topics": detect_topics(text, keywords),
        "readability": analyze_readability(text, split_sentences(text)),
    }
    if analysis_type:
        return {analysis_type: full.get(analysis_type)}
    return full


class TextAnalysisService:
    """Runs the external analyzer when configured and falls back to the builtin one."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self._transport = transport
        self.log_identifier = "[TextAnalysisService]"

    @property
    def external_enabled(self) -> bool:
        return bool(self.api_url and self.api_key)

    async def analyze(self, text: str, analysis_type: Optional[str] = None) -> Dict[str, Any]:
        """
        Returns:
            ``{analysis, source, model, total_tokens}`` where source is
            ``external`` or ``builtin``

        Raises:
            ValueError: If the text is empty or the analysis type is unknown
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")
        if analysis_type and analysis_type not in ANALYSIS_TYPES:
            raise ValueError(f"Invalid analysis type: {analysis_type}")

        if self.external_enabled:
            try:
                return await self._analyze_external(text, analysis_type)
            except (httpx.HTTPError, ValueError) as e:
                log.warning(
                    "%s External analyzer failed, using builtin analysis: %s",
                    self.log_identifier,
                    e,
                )

        return {
            "analysis": builtin_analysis(text, analysis_type),
            "source": "builtin",
            "model": "builtin-analysis",
            "total_tokens": 0,
        }

    async def _analyze_external(self, text: str, analysis_type: Optional[str]) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=EXTERNAL_TIMEOUT_SECONDS, transport=self._transport) as client:
            response = await client.post(
                self.api_url,
                json={"text": text, "analysisType": analysis_type},
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            response.raise_for_status()
            payload = response.json()

        if not isinstance(payload, dict):
            payload = {"result": payload}
        data = payload.get("data") if isinstance(payload.get("data"), dict) else {}
        analysis = payload.get("analysis")
        if analysis is None:
            analysis = data.get("analysis")
        if analysis is None:
            analysis = payload.get("result")
        if analysis is None:
            analysis = payload

        usage = payload.get("usage") if isinstance(payload.get("usage"), dict) else {}
        return {
            "analysis": analysis,
            "source": "external",
            "model": payload.get("model") or "external-analysis",
            "total_tokens": usage.get("total_tokens") or 0,
        }
