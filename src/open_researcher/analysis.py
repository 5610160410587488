"""
Content analysis heuristics.

Keyword and pattern based analysis of text the agent has already fetched. Every
analysis is pure and total: the same input always yields the same report and
no input makes it fail.
"""

import re
from typing import Callable, Literal

AnalysisType = Literal["sentiment", "key_facts", "trends", "summary", "credibility"]

POSITIVE_WORDS = (
    "success",
    "growth",
    "improve",
    "innovation",
    "breakthrough",
    "leading",
    "advanced",
)
NEGATIVE_WORDS = (
    "challenge",
    "risk",
    "concern",
    "threat",
    "decline",
    "issue",
    "problem",
)

SENTENCE_SPLIT = re.compile(r"[.!?]")
KEY_FACT_PATTERN = re.compile(r"\d+%|\$\d+|\d+ (million|billion)|first|largest|leading", re.I)
SUMMARY_PATTERN = re.compile(r"announc|launch|report|study|research|found|develop", re.I)

TREND_PATTERNS = {
    "Growth": re.compile(r"increas|grow|rise|expand|surge", re.I),
    "Decline": re.compile(r"decreas|fall|drop|declin|reduc", re.I),
    "Innovation": re.compile(r"new|innovat|breakthrough|cutting-edge|advanced", re.I),
    "Adoption": re.compile(r"adopt|implement|deploy|integrat|using", re.I),
}

CREDIBILITY_PATTERNS = {
    "Has citations": re.compile(r"according to|study|research|report|survey", re.I),
    "Includes data": re.compile(r"\d+%|\$\d+|statistics|data", re.I),
    "Official source": re.compile(r"\.gov|\.edu|official|announce", re.I),
    "Recent info": re.compile(r"20[2-9]\d|recent|latest|new", re.I),
}

MAX_KEY_FACTS = 5
MAX_SUMMARY_SENTENCES = 3
MIN_SUMMARY_SENTENCE_LENGTH = 20


def _sentences(content: str) -> list[str]:
    return [s.strip() for s in SENTENCE_SPLIT.split(content) if s.strip()]


def analyze_sentiment(content: str, context: str | None = None) -> str:
    lowered = content.lower()
    positive = [word for word in POSITIVE_WORDS if word in lowered]
    negative = [word for word in NEGATIVE_WORDS if word in lowered]

    if len(positive) > len(negative):
        sentiment = "Positive"
    elif len(negative) > len(positive):
        sentiment = "Negative"
    else:
        sentiment = "Neutral"

    return (
        "Sentiment Analysis:\n"
        f"- Overall: {sentiment}\n"
        f"- Positive indicators: {', '.join(positive) or 'none'}\n"
        f"- Negative indicators: {', '.join(negative) or 'none'}\n"
        f"- Context considered: {context or 'general analysis'}"
    )


def extract_key_facts(content: str, context: str | None = None) -> str:
    facts = [s for s in _sentences(content) if KEY_FACT_PATTERN.search(s)]
    facts = facts[:MAX_KEY_FACTS]
    if not facts:
        return "Key Facts Extracted:\nNo key facts found."
    lines = "\n".join(f"{i}. {fact}" for i, fact in enumerate(facts, 1))
    return f"Key Facts Extracted:\n{lines}"


def analyze_trends(content: str, context: str | None = None) -> str:
    trends = [name for name, pattern in TREND_PATTERNS.items() if pattern.search(content)]
    return (
        "Trend Analysis:\n"
        f"- Identified trends: {', '.join(trends) or 'No clear trends'}\n"
        f"- Market direction: {'Positive' if 'Growth' in trends else 'Mixed'}\n"
        f"- Innovation signals: {'Strong' if 'Innovation' in trends else 'Limited'}"
    )


def summarize(content: str, context: str | None = None) -> str:
    sentences = [
        s
        for s in _sentences(content)
        if len(s) >= MIN_SUMMARY_SENTENCE_LENGTH and SUMMARY_PATTERN.search(s)
    ]
    sentences = sentences[:MAX_SUMMARY_SENTENCES]
    if not sentences:
        return "Executive Summary:\nNo announcement or finding sentences found."
    return f"Executive Summary:\n{'. '.join(sentences)}."


def assess_credibility(content: str, context: str | None = None) -> str:
    factors = {
        name: bool(pattern.search(content))
        for name, pattern in CREDIBILITY_PATTERNS.items()
    }
    score = sum(factors.values())
    lines = "\n".join(
        f"- {name}: {'✓' if present else '✗'}" for name, present in factors.items()
    )
    return f"Credibility Assessment:\n{lines}\n- Credibility score: {score}/4"


ANALYZERS: dict[str, Callable[[str, str | None], str]] = {
    "sentiment": analyze_sentiment,
    "key_facts": extract_key_facts,
    "trends": analyze_trends,
    "summary": summarize,
    "credibility": assess_credibility,
}


def analyze(content: str, analysis_type: str, context: str | None = None) -> str:
    """
    Run one analysis over already-fetched text.

    Args:
        content: Text to analyze
        analysis_type: One of sentiment, key_facts, trends, summary, credibility
        context: Optional note on what the analysis is for

    Returns:
        Human-readable analysis report
    """
    analyzer = ANALYZERS.get(analysis_type)
    if analyzer is None:
        return f'Analysis type "{analysis_type}" is not supported.'
    return analyzer(content, context)
