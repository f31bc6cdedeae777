"""
Content Analyzer: deterministic signals from source document text.

Usage:
    from src.analysis import analyze

    analysis = analyze(document_text)
    print(analysis.key_topics, analysis.suggested_question_count)
"""

from .content_analyzer import (
    TOPIC_PATTERNS,
    Complexity,
    ContentAnalysis,
    ContentSection,
    Difficulty,
    RiskLevel,
    TopicPattern,
    analyze,
    summarize,
)

__all__ = [
    "analyze",
    "summarize",
    "ContentAnalysis",
    "ContentSection",
    "Complexity",
    "Difficulty",
    "RiskLevel",
    "TopicPattern",
    "TOPIC_PATTERNS",
]
