"""
Content Analyzer for training source documents.

Derives generation and review signals from already-extracted document text
using fixed heuristics, so identical text always yields identical results:

- Readability: word/sentence counts, complexity tier, reading level
- Topics: a fixed (pattern, topic, weight, risk) table; a topic counts as
  present only when its pattern matches at least twice
- Planning: suggested question count, estimated difficulty and duration
- Audience: target audience, critical points, prerequisite knowledge

Complexity tiers (average words per sentence):
- advanced: > 20
- intermediate: > 12
- basic: otherwise

No network access; safe on empty input.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import Enum


class Complexity(str, Enum):
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class TopicPattern:
    """One row of the topic detection table."""

    pattern: re.Pattern[str]
    topic: str
    weight: float  # (0, 1]
    risk_level: RiskLevel


def _topic(pattern: str, topic: str, weight: float, risk: RiskLevel) -> TopicPattern:
    return TopicPattern(re.compile(pattern, re.IGNORECASE), topic, weight, risk)


TOPIC_PATTERNS: list[TopicPattern] = [
    _topic(r"safety|hazard|risk|protection|emergency|incident|accident|danger",
           "Safety & Risk Management", 0.95, RiskLevel.HIGH),
    _topic(r"equipment|machine|tool|device|apparatus|instrument|machinery",
           "Equipment & Machinery", 0.85, RiskLevel.MEDIUM),
    _topic(r"quality|standard|specification|requirement|compliance|audit",
           "Quality & Standards", 0.8, RiskLevel.MEDIUM),
    _topic(r"procedure|process|workflow|method|protocol|step|instruction",
           "Procedures & Processes", 0.75, RiskLevel.LOW),
    _topic(r"maintenance|repair|service|inspection|calibration|upkeep",
           "Maintenance & Service", 0.7, RiskLevel.MEDIUM),
    _topic(r"training|education|skill|competency|certification|learning",
           "Training & Development", 0.6, RiskLevel.LOW),
    _topic(r"documentation|record|report|log|file|document",
           "Documentation & Records", 0.65, RiskLevel.LOW),
    _topic(r"regulation|law|legal|compliance|regulatory|policy",
           "Regulatory Compliance", 0.85, RiskLevel.HIGH),
    _topic(r"chemical|toxic|substance|material|waste|contamination",
           "Chemical Safety", 0.9, RiskLevel.HIGH),
    _topic(r"electrical|voltage|power|current|circuit|shock",
           "Electrical Safety", 0.88, RiskLevel.HIGH),
]

MIN_TOPIC_MATCHES = 2
MAX_KEY_TOPICS = 8
MAX_CONTENT_SECTIONS = 10
MAX_CRITICAL_POINTS = 3

WORDS_PER_QUESTION = 150
MIN_BASE_QUESTIONS = 3
MAX_BASE_QUESTIONS = 25
COMPLEXITY_MULTIPLIERS = {
    Complexity.ADVANCED: 1.4,
    Complexity.INTERMEDIATE: 1.2,
    Complexity.BASIC: 1.0,
}
HIGH_RISK_MULTIPLIER = 1.3

READING_WORDS_PER_MINUTE = 200
MINUTES_PER_QUESTION = 2
REVIEW_TIME_RATIO = 0.3

TECHNICAL_TERM_PATTERN = re.compile(r"\b[A-Z]{2,}\b|\b\w+tion\b|\b\w+ment\b|\b\w+ical\b")
SAFETY_KEYWORD_PATTERN = re.compile(r"safety|hazard|risk|emergency|danger|critical|warning", re.IGNORECASE)
VOWEL_PATTERN = re.compile(r"[aeiou]", re.IGNORECASE)
SENTENCE_SPLIT_PATTERN = re.compile(r"[.!?]+")

# (pattern, audience) - every matching group adds its audience
AUDIENCE_PATTERNS = [
    (re.compile(r"new|beginner|introduction|basic", re.IGNORECASE), "New Employees"),
    (re.compile(r"advanced|expert|specialized|technical", re.IGNORECASE), "Experienced Staff"),
    (re.compile(r"supervisor|manager|lead|oversight", re.IGNORECASE), "Supervisors"),
    (re.compile(r"safety|emergency|risk", re.IGNORECASE), "All Personnel"),
]
DEFAULT_AUDIENCE = "General Staff"

# (pattern, label) - a label is reported when its group occurs >= 3 times
CRITICAL_PATTERNS = [
    (re.compile(r"must|required|mandatory|critical|essential|vital", re.IGNORECASE), "must"),
    (re.compile(r"never|always|immediately|urgent|emergency", re.IGNORECASE), "never"),
    (re.compile(r"warning|caution|danger|hazard|risk", re.IGNORECASE), "warning"),
]
MIN_CRITICAL_MATCHES = 3
DEFAULT_CRITICAL_POINT = "No critical points identified"

PREREQUISITE_PATTERNS = [
    (re.compile(r"basic|fundamental|foundation", re.IGNORECASE), "Basic operational knowledge"),
    (re.compile(r"safety|emergency", re.IGNORECASE), "Safety orientation completion"),
    (re.compile(r"equipment|machine|tool", re.IGNORECASE), "Equipment familiarization"),
]
DEFAULT_PREREQUISITE = "No specific prerequisites"


@dataclass
class ContentSection:
    """A detected topic and how much question material it offers."""

    section: str
    importance: float  # weight * 100
    question_potential: float  # 0-100
    risk_level: RiskLevel
    matches: int = 0
    density: float = 0.0  # matches per 1000 words


@dataclass
class ContentAnalysis:
    """Result of analyzing one document."""

    word_count: int
    sentence_count: int
    avg_words_per_sentence: float
    complexity: Complexity
    key_topics: list[str] = field(default_factory=list)
    content_sections: list[ContentSection] = field(default_factory=list)
    suggested_question_count: int = MIN_BASE_QUESTIONS
    estimated_difficulty: Difficulty = Difficulty.EASY
    reading_level: float = 6.0
    technical_density: float = 0.0
    safety_keyword_count: int = 0
    learning_objectives: list[str] = field(default_factory=list)
    estimated_duration: int = 0  # minutes
    target_audience: list[str] = field(default_factory=list)
    critical_points: list[str] = field(default_factory=list)
    prerequisite_knowledge: list[str] = field(default_factory=list)

    @property
    def has_high_risk_topics(self) -> bool:
        return any(s.risk_level == RiskLevel.HIGH for s in self.content_sections)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def count_words(text: str) -> int:
    return len(text.split())


def count_sentences(text: str) -> int:
    """Count non-empty segments between sentence terminators."""
    return sum(1 for segment in SENTENCE_SPLIT_PATTERN.split(text) if segment.strip())


def classify_complexity(avg_words_per_sentence: float) -> Complexity:
    if avg_words_per_sentence > 20:
        return Complexity.ADVANCED
    if avg_words_per_sentence > 12:
        return Complexity.INTERMEDIATE
    return Complexity.BASIC


def detect_topics(text: str, word_count: int) -> list[ContentSection]:
    """Detect present topics, sorted by importance (highest first)."""
    sections: list[ContentSection] = []
    if word_count == 0:
        return sections

    for entry in TOPIC_PATTERNS:
        matches = len(entry.pattern.findall(text))
        if matches < MIN_TOPIC_MATCHES:
            continue
        density = matches / word_count * 1000
        sections.append(
            ContentSection(
                section=entry.topic,
                importance=entry.weight * 100,
                question_potential=min(100.0, density * entry.weight * 50),
                risk_level=entry.risk_level,
                matches=matches,
                density=density,
            )
        )

    # Stable: equal weights keep table order
    sections.sort(key=lambda s: s.importance, reverse=True)
    return sections


def suggest_question_count(
    word_count: int,
    complexity: Complexity,
    has_high_risk: bool,
) -> int:
    base = _clamp(word_count // WORDS_PER_QUESTION, MIN_BASE_QUESTIONS, MAX_BASE_QUESTIONS)
    risk_multiplier = HIGH_RISK_MULTIPLIER if has_high_risk else 1.0
    return _round_half_up(base * COMPLEXITY_MULTIPLIERS[complexity] * risk_multiplier)


def estimate_difficulty(
    complexity: Complexity,
    technical_density: float,
    safety_keyword_count: int,
) -> Difficulty:
    if (complexity == Complexity.ADVANCED and technical_density > 0.05) or safety_keyword_count > 10:
        return Difficulty.HARD
    if complexity == Complexity.INTERMEDIATE or technical_density > 0.03 or safety_keyword_count > 5:
        return Difficulty.MEDIUM
    return Difficulty.EASY


def estimate_reading_level(text: str, word_count: int, avg_words_per_sentence: float) -> float:
    vowel_ratio = len(VOWEL_PATTERN.findall(text)) / word_count if word_count else 0.0
    return _clamp(0.39 * avg_words_per_sentence + 11.8 * vowel_ratio - 15.59, 6, 18)


def estimate_duration(word_count: int, question_count: int) -> int:
    """Reading time + 2 min per question + 30% review, in whole minutes."""
    reading_time = math.ceil(word_count / READING_WORDS_PER_MINUTE)
    question_time = question_count * MINUTES_PER_QUESTION
    review_time = math.ceil((reading_time + question_time) * REVIEW_TIME_RATIO)
    return reading_time + question_time + review_time


def _learning_objectives(key_topics: list[str]) -> list[str]:
    def topic_at(index: int, default: str) -> str:
        return key_topics[index] if index < len(key_topics) else default

    return [
        f"Understand key {topic_at(0, 'operational')} principles",
        f"Apply {topic_at(1, 'safety')} procedures correctly",
        f"Demonstrate competency in {topic_at(2, 'standard')} practices",
    ]


def _matching_labels(text: str, patterns: list[tuple[re.Pattern[str], str]], default: str) -> list[str]:
    labels = [label for pattern, label in patterns if pattern.search(text)]
    return labels or [default]


def _critical_points(text: str) -> list[str]:
    points = [
        f"High frequency of {label} terms detected"
        for pattern, label in CRITICAL_PATTERNS
        if len(pattern.findall(text)) >= MIN_CRITICAL_MATCHES
    ]
    return points[:MAX_CRITICAL_POINTS] or [DEFAULT_CRITICAL_POINT]


def analyze(text: str) -> ContentAnalysis:
    """
    Analyze document text.

    Args:
        text: Plain text extracted from the source document

    Returns:
        ContentAnalysis with every list populated (defaults when nothing matched)
    """
    text = text or ""
    word_count = count_words(text)
    sentence_count = count_sentences(text)
    avg_words = word_count / sentence_count if sentence_count else 0.0
    complexity = classify_complexity(avg_words)

    sections = detect_topics(text, word_count)
    key_topics = [s.section for s in sections][:MAX_KEY_TOPICS]
    has_high_risk = any(s.risk_level == RiskLevel.HIGH for s in sections)

    question_count = suggest_question_count(word_count, complexity, has_high_risk)

    technical_terms = len(TECHNICAL_TERM_PATTERN.findall(text))
    technical_density = technical_terms / word_count if word_count else 0.0
    safety_keywords = len(SAFETY_KEYWORD_PATTERN.findall(text))

    return ContentAnalysis(
        word_count=word_count,
        sentence_count=sentence_count,
        avg_words_per_sentence=avg_words,
        complexity=complexity,
        key_topics=key_topics,
        content_sections=sections[:MAX_CONTENT_SECTIONS],
        suggested_question_count=question_count,
        estimated_difficulty=estimate_difficulty(complexity, technical_density, safety_keywords),
        reading_level=estimate_reading_level(text, word_count, avg_words),
        technical_density=technical_density,
        safety_keyword_count=safety_keywords,
        learning_objectives=_learning_objectives(key_topics),
        estimated_duration=estimate_duration(word_count, question_count),
        target_audience=_matching_labels(text, AUDIENCE_PATTERNS, DEFAULT_AUDIENCE),
        critical_points=_critical_points(text),
        prerequisite_knowledge=_matching_labels(text, PREREQUISITE_PATTERNS, DEFAULT_PREREQUISITE),
    )


def summarize(text: str, file_name: str) -> str:
    """
    Deterministic plain-text analysis of a document.

    Used in place of a generated analysis when no text-generation call is
    configured or the call failed.
    """
    analysis = analyze(text)
    words = analysis.word_count
    reading_time = math.ceil(words / READING_WORDS_PER_MINUTE)
    topics = analysis.key_topics[:6] or ["General operational procedures"]

    if words > 2000:
        level = "Advanced"
    elif words > 1000:
        level = "Intermediate"
    else:
        level = "Basic"

    lines = [
        f"Document Analysis: {file_name}",
        "",
        f"Document contains {words} words ({reading_time} minute read).",
        "",
        "Main Topics:",
        *[f"- {topic}" for topic in topics],
        "",
        "Content Assessment:",
        f"- Difficulty: {level} level",
        f"- Complexity: {analysis.complexity.value}",
        f"- Format: {'Detailed documentation' if words > 1000 else 'Concise guide'}",
        "",
        "Training Recommendations:",
        f"- Duration: {analysis.estimated_duration} minutes",
        f"- Questions: {analysis.suggested_question_count}",
        f"- Approach: {'Interactive workshop' if words > 1500 else 'Overview with examples'}",
    ]
    return "\n".join(lines)
