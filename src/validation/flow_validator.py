"""
Flow Validator - pedagogical quality scoring for training flows.

Three outputs for a flow:
1. validate() - score (0-100), errors, warnings and suggestions
2. metrics() - block counts, points, difficulty/type distribution, duration
3. objectives() - learning objectives inferred from question text

Errors make a flow invalid; warnings and suggestions only lower the score.
Validation never raises and never blocks saving a draft: whether a result
with errors may be published is the caller's policy
(see ValidationResult.raise_for_errors).
"""
from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field

from loguru import logger

from src.analysis.content_analyzer import ContentAnalysis
from src.core.errors import ValidationFailed
from src.flows.models import (
    BlockType,
    GotoBlock,
    InformationBlock,
    QuestionBlock,
    QuestionType,
    StepBlock,
    validate_block,
)

from . import thresholds as t

TIERS = ("easy", "medium", "hard")

# First matching pattern wins; unmatched questions count as GENERAL_TOPIC
OBJECTIVE_PATTERNS = [
    (re.compile(r"safety|hazard|protection|ppe|emergency", re.IGNORECASE), "Safety Protocols"),
    (re.compile(r"equipment|machine|tool|operation|maintenance", re.IGNORECASE), "Equipment Operation"),
    (re.compile(r"quality|standard|specification|compliance", re.IGNORECASE), "Quality Control"),
    (re.compile(r"procedure|process|workflow|step", re.IGNORECASE), "Procedures"),
    (re.compile(r"documentation|record|report|log", re.IGNORECASE), "Documentation"),
    (re.compile(r"regulation|law|rule|policy", re.IGNORECASE), "Compliance"),
    (re.compile(r"training|learning|skill|knowledge", re.IGNORECASE), "Training"),
    (re.compile(r"communication|team|collaboration", re.IGNORECASE), "Communication"),
]
GENERAL_TOPIC = "General Knowledge"


@dataclass
class ValidationResult:
    """Result of validating a flow."""

    score: int
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def issue_count(self) -> int:
        return len(self.errors) + len(self.warnings) + len(self.suggestions)

    def raise_for_errors(self) -> None:
        """Raise ValidationFailed if the flow has errors."""
        if self.errors:
            raise ValidationFailed(self.errors)


@dataclass
class FlowMetrics:
    total_questions: int = 0
    total_points: int = 0
    average_points: float = 0.0
    estimated_duration: int = 0  # minutes
    information_blocks: int = 0
    goto_blocks: int = 0
    mandatory_questions: int = 0
    difficulty_distribution: dict[str, int] = field(default_factory=lambda: dict.fromkeys(TIERS, 0))
    question_type_distribution: dict[str, int] = field(
        default_factory=lambda: dict.fromkeys((qt.value for qt in QuestionType), 0)
    )


@dataclass
class LearningObjective:
    topic: str
    difficulty: str  # tier of the first question on the topic
    coverage: int  # 0-100
    question_count: int = 1


def question_tier(points: int) -> str:
    """Difficulty tier of a question by its points."""
    if points <= t.EASY_MAX_POINTS:
        return "easy"
    if points <= t.MEDIUM_MAX_POINTS:
        return "medium"
    return "hard"


def _questions(steps: list[StepBlock]) -> list[QuestionBlock]:
    return [step for step in steps if isinstance(step, QuestionBlock)]


def metrics(steps: list[StepBlock]) -> FlowMetrics:
    """Compute block counts, points, distributions and estimated duration."""
    result = FlowMetrics()
    questions = _questions(steps)

    result.total_questions = len(questions)
    result.information_blocks = sum(1 for s in steps if isinstance(s, InformationBlock))
    result.goto_blocks = sum(1 for s in steps if isinstance(s, GotoBlock))

    for question in questions:
        config = question.config
        result.total_points += config.points
        result.difficulty_distribution[question_tier(config.points)] += 1
        result.question_type_distribution[config.question_type.value] += 1
        if config.mandatory:
            result.mandatory_questions += 1

    if questions:
        result.average_points = result.total_points / len(questions)

    tiers = result.difficulty_distribution
    result.estimated_duration = (
        result.information_blocks * t.MINUTES_INFORMATION
        + tiers["easy"] * t.MINUTES_EASY_QUESTION
        + tiers["medium"] * t.MINUTES_MEDIUM_QUESTION
        + tiers["hard"] * t.MINUTES_HARD_QUESTION
        + result.goto_blocks * t.MINUTES_GOTO
    )
    return result


def objectives(steps: list[StepBlock]) -> list[LearningObjective]:
    """
    Infer learning objectives from question text.

    Each question is assigned to the first matching topic. A topic's coverage
    starts at 20 and grows by 20 per additional question (15/15 for general
    questions), capped at 100. Objectives are returned in first-seen order.
    """
    found: dict[str, LearningObjective] = {}

    for question in _questions(steps):
        text = question.config.question_text
        topic = next((label for pattern, label in OBJECTIVE_PATTERNS if pattern.search(text)), GENERAL_TOPIC)
        if topic == GENERAL_TOPIC:
            start, step = t.GENERAL_COVERAGE_START, t.GENERAL_COVERAGE_STEP
        else:
            start, step = t.OBJECTIVE_COVERAGE_START, t.OBJECTIVE_COVERAGE_STEP

        existing = found.get(topic)
        if existing is None:
            found[topic] = LearningObjective(
                topic=topic,
                difficulty=question_tier(question.config.points),
                coverage=start,
            )
        else:
            existing.question_count += 1
            existing.coverage = min(t.OBJECTIVE_COVERAGE_MAX, existing.coverage + step)

    return list(found.values())


def _score(errors: int, warnings: int, suggestions: int) -> int:
    score = (
        t.SCORE_MAX
        - errors * t.PENALTY_ERROR
        - warnings * t.PENALTY_WARNING
        - suggestions * t.PENALTY_SUGGESTION
    )
    return max(t.SCORE_MIN, min(t.SCORE_MAX, score))


def validate(
    steps: list[StepBlock],
    title: str,
    analysis: ContentAnalysis | None = None,
) -> ValidationResult:
    """
    Validate a flow and score it.

    Args:
        steps: The flow's blocks in order
        title: Training title
        analysis: Optional analysis of the source document; when given, a flow
            with fewer questions than the document supports gets a suggestion

    Returns:
        ValidationResult (is_valid iff there are no errors)
    """
    errors: list[str] = []
    warnings: list[str] = []
    suggestions: list[str] = []

    if not (title or "").strip():
        errors.append("Training title is required.")

    if not steps:
        errors.append("Training flow is empty. Add at least one block to create a valid training.")
        return ValidationResult(score=_score(len(errors), 0, 0), errors=errors)

    # ========================================
    # Structure
    # ========================================
    id_counts = Counter(step.id for step in steps)
    for block_id, count in id_counts.items():
        if count > 1:
            errors.append(f"Block id '{block_id}' is used by {count} blocks.")

    for position, step in enumerate(steps, start=1):
        for problem in validate_block(step):
            errors.append(f"Step {position}: {problem}")

    if any(step.order != index for index, step in enumerate(steps)):
        warnings.append("Block order values do not match their positions. Save the flow to renumber them.")

    # ========================================
    # Questions
    # ========================================
    flow_metrics = metrics(steps)
    questions = _questions(steps)
    total = flow_metrics.total_questions

    if total == 0 and flow_metrics.information_blocks > 0:
        warnings.append("Training has no question blocks. Add at least one question to assess learners.")

    if total > 0 and flow_metrics.mandatory_questions == 0:
        warnings.append("Consider marking at least one question as mandatory for assessment purposes.")

    for number, question in enumerate(questions, start=1):
        config = question.config
        if config.mandatory and not (config.hint or "").strip():
            warnings.append(f"Question {number}: Mandatory question has no hint.")
        if config.is_multiple_choice and config.options:
            normalized = [option.strip().lower() for option in config.options]
            if len(set(normalized)) < len(normalized):
                warnings.append(f"Question {number}: Multiple choice options contain duplicates.")

    if total >= t.MIN_QUESTIONS_FOR_MIX_RULES:
        if flow_metrics.difficulty_distribution["hard"] / total > t.HARD_RATIO_MAX:
            warnings.append("High proportion of difficult questions may overwhelm learners.")

    if flow_metrics.estimated_duration < t.DURATION_MIN_MINUTES:
        warnings.append("Training duration may be too short for effective learning.")
    elif flow_metrics.estimated_duration > t.DURATION_MAX_MINUTES:
        warnings.append("Training duration may be too long. Consider breaking into smaller modules.")

    # ========================================
    # Suggestions
    # ========================================
    if len(steps) < t.MIN_STEPS:
        suggestions.append(f"Consider adding more content. Flows under {t.MIN_STEPS} steps are rarely effective.")

    if total > 0:
        tier, tier_count = max(flow_metrics.difficulty_distribution.items(), key=lambda item: item[1])
        if tier_count / total > t.DOMINANT_TIER_RATIO:
            suggestions.append(f"Most questions are {tier}. Mix difficulty levels for a balanced progression.")

    if len(steps) > t.GOTO_EXPECTED_ABOVE_STEPS and flow_metrics.goto_blocks == 0:
        suggestions.append("Long flows benefit from goto blocks that guide learners between checkpoints.")

    used_types = [count for count in flow_metrics.question_type_distribution.values() if count > 0]
    if len(used_types) == 1 and total >= t.MIN_QUESTIONS_FOR_MIX_RULES:
        suggestions.append("Consider using different question types to engage learners and test various skills.")

    if total > 0 and flow_metrics.information_blocks == 0:
        suggestions.append("Consider adding information blocks to provide context and learning materials.")

    if any(obj.coverage < t.OBJECTIVE_COVERAGE_LOW for obj in objectives(steps)):
        suggestions.append(
            "Some learning objectives have low coverage. Consider adding more questions for these topics."
        )

    if analysis is not None and total < analysis.suggested_question_count:
        suggestions.append(
            f"The source document supports about {analysis.suggested_question_count} questions; "
            f"this flow has {total}."
        )

    result = ValidationResult(
        score=_score(len(errors), len(warnings), len(suggestions)),
        errors=errors,
        warnings=warnings,
        suggestions=suggestions,
    )
    logger.debug(
        f"Validated flow {title!r}: score={result.score}, "
        f"{len(errors)} errors, {len(warnings)} warnings, {len(suggestions)} suggestions"
    )
    return result


def optimization_suggestions(steps: list[StepBlock]) -> list[str]:
    """Longer-term improvements: difficulty progression, content balance, coverage gaps."""
    suggestions: list[str] = []
    flow_metrics = metrics(steps)

    points = [q.config.points for q in _questions(steps)]
    is_progressive = all(later >= earlier for earlier, later in zip(points, points[1:]))
    if not is_progressive and len(points) >= t.PROGRESSION_MIN_QUESTIONS:
        suggestions.append(
            "Consider arranging questions in progressive difficulty order (easy to hard) "
            "for better learning flow."
        )

    ratio = flow_metrics.information_blocks / max(1, flow_metrics.total_questions)
    if ratio < t.INFO_TO_QUESTION_RATIO_MIN and flow_metrics.total_questions >= t.MIN_QUESTIONS_FOR_MIX_RULES:
        suggestions.append(
            "Consider adding more information blocks to provide adequate context and learning materials."
        )

    gaps = [obj.topic for obj in objectives(steps) if obj.coverage < t.OBJECTIVE_COVERAGE_GAP]
    if gaps:
        suggestions.append(f"Improve coverage for: {', '.join(gaps)} by adding more targeted questions.")

    return suggestions


def block_type_counts(steps: list[StepBlock]) -> dict[str, int]:
    """Number of blocks per type, including types with no blocks."""
    counts = dict.fromkeys((bt.value for bt in BlockType), 0)
    for step in steps:
        counts[step.type.value] += 1
    return counts
