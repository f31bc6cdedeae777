"""
Flow Validator: quality score, issues, metrics and learning objectives.

Usage:
    from src.validation import validate

    result = validate(steps, title="Forklift pre-shift check")
    if not result.is_valid:
        print(result.errors)
"""

from .flow_validator import (
    FlowMetrics,
    LearningObjective,
    ValidationResult,
    block_type_counts,
    metrics,
    objectives,
    optimization_suggestions,
    question_tier,
    validate,
)

__all__ = [
    "validate",
    "metrics",
    "objectives",
    "optimization_suggestions",
    "question_tier",
    "block_type_counts",
    "ValidationResult",
    "FlowMetrics",
    "LearningObjective",
]
