"""
Unit tests for the Flow Validator.

Penalties: 20 per error, 5 per warning, 2 per suggestion.
"""
from dataclasses import replace

import pytest

from src.analysis import analyze
from src.core.errors import ValidationFailed
from src.flows.models import (
    GotoBlock,
    GotoBlockConfig,
    InformationBlock,
    InformationBlockConfig,
    QuestionBlock,
    QuestionBlockConfig,
    QuestionType,
)
from src.validation import (
    block_type_counts,
    metrics,
    objectives,
    optimization_suggestions,
    question_tier,
    validate,
)


def question(block_id, text="What does the safety sign mean?", points=5, **overrides):
    config = QuestionBlockConfig(
        question_text=text,
        question_type=overrides.pop("question_type", QuestionType.TEXT_INPUT),
        hint=overrides.pop("hint", "Look at the colour."),
        points=points,
        **overrides,
    )
    return QuestionBlock(id=block_id, order=0, config=config)


def info(block_id, content="Read the manual."):
    return InformationBlock(id=block_id, order=0, config=InformationBlockConfig(content=content))


def flow(*blocks):
    return [replace(block, order=index) for index, block in enumerate(blocks)]


class TestValidFlow:
    def test_clean_flow_scores_100(self, sample_steps):
        result = validate(sample_steps, "Press hall safety")
        assert result.is_valid
        assert result.score == 100
        assert result.issue_count == 0

    def test_raise_for_errors_is_noop_when_valid(self, sample_steps):
        validate(sample_steps, "Press hall safety").raise_for_errors()


class TestErrors:
    def test_empty_title(self, sample_steps):
        result = validate(sample_steps, "   ")
        assert not result.is_valid
        assert result.errors == ["Training title is required."]
        assert result.score == 80

    def test_empty_flow(self):
        result = validate([], "Title")
        assert not result.is_valid
        assert len(result.errors) == 1
        assert result.score == 80

    def test_out_of_range_correct_option_is_error(self, sample_steps):
        bad = replace(sample_steps[1], config=replace(sample_steps[1].config, correct_option=3))
        steps = [sample_steps[0], bad] + sample_steps[2:]

        result = validate(steps, "Press hall safety")
        assert not result.is_valid
        assert result.errors == ["Step 2: Correct option 3 is out of range for 3 options."]

    def test_missing_correct_option_is_error(self, sample_steps):
        bad = replace(sample_steps[1], config=replace(sample_steps[1].config, correct_option=None))
        result = validate([sample_steps[0], bad] + sample_steps[2:], "Press hall safety")
        assert "Step 2: Multiple choice question has no correct option." in result.errors

    def test_duplicate_ids(self, sample_steps):
        duplicate = replace(sample_steps[2], id="q-1")
        result = validate([sample_steps[0], sample_steps[1], duplicate, sample_steps[3]], "Title")
        assert "Block id 'q-1' is used by 2 blocks." in result.errors

    def test_raise_for_errors(self):
        result = validate([], "")
        with pytest.raises(ValidationFailed) as exc:
            result.raise_for_errors()
        assert exc.value.errors == result.errors

    def test_score_never_below_zero(self):
        steps = flow(*[InformationBlock(id=f"i{n}", order=0) for n in range(10)])
        result = validate(steps, "")
        assert len(result.errors) == 11
        assert result.score == 0


class TestWarnings:
    def test_information_only_flow(self):
        steps = flow(info("a"), info("b"), info("c"), info("d"), info("e"))
        result = validate(steps, "Title")
        assert "Training has no question blocks. Add at least one question to assess learners." in result.warnings
        assert result.is_valid

    def test_mandatory_question_without_hint(self, sample_steps):
        unhinted = replace(sample_steps[2], config=replace(sample_steps[2].config, hint=None))
        result = validate([sample_steps[0], sample_steps[1], unhinted, sample_steps[3]], "Title")
        assert result.warnings == ["Question 2: Mandatory question has no hint."]
        assert result.score == 95

    def test_optional_question_without_hint_is_fine(self, sample_steps):
        optional = replace(sample_steps[2], config=replace(sample_steps[2].config, hint=None, mandatory=False))
        result = validate([sample_steps[0], sample_steps[1], optional, sample_steps[3]], "Title")
        assert "Question 2: Mandatory question has no hint." not in result.warnings

    def test_duplicate_options(self, sample_steps):
        config = replace(sample_steps[1].config, options=["Hearing protection", "hearing protection ", "None"])
        result = validate([sample_steps[0], replace(sample_steps[1], config=config)] + sample_steps[2:], "Title")
        assert "Question 1: Multiple choice options contain duplicates." in result.warnings

    def test_no_mandatory_questions(self, sample_steps):
        steps = [sample_steps[0]] + [replace(q, config=replace(q.config, mandatory=False)) for q in sample_steps[1:]]
        result = validate(steps, "Title")
        assert "Consider marking at least one question as mandatory for assessment purposes." in result.warnings

    def test_order_mismatch(self, sample_steps):
        steps = [replace(step, order=step.order + 1) for step in sample_steps]
        result = validate(steps, "Title")
        assert any("order" in warning for warning in result.warnings)
        assert result.is_valid

    def test_too_short(self):
        result = validate(flow(info("a"), question("q")), "Title")
        assert "Training duration may be too short for effective learning." in result.warnings


class TestSuggestions:
    def test_fewer_than_three_steps(self):
        result = validate(flow(info("a"), question("q", points=20)), "Title")
        assert any("under 3 steps" in s for s in result.suggestions)

    def test_dominant_difficulty_tier(self):
        steps = flow(info("a"), *[question(f"q{n}", points=5) for n in range(5)])
        result = validate(steps, "Title")
        assert "Most questions are easy. Mix difficulty levels for a balanced progression." in result.suggestions

    def test_long_flow_without_goto(self):
        steps = flow(*[info(f"i{n}") for n in range(16)])
        result = validate(steps, "Title")
        assert any("goto" in s for s in result.suggestions)

    def test_long_flow_with_goto(self):
        goto = GotoBlock(id="g", order=0, config=GotoBlockConfig(instructions="Go to bay 2"))
        steps = flow(goto, *[info(f"i{n}") for n in range(15)])
        assert not any("goto" in s for s in validate(steps, "Title").suggestions)

    def test_questions_without_information(self):
        steps = flow(question("a"), question("b", points=10), question("c", points=15))
        result = validate(steps, "Title")
        assert "Consider adding information blocks to provide context and learning materials." in result.suggestions

    def test_analysis_question_budget(self, sample_steps):
        analysis = analyze("Workers walk slowly to the yard gate and back every single morning. " * 200)
        result = validate(sample_steps, "Title", analysis=analysis)
        assert any("source document supports" in s for s in result.suggestions)


class TestMetrics:
    def test_metrics(self, sample_steps, goto_block):
        steps = flow(*sample_steps, goto_block)
        result = metrics(steps)
        assert result.total_questions == 3
        assert result.total_points == 30
        assert result.average_points == 10
        assert result.information_blocks == 1
        assert result.goto_blocks == 1
        assert result.mandatory_questions == 3
        assert result.difficulty_distribution == {"easy": 1, "medium": 1, "hard": 1}
        assert result.question_type_distribution == {
            "text_input": 1,
            "numerical_input": 1,
            "multiple_choice": 1,
            "voice_input": 0,
        }
        # 1 info + 2 + 3 + 5 + 2 goto
        assert result.estimated_duration == 13

    def test_empty_metrics(self):
        result = metrics([])
        assert result.total_questions == 0
        assert result.average_points == 0

    def test_block_type_counts(self, sample_steps, goto_block):
        assert block_type_counts(flow(*sample_steps, goto_block)) == {"information": 1, "goto": 1, "question": 3}

    def test_block_type_counts_include_missing_types(self):
        assert block_type_counts([]) == {"information": 0, "goto": 0, "question": 0}

    @pytest.mark.parametrize("points,tier", [(1, "easy"), (5, "easy"), (6, "medium"), (10, "medium"), (11, "hard")])
    def test_question_tier(self, points, tier):
        assert question_tier(points) == tier


class TestObjectives:
    def test_first_matching_topic_wins(self):
        steps = flow(
            question("a", "Which safety equipment is required?"),
            question("b", "How do you report a defect?", points=12),
            question("c", "What colour is the sky?"),
        )
        result = {obj.topic: obj for obj in objectives(steps)}
        assert set(result) == {"Safety Protocols", "Documentation", "General Knowledge"}
        assert result["Documentation"].difficulty == "hard"
        assert result["General Knowledge"].coverage == 15

    def test_coverage_grows_and_caps(self):
        steps = flow(*[question(f"q{n}", "Name the hazard.") for n in range(6)])
        [objective] = objectives(steps)
        assert objective.question_count == 6
        assert objective.coverage == 100


class TestOptimizationSuggestions:
    def test_clean_flow_has_none(self, sample_steps):
        assert optimization_suggestions(sample_steps) == []

    def test_non_progressive_difficulty(self):
        steps = flow(info("i"), *[question(f"q{n}", points=p) for n, p in enumerate([10, 5, 15, 5])])
        suggestions = optimization_suggestions(steps)
        assert any("progressive difficulty" in s for s in suggestions)

    def test_coverage_gaps(self):
        steps = flow(info("i"), question("q", "Describe the team handover."))
        assert optimization_suggestions(steps) == [
            "Improve coverage for: Communication by adding more targeted questions."
        ]
