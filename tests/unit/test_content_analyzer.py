"""
Unit tests for the Content Analyzer.

Fixtures are small fixed texts; every expected value follows from the
analyzer's published formulas.
"""
import pytest

from src.analysis.content_analyzer import (
    Complexity,
    Difficulty,
    RiskLevel,
    analyze,
    classify_complexity,
    estimate_duration,
    estimate_reading_level,
    suggest_question_count,
    summarize,
)

# 15 words, no topic, audience or critical vocabulary
NEUTRAL_SENTENCE = "Workers walk slowly to the yard gate and back every single morning before shift starts. "
TOPIC_TEXT = "Safety first. Report every hazard. The machine and the tool need care."


class TestEmptyText:
    """analyze("") must be safe and fully populated."""

    @pytest.fixture
    def analysis(self):
        return analyze("")

    def test_counts_are_zero(self, analysis):
        assert analysis.word_count == 0
        assert analysis.sentence_count == 0
        assert analysis.avg_words_per_sentence == 0

    def test_defaults(self, analysis):
        assert analysis.complexity == Complexity.BASIC
        assert analysis.estimated_difficulty == Difficulty.EASY
        assert analysis.key_topics == []
        assert analysis.suggested_question_count == 3
        assert analysis.reading_level == 6

    def test_lists_fall_back_to_one_entry(self, analysis):
        assert analysis.target_audience == ["General Staff"]
        assert analysis.critical_points == ["No critical points identified"]
        assert analysis.prerequisite_knowledge == ["No specific prerequisites"]
        assert len(analysis.learning_objectives) == 3

    def test_duration_is_question_time_plus_review(self, analysis):
        # 0 reading + 3 questions * 2 min = 6, review ceil(1.8) = 2
        assert analysis.estimated_duration == 8

    def test_none_is_treated_as_empty(self):
        assert analyze(None).word_count == 0


class TestReadability:
    def test_word_and_sentence_counts(self):
        analysis = analyze("One two three. Four five! Six?")
        assert analysis.word_count == 6
        assert analysis.sentence_count == 3
        assert analysis.avg_words_per_sentence == 2

    @pytest.mark.parametrize(
        "avg,expected",
        [(5, Complexity.BASIC), (12, Complexity.BASIC), (12.5, Complexity.INTERMEDIATE),
         (20, Complexity.INTERMEDIATE), (21, Complexity.ADVANCED)],
    )
    def test_complexity_tiers(self, avg, expected):
        assert classify_complexity(avg) == expected

    def test_reading_level_is_clamped(self):
        assert estimate_reading_level("", 0, 0) == 6
        assert estimate_reading_level("a " * 60, 60, 60) == 18


class TestTopicDetection:
    def test_topics_need_two_matches(self):
        assert analyze("One safety rule applies here.").key_topics == []

    def test_topics_sorted_by_importance(self):
        analysis = analyze(TOPIC_TEXT)
        assert analysis.key_topics == ["Safety & Risk Management", "Equipment & Machinery"]

        safety = analysis.content_sections[0]
        assert safety.importance == pytest.approx(95)
        assert safety.matches == 2
        assert safety.density == pytest.approx(2 / 12 * 1000)
        assert safety.question_potential == 100
        assert safety.risk_level == RiskLevel.HIGH

    def test_learning_objectives_use_detected_topics(self):
        assert analyze(TOPIC_TEXT).learning_objectives == [
            "Understand key Safety & Risk Management principles",
            "Apply Equipment & Machinery procedures correctly",
            "Demonstrate competency in standard practices",
        ]

    def test_high_risk_topic_raises_question_count(self):
        analysis = analyze(TOPIC_TEXT)
        assert analysis.has_high_risk_topics
        # base 3, basic complexity, high risk: round(3 * 1.3) = 4
        assert analysis.suggested_question_count == 4


class TestQuestionCountAndDuration:
    def test_intermediate_document(self):
        analysis = analyze(NEUTRAL_SENTENCE * 100)
        assert analysis.word_count == 1500
        assert analysis.complexity == Complexity.INTERMEDIATE
        # floor(1500 / 150) = 10, * 1.2
        assert analysis.suggested_question_count == 12
        assert analysis.estimated_difficulty == Difficulty.MEDIUM
        # reading 8 + questions 24 = 32, review ceil(9.6) = 10
        assert analysis.estimated_duration == 42

    def test_rounds_half_up(self):
        # 5 * 1.0 * 1.3 = 6.5
        assert suggest_question_count(750, Complexity.BASIC, True) == 7

    def test_base_is_clamped(self):
        assert suggest_question_count(10, Complexity.BASIC, False) == 3
        assert suggest_question_count(100_000, Complexity.BASIC, False) == 25
        assert suggest_question_count(100_000, Complexity.ADVANCED, True) == 46

    def test_duration_formula(self):
        # ceil(450/200)=3 + 5*2=10 -> 13, review ceil(3.9)=4
        assert estimate_duration(450, 5) == 17


class TestDifficulty:
    def test_heavy_safety_vocabulary_is_hard(self):
        """10 x "safety" and 10 x "hazard" in 400 words of basic text."""
        text = "Mind the safety hazard here. " * 10 + "Workers walk slowly to the yard gate. " * 50
        analysis = analyze(text)
        assert analysis.word_count == 400
        assert analysis.complexity == Complexity.BASIC
        assert analysis.safety_keyword_count == 20
        assert analysis.estimated_difficulty == Difficulty.HARD

    def test_technical_density_makes_medium(self):
        analysis = analyze("ANSI certification requirement mechanical.")
        assert analysis.technical_density == 1.0
        assert analysis.estimated_difficulty == Difficulty.MEDIUM

    def test_advanced_and_technical_is_hard(self):
        analysis = analyze("ANSI " * 21)
        assert analysis.complexity == Complexity.ADVANCED
        assert analysis.estimated_difficulty == Difficulty.HARD


class TestAudienceSignals:
    def test_target_audience(self):
        assert analyze("New hires meet the supervisor.").target_audience == ["New Employees", "Supervisors"]

    def test_critical_points_need_three_matches(self):
        analysis = analyze("You must stop. It is required. This is mandatory.")
        assert analysis.critical_points == ["High frequency of must terms detected"]

    def test_prerequisites(self):
        assert analyze("Basic equipment checks.").prerequisite_knowledge == [
            "Basic operational knowledge",
            "Equipment familiarization",
        ]

    def test_analysis_is_deterministic(self):
        assert analyze(TOPIC_TEXT) == analyze(TOPIC_TEXT)


class TestSummarize:
    def test_empty_document_summary(self):
        text = summarize("", "empty.txt")
        assert text.startswith("Document Analysis: empty.txt")
        assert "Document contains 0 words (0 minute read)." in text
        assert "- General operational procedures" in text
        assert "- Difficulty: Basic level" in text

    def test_summary_lists_topics(self):
        text = summarize(TOPIC_TEXT, "dock.txt")
        assert "- Safety & Risk Management" in text
        assert "- Questions: 4" in text
