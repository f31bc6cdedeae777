"""
Flow Validator thresholds and score penalties.

The score starts at SCORE_MAX and loses a fixed penalty per reported issue.
Constants are stable so the same flow always scores the same.
"""

# ============================================================================
# Score
# ============================================================================
SCORE_MAX = 100
SCORE_MIN = 0

PENALTY_ERROR = 20  # Blocks publishing under a strict caller policy
PENALTY_WARNING = 5  # Likely a learner-facing problem
PENALTY_SUGGESTION = 2  # Pedagogical improvement

# ============================================================================
# Question difficulty tiers (by points)
# ============================================================================
EASY_MAX_POINTS = 5  # points <= 5
MEDIUM_MAX_POINTS = 10  # points <= 10, above is hard

# ============================================================================
# Estimated minutes per block
# ============================================================================
MINUTES_INFORMATION = 1
MINUTES_GOTO = 2
MINUTES_EASY_QUESTION = 2
MINUTES_MEDIUM_QUESTION = 3
MINUTES_HARD_QUESTION = 5

DURATION_MIN_MINUTES = 5  # Warn if shorter
DURATION_MAX_MINUTES = 45  # Warn if longer

# ============================================================================
# Structure rules
# ============================================================================
MIN_STEPS = 3  # Suggest if fewer
GOTO_EXPECTED_ABOVE_STEPS = 15  # Suggest a goto block in longer flows
DOMINANT_TIER_RATIO = 0.8  # Suggest if one tier covers more than 80% of questions
HARD_RATIO_MAX = 0.5  # Warn if more than half the questions are hard
MIN_QUESTIONS_FOR_MIX_RULES = 5  # Hard-ratio and question-type rules need this many

# ============================================================================
# Learning objectives
# ============================================================================
OBJECTIVE_COVERAGE_START = 20
OBJECTIVE_COVERAGE_STEP = 20
GENERAL_COVERAGE_START = 15
GENERAL_COVERAGE_STEP = 15
OBJECTIVE_COVERAGE_MAX = 100
OBJECTIVE_COVERAGE_LOW = 50  # Suggest more questions below this
OBJECTIVE_COVERAGE_GAP = 60  # Optimization report lists topics below this

# ============================================================================
# Optimization suggestions
# ============================================================================
PROGRESSION_MIN_QUESTIONS = 4
INFO_TO_QUESTION_RATIO_MIN = 0.3
