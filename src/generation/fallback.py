"""
Deterministic fallback generator.

Produces a usable flow without any network call whenever the text-generation
stage is unavailable or fails. No randomness: identical configs always give
identical output.

Block layout for step_count N and content_mix M%:

    info_count = ceil(N * M / 100), question_count = N - info_count

Information and question blocks alternate starting with information (even
positions). Once one kind is used up the remaining positions go to the
other kind, so the counts are always exact:

    N=10, M=60  ->  I Q I Q I Q I Q I I
"""
from __future__ import annotations

from dataclasses import dataclass

from src.flows.models import (
    InformationBlock,
    InformationBlockConfig,
    QuestionBlock,
    QuestionBlockConfig,
    QuestionType,
    StepBlock,
)

from .config import GenerationConfig, GenerationDifficulty
from .parser import GeneratedMetadata


@dataclass(frozen=True)
class OptionTable:
    """Canned multiple-choice question for one difficulty level."""

    question_template: str
    options: tuple[str, ...]
    correct_option: int
    hint_template: str
    points: int


OPTION_TABLES: dict[GenerationDifficulty, OptionTable] = {
    GenerationDifficulty.BEGINNER: OptionTable(
        question_template="What is the most important rule to remember about {topic}?",
        options=(
            "Always follow proper procedures",
            "Speed is more important than safety",
            "Documentation is optional",
            "Training is not necessary",
        ),
        correct_option=0,
        hint_template="Following proper procedures is essential for {topic} to ensure safety and quality.",
        points=5,
    ),
    GenerationDifficulty.INTERMEDIATE: OptionTable(
        question_template="Which practice best supports {topic} during daily work?",
        options=(
            "Relying on memory instead of checklists",
            "Verifying each step against the documented standard",
            "Skipping inspections when the schedule is tight",
            "Leaving issues for the next shift to report",
        ),
        correct_option=1,
        hint_template="Checking work against the documented standard keeps {topic} consistent and traceable.",
        points=10,
    ),
    GenerationDifficulty.ADVANCED: OptionTable(
        question_template="An unexpected condition arises during {topic}. What is the correct response?",
        options=(
            "Continue and note it at the end of the shift",
            "Apply a workaround that keeps production running",
            "Stop, make the situation safe and escalate per procedure",
            "Wait to see whether the condition clears by itself",
        ),
        correct_option=2,
        hint_template="Abnormal conditions in {topic} require stopping safely and escalating before continuing.",
        points=15,
    ),
}

INFORMATION_TEMPLATE = (
    "This section covers important aspects of {topic} based on the training content. "
    "Key points include proper procedures, safety considerations, and best practices "
    "that should be followed in this area."
)


def block_counts(step_count: int, content_mix: int) -> tuple[int, int]:
    """(information, question) block counts for a step count and mix."""
    info_count = -(-step_count * content_mix // 100)  # ceil without float error
    return info_count, step_count - info_count


def generate_fallback_flow(config: GenerationConfig) -> list[StepBlock]:
    """Build a flow from templates; ids are "step-1".."step-N", orders 0..N-1."""
    info_count, question_count = block_counts(config.step_count, config.content_mix)
    table = OPTION_TABLES[config.difficulty]

    blocks: list[StepBlock] = []
    infos = questions = 0

    for i in range(config.step_count):
        topic = config.topic_at(i).lower()
        is_information = infos < info_count and (i % 2 == 0 or questions == question_count)

        if is_information:
            infos += 1
            blocks.append(
                InformationBlock(
                    id=f"step-{i + 1}",
                    order=i,
                    config=InformationBlockConfig(content=INFORMATION_TEMPLATE.format(topic=topic)),
                )
            )
        else:
            questions += 1
            blocks.append(
                QuestionBlock(
                    id=f"step-{i + 1}",
                    order=i,
                    config=QuestionBlockConfig(
                        question_text=table.question_template.format(topic=topic),
                        question_type=QuestionType.MULTIPLE_CHOICE,
                        options=list(table.options),
                        correct_option=table.correct_option,
                        hint=table.hint_template.format(topic=topic),
                        points=table.points,
                        mandatory=True,
                    ),
                )
            )

    return blocks


def fallback_metadata(
    difficulty: GenerationDifficulty | str,
    topics: list[str],
) -> GeneratedMetadata:
    """Templated title and description from difficulty and topics."""
    level = GenerationDifficulty(difficulty).value
    named = [topic for topic in topics if topic]

    if named:
        subject = " & ".join(named[:2])
        covered = ", ".join(named)
    else:
        subject = "Workplace"
        covered = "general operational procedures"

    return GeneratedMetadata(
        title=f"{level.capitalize()} {subject} Training",
        description=(
            f"{level.capitalize()}-level training covering {covered}. Learners review the key "
            "concepts and check their understanding with practical questions."
        ),
    )
