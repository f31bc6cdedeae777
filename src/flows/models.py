"""
Training flow data model.

A flow is an ordered list of step blocks. Each block is one variant of a
tagged union keyed by ``type``:

- information: teaching content (``content``, optional ``image_url``)
- goto: navigation instructions to the next physical checkpoint
- question: an assessment item (text, numerical, multiple choice or voice)

The JSON shape produced by ``to_dict`` is the persisted ``steps_json`` shape
and the shape the text-generation contract asks for:

    {"id": "step-1", "type": "question", "order": 0,
     "config": {"question_text": "...", "question_type": "multiple_choice",
                "options": ["A", "B"], "correct_option": 0,
                "points": 10, "mandatory": true}}

Construction only rejects values of the wrong *shape*. Incomplete content
(an empty question, a multiple-choice question without a correct option) is
accepted so drafts can be saved, and is reported by ``validate_block``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from src.core.errors import InvalidBlockType, InvalidStepConfig


class BlockType(str, Enum):
    """Step block variants."""

    INFORMATION = "information"
    GOTO = "goto"
    QUESTION = "question"


class QuestionType(str, Enum):
    """Answer modes for question blocks."""

    TEXT_INPUT = "text_input"
    NUMERICAL_INPUT = "numerical_input"
    MULTIPLE_CHOICE = "multiple_choice"
    VOICE_INPUT = "voice_input"


# ========================================
# Field coercion helpers
# ========================================


def _text(data: dict[str, Any], key: str, default: str | None = "") -> str | None:
    value = data.get(key, default)
    if value is None:
        return default
    if not isinstance(value, str):
        raise InvalidStepConfig(f"'{key}' must be text, got {type(value).__name__}")
    return value


def _integer(data: dict[str, Any], key: str, default: int | None) -> int | None:
    value = data.get(key, default)
    if value is None:
        return default
    # bool is an int subclass; JSON generators sometimes emit 10.0
    if isinstance(value, bool):
        raise InvalidStepConfig(f"'{key}' must be an integer, got bool")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int):
        raise InvalidStepConfig(f"'{key}' must be an integer, got {type(value).__name__}")
    return value


def _options(data: dict[str, Any]) -> list[str] | None:
    value = data.get("options")
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(opt, str) for opt in value):
        raise InvalidStepConfig("'options' must be a list of text")
    return list(value)


def _drop_none(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


# ========================================
# Block configs
# ========================================


@dataclass
class InformationBlockConfig:
    """Teaching content shown to the learner."""

    content: str = ""
    image_url: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InformationBlockConfig:
        return cls(content=_text(data, "content"), image_url=_text(data, "image_url", None))

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({"content": self.content, "image_url": self.image_url})


@dataclass
class GotoBlockConfig:
    """Instructions for moving to the next checkpoint."""

    instructions: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GotoBlockConfig:
        return cls(instructions=_text(data, "instructions"))

    def to_dict(self) -> dict[str, Any]:
        return {"instructions": self.instructions}


@dataclass
class QuestionBlockConfig:
    """Assessment item configuration."""

    question_text: str = ""
    question_type: QuestionType = QuestionType.TEXT_INPUT
    options: list[str] | None = None
    correct_option: int | None = None
    ideal_answer: str | None = None
    hint: str | None = None
    points: int = 1
    mandatory: bool = True
    image_url: str | None = None

    @property
    def is_multiple_choice(self) -> bool:
        return self.question_type == QuestionType.MULTIPLE_CHOICE

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QuestionBlockConfig:
        raw_type = data.get("question_type", QuestionType.TEXT_INPUT.value)
        try:
            question_type = QuestionType(raw_type)
        except ValueError as e:
            raise InvalidStepConfig(f"Unknown question type: {raw_type!r}") from e

        mandatory = data.get("mandatory", True)
        if not isinstance(mandatory, bool):
            raise InvalidStepConfig("'mandatory' must be a boolean")

        return cls(
            question_text=_text(data, "question_text"),
            question_type=question_type,
            options=_options(data),
            correct_option=_integer(data, "correct_option", None),
            ideal_answer=_text(data, "ideal_answer", None),
            hint=_text(data, "hint", None),
            points=_integer(data, "points", 1),
            mandatory=mandatory,
            image_url=_text(data, "image_url", None),
        )

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "question_text": self.question_text,
                "question_type": self.question_type.value,
                "options": list(self.options) if self.options is not None else None,
                "correct_option": self.correct_option,
                "ideal_answer": self.ideal_answer,
                "hint": self.hint,
                "points": self.points,
                "mandatory": self.mandatory,
                "image_url": self.image_url,
            }
        )


BlockConfig = InformationBlockConfig | GotoBlockConfig | QuestionBlockConfig


# ========================================
# Step blocks (tagged union)
# ========================================


@dataclass
class StepBlock:
    """
    Base of the step block union.

    ``id`` is unique within a version and never changes once assigned;
    ``order`` is the block's zero-based position in its flow.
    """

    id: str
    order: int

    type: ClassVar[BlockType]
    config_class: ClassVar[type]

    @staticmethod
    def from_dict(data: dict[str, Any]) -> StepBlock:
        """Build the right block variant from its JSON shape."""
        if not isinstance(data, dict):
            raise InvalidStepConfig(f"Step block must be an object, got {type(data).__name__}")

        raw_type = data.get("type")
        try:
            block_type = BlockType(raw_type)
        except ValueError as e:
            raise InvalidBlockType(raw_type) from e

        block_id = data.get("id")
        if isinstance(block_id, int) and not isinstance(block_id, bool):
            block_id = str(block_id)
        if not isinstance(block_id, str) or not block_id:
            raise InvalidStepConfig("Step block 'id' must be non-empty text")

        config = data.get("config") or {}
        if not isinstance(config, dict):
            raise InvalidStepConfig("Step block 'config' must be an object")

        block_class = BLOCK_CLASSES[block_type]
        return block_class(
            id=block_id,
            order=_integer(data, "order", 0),
            config=block_class.config_class.from_dict(config),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "order": self.order,
            "config": self.config.to_dict(),
        }


@dataclass
class InformationBlock(StepBlock):
    config: InformationBlockConfig = field(default_factory=InformationBlockConfig)

    type: ClassVar[BlockType] = BlockType.INFORMATION
    config_class: ClassVar[type] = InformationBlockConfig


@dataclass
class GotoBlock(StepBlock):
    config: GotoBlockConfig = field(default_factory=GotoBlockConfig)

    type: ClassVar[BlockType] = BlockType.GOTO
    config_class: ClassVar[type] = GotoBlockConfig


@dataclass
class QuestionBlock(StepBlock):
    config: QuestionBlockConfig = field(default_factory=QuestionBlockConfig)

    type: ClassVar[BlockType] = BlockType.QUESTION
    config_class: ClassVar[type] = QuestionBlockConfig


BLOCK_CLASSES: dict[BlockType, type[StepBlock]] = {
    BlockType.INFORMATION: InformationBlock,
    BlockType.GOTO: GotoBlock,
    BlockType.QUESTION: QuestionBlock,
}


# ========================================
# Structural validation
# ========================================


def validate_block(block: StepBlock) -> list[str]:
    """
    Return the structural problems of a block (empty list when valid).

    These are the problems that make a block unusable at training time;
    they are reported, not raised, so incomplete drafts can be stored.
    """
    problems: list[str] = []

    if isinstance(block, InformationBlock):
        if not block.config.content.strip():
            problems.append("Information block has no content.")

    elif isinstance(block, GotoBlock):
        if not block.config.instructions.strip():
            problems.append("Goto block has no instructions.")

    elif isinstance(block, QuestionBlock):
        config = block.config
        if not config.question_text.strip():
            problems.append("Question is missing question text.")
        if config.points < 1:
            problems.append("Question points must be at least 1.")
        if config.is_multiple_choice:
            options = config.options or []
            if len(options) < 2:
                problems.append("Multiple choice questions need at least 2 options.")
            if config.correct_option is None:
                problems.append("Multiple choice question has no correct option.")
            elif not 0 <= config.correct_option < len(options):
                problems.append(
                    f"Correct option {config.correct_option} is out of range "
                    f"for {len(options)} options."
                )
    else:
        raise InvalidBlockType(getattr(block, "type", type(block).__name__))

    return problems


def flow_to_json(steps: list[StepBlock]) -> list[dict[str, Any]]:
    """Serialize a flow to its persisted JSON shape."""
    return [step.to_dict() for step in steps]


def flow_from_json(value: list[dict[str, Any]]) -> list[StepBlock]:
    """Strictly deserialize a flow; raises on the first malformed block."""
    if not isinstance(value, list):
        raise InvalidStepConfig("Flow must be a list of step blocks")
    return [StepBlock.from_dict(item) for item in value]
