"""
Flow editing operations.

Every operation takes a flow and returns a new list; the input list and its
blocks are never mutated. After any operation ``order`` equals each block's
array position (0..n-1). Block ids are never renumbered.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Any

from loguru import logger

from src.core.errors import InvalidBlockType, InvalidStepConfig

from .models import (
    BLOCK_CLASSES,
    BlockConfig,
    BlockType,
    GotoBlockConfig,
    InformationBlockConfig,
    QuestionBlockConfig,
    QuestionType,
    StepBlock,
)


def _block_type(block_type: BlockType | str) -> BlockType:
    try:
        return BlockType(block_type)
    except ValueError as e:
        raise InvalidBlockType(block_type) from e


def default_config(block_type: BlockType | str) -> BlockConfig:
    """Return the empty config a freshly added block starts with."""
    kind = _block_type(block_type)
    if kind == BlockType.INFORMATION:
        return InformationBlockConfig(content="")
    if kind == BlockType.GOTO:
        return GotoBlockConfig(instructions="")
    return QuestionBlockConfig(
        question_text="",
        question_type=QuestionType.TEXT_INPUT,
        points=1,
        mandatory=True,
    )


def new_block_id() -> str:
    return f"block_{uuid.uuid4().hex[:12]}"


def create_block(
    block_type: BlockType | str,
    order: int,
    block_id: str | None = None,
) -> StepBlock:
    """Create a block of the given type with its default config."""
    kind = _block_type(block_type)
    return BLOCK_CLASSES[kind](
        id=block_id or new_block_id(),
        order=order,
        config=default_config(kind),
    )


def renumber(steps: list[StepBlock]) -> list[StepBlock]:
    """Return a new flow whose ``order`` values match array positions."""
    return [step if step.order == index else replace(step, order=index) for index, step in enumerate(steps)]


def is_contiguous(steps: list[StepBlock]) -> bool:
    """True if every block's order matches its array position."""
    return all(step.order == index for index, step in enumerate(steps))


def insert_block(
    steps: list[StepBlock],
    block: StepBlock,
    index: int | None = None,
) -> list[StepBlock]:
    """Insert a block (default: append) and renumber everything after it."""
    if any(step.id == block.id for step in steps):
        raise InvalidStepConfig(f"Block id '{block.id}' already exists in this flow")

    position = len(steps) if index is None else max(0, min(index, len(steps)))
    updated = list(steps)
    updated.insert(position, block)
    return renumber(updated)


def add_block(steps: list[StepBlock], block_type: BlockType | str) -> list[StepBlock]:
    """Append a new default block of the given type."""
    return insert_block(steps, create_block(block_type, len(steps)))


def delete_block(steps: list[StepBlock], block_id: str) -> list[StepBlock]:
    """Remove a block by id; remaining ids are kept, orders are compacted."""
    remaining = [step for step in steps if step.id != block_id]
    if len(remaining) == len(steps):
        logger.debug(f"delete_block: no block with id {block_id}")
    return renumber(remaining)


def reorder_blocks(steps: list[StepBlock], from_index: int, to_index: int) -> list[StepBlock]:
    """Move the block at ``from_index`` to ``to_index`` (remove, then insert)."""
    if not 0 <= from_index < len(steps):
        raise IndexError(f"from_index {from_index} out of range for {len(steps)} blocks")
    if not 0 <= to_index < len(steps):
        raise IndexError(f"to_index {to_index} out of range for {len(steps)} blocks")

    updated = list(steps)
    moved = updated.pop(from_index)
    updated.insert(to_index, moved)
    return renumber(updated)


def update_block_config(
    steps: list[StepBlock],
    block_id: str,
    config: BlockConfig | dict[str, Any],
) -> list[StepBlock]:
    """Replace one block's config; the new config must match the block's type."""
    updated: list[StepBlock] = []
    found = False
    for step in steps:
        if step.id != block_id:
            updated.append(step)
            continue

        found = True
        new_config = step.config_class.from_dict(config) if isinstance(config, dict) else config
        if not isinstance(new_config, step.config_class):
            raise InvalidStepConfig(
                f"Config {type(new_config).__name__} does not match block type '{step.type.value}'"
            )
        updated.append(replace(step, config=new_config))

    if not found:
        raise KeyError(block_id)
    return renumber(updated)


def parse_steps(value: Any) -> list[StepBlock]:
    """
    Tolerantly convert a stored JSON value into blocks.

    Anything that is not a list of block-shaped objects becomes an empty flow,
    so a corrupted ``steps_json`` column never breaks loading a version.
    """
    if not isinstance(value, list):
        return []

    for item in value:
        if not (
            isinstance(item, dict)
            and isinstance(item.get("id"), str)
            and isinstance(item.get("type"), str)
            and isinstance(item.get("order"), int)
            and item.get("config") is not None
        ):
            return []

    try:
        return [StepBlock.from_dict(item) for item in value]
    except (InvalidBlockType, InvalidStepConfig) as e:
        logger.warning(f"Discarding malformed stored flow: {e}")
        return []
