"""
Flow Model - step blocks and the editing operations that keep them ordered.

Usage:
    from src.flows import add_block, reorder_blocks, validate_block

    steps = add_block([], "information")
    steps = add_block(steps, "question")
    steps = reorder_blocks(steps, 1, 0)
"""

from .editing import (
    add_block,
    create_block,
    default_config,
    delete_block,
    insert_block,
    is_contiguous,
    parse_steps,
    renumber,
    reorder_blocks,
    update_block_config,
)
from .models import (
    BlockType,
    GotoBlock,
    GotoBlockConfig,
    InformationBlock,
    InformationBlockConfig,
    QuestionBlock,
    QuestionBlockConfig,
    QuestionType,
    StepBlock,
    flow_from_json,
    flow_to_json,
    validate_block,
)

__all__ = [
    "BlockType",
    "QuestionType",
    "StepBlock",
    "InformationBlock",
    "GotoBlock",
    "QuestionBlock",
    "InformationBlockConfig",
    "GotoBlockConfig",
    "QuestionBlockConfig",
    "validate_block",
    "flow_to_json",
    "flow_from_json",
    "add_block",
    "create_block",
    "default_config",
    "delete_block",
    "insert_block",
    "is_contiguous",
    "parse_steps",
    "renumber",
    "reorder_blocks",
    "update_block_config",
]
