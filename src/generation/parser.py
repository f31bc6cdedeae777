"""
Lenient JSON-from-prose parsing of generation responses.

Generators often wrap the JSON object in explanations or code fences, so
only the substring from the first "{" to the last "}" is parsed. Anything
that still fails to parse, or parses into the wrong schema, is a
GenerationError.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from loguru import logger

from src.core.errors import GenerationError, InvalidBlockType, InvalidStepConfig
from src.flows.editing import renumber
from src.flows.models import StepBlock


@dataclass
class GeneratedMetadata:
    title: str
    description: str


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse the outermost {...} of a response."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise GenerationError("AI response did not contain a JSON object")

    try:
        value = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        raise GenerationError(f"AI response was not valid JSON: {e.msg}") from e

    if not isinstance(value, dict):
        raise GenerationError("AI response JSON was not an object")
    return value


def parse_flow_response(text: str) -> list[StepBlock]:
    """
    Parse a flow-stage response into blocks.

    Block ids are kept; ``order`` is renumbered to array positions because
    generators often count from 1.
    """
    data = extract_json_object(text)
    raw_blocks = data.get("blocks")
    if not isinstance(raw_blocks, list):
        raise GenerationError("Invalid response structure - missing blocks array")
    if not raw_blocks:
        raise GenerationError("Invalid response structure - blocks array is empty")

    blocks: list[StepBlock] = []
    for index, raw in enumerate(raw_blocks):
        try:
            blocks.append(StepBlock.from_dict(raw))
        except (InvalidBlockType, InvalidStepConfig) as e:
            raise GenerationError(f"Block {index + 1} is invalid: {e}") from e

    ids = [block.id for block in blocks]
    if len(set(ids)) != len(ids):
        raise GenerationError("Invalid response structure - duplicate block ids")

    logger.debug(f"Parsed {len(blocks)} blocks from generation response")
    return renumber(blocks)


def parse_metadata_response(text: str) -> GeneratedMetadata:
    """Parse a metadata-stage response into a title and description."""
    data = extract_json_object(text)
    title = data.get("title")
    description = data.get("description")
    if not isinstance(title, str) or not title.strip():
        raise GenerationError("Invalid metadata response - missing title")
    if not isinstance(description, str) or not description.strip():
        raise GenerationError("Invalid metadata response - missing description")
    return GeneratedMetadata(title=title.strip(), description=description.strip())
