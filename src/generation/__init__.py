"""Training flow generation: text-generation call with a deterministic fallback.

Pipeline:
1. Optional metadata stage (title/description)
2. Flow stage (JSON contract {"blocks": [...]})
3. Fallback generator on any failure or when no API key is configured

Usage:
    from src.generation import FlowGenerationPipeline, GenerationConfig

    result = await FlowGenerationPipeline().generate(
        GenerationConfig(document_text=text, selected_topics=["Lockout/Tagout"], step_count=8)
    )
"""
from src.generation.client import TextGenerationClient
from src.generation.config import AISettings, GenerationConfig, GenerationDifficulty, Tone
from src.generation.fallback import OPTION_TABLES, block_counts, fallback_metadata, generate_fallback_flow
from src.generation.parser import (
    GeneratedMetadata,
    extract_json_object,
    parse_flow_response,
    parse_metadata_response,
)
from src.generation.pipeline import (
    DocumentSummary,
    FlowGenerationPipeline,
    GenerationResult,
    generate_draft,
)

__all__ = [
    "AISettings",
    "GenerationConfig",
    "GenerationDifficulty",
    "Tone",
    "TextGenerationClient",
    "FlowGenerationPipeline",
    "GenerationResult",
    "DocumentSummary",
    "GeneratedMetadata",
    "generate_draft",
    "generate_fallback_flow",
    "fallback_metadata",
    "block_counts",
    "OPTION_TABLES",
    "extract_json_object",
    "parse_flow_response",
    "parse_metadata_response",
]
