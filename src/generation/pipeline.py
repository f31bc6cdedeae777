"""
Training flow generation pipeline.

Stages (sequential, one attempt each):
1. Metadata (only if a title or description is requested)
   -> GenerationError falls back to a templated title/description
2. Flow
   -> no API key: fallback flow, no network call
   -> GenerationError: fallback flow, error message kept on the result

The pipeline always returns blocks to review (for step_count >= 1).
Cancellation is not a failure: asyncio.CancelledError propagates unchanged,
the fallback generator is not invoked and nothing is persisted.

Usage:
    pipeline = FlowGenerationPipeline()
    result = await pipeline.generate(GenerationConfig(document_text=text, step_count=8))
    if result.error:
        print(f"Used fallback: {result.error}")
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field

import httpx
from loguru import logger

from config import get_settings
from src.analysis.content_analyzer import summarize
from src.core.errors import GenerationError
from src.flows.models import StepBlock
from src.versions.models import TrainingDefinitionVersion
from src.versions.store import VersionStore

from .client import TextGenerationClient
from .config import AISettings, GenerationConfig
from .fallback import fallback_metadata, generate_fallback_flow
from .parser import GeneratedMetadata, parse_flow_response, parse_metadata_response
from .prompts import (
    ANALYSIS_SYSTEM_PROMPT,
    METADATA_SYSTEM_PROMPT,
    build_analysis_user_prompt,
    build_flow_system_prompt,
    build_flow_user_prompt,
    build_metadata_user_prompt,
    messages,
)

NO_API_KEY = "No API key configured"


@dataclass
class GenerationResult:
    """Generated flow plus what went wrong along the way, if anything."""

    blocks: list[StepBlock] = field(default_factory=list)
    title: str = ""
    description: str = ""
    error: str | None = None  # flow stage
    metadata_error: str | None = None
    used_fallback: bool = False


@dataclass
class DocumentSummary:
    text: str
    used_fallback: bool = False
    error: str | None = None


class FlowGenerationPipeline:
    """Orchestrates prompt building, the generation call, parsing and fallback."""

    def __init__(
        self,
        ai_settings: AISettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        generation_prompt: str | None = None,
        analysis_prompt: str | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            ai_settings: API settings (defaults from application settings)
            transport: Optional httpx transport for the generation client
            generation_prompt: Preamble for flow prompts (defaults from settings)
            analysis_prompt: Instructions for document analysis (defaults from settings)
        """
        if ai_settings is None or generation_prompt is None or analysis_prompt is None:
            settings = get_settings()
            ai_settings = ai_settings or AISettings.from_settings(settings)
            generation_prompt = settings.generation_prompt if generation_prompt is None else generation_prompt
            analysis_prompt = settings.analysis_prompt if analysis_prompt is None else analysis_prompt

        self.ai_settings = ai_settings
        self.transport = transport
        self.generation_prompt = generation_prompt
        self.analysis_prompt = analysis_prompt

    def _client(self) -> TextGenerationClient:
        return TextGenerationClient(self.ai_settings, transport=self.transport)

    async def _complete(self, prompt: list[dict[str, str]]) -> str:
        async with self._client() as client:
            return await client.complete(prompt)

    # ========================================
    # Stages
    # ========================================

    async def _metadata_stage(self, config: GenerationConfig) -> tuple[GeneratedMetadata, str | None]:
        if not self.ai_settings.has_api_key:
            return fallback_metadata(config.difficulty, config.selected_topics), NO_API_KEY

        try:
            text = await self._complete(messages(METADATA_SYSTEM_PROMPT, build_metadata_user_prompt(config)))
            return parse_metadata_response(text), None
        except GenerationError as e:
            logger.warning(f"Metadata generation failed, using templated metadata: {e}")
            return fallback_metadata(config.difficulty, config.selected_topics), str(e)

    async def _flow_stage(self, config: GenerationConfig) -> tuple[list[StepBlock], str | None]:
        if not self.ai_settings.has_api_key:
            logger.info("No API key configured, using fallback flow")
            return generate_fallback_flow(config), NO_API_KEY

        prompt = messages(
            build_flow_system_prompt(config),
            build_flow_user_prompt(config, preamble=self.generation_prompt),
        )
        try:
            text = await self._complete(prompt)
            return parse_flow_response(text), None
        except GenerationError as e:
            logger.warning(f"Flow generation failed, using fallback flow: {e}")
            return generate_fallback_flow(config), str(e)

    # ========================================
    # Public API
    # ========================================

    async def generate(self, config: GenerationConfig) -> GenerationResult:
        """
        Generate a flow (and optionally a title/description).

        Returns:
            GenerationResult; ``error`` is set whenever the fallback flow was used
        """
        logger.info(
            f"Generating {config.step_count}-step {config.difficulty.value} flow "
            f"from {config.file_name!r} ({config.content_mix}% information)"
        )
        result = GenerationResult(title=config.title, description=config.description)

        if config.wants_metadata:
            metadata, result.metadata_error = await self._metadata_stage(config)
            if config.generate_title:
                result.title = metadata.title
            if config.generate_description:
                result.description = metadata.description

        result.blocks, result.error = await self._flow_stage(config)
        result.used_fallback = result.error is not None

        logger.info(
            f"Generated {len(result.blocks)} blocks"
            + (f" (fallback: {result.error})" if result.used_fallback else "")
        )
        return result

    async def analyze_document(self, document_text: str, file_name: str) -> DocumentSummary:
        """Free-text document analysis, falling back to the deterministic summary."""
        if not self.ai_settings.has_api_key:
            return DocumentSummary(text=summarize(document_text, file_name), used_fallback=True, error=NO_API_KEY)

        prompt = messages(
            ANALYSIS_SYSTEM_PROMPT,
            build_analysis_user_prompt(document_text, file_name, self.analysis_prompt),
        )
        try:
            return DocumentSummary(text=await self._complete(prompt))
        except GenerationError as e:
            logger.warning(f"Document analysis failed, using local summary: {e}")
            return DocumentSummary(text=summarize(document_text, file_name), used_fallback=True, error=str(e))


async def generate_draft(
    pipeline: FlowGenerationPipeline,
    store: VersionStore,
    definition_id: uuid.UUID | str,
    config: GenerationConfig,
) -> tuple[GenerationResult, TrainingDefinitionVersion]:
    """
    Generate a flow and store it as the definition's draft.

    The existing draft is overwritten when there is one, otherwise a new
    placeholder draft is added. Nothing is written until generation has
    returned, so a cancelled generation leaves the store untouched.
    """
    result = await pipeline.generate(config)

    title = result.title if config.generate_title else None
    description = result.description if config.generate_description else None

    draft = store.latest_draft(definition_id)
    if draft is not None:
        saved = store.save_draft(draft.id, result.blocks, title=title, description=description)
    else:
        saved = store.create_draft(
            definition_id,
            result.blocks,
            version_notes=f"Generated from {config.file_name}",
            title=title,
            description=description,
        )

    return result, saved
