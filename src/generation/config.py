"""Generation request and API settings."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from config import Settings, get_settings


class GenerationDifficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Tone(str, Enum):
    FORMAL = "formal"
    CONVERSATIONAL = "conversational"
    TECHNICAL = "technical"


DEFAULT_TOPIC = "General Training"


@dataclass
class GenerationConfig:
    """
    What to generate from a document.

    content_mix is the target percentage (0-100) of information blocks;
    the rest are question blocks.
    """

    document_text: str
    file_name: str = "document"
    selected_topics: list[str] = field(default_factory=list)
    step_count: int = 10
    content_mix: int = 60
    difficulty: GenerationDifficulty = GenerationDifficulty.INTERMEDIATE
    tone: Tone = Tone.FORMAL
    custom_instructions: str = ""
    include_examples: bool = True
    generate_title: bool = False
    generate_description: bool = False
    title: str = ""
    description: str = ""
    estimated_duration: int = 30  # minutes

    def __post_init__(self):
        self.difficulty = GenerationDifficulty(self.difficulty)
        self.tone = Tone(self.tone)
        if self.step_count < 0:
            raise ValueError("step_count cannot be negative")
        if not 0 <= self.content_mix <= 100:
            raise ValueError("content_mix must be between 0 and 100")

    @property
    def question_mix(self) -> int:
        return 100 - self.content_mix

    @property
    def wants_metadata(self) -> bool:
        return self.generate_title or self.generate_description

    def topic_at(self, index: int) -> str:
        """Topic for block ``index``, cycling through the selected topics."""
        if not self.selected_topics:
            return DEFAULT_TOPIC
        return self.selected_topics[index % len(self.selected_topics)] or DEFAULT_TOPIC


@dataclass
class AISettings:
    """Connection settings for the text-generation call."""

    api_key: str | None = None
    model: str = "gpt-4o-mini"
    temperature: float = 0.7
    max_tokens: int = 6000
    api_url: str = "https://api.openai.com/v1"
    timeout_seconds: float = 60.0

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> AISettings:
        settings = settings or get_settings()
        return cls(
            api_key=settings.ai_api_key,
            model=settings.ai_model,
            temperature=settings.ai_temperature,
            max_tokens=settings.ai_max_tokens,
            api_url=settings.ai_api_url,
            timeout_seconds=settings.ai_timeout_seconds,
        )
