"""
Prompts for training flow generation.

Two request kinds, each a (system, user) message pair:
- Flow: the system contract requires ONLY a JSON object {"blocks": [...]}
- Metadata: the system contract requires ONLY {"title": ..., "description": ...}

Document text is truncated to DOCUMENT_EXCERPT_CHARS before it is sent.
"""
from __future__ import annotations

from .config import GenerationConfig, GenerationDifficulty, Tone

DOCUMENT_EXCERPT_CHARS = 3000

DIFFICULTY_GUIDE = {
    GenerationDifficulty.BEGINNER: "Use simple language, basic concepts, provide extra explanations",
    GenerationDifficulty.INTERMEDIATE: "Use moderate complexity, assume some background knowledge",
    GenerationDifficulty.ADVANCED: "Use technical language, complex concepts, minimal hand-holding",
}

TONE_GUIDE = {
    Tone.FORMAL: "Professional, structured, academic tone",
    Tone.CONVERSATIONAL: "Friendly, approachable, casual tone",
    Tone.TECHNICAL: "Precise, detailed, industry-specific language",
}

# =============================================================================
# Flow stage
# =============================================================================

FLOW_FORMAT = """IMPORTANT: You must respond with ONLY valid JSON in this exact format:

{
  "blocks": [
    {
      "id": "step-1",
      "type": "information",
      "order": 0,
      "config": {
        "content": "Your information content here"
      }
    },
    {
      "id": "step-2",
      "type": "question",
      "order": 1,
      "config": {
        "question_text": "Your question here?",
        "question_type": "multiple_choice",
        "options": ["Option A", "Option B", "Option C", "Option D"],
        "correct_option": 0,
        "hint": "Explanation for the correct answer",
        "points": 10,
        "mandatory": true
      }
    }
  ]
}

Allowed block types: "information", "goto", "question".
Allowed question types: "multiple_choice", "text_input", "numerical_input", "voice_input".
"correct_option" is the zero-based index of the correct entry in "options"."""


def build_flow_system_prompt(config: GenerationConfig) -> str:
    examples = (
        "Include practical examples and real-world scenarios."
        if config.include_examples
        else "Focus on essential information without extensive examples."
    )
    return (
        f"You are an expert training developer creating {config.difficulty.value}-level "
        f"training content in a {config.tone.value} tone.\n\n"
        f"{DIFFICULTY_GUIDE[config.difficulty]}\n"
        f"{TONE_GUIDE[config.tone]}\n"
        f"{examples}\n\n"
        f"{FLOW_FORMAT}\n\n"
        "Content Mix Guidelines:\n"
        f"- Aim for approximately {config.content_mix}% information blocks "
        f"and {config.question_mix}% question blocks\n"
        "- Make questions practical and relevant to the content\n"
        "- Provide helpful hints that explain why answers are correct"
    )


def build_flow_user_prompt(config: GenerationConfig, preamble: str = "") -> str:
    topics = ", ".join(config.selected_topics) or "the document's main topics"
    parts = []
    if preamble:
        parts.append(preamble)
    if config.custom_instructions.strip():
        parts.append(f"Custom Instructions: {config.custom_instructions.strip()}")
    parts.append(
        f"Document: {config.file_name}\n"
        f"Selected Topics: {topics}\n"
        f"Required Steps: {config.step_count}\n"
        f"Difficulty Level: {config.difficulty.value}\n"
        f"Estimated Duration: {config.estimated_duration} minutes\n"
        f"Content Mix: {config.content_mix}% Information / {config.question_mix}% Questions"
    )
    parts.append(
        f"Content Summary (first {DOCUMENT_EXCERPT_CHARS} chars):\n"
        f"{config.document_text[:DOCUMENT_EXCERPT_CHARS]}"
    )
    parts.append(
        f"Please create exactly {config.step_count} training steps focusing on: {topics}.\n"
        f"Ensure the content matches the {config.difficulty.value} difficulty level "
        f"and uses a {config.tone.value} tone."
    )
    return "\n\n".join(parts)


# =============================================================================
# Metadata stage
# =============================================================================

METADATA_SYSTEM_PROMPT = """You write titles and descriptions for workplace training courses.

IMPORTANT: You must respond with ONLY valid JSON in this exact format:

{
  "title": "Generated training title here",
  "description": "Generated training description here"
}

The title is at most 80 characters. The description is one or two sentences
explaining what learners will gain."""


def build_metadata_user_prompt(config: GenerationConfig) -> str:
    topics = ", ".join(config.selected_topics) or "general operations"
    requests = []
    if config.generate_title:
        requests.append("Generate an engaging title for this training.")
    else:
        requests.append(f"The title is fixed: {config.title or 'untitled'}. Repeat it unchanged.")
    if config.generate_description:
        requests.append("Generate a compelling description that explains what learners will gain.")
    else:
        requests.append(f"The description is fixed: {config.description or 'none'}. Repeat it unchanged.")

    return (
        f"Document: {config.file_name}\n"
        f"Topics: {topics}\n"
        f"Difficulty Level: {config.difficulty.value}\n"
        f"Tone: {config.tone.value}\n\n"
        f"Content Summary (first {DOCUMENT_EXCERPT_CHARS} chars):\n"
        f"{config.document_text[:DOCUMENT_EXCERPT_CHARS]}\n\n"
        + "\n".join(requests)
    )


# =============================================================================
# Document analysis
# =============================================================================

ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert training content analyst. Provide clear, concise summaries "
    "that help training developers plan courses."
)


def build_analysis_user_prompt(document_text: str, file_name: str, instructions: str) -> str:
    return (
        f"{instructions}\n\n"
        f"Document: {file_name}\n\n"
        f"Content (first {DOCUMENT_EXCERPT_CHARS} chars):\n"
        f"{document_text[:DOCUMENT_EXCERPT_CHARS]}"
    )


def messages(system: str, user: str) -> list[dict[str, str]]:
    """Chat messages for a (system, user) prompt pair."""
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]
