"""
Unit tests for the generation pipeline and its text-generation client.

The chat-completions endpoint is replaced with httpx.MockTransport.
"""
import asyncio
import json

import httpx
import pytest

from src.core.errors import GenerationError
from src.generation import pipeline as pipeline_module
from src.generation.client import TextGenerationClient
from src.generation.config import AISettings, GenerationConfig
from src.generation.pipeline import NO_API_KEY, FlowGenerationPipeline

FLOW_JSON = {
    "blocks": [
        {"id": "step-1", "type": "information", "order": 1, "config": {"content": "Inspect the chains."}},
        {
            "id": "step-2",
            "type": "question",
            "order": 2,
            "config": {
                "question_text": "What do you inspect first?",
                "question_type": "text_input",
                "ideal_answer": "The chains",
                "points": 5,
            },
        },
    ]
}
METADATA_JSON = {"title": "Chain Inspection Basics", "description": "Inspect lifting chains safely."}


def completion(content, status_code=200):
    return httpx.Response(status_code, json={"choices": [{"message": {"content": content}}]})


def make_config(**overrides):
    values = {
        "document_text": "Lifting chains must be inspected before every use.",
        "file_name": "chains.txt",
        "selected_topics": ["Chain Inspection"],
        "step_count": 4,
        "content_mix": 50,
    }
    values.update(overrides)
    return GenerationConfig(**values)


def make_pipeline(handler=None, api_key="sk-test"):
    transport = httpx.MockTransport(handler) if handler else None
    return FlowGenerationPipeline(
        ai_settings=AISettings(api_key=api_key, api_url="https://llm.test/v1", timeout_seconds=5),
        transport=transport,
        generation_prompt="Create a training flow.",
        analysis_prompt="Summarize this document.",
    )


class RecordingHandler:
    """Answers each request with the next queued response and records the request body."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request):
        self.requests.append(json.loads(request.content))
        return self.responses.pop(0)


class TestTextGenerationClient:
    @pytest.mark.asyncio
    async def test_sends_chat_completion_request(self):
        handler = RecordingHandler(completion("  hello  "))
        settings = AISettings(api_key="sk-test", model="gpt-4o-mini", temperature=0.2, max_tokens=100)
        async with TextGenerationClient(settings, transport=httpx.MockTransport(handler)) as client:
            text = await client.complete([{"role": "user", "content": "hi"}])

        assert text == "hello"
        assert handler.requests == [
            {
                "model": "gpt-4o-mini",
                "messages": [{"role": "user", "content": "hi"}],
                "temperature": 0.2,
                "max_tokens": 100,
            }
        ]

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        def handler(request):
            return httpx.Response(429, json={"error": {"message": "Rate limit reached"}})

        async with TextGenerationClient(AISettings(api_key="k"), transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(GenerationError, match="429 - Rate limit reached"):
                await client.complete([])

    @pytest.mark.asyncio
    async def test_missing_choices(self):
        def handler(request):
            return httpx.Response(200, json={"choices": []})

        async with TextGenerationClient(AISettings(api_key="k"), transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(GenerationError, match="No response"):
                await client.complete([])

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with TextGenerationClient(AISettings(api_key="k"), transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(GenerationError, match="timed out"):
                await client.complete([])

    def test_requires_api_key(self):
        with pytest.raises(GenerationError):
            TextGenerationClient(AISettings(api_key=None))


class TestGenerate:
    @pytest.mark.asyncio
    async def test_successful_generation(self):
        handler = RecordingHandler(completion("Here it is:\n" + json.dumps(FLOW_JSON)))
        result = await make_pipeline(handler).generate(make_config())

        assert result.error is None
        assert not result.used_fallback
        assert [b.id for b in result.blocks] == ["step-1", "step-2"]
        assert [b.order for b in result.blocks] == [0, 1]
        assert len(handler.requests) == 1

        system, user = handler.requests[0]["messages"]
        assert system["role"] == "system"
        assert '"blocks"' in system["content"]
        assert "Required Steps: 4" in user["content"]
        assert user["content"].startswith("Create a training flow.")

    @pytest.mark.asyncio
    async def test_no_api_key_uses_fallback_without_network(self):
        def handler(request):
            raise AssertionError("no request expected")

        result = await make_pipeline(handler, api_key=None).generate(make_config())
        assert result.error == NO_API_KEY
        assert result.used_fallback
        assert len(result.blocks) == 4

    @pytest.mark.asyncio
    async def test_invalid_json_falls_back_with_error(self):
        handler = RecordingHandler(completion("I could not produce JSON, sorry."))
        result = await make_pipeline(handler).generate(make_config())

        assert result.used_fallback
        assert "JSON" in result.error
        assert [b.id for b in result.blocks] == ["step-1", "step-2", "step-3", "step-4"]

    @pytest.mark.asyncio
    async def test_timeout_falls_back(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        result = await make_pipeline(handler).generate(make_config())
        assert result.used_fallback
        assert "timed out" in result.error
        assert result.blocks

    @pytest.mark.asyncio
    async def test_metadata_stage_runs_first(self):
        handler = RecordingHandler(
            completion(json.dumps(METADATA_JSON)),
            completion(json.dumps(FLOW_JSON)),
        )
        result = await make_pipeline(handler).generate(
            make_config(generate_title=True, generate_description=True)
        )

        assert result.title == "Chain Inspection Basics"
        assert result.description == "Inspect lifting chains safely."
        assert result.metadata_error is None
        assert len(handler.requests) == 2
        assert '"title"' in handler.requests[0]["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_metadata_failure_uses_templates(self):
        handler = RecordingHandler(
            completion("no metadata today"),
            completion(json.dumps(FLOW_JSON)),
        )
        result = await make_pipeline(handler).generate(
            make_config(generate_title=True, title="Kept", description="Given description")
        )

        assert result.title == "Intermediate Chain Inspection Training"
        assert result.description == "Given description"
        assert result.metadata_error
        assert result.error is None

    @pytest.mark.asyncio
    async def test_no_metadata_request_without_flags(self):
        handler = RecordingHandler(completion(json.dumps(FLOW_JSON)))
        result = await make_pipeline(handler).generate(make_config(title="Mine"))
        assert result.title == "Mine"
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    async def test_cancellation_propagates_without_fallback(self, monkeypatch):
        started = asyncio.Event()
        fallback_calls = []

        async def handler(request):
            started.set()
            await asyncio.sleep(30)
            return completion(json.dumps(FLOW_JSON))

        monkeypatch.setattr(
            pipeline_module,
            "generate_fallback_flow",
            lambda config: fallback_calls.append(config) or [],
        )

        task = asyncio.create_task(make_pipeline(handler).generate(make_config()))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert fallback_calls == []


class TestAnalyzeDocument:
    @pytest.mark.asyncio
    async def test_uses_generated_analysis(self):
        handler = RecordingHandler(completion("Main topics: chains."))
        summary = await make_pipeline(handler).analyze_document("Chains.", "chains.txt")
        assert summary.text == "Main topics: chains."
        assert not summary.used_fallback
        assert handler.requests[0]["messages"][1]["content"].startswith("Summarize this document.")

    @pytest.mark.asyncio
    async def test_falls_back_to_local_summary(self):
        def handler(request):
            return httpx.Response(500)

        summary = await make_pipeline(handler).analyze_document("Chains.", "chains.txt")
        assert summary.used_fallback
        assert summary.text.startswith("Document Analysis: chains.txt")
        assert "500" in summary.error
