"""
Tests for prompt analysis.
"""
import dataclasses
import json

import httpx
import pytest

from omniforge.orchestration.enums import Modality, PrimaryIntent
from omniforge.orchestration.prompt_analyzer import (
    ANALYZER_SYSTEM_PROMPT,
    PromptAnalyzer,
    default_analysis,
)
from omniforge.providers.exceptions import ProviderError, ProviderUnavailable
from omniforge.services.llm_service import LLMService
from conftest import FakeLLM, ECO_COFFEE_PROMPT


class TestPromptAnalyzer:

    @pytest.mark.asyncio
    async def test_valid_analysis(self, fake_llm):
        analysis = await PromptAnalyzer(llm=fake_llm).analyze(ECO_COFFEE_PROMPT)

        assert analysis.is_default is False
        assert analysis.primary_intent == PrimaryIntent.MARKETING
        assert analysis.selected_modalities == [Modality.TEXT, Modality.IMAGE, Modality.VIDEO]
        assert analysis.tone == "inspirational"
        assert analysis.enhanced_prompts[Modality.TEXT] == "Launch copy for a sustainable coffee brand"
        assert fake_llm.calls[0]["temperature"] == 0.3
        assert fake_llm.calls[0]["json_mode"] is True

    @pytest.mark.asyncio
    async def test_unknown_intent_becomes_general(self):
        llm = FakeLLM(responses={ANALYZER_SYSTEM_PROMPT: json.dumps({
            "primaryIntent": "conspiracy",
            "contentTypes": {"text": True},
        })})

        analysis = await PromptAnalyzer(llm=llm).analyze("x")

        assert analysis.primary_intent == PrimaryIntent.GENERAL
        assert analysis.selected_modalities == [Modality.TEXT]
        assert analysis.style == "creative"

    @pytest.mark.asyncio
    async def test_no_content_types_returns_default(self):
        llm = FakeLLM(responses={ANALYZER_SYSTEM_PROMPT: json.dumps({
            "primaryIntent": "story",
            "contentTypes": {"text": False, "image": False, "audio": False, "video": False},
        })})

        analysis = await PromptAnalyzer(llm=llm).analyze("a tale")

        assert analysis.is_default is True
        assert analysis.selected_modalities == [Modality.TEXT, Modality.IMAGE]

    @pytest.mark.asyncio
    async def test_malformed_output_returns_default(self):
        llm = FakeLLM(responses={ANALYZER_SYSTEM_PROMPT: "I think this is a marketing prompt."})

        analysis = await PromptAnalyzer(llm=llm).analyze("coffee")

        assert analysis == default_analysis("coffee")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        ProviderUnavailable("openai", "OPENAI_API_KEY not configured"),
        ProviderError("openai", "HTTP 500: boom", status_code=500),
    ])
    async def test_capability_error_returns_default(self, error):
        analysis = await PromptAnalyzer(llm=FakeLLM(error=error)).analyze("coffee")

        assert analysis.is_default is True
        assert analysis.enhanced_prompts == {Modality.TEXT: "coffee", Modality.IMAGE: "coffee"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("prompt", ["", "{{{{", "咖啡 ☕ launch", "x" * 10000])
    async def test_any_input_yields_structurally_valid_analysis(self, prompt):
        llm = FakeLLM(responses={ANALYZER_SYSTEM_PROMPT: "garbage"})

        analysis = await PromptAnalyzer(llm=llm).analyze(prompt)

        assert analysis.selected_modalities
        assert analysis.primary_intent in PrimaryIntent

    def test_analysis_is_immutable(self):
        analysis = default_analysis("coffee")

        with pytest.raises(dataclasses.FrozenInstanceError):
            analysis.tone = "casual"


MALFORMED_BODIES = [
    ["not", "an", "object"],
    {"choices": ["oops"]},
    {"choices": [{"message": {"content": [{"type": "text", "text": "{}"}]}}]},
]


def llm_returning(body):
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body)))
    return LLMService(api_key="sk-test-key-for-testing", base_url="https://api.test/v1", client=client)


class TestMalformedProviderReplies:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", MALFORMED_BODIES)
    async def test_malformed_reply_returns_default(self, body):
        analysis = await PromptAnalyzer(llm=llm_returning(body)).analyze("coffee")

        assert analysis == default_analysis("coffee")
