"""
Tests for storyboard planning.
"""
import json

import pytest

from omniforge.providers.exceptions import ProviderUnavailable
from omniforge.services.storyboard_service import (
    STORYBOARD_SYSTEM_PROMPT,
    StoryboardService,
    fallback_storyboard,
)
from conftest import FakeLLM, STORYBOARD_JSON


class TestStoryboardService:

    @pytest.mark.asyncio
    async def test_valid_response(self, fake_llm):
        storyboard = await StoryboardService(llm=fake_llm).generate_storyboard("farm to cup", 3, 30)

        assert storyboard.used_fallback is False
        assert [f.title for f in storyboard.frames] == ["Farm", "Roast", "Cup"]
        assert storyboard.total_duration == 30
        assert storyboard.script == STORYBOARD_JSON["script"]
        assert fake_llm.calls[0]["system_prompt"] == STORYBOARD_SYSTEM_PROMPT

    @pytest.mark.asyncio
    async def test_malformed_response_uses_even_fallback(self):
        llm = FakeLLM(responses={STORYBOARD_SYSTEM_PROMPT: "Sorry, I can't produce JSON today."})

        storyboard = await StoryboardService(llm=llm).generate_storyboard("eco coffee", number_of_frames=5, duration=30)

        assert storyboard.used_fallback is True
        assert len(storyboard.frames) == 5
        assert [f.title for f in storyboard.frames] == [f"Frame {i}" for i in range(1, 6)]
        assert all(f.duration == 6 for f in storyboard.frames)
        assert storyboard.total_duration == 30
        assert storyboard.frames[0].description == "Scene 1 for: eco coffee"
        assert storyboard.script == "This is a storyboard for: eco coffee"

    @pytest.mark.asyncio
    async def test_missing_frames_uses_fallback(self):
        llm = FakeLLM(responses={STORYBOARD_SYSTEM_PROMPT: json.dumps({"script": "only a script"})})

        storyboard = await StoryboardService(llm=llm).generate_storyboard("x", 4, 20)

        assert storyboard.used_fallback is True
        assert len(storyboard.frames) == 4

    @pytest.mark.asyncio
    async def test_frames_without_duration_get_even_share(self):
        content = json.dumps({
            "script": "s",
            "frames": [
                {"title": "One", "description": "a", "duration": 12},
                {"description": "b"},
            ],
        })
        llm = FakeLLM(responses={STORYBOARD_SYSTEM_PROMPT: content})

        storyboard = await StoryboardService(llm=llm).generate_storyboard("x", number_of_frames=4, duration=20)

        assert storyboard.frames[1].title == "Untitled Frame"
        assert storyboard.frames[1].duration == 5
        assert storyboard.total_duration == 17

    @pytest.mark.asyncio
    async def test_capability_error_propagates(self):
        llm = FakeLLM(error=ProviderUnavailable("openai", "OPENAI_API_KEY not configured"))

        with pytest.raises(ProviderUnavailable):
            await StoryboardService(llm=llm).generate_storyboard("x")


class TestFallbackStoryboard:

    def test_durations_sum_to_total(self):
        storyboard = fallback_storyboard("concept", 3, 10)

        assert len(storyboard.frames) == 3
        assert storyboard.total_duration == 10
        assert storyboard.to_dict()["frames"][2]["title"] == "Frame 3"
