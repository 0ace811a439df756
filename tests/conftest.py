"""
Pytest configuration and fixtures for OmniForge tests.
"""
import json
import os
import pytest
import tempfile
from pathlib import Path

# Set test environment before importing omniforge modules
os.environ["STORAGE_BACKEND"] = "memory"
os.environ.setdefault("OPENAI_API_KEY", "sk-test-key-for-testing")
os.environ["DEBUG"] = "true"
os.environ.pop("AUDIO_OUTPUT_DIR", None)

from omniforge.orchestration.blueprint import BLUEPRINT_SYSTEM_PROMPT
from omniforge.orchestration.prompt_analyzer import ANALYZER_SYSTEM_PROMPT
from omniforge.providers.exceptions import ProviderError
from omniforge.services.dalle_service import GeneratedImage
from omniforge.services.llm_service import TextResult
from omniforge.services.storyboard_service import STORYBOARD_SYSTEM_PROMPT
from omniforge.services.tts_service import SpeechResult

ECO_COFFEE_PROMPT = "launch campaign for eco coffee brand"

ANALYSIS_JSON = {
    "primaryIntent": "marketing",
    "contentTypes": {"text": True, "image": True, "audio": False, "video": True},
    "style": "bold and earthy",
    "tone": "inspirational",
    "targetAudience": "eco-conscious coffee drinkers",
    "suggestedFormats": {"textFormat": "social", "imageStyle": "photorealistic"},
    "enhancedPrompts": {"text": "Launch copy for a sustainable coffee brand"},
}

BLUEPRINT_JSON = {
    "title": "Brewed for Tomorrow",
    "summary": "A launch campaign for a planet-first coffee brand.",
    "tone": "warm",
    "textBrief": "Tell the origin story of the beans.",
    "imagePrompt": "Steaming cup on recycled paper packaging, morning light",
    "audioNarration": "Every cup plants a seed.",
    "videoStoryboardConcept": "From farm to cup in six shots",
    "keywords": ["coffee", "sustainable", "launch"],
}

STORYBOARD_JSON = {
    "script": "From the farm to your morning cup.",
    "frames": [
        {"title": "Farm", "description": "Sunrise over coffee plants", "duration": 10},
        {"title": "Roast", "description": "Beans tumbling in the roaster", "duration": 10},
        {"title": "Cup", "description": "A steaming cup on a wooden table", "duration": 10},
    ],
}


class FakeLLM:
    """Text capability double that answers by system prompt."""

    def __init__(self, responses=None, narrative="A polished launch narrative.", error=None):
        self.responses = {
            ANALYZER_SYSTEM_PROMPT: json.dumps(ANALYSIS_JSON),
            BLUEPRINT_SYSTEM_PROMPT: "```json\n" + json.dumps(BLUEPRINT_JSON) + "\n```",
            STORYBOARD_SYSTEM_PROMPT: json.dumps(STORYBOARD_JSON),
        }
        self.responses.update(responses or {})
        self.narrative = narrative
        self.error = error
        self.calls = []

    async def generate_text(self, prompt, system_prompt="You are a helpful assistant.", **kwargs):
        self.calls.append({"prompt": prompt, "system_prompt": system_prompt, **kwargs})
        if self.error:
            raise self.error
        content = self.responses.get(system_prompt, self.narrative)
        return TextResult(content=content, model="gpt-4o-mini")

    async def close(self):
        pass


class FakeImages:
    """Image capability double."""

    def __init__(self, error=None):
        self.error = error
        self.prompts = []

    async def generate_image(self, prompt, width=1024, height=1024, model=None, **kwargs):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return GeneratedImage(
            url=f"https://images.test/{len(self.prompts)}.png",
            model=model or "dall-e-3",
            revised_prompt=prompt[:50],
            width=width,
            height=height,
        )

    async def close(self):
        pass


class FakeSpeech:
    """Speech capability double."""

    def __init__(self, error=None):
        self.error = error
        self.texts = []

    async def generate_speech(self, text, voice=None, model=None, **kwargs):
        self.texts.append(text)
        if self.error:
            raise self.error
        return SpeechResult(model="tts-1", duration=2, data_url="data:audio/mpeg;base64,SUQz")

    async def close(self):
        pass


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def failing_speech():
    return FakeSpeech(error=ProviderError("tts", "HTTP 500: upstream exploded", status_code=500))

