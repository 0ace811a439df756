"""
Tests for the manga generator.
"""
import json

import pytest

from omniforge.providers.exceptions import ProviderError, ProviderUnavailable
from omniforge.services.manga_generator import (
    MANGA_SYSTEM_PROMPT,
    MangaGenerator,
    fallback_manga_plan,
)
from conftest import FakeLLM, FakeImages

MANGA_PLAN = {
    "title": "Bean Blade",
    "synopsis": "A barista fights for the last fair-trade farm.",
    "characters": [
        {"name": "Kaito", "description": "Young barista with a silver apron"},
        {"name": "Mira", "description": "Farmer and swordswoman"},
    ],
    "pages": [
        {
            "pageNumber": 1,
            "layout": "double",
            "panels": [
                {"panelNumber": 1, "description": "Kaito opens the cafe", "dialogue": "Morning!"},
                {"panelNumber": 2, "description": "Mira arrives with a sack of beans"},
            ],
        },
        {
            "pageNumber": 2,
            "layout": "single",
            "panels": [{"panelNumber": 1, "description": "The rival corporation appears"}],
        },
    ],
}


class FailingPanelImages(FakeImages):
    """Fails every prompt that mentions `marker`."""

    def __init__(self, marker):
        super().__init__()
        self.marker = marker

    async def generate_image(self, prompt, **kwargs):
        if self.marker in prompt:
            self.prompts.append(prompt)
            raise ProviderError("dalle", "content_policy_violation")
        return await super().generate_image(prompt, **kwargs)


class TestMangaGenerator:

    @pytest.mark.asyncio
    async def test_full_production(self):
        llm = FakeLLM(responses={MANGA_SYSTEM_PROMPT: "```json\n" + json.dumps(MANGA_PLAN) + "\n```"})
        images = FakeImages()
        progress = []

        manga = await MangaGenerator(llm=llm, images=images).generate_manga(
            "barista samurai", pages=2, style="seinen",
            progress_callback=lambda percent, message: progress.append(percent),
        )

        assert manga.title == "Bean Blade"
        assert manga.used_fallback_plan is False
        assert [c.design_url is not None for c in manga.characters] == [True, True]
        assert manga.cover_image
        assert manga.total_pages == 2
        assert manga.pages[0].panels[0].dialogue == "Morning!"
        assert manga.pages[1].layout == "single"
        # 2 characters + cover + 3 panels, drawn one at a time
        assert len(images.prompts) == 6
        assert "seinen style" in images.prompts[2]
        assert progress == sorted(progress)
        assert progress[-1] == 100
        assert manga.to_dict()["metadata"]["style"] == "seinen"

    @pytest.mark.asyncio
    async def test_malformed_plan_uses_fallback(self):
        llm = FakeLLM(responses={MANGA_SYSTEM_PROMPT: "Here is a great manga idea!"})

        manga = await MangaGenerator(llm=llm, images=FakeImages()).generate_manga("space cats", pages=3)

        assert manga.used_fallback_plan is True
        assert manga.title == "Generated Manga"
        assert manga.synopsis == "A manga based on: space cats"
        assert [c.name for c in manga.characters] == ["Main Character"]
        assert manga.total_pages == 3
        assert all(len(page.panels) == 2 for page in manga.pages)

    @pytest.mark.asyncio
    async def test_planning_capability_error_uses_fallback(self):
        llm = FakeLLM(error=ProviderUnavailable("openai", "OPENAI_API_KEY not configured"))

        manga = await MangaGenerator(llm=llm, images=FakeImages()).generate_manga("space cats", pages=1)

        assert manga.used_fallback_plan is True
        assert manga.total_pages == 1

    @pytest.mark.asyncio
    async def test_failed_images_degrade_gracefully(self):
        llm = FakeLLM(responses={MANGA_SYSTEM_PROMPT: json.dumps(MANGA_PLAN)})
        images = FailingPanelImages(marker="rival corporation")

        manga = await MangaGenerator(llm=llm, images=images).generate_manga("barista samurai", pages=2)

        # Page 2's only panel failed, so the page is dropped
        assert manga.total_pages == 1
        assert manga.pages[0].page_number == 1

    @pytest.mark.asyncio
    async def test_failed_character_and_cover_are_kept_empty(self):
        llm = FakeLLM(responses={MANGA_SYSTEM_PROMPT: json.dumps(MANGA_PLAN)})
        images = FakeImages(error=ProviderError("dalle", "HTTP 500"))

        manga = await MangaGenerator(llm=llm, images=images).generate_manga("barista samurai", pages=2)

        assert [c.name for c in manga.characters] == ["Kaito", "Mira"]
        assert all(c.design_url is None for c in manga.characters)
        assert manga.cover_image is None
        assert manga.pages == []


class TestFallbackMangaPlan:

    def test_structure(self):
        plan = fallback_manga_plan("robots", 4)

        assert len(plan.pages) == 4
        assert plan.pages[3].page_number == 4
        assert plan.pages[0].panels[0].description == "Scene 1 panel 1: robots"
