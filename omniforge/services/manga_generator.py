"""
Manga Generator - Complete multi-page manga from a single prompt.

Pipeline:
1. Plan title, synopsis, characters and panel breakdown (one text call)
2. Character designs (one image per character)
3. Cover art
4. Panel art, page by page

Image calls run sequentially. A failed image never aborts the production.
"""
import logging
import time
import uuid
from datetime import datetime
from dataclasses import dataclass, field
from typing import Callable, Dict, Any, List, Optional

from omniforge.providers.exceptions import ProviderError
from omniforge.schemas import MangaPlanPayload, CharacterPayload, PagePayload, PanelPayload
from omniforge.services.dalle_service import DalleService
from omniforge.services.json_recovery import decode_structured
from omniforge.services.llm_service import LLMService

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]

MANGA_SYSTEM_PROMPT = "You are a professional manga creator. Create complete, original manga productions."


@dataclass
class MangaPanel:
    panel_number: int
    description: str
    image_url: str
    dialogue: Optional[str] = None
    narration: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "panel_number": self.panel_number,
            "description": self.description,
            "image_url": self.image_url,
            "dialogue": self.dialogue,
            "narration": self.narration,
        }


@dataclass
class MangaPage:
    page_number: int
    layout: str
    panels: List[MangaPanel] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page_number": self.page_number,
            "layout": self.layout,
            "panels": [panel.to_dict() for panel in self.panels],
        }


@dataclass
class MangaCharacter:
    name: str
    description: str
    design_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description, "design_url": self.design_url}


@dataclass
class MangaProduction:
    id: str
    title: str
    synopsis: str
    style: str
    characters: List[MangaCharacter] = field(default_factory=list)
    pages: List[MangaPage] = field(default_factory=list)
    cover_image: Optional[str] = None
    generated_at: datetime = field(default_factory=datetime.utcnow)
    generation_time: float = 0.0
    used_fallback_plan: bool = False

    @property
    def total_pages(self) -> int:
        return len(self.pages)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "synopsis": self.synopsis,
            "characters": [c.to_dict() for c in self.characters],
            "pages": [p.to_dict() for p in self.pages],
            "cover_image": self.cover_image,
            "metadata": {
                "total_pages": self.total_pages,
                "style": self.style,
                "generated_at": self.generated_at.isoformat(),
                "generation_time": round(self.generation_time, 2),
                "used_fallback_plan": self.used_fallback_plan,
            },
        }


def fallback_manga_plan(prompt: str, pages: int) -> MangaPlanPayload:
    """One protagonist and `pages` two-panel pages derived from the prompt."""
    return MangaPlanPayload(
        title="Generated Manga",
        synopsis=f"A manga based on: {prompt}",
        characters=[CharacterPayload(name="Main Character", description="The protagonist of the story")],
        pages=[
            PagePayload(
                page_number=i + 1,
                layout="double",
                panels=[
                    PanelPayload(panel_number=1, description=f"Scene {i + 1} panel 1: {prompt}"),
                    PanelPayload(panel_number=2, description=f"Scene {i + 1} panel 2: continuation"),
                ],
            )
            for i in range(pages)
        ],
    )


class MangaGenerator:
    """Plans a manga with the text capability and draws it with the image capability."""

    def __init__(
        self,
        llm: Optional[LLMService] = None,
        images: Optional[DalleService] = None,
    ):
        self.llm = llm or LLMService()
        self.images = images or DalleService()

    async def generate_manga(
        self,
        prompt: str,
        pages: int = 5,
        style: str = "shonen",
        progress_callback: Optional[ProgressCallback] = None,
    ) -> MangaProduction:
        """
        Generate a complete manga production.

        Args:
            prompt: Story concept
            pages: Number of pages to plan
            style: Manga style (shonen, shojo, seinen, ...)
            progress_callback: Optional (percent, message) reporter

        Returns:
            MangaProduction; pages whose panels all failed are dropped
        """
        start_time = time.time()
        pages = max(1, int(pages))

        def report(percent: int, message: str):
            if progress_callback:
                progress_callback(percent, message)

        logger.info("=" * 70)
        logger.info(f"[MANGA] Generating {pages}-page {style} manga")
        logger.info(f"[MANGA] Prompt: {prompt[:100]}...")
        logger.info("=" * 70)

        # Step 1: Plan
        report(5, "Planning story structure")
        plan, used_fallback = await self._plan(prompt, pages)

        # Step 2: Character designs
        report(15, "Designing characters")
        characters = []
        for character in plan.characters:
            design_url = await self._draw(
                f'Character design for "{character.name}": {character.description}. '
                f"Manga style, full body character design, clean line art, professional manga illustration.",
                f"character {character.name}",
            )
            characters.append(MangaCharacter(
                name=character.name,
                description=character.description,
                design_url=design_url,
            ))

        # Step 3: Cover
        report(30, "Drawing cover")
        cover_image = await self._draw(
            f'Manga cover art for "{plan.title}". {plan.synopsis}. '
            f"Professional manga cover, dynamic composition, vibrant colors, {style} style manga art.",
            "cover",
        )

        # Step 4: Pages
        generated_pages: List[MangaPage] = []
        total_planned = len(plan.pages)
        for index, page in enumerate(plan.pages):
            report(35 + int(60 * index / total_planned), f"Drawing page {index + 1}/{total_planned}")

            panels: List[MangaPanel] = []
            for panel in page.panels:
                image_url = await self._draw(
                    f"Manga panel illustration: {panel.description}. "
                    f"Professional manga art, {style} style, black and white with screentones, "
                    f"dynamic composition, clear line art.",
                    f"page {index + 1} panel {panel.panel_number or len(panels) + 1}",
                )
                if image_url is None:
                    continue
                panels.append(MangaPanel(
                    panel_number=panel.panel_number or len(panels) + 1,
                    description=panel.description,
                    image_url=image_url,
                    dialogue=panel.dialogue or None,
                    narration=panel.narration or None,
                ))

            if panels:
                generated_pages.append(MangaPage(
                    page_number=page.page_number or len(generated_pages) + 1,
                    layout=page.layout,
                    panels=panels,
                ))
            else:
                logger.warning(f"[MANGA] Page {index + 1} has no panels - dropped")

        production = MangaProduction(
            id=f"manga-{uuid.uuid4().hex[:12]}",
            title=plan.title,
            synopsis=plan.synopsis,
            style=style,
            characters=characters,
            pages=generated_pages,
            cover_image=cover_image,
            generation_time=time.time() - start_time,
            used_fallback_plan=used_fallback,
        )

        report(100, "Manga complete")
        logger.info(
            f"[MANGA] Complete: {production.total_pages}/{total_planned} pages "
            f"in {production.generation_time:.1f}s"
        )
        return production

    async def _plan(self, prompt: str, pages: int):
        concept_prompt = f"""You are a professional manga creator. Create a complete, original manga based on this concept: "{prompt}"

Generate a complete manga production with:
1. Title (catchy and original)
2. Synopsis (2-3 sentences)
3. Main characters (3-5 characters with names and descriptions)
4. Story structure for {pages} pages
5. Panel-by-panel breakdown for each page

Return ONLY a JSON object with this exact structure:
{{
  "title": "Manga Title",
  "synopsis": "Brief synopsis...",
  "characters": [
    {{"name": "Character Name", "description": "Appearance, personality, role"}}
  ],
  "pages": [
    {{
      "pageNumber": 1,
      "layout": "double",
      "panels": [
        {{
          "panelNumber": 1,
          "description": "Detailed visual description of what appears in this panel",
          "dialogue": "Character dialogue if any",
          "narration": "Narration text if any"
        }}
      ]
    }}
  ]
}}

Each page should have 2-4 panels. Return ONLY valid JSON."""

        try:
            result = await self.llm.generate_text(
                prompt=concept_prompt,
                system_prompt=MANGA_SYSTEM_PROMPT,
                temperature=0.8,
                max_tokens=4000,
            )
        except ProviderError as e:
            logger.error(f"[MANGA] Planning failed: {e} - using fallback structure")
            return fallback_manga_plan(prompt, pages), True

        decoded = decode_structured(
            result.content,
            MangaPlanPayload,
            fallback=lambda: fallback_manga_plan(prompt, pages),
            label="manga plan",
        )
        return decoded.value, decoded.used_fallback

    async def _draw(self, prompt: str, label: str) -> Optional[str]:
        try:
            image = await self.images.generate_image(prompt=prompt, width=1024, height=1024)
            return image.url
        except ProviderError as e:
            logger.error(f"[MANGA] Failed to draw {label}: {e}")
            return None
