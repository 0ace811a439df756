"""
Production Types.

Keyword detection of what kind of production a prompt asks for, and the
component template that describes a finished production of that kind.
A run meets its template when every required component's modality succeeded.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from .enums import Modality, ProductionType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemplateComponent:
    """One deliverable of a production template."""
    name: str
    modality: Modality
    description: str
    required: bool = True


@dataclass(frozen=True)
class ProductionTemplate:
    """What a complete production of one type contains."""
    type: ProductionType
    components: Tuple[TemplateComponent, ...] = field(default_factory=tuple)

    @property
    def required_modalities(self) -> List[Modality]:
        return Modality.ordered(c.modality for c in self.components if c.required)

    @property
    def modalities(self) -> List[Modality]:
        return Modality.ordered(c.modality for c in self.components)

    def missing_components(self, produced: Iterable[Modality]) -> List[str]:
        """Names of required components whose modality was not produced."""
        produced = set(produced)
        return [
            c.name for c in self.components
            if c.required and c.modality not in produced
        ]

    def is_complete(self, produced: Iterable[Modality]) -> bool:
        return not self.missing_components(produced)

    def to_dict(self) -> Dict:
        return {
            "type": self.type.value,
            "components": [
                {
                    "name": c.name,
                    "modality": c.modality.value,
                    "description": c.description,
                    "required": c.required,
                }
                for c in self.components
            ],
        }


PRODUCTION_TEMPLATES: Dict[ProductionType, ProductionTemplate] = {
    ProductionType.MANGA: ProductionTemplate(ProductionType.MANGA, (
        TemplateComponent("Complete Story", Modality.TEXT, "Full manga story with dialogue, narration and panel notes"),
        TemplateComponent("Cover Art", Modality.IMAGE, "Manga cover illustration"),
        TemplateComponent("Character Designs", Modality.IMAGE, "Protagonist and supporting character sheets", required=False),
    )),
    ProductionType.MUSIC_VIDEO: ProductionTemplate(ProductionType.MUSIC_VIDEO, (
        TemplateComponent("Music Script", Modality.TEXT, "Lyrics with tempo, instruments and vocal style"),
        TemplateComponent("Storyboard", Modality.VIDEO, "Shot-by-shot video storyboard"),
        TemplateComponent("Album Cover", Modality.IMAGE, "Album artwork"),
    )),
    ProductionType.PODCAST: ProductionTemplate(ProductionType.PODCAST, (
        TemplateComponent("Full Episode Script", Modality.TEXT, "Episode script with segments and show notes"),
        TemplateComponent("Cover Art", Modality.IMAGE, "Podcast cover artwork"),
        TemplateComponent("Narration", Modality.AUDIO, "Voiced episode narration"),
    )),
    ProductionType.MARKETING_CAMPAIGN: ProductionTemplate(ProductionType.MARKETING_CAMPAIGN, (
        TemplateComponent("Copy Package", Modality.TEXT, "Campaign strategy and marketing copy"),
        TemplateComponent("Hero Image", Modality.IMAGE, "Main campaign visual"),
        TemplateComponent("Promo Storyboard", Modality.VIDEO, "Short promotional video concept", required=False),
    )),
    ProductionType.EDUCATIONAL_COURSE: ProductionTemplate(ProductionType.EDUCATIONAL_COURSE, (
        TemplateComponent("Lesson Content", Modality.TEXT, "Curriculum and lesson material"),
        TemplateComponent("Visual Aids", Modality.IMAGE, "Educational diagrams and illustrations"),
        TemplateComponent("Course Introduction", Modality.AUDIO, "Welcome and overview narration"),
    )),
    ProductionType.STORY: ProductionTemplate(ProductionType.STORY, (
        TemplateComponent("Complete Story", Modality.TEXT, "Full narrative with beginning, middle and end"),
        TemplateComponent("Cover Illustration", Modality.IMAGE, "Story cover art"),
        TemplateComponent("Narration", Modality.AUDIO, "Audiobook-ready narration", required=False),
    )),
    ProductionType.GENERAL: ProductionTemplate(ProductionType.GENERAL, (
        TemplateComponent("Main Content", Modality.TEXT, "Primary written content"),
        TemplateComponent("Visual Assets", Modality.IMAGE, "Complementary images"),
    )),
}

# Checked in order; first match wins
DETECTION_RULES: List[Tuple[ProductionType, Tuple[str, ...]]] = [
    (ProductionType.MANGA, ("manga", "comic", "graphic novel", "anime story")),
    (ProductionType.MUSIC_VIDEO, ("music video", "song with video")),
    (ProductionType.PODCAST, ("podcast", "audio episode", "interview show")),
    (ProductionType.MARKETING_CAMPAIGN, ("marketing campaign", "product launch", "brand campaign")),
    (ProductionType.EDUCATIONAL_COURSE, ("course", "lesson", "teach", "educational")),
    (ProductionType.STORY, ("story", "tale", "narrative", "novel")),
]


def detect_production_type(prompt: str) -> ProductionType:
    """Classify a prompt by keyword. Anything unmatched is GENERAL."""
    lowered = (prompt or "").lower()

    for production_type, keywords in DETECTION_RULES:
        if any(keyword in lowered for keyword in keywords):
            return production_type

        # Two-word combinations that only count together
        if production_type == ProductionType.MUSIC_VIDEO and "music" in lowered and "visual" in lowered:
            return production_type
        if production_type == ProductionType.MARKETING_CAMPAIGN and "promote" in lowered and "brand" in lowered:
            return production_type

    return ProductionType.GENERAL


def get_template(production_type: ProductionType) -> ProductionTemplate:
    return PRODUCTION_TEMPLATES.get(production_type, PRODUCTION_TEMPLATES[ProductionType.GENERAL])
