"""
Pydantic schemas for production requests and for structured model output.

The *Payload models are the strict second step of the tolerant decode: a
document extracted from free text is validated here, with per-field defaults
so that a partially filled document still decodes.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_PROMPT_LENGTH = 10000
MODALITY_NAMES = ("text", "image", "audio", "video")


def _text_or_none(value: Any) -> Optional[str]:
    """Keep non-blank strings, drop everything else."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class ProductionRequest(BaseModel):
    """Validated input for one production run."""
    prompt: str = Field(..., min_length=1, max_length=MAX_PROMPT_LENGTH)
    modalities: Optional[List[str]] = Field(
        default=None,
        description="Modalities to generate (auto-detected from the prompt when omitted)",
    )
    voice: Optional[str] = Field(default=None)

    @field_validator("prompt", mode="before")
    @classmethod
    def sanitize_prompt(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.replace("<", "").replace(">", "").strip()
        return v

    @field_validator("modalities")
    @classmethod
    def validate_modalities(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        normalized = []
        for name in v:
            key = name.strip().lower()
            if key not in MODALITY_NAMES:
                raise ValueError(f"Unknown modality: {name}")
            if key not in normalized:
                normalized.append(key)
        if not normalized:
            raise ValueError("Select at least one generation modality")
        return normalized

    def to_modalities(self):
        """Requested modalities as ordered Modality values (None when auto)."""
        if self.modalities is None:
            return None
        from omniforge.orchestration.enums import Modality
        return Modality.ordered(self.modalities)


class AnalysisPayload(BaseModel):
    """Prompt classification as returned by the text model."""
    model_config = ConfigDict(populate_by_name=True)

    primary_intent: str = Field(default="general", alias="primaryIntent")
    content_types: Dict[str, bool] = Field(default_factory=dict, alias="contentTypes")
    style: Optional[str] = None
    tone: Optional[str] = None
    target_audience: Optional[str] = Field(default=None, alias="targetAudience")
    suggested_formats: Dict[str, Any] = Field(default_factory=dict, alias="suggestedFormats")
    enhanced_prompts: Dict[str, Any] = Field(default_factory=dict, alias="enhancedPrompts")

    @field_validator("primary_intent", mode="before")
    @classmethod
    def normalize_intent(cls, v: Any) -> str:
        return (_text_or_none(v) or "general").lower()

    @field_validator("style", "tone", "target_audience", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Optional[str]:
        return _text_or_none(v)

    @field_validator("content_types", "suggested_formats", "enhanced_prompts", mode="before")
    @classmethod
    def mapping_or_empty(cls, v: Any) -> Dict[str, Any]:
        return v if isinstance(v, dict) else {}


class BlueprintPayload(BaseModel):
    """Creative blueprint as returned by the text model. Every field is optional."""
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    summary: Optional[str] = None
    tone: Optional[str] = None
    text_brief: Optional[str] = Field(default=None, alias="textBrief")
    image_prompt: Optional[str] = Field(default=None, alias="imagePrompt")
    audio_narration: Optional[str] = Field(default=None, alias="audioNarration")
    video_storyboard_concept: Optional[str] = Field(default=None, alias="videoStoryboardConcept")
    keywords: Optional[List[str]] = None

    @field_validator(
        "title", "summary", "tone", "text_brief", "image_prompt",
        "audio_narration", "video_storyboard_concept",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v: Any) -> Optional[str]:
        return _text_or_none(v)

    @field_validator("keywords", mode="before")
    @classmethod
    def coerce_keywords(cls, v: Any) -> Optional[List[str]]:
        if isinstance(v, str):
            v = v.split(",")
        if not isinstance(v, list):
            return None
        keywords = [item.strip() for item in v if isinstance(item, str) and item.strip()]
        return keywords or None


class FramePayload(BaseModel):
    title: Optional[str] = None
    description: str = ""
    duration: Optional[float] = None

    @field_validator("title", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Optional[str]:
        return _text_or_none(v)

    @field_validator("description", mode="before")
    @classmethod
    def description_text(cls, v: Any) -> str:
        return v.strip() if isinstance(v, str) else ""

    @field_validator("duration", mode="before")
    @classmethod
    def positive_duration(cls, v: Any) -> Optional[float]:
        try:
            value = float(v)
        except (TypeError, ValueError):
            return None
        return value if value > 0 else None


class StoryboardPayload(BaseModel):
    """Storyboard JSON contract: {script, frames: [{title, description, duration}]}."""
    script: str = ""
    frames: List[FramePayload] = Field(..., min_length=1)

    @field_validator("script", mode="before")
    @classmethod
    def script_text(cls, v: Any) -> str:
        return v.strip() if isinstance(v, str) else ""


class PanelPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    panel_number: Optional[int] = Field(default=None, alias="panelNumber")
    description: str = Field(..., min_length=1)
    dialogue: Optional[str] = None
    narration: Optional[str] = None


class PagePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page_number: Optional[int] = Field(default=None, alias="pageNumber")
    layout: str = "double"
    panels: List[PanelPayload] = Field(default_factory=list)

    @field_validator("layout", mode="before")
    @classmethod
    def known_layout(cls, v: Any) -> str:
        return v if v in ("single", "double", "triple", "quad") else "double"


class CharacterPayload(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""


class MangaPlanPayload(BaseModel):
    """Manga planning JSON contract."""
    title: str = "Untitled Manga"
    synopsis: str = ""
    characters: List[CharacterPayload] = Field(default_factory=list)
    pages: List[PagePayload] = Field(..., min_length=1)
