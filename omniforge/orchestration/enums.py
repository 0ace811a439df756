"""
Orchestration enumerations.

Modalities, task statuses, run stages, prompt intents and production types.
"""
from enum import Enum
from typing import List


class Modality(str, Enum):
    """
    Content types a production can generate.

    Declaration order is the reporting order for every run:
    text, image, audio, video.
    """
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"

    @classmethod
    def from_string(cls, value: str) -> "Modality":
        """Get modality from string value."""
        value_lower = value.strip().lower()
        for modality in cls:
            if modality.value == value_lower:
                return modality
        raise ValueError(f"Unknown modality: {value}")

    @classmethod
    def ordered(cls, modalities) -> List["Modality"]:
        """Deduplicate and sort modalities into reporting order."""
        selected = {m if isinstance(m, cls) else cls.from_string(m) for m in modalities}
        return [m for m in cls if m in selected]

    @property
    def display_name(self) -> str:
        """Human-readable display name."""
        names = {
            self.TEXT: "Narrative Text",
            self.IMAGE: "Key Art",
            self.AUDIO: "Narration",
            self.VIDEO: "Video Storyboard",
        }
        return names.get(self, self.value)


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.SUCCESS, TaskStatus.FAILED)


class RunStage(str, Enum):
    """Production run lifecycle, in order."""
    CREATED = "created"
    ANALYZING = "analyzing"
    PLANNING = "planning"
    GENERATING = "generating"
    FINALIZING = "finalizing"
    COMPLETE = "complete"


class PrimaryIntent(str, Enum):
    STORY = "story"
    MARKETING = "marketing"
    EDUCATIONAL = "educational"
    ENTERTAINMENT = "entertainment"
    PRODUCT = "product"
    GENERAL = "general"

    @classmethod
    def from_string(cls, value: str) -> "PrimaryIntent":
        """Lenient lookup: anything unrecognized is GENERAL."""
        value_lower = (value or "").strip().lower()
        for intent in cls:
            if intent.value == value_lower:
                return intent
        return cls.GENERAL


class ProductionType(str, Enum):
    """Kind of production a prompt asks for, detected from keywords."""
    MANGA = "manga"
    MUSIC_VIDEO = "music-video"
    PODCAST = "podcast"
    MARKETING_CAMPAIGN = "marketing-campaign"
    EDUCATIONAL_COURSE = "educational-course"
    STORY = "story"
    GENERAL = "general"
