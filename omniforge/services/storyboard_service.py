"""
Storyboard Service - Video storyboard planning.

Reuses the text capability under a JSON contract. Malformed output is replaced
by an evenly timed storyboard built from the concept; provider errors propagate.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any

from omniforge.schemas import StoryboardPayload
from omniforge.services.json_recovery import decode_structured
from omniforge.services.llm_service import LLMService

logger = logging.getLogger(__name__)

STORYBOARD_SYSTEM_PROMPT = """You are a professional storyboard creator and scriptwriter.
Your task is to create detailed video storyboards with clear frame descriptions.
Return your response as a JSON object with this exact structure:
{
  "script": "Full narration script...",
  "frames": [
    {
      "title": "Frame title",
      "description": "Detailed visual description",
      "duration": number_in_seconds
    }
  ]
}"""


@dataclass
class StoryboardFrame:
    title: str
    description: str
    duration: float
    image_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "duration": self.duration,
            "image_url": self.image_url,
        }


@dataclass
class Storyboard:
    """Planned video: narration script plus timed frames."""
    script: str
    frames: List[StoryboardFrame] = field(default_factory=list)
    total_duration: float = 0.0
    used_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "script": self.script,
            "frames": [frame.to_dict() for frame in self.frames],
            "total_duration": self.total_duration,
            "used_fallback": self.used_fallback,
        }


def fallback_storyboard(concept: str, number_of_frames: int, duration: float) -> Storyboard:
    """Evenly timed storyboard that needs no model output."""
    frame_duration = duration / number_of_frames
    frames = [
        StoryboardFrame(
            title=f"Frame {i + 1}",
            description=f"Scene {i + 1} for: {concept}",
            duration=frame_duration,
        )
        for i in range(number_of_frames)
    ]
    return Storyboard(
        script=f"This is a storyboard for: {concept}",
        frames=frames,
        total_duration=duration,
        used_fallback=True,
    )


class StoryboardService:
    """Plans video storyboards through the text capability."""

    def __init__(self, llm: Optional[LLMService] = None):
        self.llm = llm or LLMService()

    async def generate_storyboard(
        self,
        concept: str,
        number_of_frames: int = 5,
        duration: float = 30,
    ) -> Storyboard:
        """
        Plan a storyboard for `concept`.

        Args:
            concept: What the video is about
            number_of_frames: Requested frame count
            duration: Requested total length in seconds

        Returns:
            Storyboard (used_fallback=True when the model output was unusable)

        Raises:
            ProviderUnavailable / ProviderError: text capability failed
        """
        number_of_frames = max(1, int(number_of_frames))
        duration = duration if duration and duration > 0 else 30

        prompt = f"""Create a {number_of_frames}-frame storyboard for a {duration}-second video about: "{concept}"

Each frame should have:
- A clear, descriptive title
- A detailed visual description (what we see on screen)
- Duration in seconds (total should add up to ~{duration} seconds)

Also write a complete script/narration for the video.

Return ONLY valid JSON, no other text."""

        logger.info(f"[STORYBOARD] Planning {number_of_frames} frames / {duration}s")

        result = await self.llm.generate_text(
            prompt=prompt,
            system_prompt=STORYBOARD_SYSTEM_PROMPT,
            temperature=0.8,
            max_tokens=2000,
        )

        decoded = decode_structured(
            result.content,
            StoryboardPayload,
            label="storyboard",
        )
        if decoded.used_fallback:
            return fallback_storyboard(concept, number_of_frames, duration)

        payload = decoded.value
        default_duration = duration / number_of_frames
        frames = [
            StoryboardFrame(
                title=frame.title or "Untitled Frame",
                description=frame.description,
                duration=frame.duration or default_duration,
            )
            for frame in payload.frames
        ]

        storyboard = Storyboard(
            script=payload.script,
            frames=frames,
            total_duration=sum(frame.duration for frame in frames),
        )
        logger.info(f"[STORYBOARD] {len(frames)} frames, {storyboard.total_duration:.1f}s total")
        return storyboard
