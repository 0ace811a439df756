"""
Blueprint Builder - Expands a raw prompt into a cross-media creative brief.

The model is asked for compact JSON. Fields it leaves out are filled from the
prompt; when nothing usable comes back (or the text capability is missing)
the whole blueprint is built from string operations alone.
"""
import logging
import re
from typing import List, Optional

from omniforge.providers.exceptions import ProviderError
from omniforge.schemas import BlueprintPayload
from omniforge.services.json_recovery import decode_structured
from omniforge.services.llm_service import LLMService

from .exceptions import BlueprintError
from .models import Blueprint

logger = logging.getLogger(__name__)

TITLE_PREFIX = "Production: "
SUMMARY_LENGTH = 200
MAX_KEYWORDS = 8
DEFAULT_TONE = "cinematic"

KEYWORD_STRIP = re.compile(r"[^a-z0-9-]")

BLUEPRINT_SYSTEM_PROMPT = "You design cohesive cross-media campaigns. Respond only with compact JSON, no prose."

BLUEPRINT_TEMPLATE = '''You are the executive creative director for an AI production studio.
Based on the concept below, craft a multi-modal creative blueprint and return ONLY valid JSON
with this schema:
{{
  "title": string,
  "summary": string,
  "tone": string,
  "textBrief": string,
  "imagePrompt": string,
  "audioNarration": string,
  "videoStoryboardConcept": string,
  "keywords": string[]
}}

Concept: """{concept}"""'''


def extract_keywords(prompt: str) -> List[str]:
    """First whitespace tokens, lowercased, stripped to [a-z0-9-], empties dropped."""
    keywords = []
    for token in prompt.split()[:MAX_KEYWORDS]:
        keyword = KEYWORD_STRIP.sub("", token.lower())
        if keyword:
            keywords.append(keyword)
    return keywords


def fallback_blueprint(prompt: str) -> Blueprint:
    """Blueprint built without any model call."""
    concept = prompt[:SUMMARY_LENGTH]
    return Blueprint(
        title=f"{TITLE_PREFIX}{concept}",
        summary=concept,
        tone=DEFAULT_TONE,
        text_brief=f"Write a compelling narrative expanding on: {concept}",
        image_prompt=f"Highly detailed, production-ready concept art for: {concept}",
        audio_narration=f"Dramatic narration describing: {concept}",
        video_storyboard_concept=f"Storyboard the following concept: {concept}",
        keywords=extract_keywords(concept),
        used_fallback=True,
    )


def merge_with_fallback(payload: BlueprintPayload, prompt: str) -> Blueprint:
    """Fill every field the model left out from the prompt-derived fallback."""
    fallback = fallback_blueprint(prompt)
    return Blueprint(
        title=payload.title or fallback.title,
        summary=payload.summary or fallback.summary,
        tone=payload.tone or fallback.tone,
        text_brief=payload.text_brief or fallback.text_brief,
        image_prompt=payload.image_prompt or fallback.image_prompt,
        audio_narration=payload.audio_narration or fallback.audio_narration,
        video_storyboard_concept=payload.video_storyboard_concept or fallback.video_storyboard_concept,
        keywords=(payload.keywords or fallback.keywords)[:10],
    )


class BlueprintBuilder:
    """Derives a Blueprint for a prompt. Never raises."""

    def __init__(self, llm: Optional[LLMService] = None):
        self.llm = llm or LLMService()

    async def build_blueprint(self, prompt: str) -> Blueprint:
        try:
            blueprint = await self._build(prompt)
        except (ProviderError, BlueprintError) as e:
            logger.warning(f"[BLUEPRINT] {e} - using fallback blueprint")
            return fallback_blueprint(prompt)

        logger.info(f"[BLUEPRINT] {blueprint.title[:80]} ({len(blueprint.keywords)} keywords)")
        return blueprint

    async def _build(self, prompt: str) -> Blueprint:
        result = await self.llm.generate_text(
            prompt=BLUEPRINT_TEMPLATE.format(concept=prompt),
            system_prompt=BLUEPRINT_SYSTEM_PROMPT,
            temperature=0.8,
            max_tokens=800,
        )

        decoded = decode_structured(
            result.content,
            BlueprintPayload,
            label="blueprint",
        )
        if decoded.used_fallback:
            raise BlueprintError(f"Unusable blueprint output: {decoded.reason}")

        return merge_with_fallback(decoded.value, prompt)
