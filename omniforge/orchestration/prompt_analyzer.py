"""
Prompt Analyzer - Decides what a production should contain.

One strict-JSON text completion classifies the prompt's intent and picks the
modalities. Any failure yields the default analysis (general intent, text and
image enabled, raw prompt reused as the enhanced prompts).
"""
import json
import logging
from typing import Optional

from omniforge.providers.exceptions import ProviderError
from omniforge.schemas import AnalysisPayload
from omniforge.services.json_recovery import decode_structured
from omniforge.services.llm_service import LLMService

from .enums import Modality, PrimaryIntent
from .exceptions import AnalysisError
from .models import PromptAnalysis

logger = logging.getLogger(__name__)

ANALYZER_SYSTEM_PROMPT = (
    "You are an expert content strategist who understands how to create "
    "production-quality multi-modal content."
)

ANALYSIS_TEMPLATE = """You are an AI content strategist. Analyze this user prompt and determine what types of content should be generated for a complete, production-ready output.

User Prompt: {prompt}

Respond in JSON format with this structure:
{{
  "primaryIntent": "story|marketing|educational|entertainment|product|general",
  "contentTypes": {{"text": true, "image": true, "audio": false, "video": false}},
  "style": "brief description of style",
  "tone": "professional|casual|creative|formal|inspirational",
  "targetAudience": "who this is for",
  "suggestedFormats": {{
    "textFormat": "article|script|blog|social|email|story",
    "imageStyle": "photorealistic|illustration|abstract|minimal|vibrant",
    "audioType": "narration|music|podcast|soundscape",
    "videoStyle": "cinematic|documentary|promotional|tutorial"
  }},
  "enhancedPrompts": {{
    "text": "enhanced prompt for text generation",
    "image": "enhanced prompt for image generation (if needed)",
    "audio": "enhanced prompt for audio generation (if needed)",
    "video": "enhanced prompt for video storyboard (if needed)"
  }}
}}

Be intelligent about what's needed. For example:
- A story needs text + images + possibly audio narration
- A product launch needs marketing copy + product images + promotional video storyboard
- Educational content needs clear text + diagrams + narration
- General creative prompts should generate complementary multi-modal content

Always generate at least 2 content types for a "production" feel."""


def default_analysis(prompt: str) -> PromptAnalysis:
    """Analysis used whenever classification is unavailable."""
    return PromptAnalysis(
        primary_intent=PrimaryIntent.GENERAL,
        content_types={
            Modality.TEXT: True,
            Modality.IMAGE: True,
            Modality.AUDIO: False,
            Modality.VIDEO: False,
        },
        style="creative",
        tone="professional",
        target_audience="general audience",
        suggested_formats={"textFormat": "article", "imageStyle": "photorealistic"},
        enhanced_prompts={
            Modality.TEXT: prompt,
            Modality.IMAGE: prompt,
        },
        is_default=True,
    )


class PromptAnalyzer:
    """Classifies prompts through the text capability. Never raises."""

    def __init__(self, llm: Optional[LLMService] = None):
        self.llm = llm or LLMService()

    async def analyze(self, prompt: str) -> PromptAnalysis:
        try:
            return await self._analyze(prompt)
        except (ProviderError, AnalysisError) as e:
            logger.warning(f"[ANALYZER] {e} - using default analysis")
            return default_analysis(prompt)

    async def _analyze(self, prompt: str) -> PromptAnalysis:
        result = await self.llm.generate_text(
            prompt=ANALYSIS_TEMPLATE.format(prompt=json.dumps(prompt, ensure_ascii=False)),
            system_prompt=ANALYZER_SYSTEM_PROMPT,
            temperature=0.3,
            max_tokens=1000,
            json_mode=True,
        )

        decoded = decode_structured(
            result.content,
            AnalysisPayload,
            label="prompt analysis",
        )
        if decoded.used_fallback:
            raise AnalysisError(f"Unusable analysis output: {decoded.reason}")

        payload = decoded.value
        content_types = {}
        for modality in Modality:
            value = payload.content_types.get(modality.value)
            content_types[modality] = value is True

        if not any(content_types.values()):
            raise AnalysisError("Analysis selected no content types")

        enhanced_prompts = {}
        for modality in Modality:
            value = payload.enhanced_prompts.get(modality.value)
            if isinstance(value, str) and value.strip():
                enhanced_prompts[modality] = value.strip()

        analysis = PromptAnalysis(
            primary_intent=PrimaryIntent.from_string(payload.primary_intent),
            content_types=content_types,
            style=payload.style or "creative",
            tone=payload.tone or "professional",
            target_audience=payload.target_audience or "general audience",
            suggested_formats=dict(payload.suggested_formats),
            enhanced_prompts=enhanced_prompts,
        )

        selected = ", ".join(m.value for m in analysis.selected_modalities)
        logger.info(f"[ANALYZER] Intent: {analysis.primary_intent.value}, modalities: {selected}")
        return analysis
