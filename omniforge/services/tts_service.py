"""
TTS Service - Speech synthesis capability.
Narrates text through OpenAI's audio/speech API.
"""
import base64
import logging
import math
import uuid
from pathlib import Path
from dataclasses import dataclass
from typing import Optional, Dict, Any

import aiofiles
import httpx

from omniforge.providers.exceptions import ProviderError, ProviderUnavailable
from omniforge.providers.http import raise_for_provider_error, auth_headers

logger = logging.getLogger(__name__)

# Rough speaking rate used for the duration estimate
CHARS_PER_SECOND = 15


@dataclass
class SpeechResult:
    """Result from speech synthesis. Exactly one of url / data_url is set."""
    model: str
    duration: int
    url: Optional[str] = None
    data_url: Optional[str] = None
    format: str = "mp3"
    size_bytes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "data_url": self.data_url,
            "duration": self.duration,
            "format": self.format,
            "size_bytes": self.size_bytes,
            "model": self.model,
        }


class VoicePreset:
    """Voices accepted by the speech endpoint."""
    ALLOY = "alloy"
    ECHO = "echo"
    FABLE = "fable"
    ONYX = "onyx"
    NOVA = "nova"
    SHIMMER = "shimmer"

    ALL = (ALLOY, ECHO, FABLE, ONYX, NOVA, SHIMMER)


def estimate_duration(text: str) -> int:
    """Estimate narration length in whole seconds."""
    return math.ceil(len(text) / CHARS_PER_SECOND)


class TTSService:
    """
    Text-to-Speech Service.

    Returns the audio inline as a base64 data URL, or writes it to
    `output_dir` and returns the file path as url when a directory is set.
    """

    PROVIDER = "tts"
    MIME_TYPES = {"mp3": "audio/mpeg", "wav": "audio/wav", "opus": "audio/opus", "aac": "audio/aac"}

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        voice: Optional[str] = None,
        base_url: Optional[str] = None,
        output_dir: Optional[Path] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        from omniforge.config import config
        self.api_key = api_key or config.ai.openai_api_key or ""
        self.model = model or config.ai.tts_model
        self.voice = voice or config.ai.tts_voice
        self.base_url = (base_url or config.ai.openai_base_url).rstrip("/")
        self.output_dir = output_dir if output_dir is not None else config.production.audio_output_dir
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=config.production.http_timeout_seconds)

        if not self.api_key or self.api_key.startswith("PASTE_"):
            logger.warning("[TTS] OpenAI API key not configured - speech synthesis disabled")
            self.api_key = ""

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    async def generate_speech(
        self,
        text: str,
        voice: Optional[str] = None,
        model: Optional[str] = None,
        response_format: str = "mp3",
    ) -> SpeechResult:
        """
        Synthesize narration for `text`.

        Args:
            text: Text to narrate
            voice: Override the default voice
            model: Override the configured model
            response_format: Audio container (mp3, wav, opus, aac)

        Returns:
            SpeechResult with a data URL or file URL and an estimated duration
        """
        if not self.api_key:
            raise ProviderUnavailable(self.PROVIDER, "OPENAI_API_KEY not configured")
        if not text or not text.strip():
            raise ProviderError(self.PROVIDER, "Nothing to narrate")

        voice = voice or self.voice
        if voice not in VoicePreset.ALL:
            logger.warning(f"[TTS] Unknown voice {voice!r} - using {VoicePreset.ALLOY}")
            voice = VoicePreset.ALLOY
        model = model or self.model

        payload = {
            "model": model,
            "voice": voice,
            "input": text,
            "response_format": response_format,
        }

        logger.info(f"[TTS] Synthesizing {len(text)} chars with voice {voice}")

        try:
            response = await self.client.post(
                f"{self.base_url}/audio/speech",
                headers=auth_headers(self.api_key),
                json=payload,
            )
        except httpx.HTTPError as e:
            raise ProviderError(self.PROVIDER, f"Speech request failed: {e}") from e

        raise_for_provider_error(self.PROVIDER, response)

        audio = response.content
        if not audio:
            raise ProviderError(self.PROVIDER, "Empty audio response")

        result = SpeechResult(
            model=model,
            duration=estimate_duration(text),
            format=response_format,
            size_bytes=len(audio),
        )

        if self.output_dir:
            result.url = await self._write_audio(audio, response_format)
        else:
            mime = self.MIME_TYPES.get(response_format, "application/octet-stream")
            result.data_url = f"data:{mime};base64,{base64.b64encode(audio).decode('ascii')}"

        logger.info(f"[TTS] Narration ready (~{result.duration}s, {result.size_bytes} bytes)")
        return result

    async def _write_audio(self, audio: bytes, extension: str) -> str:
        output_dir = Path(self.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / f"{uuid.uuid4()}.{extension}"

        async with aiofiles.open(output_path, "wb") as audio_file:
            await audio_file.write(audio)

        return str(output_path)

    async def close(self):
        """Close the HTTP client."""
        if self._owns_client:
            await self.client.aclose()
