"""
DALL-E Service - Image synthesis capability.
Generates key art through OpenAI's images API.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any

import httpx

from omniforge.providers.exceptions import ProviderError, ProviderUnavailable
from omniforge.providers.http import raise_for_provider_error, auth_headers

logger = logging.getLogger(__name__)


@dataclass
class GeneratedImage:
    """Generated image metadata."""
    url: str
    model: str
    revised_prompt: Optional[str] = None
    width: int = 1024
    height: int = 1024

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "revised_prompt": self.revised_prompt,
            "model": self.model,
            "width": self.width,
            "height": self.height,
        }


class DalleService:
    """
    DALL-E Image Generation Service.

    One images/generations call per invocation, no retries. Missing key raises
    ProviderUnavailable; a response without an image URL raises ProviderError.
    """

    PROVIDER = "dalle"

    # DALL-E 3 accepts only these sizes
    SUPPORTED_SIZES = {"1024x1024", "1792x1024", "1024x1792"}

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        from omniforge.config import config
        self.api_key = api_key or config.ai.openai_api_key or ""
        self.model = model or config.ai.image_model
        self.base_url = (base_url or config.ai.openai_base_url).rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=config.production.http_timeout_seconds)

        if not self.api_key or self.api_key.startswith("PASTE_"):
            logger.warning("[DALLE] OpenAI API key not configured - image generation disabled")
            self.api_key = ""
        else:
            masked_key = self.api_key[:8] + "..." + self.api_key[-4:] if len(self.api_key) > 12 else "***"
            logger.info(f"[DALLE] Image generation enabled ({self.model}, key {masked_key})")

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    async def generate_image(
        self,
        prompt: str,
        width: int = 1024,
        height: int = 1024,
        model: Optional[str] = None,
        quality: str = "standard",
    ) -> GeneratedImage:
        """
        Generate a single image.

        Args:
            prompt: Image prompt
            width: Pixel width
            height: Pixel height
            model: Override the configured model
            quality: "standard" or "hd"

        Returns:
            GeneratedImage with URL and revised prompt
        """
        if not self.api_key:
            raise ProviderUnavailable(self.PROVIDER, "OPENAI_API_KEY not configured")

        model = model or self.model
        size = f"{width}x{height}"
        if model == "dall-e-3" and size not in self.SUPPORTED_SIZES:
            logger.warning(f"[DALLE] Unsupported size {size} - using 1024x1024")
            width, height, size = 1024, 1024, "1024x1024"

        payload = {
            "model": model,
            "prompt": prompt,
            "n": 1,
            "size": size,
            "quality": quality,
            "response_format": "url",
        }

        logger.info(f"[DALLE] Generating image: {prompt[:100]}...")

        try:
            response = await self.client.post(
                f"{self.base_url}/images/generations",
                headers=auth_headers(self.api_key),
                json=payload,
            )
        except httpx.HTTPError as e:
            raise ProviderError(self.PROVIDER, f"Image request failed: {e}") from e

        raise_for_provider_error(self.PROVIDER, response)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(self.PROVIDER, "Image response was not JSON") from e

        images = data.get("data") or []
        if not images:
            raise ProviderError(self.PROVIDER, "No image data in response")

        image_data = images[0]
        url = image_data.get("url")
        if not url:
            raise ProviderError(self.PROVIDER, "No image URL in response")

        logger.info("[DALLE] Image generated")
        return GeneratedImage(
            url=url,
            model=model,
            revised_prompt=image_data.get("revised_prompt"),
            width=width,
            height=height,
        )

    async def close(self):
        """Close the HTTP client."""
        if self._owns_client:
            await self.client.aclose()
