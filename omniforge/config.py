"""
Application Configuration - Environment Variable Management.
Loads and validates configuration from .env file.
"""
import os
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env from project root
PROJECT_ROOT = Path(__file__).parent.parent
ENV_FILE = PROJECT_ROOT / ".env"

if ENV_FILE.exists():
    load_dotenv(ENV_FILE)
    logger.info(f"Loaded environment from {ENV_FILE}")
else:
    logger.debug(f".env file not found at {ENV_FILE}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid integer for {name}={raw!r} - using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid number for {name}={raw!r} - using {default}")
        return default


@dataclass
class AIConfig:
    """Generation provider configuration (OpenAI-compatible API)."""
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    text_model: str = "gpt-4o-mini"
    image_model: str = "dall-e-3"
    tts_model: str = "tts-1"
    tts_voice: str = "alloy"

    @property
    def has_openai(self) -> bool:
        return bool(self.openai_api_key and not self.openai_api_key.startswith("PASTE_"))

    @property
    def masked_key(self) -> str:
        if not self.has_openai:
            return "NOT CONFIGURED"
        key = self.openai_api_key
        return key[:8] + "..." + key[-4:] if len(key) > 12 else "***"


@dataclass
class ProductionConfig:
    """Production pipeline tuning."""
    task_timeout_seconds: float = 300.0  # <= 0 disables the per-task deadline
    storyboard_frames: int = 6
    storyboard_duration: int = 60
    image_size: str = "1024x1024"
    audio_output_dir: Optional[Path] = None
    http_timeout_seconds: float = 120.0
    max_retained_runs: int = 100  # finished runs kept for get_run/get_progress

    @property
    def image_dimensions(self) -> tuple:
        """Parse image_size ("WIDTHxHEIGHT") into a (width, height) tuple."""
        try:
            width, height = self.image_size.lower().split("x")
            return int(width), int(height)
        except ValueError:
            logger.warning(f"Invalid IMAGE_SIZE {self.image_size!r} - using 1024x1024")
            return 1024, 1024


@dataclass
class AppConfig:
    """Main Application Configuration."""
    ai: AIConfig
    production: ProductionConfig = field(default_factory=ProductionConfig)
    storage_backend: str = "memory"
    database_path: str = "data/omniforge.db"
    debug: bool = False

    def __post_init__(self):
        """Validate critical configuration."""
        if self.storage_backend not in ("memory", "sqlite"):
            logger.warning(f"Unknown STORAGE_BACKEND {self.storage_backend!r} - falling back to memory")
            self.storage_backend = "memory"

    def validate(self) -> dict:
        """Validate configuration and return status."""
        return {
            "ai": {
                "openai_configured": self.ai.has_openai,
                "text_model": self.ai.text_model,
                "image_model": self.ai.image_model,
                "tts_model": self.ai.tts_model,
            },
            "production": {
                "task_timeout_seconds": self.production.task_timeout_seconds,
                "storyboard_frames": self.production.storyboard_frames,
                "storyboard_duration": self.production.storyboard_duration,
                "max_retained_runs": self.production.max_retained_runs,
            },
            "database": {
                "backend": self.storage_backend,
                "path": self.database_path,
            },
            # Blueprint and analysis fall back without a key, generation does not
            "ready_for_generation": self.ai.has_openai,
        }

    def log_status(self):
        """Log configuration status (without exposing keys)."""
        status = self.validate()

        logger.info("=" * 50)
        logger.info("Configuration Status:")
        logger.info(f"  OpenAI API: {self.ai.masked_key}")
        logger.info(f"  Text Model: {status['ai']['text_model']}")
        logger.info(f"  Image Model: {status['ai']['image_model']}")
        logger.info(f"  TTS Model: {status['ai']['tts_model']}")
        logger.info(f"  Task Timeout: {status['production']['task_timeout_seconds']}s")
        logger.info(f"  Storage: {status['database']['backend']}")
        logger.info("=" * 50)

        if not status["ready_for_generation"]:
            logger.warning("No OpenAI key configured - every generation task will fail")


def load_config() -> AppConfig:
    """Load configuration from environment variables."""
    ai_config = AIConfig(
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").rstrip("/"),
        text_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        image_model=os.getenv("OPENAI_IMAGE_MODEL", "dall-e-3"),
        tts_model=os.getenv("OPENAI_TTS_MODEL", "tts-1"),
        tts_voice=os.getenv("OPENAI_TTS_VOICE", "alloy"),
    )

    audio_dir = os.getenv("AUDIO_OUTPUT_DIR")

    production_config = ProductionConfig(
        task_timeout_seconds=_env_float("TASK_TIMEOUT_SECONDS", 300.0),
        storyboard_frames=_env_int("STORYBOARD_FRAMES", 6),
        storyboard_duration=_env_int("STORYBOARD_DURATION", 60),
        image_size=os.getenv("IMAGE_SIZE", "1024x1024"),
        audio_output_dir=Path(audio_dir) if audio_dir else None,
        http_timeout_seconds=_env_float("HTTP_TIMEOUT_SECONDS", 120.0),
        max_retained_runs=_env_int("MAX_RETAINED_RUNS", 100),
    )

    return AppConfig(
        ai=ai_config,
        production=production_config,
        storage_backend=os.getenv("STORAGE_BACKEND", "memory").lower(),
        database_path=os.getenv("DATABASE_PATH", "data/omniforge.db"),
        debug=os.getenv("DEBUG", "false").lower() == "true",
    )


# Global config instance
config = load_config()
