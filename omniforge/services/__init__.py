"""
Services Module - Generation capability wrappers.
Each service wraps exactly one outbound call per invocation.
"""
from .llm_service import LLMService, TextResult
from .dalle_service import DalleService, GeneratedImage
from .tts_service import TTSService, SpeechResult
from .storyboard_service import StoryboardService, Storyboard, StoryboardFrame
from .manga_generator import MangaGenerator, MangaProduction

__all__ = [
    "LLMService",
    "TextResult",
    "DalleService",
    "GeneratedImage",
    "TTSService",
    "SpeechResult",
    "StoryboardService",
    "Storyboard",
    "StoryboardFrame",
    "MangaGenerator",
    "MangaProduction",
]
