"""Machine translation between Hebrew and English."""
from .gemini import GeminiClient, GeminiConfig
from .service import (
    FAILED_PLACEHOLDER,
    PENDING_PLACEHOLDER,
    TranslationResult,
    TranslationService,
    is_placeholder,
)

__all__ = [
    "FAILED_PLACEHOLDER",
    "GeminiClient",
    "GeminiConfig",
    "PENDING_PLACEHOLDER",
    "TranslationResult",
    "TranslationService",
    "is_placeholder",
]
