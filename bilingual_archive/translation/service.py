"""Best-effort translation of archive content."""
from dataclasses import dataclass
import logging
import re
from typing import Optional

from .gemini import GeminiClient, GeminiConfig
from .prompts import SYSTEM_INSTRUCTION, build_translation_prompt
from ..config import ArchiveSettings
from ..exceptions import TranslationUnavailableError
from ..models.node import TranslationStatus

logger = logging.getLogger(__name__)

PENDING_PLACEHOLDER = {
    "en": "<p><em>Translating to English...</em></p>",
    "he": "<p><em>מתרגם לעברית...</em></p>",
}

FAILED_PLACEHOLDER = (
    '<p><span style="color: red;">Translation error. '
    "Please trigger the translation again from the admin console.</span></p>"
)


def is_placeholder(html: Optional[str]) -> bool:
    """Whether ``html`` carries no real content: empty or a status placeholder."""
    if not html or not html.strip():
        return True
    return html in PENDING_PLACEHOLDER.values() or html == FAILED_PLACEHOLDER


_FENCE = re.compile(r"^```(?:html)?\s*(.*?)\s*```$", re.DOTALL)


@dataclass
class TranslationResult:
    """Outcome of a translation attempt."""
    html: str
    status: TranslationStatus

    @property
    def ok(self) -> bool:
        return self.status == TranslationStatus.READY


class TranslationService:
    """Translates HTML between Hebrew and English without ever raising."""

    def __init__(
        self,
        client: GeminiClient,
        tone: str = "scholarly",
        complexity: str = "detailed"
    ):
        self.client = client
        self.tone = tone
        self.complexity = complexity

    @classmethod
    def from_settings(cls, settings: ArchiveSettings) -> "TranslationService":
        """Create a service backed by Gemini from archive settings."""
        config = GeminiConfig(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.gemini_timeout,
        )
        return cls(
            GeminiClient(config),
            tone=settings.translation_tone,
            complexity=settings.translation_complexity,
        )

    async def close(self) -> None:
        await self.client.close()

    async def translate(self, html: str, target_language: str = "en") -> TranslationResult:
        """Translate HTML into ``target_language`` ("en" or "he").

        Failures are logged and downgraded to placeholder content with a
        ``failed`` status.
        """
        source_language = "he" if target_language == "en" else "en"
        if not html.strip():
            return TranslationResult(html="", status=TranslationStatus.READY)
        prompt = build_translation_prompt(
            html,
            source_language,
            target_language,
            tone=self.tone,
            complexity=self.complexity,
        )
        try:
            translated = await self.client.generate(prompt, SYSTEM_INSTRUCTION)
        except TranslationUnavailableError as e:
            logger.error(f"Translation to {target_language} failed: {e}")
            return TranslationResult(html=FAILED_PLACEHOLDER, status=TranslationStatus.FAILED)
        return TranslationResult(html=_strip_fence(translated), status=TranslationStatus.READY)


def _strip_fence(text: str) -> str:
    match = _FENCE.match(text.strip())
    return match.group(1) if match else text.strip()

