"""Gemini text-generation client."""
from typing import Any, Dict, Optional
import asyncio
import aiohttp

from ..exceptions import TranslationUnavailableError


class GeminiConfig:
    """Configuration for the Gemini client."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: int = 60,
        temperature: float = 0.2
    ):
        """Initialize client config.

        Args:
            api_key: Gemini API key
            model: Model name to use
            base_url: Base API URL
            timeout: Request timeout in seconds
            temperature: Sampling temperature
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.temperature = temperature


class GeminiClient:
    """Client for the Gemini ``generateContent`` endpoint."""

    def __init__(self, config: GeminiConfig):
        """Initialize the client.

        Args:
            config: Client configuration
        """
        self.config = config
        self._session: Optional[aiohttp.ClientSession] = None

    async def _ensure_session(self) -> None:
        """Ensure aiohttp session exists."""
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            self._session = aiohttp.ClientSession(
                headers={"x-goog-api-key": self.config.api_key},
                timeout=timeout
            )

    async def close(self):
        """Close the client session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def generate(self, prompt: str, system_instruction: Optional[str] = None) -> str:
        """Generate text for a prompt.

        Args:
            prompt: User prompt
            system_instruction: Optional system instruction

        Returns:
            str: Text of the first candidate

        Raises:
            TranslationUnavailableError: If the key is missing, the request
                fails, or the response carries no text
        """
        if not self.config.api_key:
            raise TranslationUnavailableError("GEMINI_API_KEY is not set")

        payload: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": self.config.temperature},
        }
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        await self._ensure_session()
        if not self._session:
            raise RuntimeError("Failed to initialize session")

        try:
            response = await self._session.post(
                f"{self.config.base_url}/models/{self.config.model}:generateContent",
                json=payload
            )
            response.raise_for_status()
            data = await response.json()
        except aiohttp.ClientResponseError as e:
            raise TranslationUnavailableError(f"Gemini API error: {e.status} - {e.message}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TranslationUnavailableError(f"Gemini request failed: {e}") from e

        text = _first_candidate_text(data)
        if not text:
            raise TranslationUnavailableError("Gemini returned an empty response")
        return text


def _first_candidate_text(data: Dict[str, Any]) -> str:
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict)).strip()
