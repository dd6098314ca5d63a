"""
Report Translation

Best-effort translation of a generated report through the public Google
Translate endpoint. Failures never raise: the caller gets placeholder
text to show in place of the translation, and saved report data is
never touched.
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from src.config import Settings, get_settings

logger = logging.getLogger(__name__)

TRANSLATION_FAILED_TEXT = "Translation failed. Please try again."
TRANSLATION_UNAVAILABLE_TEXT = "Translation service unavailable. Please try again later."


@dataclass
class TranslationResult:
    """Translated text, or a placeholder when ok is False."""

    text: str
    ok: bool


def extract_translation(payload: Any) -> str:
    """
    Join the translated segments of a translate_a/single response.

    The response is a nested list whose first element holds
    [translated, original, ...] entries, one per sentence.
    """
    if not payload or not isinstance(payload, list) or not payload[0]:
        return ""
    return "".join(
        segment[0]
        for segment in payload[0]
        if isinstance(segment, list) and segment and isinstance(segment[0], str)
    )


class TranslationClient:
    """Thin async client for the translation endpoint."""

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings or get_settings()
        self._http_client = http_client

    async def translate(self, text: str) -> TranslationResult:
        """
        Translate report text into the configured target language.

        Args:
            text: Report text (must be non-blank)

        Returns:
            TranslationResult; on any failure ok is False and text is a placeholder

        Raises:
            ValueError: If text is blank
        """
        if not text.strip():
            raise ValueError("Nothing to translate")

        params = {
            "client": "gtx",
            "sl": self.settings.translate_source_language,
            "tl": self.settings.translate_target_language,
            "dt": "t",
            "q": text,
        }

        try:
            if self._http_client is not None:
                response = await self._http_client.get(self.settings.translate_url, params=params)
            else:
                async with httpx.AsyncClient(timeout=self.settings.translate_timeout_seconds) as client:
                    response = await client.get(self.settings.translate_url, params=params)
            response.raise_for_status()
            translated = extract_translation(response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Translation request failed: {e}")
            return TranslationResult(text=TRANSLATION_UNAVAILABLE_TEXT, ok=False)

        if not translated:
            return TranslationResult(text=TRANSLATION_FAILED_TEXT, ok=False)
        return TranslationResult(text=translated, ok=True)
