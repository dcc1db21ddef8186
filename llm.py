"""Upstream provider clients: Cohere text generation and MyMemory translation."""
import os
from typing import Optional

from log import get_logger, log_upstream_call

logger = get_logger("englishmate.llm")

import httpx

# --- Config ---
COHERE_URL = os.environ.get("COHERE_URL", "https://api.cohere.com")
COHERE_MODEL = os.environ.get("COHERE_MODEL", "command-r")
COHERE_TEMPERATURE = float(os.environ.get("COHERE_TEMPERATURE", "0.3"))
GENERATE_TIMEOUT = float(os.environ.get("GENERATE_TIMEOUT", "120"))

MYMEMORY_URL = os.environ.get("MYMEMORY_URL", "https://api.mymemory.translated.net/get")
SOURCE_LANGUAGE = os.environ.get("ENGLISHMATE_SOURCE_LANG", "en")
# Unset means no timeout.
TRANSLATE_TIMEOUT: Optional[float] = float(os.environ["TRANSLATE_TIMEOUT"]) if os.environ.get("TRANSLATE_TIMEOUT") else None


def cohere_api_key() -> Optional[str]:
    return os.environ.get("COHERE_API_KEY") or None


class ProviderError(Exception):
    """An upstream call failed; `status_code` is what the relay should answer with."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class TranslationError(ProviderError):
    pass


class GenerationError(ProviderError):
    pass


async def translate_text(text: str, target_lang: str) -> str:
    """Translate `text` from English into `target_lang` via MyMemory.

    Raises TranslationError with the status the relay should return:
    the upstream status for non-2xx answers, 500 for malformed bodies
    and transport failures.
    """
    params = {"q": text, "langpair": f"{SOURCE_LANGUAGE}|{target_lang}"}
    try:
        with log_upstream_call(logger, "MyMemory responded", "mymemory") as extra:
            async with httpx.AsyncClient(timeout=TRANSLATE_TIMEOUT) as client:
                resp = await client.get(MYMEMORY_URL, params=params, headers={"Content-Type": "application/json"})
            extra["status_code"] = resp.status_code
    except httpx.HTTPError as e:
        logger.error("Translation request failed", extra={"component": "mymemory", "detail": str(e)})
        raise TranslationError(500, "Translation failed due to server error.") from e

    if not resp.is_success:
        logger.error("MyMemory API error", extra={
            "component": "mymemory", "status_code": resp.status_code, "detail": resp.text[:500],
        })
        raise TranslationError(resp.status_code, f"Translation API error: {resp.reason_phrase}")

    try:
        data = resp.json()
    except ValueError:
        data = None
    response_data = data.get("responseData") if isinstance(data, dict) else None
    translated = response_data.get("translatedText") if isinstance(response_data, dict) else None
    if not translated or not isinstance(translated, str):
        logger.error("Unexpected translation response format", extra={"component": "mymemory", "detail": str(data)[:500]})
        raise TranslationError(500, "Unexpected translation response format.")
    return translated


async def generate_text(prompt: str) -> str:
    """Send `prompt` to the Cohere chat API and return the reply text."""
    api_key = cohere_api_key()
    if not api_key:
        raise GenerationError(503, "Generation service is not configured.")

    try:
        with log_upstream_call(logger, "Cohere responded", "cohere") as extra:
            async with httpx.AsyncClient(timeout=GENERATE_TIMEOUT) as client:
                resp = await client.post(
                    f"{COHERE_URL}/v1/chat",
                    headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
                    json={"message": prompt, "model": COHERE_MODEL, "temperature": COHERE_TEMPERATURE},
                )
            extra["status_code"] = resp.status_code
    except httpx.HTTPError as e:
        logger.error("Generation request failed", extra={"component": "cohere", "detail": str(e)})
        raise GenerationError(500, "Generation failed due to server error.") from e

    if not resp.is_success:
        logger.error("Cohere API error", extra={
            "component": "cohere", "status_code": resp.status_code, "detail": resp.text[:500],
        })
        raise GenerationError(resp.status_code, f"Generation API error: {resp.reason_phrase}")

    try:
        data = resp.json()
    except ValueError:
        data = None
    text = data.get("text") if isinstance(data, dict) else None
    if not isinstance(text, str):
        logger.error("Unexpected generation response format", extra={"component": "cohere", "detail": str(data)[:500]})
        raise GenerationError(500, "Unexpected generation response format.")
    return text


async def check_translator_connectivity(target_lang: str) -> bool:
    try:
        async with httpx.AsyncClient(timeout=10) as client:
            resp = await client.get(MYMEMORY_URL, params={"q": "hello", "langpair": f"{SOURCE_LANGUAGE}|{target_lang}"})
            return resp.status_code == 200
    except httpx.HTTPError:
        logger.warning("MyMemory not reachable", extra={"component": "mymemory"})
        return False
