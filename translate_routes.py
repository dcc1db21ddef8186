"""Translation relay: forwards text to MyMemory and normalizes the answer."""
import json

from log import get_logger

logger = get_logger("englishmate.translate_routes")

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from llm import translate_text, TranslationError

router = APIRouter()

RELAY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


async def read_json_object(request: Request) -> dict:
    """Request body as a dict; anything unparsable counts as empty."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return body if isinstance(body, dict) else {}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@router.api_route("/api/translate", methods=RELAY_METHODS, tags=["Relay"],
                  summary="Translate English text into a target language")
async def translate(request: Request):
    logger.info("Received translation request", extra={"endpoint": "/api/translate", "detail": request.method})

    if request.method != "POST":
        logger.warning("Invalid method", extra={"endpoint": "/api/translate", "detail": request.method})
        return error_response(405, "Method not allowed")

    body = await read_json_object(request)
    text = body.get("text")
    target_lang = body.get("targetLang")
    if not text or not target_lang or not isinstance(text, str) or not isinstance(target_lang, str):
        logger.warning("Missing parameters", extra={"endpoint": "/api/translate"})
        return error_response(400, "Missing parameters: text and targetLang are required.")

    try:
        translated = await translate_text(text, target_lang)
    except TranslationError as e:
        return error_response(e.status_code, e.message)

    return {"translatedText": translated}
