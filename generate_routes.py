"""Generation relay: forwards a prompt to Cohere and returns the raw text."""
from log import get_logger

logger = get_logger("englishmate.generate_routes")

from fastapi import APIRouter, Request

from llm import generate_text, GenerationError
from translate_routes import RELAY_METHODS, read_json_object, error_response

router = APIRouter()


@router.api_route("/api/cohere", methods=RELAY_METHODS, tags=["Relay"],
                  summary="Generate text from a prompt")
async def generate(request: Request):
    if request.method != "POST":
        logger.warning("Invalid method", extra={"endpoint": "/api/cohere", "detail": request.method})
        return error_response(405, "Method not allowed")

    body = await read_json_object(request)
    prompt = body.get("prompt")
    if not prompt or not isinstance(prompt, str):
        return error_response(400, "Missing parameter: prompt is required.")

    try:
        text = await generate_text(prompt)
    except GenerationError as e:
        return error_response(e.status_code, e.message)

    return {"text": text}
