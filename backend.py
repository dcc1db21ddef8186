"""EnglishMate — bilingual English tutor backend."""
import os
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles

from log import get_logger

logger = get_logger("englishmate")

from models import TARGET_LANGUAGE
from llm import COHERE_URL, COHERE_MODEL, MYMEMORY_URL, cohere_api_key, check_translator_connectivity
from sessions import session_count
from translate_routes import router as translate_router
from generate_routes import router as generate_router
from tutor_routes import router as tutor_router

STATIC_DIR = Path(__file__).parent / "static"
LANDING_PAGE = "/landing.html"

app = FastAPI(title="EnglishMate")
app.include_router(translate_router)
app.include_router(generate_router)
app.include_router(tutor_router)


@app.get("/", include_in_schema=False)
async def index():
    return RedirectResponse(LANDING_PAGE)


@app.get("/api/health", tags=["System"], summary="Health check with provider status")
async def health_check():
    translator_ok = await check_translator_connectivity(TARGET_LANGUAGE)
    generator_configured = cohere_api_key() is not None
    return {
        "status": "ok" if translator_ok and generator_configured else "degraded",
        "translator": {"reachable": translator_ok, "url": MYMEMORY_URL, "target_language": TARGET_LANGUAGE},
        "generator": {"configured": generator_configured, "url": COHERE_URL, "model": COHERE_MODEL},
        "sessions": session_count(),
    }


app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")


if __name__ == "__main__":
    import uvicorn

    host = os.environ.get("ENGLISHMATE_HOST", "0.0.0.0")
    port = int(os.environ.get("ENGLISHMATE_PORT", "8847"))
    logger.info("Starting EnglishMate", extra={"component": "server", "detail": f"{host}:{port}"})
    uvicorn.run(app, host=host, port=port)
