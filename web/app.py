"""
CaptionGenie — Web App
FastAPI + Jinja2 + Tailwind, one local user.

Pages:
- /                    Composer: post idea, image upload, options, results, history

API:
- /api/health          Liveness + whether a Gemini key is configured
- /api/options         Tones, platforms, defaults, image limits
- /api/quick-analysis  Local emotional-power + length heuristics (no LLM)
- /api/generate        Caption + hashtags + SEO insights (+ auto input SEO)
- /api/seo/analyze     SEO analysis of the post idea
- /api/seo/fix         Rewrite the post idea for SEO, then re-analyze
- /api/history         Last 5 generations, newest first
- /api/theme           Light/dark preference (GET, POST /toggle)
"""
import os
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates
import structlog

# ── Add project root to path ──
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from agents.caption_studio import CaptionStudio, StudioState, build_request
from core.config import get_settings
from core.errors import ImageProcessingError, RequestInProgressError, ValidationError
from core.history import HistoryStore
from core.models import Platform, Tone
from core.preferences import ThemePreference
from integrations.gemini_gateway import GeminiGateway
from integrations.image_payload import load_image_payload

logger = structlog.get_logger()

# ── Process-wide singletons (created on first use, replaceable in tests) ──
_studio: Optional[CaptionStudio] = None
_theme: Optional[ThemePreference] = None


def get_studio() -> CaptionStudio:
    global _studio
    if _studio is None:
        settings = get_settings()
        history = HistoryStore(settings.history_path, limit=settings.history_limit)
        history.load()
        _studio = CaptionStudio(gateway=GeminiGateway(), history=history)
    return _studio


def get_theme() -> ThemePreference:
    global _theme
    if _theme is None:
        settings = get_settings()
        _theme = ThemePreference(settings.preferences_path, default=settings.default_theme)
    return _theme


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load history and theme before the first request."""
    studio = get_studio()
    get_theme()
    logger.info("app.started", history_items=len(studio.history.items),
                gemini_configured=bool(get_settings().gemini_api_key))
    yield


app = FastAPI(title="CaptionGenie", lifespan=lifespan)


# ── Exception Handlers ──
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})


@app.exception_handler(ImageProcessingError)
async def image_error_handler(request: Request, exc: ImageProcessingError):
    logger.warning("image_rejected", path=str(request.url.path), error=str(exc))
    return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})


@app.exception_handler(RequestInProgressError)
async def in_progress_handler(request: Request, exc: RequestInProgressError):
    return JSONResponse(status_code=409, content={"success": False, "error": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all: prevents raw tracebacks from leaking to clients."""
    logger.error("unhandled_error",
                 path=str(request.url.path),
                 method=request.method,
                 error=str(exc),
                 error_type=type(exc).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "detail": None if get_settings().is_production else str(exc),
        },
    )


# Templates
templates_dir = os.path.join(os.path.dirname(__file__), "templates")
templates = Jinja2Templates(directory=templates_dir)


def _state_response(state: StudioState) -> JSONResponse:
    status = {"validation": 400, "generation": 502}.get(state.error_kind or "", 200)
    body = state.to_dict()
    body["success"] = state.error is None
    return JSONResponse(status_code=status, content=body)


def _options() -> dict:
    settings = get_settings()
    return {
        "tones": [t.value for t in Tone],
        "platforms": [p.value for p in Platform],
        "defaults": {
            "tone": Tone.AUTO.value,
            "platform": Platform.INSTAGRAM.value,
            "hashtagCount": settings.default_hashtag_count,
            "includeTitle": False,
            "enhanceStyle": False,
            "autoOptimizeSeo": False,
        },
        "hashtagCountRange": [0, 30],
        "image": {
            "maxBytes": settings.max_image_bytes,
            "acceptedTypes": list(settings.accepted_image_types),
        },
    }


# ════════════════════════════════════════════════════════════════
# HTML PAGES
# ════════════════════════════════════════════════════════════════

@app.get("/", response_class=HTMLResponse)
async def composer(request: Request):
    return templates.TemplateResponse(request, "index.html", {
        "options": _options(),
        "theme": get_theme().theme,
    })


# ════════════════════════════════════════════════════════════════
# API
# ════════════════════════════════════════════════════════════════

@app.get("/api/health")
async def api_health():
    studio = get_studio()
    return {
        "status": "ok",
        "gemini_configured": bool(get_settings().gemini_api_key),
        "busy": studio.busy,
        "history_items": len(studio.history.items),
    }


@app.get("/api/options")
async def api_options():
    return _options()


async def _json_object(request: Request) -> dict:
    try:
        data = await request.json()
    except ValueError as e:
        raise ValidationError("Request body must be valid JSON.") from e
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


@app.post("/api/quick-analysis")
async def api_quick_analysis(request: Request):
    """Body: {text}. Pure local heuristics, safe to call on every keystroke."""
    data = await _json_object(request)
    text = data.get("text") or ""
    if not isinstance(text, str):
        raise ValidationError("text must be a string")
    return get_studio().quick_analysis(text).to_dict()


@app.post("/api/generate")
async def api_generate(
    post_idea: str = Form(""),
    tone: str = Form(Tone.AUTO.value),
    platform: str = Form(Platform.INSTAGRAM.value),
    include_title: bool = Form(False),
    hashtag_count: int = Form(10),
    enhance_style: bool = Form(False),
    auto_optimize_seo: bool = Form(False),
    image: Optional[UploadFile] = File(None),
):
    settings = get_settings()
    payload = None
    if image is not None and image.filename:
        # One byte past the cap is enough for load_image_payload to reject it
        data = await image.read(settings.max_image_bytes + 1)
        payload = load_image_payload(
            data,
            image.content_type or None,
            max_bytes=settings.max_image_bytes,
            accepted_types=settings.accepted_image_types,
        )

    req = build_request(
        post_idea=post_idea,
        tone=tone,
        platform=platform,
        include_title=include_title,
        hashtag_count=hashtag_count,
        enhance_style=enhance_style,
        image=payload,
    )
    state = await get_studio().generate(req, auto_optimize_seo=auto_optimize_seo)
    return _state_response(state)


@app.post("/api/seo/analyze")
async def api_seo_analyze(request: Request):
    """Body: {postIdea}"""
    data = await _json_object(request)
    state = await get_studio().analyze_seo(str(data.get("postIdea") or ""))
    return _state_response(state)


@app.post("/api/seo/fix")
async def api_seo_fix(request: Request):
    """Body: {postIdea}. Response postIdea carries the rewritten text."""
    data = await _json_object(request)
    state = await get_studio().fix_seo(str(data.get("postIdea") or ""))
    return _state_response(state)


@app.get("/api/history")
async def api_history():
    return [item.to_json_dict() for item in get_studio().history.items]


@app.get("/api/theme")
async def api_theme():
    return {"theme": get_theme().theme}


@app.post("/api/theme/toggle")
async def api_theme_toggle():
    theme = get_theme().toggle()
    logger.info("theme.changed", theme=theme)
    return {"theme": theme}
