import os
import logging
from functools import lru_cache
from pathlib import Path
from fastapi import FastAPI, UploadFile, HTTPException, File, Form, Depends, Header, Query, Request, Cookie
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from . import __version__
from .errors import BatchFailureError, ValidationError
from .session import SessionStore, StudioSession
from .variations import STYLE_CATALOG, VariationOrchestrator, encode_data_uri, get_generator
from .variations.clients.gemini import GeminiGenerator

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="ProFoto Studio",
    description="Upload a product photo and get four AI-generated background variations",
    version=__version__
)

# Setup Templates
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

# Security Configuration
API_KEY = os.getenv("APP_API_KEY")


def env_number(name: str, default=None, cast=float):
    """
    Read a numeric environment variable, naming it when the value is invalid.
    """
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number, got {raw!r}") from None


# Upload limits
MAX_UPLOAD_BYTES = env_number("MAX_UPLOAD_BYTES", 5 * 1024 * 1024, cast=int)
ALLOWED_CONTENT_TYPES = {"image/png", "image/jpeg", "image/jpg", "image/webp"}

# Optional batch deadline in seconds, unset lets every call finish
GENERATION_TIMEOUT = env_number("GENERATION_TIMEOUT")

SESSION_COOKIE = "profoto_session"

sessions = SessionStore(max_sessions=env_number("MAX_SESSIONS", 256, cast=int))


def get_api_key(
    api_key_header: str = Header(None, alias="X-API-Key"),
    api_key_query: str = Query(None, alias="api_key")
):
    """
    Validate API Key from Header or Query Parameter.
    """
    if not API_KEY:
        return True # Open if no key configured (dev mode)

    key = api_key_header or api_key_query
    if key != API_KEY:
        raise HTTPException(status_code=403, detail="Invalid API Key")
    return key


@lru_cache(maxsize=1)
def get_orchestrator() -> VariationOrchestrator:
    """Shared orchestrator backed by the configured generator."""
    return VariationOrchestrator(get_generator("gemini"), timeout=GENERATION_TIMEOUT)


def get_session(profoto_session: Optional[str] = Cookie(None)) -> StudioSession:
    """Read-only lookup. Unknown ids get a transient IDLE session that is not stored."""
    return sessions.get(profoto_session)


def get_saved_session(session: StudioSession = Depends(get_session)) -> StudioSession:
    """Lookup for routes that write session state."""
    sessions.save(session)
    return session


def redirect_home(session: StudioSession) -> RedirectResponse:
    response = RedirectResponse(url="/", status_code=303)
    response.set_cookie(SESSION_COOKIE, session.session_id, httponly=True, samesite="lax")
    return response


@app.get("/", response_class=HTMLResponse)
def read_root(request: Request, session: StudioSession = Depends(get_session)):
    """
    Serve the studio page for this browser session.
    """
    response = templates.TemplateResponse(
        request,
        "index.html",
        {
            "session": session,
            "styles": STYLE_CATALOG,
            "max_upload_mb": MAX_UPLOAD_BYTES // (1024 * 1024),
        },
    )
    if session.session_id in sessions:
        response.set_cookie(SESSION_COOKIE, session.session_id, httponly=True, samesite="lax")
    return response


@app.post("/upload")
async def upload_image(
    file: UploadFile = File(...),
    session: StudioSession = Depends(get_saved_session)
):
    """
    Load a product photo into the session. PNG, JPEG or WEBP up to the upload limit.
    """
    # One byte past the limit is enough to reject
    content = await file.read(MAX_UPLOAD_BYTES + 1)

    if file.content_type not in ALLOWED_CONTENT_TYPES:
        session.error_message = f"unsupported file type {file.content_type}, use PNG, JPG or WEBP"
        return redirect_home(session)

    if len(content) > MAX_UPLOAD_BYTES:
        session.error_message = f"file is too large, maximum {MAX_UPLOAD_BYTES // (1024 * 1024)}MB"
        return redirect_home(session)

    try:
        session.load_image(encode_data_uri(content, file.content_type))
    except ValidationError as e:
        session.error_message = str(e)

    logger.info(f"Session {session.session_id} loaded {file.filename} ({len(content)} bytes)")
    return redirect_home(session)


@app.post("/generate")
async def generate_variations(
    prompt: str = Form(""),
    session: StudioSession = Depends(get_saved_session),
    orchestrator: VariationOrchestrator = Depends(get_orchestrator)
):
    """
    Generate the four variations for the session's image.
    """
    await session.generate(orchestrator, prompt)
    return redirect_home(session)


@app.post("/reset")
def reset_session(session: StudioSession = Depends(get_saved_session)):
    """
    Clear image, prompt and results.
    """
    session.reset()
    return redirect_home(session)


# =============================================================================
# Variations API Endpoints
# =============================================================================

class VariationRequest(BaseModel):
    """Request body for a variations batch."""
    image: str = Field(..., description="Source image as a data URI (png, jpeg, jpg or webp)")
    prompt: str = Field(default="", description="Optional background description")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "image": "data:image/jpeg;base64,/9j/4AAQSkZJRg...",
                "prompt": "add rose petals next to the product"
            }
        }
    )


class VariationItem(BaseModel):
    style_name: str
    image_data: str


class VariationResponse(BaseModel):
    """Response from a variations batch."""
    count: int
    results: List[VariationItem]
    failed_styles: List[str] = Field(default_factory=list)


@app.post("/api/variations", response_model=VariationResponse, tags=["Variations"])
async def create_variations(
    request: VariationRequest,
    orchestrator: VariationOrchestrator = Depends(get_orchestrator),
    auth: str = Depends(get_api_key)
):
    """
    Generate one variation per catalog style.

    Partial success returns the images that were produced and lists
    the styles that failed. Fails only when no style produced an image.
    """
    try:
        batch = await orchestrator.generate_batch(request.image, request.prompt)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BatchFailureError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Variations error: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return VariationResponse(
        count=len(batch.results),
        results=[VariationItem(**r.to_dict()) for r in batch.results],
        failed_styles=batch.failed_styles
    )


@app.get("/api/styles", tags=["Variations"])
def get_styles():
    """
    List the styles every batch is rendered in.
    """
    return {
        "count": len(STYLE_CATALOG),
        "styles": [style.to_dict() for style in STYLE_CATALOG]
    }


@app.get("/api/providers", tags=["Variations"])
def list_providers():
    """
    List available AI providers and their configuration status.
    """
    gemini_gen = GeminiGenerator()

    return {
        "providers": [
            {
                "name": "gemini",
                "description": f"Google Gemini with {gemini_gen.model} model",
                "configured": gemini_gen.is_configured(),
                "model": gemini_gen.model,
                "required_env_vars": [GeminiGenerator.ENV_API_KEY],
                "optional_env_vars": [
                    f"{GeminiGenerator.ENV_MODEL} (default: {GeminiGenerator.DEFAULT_MODEL})"
                ],
                "missing": gemini_gen.get_missing_config()
            }
        ]
    }


@app.get("/health")
def health_check():
    return {"status": "ok", "version": __version__}
