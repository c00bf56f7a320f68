import io
import logging
from typing import Optional

from fastapi import FastAPI, File, Form, Header, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from starlette.requests import Request

from .config import Settings
from .errors import DeckValidationError, SlideGenError
from .layouts import available_layouts
from .models import DeckResponse, ExportRequest, TextRequest, TopicRequest, UrlRequest
from .pipeline import deck_from_pdf, deck_from_text, deck_from_topic, deck_from_url
from .pptx_builder import PPTX_MEDIA_TYPE, render_deck
from .security import MAX_FILE_SIZE_BYTES, clamp_slide_count, safe_filename
from .themes import available_themes

settings = Settings.from_env()

app = FastAPI(title="Content → Slide Deck", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------- LOGGING ----------
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger("slidegen")
logger.info("LLM provider = %s (%s)", settings.llm_provider, settings.model)
# -----------------------------

PDF_CONTENT_TYPES = ("application/pdf", "application/x-pdf")


def _http_error(e: SlideGenError) -> HTTPException:
    return HTTPException(e.status_code, detail=e.message)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/themes")
def themes():
    return {"success": True, "themes": available_themes()}


@app.get("/layouts")
def layouts():
    return {"success": True, "layouts": available_layouts()}


@app.post("/generate/text", response_model=DeckResponse)
async def generate_from_text(body: TextRequest, x_user_id: Optional[str] = Header(default=None)):
    try:
        result = await deck_from_text(
            body.text,
            clamp_slide_count(body.slide_count),
            enhance=body.enhance,
            settings=settings,
            user_id=x_user_id,
        )
    except SlideGenError as e:
        raise _http_error(e)
    return DeckResponse.from_result(result)


@app.post("/generate/pdf", response_model=DeckResponse)
async def generate_from_pdf(
    request: Request,
    file: UploadFile = File(..., description="PDF document"),
    slideCount: str = Form("5"),
    enhance: str = Form("true"),
    x_user_id: Optional[str] = Header(default=None),
):
    if file.content_type not in PDF_CONTENT_TYPES and not (file.filename or "").lower().endswith(".pdf"):
        raise HTTPException(415, detail="Please upload a PDF file")

    # Enforce upload size limit
    body_len = request.headers.get("content-length")
    try:
        if body_len and int(body_len) > MAX_FILE_SIZE_BYTES:
            raise HTTPException(413, detail=f"Payload too large (> {MAX_FILE_SIZE_BYTES // (1024*1024)} MB).")
    except ValueError:
        pass

    data = await file.read()
    if len(data) > MAX_FILE_SIZE_BYTES:
        raise HTTPException(413, detail=f"PDF too large (> {MAX_FILE_SIZE_BYTES // (1024*1024)} MB).")

    try:
        result = await deck_from_pdf(
            data,
            clamp_slide_count(slideCount),
            enhance=enhance.strip().lower() != "false",
            settings=settings,
            user_id=x_user_id,
        )
    except SlideGenError as e:
        raise _http_error(e)
    return DeckResponse.from_result(result)


@app.post("/generate/url", response_model=DeckResponse)
async def generate_from_url(body: UrlRequest, x_user_id: Optional[str] = Header(default=None)):
    try:
        result = await deck_from_url(
            body.url,
            clamp_slide_count(body.slide_count),
            enhance=body.enhance,
            settings=settings,
            user_id=x_user_id,
        )
    except SlideGenError as e:
        raise _http_error(e)
    return DeckResponse.from_result(result)


@app.post("/generate/topic", response_model=DeckResponse)
async def generate_from_topic(body: TopicRequest, x_user_id: Optional[str] = Header(default=None)):
    try:
        result = await deck_from_topic(
            body.topic,
            clamp_slide_count(body.slide_count),
            audience=body.audience,
            style=body.style,
            settings=settings,
            user_id=x_user_id,
        )
    except SlideGenError as e:
        raise _http_error(e)
    return DeckResponse.from_result(result)


@app.post("/export")
async def export(body: ExportRequest):
    try:
        pptx_bytes = await render_deck(
            body.presentation,
            body.theme or settings.default_theme,
            image_timeout=settings.fetch_timeout,
        )
    except DeckValidationError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error("PowerPoint export failed: %s", e)
        raise HTTPException(500, detail=f"Failed to build PPTX: {e}")

    filename = safe_filename(str(body.presentation.get("title", "presentation")))
    return StreamingResponse(
        io.BytesIO(pptx_bytes),
        media_type=PPTX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Content-Length": str(len(pptx_bytes)),
        },
    )
