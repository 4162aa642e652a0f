"""
PDF Capture - FastAPI application.

Provides a single generation endpoint that snapshots a URL or a block of
plain text into a content-sized PDF using Playwright/Chromium, plus a health
check and the browser form that drives it.
"""

import logging
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, StreamingResponse

from . import __version__
from .browser import BrowserProvider, get_browser_provider
from .config import CaptureSettings, get_settings
from .models import GenerateRequest, HealthResponse
from .renderer import render_pdf
from .usage_log import UsageRecord, emit_usage, truncate_target

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"

app = FastAPI(
    title="PDF Capture",
    version=__version__,
    description="Snapshot web pages and plain text into content-sized PDFs"
)

if settings.cors_origins_list:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Browser readiness state
_browser_ready = False
_browser_error: Optional[str] = None


def get_provider(settings: CaptureSettings = Depends(get_settings)) -> BrowserProvider:
    """FastAPI dependency returning the configured browser provider."""
    return get_browser_provider(settings)


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# ============================================================================
# Startup Event - Validate Chromium
# ============================================================================

@app.on_event("startup")
async def validate_browser_on_startup():
    """
    Launch the configured browser once and print a tiny PDF.

    The service does not report healthy unless this succeeds.
    """
    global _browser_ready, _browser_error

    startup_settings = get_settings()
    if not startup_settings.validate_browser_on_startup:
        logger.info("Browser validation disabled, assuming ready")
        _browser_ready = True
        return

    provider = get_browser_provider(startup_settings)
    logger.info(f"PDF Capture starting - validating {provider.name} browser provider...")

    try:
        async with provider.open_browser() as browser:
            page = await browser.new_page()
            await page.set_content("<html><body><h1>Test</h1></body></html>")
            test_pdf = await page.pdf(width="640px", height="100px")
            await page.close()

        if test_pdf:
            _browser_ready = True
            _browser_error = None
            logger.info(f"Browser validation successful - generated {len(test_pdf)} byte test PDF")
        else:
            _browser_error = "Test PDF generation returned empty result"
            logger.error(f"Browser validation failed: {_browser_error}")

    except Exception as e:
        _browser_error = str(e)
        logger.error(f"Browser validation failed: {_browser_error}")
        logger.error("PDF generation will not work until this is resolved.")


# ============================================================================
# Error handling
# ============================================================================

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are client errors reported in the {error} shape."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    )
    logger.warning(f"Rejected malformed request: {problems}")
    return error_response(f"Invalid request: {problems}", 400)


# ============================================================================
# Endpoints
# ============================================================================

@app.get("/health", response_model=HealthResponse)
async def health_check(settings: CaptureSettings = Depends(get_settings)):
    """
    Health check endpoint for container orchestration.

    Returns HTTP 503 if browser validation failed on startup.
    """
    if not _browser_ready:
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "browser_provider": settings.browser_provider,
                "browser_ready": False,
                "browser_error": _browser_error,
            },
        )

    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        browser_provider=settings.browser_provider,
        browser_ready=True,
        browser_error=None,
    )


@app.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    """Serve the capture form."""
    return HTMLResponse((STATIC_DIR / "index.html").read_text(encoding="utf-8"))


@app.post("/api/generate")
async def generate(
    request: GenerateRequest,
    settings: CaptureSettings = Depends(get_settings),
    provider: BrowserProvider = Depends(get_provider),
):
    """
    Render a URL or text snippet to a single content-sized PDF page.

    Args:
        request: mode ('desktop'|'mobile'), type ('url'|'text') and content

    Returns:
        StreamingResponse with PDF binary data, or {error} with 400/500
    """
    record = UsageRecord(
        mode=request.mode,
        type=request.type,
        target=truncate_target(request.content, request.type),
    )

    try:
        if not request.content:
            record.fail("Content missing")
            return error_response("Content missing", 400)

        logger.info(f"Starting {request.mode} PDF render (type={request.type})")

        try:
            async with provider.open_browser() as browser:
                pdf_bytes = await render_pdf(browser, request, settings)
        except Exception as e:
            message = str(e) or e.__class__.__name__
            logger.exception(f"PDF rendering failed: {message}")
            record.fail(message)
            return error_response(message, 500)

        record.succeed(len(pdf_bytes))
        logger.info(f"PDF render completed ({len(pdf_bytes)} bytes)")

        return StreamingResponse(
            BytesIO(pdf_bytes),
            media_type="application/pdf",
            headers={
                "Content-Disposition": 'attachment; filename="generated.pdf"'
            },
        )
    finally:
        if settings.usage_log_enabled:
            emit_usage(record)
