"""
Pydantic models for the PDF capture API.

``mode`` and ``type`` are deliberately plain strings: anything other than
"mobile" renders desktop, anything other than "text" is navigated as a URL.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class GenerateRequest(BaseModel):
    """Body of POST /api/generate."""

    mode: str = Field("desktop", description="Render mode: 'desktop' or 'mobile'")
    type: str = Field("url", description="Content type: 'url' or 'text'")
    content: Optional[str] = Field(None, description="URL to capture or raw text to render")

    @property
    def is_mobile(self) -> bool:
        return self.mode == "mobile"

    @property
    def is_text(self) -> bool:
        return self.type == "text"


class ErrorResponse(BaseModel):
    """Error payload returned with 4xx/5xx responses."""

    error: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    timestamp: datetime
    browser_provider: str
    browser_ready: bool = True
    browser_error: Optional[str] = None
