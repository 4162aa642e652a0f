"""
Client for the PDF capture service.

Mirrors what the browser form does: up to two downloads per button press
(one for the URL, one for the pasted text), fired concurrently, each saved
under a name derived from the user's filename field and the render mode.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

import httpx

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_URL = "http://localhost:8000"
REQUEST_TIMEOUT = 120.0  # seconds; server-side navigation alone may take 60s


class GenerationError(Exception):
    """A single download could not be produced."""


@dataclass(frozen=True)
class DownloadJob:
    mode: str
    type: str
    content: str
    filename: str


def build_download_filename(name: Optional[str], default: str, mode: str) -> str:
    """
    Derive the saved filename.

    Blank names fall back to ``default``; mobile renders get ``_mobile``;
    ``.pdf`` is appended unless already present.

    Example:
        >>> build_download_filename("  ", "web-version", "mobile")
        'web-version_mobile.pdf'
    """
    filename = (name or "").strip() or default
    if mode == "mobile":
        filename += "_mobile"
    if not filename.endswith(".pdf"):
        filename += ".pdf"
    return filename


def plan_downloads(
    mode: str,
    url: Optional[str] = None,
    url_name: Optional[str] = None,
    text: Optional[str] = None,
    text_name: Optional[str] = None,
) -> List[DownloadJob]:
    """
    Turn form-style inputs into download jobs.

    Raises:
        ValueError: if neither input is given, or the URL lacks an http(s) scheme
    """
    if not url and not text:
        raise ValueError("Please provide at least a URL or Text content.")

    jobs = []
    if url:
        if not url.startswith("http"):
            raise ValueError("Web Version: URL must start with http:// or https://")
        jobs.append(DownloadJob(mode, "url", url, build_download_filename(url_name, "web-version", mode)))
    if text:
        jobs.append(DownloadJob(mode, "text", text, build_download_filename(text_name, "text-version", mode)))
    return jobs


async def download_pdf(
    http_client: httpx.AsyncClient,
    service_url: str,
    job: DownloadJob,
    out_dir: Path,
) -> Path:
    """
    Request one PDF and write it to ``out_dir``.

    Raises:
        GenerationError: with the server-provided message when generation fails
    """
    try:
        response = await http_client.post(
            f"{service_url.rstrip('/')}/api/generate",
            json={"mode": job.mode, "type": job.type, "content": job.content},
        )
        response.raise_for_status()
    except httpx.TimeoutException:
        raise GenerationError(f"Error generating {job.filename}: request timed out")
    except httpx.HTTPStatusError as e:
        try:
            error_detail = e.response.json().get("error", str(e))
        except ValueError:
            error_detail = e.response.text or str(e)
        raise GenerationError(f"Error generating {job.filename}: {error_detail}")
    except httpx.RequestError as e:
        raise GenerationError(f"Error generating {job.filename}: {e}")

    # Only the final path component is honoured; downloads stay inside out_dir
    destination = out_dir / Path(job.filename).name
    destination.write_bytes(response.content)
    logger.info(f"Saved {destination} ({len(response.content)} bytes)")
    return destination


async def download_all(
    jobs: List[DownloadJob],
    service_url: str = DEFAULT_SERVICE_URL,
    out_dir: Union[str, Path] = ".",
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[Union[Path, GenerationError]]:
    """
    Run all downloads concurrently and wait for every one of them.

    A failed download never cancels its siblings; each outcome is returned
    in job order, either the saved path or the ``GenerationError``.
    """
    out_path = Path(out_dir)
    out_path.mkdir(parents=True, exist_ok=True)

    async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT, transport=transport) as http_client:
        results = await asyncio.gather(
            *(download_pdf(http_client, service_url, job, out_path) for job in jobs),
            return_exceptions=True,
        )

    for result in results:
        if isinstance(result, BaseException) and not isinstance(result, GenerationError):
            raise result
    return list(results)
