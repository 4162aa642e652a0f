"""
Page rendering and PDF export.

Each generator opens one page, loads the content, strips print artifacts,
waits for layout to settle, measures the document height and prints a single
PDF page of that height. The settle step is a heuristic (readiness check plus
a fixed delay), so output is not guaranteed pixel-identical between runs.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict

from .config import CaptureSettings
from .models import GenerateRequest
from .text_html import build_text_document

logger = logging.getLogger(__name__)

PRINT_CSS = """
html, body { margin: 0 !important; padding: 0 !important; overflow: hidden !important; min-height: 100vh !important; }
::-webkit-scrollbar { display: none; }
"""

HEIGHT_METRICS_JS = """() => {
    const body = document.body;
    const html = document.documentElement;
    return {
        bodyScrollHeight: body.scrollHeight,
        bodyOffsetHeight: body.offsetHeight,
        htmlClientHeight: html.clientHeight,
        htmlScrollHeight: html.scrollHeight,
        htmlOffsetHeight: html.offsetHeight,
    };
}"""

READY_STATE_JS = 'document.readyState === "complete"'

ZERO_MARGINS = {"top": "0", "right": "0", "bottom": "0", "left": "0"}


@dataclass(frozen=True)
class DeviceProfile:
    """Viewport, pixel density and user agent of an emulated device."""

    name: str
    user_agent: str
    width: int
    height: int
    device_scale_factor: float
    is_mobile: bool
    has_touch: bool
    is_landscape: bool = False

    def context_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``browser.new_page``."""
        width, height = self.width, self.height
        if self.is_landscape:
            width, height = height, width
        return {
            "viewport": {"width": width, "height": height},
            "device_scale_factor": self.device_scale_factor,
            "is_mobile": self.is_mobile,
            "has_touch": self.has_touch,
            "user_agent": self.user_agent,
        }


IPHONE_13 = DeviceProfile(
    name="iPhone 13",
    user_agent=(
        "Mozilla/5.0 (iPhone; CPU iPhone OS 15_0 like Mac OS X) "
        "AppleWebKit/605.1.15 (KHTML, like Gecko) Version/15.0 Mobile/15E148 Safari/604.1"
    ),
    width=390,
    height=844,
    device_scale_factor=3,
    is_mobile=True,
    has_touch=True,
)


@dataclass(frozen=True)
class PageLayout:
    """
    Output page geometry.

    ``fit_scale`` is the ratio needed to fit the content on the page;
    ``scale`` is what is actually handed to Chromium.
    """

    width: int
    height: int
    fit_scale: float
    scale: float

    def pdf_options(self) -> Dict[str, Any]:
        return {
            "width": f"{self.width}px",
            "height": f"{self.height}px",
            "scale": self.scale,
            "print_background": True,
            "prefer_css_page_size": False,
            "margin": dict(ZERO_MARGINS),
        }


def compute_desktop_layout(width: int, content_height: int) -> PageLayout:
    """Desktop pages are never scaled: the page is as tall as the content."""
    return PageLayout(width=width, height=content_height, fit_scale=1.0, scale=1.0)


def compute_mobile_layout(
    width: int,
    content_height: int,
    max_page_px: int,
    scale_divisor: float,
) -> PageLayout:
    """
    Fit mobile content onto one page no taller than ``max_page_px``.

    Content taller than the cap is scaled down to fit and the page height is
    clamped to the cap. The divisor is applied to every mobile render to keep
    the last lines off the page edge.
    """
    if content_height > max_page_px:
        fit_scale = max_page_px / content_height
        height = max_page_px
    else:
        fit_scale = 1.0
        height = content_height
    return PageLayout(
        width=width,
        height=height,
        fit_scale=fit_scale,
        scale=fit_scale / scale_divisor,
    )


async def load_content(page, target: str, is_text: bool, settings: CaptureSettings) -> None:
    """
    Put the content into the page.

    Text is rendered from a synthesized document (no navigation); URLs are
    navigated to and waited on until the network goes idle. Navigation
    errors, including the timeout, propagate to the caller.
    """
    if is_text:
        await page.set_content(build_text_document(target))
    else:
        await page.goto(
            target,
            wait_until="networkidle",
            timeout=settings.navigation_timeout_ms,
        )


async def prepare_page_for_print(page) -> None:
    """Remove default spacing and scrollbars so only content is measured."""
    await page.add_style_tag(content=PRINT_CSS)


async def wait_for_render_settled(page, settings: CaptureSettings) -> None:
    """Best-effort wait for fonts and late layout; never fails on timeout."""
    from playwright.async_api import TimeoutError as PlaywrightTimeoutError

    try:
        await page.wait_for_function(READY_STATE_JS, timeout=settings.ready_state_timeout_ms)
    except PlaywrightTimeoutError:
        logger.debug("document.readyState did not reach 'complete', continuing")
    await asyncio.sleep(settings.settle_delay_ms / 1000)


async def measure_page_height(page) -> int:
    """Tallest of the five DOM height metrics, rounded up, plus 1px."""
    metrics = await page.evaluate(HEIGHT_METRICS_JS)
    return math.ceil(max(metrics.values())) + 1


async def _close_page(page) -> None:
    """Close the page without masking the error that ended the render."""
    try:
        await page.close()
    except Exception as e:
        logger.debug(f"Ignoring page close failure: {e}")


async def _prepare(page, content: str, is_text: bool, settings: CaptureSettings) -> int:
    await load_content(page, content, is_text, settings)
    await prepare_page_for_print(page)
    await wait_for_render_settled(page, settings)
    return await measure_page_height(page)


async def render_desktop_pdf(browser, content: str, is_text: bool, settings: CaptureSettings) -> bytes:
    """Render at the fixed desktop viewport; page height equals content height."""
    page = await browser.new_page(
        viewport={"width": settings.desktop_width, "height": settings.desktop_height}
    )
    try:
        content_height = await _prepare(page, content, is_text, settings)
        layout = compute_desktop_layout(settings.desktop_width, content_height)
        logger.info(f"Desktop layout: {layout.width}x{layout.height}px")
        return await page.pdf(**layout.pdf_options())
    finally:
        await _close_page(page)


async def render_mobile_pdf(browser, content: str, is_text: bool, settings: CaptureSettings) -> bytes:
    """Render emulating an iPhone 13; very long pages are scaled to fit the cap."""
    page = await browser.new_page(**IPHONE_13.context_options())
    try:
        content_height = await _prepare(page, content, is_text, settings)
        css_width = page.viewport_size["width"]
        layout = compute_mobile_layout(
            css_width,
            content_height,
            settings.max_page_px,
            settings.mobile_scale_divisor,
        )
        logger.info(
            f"Mobile layout: {layout.width}x{layout.height}px "
            f"(content {content_height}px, scale {layout.scale:.4f})"
        )
        return await page.pdf(**layout.pdf_options())
    finally:
        await _close_page(page)


async def render_pdf(browser, request: GenerateRequest, settings: CaptureSettings) -> bytes:
    """Dispatch to the mobile or desktop generator."""
    if request.is_mobile:
        return await render_mobile_pdf(browser, request.content, request.is_text, settings)
    return await render_desktop_pdf(browser, request.content, request.is_text, settings)
