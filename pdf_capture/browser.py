"""
Browser provisioning for PDF rendering.

A provider knows how to launch Chromium for the current deployment and
guarantees the browser is closed when the request is done, whatever happened
while rendering. One browser per request; nothing is pooled.
"""

import logging
import os
import platform
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from .config import CaptureSettings

logger = logging.getLogger(__name__)

# Container runtimes without user namespaces cannot use Chromium's sandbox
LOCAL_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]

EXTRA_MANAGED_ARGS = ["--hide-scrollbars", "--disable-web-security"]

# Flags recommended for minimal Chromium builds on serverless hosts
# (read-only filesystem, no /dev/shm, single process).
SERVERLESS_CHROMIUM_ARGS = [
    "--allow-pre-commit-input",
    "--disable-background-networking",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-breakpad",
    "--disable-client-side-phishing-detection",
    "--disable-component-extensions-with-background-pages",
    "--disable-component-update",
    "--disable-default-apps",
    "--disable-dev-shm-usage",
    "--disable-extensions",
    "--disable-hang-monitor",
    "--disable-ipc-flooding-protection",
    "--disable-popup-blocking",
    "--disable-prompt-on-repost",
    "--disable-renderer-backgrounding",
    "--disable-sync",
    "--disable-domain-reliability",
    "--disable-print-preview",
    "--disable-speech-api",
    "--disk-cache-size=33554432",
    "--export-tagged-pdf",
    "--font-render-hinting=none",
    "--force-color-profile=srgb",
    "--metrics-recording-only",
    "--mute-audio",
    "--no-default-browser-check",
    "--no-first-run",
    "--no-pings",
    "--no-sandbox",
    "--no-zygote",
    "--password-store=basic",
    "--single-process",
    "--use-angle=swiftshader",
    "--use-gl=angle",
    "--use-mock-keychain",
]

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
}


class BrowserLaunchError(RuntimeError):
    """Raised when no usable browser executable can be resolved."""


class BrowserProvider(ABC):
    """Launches Chromium for one request and always closes it afterwards."""

    name = "base"

    def __init__(self, settings: CaptureSettings):
        self.settings = settings

    @abstractmethod
    def launch_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``playwright.chromium.launch``."""

    @asynccontextmanager
    async def open_browser(self) -> AsyncIterator[Any]:
        """
        Yield a launched Chromium browser.

        The browser is closed in ``finally`` so a failed navigation or render
        never leaves an orphaned Chromium process behind.
        """
        # Import here to avoid loading Playwright on module import
        from playwright.async_api import async_playwright

        options = self.launch_options()
        async with async_playwright() as p:
            logger.info(f"Launching Chromium via {self.name} provider")
            browser = await p.chromium.launch(**options)
            try:
                yield browser
            finally:
                try:
                    await browser.close()
                    logger.debug("Chromium closed")
                except Exception as e:
                    logger.debug(f"Ignoring browser close failure: {e}")


class LocalBrowserProvider(BrowserProvider):
    """Playwright's bundled Chromium, sandbox disabled for containers."""

    name = "local"

    def launch_options(self) -> Dict[str, Any]:
        return {"headless": self.settings.headless, "args": list(LOCAL_ARGS)}


class ManagedBrowserProvider(BrowserProvider):
    """
    Serverless-aware provisioning.

    On a serverless host (deployment marker present) the packaged minimal
    Chromium for the current architecture is used with the serverless flag
    set. Elsewhere the explicit executable override wins, then the system
    stable Chrome channel.
    """

    name = "managed"

    def resolve_packaged_executable(self) -> str:
        """
        Locate the packaged Chromium binary for this platform.

        Looks in ``<managed_chromium_dir>/<arch>/chromium`` first and
        ``<managed_chromium_dir>/chromium`` second.

        Raises:
            BrowserLaunchError: if neither candidate exists
        """
        base_dir = self.settings.managed_chromium_dir
        machine = platform.machine().lower()
        arch = _ARCH_ALIASES.get(machine, machine)
        candidates = [
            os.path.join(base_dir, arch, "chromium"),
            os.path.join(base_dir, "chromium"),
        ]
        for candidate in candidates:
            if os.path.isfile(candidate):
                return candidate
        raise BrowserLaunchError(
            f"Packaged Chromium not found for {arch} (looked in: {', '.join(candidates)})"
        )

    def launch_options(self) -> Dict[str, Any]:
        if self.settings.is_managed_deployment:
            args: List[str] = SERVERLESS_CHROMIUM_ARGS + EXTRA_MANAGED_ARGS
            return {
                "headless": True,
                "executable_path": self.resolve_packaged_executable(),
                "args": args,
            }

        options: Dict[str, Any] = {
            "headless": self.settings.headless,
            "args": list(EXTRA_MANAGED_ARGS),
        }
        override: Optional[str] = self.settings.chrome_executable_path
        if override:
            options["executable_path"] = override
        else:
            options["channel"] = "chrome"
        return options


_PROVIDERS = {
    LocalBrowserProvider.name: LocalBrowserProvider,
    ManagedBrowserProvider.name: ManagedBrowserProvider,
}


def get_browser_provider(settings: CaptureSettings) -> BrowserProvider:
    """Instantiate the provider selected by ``settings.browser_provider``."""
    return _PROVIDERS[settings.browser_provider](settings)
