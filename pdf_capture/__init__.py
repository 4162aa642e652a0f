"""
PDF Capture - Service for snapshotting web pages and text into PDFs.

Renders a URL or a plain-text snippet with Playwright/Chromium, either at a
fixed desktop width or emulating an iPhone 13, and returns a single PDF page
sized to the rendered content.
"""

__version__ = "0.1.0"
