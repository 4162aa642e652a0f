"""
Helper functions for turning pasted plain text into a printable HTML page.

The text is escaped first and linkified second, so the only markup in the
output is the anchors produced here.
"""

import re

URL_PATTERN = re.compile(r"(https?://[^\s]+)")

LINK_STYLE = "color: blue; text-decoration: underline; word-break: break-all;"


def escape_html(text: str) -> str:
    """
    Escape the five HTML-significant characters.

    Ampersands go first so already-produced entities are not double escaped.

    Example:
        >>> escape_html('<b class="x">Tom & Jerry</b>')
        '&lt;b class=&quot;x&quot;&gt;Tom &amp; Jerry&lt;/b&gt;'
    """
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#039;")
    )


def linkify(text: str) -> str:
    """
    Wrap every bare http(s) URL in an anchor pointing at itself.

    Expects already-escaped text; the match runs up to the next whitespace.
    """
    return URL_PATTERN.sub(
        lambda match: f'<a href="{match.group(1)}" style="{LINK_STYLE}">{match.group(1)}</a>',
        text,
    )


def build_text_document(text: str) -> str:
    """
    Build the complete HTML document used for the text render path.

    Args:
        text: Raw, untrusted text pasted by the user

    Returns:
        HTML5 document with the escaped, linkified text in a monospace block

    The HTML parser drops one newline directly after ``<pre>``, so a padding
    newline is emitted there to keep any leading blank lines of the text.
    """
    body = linkify(escape_html(text))

    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <style>
        #txt-container {{
            white-space: pre-wrap;
            word-wrap: break-word;
            font-family: "Consolas", monospace;
            font-size: 12px;
            line-height: 16px;
            color: #333;
            padding: 40px;
            width: 100%;
            box-sizing: border-box;
        }}

        a {{
            color: blue !important;
            text-decoration: underline !important;
        }}
    </style>
</head>
<body><pre id="txt-container">
{body}</pre></body>
</html>
"""
