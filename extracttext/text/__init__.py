"""Text extraction engines (plain text and HTML) and page layout helpers."""

from .engine import (
    HtmlTextEngine,
    PlainTextEngine,
    TextExtractionEngine,
    select_engine,
)
from .layout import render_page

__all__ = [
    "TextExtractionEngine",
    "PlainTextEngine",
    "HtmlTextEngine",
    "select_engine",
    "render_page",
]
