"""Text extraction engines: plain text and HTML variants.

Both variants share the page walk and differ only in how a document's pages
are framed. The orchestrator holds one engine and never asks which one.
"""

from __future__ import annotations

import html
from abc import ABC, abstractmethod
from typing import Iterator, List, TextIO

from extracttext.config import OUTPUT_HTML, OUTPUT_MODES, OUTPUT_TEXT, ExtractionConfig
from extracttext.errors import ConfigError

from .layout import render_page

LINE_SEPARATOR = "\n"


class TextExtractionEngine(ABC):
    """Base class for engines turning a document into a sequence of text fragments."""

    def iter_pages(self, document, config: ExtractionConfig) -> Iterator[str]:
        """Yield the text of each page in the configured range."""
        pages = document.pages
        for index in config.page_range(len(pages)):
            yield render_page(pages[index], config.sort_by_position, config.separate_beads)

    @abstractmethod
    def iter_text(self, document, config: ExtractionConfig) -> Iterator[str]:
        """Yield output fragments for `document` in write order."""

    def write_text(self, document, config: ExtractionConfig, sink: TextIO) -> None:
        for chunk in self.iter_text(document, config):
            sink.write(chunk)


class PlainTextEngine(TextExtractionEngine):
    """Raw text, one line separator after each page."""

    def iter_text(self, document, config: ExtractionConfig) -> Iterator[str]:
        for text in self.iter_pages(document, config):
            if text and not text.endswith(LINE_SEPARATOR):
                text += LINE_SEPARATOR
            yield text


def _paragraphs(text: str) -> List[str]:
    parts: List[str] = []
    buf: List[str] = []
    for line in (text or "").splitlines():
        if line.strip() == "":
            if buf:
                parts.append("\n".join(buf))
                buf = []
        else:
            buf.append(line)
    if buf:
        parts.append("\n".join(buf))
    return parts


class HtmlTextEngine(TextExtractionEngine):
    """Simple HTML: a full HTML document per PDF, a <div> per page, a <p> per paragraph."""

    def header(self, document, config: ExtractionConfig) -> str:
        title = html.escape(getattr(document, "title", "") or "")
        return (
            '<!DOCTYPE html PUBLIC "-//W3C//DTD HTML 4.01 Transitional//EN"\n'
            '"http://www.w3.org/TR/html4/loose.dtd">\n'
            f"<html><head><title>{title}</title>\n"
            f'<meta http-equiv="Content-Type" content="text/html; charset={html.escape(config.encoding)}">\n'
            "</head>\n<body>\n"
        )

    def footer(self) -> str:
        return "</body></html>\n"

    def iter_text(self, document, config: ExtractionConfig) -> Iterator[str]:
        # An empty page range produces no markup at all
        if not config.page_range(len(document.pages)):
            return
        yield self.header(document, config)
        for text in self.iter_pages(document, config):
            out = ['<div style="page-break-before:always; page-break-after:always">\n']
            for para in _paragraphs(text):
                out.append("<p>" + html.escape(para).replace("\n", "<br>\n") + "</p>\n")
            out.append("</div>\n")
            yield "".join(out)
        yield self.footer()


def select_engine(output_mode: str) -> TextExtractionEngine:
    """Return the engine variant for an output mode ('text' or 'html')."""
    if output_mode == OUTPUT_TEXT:
        return PlainTextEngine()
    if output_mode == OUTPUT_HTML:
        return HtmlTextEngine()
    raise ConfigError(f"Unknown output mode {output_mode!r}; expected one of {', '.join(OUTPUT_MODES)}")
