"""High-level pipeline: permission check → root text → embedded PDFs → one sink.

`ExtractionOrchestrator.run` works on an already loaded document and an
already open sink. `extract_file` is the caller-side glue used by the CLI: it
derives the output name, loads the document, opens the sink and releases both.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Callable, Dict, List, Optional, TextIO, Union

from extracttext.config import ExtractionConfig
from extracttext.docs.embedded import EmbeddedFileEntry, is_same_format, iter_entries
from extracttext.docs.pdf_io import load_pdf, load_pdf_stream
from extracttext.docs.sink import CONSOLE, default_output_path, open_sink
from extracttext.errors import EmbeddedLoadError, ExtractTextError, LoadError, PermissionDenied
from extracttext.text import TextExtractionEngine, select_engine

from .timing import StageTimer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Extracted:
    name: str


@dataclass(frozen=True)
class Skipped:
    name: str
    reason: str


@dataclass(frozen=True)
class Fatal:
    name: str
    error: ExtractTextError


EntryOutcome = Union[Extracted, Skipped, Fatal]


@dataclass
class RunSummary:
    document: str
    extracted: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


class ExtractionOrchestrator:
    """Writes the text of a document and of its embedded PDFs to a single sink.

    Output order is the root document first, then every embedded PDF in
    lexicographic order of its entry name. Entries that are not PDFs are
    skipped; an embedded PDF that fails to load or forbids extraction aborts
    the run. Sub-documents are opened one at a time and closed before the next
    entry is looked at.
    """

    def __init__(
        self,
        engine: TextExtractionEngine,
        loader: Optional[Callable[[BinaryIO, str], Any]] = None,
        timer: Optional[StageTimer] = None,
    ) -> None:
        self.engine = engine
        self.loader = loader or load_pdf_stream
        self.timer = timer

    def run(self, document, config: ExtractionConfig, sink: TextIO) -> RunSummary:
        """Extract `document` and its embedded PDFs into `sink`.

        Doxygen:
        - @param document: Loaded document (root); closed by the caller.
        - @param config: Settings reused verbatim for every embedded document.
        - @param sink: Open text writer shared by the whole run.
        - @return: RunSummary listing extracted and skipped entry names.
        - @throws PermissionDenied: Root or embedded document forbids extraction.
        - @throws EmbeddedLoadError: An embedded PDF cannot be loaded.
        """
        timer = self.timer or StageTimer(config.debug, logger)
        if not document.can_extract_content:
            raise PermissionDenied(document.name)

        started = timer.start("Starting text extraction")
        self.engine.write_text(document, config, sink)

        summary = RunSummary(document=document.name)
        for name, entry in iter_entries(document.embedded_files()):
            outcome = self.process_entry(name, entry, config, sink, timer)
            if isinstance(outcome, Fatal):
                raise outcome.error
            if isinstance(outcome, Skipped):
                logger.debug("Skipped embedded file %s: %s", name, outcome.reason)
                summary.skipped.append(name)
            else:
                summary.extracted.append(name)

        timer.stop("Time for extraction: ", started)
        return summary

    def process_entry(
        self,
        name: str,
        entry: Optional[EmbeddedFileEntry],
        config: ExtractionConfig,
        sink: TextIO,
        timer: StageTimer,
    ) -> EntryOutcome:
        timer.note("Processing embedded file %s:", name)
        if entry is None:
            return Skipped(name, "no embedded file stream")
        if not is_same_format(entry):
            return Skipped(name, f"subtype is {entry.mime_subtype or 'missing'}")
        timer.note("  is PDF (size=%d)", entry.byte_length)

        stream = None
        try:
            stream = entry.open()
            # The loader owns the stream once it returns a document
            sub_document = self.loader(stream, name)
        except Exception as e:
            if stream is not None:
                stream.close()
            reason = e.reason if isinstance(e, LoadError) else (str(e) or type(e).__name__)
            error = EmbeddedLoadError(name, reason)
            error.__cause__ = e
            return Fatal(name, error)

        with sub_document:
            if not sub_document.can_extract_content:
                return Fatal(name, PermissionDenied(f"embedded file '{name}'"))
            self.engine.write_text(sub_document, config, sink)
        return Extracted(name)


def extract_file(
    input_path: str,
    output_path: Optional[str] = None,
    config: Optional[ExtractionConfig] = None,
    console: bool = False,
    stdout: Optional[TextIO] = None,
) -> Dict[str, Any]:
    """Extract text from a PDF file (and its embedded PDFs) into a file or the console.

    Doxygen:
    - @param input_path: Path to the input PDF.
    - @param output_path: Output file; derived from `input_path` when None and not `console`.
    - @param config: ExtractionConfig; defaults apply when None.
    - @param console: Write to stdout instead of a file.
    - @param stdout: Console stream override (defaults to sys.stdout).
    - @return: Dict with keys {'output_path', 'summary'}.
    """
    config = config or ExtractionConfig()
    engine = select_engine(config.output_mode)
    timer = StageTimer(config.debug, logger)

    if output_path is None and not console:
        output_path = default_output_path(input_path, config.extension)

    started = timer.start(f"Loading PDF {input_path}")
    with load_pdf(input_path, config.password) as document:
        # Checked before the sink exists so a refused document leaves no output file
        if not document.can_extract_content:
            raise PermissionDenied(input_path)
        timer.stop("Time for loading: ", started)

        destination = CONSOLE if console else output_path
        timer.note("Writing to %s", destination)
        with open_sink(output_path, config.encoding, console=console, stdout=stdout) as sink:
            summary = ExtractionOrchestrator(engine, timer=timer).run(document, config, sink)

    return {"output_path": destination, "summary": summary}
