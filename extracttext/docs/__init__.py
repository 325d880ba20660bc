"""Document layer: PDF loading, embedded-file trees and output sinks.

Exposes:
- Loader: load_pdf, load_pdf_stream returning PdfDocument
- Embedded files: EmbeddedFileEntry, read_embedded_files, iter_entries
- Sinks: default_output_path, open_sink
"""

from .embedded import (
    SAME_FORMAT_SUBTYPE,
    EmbeddedFileEntry,
    is_same_format,
    iter_entries,
    read_embedded_files,
)
from .pdf_io import PdfDocument, load_pdf, load_pdf_stream
from .sink import CONSOLE, default_output_path, open_sink

__all__ = [
    "SAME_FORMAT_SUBTYPE",
    "EmbeddedFileEntry",
    "is_same_format",
    "iter_entries",
    "read_embedded_files",
    "PdfDocument",
    "load_pdf",
    "load_pdf_stream",
    "CONSOLE",
    "default_output_path",
    "open_sink",
]
