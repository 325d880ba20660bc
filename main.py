"""
Entry point and compatibility facade for PDF text extraction.

This module exposes a stable API and a CLI.

Packages:
- extracttext.docs: PDF loading, embedded-file trees, output sinks
- extracttext.text: Plain text and HTML extraction engines, page layout
- extracttext.pipeline: Orchestration over a document and its embedded PDFs
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from pypdf.errors import PyPdfError

from extracttext.config import ExtractionConfig, load_defaults, resolve_config
from extracttext.docs import load_pdf, load_pdf_stream, read_embedded_files
from extracttext.errors import (
    ConfigError,
    EmbeddedLoadError,
    ExtractTextError,
    LoadError,
    PermissionDenied,
)
from extracttext.pipeline import ExtractionOrchestrator, extract_file
from extracttext.text import HtmlTextEngine, PlainTextEngine, select_engine

__all__ = [
    # config
    "ExtractionConfig",
    "resolve_config",
    # documents
    "load_pdf",
    "load_pdf_stream",
    "read_embedded_files",
    # engines
    "PlainTextEngine",
    "HtmlTextEngine",
    "select_engine",
    # pipeline
    "ExtractionOrchestrator",
    "extract_file",
    # errors
    "ExtractTextError",
    "ConfigError",
    "PermissionDenied",
    "LoadError",
    "EmbeddedLoadError",
]

OPTIONS_HELP = """\
Options:
  -password  <password>        : Password to decrypt document
  -encoding  <output encoding> : UTF-8 (default) or ISO-8859-1, UTF-16BE, UTF-16LE, etc.
  -console                     : Send text to console instead of file
  -html                        : Output in HTML format instead of raw text
  -sort                        : Sort the text before writing
  -ignoreBeads                 : Disables the separation by beads
  -debug                       : Enables debug output about the time consumption of every stage
  -startPage <number>          : The first page to start extraction(1 based)
  -endPage <number>            : The last page to extract(inclusive)
  <inputfile>                  : The PDF document to use
  [output-text-file]           : The file to write the text to
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="extracttext",
        usage="%(prog)s [options] <inputfile> [output-text-file]",
        description="Extract text from a PDF document and from the PDFs embedded in it.",
        epilog=OPTIONS_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
        add_help=False,
    )
    parser.add_argument("-h", "-help", "--help", action="help", help=argparse.SUPPRESS)
    parser.add_argument("-password", help=argparse.SUPPRESS)
    parser.add_argument("-encoding", help=argparse.SUPPRESS)
    parser.add_argument("-console", action="store_true", help=argparse.SUPPRESS)
    parser.add_argument("-html", action="store_true", default=None, help=argparse.SUPPRESS)
    parser.add_argument("-sort", action="store_true", default=None, help=argparse.SUPPRESS)
    parser.add_argument("-ignoreBeads", dest="ignore_beads", action="store_true", default=None, help=argparse.SUPPRESS)
    parser.add_argument("-debug", action="store_true", help=argparse.SUPPRESS)
    # Page bounds stay strings here; resolve_config reports malformed numbers
    parser.add_argument("-startPage", dest="start_page", help=argparse.SUPPRESS)
    parser.add_argument("-endPage", dest="end_page", help=argparse.SUPPRESS)
    parser.add_argument("inputfile", help=argparse.SUPPRESS)
    parser.add_argument("output", nargs="?", help=argparse.SUPPRESS)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI for PDF text extraction.

    Writes `<inputfile minus 4 chars>.txt` (or `.html` with -html) unless an
    output file or -console is given. Returns the process exit status.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(message)s",
    )

    try:
        config = resolve_config(
            password=args.password,
            encoding=args.encoding,
            sort=args.sort,
            ignore_beads=args.ignore_beads,
            start_page=args.start_page,
            end_page=args.end_page,
            html=args.html,
            debug=args.debug,
            defaults=load_defaults(),
        )
        result = extract_file(
            args.inputfile,
            output_path=args.output,
            config=config,
            console=bool(args.console),
        )
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1
    except (ExtractTextError, PyPdfError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    summary = result["summary"]
    if not args.console:
        print(f"Saved text to: {result['output_path']}")
    if summary.extracted:
        print(f"Embedded PDFs extracted: {', '.join(summary.extracted)}", file=sys.stderr)
    return 0


def _cli() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    _cli()
