"""Output sink selection: default output names and text writers."""

from __future__ import annotations

import codecs
import io
import os
import sys
from contextlib import contextmanager
from typing import Iterator, Optional, TextIO

from extracttext.errors import ConfigError

CONSOLE = "<console>"


def default_output_path(input_path: str, extension: str) -> str:
    """Derive the output file name by replacing the 4-character suffix of the input.

    Doxygen:
    - @param input_path: Input document path, usually ending in '.pdf'.
    - @param extension: Output extension, see ExtractionConfig.extension.
    - @return: Absolute path of the output file.
    - @throws ConfigError: If the input name is too short to strip a suffix from.
    """
    if len(input_path) <= 4:
        raise ConfigError(f"Cannot derive an output file name from '{input_path}'; pass one explicitly")
    return os.path.abspath(input_path[:-4] + extension)


@contextmanager
def open_sink(
    path: Optional[str],
    encoding: str,
    console: bool = False,
    stdout: Optional[TextIO] = None,
) -> Iterator[TextIO]:
    """Open the text writer all extracted text goes to.

    A console sink wraps the byte buffer of stdout and is only flushed on exit,
    a file sink is closed. An unknown encoding raises OSError before anything is
    created on disk.
    """
    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise OSError(f"Unsupported encoding: {encoding}") from e

    if console:
        target = stdout if stdout is not None else sys.stdout
        buffer = getattr(target, "buffer", None)
        if buffer is None:
            # In-memory text streams (tests, notebooks) are written to directly
            try:
                yield target
            finally:
                target.flush()
            return
        writer = io.TextIOWrapper(buffer, encoding=encoding, newline="", write_through=True)
        try:
            yield writer
        finally:
            writer.flush()
            writer.detach()
        return

    if not path:
        raise ConfigError("No output file given")
    with open(path, "w", encoding=encoding, newline="") as f:
        yield f
