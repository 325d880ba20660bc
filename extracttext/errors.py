"""Error taxonomy for text extraction.

Every error raised by the package derives from `ExtractTextError` so the CLI
can report it and exit with a non-zero status. Sink failures are plain
`OSError` and are not wrapped.
"""

from __future__ import annotations


class ExtractTextError(Exception):
    """Base class for extraction failures."""


class ConfigError(ExtractTextError, ValueError):
    """Raised when raw parameters cannot be turned into an ExtractionConfig."""


class PermissionDenied(ExtractTextError):
    """Raised when a document's access permissions forbid content extraction."""

    def __init__(self, source: str) -> None:
        super().__init__(f"You do not have permission to extract text from {source}")
        self.source = source


class LoadError(ExtractTextError):
    """Raised when a document cannot be opened or decrypted."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Failed to load PDF {source}: {reason}")
        self.source = source
        self.reason = reason


class EmbeddedLoadError(LoadError):
    """Raised when an embedded entry claims to be a PDF but cannot be loaded."""

    def __init__(self, entry_name: str, reason: str) -> None:
        super().__init__(f"embedded file '{entry_name}'", reason)
        self.entry_name = entry_name
