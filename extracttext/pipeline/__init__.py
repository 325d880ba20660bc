"""High-level orchestration: root document, embedded PDFs, single output sink."""

from .process import (
    Extracted,
    ExtractionOrchestrator,
    Fatal,
    RunSummary,
    Skipped,
    extract_file,
)
from .timing import StageTimer

__all__ = [
    "ExtractionOrchestrator",
    "Extracted",
    "Skipped",
    "Fatal",
    "RunSummary",
    "StageTimer",
    "extract_file",
]
