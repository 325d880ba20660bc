"""Extraction configuration: defaults file loading and parameter resolution."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from extracttext.errors import ConfigError

logger = logging.getLogger(__name__)

# Optional JSON file with project-wide defaults
DEFAULTS_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), "config", "extract.json")

OUTPUT_TEXT = "text"
OUTPUT_HTML = "html"
OUTPUT_MODES = (OUTPUT_TEXT, OUTPUT_HTML)


@dataclass(frozen=True)
class ExtractionConfig:
    """Immutable set of parameters shared by the root and every embedded document.

    `end_page` of None means "up to the last page". An `end_page` lower than
    `start_page` is valid and selects no pages.
    """

    password: str = ""
    encoding: str = "UTF-8"
    sort_by_position: bool = False
    separate_beads: bool = True
    start_page: int = 1
    end_page: Optional[int] = None
    output_mode: str = OUTPUT_TEXT
    debug: bool = False

    @property
    def extension(self) -> str:
        return ".html" if self.output_mode == OUTPUT_HTML else ".txt"

    def page_range(self, page_count: int) -> range:
        """Return the 0-based page indices selected for a document of `page_count` pages."""
        last = page_count if self.end_page is None else min(self.end_page, page_count)
        first = max(1, self.start_page)
        if last < first:
            return range(0)
        return range(first - 1, last)


def load_defaults(path: str = DEFAULTS_PATH) -> Dict[str, Any]:
    """Load optional defaults from config/extract.json.

    Doxygen:
    - @param path: Absolute path to the JSON defaults file.
    - @return: Parsed dictionary, or an empty one when the file is missing or unreadable.
    """
    if not os.path.exists(path):
        logger.debug("No defaults file at %s, using built-in defaults", path)
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f) or {}
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not load defaults from %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Defaults file %s must contain a JSON object", path)
        return {}
    return data


def _parse_page(value: Union[str, int, None], flag: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ConfigError(f"{flag} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise ConfigError(f"{flag} must be an integer, got {value!r}") from None


def resolve_config(
    password: Optional[str] = None,
    encoding: Optional[str] = None,
    sort: Optional[bool] = None,
    ignore_beads: Optional[bool] = None,
    start_page: Union[str, int, None] = None,
    end_page: Union[str, int, None] = None,
    html: Optional[bool] = None,
    debug: bool = False,
    defaults: Optional[Dict[str, Any]] = None,
) -> ExtractionConfig:
    """Build a validated ExtractionConfig from raw parameters.

    Explicit arguments win over `defaults`; None means "not given". Only the
    page bounds are validated here. Encoding names are checked when the sink
    is opened.

    Doxygen:
    - @param start_page: 1-based first page; values below 1 are raised to 1.
    - @param end_page: 1-based last page (inclusive); None means unbounded.
    - @param defaults: Mapping as returned by `load_defaults`.
    - @return: Frozen ExtractionConfig.
    - @throws ConfigError: If a page bound is not an integer.
    """
    defaults = defaults or {}

    def pick(value: Any, key: str, fallback: Any) -> Any:
        if value is not None:
            return value
        return defaults.get(key, fallback)

    first = _parse_page(pick(start_page, "start_page", 1), "-startPage")
    last = _parse_page(pick(end_page, "end_page", None), "-endPage")

    return ExtractionConfig(
        password=pick(password, "password", "") or "",
        encoding=pick(encoding, "encoding", "UTF-8"),
        sort_by_position=bool(pick(sort, "sort", False)),
        separate_beads=not bool(pick(ignore_beads, "ignore_beads", False)),
        start_page=max(1, first if first is not None else 1),
        end_page=last,
        output_mode=OUTPUT_HTML if pick(html, "html", False) else OUTPUT_TEXT,
        debug=bool(debug),
    )
