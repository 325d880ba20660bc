"""Page layout helpers: positioned text fragments, line grouping and bead regions.

This module provides:
- Collecting positioned text fragments from a pypdf page into a DataFrame.
- Reading the article bead rectangles attached to a page.
- Assigning fragments to bead regions and rendering regions as text lines,
  optionally sorted by on-page position.

Coordinates are PDF user space: origin bottom-left, y grows upwards.
"""

from __future__ import annotations

from typing import Any, List, Tuple

import numpy as np
import pandas as pd

Rect = Tuple[float, float, float, float]

FRAGMENT_COLUMNS = ["text", "x", "y", "size", "order"]


def _mult(m: List[float], n: List[float]) -> List[float]:
    return [
        m[0] * n[0] + m[1] * n[2],
        m[0] * n[1] + m[1] * n[3],
        m[2] * n[0] + m[3] * n[2],
        m[2] * n[1] + m[3] * n[3],
        m[4] * n[0] + m[5] * n[2] + n[4],
        m[4] * n[1] + m[5] * n[3] + n[5],
    ]


def collect_fragments(page: Any) -> pd.DataFrame:
    """Extract positioned text fragments from a page.

    Doxygen:
    - @param page: pypdf PageObject.
    - @return: DataFrame with columns text, x, y, size, order. Whitespace-only
      fragments are dropped; `order` is the content-stream order.
    """
    rows: List[dict] = []

    def visitor(text, cm, tm, font_dict, font_size):
        if not text or not text.strip():
            return
        m = _mult([float(v) for v in tm], [float(v) for v in cm])
        scale = float(np.hypot(m[2], m[3])) or 1.0
        for part in text.split("\n"):
            if part.strip():
                rows.append({
                    "text": part.strip(),
                    "x": m[4],
                    "y": m[5],
                    "size": float(font_size or 0.0) * scale,
                    "order": len(rows),
                })

    page.extract_text(visitor_text=visitor)
    return pd.DataFrame(rows, columns=FRAGMENT_COLUMNS)


def _rect_from_array(values: Any) -> Rect:
    x0, y0, x1, y1 = (float(v) for v in values)
    return min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1)


def page_beads(page: Any) -> List[Rect]:
    """Return the bead rectangles of a page in their /B array order."""
    beads = page.get("/B")
    if beads is None:
        return []
    rects: List[Rect] = []
    for bead in beads.get_object():
        bead = bead.get_object()
        rect = bead.get("/R") if hasattr(bead, "get") else None
        if rect is None:
            continue
        try:
            rects.append(_rect_from_array(rect.get_object()))
        except (TypeError, ValueError):
            continue
    return rects


def assign_regions(df: pd.DataFrame, beads: List[Rect]) -> pd.DataFrame:
    """Label every fragment with the index of the first bead containing it.

    Fragments outside every bead get region `len(beads)`, which sorts last.
    """
    df = df.copy()
    region = np.full(len(df), len(beads), dtype=int)
    xs = df["x"].to_numpy(dtype=float)
    ys = df["y"].to_numpy(dtype=float)
    # Walk beads in reverse so the first matching bead wins
    for idx in range(len(beads) - 1, -1, -1):
        x0, y0, x1, y1 = beads[idx]
        inside = (xs >= x0) & (xs <= x1) & (ys >= y0) & (ys <= y1)
        region[inside] = idx
    df["region"] = region
    return df


def _line_tolerance(df: pd.DataFrame) -> float:
    sizes = df["size"][df["size"] > 0]
    if sizes.empty:
        return 2.0
    return max(1.0, float(sizes.median()) * 0.5)


def group_fragments_to_lines(df: pd.DataFrame, sort: bool) -> List[str]:
    """Join fragments into text lines.

    With `sort`, lines run top to bottom and fragments left to right. Without
    it, the content-stream order is kept and a new line starts whenever the
    baseline moves by more than the tolerance.
    """
    if df.empty:
        return []
    tol = _line_tolerance(df)
    if sort:
        df = df.sort_values(["y", "x"], ascending=[False, True], kind="mergesort")
    else:
        df = df.sort_values("order", kind="mergesort")
    gaps = np.abs(np.diff(df["y"].to_numpy(dtype=float))) > tol
    line_ids = np.concatenate([[0], np.cumsum(gaps)])
    df = df.assign(line=line_ids)

    lines: List[str] = []
    for _, g in df.groupby("line", sort=True):
        if sort:
            g = g.sort_values("x", kind="mergesort")
        lines.append(" ".join(g["text"].tolist()))
    return lines


def render_page(page: Any, sort: bool, separate_beads: bool) -> str:
    """Return the text of one page honoring the sort and bead flags.

    Without sorting and without beads on the page, pypdf's own reading order is
    returned untouched.
    """
    beads = page_beads(page) if separate_beads else []
    if not sort and not beads:
        return page.extract_text() or ""

    df = collect_fragments(page)
    if df.empty:
        return ""
    df = assign_regions(df, beads)
    blocks: List[str] = []
    for _, region in df.groupby("region", sort=True):
        lines = group_fragments_to_lines(region, sort)
        if lines:
            blocks.append("\n".join(lines))
    return "\n".join(blocks)
