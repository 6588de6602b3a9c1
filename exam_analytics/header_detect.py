from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple
import pandas as pd
from .utils import norm_text, cell_text, RULES

logger = logging.getLogger(__name__)

# Any of these in a cell marks the header row: name / number / id
HEADER_KWS = ["اسم", "رقم", "id"]

HEADER_SCAN_ROWS = int(RULES.get("header_scan_rows", 20))


def _row_is_headerish(row: Sequence[Any]) -> bool:
    for v in row or []:
        t = norm_text(v)
        if t and any(k in t for k in HEADER_KWS):
            return True
    return False


def locate_header_row(grid: Sequence[Sequence[Any]], max_scan_rows: int = HEADER_SCAN_ROWS) -> int:
    """
    Index of the header row:
      - the first of the top `max_scan_rows` rows with a cell containing
        "اسم", "رقم" or "id" (normalized)
      - row 0 when none does
    A header below the scanned window is not found.
    """
    n = min(max_scan_rows, len(grid))
    for i in range(n):
        if _row_is_headerish(grid[i]):
            return i
    if grid:
        logger.warning("No header keywords in the first %d rows, using row 0", n)
    return 0


def _make_unique(cols: List[str]) -> List[str]:
    # "a", "a__2", "a" -> "a", "a__2", "a__3": a suffix never reuses a taken name
    used = set()
    out = []
    for c in cols:
        name = c
        n = 1
        while name in used:
            n += 1
            name = f"{c}__{n}"
        used.add(name)
        out.append(name)
    return out


def _clean_header_cell(v: Any) -> str:
    s = cell_text(v).replace("\ufeff", "").strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ('"', "'"):
        s = s[1:-1].strip()
    return s


def build_dataframe_with_headers(
    grid: Sequence[Sequence[Any]],
    override_header_row: Optional[int] = None,
    max_scan_rows: int = HEADER_SCAN_ROWS,
) -> Tuple[pd.DataFrame, Dict[str, Any]]:
    """
    Rows below the header become a DataFrame keyed by header text.
    Columns with a blank header are dropped; repeated headers get a "__2" suffix.
    Missing trailing cells of short rows are None.
    """
    if override_header_row is None:
        header_row = locate_header_row(grid, max_scan_rows=max_scan_rows)
    else:
        header_row = int(override_header_row)

    header_cells = list(grid[header_row]) if grid else []
    keep: List[int] = []
    headers: List[str] = []
    for i, v in enumerate(header_cells):
        h = _clean_header_cell(v)
        if h:
            keep.append(i)
            headers.append(h)
    headers = _make_unique(headers)

    records = []
    for row in grid[header_row + 1:]:
        row = list(row or [])
        records.append([row[i] if i < len(row) else None for i in keep])

    df = pd.DataFrame(records, columns=headers, dtype=object)
    meta = {"header_row": int(header_row), "columns": headers}
    logger.debug("Header row %d: %s", header_row, headers)
    return df, meta
