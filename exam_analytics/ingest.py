from __future__ import annotations
import csv
import logging
import zipfile
from io import BytesIO, StringIO
from typing import List, Dict, Any, Optional
import pandas as pd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from .errors import EmptyFileError

logger = logging.getLogger(__name__)

Grid = List[List[Any]]

CSV_ENCODINGS = ["utf-8-sig", "utf-8", "cp1256"]
# =========================

# Excel: sheet as a matrix, merged cells expanded
# =========================
def _sheet_to_matrix_with_merged(ws, max_rows: Optional[int] = None) -> Grid:
    merged_map = {}
    for r in ws.merged_cells.ranges:
        min_col, min_row, max_col, max_row = r.bounds
        top_val = ws.cell(min_row, min_col).value
        for rr in range(min_row, max_row + 1):
            for cc in range(min_col, max_col + 1):
                merged_map[(rr, cc)] = top_val

    rows = []
    max_r = ws.max_row
    max_c = ws.max_column
    if max_rows is not None:
        max_r = min(max_r, max_rows)

    for r in range(1, max_r + 1):
        row_vals = []
        for c in range(1, max_c + 1):
            v = ws.cell(r, c).value
            if (r, c) in merged_map and (v is None or str(v).strip() == ""):
                v = merged_map[(r, c)]
            row_vals.append(v)
        rows.append(row_vals)

    return _trim_grid(rows)


def _trim_grid(rows: Grid) -> Grid:
    # openpyxl reports formatted-but-empty trailing rows; drop them
    while rows and all(v is None or str(v).strip() == "" for v in rows[-1]):
        rows.pop()
    return rows


def _open_workbook(data: bytes, name: str):
    try:
        return load_workbook(BytesIO(data), read_only=False, data_only=True)
    except (KeyError, ValueError, InvalidFileException, zipfile.BadZipFile) as e:
        # .xls and odd workbooks: sheets are read by pandas, without merged cells
        logger.debug("openpyxl cannot open %s (%s), using pandas", name, e)
        return None
# =========================

# CSV: tolerant read from bytes (Excel "Save as CSV", Google Sheets exports)
# =========================
def _guess_delimiter(sample_text: str) -> str:
    # ',' for most exports, ';' from Arabic/European Excel locales, sometimes tabs
    try:
        dialect = csv.Sniffer().sniff(sample_text, delimiters=";,\t|")
        if dialect.delimiter:
            return dialect.delimiter
    except csv.Error:
        pass

    candidates = [";", ",", "\t", "|"]
    lines = [ln for ln in sample_text.splitlines() if ln.strip()][:20]
    if not lines:
        return ","

    scores = {}
    for d in candidates:
        cnts = [ln.count(d) for ln in lines]
        scores[d] = sum(cnts) / max(1, len(cnts))

    best = max(scores.items(), key=lambda x: x[1])[0]
    return best if scores.get(best, 0) > 0 else ","


def _decode_csv(data: bytes) -> str:
    for enc in CSV_ENCODINGS:
        try:
            return data.decode(enc)
        except UnicodeDecodeError as e:
            logger.debug("CSV is not %s: %s", enc, e)
    return data.decode("utf-8", errors="replace")


def _csv_width(text: str, delim: str) -> int:
    # title lines above the header are often a single cell, the widest line sets the column count
    return max((len(row) for row in csv.reader(StringIO(text), delimiter=delim)), default=0)


def _read_csv_bytes(data: bytes) -> pd.DataFrame:
    # header=None: the header row is located later, it stays an ordinary grid row here
    text = _decode_csv(data)
    delim = _guess_delimiter(text[:65536])
    width = _csv_width(text, delim)
    if width == 0:
        return pd.DataFrame()
    return pd.read_csv(
        StringIO(text),
        header=None,
        names=list(range(width)),
        sep=delim,
        engine="python",
        skip_blank_lines=True,
        dtype=object,
    )


def _frame_to_grid(df: pd.DataFrame) -> Grid:
    if df.empty:
        return []
    df = df.astype(object).where(df.notna(), None)
    return _trim_grid(df.values.tolist())
# =========================

# Main: uploads -> grids
# =========================
def load_tables_from_uploads(uploads) -> List[Dict[str, Any]]:
    """
    Returns one table per CSV file / Excel sheet:
      {
        "source_name": <file name>,
        "sheet_name": <sheet or 'CSV'>,
        "grid": list of rows (cells: str / number / datetime / None),
      }

    `uploads` are file-like objects with `.name` and `.getvalue()`
    (the shape of web-framework upload handles and of io.BytesIO with a name set).
    """
    tables: List[Dict[str, Any]] = []

    for up in uploads:
        name = up.name
        data = up.getvalue()

        if name.lower().endswith(".csv"):
            grid = _frame_to_grid(_read_csv_bytes(data))
            tables.append({"source_name": name, "sheet_name": "CSV", "grid": grid})
            continue

        # Excel: parsed once, then walked sheet by sheet
        xls = pd.ExcelFile(BytesIO(data))
        wb = _open_workbook(data, name)
        for sheet in xls.sheet_names:
            if wb is not None and sheet in wb.sheetnames:
                grid = _sheet_to_matrix_with_merged(wb[sheet])
            else:
                grid = _frame_to_grid(xls.parse(sheet_name=sheet, header=None))
            tables.append({"source_name": name, "sheet_name": sheet, "grid": grid})

        logger.info("Loaded %s: %d sheet(s)", name, len(xls.sheet_names))

    return tables


class _Upload:
    def __init__(self, name: str, data: bytes):
        self.name = name
        self._data = data

    def getvalue(self) -> bytes:
        return self._data


def load_grid(name: str, data: bytes) -> Grid:
    # Only the first sheet of a workbook is imported
    tables = load_tables_from_uploads([_Upload(name, data)])
    if not tables or not tables[0]["grid"]:
        raise EmptyFileError()
    return tables[0]["grid"]
