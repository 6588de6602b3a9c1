from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
import pandas as pd
from .errors import EmptyFileError, NoValidDataError
from .header_detect import build_dataframe_with_headers, HEADER_SCAN_ROWS
from .infer import RoleMap, WIDE
from .models import ScoreRecord
from .utils import DEFAULTS, RULES, cell_text, to_number, try_parse_date, today_str

logger = logging.getLogger(__name__)

MaxScorePolicy = Callable[[float], float]

UNKNOWN_NAME = DEFAULTS.get("student_name", "غير معروف")
DEFAULT_SUBJECT = DEFAULTS.get("subject_name", "مادة عامة")
MAX_SCORE_THRESHOLD = float(RULES.get("max_score_threshold", 50))


def infer_max_score(score: float) -> float:
    # Magnitude guess: above 50 it must be out of 100, otherwise out of 50.
    # A 20-point sheet is read as out of 50.
    return 100.0 if score > MAX_SCORE_THRESHOLD else 50.0


def _default_fields(today: str) -> Dict[str, Any]:
    return {
        "grade_level": int(DEFAULTS.get("grade_level", 1)),
        "class_section": str(DEFAULTS.get("class_section", "أ")),
        "term": str(DEFAULTS.get("term", "الأول")),
        "exam_type": str(DEFAULTS.get("exam_type", "نهائي")),
        "exam_date": today,
        "weight": float(DEFAULTS.get("weight", 1)),
    }


def _identity(rm: RoleMap, row: Dict[str, Any], index: int) -> Tuple[str, str]:
    sid = rm.text(row, "student_id") or f"S{index}"
    name = rm.text(row, "student_name") or UNKNOWN_NAME
    return sid, name


def _rows(df: pd.DataFrame) -> List[Dict[str, Any]]:
    return df.to_dict(orient="records")


def filter_valid_rows(df: pd.DataFrame, rm: RoleMap) -> List[Dict[str, Any]]:
    # rows with neither an id nor a name are blank lines, totals, footers
    return [row for row in _rows(df) if rm.has_identity(row)]


def extract_wide(
    rows: Sequence[Dict[str, Any]],
    rm: RoleMap,
    max_score_policy: MaxScorePolicy = infer_max_score,
    subject_max_scores: Optional[Dict[str, float]] = None,
    today: Optional[str] = None,
) -> List[ScoreRecord]:
    """
    One row per student, one column per subject:
      - every column the role map left unassigned is a subject
      - a cell becomes a record only when it is numeric; other values are skipped
      - max_score comes from `subject_max_scores`, else from the policy
      - the layout carries no descriptive fields, they all get defaults
    """
    subject_max_scores = subject_max_scores or {}
    base = _default_fields(today or today_str())
    subject_cols = rm.subject_columns
    out: List[ScoreRecord] = []
    skipped = 0

    for i, row in enumerate(rows):
        sid, name = _identity(rm, row, i)
        for col in subject_cols:
            raw = row.get(col)
            if cell_text(raw) == "":
                continue
            score = to_number(raw)
            if score is None:
                skipped += 1
                continue
            max_score = subject_max_scores.get(col) or max_score_policy(score)
            out.append(ScoreRecord(
                student_id=sid,
                student_name=name,
                subject_code=col,
                subject_name=col,
                score=score,
                max_score=float(max_score),
                notes="",
                gender="",
                **base,
            ))

    if skipped:
        logger.debug("wide: %d non-numeric subject cells skipped", skipped)
    return out


def extract_long(
    rows: Sequence[Dict[str, Any]],
    rm: RoleMap,
    subject_max_scores: Optional[Dict[str, float]] = None,
    today: Optional[str] = None,
) -> List[ScoreRecord]:
    """
    One row per (student, subject). Missing score -> 0, missing max score -> 100
    (or the configured max of the subject); descriptive columns are read when present.
    """
    subject_max_scores = subject_max_scores or {}
    base = _default_fields(today or today_str())
    default_max = float(DEFAULTS.get("max_score", 100))
    out: List[ScoreRecord] = []

    for i, row in enumerate(rows):
        sid, name = _identity(rm, row, i)
        subject = rm.text(row, "subject", DEFAULT_SUBJECT)
        score = rm.number(row, "score", 0.0)

        max_score = rm.number(row, "max_score")
        if max_score is None or max_score <= 0:
            max_score = subject_max_scores.get(subject) or default_max

        grade_level = rm.number(row, "grade_level")
        exam_date_raw = rm.value(row, "exam_date")
        exam_date = try_parse_date(exam_date_raw) or cell_text(exam_date_raw) or base["exam_date"]

        out.append(ScoreRecord(
            student_id=sid,
            student_name=name,
            subject_code=rm.text(row, "subject_code", subject),
            subject_name=subject,
            score=score,
            max_score=float(max_score),
            grade_level=int(grade_level) if grade_level is not None else base["grade_level"],
            class_section=rm.text(row, "class_section", base["class_section"]),
            term=rm.text(row, "term", base["term"]),
            exam_type=rm.text(row, "exam_type", base["exam_type"]),
            exam_date=exam_date,
            weight=rm.number(row, "weight", base["weight"]),
            teacher_code=rm.text(row, "teacher_code") or None,
            teacher_name=rm.text(row, "teacher_name") or None,
            gender=rm.text(row, "gender"),
            notes=rm.text(row, "notes"),
        ))

    return out


def import_grid(
    grid: Sequence[Sequence[Any]],
    *,
    max_scan_rows: int = HEADER_SCAN_ROWS,
    header_row: Optional[int] = None,
    max_score_policy: MaxScorePolicy = infer_max_score,
    subject_max_scores: Optional[Dict[str, float]] = None,
    today: Optional[str] = None,
) -> Tuple[List[ScoreRecord], Dict[str, Any]]:
    """
    Raw grid -> score records.
    Raises EmptyFileError for a grid without rows, NoValidDataError when no row
    has an id/name or no record comes out of the mapping.
    """
    if not grid:
        raise EmptyFileError()

    if subject_max_scores is None:
        subject_max_scores = RULES.get("subject_max_scores") or {}

    df, meta = build_dataframe_with_headers(grid, override_header_row=header_row, max_scan_rows=max_scan_rows)
    rm = RoleMap.build(df.columns)

    rows = filter_valid_rows(df, rm)
    if not rows:
        raise NoValidDataError()

    if rm.format == WIDE:
        records = extract_wide(rows, rm, max_score_policy, subject_max_scores, today)
    else:
        records = extract_long(rows, rm, subject_max_scores, today)

    if not records:
        raise NoValidDataError()

    meta.update(rm.as_dict())
    meta["valid_rows"] = len(rows)
    meta["records"] = len(records)
    logger.info(
        "Imported %d records from %d rows (header row %d, %s format)",
        len(records), len(rows), meta["header_row"], rm.format,
    )
    return records, meta
