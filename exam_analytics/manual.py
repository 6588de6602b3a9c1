from __future__ import annotations
import time
from typing import Any, Dict, List, Optional, Sequence
from .models import ScoreRecord
from .utils import DEFAULTS, to_number, today_str

NEW_STUDENT_NAME = "طالب جديد"
NEW_SUBJECT_NAME = "مادة جديدة"


def _as_float(x: Any, default: float = 0.0) -> float:
    v = to_number(x)
    return default if v is None else v


def _subjects(records: Sequence[ScoreRecord]) -> List[str]:
    return list(dict.fromkeys(r.subject_name for r in records))


def _students(records: Sequence[ScoreRecord]) -> Dict[str, str]:
    # id -> name of the first record, in order of first appearance
    out: Dict[str, str] = {}
    for r in records:
        out.setdefault(r.student_id, r.student_name)
    return out


def _new_student_id(existing) -> str:
    base = f"NEW-{int(time.time() * 1000)}"
    sid = base
    n = 1
    while sid in existing:
        n += 1
        sid = f"{base}-{n}"
    return sid


def blank_record(student_id: str, student_name: str, subject: str, today: Optional[str] = None) -> ScoreRecord:
    return ScoreRecord(
        student_id=student_id,
        student_name=student_name,
        subject_code=subject,
        subject_name=subject,
        score=0.0,
        max_score=float(DEFAULTS.get("max_score", 100)),
        grade_level=int(DEFAULTS.get("grade_level", 1)),
        class_section=str(DEFAULTS.get("class_section", "أ")),
        term=str(DEFAULTS.get("term", "الأول")),
        exam_type=str(DEFAULTS.get("exam_type", "نهائي")),
        exam_date=today or today_str(),
        weight=float(DEFAULTS.get("weight", 1)),
        notes="",
        gender="",
    )


def add_student(records: Sequence[ScoreRecord], student_name: str = NEW_STUDENT_NAME) -> List[ScoreRecord]:
    # zero score in every existing subject (or one placeholder subject)
    subjects = _subjects(records) or [NEW_SUBJECT_NAME]
    sid = _new_student_id(_students(records))
    return list(records) + [blank_record(sid, student_name, s) for s in subjects]


def add_subject(records: Sequence[ScoreRecord], subject: Optional[str] = None) -> List[ScoreRecord]:
    # zero score for every existing student (or one new student)
    subjects = _subjects(records)
    subject = (subject or "").strip() or f"مادة {len(subjects) + 1}"
    students = _students(records)
    if not students:
        return [blank_record(_new_student_id(students), NEW_STUDENT_NAME, subject)]
    return list(records) + [blank_record(sid, name, subject) for sid, name in students.items()]


def update_score(records: Sequence[ScoreRecord], student_id: str, subject: str, value: Any) -> List[ScoreRecord]:
    score = _as_float(value, 0.0)
    return [
        r.with_changes(score=score) if (r.student_id == student_id and r.subject_name == subject) else r
        for r in records
    ]


def rename_student(records: Sequence[ScoreRecord], student_id: str, name: str) -> List[ScoreRecord]:
    return [r.with_changes(student_name=name) if r.student_id == student_id else r for r in records]


def change_student_id(records: Sequence[ScoreRecord], student_id: str, new_id: str) -> List[ScoreRecord]:
    return [r.with_changes(student_id=new_id) if r.student_id == student_id else r for r in records]


def rename_subject(records: Sequence[ScoreRecord], old: str, new: str) -> List[ScoreRecord]:
    new = (new or "").strip()
    if not new:
        return list(records)
    return [
        r.with_changes(subject_name=new, subject_code=new) if r.subject_name == old else r
        for r in records
    ]


def remove_student(records: Sequence[ScoreRecord], student_id: str) -> List[ScoreRecord]:
    return [r for r in records if r.student_id != student_id]


def remove_subject(records: Sequence[ScoreRecord], subject: str) -> List[ScoreRecord]:
    return [r for r in records if r.subject_name != subject]


def wide_view(records: Sequence[ScoreRecord]) -> Dict[str, Any]:
    """
    Student x subject view of the records, the shape an editing table shows:
      {"subjects": [...], "rows": [{"id", "name", "scores": {subject: score}}]}
    """
    rows: Dict[str, Dict[str, Any]] = {}
    for r in records:
        row = rows.setdefault(r.student_id, {"id": r.student_id, "name": r.student_name, "scores": {}})
        row["scores"][r.subject_name] = r.score
    return {"subjects": _subjects(records), "rows": list(rows.values())}
