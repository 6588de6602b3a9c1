from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple
from .utils import norm_text, is_empty, cell_text, to_number

logger = logging.getLogger(__name__)

WIDE = "wide"
LONG = "long"

# Any header containing one of these means one row per (student, subject)
LONG_FORMAT_KWS = ["الماده", "ماده"]

# Ordered: the first role whose patterns match a header wins. More specific
# roles come first ("اسم المعلم" before "اسم", "الدرجة العظمى" before "الدرجة",
# "تاريخ الاختبار" before "الاختبار", "الفصل الدراسي" before "الفصل").
ROLE_PATTERNS: List[Tuple[str, List[str]]] = [
    ("teacher_code", ["كود المعلم", "teachercode"]),
    ("teacher_name", ["اسم المعلم", "المعلم", "teachername", "teacher"]),
    ("subject_code", ["كود المادة", "subjectcode"]),
    ("max_score", ["العظمى", "عظمى", "maxscore", "نهاية"]),
    ("subject", ["المادة", "subject", "المواد", "مادة"]),
    ("score", ["الدرجة", "score", "النتيجة", "درجة", "الدرجات"]),
    ("student_id", ["رقم", "id", "رقم جلوس", "كود", "رقم طالب", "studentid", "code"]),
    ("student_name", ["اسم", "الاسم", "name", "طالب", "طالبة", "studentname"]),
    ("grade_level", ["الصف", "المستوى", "gradelevel", "grade"]),
    ("term", ["الفصل الدراسي", "الترم", "term"]),
    ("class_section", ["الشعبة", "الفصل", "فصل", "section", "class", "مجموعة"]),
    ("exam_date", ["تاريخ الاختبار", "التاريخ", "تاريخ", "examdate", "date"]),
    ("exam_type", ["نوع الاختبار", "الاختبار", "examtype"]),
    ("weight", ["الوزن", "weight"]),
    ("notes", ["ملاحظات", "الملاحظات", "notes"]),
    ("gender", ["الجنس", "النوع", "gender"]),
    ("summary", ["المعدل", "النسبة", "التقدير", "الترتيب", "average", "percentage", "rank", "total", "المجموع", "مجموع"]),
    ("serial", ["مسلسل", "تسلسل", "serial"]),
]

# Row-number columns are too short for containment matching
EXACT_HEADERS = {"م": "serial", "ت": "serial", "no": "serial", "sn": "serial", "n": "serial"}

IDENTITY_ROLES = ("student_id", "student_name")
LONG_ONLY_ROLES = ("subject", "score", "max_score", "subject_code")

# In a wide sheet a header claimed by any of these is metadata, never a subject
WIDE_ROLES = [r for r, _ in ROLE_PATTERNS if r not in LONG_ONLY_ROLES]
LONG_ROLES = [r for r, _ in ROLE_PATTERNS if r != "summary"]


def classify_format(columns: Iterable[Any]) -> str:
    # decided once per import from the header keys, never per row
    for c in columns:
        n = norm_text(c)
        if any(k in n for k in LONG_FORMAT_KWS):
            return LONG
    return WIDE


_NORM_PATTERNS = [(role, [norm_text(p) for p in patterns]) for role, patterns in ROLE_PATTERNS]

# shorter headers ("pe", "ا") sit inside too many patterns
MIN_REVERSE_LEN = 3


def match_role(header: Any, roles: Optional[Iterable[str]] = None) -> Optional[str]:
    """
    Zero or one role for a header; `roles` limits the candidates.
    A pattern matches when the header contains it or it contains the header.
    The first pass only looks for the pattern inside the header, so "Score"
    is a score and not "maxscore", "المادة" a subject and not "كود المادة".
    """
    n = norm_text(header)
    if not n:
        return None
    allowed = set(roles) if roles is not None else None
    exact = EXACT_HEADERS.get(n)
    if exact and (allowed is None or exact in allowed):
        return exact
    candidates = [(r, ps) for r, ps in _NORM_PATTERNS if allowed is None or r in allowed]

    for role, patterns in candidates:
        if any(p in n for p in patterns):
            return role

    if len(n) >= MIN_REVERSE_LEN:
        for role, patterns in candidates:
            if any(n in p for p in patterns):
                return role
    return None


class RoleMap:
    """
    {raw_header -> role} built once per import. Everything after it reads
    cells by role, never by header text.
    """

    def __init__(self, fmt: str, roles: Dict[str, Optional[str]]):
        self.format = fmt
        self.roles = dict(roles)
        self._by_role: Dict[str, List[str]] = {}
        for col, role in self.roles.items():
            if role:
                self._by_role.setdefault(role, []).append(col)

    @classmethod
    def build(cls, columns: Iterable[Any], fmt: Optional[str] = None) -> "RoleMap":
        cols = [str(c) for c in columns]
        fmt = fmt or classify_format(cols)
        allowed = WIDE_ROLES if fmt == WIDE else LONG_ROLES
        roles = {c: match_role(c, allowed) for c in cols}
        for c, r in roles.items():
            logger.debug("column %r -> %s", c, r or "-")
        return cls(fmt, roles)

    def column(self, role: str) -> Optional[str]:
        cols = self._by_role.get(role)
        return cols[0] if cols else None

    def columns(self, role: str) -> List[str]:
        return list(self._by_role.get(role, []))

    @property
    def subject_columns(self) -> List[str]:
        # wide format only: columns no role claimed
        if self.format != WIDE:
            return []
        return [c for c, r in self.roles.items() if r is None and norm_text(c)]

    def value(self, row: Dict[str, Any], role: str) -> Any:
        col = self.column(role)
        if col is None:
            return None
        return row.get(col)

    def text(self, row: Dict[str, Any], role: str, default: str = "") -> str:
        t = cell_text(self.value(row, role))
        return t if t else default

    def number(self, row: Dict[str, Any], role: str, default: Optional[float] = None) -> Optional[float]:
        x = to_number(self.value(row, role))
        return default if x is None else x

    def has_identity(self, row: Dict[str, Any]) -> bool:
        # a row is usable when any id/name column holds something
        for role in IDENTITY_ROLES:
            for col in self._by_role.get(role, []):
                if not is_empty(row.get(col)):
                    return True
        return False

    def as_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format,
            "roles": dict(self.roles),
            "subject_cols": self.subject_columns,
        }
