from __future__ import annotations
from dataclasses import dataclass, field, asdict, replace
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ScoreRecord:
    """One observed score of one student in one subject."""
    student_id: str
    student_name: str
    subject_code: str
    subject_name: str
    score: float
    max_score: float
    grade_level: int = 1
    class_section: str = "أ"
    term: str = "الأول"
    exam_type: str = "نهائي"
    exam_date: str = ""
    weight: float = 1.0
    teacher_code: Optional[str] = None
    teacher_name: Optional[str] = None
    gender: Optional[str] = None
    notes: Optional[str] = None

    def __post_init__(self):
        if not self.max_score or self.max_score <= 0:
            raise ValueError(f"max_score must be > 0, got {self.max_score!r}")

    @property
    def ratio(self) -> float:
        return self.score / self.max_score

    @property
    def percentage(self) -> float:
        # never stored: follows score/max_score through every edit
        return self.ratio * 100

    def with_changes(self, **changes: Any) -> "ScoreRecord":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["percentage"] = self.percentage
        return d


@dataclass
class SubjectStatistics:
    subject_name: str
    avg: float = 0.0
    median: float = 0.0
    min: float = 0.0
    max: float = 0.0
    std_dev: float = 0.0
    pass_rate: float = 0.0
    excellence_rate: float = 0.0
    count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StudentSummary:
    student_id: str
    student_name: str
    avg: float
    total_score: float
    max_possible: float
    rank: int = 0
    percentile: float = 0.0
    category: str = ""
    recommendation: str = ""
    subject_scores: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
