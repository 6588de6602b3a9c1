from __future__ import annotations
from dataclasses import replace
from typing import List, Sequence, Tuple
from .models import StudentSummary

# (lower bound %, category, recommendation), checked top-down
CATEGORIES: List[Tuple[float, str, str]] = [
    (90.0, "متميز", "برامج إثراء + مشاريع بحثية"),
    (75.0, "جيد جداً", "تثبيت + مراجعة متقدمة"),
    (60.0, "جيد", "تحسينات محددة + تمارين إضافية"),
    (50.0, "بحاجة دعم", "خطة علاجية + حصص تقوية"),
]
AT_RISK = ("معرض للخطر", "تدخل عاجل + متابعة مكثفة")

CATEGORY_ORDER = [c for _, c, _ in CATEGORIES] + [AT_RISK[0]]


def categorize(percentage: float) -> Tuple[str, str]:
    """(category, recommendation) for a subject- or student-level percentage."""
    for bound, category, recommendation in CATEGORIES:
        if percentage >= bound:
            return category, recommendation
    return AT_RISK


def rank_students(summaries: Sequence[StudentSummary]) -> List[StudentSummary]:
    """
    New list, best first:
      - order: avg descending, ties by student name then id
      - rank = position + 1; equal averages still get consecutive ranks
      - percentile = (N - position) / N * 100, so 100 for the first and 100/N for the last
      - category/recommendation from the student's avg
    """
    ordered = sorted(summaries, key=lambda s: (-s.avg, s.student_name, s.student_id))
    n = len(ordered)
    out: List[StudentSummary] = []
    for i, s in enumerate(ordered):
        category, recommendation = categorize(s.avg)
        out.append(replace(
            s,
            rank=i + 1,
            percentile=(n - i) / n * 100,
            category=category,
            recommendation=recommendation,
            subject_scores=dict(s.subject_scores),
        ))
    return out
