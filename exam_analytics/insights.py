from __future__ import annotations
from typing import Any, Dict, List, Sequence
from .models import ScoreRecord, StudentSummary
from .ranking import CATEGORY_ORDER, categorize
from .scoring import compute_descriptive, records_to_frame


def overview(records: Sequence[ScoreRecord], summaries: Sequence[StudentSummary]) -> Dict[str, Any]:
    """Headline indicators over the student averages."""
    n = len(summaries)
    avgs = [s.avg for s in summaries]
    distribution = {c: 0 for c in CATEGORY_ORDER}
    for s in summaries:
        distribution[s.category or categorize(s.avg)[0]] += 1

    return {
        "total_students": len({r.student_id for r in records}),
        "total_subjects": len({r.subject_name for r in records}),
        "avg_score": sum(avgs) / n if n else 0.0,
        "success_rate": sum(1 for a in avgs if a >= 50) / n * 100 if n else 0.0,
        "excellence_rate": sum(1 for a in avgs if a >= 90) / n * 100 if n else 0.0,
        "at_risk_count": sum(1 for a in avgs if a < 50),
        "category_distribution": distribution,
    }


def school_stats(summaries: Sequence[StudentSummary]) -> Dict[str, float]:
    # spread of the student averages across the whole school
    return compute_descriptive([s.avg for s in summaries])


def section_performance(records: Sequence[ScoreRecord]) -> List[Dict[str, Any]]:
    # mean record percentage per class section, best first
    df = records_to_frame(records)
    if df.empty:
        return []
    out = [
        {"class_section": sec, "avg": float(block["percentage"].mean()), "count": int(len(block))}
        for sec, block in df.groupby("class_section", sort=False)
    ]
    return sorted(out, key=lambda x: x["avg"], reverse=True)


def subject_roster(records: Sequence[ScoreRecord], subject: str) -> List[Dict[str, Any]]:
    """Students of one subject, highest score first, each with the category of its own percentage."""
    rows = []
    for r in records:
        if r.subject_name != subject:
            continue
        category, recommendation = categorize(r.percentage)
        rows.append({
            "student_id": r.student_id,
            "student_name": r.student_name,
            "score": r.score,
            "max_score": r.max_score,
            "percentage": r.percentage,
            "category": category,
            "recommendation": recommendation,
        })
    rows.sort(key=lambda x: x["score"], reverse=True)
    return rows
