from __future__ import annotations
from typing import Any, Dict, List, Sequence
import numpy as np
import pandas as pd
from .models import ScoreRecord, SubjectStatistics, StudentSummary
from .ranking import rank_students
from .utils import RULES

PASS_RATIO = float(RULES.get("pass_ratio", 0.5))
EXCELLENCE_RATIO = float(RULES.get("excellence_ratio", 0.9))

_ZERO = {"avg": 0.0, "median": 0.0, "min": 0.0, "max": 0.0, "std_dev": 0.0}


def compute_descriptive(scores: Sequence[float]) -> Dict[str, float]:
    """
    avg / median / min / max / std_dev of a list of numbers.
    std_dev is the population one (divides by n). An empty list gives all zeros.
    """
    if len(scores) == 0:
        return dict(_ZERO)
    arr = np.asarray(scores, dtype=float)
    return {
        "avg": float(arr.mean()),
        "median": float(np.median(arr)),
        "min": float(arr.min()),
        "max": float(arr.max()),
        "std_dev": float(arr.std(ddof=0)),
    }


def records_to_frame(records: Sequence[ScoreRecord]) -> pd.DataFrame:
    cols = ["student_id", "student_name", "subject_name", "class_section", "score", "max_score"]
    df = pd.DataFrame(
        [{c: getattr(r, c) for c in cols} for r in records],
        columns=cols,
    )
    df["score"] = df["score"].astype(float)
    df["max_score"] = df["max_score"].astype(float)
    df["ratio"] = df["score"] / df["max_score"]
    df["percentage"] = df["ratio"] * 100
    return df


def compute_subject_stats(
    records: Sequence[ScoreRecord],
    pass_ratio: float = PASS_RATIO,
    excellence_ratio: float = EXCELLENCE_RATIO,
) -> Dict[str, SubjectStatistics]:
    # keyed by subject_name, in order of first appearance
    df = records_to_frame(records)
    out: Dict[str, SubjectStatistics] = {}
    if df.empty:
        return out

    for subject, block in df.groupby("subject_name", sort=False):
        n = len(block)
        desc = compute_descriptive(block["score"].tolist())
        out[subject] = SubjectStatistics(
            subject_name=subject,
            pass_rate=float((block["ratio"] >= pass_ratio).sum()) / n * 100,
            excellence_rate=float((block["ratio"] >= excellence_ratio).sum()) / n * 100,
            count=int(n),
            **desc,
        )
    return out


def compute_student_summaries(records: Sequence[ScoreRecord]) -> List[StudentSummary]:
    """
    One summary per student_id, unranked, in order of first appearance:
      - avg = total score / total max score * 100, so subjects marked out of
        100 weigh twice those out of 50
      - subject_scores holds each subject's own percentage
    """
    df = records_to_frame(records)
    out: List[StudentSummary] = []
    if df.empty:
        return out

    for sid, block in df.groupby("student_id", sort=False):
        total = float(block["score"].sum())
        max_possible = float(block["max_score"].sum())
        subject_scores: Dict[str, float] = {}
        for subj, pct in zip(block["subject_name"], block["percentage"]):
            subject_scores[subj] = float(pct)
        out.append(StudentSummary(
            student_id=sid,
            student_name=block["student_name"].iloc[0],
            avg=total / max_possible * 100 if max_possible else 0.0,
            total_score=total,
            max_possible=max_possible,
            subject_scores=subject_scores,
        ))
    return out


def compute_statistics(records: Sequence[ScoreRecord]) -> Dict[str, Any]:
    """
    Full recompute from a snapshot of the records; nothing shared is mutated.
    Returns {"subject_stats": {name: SubjectStatistics}, "student_summaries": [StudentSummary ranked]}.
    """
    snapshot = list(records)
    return {
        "subject_stats": compute_subject_stats(snapshot),
        "student_summaries": rank_students(compute_student_summaries(snapshot)),
    }
