from __future__ import annotations
import logging
from itertools import combinations
from typing import Any, Dict, List, Sequence
from rapidfuzz import fuzz
from .models import ScoreRecord
from .utils import RULES, norm_text

logger = logging.getLogger(__name__)

SIMILAR_NAME_THRESHOLD = int(RULES.get("similar_name_threshold", 92))

ISSUE_MAP = {
    "missing_scores": ("error", "يوجد {n} سجلات تفتقد للدرجات"),
    "out_of_range": ("error", "يوجد {n} درجات خارج النطاق المسموح"),
    "duplicates": ("warning", "تم اكتشاف {n} سجلات مكررة محتملة"),
    "similar_names": ("info", "يوجد {n} أزواج من الطلاب بأسماء متشابهة وأرقام مختلفة"),
}


def _sim(a: str, b: str) -> int:
    return int(fuzz.ratio(a, b))


def _is_missing(r: ScoreRecord) -> bool:
    return r.score is None or r.score != r.score


def similar_name_pairs(records: Sequence[ScoreRecord], threshold: int = SIMILAR_NAME_THRESHOLD) -> List[Dict[str, Any]]:
    """
    Students with different ids whose normalized names are (almost) the same:
    usually one student typed twice with a different number.
    """
    names: Dict[str, str] = {}
    for r in records:
        names.setdefault(r.student_id, r.student_name)

    canon = {sid: norm_text(n) for sid, n in names.items()}
    # short names ("علي") say nothing about identity
    ids = [sid for sid, n in canon.items() if len(n) >= 5]

    out = []
    for a, b in combinations(ids, 2):
        sc = _sim(canon[a], canon[b])
        if sc >= threshold:
            out.append({
                "student_id_a": a,
                "student_name_a": names[a],
                "student_id_b": b,
                "student_name_b": names[b],
                "similarity": sc,
            })
    return out


def quality_report(records: Sequence[ScoreRecord], similar_threshold: int = SIMILAR_NAME_THRESHOLD) -> Dict[str, Any]:
    """
    Data-quality summary of the current records:
      - missing scores, scores outside 0..max_score
      - potential duplicates: same (student_id, subject_code, term) more than once
      - quality score 0..100 penalising the three above
      - issues list [{"level", "code", "message", "count"}]
    """
    total = len(records)
    if total == 0:
        return {"total": 0, "missing_scores": 0, "out_of_range": 0, "duplicates": 0,
                "similar_names": [], "issues": [], "score": 0.0}

    missing = sum(1 for r in records if _is_missing(r))
    out_of_range = sum(1 for r in records if not _is_missing(r) and (r.score < 0 or r.score > r.max_score))
    keys = {(r.student_id, r.subject_code, r.term) for r in records}
    duplicates = total - len(keys)
    similar = similar_name_pairs(records, similar_threshold)

    counts = {
        "missing_scores": missing,
        "out_of_range": out_of_range,
        "duplicates": duplicates,
        "similar_names": len(similar),
    }
    issues = []
    for code, n in counts.items():
        if n <= 0:
            continue
        level, msg = ISSUE_MAP[code]
        issues.append({"level": level, "code": code, "message": msg.format(n=n), "count": n})

    score = max(0.0, 100 - missing / total * 50 - out_of_range / total * 50 - duplicates / total * 20)
    if issues:
        logger.info("Quality check: %d issue type(s), score %.1f", len(issues), score)

    return {
        "total": total,
        "missing_scores": missing,
        "out_of_range": out_of_range,
        "duplicates": duplicates,
        "similar_names": similar,
        "issues": issues,
        "score": score,
    }
