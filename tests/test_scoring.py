import math
import pytest
from exam_analytics.models import ScoreRecord
from exam_analytics.extract import import_grid
from exam_analytics.scoring import (
    compute_descriptive,
    compute_subject_stats,
    compute_student_summaries,
    compute_statistics,
)


def rec(sid, subject, score, max_score=100, name=None):
    return ScoreRecord(
        student_id=sid,
        student_name=name or f"طالب {sid}",
        subject_code=subject,
        subject_name=subject,
        score=score,
        max_score=max_score,
    )


def test_descriptive_empty():
    assert compute_descriptive([]) == {"avg": 0.0, "median": 0.0, "min": 0.0, "max": 0.0, "std_dev": 0.0}


def test_descriptive_single_value():
    d = compute_descriptive([80])
    assert d["avg"] == 80
    assert d["median"] == 80
    assert d["std_dev"] == 0


def test_descriptive_population_std():
    d = compute_descriptive([60, 70, 80, 90])
    assert d["avg"] == 75
    assert d["median"] == 75
    assert d["min"] == 60
    assert d["max"] == 90
    assert d["std_dev"] == pytest.approx(math.sqrt(125))


def test_record_rejects_non_positive_max():
    with pytest.raises(ValueError):
        rec("1", "x", 10, max_score=0)


def test_percentage_follows_score():
    r = rec("1", "x", 20, max_score=50)
    assert r.percentage == pytest.approx(40.0)
    assert r.with_changes(score=45).percentage == pytest.approx(90.0)
    assert r.to_dict()["percentage"] == pytest.approx(40.0)


def test_pass_boundary_is_inclusive():
    stats = compute_subject_stats([rec("1", "علوم", 25, 50), rec("2", "علوم", 24, 50)])
    s = stats["علوم"]
    assert s.count == 2
    assert s.pass_rate == pytest.approx(50.0)
    assert s.excellence_rate == 0


def test_subject_stats_long(long_grid):
    records, _ = import_grid(long_grid, today="2024-01-01")
    stats = compute_subject_stats(records)
    assert list(stats) == ["رياضيات", "علوم"]
    math_stats = stats["رياضيات"]
    assert math_stats.avg == pytest.approx(22.5)
    assert math_stats.std_dev == pytest.approx(22.5)
    assert math_stats.pass_rate == pytest.approx(50.0)
    assert math_stats.excellence_rate == pytest.approx(50.0)
    assert stats["علوم"].count == 1


def test_student_summaries_weight_by_max_score(long_grid):
    records, _ = import_grid(long_grid, today="2024-01-01")
    summaries = {s.student_id: s for s in compute_student_summaries(records)}
    ahmed = summaries["1"]
    assert ahmed.total_score == 125
    assert ahmed.max_possible == 150
    assert ahmed.avg == pytest.approx(83.3333, rel=1e-4)
    assert ahmed.subject_scores == {"رياضيات": pytest.approx(90.0), "علوم": pytest.approx(80.0)}
    assert summaries["2"].avg == 0


def test_statistics_empty():
    out = compute_statistics([])
    assert out == {"subject_stats": {}, "student_summaries": []}


def test_statistics_does_not_mutate_input(wide_grid):
    records, _ = import_grid(wide_grid, today="2024-01-01")
    before = list(records)
    out = compute_statistics(records)
    assert records == before
    ranked = out["student_summaries"]
    assert [s.student_id for s in ranked] == ["294", "2910"]
    assert [s.rank for s in ranked] == [1, 2]
