import pytest
from exam_analytics.extract import import_grid
from exam_analytics.insights import overview, school_stats, section_performance, subject_roster
from exam_analytics.scoring import compute_statistics


def test_overview_wide(wide_grid):
    records, _ = import_grid(wide_grid, today="2024-01-01")
    summaries = compute_statistics(records)["student_summaries"]
    ov = overview(records, summaries)
    assert ov["total_students"] == 2
    assert ov["total_subjects"] == 2
    assert ov["avg_score"] == pytest.approx(80.0)
    assert ov["success_rate"] == 100
    assert ov["excellence_rate"] == 0
    assert ov["at_risk_count"] == 0
    assert ov["category_distribution"]["جيد جداً"] == 2
    assert sum(ov["category_distribution"].values()) == 2


def test_overview_empty():
    ov = overview([], [])
    assert ov["total_students"] == 0
    assert ov["avg_score"] == 0


def test_school_stats(long_grid):
    records, _ = import_grid(long_grid, today="2024-01-01")
    stats = school_stats(compute_statistics(records)["student_summaries"])
    assert stats["avg"] == pytest.approx(125 / 150 * 100 / 2)
    assert stats["min"] == 0


def test_section_performance(long_grid):
    records, _ = import_grid(long_grid, today="2024-01-01")
    sections = section_performance(records)
    assert [s["class_section"] for s in sections] == ["ب", "أ"]
    assert sections[0]["avg"] == pytest.approx(85.0)
    assert sections[0]["count"] == 2
    assert section_performance([]) == []


def test_subject_roster(long_grid):
    records, _ = import_grid(long_grid, today="2024-01-01")
    roster = subject_roster(records, "رياضيات")
    assert [r["student_name"] for r in roster] == ["أحمد علي", "سارة محمد"]
    assert roster[0]["category"] == "متميز"
    assert roster[1]["category"] == "معرض للخطر"
    assert subject_roster(records, "فلسفة") == []
