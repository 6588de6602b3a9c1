import pytest
from exam_analytics.errors import EmptyFileError, NoValidDataError
from exam_analytics.session import AnalysisSession


def test_load_and_statistics(long_grid):
    session = AnalysisSession()
    meta = session.load_grid(long_grid, today="2024-01-01")
    assert meta["format"] == "long"
    assert len(session) == 3

    stats = session.statistics()
    assert stats["student_summaries"][0].student_id == "1"
    assert stats["subject_stats"]["رياضيات"].count == 2


def test_failed_import_keeps_previous_records(long_grid):
    session = AnalysisSession()
    session.load_grid(long_grid, today="2024-01-01")
    with pytest.raises(EmptyFileError):
        session.load_grid([])
    with pytest.raises(NoValidDataError):
        session.load_grid([["رقم الطالب", "اسم الطالب"]])
    assert len(session) == 3


def test_edits_are_reflected_in_statistics(long_grid):
    session = AnalysisSession()
    session.load_grid(long_grid, today="2024-01-01")
    session.update_score("2", "رياضيات", 50)
    ranked = session.statistics()["student_summaries"]
    assert ranked[0].student_id == "2"
    assert ranked[0].avg == pytest.approx(100.0)

    session.remove_subject("علوم")
    assert session.statistics()["subject_stats"].keys() == {"رياضيات"}
    assert session.overview()["total_subjects"] == 1


def test_records_property_is_a_copy(long_grid):
    session = AnalysisSession()
    session.load_grid(long_grid, today="2024-01-01")
    session.records.clear()
    assert len(session) == 3


def test_editing_from_empty_session():
    session = AnalysisSession()
    session.add_subject("رياضيات")
    session.add_student("منى")
    assert len(session) == 2
    assert session.quality()["total"] == 2


def test_load_upload():
    data = "اسم الطالب,عربي\nهند,45\n".encode("utf-8")
    session = AnalysisSession()
    meta = session.load_upload("class.csv", data)
    assert meta["source_name"] == "class.csv"
    assert session.records[0].student_name == "هند"
    assert session.records[0].max_score == 50
