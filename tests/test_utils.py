import pytest
import json
from exam_analytics.utils import norm_text, to_number, cell_text, try_parse_date, is_empty, load_rules


@pytest.mark.parametrize("text", [
    "اســـم الطالب",
    "الدَّرَجَةُ العُظْمى",
    "Student ID",
    "رقم  الجلوس (1)",
    "إسلامية / آداب",
    "",
])
def test_norm_text_is_idempotent(text):
    once = norm_text(text)
    assert norm_text(once) == once


def test_norm_text_unifies_letters():
    assert norm_text("أحمد") == norm_text("احمد")
    assert norm_text("إبراهيم") == norm_text("ابراهيم")
    assert norm_text("مادة") == "ماده"
    assert norm_text("العظمى") == "العظمي"


def test_norm_text_lam_alef_ligature():
    assert norm_text("اﻻسم") == norm_text("الاسم")


def test_norm_text_strips_tashkeel_tatweel_spaces_and_symbols():
    assert norm_text("الدَّرَجَة") == "الدرجه"
    assert norm_text("اســـم الطالب") == "اسمالطالب"
    assert norm_text("Max Score:") == "maxscore"
    assert norm_text("  ID # ") == "id"


def test_norm_text_absent_input():
    assert norm_text(None) == ""
    assert norm_text(float("nan")) == ""


def test_to_number():
    assert to_number(35) == 35.0
    assert to_number(" 42.5 ") == 42.5
    assert to_number("12,5") == 12.5
    assert to_number("٤٥") == 45.0
    assert to_number("غائب") is None
    assert to_number("") is None
    assert to_number(None) is None
    assert to_number(True) is None
    assert to_number(float("nan")) is None


def test_cell_text():
    assert cell_text(2910.0) == "2910"
    assert cell_text(" أحمد ") == "أحمد"
    assert cell_text(None) == ""
    assert cell_text(float("nan")) == ""


def test_is_empty():
    assert is_empty(None)
    assert is_empty("   ")
    assert is_empty(float("nan"))
    assert not is_empty(0)
    assert not is_empty("0")


def test_try_parse_date():
    assert try_parse_date("15/03/2024") == "2024-03-15"
    assert try_parse_date("2024-03-15") == "2024-03-15"
    assert try_parse_date("غير محدد") is None


def test_user_rules_override_defaults(tmp_path, monkeypatch):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({"pass_ratio": 0.6, "defaults": {"term": "الثاني"}}), encoding="utf-8")
    monkeypatch.setenv("EXAM_ANALYTICS_RULES", str(path))
    rules = load_rules()
    assert rules["pass_ratio"] == 0.6
    assert rules["header_scan_rows"] == 20
    assert rules["defaults"]["term"] == "الثاني"
    assert rules["defaults"]["student_name"] == "غير معروف"


def test_unreadable_rules_fall_back_to_shipped(tmp_path, monkeypatch):
    path = tmp_path / "rules.json"
    path.write_text("{not json", encoding="utf-8")
    monkeypatch.setenv("EXAM_ANALYTICS_RULES", str(path))
    assert load_rules()["pass_ratio"] == 0.5
