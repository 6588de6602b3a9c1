import pytest


@pytest.fixture
def wide_grid():
    return [
        ["كشف درجات الصف الثالث", None, None, None, None],
        ["رقم الطالب", "اسم الطالب", "رياضيات", "كيمياء", "ملاحظات"],
        [2910, "اديبه نبيل", 35, 40, ""],
        [294.0, "اروى صالح", 85, "غائب", None],
        [None, None, None, None, None],
    ]


@pytest.fixture
def long_grid():
    return [
        ["رقم الطالب", "اسم الطالب", "المادة", "الدرجة", "الدرجة العظمى", "الشعبة", "تاريخ الاختبار"],
        ["1", "أحمد علي", "رياضيات", 45, 50, "ب", "15/03/2024"],
        ["1", "أحمد علي", "علوم", 80, None, "ب", None],
        ["2", "سارة محمد", "رياضيات", "abc", 50, "أ", None],
    ]
