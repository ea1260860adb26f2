from datetime import time

import pytest

from app.services.extraction.schedule_fields import (
    extract_coverage_type,
    extract_guards_required,
    extract_shifts,
    extract_weekend_policy,
    extract_work_on_holidays,
)
from app.services.extraction.section_locator import SectionIndex


@pytest.mark.parametrize(
    "text, expected, method",
    [
        ("Số lượng: 02 (hai) nhân viên bảo vệ", 2, "count_with_words"),
        ("Số lượng bảo vệ: 4", 4, "label_then_count"),
        ("Số lượng: 3 bảo vệ", 3, "count_then_label"),
        ("bố trí 5 nhân viên bảo vệ", 5, "count_guards"),
        ("Guards Required: 6", 6, "english_label"),
    ],
)
def test_guard_strategies(text, expected, method):
    hit = extract_guards_required(text)

    assert hit.value == expected
    assert hit.method == method


def test_guard_count_ignores_clock_times_and_out_of_range():
    assert extract_guards_required("bảo vệ 24h") is None
    assert extract_guards_required("Số lượng bảo vệ: 0") is None


def test_coverage_type():
    assert extract_coverage_type("trực 24/7") == "24x7"
    assert extract_coverage_type("bảo vệ ban ngày") == "day_only"
    assert extract_coverage_type("bảo vệ ban đêm") == "night_only"
    assert extract_coverage_type("không rõ") is None


def test_shifts_from_clause_3_1():
    text = "\n".join([
        "ĐIỀU 3: THỜI GIAN",
        "3.1. Ca làm việc:",
        "- Ca sáng: từ 06h00 đến 14h00",
        "- Ca chiều: 14h00 - 22h00",
        "- Ca đêm: 22h00 - 06h00",
        "- Ca sáng (nhắc lại): 06h00 - 14h00",
        "3.2. Khác",
    ])
    shifts = extract_shifts(SectionIndex.build(text))

    assert [(s.name, s.shift_type) for s in shifts] == [
        ("Ca sáng", "morning"),
        ("Ca chiều", "afternoon"),
        ("Ca đêm", "night"),
    ]
    assert shifts[0].start_time == time(6, 0)
    assert shifts[0].end_time == time(14, 0)
    assert not shifts[0].crosses_midnight
    assert shifts[2].crosses_midnight
    assert shifts[2].duration_hours == 8


def test_numbered_shifts_and_24h00_end():
    text = "ĐIỀU 3: THỜI GIAN\n3.1. Ca I: 16h00 - 24h00\n3.2. X"
    shifts = extract_shifts(SectionIndex.build(text))

    assert len(shifts) == 1
    assert shifts[0].name == "Ca I"
    assert shifts[0].shift_type == "afternoon"
    assert shifts[0].end_time == time(0, 0)
    assert shifts[0].crosses_midnight


def test_maintained_as_workday_means_both_weekend_days():
    text = "3.3. Thứ 7, Chủ nhật duy trì bảo vệ như ngày làm việc bình thường.\n3.4. Lễ"
    policy = extract_weekend_policy(SectionIndex.build(text))

    assert policy.saturday and policy.sunday
    assert policy.rule == "maintained_as_workday"


def test_no_clause_3_3_means_no_weekend_work():
    text = "ĐIỀU 3: THỜI GIAN\n3.1. Ca sáng 06h00 - 14h00\nLàm việc cả thứ 7 và chủ nhật"
    policy = extract_weekend_policy(SectionIndex.build(text))

    assert not policy.saturday
    assert not policy.sunday
    assert policy.rule == "no_weekend_clause"


@pytest.mark.parametrize(
    "clause, saturday, sunday, rule",
    [
        ("3.3. Không có chính sách nghỉ cuối tuần riêng.", True, True, "no_separate_rest_policy"),
        ("3.3. Cuối tuần nghỉ riêng theo lịch khách hàng.", False, False, "separate_rest"),
        ("3.3. Làm việc thứ 7.", True, False, "saturday_only"),
        ("3.3. Trực vào chủ nhật.", False, True, "sunday_only"),
        ("3.3. Cuối tuần theo thỏa thuận.", True, True, "default_both"),
    ],
)
def test_weekend_cascade(clause, saturday, sunday, rule):
    policy = extract_weekend_policy(SectionIndex.build(clause + "\n3.4. Lễ"))

    assert (policy.saturday, policy.sunday, policy.rule) == (saturday, sunday, rule)


def test_work_on_holidays():
    assert extract_work_on_holidays("Nhân viên làm việc cả ngày lễ") is True
    assert extract_work_on_holidays("Được nghỉ các ngày lễ") is False
    assert extract_work_on_holidays("không đề cập") is None
