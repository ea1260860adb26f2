from datetime import date

from app.services.extraction.holiday_fields import (
    extract_holidays,
    extract_substitute_days,
    extract_tet,
    is_plausible_tet,
)
from app.services.extraction.section_locator import SectionIndex


def test_holidays_from_clause_3_4(contract_text):
    holidays = extract_holidays(SectionIndex.build(contract_text))
    by_name = {h.name: h for h in holidays}

    tet = by_name["Tết Nguyên Đán"]
    assert tet.is_tet
    assert (tet.start_date, tet.end_date) == (date(2026, 2, 16), date(2026, 2, 20))
    assert tet.total_days == 5

    assert by_name["Giỗ Tổ Hùng Vương"].holiday_date == date(2026, 4, 26)
    assert by_name["Ngày Giải phóng miền Nam"].holiday_date == date(2026, 4, 30)
    assert by_name["Ngày Quốc tế Lao động"].holiday_date == date(2026, 5, 1)
    assert by_name["Ngày Quốc khánh"].holiday_date == date(2025, 9, 2)
    assert "Tết Dương lịch" not in by_name


def test_tet_rejects_solar_new_year_span():
    block = "3.4. Ngày lễ:\n- Tết Nguyên Đán: 01/01/2026 - 01/01/2026\n"

    assert extract_tet(block) is None


def test_tet_plausibility_window():
    assert is_plausible_tet(date(2026, 2, 14), date(2026, 2, 22))
    assert not is_plausible_tet(date(2026, 1, 1), date(2026, 1, 5))
    assert not is_plausible_tet(date(2026, 2, 14), date(2026, 2, 15))
    assert not is_plausible_tet(date(2026, 2, 1), date(2026, 2, 20))
    assert not is_plausible_tet(date(2026, 3, 1), date(2026, 3, 5))
    assert not is_plausible_tet(date(2026, 2, 20), date(2026, 2, 16))


def test_no_holiday_clause_means_no_holidays():
    assert extract_holidays(SectionIndex.build("ĐIỀU 3: X\n3.1. Ca sáng 06h00 - 14h00")) == []


def test_substitute_days_follow_nghi_bu(contract_text):
    assert extract_substitute_days(SectionIndex.build(contract_text)) == [date(2026, 4, 27)]
