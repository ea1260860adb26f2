"""
Holiday calendar from clause 3.4.

Tết is one multi-day record bounded by a start/end pair; every other national
holiday is a single date found by its own pattern list.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import List, Optional

from app.services.extraction.contract_fields import parse_date_tokens
from app.services.extraction.extracted_fields import HolidayInfo
from app.services.extraction.section_locator import SectionIndex, locate
from app.services.extraction.strategies import Strategy, first_match, regex_strategy

logger = logging.getLogger("contracts.extraction")

DATE = r"(\d{1,2}/\d{1,2}/\d{4})"
JAN_FEB_DATE = r"(\d{1,2}/0?[12]/\d{4})"
TET_NAME = r"Tết\s+Nguy[eê]n\s+[ĐđDd][áaA]n"

TET_PATTERNS = [
    ("tet_with_year", re.compile(
        TET_NAME + r"\s+(?:\d{4})[:\s,]*.*?" + DATE + r".*?(?:đến|[-–])\s*(?:hết\s+)?.*?" + DATE,
        re.IGNORECASE | re.DOTALL,
    )),
    ("tet_jan_feb", re.compile(
        TET_NAME + r"[:\s,]*.*?" + JAN_FEB_DATE + r".*?(?:đến|[-–])\s*(?:hết\s+)?.*?" + JAN_FEB_DATE,
        re.IGNORECASE | re.DOTALL,
    )),
    ("tet_generic", re.compile(
        r"Tết\s+(?:âm\s+lịch|Nguy[eê]n\s+[ĐđDd][áaA]n)[:\s,]*.*?" + DATE + r".*?(?:đến|[-–]).*?" + DATE,
        re.IGNORECASE | re.DOTALL,
    )),
]

TET_MIN_DAYS = 3
TET_MAX_DAYS = 10


def _parse(raw: str) -> Optional[date]:
    dates = parse_date_tokens(raw)
    return dates[0] if dates else None


def is_plausible_tet(start: date, end: date) -> bool:
    """Reject spans that are really the solar New Year or a mis-paired date."""
    if end < start:
        return False
    days = (end - start).days + 1
    if days < TET_MIN_DAYS or days > TET_MAX_DAYS:
        return False
    if start.month > 2:
        return False
    if start.month == 1 and start.day == 1:
        return False
    return True


def extract_tet(block: str) -> Optional[HolidayInfo]:
    for name, regex in TET_PATTERNS:
        m = regex.search(block)
        if not m:
            continue
        start, end = _parse(m.group(1)), _parse(m.group(2))
        if start is None or end is None:
            continue
        if not is_plausible_tet(start, end):
            logger.info("rejected Tết span %s..%s from %s", start, end, name)
            continue
        return HolidayInfo(
            name="Tết Nguyên Đán",
            name_en="Lunar New Year",
            category="tet",
            is_tet=True,
            holiday_date=start,
            start_date=start,
            end_date=end,
        )
    return None


def _single_date(m: re.Match) -> Optional[date]:
    return _parse(m.group(1))


def _single(name: str, pattern: str) -> Strategy:
    return regex_strategy(name, pattern, post=_single_date)


# (vietnamese name, english name, ordered patterns)
NATIONAL_HOLIDAYS = [
    ("Giỗ Tổ Hùng Vương", "Hung Kings Commemoration Day", [
        _single("hung_kings", r"Giỗ\s+Tổ\s+Hùng\s+Vương[^\n]*?\b" + DATE),
    ]),
    ("Ngày Giải phóng miền Nam", "Reunification Day", [
        _single("reunification_named", r"(?:Giải\s*phóng|Thống\s*nhất)[^\n]*?\b(\d{1,2}/0?4/\d{4})"),
        _single("reunification_date", r"\b(30/0?4/\d{4})"),
    ]),
    ("Ngày Quốc tế Lao động", "International Labor Day", [
        _single("labor_named", r"Lao\s*động[^\n]*?\b(\d{1,2}/0?5/\d{4})"),
        _single("labor_date", r"\b(0?1/0?5/\d{4})"),
    ]),
    ("Ngày Quốc khánh", "National Day", [
        _single("national_day", r"Quốc\s*khánh[^\n]*?\b(\d{1,2}/0?9/\d{4})"),
    ]),
    ("Tết Dương lịch", "Solar New Year", [
        _single("solar_new_year", r"Tết\s+Dương\s+lịch[^\n]*?\b(\d{1,2}/0?1/\d{4})"),
    ]),
]


def holiday_block(index: SectionIndex) -> Optional[str]:
    block = index.subsection("3.4")
    if block:
        return block
    return locate(index.text, r"3\.4\.?\s+[^\n]*(?:Ngày\s*lễ|Tết)", r"\n\s*(?:ĐIỀU|3\.5)", max_span=index.max_span)


def extract_holidays(index: SectionIndex) -> List[HolidayInfo]:
    block = holiday_block(index)
    if not block:
        return []

    holidays: List[HolidayInfo] = []
    tet = extract_tet(block)
    if tet is not None:
        holidays.append(tet)

    for vn_name, en_name, strategies in NATIONAL_HOLIDAYS:
        hit = first_match(strategies, block)
        if hit is None:
            continue
        holidays.append(HolidayInfo(name=vn_name, name_en=en_name, holiday_date=hit.value))
    return holidays


def extract_substitute_days(index: SectionIndex) -> List[date]:
    """Dates written after "nghỉ bù" on the same line, in the holiday clause (ĐIỀU 3 or document otherwise)."""
    scope = holiday_block(index) or index.section("3") or index.text
    found = set()
    for m in re.finditer(r"nghỉ\s*bù([^\n]*)", scope, re.IGNORECASE):
        found.update(parse_date_tokens(m.group(1)))
    return sorted(found)
