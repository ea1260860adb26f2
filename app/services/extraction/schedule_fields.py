from __future__ import annotations

import re
from datetime import time
from typing import List, Optional

from app.services.extraction.extracted_fields import ShiftInfo, WeekendPolicy
from app.services.extraction.section_locator import SectionIndex
from app.services.extraction.strategies import Strategy, StrategyHit, first_match, regex_strategy


# -------------------------------------------------
# Guard headcount
# -------------------------------------------------
def _headcount(m: re.Match) -> Optional[int]:
    value = int(m.group(1))
    return value if 0 < value <= 1000 else None


_GUARD_PATTERNS = [
    ("count_with_words", r"Số\s*lượng\s*[:\s]*(\d+)\s*\([^\)]+\)\s*(?:nhân\s*viên\s*)?\s*bảo\s*vệ"),
    ("label_then_count", r"Số\s*lượng\s*(?:nhân\s*viên\s*)?\s*bảo\s*vệ\s*[:\s]*(\d+)"),
    ("count_then_label", r"Số\s*lượng\s*[:\s]*(\d+)\s*(?:nhân\s*viên\s*)?\s*bảo\s*vệ"),
    ("count_guards", r"(?<![\d/])\b(\d+)\s*(?:nhân\s*viên\s*)?\s*bảo\s*vệ"),
    ("guards_count", r"bảo\s*vệ\s*[:\s]*(\d+)\b(?![/hHx:])"),
    ("english_label", r"(?:Guards|Guard)\s*(?:Required)?\s*[:\s]*(\d+)"),
    ("english_count", r"(?<![\d/])\b(\d+)\s*(?:guards?)\b"),
]
GUARD_STRATEGIES: List[Strategy] = [regex_strategy(name, p, post=_headcount) for name, p in _GUARD_PATTERNS]


def extract_guards_required(text: str) -> Optional[StrategyHit]:
    return first_match(GUARD_STRATEGIES, text)


COVERAGE_STRATEGIES: List[Strategy] = [
    regex_strategy("round_the_clock", r"24\s*[/x]\s*7", post=lambda m: "24x7"),
    regex_strategy("daytime", r"ban\s*ngày", post=lambda m: "day_only"),
    regex_strategy("nighttime", r"ban\s*đêm", post=lambda m: "night_only"),
]


def extract_coverage_type(text: str) -> Optional[str]:
    hit = first_match(COVERAGE_STRATEGIES, text)
    return hit.value if hit else None


# -------------------------------------------------
# Shifts (clause 3.1)
# -------------------------------------------------
SHIFT_VOCABULARY = {
    "sáng": ("sáng", "morning"),
    "trưa": ("trưa", "noon"),
    "chiều": ("chiều", "afternoon"),
    "tối": ("tối", "evening"),
    "đêm": ("đêm", "night"),
    "khuya": ("đêm", "night"),
    "cuối tuần": ("cuối tuần", "weekend"),
}

_CLOCK = r"(\d{1,2})\s*[h:giờ]+\s*(\d{2})?"
_RANGE = _CLOCK + r"\s*(?:[-–—]|đến)\s*" + _CLOCK
NAMED_SHIFT_RE = re.compile(
    r"Ca\s+(sáng|chiều|tối|đêm|cuối\s+tuần|khuya|trưa)[^\d\n]*?" + _RANGE,
    re.IGNORECASE,
)
NUMBERED_SHIFT_RE = re.compile(r"Ca\s+([IVX]+|\d)\b[^\d\n]*?" + _RANGE, re.IGNORECASE)


def _clock(hour: str, minute: Optional[str]) -> Optional[time]:
    h, m = int(hour), int(minute or 0)
    if h == 24 and m == 0:
        return time(0, 0)
    if h > 23 or m > 59:
        return None
    return time(h, m)


def _type_from_hour(start: time) -> str:
    if 5 <= start.hour < 11:
        return "morning"
    if 11 <= start.hour < 13:
        return "noon"
    if 13 <= start.hour < 17:
        return "afternoon"
    if 17 <= start.hour < 21:
        return "evening"
    return "night"


def _shift_from_match(m: re.Match, named: bool) -> Optional[ShiftInfo]:
    start = _clock(m.group(2), m.group(3))
    end = _clock(m.group(4), m.group(5))
    if start is None or end is None or start == end:
        return None
    label = re.sub(r"\s+", " ", m.group(1).strip().lower())
    if named:
        vn, shift_type = SHIFT_VOCABULARY[label]
        return ShiftInfo(name=f"Ca {vn}", shift_type=shift_type, start_time=start, end_time=end)
    return ShiftInfo(name=f"Ca {m.group(1).upper()}", shift_type=_type_from_hour(start), start_time=start, end_time=end)


def extract_shifts(index: SectionIndex) -> List[ShiftInfo]:
    """Shift lines from 3.1 (then ĐIỀU 3, then the whole document); identical start/end pairs collapse."""
    scope = index.subsection("3.1") or index.section("3") or index.text

    matches = [(m.start(), m, True) for m in NAMED_SHIFT_RE.finditer(scope)]
    taken = {pos for pos, _, _ in matches}
    matches += [(m.start(), m, False) for m in NUMBERED_SHIFT_RE.finditer(scope) if m.start() not in taken]
    matches.sort(key=lambda x: x[0])

    shifts: List[ShiftInfo] = []
    seen = set()
    for _, m, named in matches:
        shift = _shift_from_match(m, named)
        if shift is None:
            continue
        key = (shift.start_time, shift.end_time)
        if key in seen:
            continue
        seen.add(key)
        shifts.append(shift)
    return shifts


# -------------------------------------------------
# Weekend policy (clause 3.3)
# -------------------------------------------------
SATURDAY_RE = re.compile(r"thứ\s*(?:7|bảy)\b|\bT7\b", re.IGNORECASE)
SUNDAY_RE = re.compile(r"chủ\s*nhật|\bCN\b", re.IGNORECASE)

# evaluated top to bottom; a later rule is reached only when earlier ones miss
WEEKEND_RULES = [
    ("maintained_as_workday", re.compile(r"duy\s*trì[\s\S]*?như\s*ngày\s*làm\s*việc\s*bình\s*thường", re.IGNORECASE), True),
    ("no_separate_rest_policy", re.compile(r"không\s*có\s*chính\s*sách\s*nghỉ\s*cuối\s*tuần\s*riêng", re.IGNORECASE), True),
    ("separate_rest", re.compile(r"nghỉ\s*(?:cuối\s*tuần\s*)?riêng|không\s*làm\s*việc", re.IGNORECASE), False),
]


def extract_weekend_policy(index: SectionIndex) -> WeekendPolicy:
    clause = index.subsection("3.3")
    if not clause:
        return WeekendPolicy(saturday=False, sunday=False, rule="no_weekend_clause")

    for rule, regex, works in WEEKEND_RULES:
        if regex.search(clause):
            return WeekendPolicy(saturday=works, sunday=works, rule=rule)

    saturday = bool(SATURDAY_RE.search(clause))
    sunday = bool(SUNDAY_RE.search(clause))
    if saturday and not sunday:
        return WeekendPolicy(saturday=True, sunday=False, rule="saturday_only")
    if sunday and not saturday:
        return WeekendPolicy(saturday=False, sunday=True, rule="sunday_only")
    if saturday and sunday:
        return WeekendPolicy(saturday=True, sunday=True, rule="both_days_mentioned")
    return WeekendPolicy(saturday=True, sunday=True, rule="default_both")


def extract_work_on_holidays(text: str) -> Optional[bool]:
    if re.search(r"làm\s*việc[^\n]*?ngày\s*lễ", text, re.IGNORECASE):
        return True
    if re.search(r"nghỉ[^\n]*?ngày\s*lễ", text, re.IGNORECASE):
        return False
    return None
