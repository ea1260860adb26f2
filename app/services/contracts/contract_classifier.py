from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional


@dataclass
class ContractClassification:
    contract_type: str = "long_term"
    service_scope: str = "shift_based"
    duration_months: int = 12
    total_days: Optional[int] = None
    auto_generate_shifts: bool = True
    advance_generation_days: int = 30
    is_renewable: bool = True
    auto_renewal: bool = False
    type_source: str = "default"


# first hit wins; text always beats the date-derived type
TYPE_KEYWORDS = [
    ("long_term", re.compile(r"hợp\s*đồng\s*(?:dài\s*hạn|lâu\s*dài)", re.IGNORECASE)),
    ("short_term", re.compile(r"hợp\s*đồng\s*(?:ngắn\s*hạn|tạm\s*thời)", re.IGNORECASE)),
    ("one_day", re.compile(r"hợp\s*đồng\s*(?:1\s*ngày|một\s*ngày|sự\s*kiện)", re.IGNORECASE)),
    ("weekly", re.compile(r"hợp\s*đồng\s*(?:tuần|7\s*ngày)", re.IGNORECASE)),
]
AUTO_RENEWAL_RE = re.compile(r"tự\s*động\s*gia\s*hạn", re.IGNORECASE)
EVENT_SCOPE_RE = re.compile(r"sự\s*kiện|\bevent\b|\boccasion\b", re.IGNORECASE)


def duration_in_months(start: date, end: date) -> int:
    """Whole calendar months covered when the end date is inclusive (01/06 -> 31/05 is 12)."""
    stop = end + timedelta(days=1)
    months = (stop.year - start.year) * 12 + stop.month - start.month
    if stop.day < start.day:
        months -= 1
    return max(months, 0)


def calendar_month_span(start: date, end: date) -> int:
    """Month numbers apart, ignoring days (01/01 -> 31/07 is 6); drives the short_term cut-off."""
    return (end.year - start.year) * 12 + end.month - start.month


def _by_duration(start: date, end: date) -> ContractClassification:
    total_days = (end - start).days
    months = duration_in_months(start, end)
    info = ContractClassification(duration_months=months, total_days=total_days, type_source="dates")

    if total_days <= 1:
        info.contract_type = "one_day"
        info.service_scope = "event_based"
        info.auto_generate_shifts = False
        info.advance_generation_days = 0
        info.is_renewable = False
    elif total_days <= 7:
        info.contract_type = "weekly"
        info.advance_generation_days = 3
        info.is_renewable = False
    elif total_days <= 30:
        info.contract_type = "monthly"
        info.advance_generation_days = 7
    elif calendar_month_span(start, end) <= 6:
        info.contract_type = "short_term"
        info.advance_generation_days = 14
    else:
        info.contract_type = "long_term"
        info.advance_generation_days = 30
    return info


def classify_contract(start: Optional[date], end: Optional[date], text: str) -> ContractClassification:
    if start is not None and end is not None:
        info = _by_duration(start, end)
    else:
        info = ContractClassification()

    text = text or ""
    for contract_type, regex in TYPE_KEYWORDS:
        if not regex.search(text):
            continue
        info.contract_type = contract_type
        info.type_source = "keyword"
        if contract_type == "long_term":
            info.is_renewable = True
        elif contract_type == "one_day":
            info.service_scope = "event_based"
            info.auto_generate_shifts = False
            info.is_renewable = False
        else:
            info.is_renewable = False
        break

    if AUTO_RENEWAL_RE.search(text):
        info.auto_renewal = True
    if EVENT_SCOPE_RE.search(text):
        info.service_scope = "event_based"
    return info
