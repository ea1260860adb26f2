from __future__ import annotations

import re
import uuid
from datetime import date
from typing import List, Optional, Tuple

from app.services.extraction.section_locator import SectionIndex
from app.services.extraction.strategies import Strategy, StrategyHit, first_match, regex_strategy

NUMBER_LABEL = r"(?:Số\s*HĐ|Hợp\s*đồng\s*số|Contract\s*No\.?)"
SERVICE_MARKER = "HĐDV-BV"

DATE_TOKEN_RE = re.compile(r"\b(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})\b")
DATE_WORDS_RE = re.compile(r"ngày\s+(\d{1,2})\s+tháng\s+(\d{1,2})\s+năm\s+(\d{4})", re.IGNORECASE)
DURATION_RE = re.compile(
    r"(?:thời\s*hạn|hiệu\s*lực|thời\s*gian)[:\s]*(\d+)\s*(tháng|năm|ngày)",
    re.IGNORECASE,
)


def _clean_number(value: str) -> str:
    return re.sub(r"[,.;:\s]+$", "", value.strip())


def _with_digit(m: re.Match) -> Optional[str]:
    value = _clean_number(m.group(1))
    return value if re.search(r"\d", value) else None


def _open_template(m: re.Match) -> str:
    return f"{m.group(1)}/{SERVICE_MARKER}"


def _joined(prefix: str):
    def _post(m: re.Match) -> str:
        return f"{prefix}-{m.group(1)}-{m.group(2)}"
    return _post


# Order matters: the specific slash form first, generic codes last.
CONTRACT_NUMBER_STRATEGIES: List[Strategy] = [
    regex_strategy(
        "labeled_slash_form",
        NUMBER_LABEL + r"\s*[:：]?\s*(\d{3,4}/\d{4}/[A-ZĐ\-]+/[A-Z]+/[A-Z]+)",
        post=lambda m: _clean_number(m.group(1)),
    ),
    regex_strategy("bare_service_form", r"(\d{3,4}/\d{4}/HĐDV-BV/[A-Z]+/[A-Z]+)"),
    regex_strategy(
        "open_template_form",
        r"(?:" + NUMBER_LABEL + r"|Số)\s*[:：]\s*(\d{3,4}/\d{4})/?(?![\w/])",
        post=_open_template,
    ),
    regex_strategy("labeled_code", NUMBER_LABEL + r"\s*[:：]\s*([A-Z0-9\-/]+)", post=_with_digit),
    regex_strategy("hd_code", r"HĐ\s*[-:]?\s*([A-Z0-9\-/]{5,})", post=_with_digit),
    regex_strategy("ctr_dated_form", r"\bCTR-(\d{8})-([A-F0-9]{4})\b", post=_joined("CTR")),
    regex_strategy("ctr_year_form", r"CTR[-\s]?(\d{4})[-\s]?(\d{3})", post=_joined("CTR")),
]


def extract_contract_number(text: str) -> Optional[StrategyHit]:
    return first_match(CONTRACT_NUMBER_STRATEGIES, text)


def generate_contract_number(today: date) -> str:
    return f"CTR-{today:%Y%m%d}-{uuid.uuid4().hex[:4].upper()}"


# -------------------------------------------------
# Dates
# -------------------------------------------------
def _safe_date(day: str, month: str, year: str) -> Optional[date]:
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def parse_date_tokens(text: str) -> List[date]:
    found = []
    for regex in (DATE_TOKEN_RE, DATE_WORDS_RE):
        for m in regex.finditer(text or ""):
            d = _safe_date(m.group(1), m.group(2), m.group(3))
            if d is not None:
                found.append(d)
    return found


def extract_date_range(index: SectionIndex) -> Tuple[Optional[date], Optional[date], str]:
    """
    Earliest and latest date inside ĐIỀU 2 (whole document when the clause is absent).
    One date only: start is set, end stays empty.
    """
    scope = index.section("2")
    method = "section_2"
    if scope is None:
        scope, method = index.text, "document"

    dates = sorted(set(parse_date_tokens(scope)))
    if not dates:
        return None, None, method
    if len(dates) == 1:
        return dates[0], None, method
    return dates[0], dates[-1], method


def extract_duration_note(index: SectionIndex) -> Optional[str]:
    m = DURATION_RE.search(index.section_or_document("2"))
    if not m:
        return None
    return f"Thời hạn: {m.group(1)} {m.group(2)}"
