from __future__ import annotations

import re
from typing import List, Optional, Tuple

from app.services.extraction.section_locator import SectionIndex
from app.services.extraction.strategies import Strategy, first_match, regex_strategy

# ĐIỀU 1 describes the service site within its first few lines
LOCATION_WINDOW = 800


def _clean_name(m: re.Match) -> Optional[str]:
    value = re.sub(r"\s*[-–]\s*Địa\s*chỉ.*$", "", m.group(1), flags=re.IGNORECASE)
    value = value.strip().rstrip(".,;:")
    return value if len(value) >= 3 else None


def _clean_address(m: re.Match) -> Optional[str]:
    value = re.sub(r"\s*[-–]\s*Số\s*lượng.*$", "", m.group(1), flags=re.IGNORECASE)
    value = value.strip().rstrip(".,;:")
    return value or None


LOCATION_NAME_STRATEGIES: List[Strategy] = [
    regex_strategy("site_name_label", r"Tên\s*địa\s*điểm\s*[:：][ \t]*([^\r\n]+)", post=_clean_name),
    regex_strategy("at_site", r"(?:tại|ở)\s*địa\s*điểm\s*[:：]?[ \t]*([^\r\n]{10,100})", post=_clean_name),
    regex_strategy("site_label", r"Địa\s*điểm[^\n:：]*[:：][ \t]*([^\n]+?)[ \t]*(?=\n|$)", post=_clean_name),
]

LOCATION_ADDRESS_STRATEGIES: List[Strategy] = [
    regex_strategy("address_label", r"Địa\s*chỉ[^\n:：]*[:：][ \t]*([^\r\n]+)", post=_clean_address),
    regex_strategy(
        "street_after_at",
        r"(?:tại|ở)\s*[:：]?[ \t]*(\d+\s+[^,\r\n]+(?:,\s*[^,\r\n]+){1,3})",
        post=_clean_address,
    ),
]


def extract_location(index: SectionIndex) -> Tuple[Optional[str], Optional[str]]:
    """(name, address) of the guarded site from ĐIỀU 1; (None, None) when the clause is absent."""
    section = index.section("1")
    if not section:
        return None, None
    window = section[:LOCATION_WINDOW]
    name = first_match(LOCATION_NAME_STRATEGIES, window)
    address = first_match(LOCATION_ADDRESS_STRATEGIES, window)
    return (name.value if name else None), (address.value if address else None)
