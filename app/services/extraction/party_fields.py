"""
Party B ("Bên B") identity extraction.

Everything except the name is read from a bounded window that starts at the
first "Bên B"/"BÊN B" marker, so Party A's address, phone and email are never
picked up.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from app.services.extraction.section_locator import party_b_window
from app.services.extraction.strategies import Strategy, StrategyHit, first_match, regex_strategy

VN_UPPER = "A-ZÀÁẠẢÃÂẦẤẬẨẪĂẰẮẶẲẴÈÉẸẺẼÊỀẾỆỂỄÌÍỊỈĨÒÓỌỎÕÔỒỐỘỔỖƠỜỚỢỞỠÙÚỤỦŨƯỪỨỰỬỮỲÝỴỶỸĐ"
NAME = rf"[{VN_UPPER}][^\W\d_]*(?:[ \t]+[{VN_UPPER}][^\W\d_]*)*"
# a title stops where another field label starts
TITLE = (
    r"(?:(?![ \t]*(?:Số\s*CCCD|CCCD|CMND|Điện\s*thoại|ĐT|Email|Địa\s*chỉ)\b)[^\n,;|])+"
)
REPRESENTATIVE = r"(?:Đại\s*diện|ĐẠI\s*DIỆN|Đ/D)[^\n:：]*[:：][ \t]*"
# whole word only: "CÔNG TY" must not read as "ÔNG"
SALUTATION = r"(?<![^\W\d_])(Ông|Bà|ÔNG|BÀ)\b"

EMAIL_VALID_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
EMAIL_TOKEN = r"([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})"


# -------------------------------------------------
# Customer name
# -------------------------------------------------
def _name_post(m: re.Match) -> Optional[str]:
    name = re.sub(r"[\s,.;:|\-–]+$", "", m.group(1).strip())
    return name if len(name) > 5 else None


def _company_in_party_b(text: str) -> Optional[str]:
    window = party_b_window(text)
    if not window:
        return None
    m = re.search(r"(Công\s*ty\s+[^\r\n|]{5,80})", window, re.IGNORECASE)
    return _name_post(m) if m else None


CUSTOMER_NAME_STRATEGIES: List[Strategy] = [
    regex_strategy(
        "party_b_label",
        r"(?:Bên\s*B|Khách\s*hàng)[^\n:：]*?[:：][ \t]*([^\r\n|]+?)(?:[ \t]*(?:\r|\n|\||Địa\s*chỉ)|$)",
        post=_name_post,
    ),
    Strategy("party_b_company", _company_in_party_b),
]


def extract_customer_name(text: str) -> Optional[StrategyHit]:
    return first_match(CUSTOMER_NAME_STRATEGIES, text)


# -------------------------------------------------
# Address / phone / email / tax code / identity
# -------------------------------------------------
def _address_post(m: re.Match) -> Optional[str]:
    value = re.sub(r"\s*[-–|]\s*(?:Điện\s*thoại|ĐT|Email|MST|Mã\s*số\s*thuế).*$", "", m.group(1), flags=re.IGNORECASE)
    value = value.strip().rstrip(".,;")
    return value or None


ADDRESS_STRATEGIES: List[Strategy] = [
    regex_strategy("address_label", r"(?:Địa\s*chỉ|Address)[^\n:：]*?[:：][ \t]*([^\r\n]+)", post=_address_post),
]


def normalize_phone(raw: str) -> Optional[str]:
    """Keep digits and '+'; a leading 0 becomes +84, other bare numbers get +84 prepended."""
    value = re.sub(r"[^\d+]", "", raw or "")
    if not value:
        return None
    digits = re.sub(r"\D", "", value)
    if not 9 <= len(digits) <= 12:
        return None
    if value.startswith("+"):
        return "+" + digits
    if value.startswith("0"):
        return "+84" + digits[1:]
    return "+84" + digits


PHONE_STRATEGIES: List[Strategy] = [
    regex_strategy(
        "phone_label",
        r"(?:Điện\s*thoại|Phone|ĐT)[^\n:：\d]*?[:：][ \t]*([\d \-\(\)\+\.]{9,20})",
        post=lambda m: normalize_phone(m.group(1)),
    ),
]


def clean_email(raw: str) -> Optional[str]:
    value = re.sub(r"\s+", "", raw or "").strip(".,;:()[]<>").lower()
    return value if EMAIL_VALID_RE.match(value) else None


EMAIL_STRATEGIES: List[Strategy] = [
    regex_strategy(
        "party_b_email_label",
        r"B[êÊ]N\s*B[\s\S]*?Email\s*[:：]\s*" + EMAIL_TOKEN,
        post=lambda m: clean_email(m.group(1)),
    ),
    regex_strategy("first_email_after_party_b", EMAIL_TOKEN, post=lambda m: clean_email(m.group(1))),
]


TAX_CODE_STRATEGIES: List[Strategy] = [
    regex_strategy(
        "tax_code_label",
        r"(?:Mã\s*số\s*thuế|MST)[^\n:：\d]*?[:：][ \t]*([+\d]{10,15})",
    ),
]


def _identity_post(m: re.Match) -> Optional[str]:
    value = m.group(1)
    return value if len(value) in (9, 12) else None


IDENTITY_STRATEGIES: List[Strategy] = [
    regex_strategy(
        "identity_label",
        r"(?:Số\s*)?(?:CCCD|CMND|CMT)[^\n:：\d]*[:：]?[ \t]*(\d+)",
        post=_identity_post,
    ),
]


# -------------------------------------------------
# Contact person
# -------------------------------------------------
@dataclass
class ContactPerson:
    name: str
    title: Optional[str]
    gender: Optional[str]


def _contact(m: re.Match, with_title: bool) -> ContactPerson:
    title = None
    if with_title and m.lastindex and m.lastindex >= 3 and m.group(3):
        title = m.group(3).strip().rstrip(".,;:") or None
    gender = "male" if m.group(1).lower() == "ông" else "female"
    return ContactPerson(name=m.group(2).strip(), title=title, gender=gender)


CONTACT_STRATEGIES: List[Strategy] = [
    regex_strategy(
        "representative_name_title",
        REPRESENTATIVE + SALUTATION + r"[ \t]+(" + NAME + r")[ \t]*[-–][ \t]*(" + TITLE + r")",
        flags=0,
        post=lambda m: _contact(m, True),
    ),
    regex_strategy(
        "salutation_name_title",
        SALUTATION + r"[ \t]+(" + NAME + r")[ \t]*[-–][ \t]*(" + TITLE + r")",
        flags=0,
        post=lambda m: _contact(m, True),
    ),
    regex_strategy(
        "name_only",
        r"(?:" + REPRESENTATIVE + r")?" + SALUTATION + r"[ \t]+(" + NAME + r")",
        flags=0,
        post=lambda m: _contact(m, False),
    ),
]

TITLE_LABEL_RE = re.compile(r"Chức\s*vụ\s*[:：][ \t]*(" + TITLE + r")", re.IGNORECASE)


@dataclass
class PartyDetails:
    name: Optional[StrategyHit] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    tax_code: Optional[str] = None
    identity_number: Optional[str] = None
    contact: Optional[ContactPerson] = None


def _value(hit: Optional[StrategyHit]):
    return hit.value if hit else None


def extract_party_b(text: str) -> PartyDetails:
    window = party_b_window(text)
    details = PartyDetails(name=extract_customer_name(text))
    if not window:
        return details

    details.address = _value(first_match(ADDRESS_STRATEGIES, window))
    details.phone = _value(first_match(PHONE_STRATEGIES, window))
    details.email = _value(first_match(EMAIL_STRATEGIES, window))
    details.tax_code = _value(first_match(TAX_CODE_STRATEGIES, window))
    details.identity_number = _value(first_match(IDENTITY_STRATEGIES, window))

    contact = _value(first_match(CONTACT_STRATEGIES, window))
    if contact is not None and not contact.title:
        m = TITLE_LABEL_RE.search(window)
        if m:
            contact.title = m.group(1).strip().rstrip(".,;:") or None
    details.contact = contact
    return details
