from __future__ import annotations

import logging

from app.services.extraction.contract_fields import (
    extract_contract_number,
    extract_date_range,
    extract_duration_note,
)
from app.services.extraction.extracted_fields import ExtractedFields
from app.services.extraction.holiday_fields import extract_holidays, extract_substitute_days
from app.services.extraction.location_fields import extract_location
from app.services.extraction.party_fields import extract_party_b
from app.services.extraction.schedule_fields import (
    extract_coverage_type,
    extract_guards_required,
    extract_shifts,
    extract_weekend_policy,
    extract_work_on_holidays,
)
from app.services.extraction.section_locator import SectionIndex

logger = logging.getLogger("contracts.extraction")

WARN_NO_CONTACT = "Không tìm thấy người đại diện của Bên B"
WARN_NO_GUARDS = "Không tìm thấy số lượng bảo vệ - chưa tạo location"
WARN_NO_SHIFTS = "Không tìm thấy thông tin ca làm việc - chưa tạo shift schedules"


def extract_fields(index: SectionIndex) -> ExtractedFields:
    """Run every extractor once over the indexed document."""
    text = index.text
    fields = ExtractedFields()

    # ---------------------------------------------------------
    # CONTRACT
    # ---------------------------------------------------------
    number = extract_contract_number(text)
    if number:
        fields.contract_number = number.value
        fields.trace["contract_number"] = number.method

    fields.start_date, fields.end_date, date_scope = extract_date_range(index)
    fields.trace["date_range"] = date_scope
    fields.duration_note = extract_duration_note(index)

    # ---------------------------------------------------------
    # PARTY B
    # ---------------------------------------------------------
    party = extract_party_b(text)
    if party.name:
        fields.customer_name = party.name.value
        fields.trace["customer_name"] = party.name.method
    fields.customer_address = party.address
    fields.customer_phone = party.phone
    fields.customer_email = party.email
    fields.tax_code = party.tax_code
    fields.identity_number = party.identity_number
    if party.contact:
        fields.contact_person_name = party.contact.name
        fields.contact_person_title = party.contact.title
        fields.gender = party.contact.gender
    else:
        fields.warnings.append(WARN_NO_CONTACT)

    # ---------------------------------------------------------
    # SITE / COVERAGE
    # ---------------------------------------------------------
    fields.location_name, fields.location_address = extract_location(index)

    guards = extract_guards_required(text)
    if guards:
        fields.guards_required = guards.value
        fields.trace["guards_required"] = guards.method
    else:
        fields.warnings.append(WARN_NO_GUARDS)
    fields.coverage_type = extract_coverage_type(text)

    # ---------------------------------------------------------
    # SCHEDULE RULES (ĐIỀU 3)
    # ---------------------------------------------------------
    fields.shifts = extract_shifts(index)
    if not fields.shifts:
        fields.warnings.append(WARN_NO_SHIFTS)
    fields.weekend_policy = extract_weekend_policy(index)
    fields.trace["weekend_policy"] = fields.weekend_policy.rule
    fields.work_on_holidays = extract_work_on_holidays(text)

    fields.holidays = extract_holidays(index)
    fields.substitute_days = extract_substitute_days(index)

    logger.info(
        "extracted number=%s customer=%s email=%s phone=%s guards=%s shifts=%d holidays=%d",
        fields.contract_number,
        fields.customer_name,
        fields.customer_email,
        fields.customer_phone,
        fields.guards_required,
        len(fields.shifts),
        len(fields.holidays),
    )
    return fields
