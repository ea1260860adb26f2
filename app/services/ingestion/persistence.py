from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional, Tuple

from sqlalchemy.orm import Session, sessionmaker

from app.core.errors import AppError, TransactionFailure
from app.infra.db import transaction
from app.infra.entities import (
    Contract,
    ContractLocation,
    ContractShiftSchedule,
    CustomerLocation,
    HolidaySubstituteWorkDay,
    PublicHoliday,
)
from app.repositories.contract_repo import ContractRepository
from app.repositories.customer_repo import CustomerRepository
from app.repositories.holiday_repo import HolidayRepository
from app.repositories.location_repo import LocationRepository
from app.repositories.schedule_repo import ShiftScheduleRepository
from app.services.contracts.contract_classifier import ContractClassification
from app.services.contracts.contract_periods import ContractPeriodService
from app.services.customers.customer_resolver import CustomerIdentity, CustomerResolver
from app.services.extraction.extracted_fields import ExtractedFields, HolidayInfo, ShiftInfo

logger = logging.getLogger("contracts.persistence")

SYNC_FIELDS = ["CompanyName", "Address", "Phone", "Email", "ContactPersonName", "ContactPersonTitle"]
SUBSTITUTE_MATCH_DAYS = 7


@dataclass
class ImportPlan:
    """Everything the write phase needs; built by the pipeline before the transaction opens."""

    fields: ExtractedFields
    identity: CustomerIdentity
    contract_number: str
    start_date: date
    end_date: date
    classification: ContractClassification
    coordinates: Optional[Tuple[float, float]] = None
    created_by: Optional[str] = None
    contract_file_url: Optional[str] = None
    require_existing_customer: bool = False


@dataclass
class PersistedImport:
    customer_id: str
    customer_name: str
    customer_created: bool
    contract_id: str
    contract_number: str
    location_ids: List[str] = field(default_factory=list)
    shift_schedule_ids: List[str] = field(default_factory=list)
    holiday_ids: List[str] = field(default_factory=list)
    substitute_day_ids: List[str] = field(default_factory=list)


def _distance_to_span(day: date, holiday: PublicHoliday) -> int:
    start = holiday.holiday_start_date or holiday.holiday_date
    end = holiday.holiday_end_date or holiday.holiday_date
    if day < start:
        return (start - day).days
    if day > end:
        return (day - end).days
    return 0


def nearest_holiday(day: date, holidays: List[PublicHoliday]) -> Optional[PublicHoliday]:
    """Closest holiday of the same year within SUBSTITUTE_MATCH_DAYS of its span, else None."""
    candidates = [
        (_distance_to_span(day, h), h.holiday_date, h)
        for h in holidays
        if h.year == day.year
    ]
    candidates = [c for c in candidates if c[0] <= SUBSTITUTE_MATCH_DAYS]
    if not candidates:
        return None
    candidates.sort(key=lambda c: (c[0], c[1]))
    return candidates[0][2]


class PersistenceOrchestrator:
    """
    Writes the whole entity graph of one import in a single transaction.

    Order: customer, contract, period, (guards > 0) location + contract
    location + schedules, public holidays, substitute work days. Any failure
    rolls the transaction back; typed application errors propagate as they
    are, anything else is raised as TransactionFailure chained to the cause.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        *,
        max_attempts: Optional[int] = None,
        initial_delay_ms: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session_factory = session_factory
        self.max_attempts = max_attempts
        self.initial_delay_ms = initial_delay_ms
        self.sleep = sleep

    def persist(self, plan: ImportPlan) -> PersistedImport:
        try:
            with transaction(self.session_factory) as session:
                out = self._write(session, plan)
        except AppError:
            raise
        except Exception as e:
            logger.exception("import transaction rolled back")
            raise TransactionFailure(f"Lỗi khi lưu dữ liệu hợp đồng: {e}") from e

        logger.info(
            "import committed contract=%s customer=%s locations=%d schedules=%d holidays=%d",
            out.contract_number,
            out.customer_id,
            len(out.location_ids),
            len(out.shift_schedule_ids),
            len(out.holiday_ids),
        )
        return out

    # -------------------------------------------------
    # Steps
    # -------------------------------------------------
    def _write(self, session: Session, plan: ImportPlan) -> PersistedImport:
        fields = plan.fields

        # 1) Customer
        resolver = CustomerResolver(
            session,
            max_attempts=self.max_attempts,
            initial_delay_ms=self.initial_delay_ms,
            sleep=self.sleep,
        )
        resolved = resolver.resolve(plan.identity, create_if_missing=not plan.require_existing_customer)
        customer = resolved.customer

        if plan.identity.user_id:
            CustomerRepository(session).log_sync(
                user_id=plan.identity.user_id,
                fields_changed=SYNC_FIELDS,
                new_values={
                    "customer_code": customer.customer_code,
                    "company_name": customer.company_name,
                    "address": customer.address,
                    "phone": customer.phone,
                    "email": customer.email,
                    "contact_person_name": customer.contact_person_name,
                    "contact_person_title": customer.contact_person_title,
                },
                sync_type="CREATE" if resolved.created else "UPDATE",
            )

        # 2) Contract
        contract = self._insert_contract(session, plan, customer.id, customer.company_name)

        # 3) Period
        ContractPeriodService(session).open_or_refresh(
            contract.id,
            plan.start_date,
            plan.end_date,
            notes=fields.duration_note,
        )

        out = PersistedImport(
            customer_id=customer.id,
            customer_name=customer.company_name,
            customer_created=resolved.created,
            contract_id=contract.id,
            contract_number=contract.contract_number,
        )

        # 4) Site + schedules
        if fields.guards_required > 0:
            location = self._insert_location(session, plan, customer)
            link = self._link_location(session, plan, contract.id, location.id)
            out.location_ids.append(location.id)

            schedules = ShiftScheduleRepository(session)
            for shift in fields.shifts:
                row = schedules.insert(self._schedule_row(plan, contract.id, link.id, shift))
                out.shift_schedule_ids.append(row.id)

        # 5) Holidays
        holidays = HolidayRepository(session)
        for info in fields.holidays:
            row = self._insert_holiday(holidays, info, contract.id)
            if row is not None:
                out.holiday_ids.append(row.id)

        # 6) Substitute work days
        for day in fields.substitute_days:
            row = self._insert_substitute(holidays, day)
            if row is not None:
                out.substitute_day_ids.append(row.id)

        return out

    def _insert_contract(self, session: Session, plan: ImportPlan, customer_id: str, customer_name: str) -> Contract:
        c = plan.classification
        contracts = ContractRepository(session)
        if contracts.find_by_number(plan.contract_number) is not None:
            raise TransactionFailure(f"Số hợp đồng đã tồn tại: {plan.contract_number}")
        return contracts.insert(
            Contract(
                customer_id=customer_id,
                contract_number=plan.contract_number,
                contract_title=f"Hợp đồng bảo vệ - {customer_name}",
                contract_type=c.contract_type,
                service_scope=c.service_scope,
                start_date=plan.start_date,
                end_date=plan.end_date,
                duration_months=c.duration_months,
                is_renewable=c.is_renewable,
                auto_renewal=c.auto_renewal,
                renewal_notice_days=30,
                coverage_model="fixed_schedule",
                follows_customer_calendar=True,
                work_on_public_holidays=bool(plan.fields.work_on_holidays),
                work_on_customer_closed_days=False,
                auto_generate_shifts=c.auto_generate_shifts,
                generate_shifts_advance_days=c.advance_generation_days,
                status="draft",
                contract_file_url=plan.contract_file_url,
                notes=plan.fields.duration_note,
                created_by=plan.created_by,
            )
        )

    def _insert_location(self, session: Session, plan: ImportPlan, customer) -> CustomerLocation:
        fields = plan.fields
        locations = LocationRepository(session)
        lat, lon = plan.coordinates if plan.coordinates else (None, None)
        return locations.insert_customer_location(
            CustomerLocation(
                customer_id=customer.id,
                location_code=locations.next_location_code(customer.id, date.today()),
                location_name=fields.location_name or f"Địa điểm mặc định - {customer.company_name}",
                location_type="office",
                address=fields.location_address or customer.address or "",
                latitude=lat,
                longitude=lon,
                geofence_radius_meters=100,
                operating_hours_type="24/7",
                requires_24x7_coverage=(fields.coverage_type or "24x7") == "24x7",
                minimum_guards_required=max(fields.guards_required, 1),
            )
        )

    def _link_location(self, session: Session, plan: ImportPlan, contract_id: str, location_id: str) -> ContractLocation:
        return LocationRepository(session).insert_contract_location(
            ContractLocation(
                contract_id=contract_id,
                location_id=location_id,
                guards_required=plan.fields.guards_required,
                coverage_type=plan.fields.coverage_type or "24x7",
                service_start_date=plan.start_date,
                service_end_date=plan.end_date,
                is_primary_location=True,
                priority_level=1,
                auto_generate_shifts=plan.classification.auto_generate_shifts,
            )
        )

    def _schedule_row(
        self,
        plan: ImportPlan,
        contract_id: str,
        contract_location_id: str,
        shift: ShiftInfo,
    ) -> ContractShiftSchedule:
        weekend = plan.fields.weekend_policy
        return ContractShiftSchedule(
            contract_id=contract_id,
            contract_location_id=contract_location_id,
            schedule_name=shift.name,
            shift_type=shift.shift_type,
            schedule_type="regular",
            shift_start_time=shift.start_time,
            shift_end_time=shift.end_time,
            crosses_midnight=shift.crosses_midnight,
            duration_hours=shift.duration_hours,
            break_minutes=60,
            guards_per_shift=shift.guards_per_shift or plan.fields.guards_required,
            recurrence_type="weekly",
            applies_monday=True,
            applies_tuesday=True,
            applies_wednesday=True,
            applies_thursday=True,
            applies_friday=True,
            applies_saturday=weekend.saturday,
            applies_sunday=weekend.sunday,
            applies_on_weekends=weekend.any_weekend,
            applies_on_public_holidays=bool(plan.fields.work_on_holidays),
            applies_on_customer_holidays=True,
            skip_when_location_closed=True,
            auto_generate_enabled=plan.classification.auto_generate_shifts,
            generate_advance_days=plan.classification.advance_generation_days,
            effective_from=plan.start_date,
            effective_to=plan.end_date,
            created_by=plan.created_by,
        )

    def _insert_holiday(self, holidays: HolidayRepository, info: HolidayInfo, contract_id: str) -> Optional[PublicHoliday]:
        if holidays.find(info.holiday_date, info.year) is not None:
            return None
        return holidays.insert_if_absent(
            PublicHoliday(
                contract_id=contract_id,
                holiday_date=info.holiday_date,
                holiday_name=info.name,
                holiday_name_en=info.name_en,
                holiday_category=info.category,
                is_tet_period=info.is_tet,
                is_tet_holiday=info.is_tet,
                holiday_start_date=info.start_date,
                holiday_end_date=info.end_date,
                total_holiday_days=info.total_days,
                year=info.year,
            )
        )

    def _insert_substitute(self, holidays: HolidayRepository, day: date) -> Optional[HolidaySubstituteWorkDay]:
        holiday = nearest_holiday(day, holidays.list_for_year(day.year))
        if holiday is None:
            logger.info("substitute work day %s has no holiday within %d days", day, SUBSTITUTE_MATCH_DAYS)
            return None
        if holidays.substitute_exists(holiday.id, day):
            return None
        return holidays.insert_substitute(
            HolidaySubstituteWorkDay(
                holiday_id=holiday.id,
                substitute_date=day,
                reason=f"Làm bù cho {holiday.holiday_name}",
                year=day.year,
            )
        )
