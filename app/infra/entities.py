from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
)

from app.infra.db import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), unique=True, nullable=True)
    customer_code = Column(String(50), unique=True, nullable=False)
    company_name = Column(String(255), nullable=False)
    contact_person_name = Column(String(255), nullable=True)
    contact_person_title = Column(String(100), nullable=True)
    identity_number = Column(String(20), nullable=True, index=True)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(20), nullable=True, index=True)
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    district = Column(String(100), nullable=True)
    tax_code = Column(String(20), nullable=True)
    gender = Column(String(10), nullable=True)
    customer_since = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="active")
    follows_national_holidays = Column(Boolean, nullable=False, default=True)
    notes = Column(Text, nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True)


class Contract(Base):
    __tablename__ = "contracts"

    id = Column(String(36), primary_key=True, default=_uuid)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False)
    contract_number = Column(String(50), unique=True, nullable=False)
    contract_title = Column(String(255), nullable=False)
    contract_type = Column(String(50), nullable=False)
    service_scope = Column(String(100), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    duration_months = Column(Integer, nullable=False)
    is_renewable = Column(Boolean, nullable=False, default=True)
    auto_renewal = Column(Boolean, nullable=False, default=False)
    renewal_notice_days = Column(Integer, nullable=False, default=30)
    renewal_count = Column(Integer, nullable=False, default=0)
    coverage_model = Column(String(50), nullable=False, default="fixed_schedule")
    follows_customer_calendar = Column(Boolean, nullable=False, default=True)
    work_on_public_holidays = Column(Boolean, nullable=False, default=False)
    work_on_customer_closed_days = Column(Boolean, nullable=False, default=False)
    auto_generate_shifts = Column(Boolean, nullable=False, default=True)
    generate_shifts_advance_days = Column(Integer, nullable=False, default=30)
    status = Column(String(20), nullable=False, default="draft")
    contract_file_url = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(String(36), nullable=True)


class ContractPeriod(Base):
    __tablename__ = "contract_periods"

    id = Column(String(36), primary_key=True, default=_uuid)
    contract_id = Column(String(36), ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False, index=True)
    period_number = Column(Integer, nullable=False)
    period_type = Column(String(50), nullable=False)
    period_start_date = Column(Date, nullable=False)
    period_end_date = Column(Date, nullable=False)
    is_current_period = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class CustomerLocation(Base):
    __tablename__ = "customer_locations"
    __table_args__ = (UniqueConstraint("location_code", "customer_id", name="uk_location_code"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    customer_id = Column(String(36), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    location_code = Column(String(50), nullable=False)
    location_name = Column(String(255), nullable=False)
    location_type = Column(String(50), nullable=False, default="office")
    address = Column(Text, nullable=False, default="")
    city = Column(String(100), nullable=True)
    district = Column(String(100), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    geofence_radius_meters = Column(Integer, nullable=False, default=100)
    operating_hours_type = Column(String(50), nullable=False, default="24/7")
    follows_standard_workweek = Column(Boolean, nullable=False, default=True)
    requires_24x7_coverage = Column(Boolean, nullable=False, default=False)
    allows_single_guard = Column(Boolean, nullable=False, default=True)
    minimum_guards_required = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class ContractLocation(Base):
    __tablename__ = "contract_locations"
    __table_args__ = (UniqueConstraint("contract_id", "location_id", name="uk_contract_location"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    contract_id = Column(String(36), ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False)
    location_id = Column(String(36), ForeignKey("customer_locations.id"), nullable=False)
    guards_required = Column(Integer, nullable=False)
    coverage_type = Column(String(50), nullable=False, default="24x7")
    service_start_date = Column(Date, nullable=False)
    service_end_date = Column(Date, nullable=True)
    is_primary_location = Column(Boolean, nullable=False, default=True)
    priority_level = Column(Integer, nullable=False, default=1)
    auto_generate_shifts = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=True)
    notes = Column(Text, nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class ContractShiftSchedule(Base):
    __tablename__ = "contract_shift_schedules"

    id = Column(String(36), primary_key=True, default=_uuid)
    contract_id = Column(String(36), ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False, index=True)
    contract_location_id = Column(String(36), ForeignKey("contract_locations.id", ondelete="SET NULL"), nullable=True)
    schedule_name = Column(String(255), nullable=False)
    shift_type = Column(String(20), nullable=True)
    schedule_type = Column(String(50), nullable=False, default="regular")
    shift_start_time = Column(Time, nullable=False)
    shift_end_time = Column(Time, nullable=False)
    crosses_midnight = Column(Boolean, nullable=False, default=False)
    duration_hours = Column(Float, nullable=False)
    break_minutes = Column(Integer, nullable=False, default=60)
    guards_per_shift = Column(Integer, nullable=False)
    recurrence_type = Column(String(50), nullable=False, default="weekly")
    applies_monday = Column(Boolean, nullable=False, default=True)
    applies_tuesday = Column(Boolean, nullable=False, default=True)
    applies_wednesday = Column(Boolean, nullable=False, default=True)
    applies_thursday = Column(Boolean, nullable=False, default=True)
    applies_friday = Column(Boolean, nullable=False, default=True)
    applies_saturday = Column(Boolean, nullable=False, default=False)
    applies_sunday = Column(Boolean, nullable=False, default=False)
    applies_on_public_holidays = Column(Boolean, nullable=False, default=False)
    applies_on_customer_holidays = Column(Boolean, nullable=False, default=True)
    applies_on_weekends = Column(Boolean, nullable=False, default=False)
    skip_when_location_closed = Column(Boolean, nullable=False, default=True)
    auto_generate_enabled = Column(Boolean, nullable=False, default=True)
    generate_advance_days = Column(Integer, nullable=False, default=30)
    effective_from = Column(Date, nullable=False)
    effective_to = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    created_by = Column(String(36), nullable=True)


class PublicHoliday(Base):
    __tablename__ = "public_holidays"
    __table_args__ = (UniqueConstraint("holiday_date", "year", name="uk_holiday_date_year"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    contract_id = Column(String(36), ForeignKey("contracts.id", ondelete="SET NULL"), nullable=True)
    holiday_date = Column(Date, nullable=False)
    holiday_name = Column(String(200), nullable=False)
    holiday_name_en = Column(String(200), nullable=True)
    holiday_category = Column(String(50), nullable=False, default="national")
    is_tet_period = Column(Boolean, nullable=False, default=False)
    is_tet_holiday = Column(Boolean, nullable=False, default=False)
    holiday_start_date = Column(Date, nullable=True)
    holiday_end_date = Column(Date, nullable=True)
    total_holiday_days = Column(Integer, nullable=True)
    is_official_holiday = Column(Boolean, nullable=False, default=True)
    applies_nationwide = Column(Boolean, nullable=False, default=True)
    description = Column(Text, nullable=True)
    year = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class HolidaySubstituteWorkDay(Base):
    __tablename__ = "holiday_substitute_work_days"

    id = Column(String(36), primary_key=True, default=_uuid)
    holiday_id = Column(String(36), ForeignKey("public_holidays.id", ondelete="CASCADE"), nullable=False)
    substitute_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=True)
    year = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class CustomerSyncLog(Base):
    __tablename__ = "customer_sync_log"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    sync_type = Column(String(50), nullable=False)
    sync_status = Column(String(50), nullable=False)
    fields_changed = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)
    sync_initiated_by = Column(String(50), nullable=True)
    retry_count = Column(Integer, nullable=False, default=0)
    error_message = Column(Text, nullable=True)
    sync_started_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    sync_completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
