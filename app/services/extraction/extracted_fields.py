from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Dict, List, Optional


@dataclass
class ShiftInfo:
    name: str
    shift_type: str  # morning | afternoon | evening | night | noon | weekend | other
    start_time: time
    end_time: time
    guards_per_shift: Optional[int] = None

    @property
    def crosses_midnight(self) -> bool:
        return self.end_time < self.start_time

    @property
    def duration_hours(self) -> float:
        start = self.start_time.hour * 60 + self.start_time.minute
        end = self.end_time.hour * 60 + self.end_time.minute
        minutes = end - start
        if minutes < 0:
            minutes += 24 * 60
        return round(minutes / 60, 2)


@dataclass
class WeekendPolicy:
    saturday: bool = False
    sunday: bool = False
    rule: str = "no_weekend_clause"

    @property
    def any_weekend(self) -> bool:
        return self.saturday or self.sunday


@dataclass
class HolidayInfo:
    name: str
    holiday_date: date
    name_en: Optional[str] = None
    category: str = "national"
    is_tet: bool = False
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @property
    def total_days(self) -> int:
        if self.start_date and self.end_date:
            return (self.end_date - self.start_date).days + 1
        return 1

    @property
    def year(self) -> int:
        return self.holiday_date.year


@dataclass
class ExtractedFields:
    """All extraction results for one document. Every field may be empty."""

    contract_number: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    duration_note: Optional[str] = None

    customer_name: Optional[str] = None
    customer_address: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    tax_code: Optional[str] = None
    identity_number: Optional[str] = None
    gender: Optional[str] = None
    contact_person_name: Optional[str] = None
    contact_person_title: Optional[str] = None

    location_name: Optional[str] = None
    location_address: Optional[str] = None

    guards_required: int = 0
    coverage_type: Optional[str] = None
    shifts: List[ShiftInfo] = field(default_factory=list)
    weekend_policy: WeekendPolicy = field(default_factory=WeekendPolicy)
    work_on_holidays: Optional[bool] = None

    holidays: List[HolidayInfo] = field(default_factory=list)
    substitute_days: List[date] = field(default_factory=list)

    warnings: List[str] = field(default_factory=list)
    trace: Dict[str, str] = field(default_factory=dict)
