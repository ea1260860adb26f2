from __future__ import annotations

from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.infra.entities import HolidaySubstituteWorkDay, PublicHoliday
from app.repositories.base import BaseRepository


class HolidayRepository(BaseRepository):
    def find(self, holiday_date: date, year: int) -> Optional[PublicHoliday]:
        stmt = select(PublicHoliday).where(
            PublicHoliday.holiday_date == holiday_date,
            PublicHoliday.year == year,
        )
        return self.session.execute(stmt).scalars().first()

    def list_for_year(self, year: int) -> List[PublicHoliday]:
        stmt = select(PublicHoliday).where(PublicHoliday.year == year).order_by(PublicHoliday.holiday_date)
        return list(self.session.execute(stmt).scalars())

    def insert_if_absent(self, holiday: PublicHoliday) -> Optional[PublicHoliday]:
        """None when another import already holds this date and year (uk_holiday_date_year)."""
        try:
            with self.session.begin_nested():
                self.session.add(holiday)
        except IntegrityError:
            return None
        return holiday

    def insert_substitute(self, day: HolidaySubstituteWorkDay) -> HolidaySubstituteWorkDay:
        return self._add(day)

    def substitute_exists(self, holiday_id: str, substitute_date: date) -> bool:
        stmt = select(HolidaySubstituteWorkDay.id).where(
            HolidaySubstituteWorkDay.holiday_id == holiday_id,
            HolidaySubstituteWorkDay.substitute_date == substitute_date,
        )
        return self.session.execute(stmt).first() is not None
