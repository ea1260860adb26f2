from __future__ import annotations

from typing import List

from sqlalchemy import select

from app.infra.entities import ContractShiftSchedule
from app.repositories.base import BaseRepository


class ShiftScheduleRepository(BaseRepository):
    def insert(self, schedule: ContractShiftSchedule) -> ContractShiftSchedule:
        return self._add(schedule)

    def list_for_contract(self, contract_id: str) -> List[ContractShiftSchedule]:
        stmt = select(ContractShiftSchedule).where(ContractShiftSchedule.contract_id == contract_id)
        return list(self.session.execute(stmt).scalars())
