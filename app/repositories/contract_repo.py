from __future__ import annotations

from datetime import date
from typing import List, Optional

from sqlalchemy import func, select

from app.infra.entities import Contract, ContractPeriod
from app.repositories.base import BaseRepository


class ContractRepository(BaseRepository):
    def insert(self, contract: Contract) -> Contract:
        return self._add(contract)

    def get(self, contract_id: str) -> Optional[Contract]:
        return self.session.get(Contract, contract_id)

    def find_by_number(self, contract_number: str) -> Optional[Contract]:
        stmt = select(Contract).where(
            Contract.contract_number == contract_number,
            Contract.is_deleted.is_(False),
        )
        return self.session.execute(stmt).scalars().first()


class ContractPeriodRepository(BaseRepository):
    def current(self, contract_id: str) -> Optional[ContractPeriod]:
        stmt = select(ContractPeriod).where(
            ContractPeriod.contract_id == contract_id,
            ContractPeriod.is_current_period.is_(True),
        )
        return self.session.execute(stmt).scalars().first()

    def list_for_contract(self, contract_id: str) -> List[ContractPeriod]:
        stmt = (
            select(ContractPeriod)
            .where(ContractPeriod.contract_id == contract_id)
            .order_by(ContractPeriod.period_number)
        )
        return list(self.session.execute(stmt).scalars())

    def max_period_number(self, contract_id: str) -> int:
        stmt = select(func.max(ContractPeriod.period_number)).where(
            ContractPeriod.contract_id == contract_id
        )
        return self.session.execute(stmt).scalar() or 0

    def insert(self, period: ContractPeriod) -> ContractPeriod:
        return self._add(period)

    def retire(self, period: ContractPeriod) -> None:
        period.is_current_period = False
        self.session.flush()

    def update_dates(self, period: ContractPeriod, start: date, end: date, notes: Optional[str]) -> None:
        period.period_start_date = start
        period.period_end_date = end
        if notes:
            period.notes = notes
        self.session.flush()
