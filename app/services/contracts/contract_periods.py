from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from app.infra.entities import ContractPeriod
from app.repositories.contract_repo import ContractPeriodRepository

logger = logging.getLogger("contracts.periods")


class ContractPeriodService:
    """
    Keeps exactly one current period per contract.

    open_or_refresh() is what an import calls: period #1 the first time,
    a date refresh when the contract already has a current period.
    renew() retires the current period and opens N+1.
    """

    def __init__(self, session: Session):
        self.periods = ContractPeriodRepository(session)

    def open_or_refresh(
        self,
        contract_id: str,
        start: date,
        end: date,
        notes: Optional[str] = None,
    ) -> ContractPeriod:
        current = self.periods.current(contract_id)
        if current is not None:
            self.periods.update_dates(current, start, end, notes)
            logger.info("refreshed period #%d of contract %s", current.period_number, contract_id)
            return current

        return self.periods.insert(
            ContractPeriod(
                contract_id=contract_id,
                period_number=1,
                period_type="initial",
                period_start_date=start,
                period_end_date=end,
                is_current_period=True,
                notes=notes or "Initial contract period",
            )
        )

    def renew(
        self,
        contract_id: str,
        start: date,
        end: date,
        notes: Optional[str] = None,
    ) -> ContractPeriod:
        current = self.periods.current(contract_id)
        if current is not None:
            self.periods.retire(current)

        number = self.periods.max_period_number(contract_id) + 1
        period = self.periods.insert(
            ContractPeriod(
                contract_id=contract_id,
                period_number=number,
                period_type="renewal",
                period_start_date=start,
                period_end_date=end,
                is_current_period=True,
                notes=notes or f"Renewal period #{number}",
            )
        )
        logger.info("contract %s renewed, period #%d is current", contract_id, number)
        return period
