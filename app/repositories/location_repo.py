from __future__ import annotations

from datetime import date

from sqlalchemy import func, select

from app.infra.entities import ContractLocation, CustomerLocation
from app.repositories.base import BaseRepository


class LocationRepository(BaseRepository):
    def next_location_code(self, customer_id: str, on: date) -> str:
        prefix = f"LOC-{on:%Y%m%d}-"
        stmt = select(func.count()).select_from(CustomerLocation).where(
            CustomerLocation.customer_id == customer_id,
            CustomerLocation.location_code.like(f"{prefix}%"),
        )
        count = self.session.execute(stmt).scalar() or 0
        return f"{prefix}{count + 1:03d}"

    def insert_customer_location(self, location: CustomerLocation) -> CustomerLocation:
        return self._add(location)

    def insert_contract_location(self, link: ContractLocation) -> ContractLocation:
        return self._add(link)
