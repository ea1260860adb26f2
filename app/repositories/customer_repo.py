from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from app.infra.entities import Customer, CustomerSyncLog
from app.repositories.base import BaseRepository

_CODE_RE = re.compile(r"^CUST-(\d+)$")


class CustomerRepository(BaseRepository):
    # -------------------------------------------------
    # Lookups
    # -------------------------------------------------
    def _first(self, **filters) -> Optional[Customer]:
        stmt = select(Customer).filter_by(is_deleted=False, **filters).limit(1)
        return self.session.execute(stmt).scalars().first()

    def get(self, customer_id: str) -> Optional[Customer]:
        return self.session.get(Customer, customer_id)

    def find_by_user_id(self, user_id: str) -> Optional[Customer]:
        return self._first(user_id=user_id)

    def find_by_email(self, email: str) -> Optional[Customer]:
        return self._first(email=email)

    def find_by_identity_number(self, identity_number: str) -> Optional[Customer]:
        return self._first(identity_number=identity_number)

    def find_by_phone(self, phone: str) -> Optional[Customer]:
        return self._first(phone=phone)

    # -------------------------------------------------
    # Writes
    # -------------------------------------------------
    def next_customer_code(self) -> str:
        codes: List[str] = list(
            self.session.execute(
                select(Customer.customer_code).where(Customer.customer_code.like("CUST-%"))
            ).scalars()
        )
        numbers = [int(m.group(1)) for m in (_CODE_RE.match(c) for c in codes) if m]
        return f"CUST-{(max(numbers) + 1) if numbers else 1:03d}"

    def insert(self, customer: Customer) -> Customer:
        """Insert inside a savepoint so a uniqueness violation leaves the outer transaction usable."""
        with self.session.begin_nested():
            self.session.add(customer)
        return customer

    def touch(self, customer: Customer) -> None:
        customer.updated_at = datetime.now(timezone.utc)
        self.session.flush()

    def log_sync(
        self,
        *,
        user_id: str,
        fields_changed: List[str],
        new_values: Dict[str, Any],
        initiated_by: str = "CONTRACT_IMPORT",
        sync_type: str = "CREATE",
    ) -> CustomerSyncLog:
        now = datetime.now(timezone.utc)
        return self._add(
            CustomerSyncLog(
                user_id=user_id,
                sync_type=sync_type,
                sync_status="SUCCESS",
                fields_changed=fields_changed,
                new_values=self._encode(new_values),
                sync_initiated_by=initiated_by,
                retry_count=0,
                sync_started_at=now,
                sync_completed_at=now,
            )
        )
