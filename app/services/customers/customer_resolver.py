from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import CustomerNotFound
from app.core.retry import insert_or_reconcile
from app.infra.entities import Customer
from app.repositories.customer_repo import CustomerRepository

logger = logging.getLogger("contracts.customers")

# back-filled on an existing record only while still empty there
FILL_IF_EMPTY_FIELDS = (
    "address",
    "contact_person_name",
    "contact_person_title",
    "identity_number",
    "gender",
    "phone",
    "email",
    "tax_code",
    "user_id",
)


@dataclass
class CustomerIdentity:
    company_name: str
    email: Optional[str] = None
    identity_number: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    contact_person_name: Optional[str] = None
    contact_person_title: Optional[str] = None
    gender: Optional[str] = None
    tax_code: Optional[str] = None
    user_id: Optional[str] = None

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class ResolvedCustomer:
    customer: Customer
    created: bool
    filled_fields: List[str] = field(default_factory=list)
    matched_by: Optional[str] = None


class CustomerResolver:
    """
    Match-or-create for the Party B identity.

    Lookup order: linked account, email, identity number, phone. The first key
    that is present and matches decides; later keys are not consulted.
    """

    def __init__(
        self,
        session: Session,
        *,
        max_attempts: Optional[int] = None,
        initial_delay_ms: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.customers = CustomerRepository(session)
        self.max_attempts = max_attempts or settings.CUSTOMER_RACE_MAX_ATTEMPTS
        self.initial_delay = (initial_delay_ms or settings.CUSTOMER_RACE_INITIAL_DELAY_MS) / 1000.0
        self.sleep = sleep

    # -------------------------------------------------
    # Lookup
    # -------------------------------------------------
    def find_existing(self, identity: CustomerIdentity) -> tuple[Optional[Customer], Optional[str]]:
        lookups = (
            ("user_id", identity.user_id, self.customers.find_by_user_id),
            ("email", identity.email, self.customers.find_by_email),
            ("identity_number", identity.identity_number, self.customers.find_by_identity_number),
            ("phone", identity.phone, self.customers.find_by_phone),
        )
        for key, value, finder in lookups:
            if not value:
                continue
            found = finder(value)
            if found is not None:
                return found, key
        return None, None

    # -------------------------------------------------
    # Merge
    # -------------------------------------------------
    def fill_if_empty(self, customer: Customer, identity: CustomerIdentity) -> List[str]:
        filled = []
        for name in FILL_IF_EMPTY_FIELDS:
            incoming = getattr(identity, name)
            if incoming and not getattr(customer, name):
                setattr(customer, name, incoming)
                filled.append(name)
        if filled:
            self.customers.touch(customer)
            logger.info("customer %s back-filled: %s", customer.customer_code, ", ".join(filled))
        return filled

    # -------------------------------------------------
    # Resolve
    # -------------------------------------------------
    def _new_customer(self, identity: CustomerIdentity) -> Customer:
        return Customer(
            user_id=identity.user_id,
            customer_code=self.customers.next_customer_code(),
            company_name=identity.company_name,
            contact_person_name=identity.contact_person_name,
            contact_person_title=identity.contact_person_title,
            identity_number=identity.identity_number,
            email=identity.email,
            phone=identity.phone,
            address=identity.address,
            tax_code=identity.tax_code,
            gender=identity.gender,
            customer_since=date.today(),
            status="active",
            notes="Imported from contract document",
        )

    def _requery(self, identity: CustomerIdentity) -> Optional[Customer]:
        customer, _ = self.find_existing(identity)
        return customer

    def resolve(self, identity: CustomerIdentity, *, create_if_missing: bool = True) -> ResolvedCustomer:
        existing, matched_by = self.find_existing(identity)
        if existing is not None:
            filled = self.fill_if_empty(existing, identity)
            return ResolvedCustomer(customer=existing, created=False, filled_fields=filled, matched_by=matched_by)

        if not create_if_missing:
            raise CustomerNotFound(
                "Không tìm thấy khách hàng phù hợp với thông tin trong hợp đồng",
                identity=identity.as_dict(),
            )

        customer, created = insert_or_reconcile(
            lambda: self.customers.insert(self._new_customer(identity)),
            lambda: self._requery(identity),
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay,
            sleep=self.sleep,
            label=f"customer '{identity.company_name}'",
        )
        if created:
            logger.info("created customer %s (%s)", customer.customer_code, customer.company_name)
            return ResolvedCustomer(customer=customer, created=True)

        # another writer created it first
        filled = self.fill_if_empty(customer, identity)
        return ResolvedCustomer(customer=customer, created=False, filled_fields=filled, matched_by="reconcile")
