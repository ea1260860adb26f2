from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from sqlalchemy.exc import IntegrityError

from app.core.errors import CustomerCreationRace

logger = logging.getLogger("contracts.retry")

T = TypeVar("T")


def insert_or_reconcile(
    insert: Callable[[], T],
    requery: Callable[[], Optional[T]],
    *,
    max_attempts: int = 5,
    initial_delay: float = 0.1,
    conflict_types: Tuple[Type[BaseException], ...] = (IntegrityError,),
    sleep: Callable[[float], None] = time.sleep,
    label: str = "record",
) -> Tuple[T, bool]:
    """
    Optimistic insert, then reconcile on a uniqueness violation.

    Returns (record, created). When `insert` raises one of `conflict_types`
    wait and `requery`. A hit means the same record was written concurrently.
    A miss means the conflict was on some other key (e.g. a generated code
    another writer took), so `insert` runs again; it must rebuild the row,
    and leave the session usable after failing (savepoint). The wait doubles
    each round until `max_attempts` is spent.
    """
    try:
        return insert(), True
    except conflict_types as exc:
        logger.warning("insert conflict for %s, reconciling: %s", label, exc)
        conflict = exc

    delay = initial_delay
    for attempt in range(1, max_attempts + 1):
        sleep(delay)
        found = requery()
        if found is not None:
            logger.info("%s reconciled after %d attempt(s)", label, attempt)
            return found, False
        try:
            record = insert()
        except conflict_types as exc:
            logger.warning("insert retry %d for %s conflicted: %s", attempt, label, exc)
            conflict = exc
        else:
            logger.info("%s inserted on retry %d", label, attempt)
            return record, True
        delay *= 2

    raise CustomerCreationRace(
        f"{label} conflicted on insert and was not found after {max_attempts} attempts",
        attempts=max_attempts,
    ) from conflict
