from __future__ import annotations

from datetime import date
from typing import Optional

WEIGHTS = {
    "contract_number": 15,
    "customer_name": 20,
    "start_date": 15,
    "end_date": 15,
    "guards_required": 20,
    "shift_schedules": 15,
}


def confidence_score(
    *,
    contract_number: Optional[str],
    customer_name: Optional[str],
    start_date: Optional[date],
    end_date: Optional[date],
    guards_required: int,
    schedules_created: int,
) -> int:
    """Additive completeness heuristic in [0, 100]."""
    score = 0
    if contract_number:
        score += WEIGHTS["contract_number"]
    if customer_name:
        score += WEIGHTS["customer_name"]
    if start_date is not None:
        score += WEIGHTS["start_date"]
    if end_date is not None:
        score += WEIGHTS["end_date"]
    if guards_required and guards_required > 0:
        score += WEIGHTS["guards_required"]
    if schedules_created and schedules_created > 0:
        score += WEIGHTS["shift_schedules"]
    return min(score, 100)
