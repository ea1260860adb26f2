from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.core.errors import AppError, CustomerNotFound


class ImportResult(BaseModel):
    success: bool
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    contract_id: Optional[str] = None
    customer_id: Optional[str] = None
    location_ids: List[str] = Field(default_factory=list)
    shift_schedule_ids: List[str] = Field(default_factory=list)
    contract_number: Optional[str] = None
    customer_name: Optional[str] = None
    locations_created: int = 0
    schedules_created: int = 0
    raw_text: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
    confidence_score: int = 0
    extracted_identity: Optional[Dict[str, Any]] = None


def success_result(
    *,
    contract_id: str,
    customer_id: str,
    location_ids: List[str],
    shift_schedule_ids: List[str],
    contract_number: str,
    customer_name: str,
    raw_text: str,
    warnings: List[str],
    confidence_score: int,
) -> ImportResult:
    return ImportResult(
        success=True,
        contract_id=contract_id,
        customer_id=customer_id,
        location_ids=list(location_ids),
        shift_schedule_ids=list(shift_schedule_ids),
        contract_number=contract_number,
        customer_name=customer_name,
        locations_created=len(location_ids),
        schedules_created=len(shift_schedule_ids),
        raw_text=raw_text,
        warnings=list(warnings),
        confidence_score=confidence_score,
    )


def failure_result(
    error: Exception,
    *,
    raw_text: Optional[str] = None,
    warnings: Optional[List[str]] = None,
) -> ImportResult:
    code = error.code if isinstance(error, AppError) else "IMPORT_FAILED"
    message = error.message if isinstance(error, AppError) else f"Lỗi import contract: {error}"
    return ImportResult(
        success=False,
        error_code=code,
        error_message=message,
        raw_text=raw_text,
        warnings=list(warnings or []),
        extracted_identity=error.identity if isinstance(error, CustomerNotFound) else None,
    )
