from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional, Tuple

from sqlalchemy.orm import sessionmaker
from starlette.concurrency import run_in_threadpool

from app.core.errors import (
    AccountProvisioningFailure,
    AppError,
    ConfigError,
    GeocodingFailure,
    MissingCustomerName,
    NotificationFailure,
)
from app.services.contracts.contract_classifier import classify_contract
from app.services.customers.customer_resolver import CustomerIdentity
from app.services.extraction.contract_fields import generate_contract_number
from app.services.extraction.extracted_fields import ExtractedFields
from app.services.extraction.field_extractor import extract_fields
from app.services.extraction.section_locator import SectionIndex
from app.services.ingestion.confidence_scorer import confidence_score
from app.services.ingestion.persistence import ImportPlan, PersistedImport, PersistenceOrchestrator
from app.services.ingestion.result_assembler import ImportResult, failure_result, success_result
from app.services.parsing.text_extractor import extract_text

logger = logging.getLogger("contracts.import")

WARN_NUMBER_GENERATED = "Không tìm thấy số hợp đồng - sẽ tự động generate"
WARN_DEFAULT_DATES = "Không tìm thấy ngày bắt đầu/kết thúc - sử dụng giá trị mặc định"
WARN_NO_EMAIL = "Không có email - không thể tạo tài khoản đăng nhập cho khách hàng"
WARN_NO_GPS = "Không thể lấy tọa độ GPS từ địa chỉ - location sẽ được tạo không có GPS"
MSG_MISSING_NAME = "Không tìm thấy tên khách hàng trong file. Vui lòng kiểm tra lại."

DEFAULT_TERM_MONTHS = 12


def add_months(d: date, months: int) -> date:
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


@dataclass
class Account:
    user_id: str
    password: str


class ContractImportPipeline:
    """
    Contract document -> customer, contract, site, schedules, holidays.

    RULES:
    - Remote collaborators (users service, geocoder) are called before the
      transaction opens; the notifier only after it commits.
    - Fatal errors become a success=false result; everything else is a warning.
    - A collaborator left as None is not configured and its step is skipped.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        *,
        object_store=None,
        geocoder=None,
        account_provisioner=None,
        notifier=None,
        persistence: Optional[PersistenceOrchestrator] = None,
        today: Callable[[], date] = date.today,
    ):
        self.session_factory = session_factory
        self.object_store = object_store
        self.geocoder = geocoder
        self.account_provisioner = account_provisioner
        self.notifier = notifier
        self.persistence = persistence or PersistenceOrchestrator(session_factory)
        self.today = today

    # -------------------------------------------------
    # Entry points
    # -------------------------------------------------
    async def run_document(
        self,
        storage_key: str,
        *,
        created_by: Optional[str] = None,
        require_existing_customer: bool = False,
        delete_after: bool = False,
    ) -> ImportResult:
        if self.object_store is None:
            return failure_result(ConfigError("Object store is not configured"))
        try:
            data = await run_in_threadpool(self.object_store.download, storage_key)
        except AppError as e:
            logger.warning("download failed for %s: %s", storage_key, e)
            return failure_result(e)

        filename = storage_key.rsplit("/", 1)[-1]
        result = await self.run_bytes(
            data,
            filename,
            created_by=created_by,
            require_existing_customer=require_existing_customer,
            contract_file_url=storage_key,
        )

        if result.success and delete_after:
            if not await run_in_threadpool(self.object_store.delete, storage_key):
                result.warnings.append(f"Không thể xóa file tạm: {storage_key}")
        return result

    async def run_bytes(
        self,
        data: bytes,
        filename: str,
        *,
        created_by: Optional[str] = None,
        require_existing_customer: bool = False,
        contract_file_url: Optional[str] = None,
    ) -> ImportResult:
        raw_text: Optional[str] = None
        warnings: List[str] = []
        try:
            # =================================================
            # STEP 1: Text + sections
            # =================================================
            raw_text = extract_text(data, filename)
            index = SectionIndex.build(raw_text)

            # =================================================
            # STEP 2: Fields
            # =================================================
            fields = extract_fields(index)
            warnings.extend(fields.warnings)
            if not fields.customer_name:
                raise MissingCustomerName(MSG_MISSING_NAME)

            # =================================================
            # STEP 3: Defaults + classification
            # =================================================
            today = self.today()
            contract_number = fields.contract_number
            if not contract_number:
                contract_number = generate_contract_number(today)
                warnings.append(WARN_NUMBER_GENERATED)

            start, end = fields.start_date, fields.end_date
            if start is None or end is None:
                start = start or today
                end = end or add_months(start, DEFAULT_TERM_MONTHS)
                warnings.append(WARN_DEFAULT_DATES)

            classification = classify_contract(start, end, raw_text)

            # =================================================
            # STEP 4: Remote collaborators (outside the transaction)
            # =================================================
            account = None
            if not require_existing_customer:
                account = await self._provision_account(fields, warnings)
            coordinates = await self._geocode_site(fields, warnings)

            # =================================================
            # STEP 5: Persist (one transaction)
            # =================================================
            identity = self._identity(fields, account)
            # blocking DB work and reconcile backoff run on a worker thread
            persisted = await run_in_threadpool(
                self.persistence.persist,
                ImportPlan(
                    fields=fields,
                    identity=identity,
                    contract_number=contract_number,
                    start_date=start,
                    end_date=end,
                    classification=classification,
                    coordinates=coordinates,
                    created_by=created_by,
                    contract_file_url=contract_file_url,
                    require_existing_customer=require_existing_customer,
                )
            )
        except AppError as e:
            logger.warning("import of %s failed: %s %s", filename, e.code, e.message)
            return failure_result(e, raw_text=raw_text, warnings=warnings)
        except Exception as e:
            logger.exception("import of %s failed", filename)
            return failure_result(e, raw_text=raw_text, warnings=warnings)

        # =================================================
        # STEP 6: Notify (after commit)
        # =================================================
        await self._notify(fields, persisted, account, warnings)

        # =================================================
        # STEP 7: Score + assemble
        # =================================================
        score = confidence_score(
            contract_number=persisted.contract_number,
            customer_name=persisted.customer_name,
            start_date=start,
            end_date=end,
            guards_required=fields.guards_required,
            schedules_created=len(persisted.shift_schedule_ids),
        )
        logger.info(
            "imported %s as contract %s (score=%d, warnings=%d)",
            filename,
            persisted.contract_number,
            score,
            len(warnings),
        )
        return success_result(
            contract_id=persisted.contract_id,
            customer_id=persisted.customer_id,
            location_ids=persisted.location_ids,
            shift_schedule_ids=persisted.shift_schedule_ids,
            contract_number=persisted.contract_number,
            customer_name=persisted.customer_name,
            raw_text=raw_text,
            warnings=warnings,
            confidence_score=score,
        )

    # -------------------------------------------------
    # Helpers
    # -------------------------------------------------
    @staticmethod
    def _identity(fields: ExtractedFields, account: Optional[Account]) -> CustomerIdentity:
        return CustomerIdentity(
            company_name=fields.customer_name,
            email=fields.customer_email,
            identity_number=fields.identity_number,
            phone=fields.customer_phone,
            address=fields.customer_address,
            contact_person_name=fields.contact_person_name,
            contact_person_title=fields.contact_person_title,
            gender=fields.gender,
            tax_code=fields.tax_code,
            user_id=account.user_id if account else None,
        )

    async def _provision_account(self, fields: ExtractedFields, warnings: List[str]) -> Optional[Account]:
        if self.account_provisioner is None:
            return None
        if not fields.customer_email:
            warnings.append(WARN_NO_EMAIL)
            return None
        try:
            created = await self.account_provisioner.create_account(
                fields.customer_email,
                fields.contact_person_name or fields.customer_name,
                fields.customer_phone,
                fields.customer_address,
            )
        except (AccountProvisioningFailure, ConfigError) as e:
            logger.warning("account provisioning failed for %s: %s", fields.customer_email, e)
            warnings.append(f"Không thể tạo tài khoản đăng nhập: {e.message}")
            return None
        if not created:
            return None
        user_id, password = created
        return Account(user_id=user_id, password=password)

    async def _geocode_site(self, fields: ExtractedFields, warnings: List[str]) -> Optional[Tuple[float, float]]:
        if self.geocoder is None or fields.guards_required <= 0:
            return None
        address = fields.location_address or fields.customer_address
        if not address:
            return None
        try:
            coordinates = await self.geocoder.geocode(address)
        except (GeocodingFailure, ConfigError) as e:
            logger.warning("geocoding failed for %s: %s", address, e)
            warnings.append(f"Lỗi khi lấy tọa độ GPS: {e.message}")
            return None
        if coordinates is None:
            warnings.append(WARN_NO_GPS)
        return coordinates

    async def _notify(
        self,
        fields: ExtractedFields,
        persisted: PersistedImport,
        account: Optional[Account],
        warnings: List[str],
    ) -> None:
        if self.notifier is None or account is None or not fields.customer_email:
            return
        try:
            await self.notifier.send_login_info(
                fields.contact_person_name or persisted.customer_name,
                fields.customer_email,
                account.password,
                persisted.contract_number,
            )
        except (NotificationFailure, ConfigError) as e:
            logger.warning("login info email to %s failed: %s", fields.customer_email, e)
            warnings.append(f"Không thể gửi email thông tin đăng nhập: {e.message}")
