from __future__ import annotations

from typing import Any, Dict, Optional


class AppError(Exception):
    code = "APP_ERROR"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class ConfigError(AppError):
    code = "CONFIG_ERROR"


class IngestionError(AppError):
    code = "INGESTION_ERROR"


# -------------------------------------------------
# Document reading (fatal)
# -------------------------------------------------
class UnsupportedFileType(IngestionError):
    code = "UNSUPPORTED_FILE_TYPE"


class EmptyDocument(IngestionError):
    code = "EMPTY_DOCUMENT"


class DocumentUnreadable(IngestionError):
    code = "DOCUMENT_UNREADABLE"


# -------------------------------------------------
# Customer identity
# -------------------------------------------------
class MissingCustomerName(IngestionError):
    code = "MISSING_CUSTOMER_NAME"


class CustomerNotFound(IngestionError):
    code = "CUSTOMER_NOT_FOUND"

    def __init__(self, message: str, identity: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.identity = identity or {}


class CustomerCreationRace(AppError):
    """Raised only after the reconcile retries are exhausted."""
    code = "CUSTOMER_CREATION_RACE"

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


# -------------------------------------------------
# Persistence
# -------------------------------------------------
class TransactionFailure(AppError):
    code = "TRANSACTION_FAILURE"


# -------------------------------------------------
# Collaborators (non-fatal, downgraded to warnings)
# -------------------------------------------------
class GeocodingFailure(AppError):
    code = "GEOCODING_FAILURE"


class NotificationFailure(AppError):
    code = "NOTIFICATION_FAILURE"


class AccountProvisioningFailure(AppError):
    code = "ACCOUNT_PROVISIONING_FAILURE"
