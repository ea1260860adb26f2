from __future__ import annotations

import logging

from app.core.config import settings
from app.core.errors import IngestionError

logger = logging.getLogger("contracts.storage")


class StorageRepository:
    """Object store backed by Supabase Storage: download(reference) / delete(reference)."""

    def __init__(self, sb, bucket: str | None = None):
        self.sb = sb
        self.bucket = bucket or settings.SUPABASE_STORAGE_BUCKET

    def download(self, reference: str) -> bytes:
        try:
            return self.sb.storage.from_(self.bucket).download(reference)
        except Exception as e:
            raise IngestionError(f"Storage download failed: {e}") from e

    def delete(self, reference: str) -> bool:
        try:
            res = self.sb.storage.from_(self.bucket).remove([reference])
        except Exception as e:
            logger.warning("storage delete failed for %s: %s", reference, e)
            return False
        return bool(getattr(res, "data", None) or res)
