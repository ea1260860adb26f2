from __future__ import annotations

import logging
from typing import Optional

import httpx

from app.core.config import settings
from app.core.errors import ConfigError, NotificationFailure

logger = logging.getLogger("contracts.notifications")


class LoginInfoNotifier:
    """Sends the customer's login credentials through the mail relay."""

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url if base_url is not None else settings.NOTIFIER_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def send_login_info(self, name: str, email: str, password: str, contract_number: str) -> None:
        if not self.base_url:
            raise ConfigError("Missing NOTIFIER_BASE_URL")
        payload = {
            "template": "customer_login_info",
            "to": email,
            "customerName": name,
            "password": password,
            "contractNumber": contract_number,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.post(f"{self.base_url}/api/notifications/email", json=payload)
                r.raise_for_status()
        except httpx.HTTPError as e:
            raise NotificationFailure(str(e)) from e
        logger.info("login info sent to %s for contract %s", email, contract_number)
