from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from app.core.config import settings
from app.core.errors import AccountProvisioningFailure, ConfigError
from app.services.accounts.password_generator import PasswordGenerator

logger = logging.getLogger("contracts.accounts")


class UsersServiceProvisioner:
    """
    Creates the customer's login in the users service.

    create_account(...) -> (user_id, generated_password) on success; raises
    AccountProvisioningFailure when the service refuses or is unreachable.
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        passwords: Optional[PasswordGenerator] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url if base_url is not None else settings.USERS_API_BASE_URL).rstrip("/")
        self.passwords = passwords or PasswordGenerator()
        self.timeout = timeout or settings.USERS_API_TIMEOUT_SECONDS
        self.transport = transport

    async def _post(self, path: str, json_body: Dict[str, Any]) -> Dict[str, Any]:
        if not self.base_url:
            raise ConfigError("Missing USERS_API_BASE_URL")
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.post(url, json=json_body)
        except httpx.HTTPError as e:
            raise AccountProvisioningFailure(f"users service unreachable: {e}") from e

        if r.status_code >= 400:
            raise AccountProvisioningFailure(f"users service returned {r.status_code}: {r.text[:200]}")
        try:
            body = r.json()
        except ValueError as e:
            raise AccountProvisioningFailure(f"users service returned a non-JSON body: {r.text[:200]}") from e
        if not isinstance(body, dict):
            raise AccountProvisioningFailure("users service returned an unexpected body")
        return body

    async def create_account(
        self,
        email: str,
        name: str,
        phone: Optional[str],
        address: Optional[str],
    ) -> Optional[Tuple[str, str]]:
        password = self.passwords.generate()
        body = await self._post(
            "/api/users",
            {
                "email": email,
                "password": password,
                "fullName": name,
                "phone": phone,
                "address": address,
                "roleName": "customer",
                "authProvider": "email",
            },
        )
        if not body.get("success"):
            raise AccountProvisioningFailure(body.get("errorMessage") or "account creation rejected")

        user_id = body.get("userId")
        if not user_id:
            raise AccountProvisioningFailure("users service did not return a user id")
        logger.info("login account created for %s (user_id=%s)", email, user_id)
        return str(user_id), password
