import asyncio
import json
import random

import httpx
import pytest

from app.core.errors import AccountProvisioningFailure, ConfigError
from app.services.accounts.account_provisioner import UsersServiceProvisioner
from app.services.accounts.password_generator import DIGITS, LOWER, SPECIAL, UPPER, PasswordGenerator


def test_password_layout():
    password = PasswordGenerator(random.Random(7)).generate()

    assert len(password) == 10
    assert password[0] in UPPER
    assert all(c in LOWER for c in password[1:3])
    assert all(c in DIGITS for c in password[3:8])
    assert password[8] in SPECIAL
    assert password[9] in UPPER + LOWER + DIGITS


def test_seeded_generator_is_reproducible():
    first = PasswordGenerator(random.Random(42)).generate()
    second = PasswordGenerator(random.Random(42)).generate()

    assert first == second


class FixedPasswords:
    def generate(self):
        return "Abc23456@x"


def test_create_account_posts_customer_role():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "userId": "user-1"})

    provisioner = UsersServiceProvisioner(
        base_url="http://users.local/",
        passwords=FixedPasswords(),
        transport=httpx.MockTransport(handler),
    )
    created = asyncio.run(provisioner.create_account("a@abc.vn", "Nguyễn Văn An", "+84901234567", "123 Lê Lợi"))

    assert created == ("user-1", "Abc23456@x")
    assert seen["url"] == "http://users.local/api/users"
    assert seen["body"]["roleName"] == "customer"
    assert seen["body"]["password"] == "Abc23456@x"
    assert seen["body"]["fullName"] == "Nguyễn Văn An"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(200, json={"success": False, "errorMessage": "email exists"}),
        httpx.Response(200, json={"success": True}),
        httpx.Response(200, text="<html>gateway</html>"),
        httpx.Response(200, json=["unexpected"]),
    ],
)
def test_create_account_failures_raise(response):
    provisioner = UsersServiceProvisioner(
        base_url="http://users.local",
        passwords=FixedPasswords(),
        transport=httpx.MockTransport(lambda request: response),
    )

    with pytest.raises(AccountProvisioningFailure):
        asyncio.run(provisioner.create_account("a@abc.vn", "An", None, None))


def test_unconfigured_provisioner_is_config_error():
    provisioner = UsersServiceProvisioner(base_url="", passwords=FixedPasswords())

    with pytest.raises(ConfigError):
        asyncio.run(provisioner.create_account("a@abc.vn", "An", None, None))
