import asyncio
import json

import httpx
import pytest

from app.core.errors import NotificationFailure
from app.services.notifications.notifier import LoginInfoNotifier


def test_send_login_info_payload():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(202)

    notifier = LoginInfoNotifier(base_url="http://mail.local", transport=httpx.MockTransport(handler))
    asyncio.run(notifier.send_login_info("Nguyễn Văn An", "a@abc.vn", "Abc23456@x", "015/2025/HĐDV-BV"))

    assert seen["url"] == "http://mail.local/api/notifications/email"
    assert seen["body"]["to"] == "a@abc.vn"
    assert seen["body"]["contractNumber"] == "015/2025/HĐDV-BV"


def test_relay_error_raises_notification_failure():
    notifier = LoginInfoNotifier(
        base_url="http://mail.local",
        transport=httpx.MockTransport(lambda request: httpx.Response(500)),
    )

    with pytest.raises(NotificationFailure):
        asyncio.run(notifier.send_login_info("An", "a@abc.vn", "pw", "CTR-1"))
