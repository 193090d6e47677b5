"""
Expo 푸시 발송 테스트 (httpx MockTransport)
"""
import json

import httpx
import pytest

from dues.notifications import ExpoPushSender


def _sender(handler) -> ExpoPushSender:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ExpoPushSender(client=client)


@pytest.mark.asyncio
class TestExpoPushSender:
    """Expo Push API 응답 처리"""

    async def test_ok_ticket(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"data": {"status": "ok", "id": "ticket-1"}})

        result = await _sender(handler).send(
            "ExponentPushToken[abc]", "Dues Reminder", "body", {"clubId": "club-1"}
        )

        assert result.success_count == 1
        assert result.failure_count == 0
        assert captured["url"].endswith("/push/send")
        assert captured["body"]["to"] == "ExponentPushToken[abc]"
        assert captured["body"]["data"] == {"clubId": "club-1"}
        assert captured["body"]["channelId"] == "club_dues"

    async def test_error_ticket(self):
        def handler(request):
            return httpx.Response(200, json={"data": [
                {"status": "error", "message": "DeviceNotRegistered"}
            ]})

        result = await _sender(handler).send("token", "t", "b", {})

        assert result.success_count == 0
        assert result.failure_count == 1

    async def test_request_level_errors(self):
        def handler(request):
            return httpx.Response(200, json={"errors": [{"code": "VALIDATION_ERROR"}]})

        result = await _sender(handler).send("token", "t", "b", {})
        assert result.failure_count == 1

    async def test_http_error_raises(self):
        def handler(request):
            return httpx.Response(500, json={})

        with pytest.raises(httpx.HTTPStatusError):
            await _sender(handler).send("token", "t", "b", {})
