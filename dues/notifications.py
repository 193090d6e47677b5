"""
푸시 알림 발송 (Expo Push API)

잘못된 토큰 정리는 발송 서비스 쪽 책임이며 여기서는 결과 집계만 합니다.
"""
from typing import Any, Dict, Optional

import httpx
from loguru import logger

from .config import push_config
from .models import PushResult


class ExpoPushSender:
    """Expo Push 발송기"""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.url = push_config.expo_push_url
        self.timeout = push_config.request_timeout
        self._client = client

    async def send(self, token: str, title: str, body: str, data: Dict[str, Any]) -> PushResult:
        """
        푸시 1건 발송

        Returns:
            PushResult(success_count, failure_count)
        """
        message = {
            "to": token,
            "sound": "default",
            "title": title,
            "body": body,
            "data": data,
            "priority": "high",
            "channelId": push_config.channel_id,
        }
        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "Content-Type": "application/json",
        }

        if self._client is not None:
            response = await self._client.post(self.url, json=message, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.url, json=message, headers=headers)

        response.raise_for_status()
        payload = response.json()

        if payload.get("errors"):
            logger.error(f"❌ 푸시 발송 오류: {payload['errors']}")
            return PushResult(success_count=0, failure_count=1)

        tickets = payload.get("data")
        if isinstance(tickets, dict):
            tickets = [tickets]

        result = PushResult()
        for ticket in tickets or []:
            if ticket.get("status") == "ok":
                result.success_count += 1
            else:
                result.failure_count += 1
                logger.warning(f"⚠️ 푸시 티켓 실패: {ticket.get('message')}")
        return result
