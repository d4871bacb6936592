"""
Slack 알림 서비스

Incoming Webhook으로 운영자 알림(degraded write, 잔액 불일치, 복구) 전송.
INotifier Protocol 준수.
"""

import logging
import time
from typing import Any, Callable

import httpx

from core.constants import Defaults
from core.utils.timezone import format_brt, now_utc

logger = logging.getLogger(__name__)


# 레벨 -> (이모지, attachment 색상)
LEVEL_STYLE: dict[str, tuple[str, str]] = {
    "INFO": (":information_source:", "#439FE0"),
    "WARNING": (":warning:", "#E8A317"),
    "ERROR": (":x:", "#D62D20"),
    "CRITICAL": (":rotating_light:", "#8B0000"),
}
DEFAULT_STYLE = (":bell:", "#808080")

# extra 키 -> 매장 운영자용 표시 이름
FIELD_LABELS: dict[str, str] = {
    "register_id": "Caixa",
    "movement_id": "Movimentação",
    "amount": "Valor",
    "initial_amount": "Valor inicial",
    "before": "Saldo registrado",
    "after": "Saldo corrigido",
    "reason": "Motivo",
}


class SlackNotifier:
    """Slack 알림 서비스

    같은 (레벨, 메시지, register_id) 알림은 cooldown_sec 동안 한 번만 전송.
    전송 실패는 로그만 남기고 False 반환.

    사용 예시:
    ```python
    async with SlackNotifier(webhook_url="https://hooks.slack.com/...") as notifier:
        await notifier.send(
            "잔액 갱신 실패",
            level="CRITICAL",
            extra={"register_id": "0b6c5a52-..."},
        )
    ```
    """

    def __init__(
        self,
        webhook_url: str,
        channel: str | None = None,
        username: str = Defaults.NOTIFIER_USERNAME,
        timeout: float = 10.0,
        cooldown_sec: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            webhook_url: Slack Incoming Webhook URL
            channel: 채널 오버라이드 (기본값은 Webhook 설정 사용)
            username: 메시지 발송자 이름
            timeout: HTTP 요청 타임아웃 (초)
            cooldown_sec: 중복 알림 억제 시간 (0이면 억제 안 함)
            clock: monotonic 시계 (테스트에서 주입)
        """
        if not webhook_url:
            raise ValueError("webhook_url은 필수입니다")

        self.webhook_url = webhook_url
        self.channel = channel
        self.username = username
        self.timeout = timeout
        self.cooldown_sec = cooldown_sec

        self._clock = clock
        self._last_sent: dict[tuple[str, str, Any], float] = {}
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """HTTP 클라이언트 반환 (lazy initialization)"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def build_payload(
        self,
        message: str,
        level: str = "INFO",
        extra: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Slack attachment 페이로드 (extra는 라벨을 붙인 fields로 표시)"""
        emoji, color = LEVEL_STYLE.get(level, DEFAULT_STYLE)

        attachment: dict[str, Any] = {
            "color": color,
            "text": f"{emoji} *[{level}]* {message}",
            "footer": f"{self.username} | {format_brt(now_utc())} BRT",
        }
        if extra:
            attachment["fields"] = [
                {
                    "title": FIELD_LABELS.get(key, key),
                    "value": "-" if value is None else str(value),
                    "short": True,
                }
                for key, value in extra.items()
            ]

        payload: dict[str, Any] = {
            "username": self.username,
            "attachments": [attachment],
        }
        if self.channel:
            payload["channel"] = self.channel
        return payload

    def _is_duplicate(self, key: tuple[str, str, Any]) -> bool:
        if self.cooldown_sec <= 0:
            return False
        last = self._last_sent.get(key)
        return last is not None and self._clock() - last < self.cooldown_sec

    async def send(
        self,
        message: str,
        level: str = "INFO",
        extra: dict[str, Any] | None = None,
    ) -> bool:
        """알림 전송

        Args:
            message: 알림 메시지
            level: 알림 레벨 (INFO, WARNING, ERROR, CRITICAL)
            extra: 추가 데이터

        Returns:
            전송 성공 여부 (cooldown으로 억제된 경우 True)
        """
        key = (level, message, (extra or {}).get("register_id"))
        if self._is_duplicate(key):
            logger.debug("중복 알림 억제", extra={"level": level, "alert": message})
            return True

        sent = await self._post(self.build_payload(message, level, extra))
        if sent:
            self._last_sent[key] = self._clock()
        return sent

    async def _post(self, payload: dict[str, Any]) -> bool:
        try:
            client = await self._get_client()
            response = await client.post(self.webhook_url, json=payload)
        except httpx.TimeoutException:
            logger.error("Slack 알림 전송 타임아웃")
            return False
        except httpx.HTTPError as e:
            logger.error("Slack 알림 전송 HTTP 에러", extra={"error": str(e)})
            return False

        if response.status_code != 200:
            logger.warning(
                "Slack 알림 전송 실패",
                extra={"status": response.status_code, "body": response.text},
            )
            return False
        return True

    async def __aenter__(self) -> "SlackNotifier":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
