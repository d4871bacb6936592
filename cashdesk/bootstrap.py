"""
Cash Desk Bootstrap

설정 로드, 의존성 주입, 종료 시 HTTP 클라이언트 정리.

사용법:
    async with open_cash_desk() as desk:
        registers = await desk.service.list_registers()
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from adapters.postgrest.rest_client import PostgrestClient
from adapters.slack.notifier import SlackNotifier
from cashdesk.service import CashLedgerService
from core.config.loader import Settings, get_settings
from core.constants import Defaults
from core.logging import setup_logging

logger = logging.getLogger(__name__)


@dataclass
class CashDesk:
    """조립된 캐시 원장 구성 요소

    Attributes:
        service: 캐시 원장 서비스
        store: PostgREST 클라이언트
        notifier: Slack 알림 (webhook 미설정 시 None)
    """

    service: CashLedgerService
    store: PostgrestClient
    notifier: SlackNotifier | None = None

    async def close(self) -> None:
        """HTTP 클라이언트 종료"""
        await self.store.close()
        if self.notifier is not None:
            await self.notifier.close()


def build_cash_desk(settings: Settings | None = None) -> CashDesk:
    """설정으로부터 서비스 조립

    Args:
        settings: 설정 (None이면 get_settings())

    Returns:
        CashDesk
    """
    settings = settings or get_settings()
    store_config = settings.store_config

    store = PostgrestClient(
        base_url=store_config.rest_url,
        api_key=store_config.api_key,
        schema=store_config.schema,
        timeout=store_config.timeout,
    )

    notifier: SlackNotifier | None = None
    if settings.slack_webhook_url:
        notifier = SlackNotifier(
            webhook_url=settings.slack_webhook_url,
            channel=settings.slack_channel,
            cooldown_sec=Defaults.NOTIFY_COOLDOWN_SEC,
        )

    service = CashLedgerService(
        store,
        restaurant_id=store_config.restaurant_id,
        notifier=notifier,
    )

    logger.info(
        "캐시 원장 초기화",
        extra={
            "mode": settings.mode.value,
            "restaurant_id": store_config.restaurant_id,
            "slack": notifier is not None,
        },
    )
    return CashDesk(service=service, store=store, notifier=notifier)


@asynccontextmanager
async def open_cash_desk(
    settings: Settings | None = None,
    process_name: str | None = None,
) -> AsyncIterator[CashDesk]:
    """캐시 원장 컨텍스트

    Args:
        settings: 설정 (None이면 get_settings())
        process_name: 지정 시 해당 이름으로 로깅 설정

    종료 시 HTTP 클라이언트를 닫음.
    """
    if process_name:
        setup_logging(process_name)

    desk = build_cash_desk(settings)
    try:
        yield desk
    finally:
        await desk.close()
