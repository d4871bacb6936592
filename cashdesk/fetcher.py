"""
Resilient Fetch Layer

레지스터 목록 조회 시 일시적 장애를 흡수.

동작 방식:
1. 캐시가 유효하면 스토어 호출 없이 반환 (force_refresh 제외)
2. 전체 컬럼 조회 최대 3회, 실패 시 attempt × 1초 대기 (마지막 시도 후 대기 없음)
3. 축소 컬럼 + limit 100 비상 조회 1회
4. 비상 조회까지 실패하면 빈 목록 반환 (예외 없음)
"""

import asyncio
import logging
from typing import Awaitable, Callable

from adapters.interfaces import ILedgerStore
from adapters.models import Movement, Register
from adapters.postgrest.errors import StoreError
from adapters.postgrest.models import parse_movements, parse_register, parse_registers
from cashdesk.cache import RegisterListCache
from cashdesk.errors import RegisterNotFoundError
from core.constants import FetchPolicy, Tables

logger = logging.getLogger(__name__)


class RegisterFetcher:
    """레지스터/입출금 조회기

    Args:
        store: 원격 원장 스토어
        cache: 레지스터 목록 캐시
        restaurant_id: 조회 범위 레스토랑 (None이면 전체)
        sleep: 대기 함수 (테스트에서 주입)
        max_attempts: 전체 조회 최대 시도 횟수
        backoff_step: 선형 백오프 단위 (초)
    """

    def __init__(
        self,
        store: ILedgerStore,
        cache: RegisterListCache,
        restaurant_id: str | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        max_attempts: int = FetchPolicy.MAX_ATTEMPTS,
        backoff_step: float = FetchPolicy.BACKOFF_STEP_SEC,
    ):
        self.store = store
        self.cache = cache
        self.restaurant_id = restaurant_id
        self._sleep = sleep
        self.max_attempts = max_attempts
        self.backoff_step = backoff_step

    @property
    def _scope_filters(self) -> dict[str, str] | None:
        if self.restaurant_id:
            return {"restaurantId": self.restaurant_id}
        return None

    async def list_registers(self, force_refresh: bool = False) -> list[Register]:
        """레지스터 목록 조회 (최신 생성 순)

        Args:
            force_refresh: True면 캐시를 무시하고 스토어 조회

        Returns:
            레지스터 목록 (모든 조회가 실패하면 빈 목록)
        """
        if not force_refresh:
            cached = self.cache.get()
            if cached is not None:
                logger.debug("레지스터 목록 캐시 적중", extra={"count": len(cached)})
                return cached

        for attempt in range(1, self.max_attempts + 1):
            try:
                rows = await self.store.select(
                    Tables.REGISTERS,
                    filters=self._scope_filters,
                    order_by="createdAt",
                    descending=True,
                )
                registers = parse_registers(rows)
                self.cache.put(registers)
                return registers

            except StoreError as e:
                logger.warning(
                    f"레지스터 목록 조회 실패 ({attempt}/{self.max_attempts})",
                    extra={"attempt": attempt, "code": e.code, "error": e.message},
                )
                if attempt < self.max_attempts:
                    await self._sleep(attempt * self.backoff_step)

        return await self._emergency_fetch()

    async def _emergency_fetch(self) -> list[Register]:
        """축소 컬럼 비상 조회 (실패 시 빈 목록)"""
        try:
            rows = await self.store.select(
                Tables.REGISTERS,
                columns=FetchPolicy.EMERGENCY_COLUMNS,
                filters=self._scope_filters,
                order_by="createdAt",
                descending=True,
                limit=FetchPolicy.EMERGENCY_LIMIT,
            )
            registers = parse_registers(rows)
        except StoreError as e:
            logger.error(
                "비상 조회 실패, 빈 목록 반환",
                extra={"code": e.code, "error": e.message},
            )
            return []

        logger.warning("비상 조회로 레지스터 목록 확보", extra={"count": len(registers)})
        self.cache.put(registers)
        return registers

    async def list_movements(self, register_id: str) -> list[Movement]:
        """레지스터의 입출금 목록 조회 (최신 순, 캐시 없음)

        잔액 재계산에 쓰이므로 빈 목록으로 대체하지 않음.

        Raises:
            StoreError: 모든 시도 실패 시 마지막 에러
        """
        last_error: StoreError | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                rows = await self.store.select(
                    Tables.MOVEMENTS,
                    filters={"cashRegisterId": register_id},
                    order_by="createdAt",
                    descending=True,
                )
                return parse_movements(rows)

            except StoreError as e:
                last_error = e
                logger.warning(
                    f"입출금 목록 조회 실패 ({attempt}/{self.max_attempts})",
                    extra={"register_id": register_id, "code": e.code},
                )
                if attempt < self.max_attempts:
                    await self._sleep(attempt * self.backoff_step)

        assert last_error is not None
        raise last_error

    async def get_register(self, register_id: str) -> Register:
        """레지스터 단건 조회 (캐시 미사용, 재시도 없음)

        Raises:
            RegisterNotFoundError: 해당 ID 없음
            StoreError: 스토어 호출 실패
        """
        rows = await self.store.select(
            Tables.REGISTERS,
            filters={"id": register_id},
            limit=1,
        )
        if not rows:
            raise RegisterNotFoundError(register_id)
        return parse_register(rows[0])
