"""
Cash Ledger Service

화면(UI)에서 사용하는 캐시 원장 진입점.
캐시 1개와 fetcher/lifecycle/recorder/reconciler를 소유.
"""

import asyncio
import logging
import warnings
from decimal import Decimal
from typing import Any, Awaitable, Callable

from adapters.interfaces import ILedgerStore, INotifier
from adapters.models import Movement, OpeningDetails, Register
from cashdesk.cache import RegisterListCache
from cashdesk.errors import ConsistencyError, FallbackWriteUsed
from cashdesk.fetcher import RegisterFetcher
from cashdesk.lifecycle import RegisterLifecycleManager
from cashdesk.reconciler import BalanceReconciler, ReconcileResult
from cashdesk.recorder import MovementRecorder
from cashdesk.summary import MovementSummary, summarize_movements
from core.types import MovementType, PaymentMethod
from core.utils.money import format_brl

logger = logging.getLogger(__name__)


class CashLedgerService:
    """캐시 원장 서비스

    Args:
        store: 원격 원장 스토어
        restaurant_id: 기본 레스토랑 (조회 범위 및 쓰기 기본값)
        notifier: 운영자 알림 (선택)
        cache: 레지스터 목록 캐시 (None이면 새로 생성)
        sleep: 재시도 대기 함수 (테스트에서 주입)

    사용 예시:
    ```python
    service = CashLedgerService(store, restaurant_id="d2d5278d-...")

    register = await service.open_register("Caixa 1", "100.00")
    await service.record_movement("Venda", "50", "INCOME", "PIX", register.id)
    ```
    """

    def __init__(
        self,
        store: ILedgerStore,
        restaurant_id: str | None = None,
        notifier: INotifier | None = None,
        cache: RegisterListCache | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.store = store
        self.restaurant_id = restaurant_id
        self.notifier = notifier
        self.cache = cache if cache is not None else RegisterListCache()

        self.fetcher = RegisterFetcher(store, self.cache, restaurant_id, sleep=sleep)
        self.lifecycle = RegisterLifecycleManager(store, self.cache, self.fetcher)
        self.recorder = MovementRecorder(store, self.cache, self.fetcher)
        self.reconciler = BalanceReconciler(store, self.cache, self.fetcher)

    async def _notify(self, message: str, level: str, extra: dict[str, Any]) -> None:
        if self.notifier is None:
            return
        sent = await self.notifier.send(message, level=level, extra=extra)
        if not sent:
            logger.warning("운영자 알림 전송 실패", extra={"level": level})

    # =========================================================================
    # 조회
    # =========================================================================

    async def list_registers(self, force_refresh: bool = False) -> list[Register]:
        """레지스터 목록 (실패 시 빈 목록)"""
        return await self.fetcher.list_registers(force_refresh=force_refresh)

    async def get_register(self, register_id: str) -> Register:
        return await self.fetcher.get_register(register_id)

    async def find_open_register(self) -> Register | None:
        """현재 목록에서 첫 번째 OPEN 레지스터"""
        for register in await self.list_registers():
            if register.is_open:
                return register
        return None

    async def list_movements(self, register_id: str) -> list[Movement]:
        return await self.fetcher.list_movements(register_id)

    async def get_register_summary(self, register_id: str) -> MovementSummary:
        """레지스터 입출금 요약 (수입/지출/결제 수단별)"""
        return summarize_movements(await self.list_movements(register_id))

    # =========================================================================
    # 쓰기
    # =========================================================================

    async def open_register(
        self,
        name: str,
        initial_amount: Decimal | int | float | str,
        restaurant_id: str | None = None,
        details: OpeningDetails | None = None,
        request_id: str | None = None,
    ) -> Register:
        """레지스터 개설

        검증 RPC 대신 직접 INSERT가 사용되면 FallbackWriteUsed 경고와
        WARNING 알림을 남기지만 개설 자체는 성공으로 처리.
        """
        outcome = await self.lifecycle.open(
            name,
            initial_amount,
            restaurant_id or self.restaurant_id,
            details=details,
            request_id=request_id,
        )
        register = outcome.register

        if outcome.fallback_used and not outcome.replayed:
            warnings.warn(
                FallbackWriteUsed(register.id, outcome.fallback_reason or ""),
                stacklevel=2,
            )
            logger.warning(
                "레지스터가 검증 없이 생성됨",
                extra={"register_id": register.id, "reason": outcome.fallback_reason},
            )
            await self._notify(
                f"레지스터 '{register.name}'가 서버 검증 없이 생성되었습니다",
                level="WARNING",
                extra={
                    "register_id": register.id,
                    "initial_amount": format_brl(register.initial_amount),
                    "reason": outcome.fallback_reason,
                },
            )

        return register

    async def close_register(self, register_id: str) -> Register:
        return await self.lifecycle.close(register_id)

    async def record_movement(
        self,
        description: str,
        amount: Decimal | int | float | str,
        type: MovementType | str,
        payment_method: PaymentMethod | str,
        register_id: str,
        restaurant_id: str | None = None,
        order_id: int | None = None,
    ) -> Movement:
        """입출금 기록

        restaurant_id 생략 시 기본 레스토랑, 그것도 없으면 레지스터 소속 레스토랑.
        잔액 갱신 실패(ConsistencyError) 시 CRITICAL 알림 후 재발생.
        """
        try:
            return await self.recorder.record(
                description,
                amount,
                type,
                payment_method,
                register_id,
                restaurant_id or self.restaurant_id,
                order_id=order_id,
            )
        except ConsistencyError as e:
            await self._notify(
                "입출금은 저장됐지만 레지스터 잔액 갱신에 실패했습니다",
                level="CRITICAL",
                extra={
                    "register_id": e.register_id,
                    "movement_id": e.movement.id if e.movement is not None else None,
                    "amount": format_brl(e.amount),
                },
            )
            raise

    async def reconcile_register(self, register_id: str) -> ReconcileResult:
        """잔액 재계산 및 복구 (ConsistencyError 후 재실행 가능)"""
        result = await self.reconciler.reconcile(register_id)
        if result.repaired:
            await self._notify(
                "레지스터 잔액을 입출금 내역 기준으로 복구했습니다",
                level="WARNING",
                extra={
                    "register_id": register_id,
                    "before": format_brl(result.stored),
                    "after": format_brl(result.expected),
                },
            )
        return result
