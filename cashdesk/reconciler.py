"""
Balance Reconciler

입출금 내역으로 잔액을 재계산하고, 어긋난 경우 OPEN 레지스터만 복구.
expected = initial + Σincome − Σexpense

같은 레지스터에 두 번 실행해도 두 번째는 변경 없음.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from adapters.interfaces import ILedgerStore
from adapters.models import Movement
from cashdesk.cache import RegisterListCache
from cashdesk.fetcher import RegisterFetcher
from core.constants import Tables
from core.types import RegisterStatus
from core.utils.timezone import now_utc, to_iso

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileResult:
    """잔액 재계산 결과

    Attributes:
        register_id: 대상 레지스터
        stored: 스토어에 기록된 currentAmount
        expected: 입출금으로 재계산한 잔액
        drift: expected - stored
        repaired: 이번 실행에서 잔액을 수정했는지 여부
    """

    register_id: str
    stored: Decimal
    expected: Decimal
    drift: Decimal
    repaired: bool = False

    @property
    def has_drift(self) -> bool:
        return self.drift != 0


def expected_balance(initial_amount: Decimal, movements: list[Movement]) -> Decimal:
    """개설 시재 + 입출금 합계"""
    return initial_amount + sum((m.signed_amount for m in movements), Decimal("0"))


class BalanceReconciler:
    """잔액 재계산/복구기

    Args:
        store: 원격 원장 스토어
        cache: 레지스터 목록 캐시 (복구 후 무효화)
        fetcher: 레지스터/입출금 조회용 fetcher
    """

    def __init__(
        self,
        store: ILedgerStore,
        cache: RegisterListCache,
        fetcher: RegisterFetcher,
    ):
        self.store = store
        self.cache = cache
        self.fetcher = fetcher

    async def reconcile(self, register_id: str) -> ReconcileResult:
        """잔액 재계산 및 복구

        CLOSED 레지스터는 잔액이 고정되므로 drift만 보고.

        Raises:
            RegisterNotFoundError: 레지스터 없음
            StoreError: 조회/수정 실패
        """
        register = await self.fetcher.get_register(register_id)
        movements = await self.fetcher.list_movements(register_id)

        expected = expected_balance(register.initial_amount, movements)
        drift = expected - register.current_amount

        if drift == 0:
            return ReconcileResult(
                register_id=register_id,
                stored=register.current_amount,
                expected=expected,
                drift=drift,
            )

        if register.is_closed:
            logger.warning(
                "마감된 레지스터 잔액 불일치 (수정하지 않음)",
                extra={"register_id": register_id, "drift": str(drift)},
            )
            return ReconcileResult(
                register_id=register_id,
                stored=register.current_amount,
                expected=expected,
                drift=drift,
            )

        rows = await self.store.update(
            Tables.REGISTERS,
            {"currentAmount": str(expected), "updatedAt": to_iso(now_utc())},
            filters={"id": register_id, "status": RegisterStatus.OPEN.value},
        )
        self.cache.invalidate()

        repaired = bool(rows)
        logger.warning(
            f"레지스터 잔액 복구: {register.current_amount} -> {expected}",
            extra={"register_id": register_id, "drift": str(drift), "repaired": repaired},
        )
        return ReconcileResult(
            register_id=register_id,
            stored=register.current_amount,
            expected=expected,
            drift=drift,
            repaired=repaired,
        )
