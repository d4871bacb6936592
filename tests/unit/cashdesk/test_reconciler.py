"""
BalanceReconciler 테스트

입출금 기준 잔액 재계산, OPEN 레지스터만 복구, 재실행 무변경 확인.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from adapters.mock.ledger_store import MockLedgerStore
from adapters.models import Movement
from adapters.postgrest.errors import TransientStoreError
from cashdesk.cache import RegisterListCache
from cashdesk.errors import RegisterNotFoundError
from cashdesk.fetcher import RegisterFetcher
from cashdesk.reconciler import BalanceReconciler, ReconcileResult, expected_balance
from core.constants import Tables
from core.types import MovementType, PaymentMethod, RegisterStatus


@pytest.fixture
def reconciler(
    store: MockLedgerStore, cache: RegisterListCache, fetcher: RegisterFetcher
) -> BalanceReconciler:
    return BalanceReconciler(store, cache, fetcher)


def _movement(amount: str, movement_type: MovementType) -> Movement:
    return Movement(
        id=f"m-{amount}",
        description="x",
        amount=Decimal(amount),
        type=movement_type,
        payment_method=PaymentMethod.CASH,
        cash_register_id="reg-1",
        restaurant_id="rest-1",
    )


class TestExpectedBalance:
    """expected_balance 함수 테스트"""

    def test_sum(self) -> None:
        movements = [
            _movement("50", MovementType.INCOME),
            _movement("20", MovementType.EXPENSE),
        ]

        assert expected_balance(Decimal("100"), movements) == Decimal("130")

    def test_no_movements(self) -> None:
        assert expected_balance(Decimal("75.50"), []) == Decimal("75.50")


class TestReconcile:
    """reconcile 테스트"""

    @pytest.mark.asyncio
    async def test_no_drift(
        self, store: MockLedgerStore, reconciler: BalanceReconciler
    ) -> None:
        row = store.seed_register(initial_amount="100.00", current_amount="130.00")
        store.seed_movement(row["id"], "50.00")
        store.seed_movement(row["id"], "20.00", movement_type="EXPENSE")

        result = await reconciler.reconcile(row["id"])

        assert isinstance(result, ReconcileResult)
        assert result.has_drift is False
        assert result.repaired is False
        assert store.state.write_count == 0

    @pytest.mark.asyncio
    async def test_repairs_open_register(
        self,
        store: MockLedgerStore,
        reconciler: BalanceReconciler,
        cache: RegisterListCache,
    ) -> None:
        """잔액 갱신이 누락된 movement 반영"""
        row = store.seed_register(initial_amount="100.00", current_amount="100.00")
        store.seed_movement(row["id"], "50.00")
        store.seed_movement(row["id"], "20.00", movement_type="EXPENSE")
        cache.put([])

        result = await reconciler.reconcile(row["id"])

        assert result.stored == Decimal("100.00")
        assert result.expected == Decimal("130.00")
        assert result.drift == Decimal("30.00")
        assert result.repaired is True
        assert Decimal(store.get_row(Tables.REGISTERS, row["id"])["currentAmount"]) == Decimal("130.00")
        assert cache.get() is None

    @pytest.mark.asyncio
    async def test_idempotent(
        self, store: MockLedgerStore, reconciler: BalanceReconciler
    ) -> None:
        """두 번째 실행은 변경 없음"""
        row = store.seed_register(initial_amount="100.00", current_amount="90.00")
        store.seed_movement(row["id"], "50.00")

        await reconciler.reconcile(row["id"])
        writes = store.state.write_count
        second = await reconciler.reconcile(row["id"])

        assert second.has_drift is False
        assert second.repaired is False
        assert store.state.write_count == writes

    @pytest.mark.asyncio
    async def test_closed_register_not_repaired(
        self, store: MockLedgerStore, reconciler: BalanceReconciler
    ) -> None:
        """마감된 레지스터는 drift만 보고"""
        row = store.seed_register(
            initial_amount="100.00",
            current_amount="100.00",
            status=RegisterStatus.CLOSED,
        )
        store.seed_movement(row["id"], "10.00")

        result = await reconciler.reconcile(row["id"])

        assert result.drift == Decimal("10.00")
        assert result.repaired is False
        assert store.state.write_count == 0
        assert store.get_row(Tables.REGISTERS, row["id"])["currentAmount"] == "100.00"

    @pytest.mark.asyncio
    async def test_missing_register(self, reconciler: BalanceReconciler) -> None:
        with pytest.raises(RegisterNotFoundError):
            await reconciler.reconcile("missing")

    @pytest.mark.asyncio
    async def test_movement_fetch_failure_propagates(
        self,
        store: MockLedgerStore,
        reconciler: BalanceReconciler,
        fetcher: RegisterFetcher,
    ) -> None:
        """입출금 조회 실패 시 빈 목록으로 계산하지 않음"""
        row = store.seed_register(current_amount="130.00")

        with patch.object(
            fetcher,
            "list_movements",
            AsyncMock(side_effect=TransientStoreError("503", "down")),
        ):
            with pytest.raises(TransientStoreError):
                await reconciler.reconcile(row["id"])

        assert store.state.write_count == 0
