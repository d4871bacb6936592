"""
PostgREST 행 변환 테스트

CashRegisters / CashMovements 행 -> 모델 변환 및 INSERT 행 생성.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from adapters.postgrest.errors import MalformedResponseError
from adapters.postgrest.models import (
    movement_insert_row,
    parse_movement,
    parse_movements,
    parse_register,
    parse_registers,
    register_insert_row,
)
from core.constants import FetchPolicy
from core.types import MovementType, PaymentMethod, RegisterStatus


class TestParseRegister:
    """parse_register 테스트"""

    def test_full_row(self, register_row: dict) -> None:
        register = parse_register(register_row)

        assert register.id == register_row["id"]
        assert register.name == "Caixa 1"
        assert register.initial_amount == Decimal("100")
        assert register.current_amount == Decimal("130.00")
        assert register.status == RegisterStatus.OPEN
        assert register.opened_at == datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
        assert register.closed_at is None

    def test_amounts_are_decimal(self, register_row: dict) -> None:
        """JSON 숫자/문자열 모두 Decimal"""
        register = parse_register(register_row)

        assert isinstance(register.initial_amount, Decimal)
        assert isinstance(register.current_amount, Decimal)

    def test_emergency_row(self, register_row: dict) -> None:
        """축소 컬럼 행도 해석 가능"""
        columns = FetchPolicy.EMERGENCY_COLUMNS.split(",")
        reduced = {c: register_row[c] for c in columns}

        register = parse_register(reduced)

        assert register.created_at is None
        assert register.updated_at is None

    def test_missing_column(self, register_row: dict) -> None:
        del register_row["currentAmount"]

        with pytest.raises(MalformedResponseError, match="currentAmount"):
            parse_register(register_row)

    @pytest.mark.parametrize(
        "column, value",
        [
            ("status", "PAUSED"),
            ("currentAmount", "abc"),
            ("currentAmount", None),
            ("openedAt", "ontem"),
        ],
    )
    def test_invalid_values(self, register_row: dict, column: str, value) -> None:
        register_row[column] = value

        with pytest.raises(MalformedResponseError):
            parse_register(register_row)

    def test_not_a_dict(self) -> None:
        with pytest.raises(MalformedResponseError):
            parse_register(["id", "name"])  # type: ignore


class TestParseMovement:
    """parse_movement 테스트"""

    def test_full_row(self, movement_row: dict) -> None:
        movement = parse_movement(movement_row)

        assert movement.amount == Decimal("50")
        assert movement.type == MovementType.INCOME
        assert movement.payment_method == PaymentMethod.PIX
        assert movement.order_id == 1042
        assert movement.created_at == datetime(2026, 10, 19, 12, 10, tzinfo=timezone.utc)

    def test_without_order(self, movement_row: dict) -> None:
        movement_row["orderId"] = None
        assert parse_movement(movement_row).order_id is None

    def test_unknown_payment_method(self, movement_row: dict) -> None:
        movement_row["paymentMethod"] = "BITCOIN"

        with pytest.raises(MalformedResponseError):
            parse_movement(movement_row)


class TestParseLists:
    """목록 변환 테스트"""

    def test_parse_registers(self, register_row: dict) -> None:
        assert len(parse_registers([register_row, register_row])) == 2

    def test_parse_movements_empty(self) -> None:
        assert parse_movements([]) == []

    def test_non_list(self, register_row: dict) -> None:
        with pytest.raises(MalformedResponseError):
            parse_registers(register_row)


class TestInsertRows:
    """INSERT 행 생성 테스트"""

    def test_register_insert_row(self) -> None:
        """직접 INSERT: currentAmount = initialAmount, status = OPEN"""
        opened_at = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

        row = register_insert_row("Caixa 1", Decimal("100.00"), "rest-1", opened_at)

        assert row == {
            "name": "Caixa 1",
            "initialAmount": "100.00",
            "currentAmount": "100.00",
            "status": "OPEN",
            "restaurantId": "rest-1",
            "openedAt": "2026-10-19T12:00:00+00:00",
        }

    def test_movement_insert_row(self) -> None:
        row = movement_insert_row(
            "Sangria",
            Decimal("20.00"),
            MovementType.EXPENSE,
            PaymentMethod.CASH,
            "reg-1",
            "rest-1",
        )

        assert row["amount"] == "20.00"
        assert row["type"] == "EXPENSE"
        assert row["paymentMethod"] == "CASH"
        assert row["cashRegisterId"] == "reg-1"
        assert row["orderId"] is None
