"""
어댑터 테스트 픽스처

공통 테스트 설정 및 픽스처 제공.
"""

from decimal import Decimal

import pytest

from adapters.models import Movement, Register
from core.types import MovementType, PaymentMethod, RegisterStatus


# -------------------------------------------------------------------------
# 공통 데이터 픽스처
# -------------------------------------------------------------------------

@pytest.fixture
def sample_register() -> Register:
    """샘플 레지스터 (OPEN)"""
    return Register(
        id="reg-1",
        name="Caixa 1",
        initial_amount=Decimal("100.00"),
        current_amount=Decimal("130.00"),
        status=RegisterStatus.OPEN,
        restaurant_id="rest-1",
    )


@pytest.fixture
def sample_movement() -> Movement:
    """샘플 입출금 (EXPENSE)"""
    return Movement(
        id="mov-1",
        description="Troco",
        amount=Decimal("20.00"),
        type=MovementType.EXPENSE,
        payment_method=PaymentMethod.CASH,
        cash_register_id="reg-1",
        restaurant_id="rest-1",
    )


# -------------------------------------------------------------------------
# PostgREST 응답 픽스처
# -------------------------------------------------------------------------

@pytest.fixture
def register_row() -> dict:
    """CashRegisters 행 응답"""
    return {
        "id": "0b6c5a52-1111-4c4e-9f57-6f0c3c1e0001",
        "name": "Caixa 1",
        "initialAmount": 100,
        "currentAmount": "130.00",
        "status": "OPEN",
        "restaurantId": "rest-1",
        "openedAt": "2026-10-19T12:00:00+00:00",
        "closedAt": None,
        "createdAt": "2026-10-19T12:00:00.123456+00:00",
        "updatedAt": None,
    }


@pytest.fixture
def movement_row() -> dict:
    """CashMovements 행 응답"""
    return {
        "id": "7f1c0000-2222-4c4e-9f57-6f0c3c1e0002",
        "description": "Venda balcão",
        "amount": 50,
        "type": "INCOME",
        "paymentMethod": "PIX",
        "cashRegisterId": "0b6c5a52-1111-4c4e-9f57-6f0c3c1e0001",
        "restaurantId": "rest-1",
        "orderId": 1042,
        "createdAt": "2026-10-19T12:10:00Z",
        "updatedAt": None,
    }
