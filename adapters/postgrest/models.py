"""
PostgREST 행 <-> 공통 모델 변환

CashRegisters / CashMovements 테이블 행(camelCase 컬럼)을
adapters.models의 표준 모델로 변환.
numeric 컬럼은 JSON 숫자 또는 문자열로 올 수 있으므로 str()을 거쳐 Decimal로 변환.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from adapters.models import Movement, Register
from adapters.postgrest.errors import MalformedResponseError
from core.types import MovementType, PaymentMethod, RegisterStatus
from core.utils.timezone import parse_iso_datetime, to_iso


def _decimal(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        raise ValueError(f"numeric 값이 아닙니다: {value!r}")
    return Decimal(str(value))


def parse_register(data: dict[str, Any]) -> Register:
    """CashRegisters 행 -> Register 모델

    행 예시:
    {
        "id": "0b6c5a52-...",
        "name": "Caixa 1",
        "initialAmount": 100,
        "currentAmount": "130.00",
        "status": "OPEN",
        "restaurantId": "d2d5278d-...",
        "openedAt": "2026-10-19T12:00:00+00:00",
        "closedAt": null,
        "createdAt": "2026-10-19T12:00:00+00:00",
        "updatedAt": null
    }

    비상 조회(축소 컬럼)로 받은 행은 createdAt/updatedAt이 없을 수 있음.

    Raises:
        MalformedResponseError: 필수 컬럼 누락 또는 값 해석 실패
    """
    if not isinstance(data, dict):
        raise MalformedResponseError(f"레지스터 행이 객체가 아닙니다: {type(data).__name__}")

    try:
        return Register(
            id=str(data["id"]),
            name=data["name"],
            initial_amount=_decimal(data["initialAmount"]),
            current_amount=_decimal(data["currentAmount"]),
            status=RegisterStatus(data["status"]),
            restaurant_id=str(data["restaurantId"]),
            opened_at=parse_iso_datetime(data.get("openedAt")),
            closed_at=parse_iso_datetime(data.get("closedAt")),
            created_at=parse_iso_datetime(data.get("createdAt")),
            updated_at=parse_iso_datetime(data.get("updatedAt")),
        )
    except KeyError as e:
        raise MalformedResponseError(f"레지스터 행에 필수 컬럼이 없습니다: {e}") from e
    except (ValueError, TypeError, InvalidOperation) as e:
        raise MalformedResponseError(f"레지스터 행 해석 실패: {e}") from e


def parse_movement(data: dict[str, Any]) -> Movement:
    """CashMovements 행 -> Movement 모델

    행 예시:
    {
        "id": "7f1c...",
        "description": "Venda balcão",
        "amount": "50.00",
        "type": "INCOME",
        "paymentMethod": "PIX",
        "cashRegisterId": "0b6c5a52-...",
        "restaurantId": "d2d5278d-...",
        "orderId": 1042,
        "createdAt": "2026-10-19T12:10:00+00:00",
        "updatedAt": null
    }

    Raises:
        MalformedResponseError: 필수 컬럼 누락 또는 값 해석 실패
    """
    if not isinstance(data, dict):
        raise MalformedResponseError(f"입출금 행이 객체가 아닙니다: {type(data).__name__}")

    try:
        order_id = data.get("orderId")
        return Movement(
            id=str(data["id"]),
            description=data["description"],
            amount=_decimal(data["amount"]),
            type=MovementType(data["type"]),
            payment_method=PaymentMethod(data["paymentMethod"]),
            cash_register_id=str(data["cashRegisterId"]),
            restaurant_id=str(data["restaurantId"]),
            order_id=int(order_id) if order_id is not None else None,
            created_at=parse_iso_datetime(data.get("createdAt")),
            updated_at=parse_iso_datetime(data.get("updatedAt")),
        )
    except KeyError as e:
        raise MalformedResponseError(f"입출금 행에 필수 컬럼이 없습니다: {e}") from e
    except (ValueError, TypeError, InvalidOperation) as e:
        raise MalformedResponseError(f"입출금 행 해석 실패: {e}") from e


def parse_registers(rows: Any) -> list[Register]:
    """select 응답 -> Register 목록 (목록이 아니면 MalformedResponseError)"""
    if not isinstance(rows, list):
        raise MalformedResponseError(f"목록 응답이 아닙니다: {type(rows).__name__}")
    return [parse_register(row) for row in rows]


def parse_movements(rows: Any) -> list[Movement]:
    """select 응답 -> Movement 목록 (목록이 아니면 MalformedResponseError)"""
    if not isinstance(rows, list):
        raise MalformedResponseError(f"목록 응답이 아닙니다: {type(rows).__name__}")
    return [parse_movement(row) for row in rows]


def register_insert_row(
    name: str,
    initial_amount: Decimal,
    restaurant_id: str,
    opened_at: datetime,
) -> dict[str, Any]:
    """레지스터 직접 INSERT용 행 (fallback write path)

    금액은 문자열로 전송 (JSON float 변환 시 정밀도 손실 방지).
    """
    return {
        "name": name,
        "initialAmount": str(initial_amount),
        "currentAmount": str(initial_amount),
        "status": RegisterStatus.OPEN.value,
        "restaurantId": restaurant_id,
        "openedAt": to_iso(opened_at),
    }


def movement_insert_row(
    description: str,
    amount: Decimal,
    movement_type: MovementType,
    payment_method: PaymentMethod,
    register_id: str,
    restaurant_id: str,
    order_id: int | None = None,
) -> dict[str, Any]:
    """입출금 INSERT용 행"""
    return {
        "description": description,
        "amount": str(amount),
        "type": movement_type.value,
        "paymentMethod": payment_method.value,
        "cashRegisterId": register_id,
        "restaurantId": restaurant_id,
        "orderId": order_id,
    }
