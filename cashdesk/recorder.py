"""
Movement Recorder

입출금 기록 (2단계 쓰기).

1. CashMovements INSERT
2. currentAmount 재조회 후 ± amount 로 조건부 UPDATE (id, status=OPEN)

2단계 실패 또는 1단계 응답 해석 실패 시 movement는 이미 저장된 상태이므로 ConsistencyError.
보상 삭제는 하지 않고 BalanceReconciler로 복구.
"""

import logging
from decimal import Decimal
from typing import Any

from adapters.interfaces import ILedgerStore
from adapters.models import Movement
from adapters.postgrest.errors import MalformedResponseError, StoreError
from adapters.postgrest.models import movement_insert_row, parse_movement
from cashdesk.cache import RegisterListCache
from cashdesk.errors import (
    CashLedgerError,
    ConsistencyError,
    RegisterClosedError,
    ValidationError,
)
from cashdesk.fetcher import RegisterFetcher
from core.constants import Tables
from core.types import MovementType, PaymentMethod, RegisterStatus
from core.utils.money import to_money
from core.utils.timezone import now_utc, to_iso

logger = logging.getLogger(__name__)


def _coerce_enum(enum_cls: type, value: Any, field: str):
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(field, f"허용되지 않는 값 {value!r} (허용: {allowed})") from e


class MovementRecorder:
    """입출금 기록기

    Args:
        store: 원격 원장 스토어
        cache: 레지스터 목록 캐시 (쓰기 후 무효화)
        fetcher: 레지스터 단건 조회용 fetcher
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

    async def record(
        self,
        description: str,
        amount: Decimal | int | float | str,
        type: MovementType | str,
        payment_method: PaymentMethod | str,
        register_id: str,
        restaurant_id: str | None = None,
        order_id: int | None = None,
    ) -> Movement:
        """입출금 기록 및 잔액 갱신

        restaurant_id를 생략하면 레지스터의 레스토랑을 사용. 다르면 거부.

        Returns:
            저장된 Movement

        Raises:
            ValidationError: 입력 검증 실패 또는 레스토랑 불일치 (쓰기 없음)
            RegisterNotFoundError: 레지스터 없음 (쓰기 없음)
            RegisterClosedError: 마감된 레지스터 (쓰기 없음)
            StoreError: movement INSERT 실패 (저장 여부 불확실할 수 있음)
            ConsistencyError: movement 저장 후 잔액 갱신 실패 또는 저장 응답 해석 불가
        """
        if not isinstance(description, str) or not description.strip():
            raise ValidationError("description", "설명은 비어 있을 수 없습니다")

        try:
            value = to_money(amount)
        except (TypeError, ValueError) as e:
            raise ValidationError("amount", str(e)) from e
        if value <= 0:
            raise ValidationError("amount", "금액은 0보다 커야 합니다")

        movement_type = _coerce_enum(MovementType, type, "type")
        method = _coerce_enum(PaymentMethod, payment_method, "payment_method")

        if not register_id:
            raise ValidationError("register_id", "레지스터 ID가 필요합니다")
        if order_id is not None and (isinstance(order_id, bool) or not isinstance(order_id, int)):
            raise ValidationError("order_id", "주문 ID는 정수여야 합니다")

        register = await self.fetcher.get_register(register_id)
        if register.is_closed:
            raise RegisterClosedError(register)
        if not restaurant_id:
            restaurant_id = register.restaurant_id
        elif restaurant_id != register.restaurant_id:
            raise ValidationError(
                "restaurant_id",
                f"레지스터 {register.id}는 레스토랑 {register.restaurant_id} 소속입니다",
            )

        # 1단계: movement 저장 (응답 해석 외 실패는 원본 에러 전파)
        row = movement_insert_row(
            description.strip(),
            value,
            movement_type,
            method,
            register_id,
            restaurant_id,
            order_id,
        )
        # 응답 해석 실패는 2xx 이후이므로 INSERT는 커밋된 상태. movement id를 모른 채 잔액 미반영
        try:
            data = await self.store.insert(Tables.MOVEMENTS, row)
            movement = parse_movement(data)
        except MalformedResponseError as e:
            signed = value if movement_type == MovementType.INCOME else -value
            self.cache.invalidate()
            logger.critical(
                "입출금 저장 응답 해석 불가, 잔액 미반영",
                extra={
                    "register_id": register_id,
                    "amount": str(signed),
                    "error": str(e),
                },
            )
            raise ConsistencyError(None, register_id, reason=str(e), amount=signed) from e

        # 2단계: 잔액 갱신
        try:
            await self._apply_to_balance(movement)
        except (StoreError, CashLedgerError) as e:
            self.cache.invalidate()
            logger.critical(
                "입출금 저장 후 잔액 갱신 실패",
                extra={
                    "movement_id": movement.id,
                    "register_id": register_id,
                    "amount": str(movement.signed_amount),
                    "error": str(e),
                },
            )
            raise ConsistencyError(movement, register_id, reason=str(e)) from e

        self.cache.invalidate()

        logger.info(
            f"입출금 기록: {movement.type.value} {movement.amount}",
            extra={
                "movement_id": movement.id,
                "register_id": register_id,
                "payment_method": movement.payment_method.value,
            },
        )
        return movement

    async def _apply_to_balance(self, movement: Movement) -> None:
        """쓰기 직전 잔액 재조회 후 조건부 UPDATE"""
        register = await self.fetcher.get_register(movement.cash_register_id)
        if register.is_closed:
            raise RegisterClosedError(register)

        new_amount = register.current_amount + movement.signed_amount
        rows = await self.store.update(
            Tables.REGISTERS,
            {"currentAmount": str(new_amount), "updatedAt": to_iso(now_utc())},
            filters={"id": register.id, "status": RegisterStatus.OPEN.value},
        )
        if not rows:
            raise RegisterClosedError(register, f"잔액 갱신 대상이 없습니다: {register.id}")
