"""
레지스터 입출금 요약

상세 화면의 수입/지출 합계와 결제 수단별 순액.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from adapters.models import Movement
from core.types import MovementType, PaymentMethod


@dataclass(frozen=True)
class MovementSummary:
    """입출금 요약

    Attributes:
        total_income: 수입 합계
        total_expense: 지출 합계
        net: total_income - total_expense
        count: 입출금 건수
        by_payment_method: 결제 수단별 순액 (내역이 있는 수단만)
    """

    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    net: Decimal = Decimal("0")
    count: int = 0
    by_payment_method: dict[PaymentMethod, Decimal] = field(default_factory=dict, hash=False)


def summarize_movements(movements: list[Movement]) -> MovementSummary:
    """입출금 목록 요약"""
    income = Decimal("0")
    expense = Decimal("0")
    by_method: dict[PaymentMethod, Decimal] = {}

    for movement in movements:
        if movement.type == MovementType.INCOME:
            income += movement.amount
        else:
            expense += movement.amount
        by_method[movement.payment_method] = (
            by_method.get(movement.payment_method, Decimal("0")) + movement.signed_amount
        )

    return MovementSummary(
        total_income=income,
        total_expense=expense,
        net=income - expense,
        count=len(movements),
        by_payment_method=by_method,
    )
