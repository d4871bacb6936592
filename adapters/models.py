"""
어댑터 공통 데이터 모델

원격 스토어 행(row)을 표준화한 도메인 모델.
모든 금액은 Decimal, 모든 시각은 UTC datetime 사용.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from core.types import MovementType, PaymentMethod, RegisterStatus


@dataclass(frozen=True)
class Register:
    """캐시 레지스터 (시재 세션 하나)

    Attributes:
        id: 레지스터 ID (생성 시 스토어가 부여)
        name: 운영자 표시용 이름
        initial_amount: 개설 시 시재 (>= 0, 개설 후 불변)
        current_amount: 현재 잔액 (입출금마다 갱신)
        status: OPEN / CLOSED
        restaurant_id: 소유 레스토랑
        opened_at: 개설 시각
        closed_at: 마감 시각 (OPEN이면 None)
        created_at: 행 생성 시각 (비상 조회 시 None)
        updated_at: 행 수정 시각
    """

    id: str
    name: str
    initial_amount: Decimal
    current_amount: Decimal
    status: RegisterStatus
    restaurant_id: str
    opened_at: datetime | None = None
    closed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        """개설 상태 여부"""
        return self.status == RegisterStatus.OPEN

    @property
    def is_closed(self) -> bool:
        """마감 여부 (종료 상태)"""
        return self.status == RegisterStatus.CLOSED


@dataclass(frozen=True)
class Movement:
    """입출금 내역 (생성 후 수정/삭제 없음)

    Attributes:
        id: 내역 ID
        description: 설명 (비어 있을 수 없음)
        amount: 금액 (> 0, 부호는 type으로 표현)
        type: INCOME / EXPENSE
        payment_method: 결제 수단
        cash_register_id: 소속 레지스터
        restaurant_id: 소유 레스토랑
        order_id: 원 주문 ID (선택)
        created_at: 생성 시각
        updated_at: 수정 시각
    """

    id: str
    description: str
    amount: Decimal
    type: MovementType
    payment_method: PaymentMethod
    cash_register_id: str
    restaurant_id: str
    order_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def signed_amount(self) -> Decimal:
        """잔액 반영 금액 (INCOME: +, EXPENSE: -)"""
        if self.type == MovementType.INCOME:
            return self.amount
        return -self.amount


@dataclass(frozen=True)
class OpeningDetails:
    """레지스터 개설 이벤트 메타데이터

    잔액 계산에는 사용하지 않음. 단, 권종별 내역이 있으면
    그 합계가 개설 시재와 일치해야 함.

    Attributes:
        operator_id: 개설 운영자 ID
        operator_name: 운영자 이름 (선택)
        denominations: 권종(액면가) -> 수량 (선택)
        has_pending_change: 거스름돈 보충 대기 여부
    """

    operator_id: str
    operator_name: str | None = None
    denominations: dict[Decimal, int] | None = field(default=None, hash=False)
    has_pending_change: bool = False

    @property
    def denomination_total(self) -> Decimal | None:
        """권종별 합계 (권종 내역이 없으면 None)"""
        if self.denominations is None:
            return None
        return sum(
            (Decimal(face) * count for face, count in self.denominations.items()),
            Decimal("0"),
        )

    def to_dict(self) -> dict[str, object]:
        """RPC 전송/로깅용 딕셔너리"""
        return {
            "operatorId": self.operator_id,
            "operatorName": self.operator_name,
            "denominations": (
                {str(face): count for face, count in self.denominations.items()}
                if self.denominations is not None
                else None
            ),
            "hasPendingChange": self.has_pending_change,
        }
