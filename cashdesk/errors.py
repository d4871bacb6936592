"""
캐시 원장 에러

스토어 에러(adapters.postgrest.errors)와 구분되는 도메인 에러.
모든 도메인 에러는 CashLedgerError를 상속.
"""

from decimal import Decimal

from adapters.models import Movement, Register


class CashLedgerError(Exception):
    """캐시 원장 에러 기본 클래스"""
    pass


class ValidationError(CashLedgerError):
    """입력 검증 실패 (쓰기 전에 발생, 재시도 불필요)

    Attributes:
        field: 문제가 된 입력 필드
        message: 에러 메시지
    """

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"Validation Error [{field}]: {message}")


class RegisterNotFoundError(CashLedgerError):
    """레지스터가 존재하지 않음"""

    def __init__(self, register_id: str):
        self.register_id = register_id
        super().__init__(f"레지스터를 찾을 수 없습니다: {register_id}")


class RegisterClosedError(CashLedgerError):
    """마감된 레지스터에 대한 변경 시도"""

    def __init__(self, register: Register, message: str | None = None):
        self.register = register
        super().__init__(message or f"마감된 레지스터입니다: {register.id}")


class AlreadyClosedError(RegisterClosedError):
    """이미 마감된 레지스터를 다시 마감하려는 경우 (상태 변경 없음)"""

    def __init__(self, register: Register):
        super().__init__(register, f"이미 마감된 레지스터입니다: {register.id}")


class ConsistencyError(CashLedgerError):
    """입출금은 저장됐으나 잔액 갱신 실패

    원격 스토어에 movement 행은 존재하지만 currentAmount가 반영되지 않은 상태.
    BalanceReconciler로 복구 가능.

    Attributes:
        movement: 저장된 입출금 (저장 응답을 해석하지 못했으면 None)
        register_id: 잔액이 어긋난 레지스터
        amount: 반영되지 않은 부호 포함 금액
    """

    def __init__(
        self,
        movement: Movement | None,
        register_id: str,
        reason: str = "",
        amount: Decimal | None = None,
    ):
        self.movement = movement
        self.register_id = register_id
        self.reason = reason
        if amount is None and movement is not None:
            amount = movement.signed_amount
        self.amount = amount
        movement_ref = movement.id if movement is not None else "(id 미확인)"
        detail = f" ({reason})" if reason else ""
        super().__init__(
            f"입출금 {movement_ref} 저장 후 레지스터 {register_id} 잔액 갱신 실패{detail}"
        )


class FallbackWriteUsed(UserWarning):
    """서버 측 검증 없이 직접 INSERT로 레지스터가 생성됨 (비차단 경고)"""

    def __init__(self, register_id: str, reason: str = ""):
        self.register_id = register_id
        self.reason = reason
        super().__init__(f"검증 RPC 실패로 직접 INSERT 사용: register={register_id} {reason}".strip())
