"""
타입 정의 모듈

캐시 원장(PDV 캐시 드로어)에서 사용하는 핵심 Enum 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능 (DB 컬럼 값과 동일)
"""

from enum import Enum


class RunMode(str, Enum):
    """실행 모드 (운영 / 스테이징 Supabase 프로젝트)"""

    PRODUCTION = "production"
    STAGING = "staging"


class RegisterStatus(str, Enum):
    """캐시 레지스터(시재) 상태

    OPEN → CLOSED 단방향 전이만 허용 (CLOSED는 종료 상태)
    """

    OPEN = "OPEN"
    CLOSED = "CLOSED"


class MovementType(str, Enum):
    """입출금 유형 (금액 부호는 유형으로만 표현)"""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class PaymentMethod(str, Enum):
    """결제 수단"""

    CASH = "CASH"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    PIX = "PIX"  # 브라질 즉시 이체
    OTHER = "OTHER"


class WritePath(str, Enum):
    """레지스터 생성 경로

    VALIDATED: 서버 측 검증 RPC 경유
    FALLBACK: 직접 INSERT (검증 없음, degraded write)
    """

    VALIDATED = "VALIDATED"
    FALLBACK = "FALLBACK"
