"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → 프로젝트 루트)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Tables:
    """원격 스토어 테이블 이름 (Supabase, 대소문자 구분)"""

    REGISTERS: str = "CashRegisters"
    MOVEMENTS: str = "CashMovements"


class RpcFunctions:
    """원격 스토어 RPC 함수 이름"""

    # 서버 측 불변식 검증 후 레지스터 생성 (primary write path)
    CREATE_REGISTER: str = "create_cash_register"


class FetchPolicy:
    """레지스터 목록 조회 재시도 정책"""

    MAX_ATTEMPTS: int = 3
    BACKOFF_STEP_SEC: float = 1.0  # attempt × 1초 선형 증가

    # 비상 조회: 축소된 컬럼 + 행 수 제한
    EMERGENCY_COLUMNS: str = (
        "id,name,initialAmount,currentAmount,status,restaurantId,openedAt,closedAt"
    )
    EMERGENCY_LIMIT: int = 100


class CacheDefaults:
    """Read-through 캐시 기본값"""

    REGISTER_LIST_TTL_SEC: float = 10.0


class Defaults:
    """기본값 상수"""

    REQUEST_TIMEOUT_SEC: float = 15.0
    STORE_SCHEMA: str = "public"
    NOTIFIER_USERNAME: str = "Caixa PDV"
    NOTIFY_COOLDOWN_SEC: float = 60.0  # 같은 알림 반복 억제


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # 설정 파일
    SECRETS_FILE: Path = CONFIG_DIR / "secrets.yaml"
