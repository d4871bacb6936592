"""
Idempotency 유틸리티

레지스터 개설 요청 ID 생성 및 파싱 기능 제공
규칙: cr-{uuid4}

같은 요청 ID로 재전송된 개설 요청은 새 레지스터를 만들지 않음.
"""

from uuid import uuid4

# 레지스터 개설 요청 ID 접두사
OPEN_REQUEST_PREFIX: str = "cr"


def make_open_request_id(token: str | None = None) -> str:
    """레지스터 개설 요청 ID 생성

    폼 제출 1회당 한 번 생성하여 재시도 시 동일 값을 재사용해야 함.

    Args:
        token: 고정 토큰 (None이면 uuid4 생성)

    Returns:
        cr-{token} 형식의 요청 ID

    Example:
        >>> make_open_request_id("550e8400-e29b-41d4-a716-446655440000")
        'cr-550e8400-e29b-41d4-a716-446655440000'
    """
    if token is not None and not token:
        raise ValueError("token은 비어 있을 수 없습니다")

    return f"{OPEN_REQUEST_PREFIX}-{token or uuid4()}"


def parse_open_request_id(request_id: str) -> str | None:
    """요청 ID에서 토큰 추출

    Args:
        request_id: cr-{token} 형식의 문자열

    Returns:
        토큰 또는 None (형식 불일치 시)

    Example:
        >>> parse_open_request_id("cr-abc")
        'abc'
        >>> parse_open_request_id("other-12345")
        None
    """
    if not request_id:
        return None

    prefix = f"{OPEN_REQUEST_PREFIX}-"
    if request_id.startswith(prefix):
        token = request_id[len(prefix):]
        return token if token else None

    return None


def validate_open_request_id(request_id: str) -> bool:
    """요청 ID 형식 유효성 검사"""
    return parse_open_request_id(request_id) is not None
