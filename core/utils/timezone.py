"""
타임존 유틸리티

내부 저장: UTC | 외부 표시: BRT(브라질리아) 원칙 준수를 위한 헬퍼 함수
"""

from datetime import datetime, timezone, timedelta

# BRT 타임존 (UTC-3, 서머타임 없음)
BRT = timezone(timedelta(hours=-3))

# 화면 표시 형식 (dd/MM/yyyy HH:mm)
DISPLAY_FORMAT = "%d/%m/%Y %H:%M"


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.

    Returns:
        현재 UTC 시간 (tzinfo=timezone.utc)
    """
    return datetime.now(timezone.utc)


def to_brt(dt: datetime) -> datetime:
    """UTC datetime을 BRT로 변환

    Args:
        dt: datetime 객체 (UTC 권장, naive면 UTC로 간주)

    Returns:
        BRT 타임존의 datetime

    Example:
        >>> utc_dt = datetime(2026, 10, 19, 2, 0, 0, tzinfo=timezone.utc)
        >>> to_brt(utc_dt).day
        18  # 전날 23:00
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(BRT)


def format_brt(dt: datetime | None, fmt: str = DISPLAY_FORMAT) -> str:
    """UTC datetime을 BRT 문자열로 포맷

    Args:
        dt: datetime 객체 (None이면 "-")
        fmt: strftime 포맷 문자열

    Returns:
        BRT 시간의 포맷된 문자열

    Example:
        >>> format_brt(datetime(2026, 10, 19, 15, 30, tzinfo=timezone.utc))
        '19/10/2026 12:30'
    """
    if dt is None:
        return "-"
    return to_brt(dt).strftime(fmt)


def parse_iso_datetime(value: str | None) -> datetime | None:
    """ISO-8601 문자열을 UTC datetime으로 변환

    PostgREST는 timestamptz를 "+00:00" 또는 "Z" 접미사로 반환.
    타임존 없는 값(timestamp 컬럼)은 UTC로 간주.

    Args:
        value: ISO-8601 문자열 (None/빈 문자열이면 None)

    Returns:
        UTC datetime 또는 None

    Raises:
        ValueError: 형식이 잘못된 경우
    """
    if not value:
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(dt: datetime) -> str:
    """datetime을 UTC ISO-8601 문자열로 변환 (스토어 저장용)"""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()
