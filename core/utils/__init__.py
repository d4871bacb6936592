"""
유틸리티 패키지

타임존 처리, 금액 정규화, idempotency 관리 등 공통 유틸리티
"""

from core.utils.money import format_brl, to_money
from core.utils.timezone import (
    BRT,
    format_brt,
    now_utc,
    parse_iso_datetime,
    to_brt,
    to_iso,
)

__all__ = [
    "BRT",
    "format_brt",
    "now_utc",
    "parse_iso_datetime",
    "to_brt",
    "to_iso",
    "format_brl",
    "to_money",
]
