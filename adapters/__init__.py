"""
어댑터 레이어

외부 서비스(원격 원장 스토어, 알림)와의 연동을 담당.
Protocol 기반 인터페이스로 Mock 교체 가능.
"""

from adapters.interfaces import (
    ILedgerStore,
    INotifier,
)
from adapters.models import (
    Movement,
    OpeningDetails,
    Register,
)

__all__ = [
    # Interfaces
    "ILedgerStore",
    "INotifier",
    # Models
    "Register",
    "Movement",
    "OpeningDetails",
]
