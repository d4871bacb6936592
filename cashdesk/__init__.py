"""
캐시 원장 (PDV 캐시 드로어)

레지스터 개설/마감, 입출금 기록, 잔액 유지.
"""

from cashdesk.errors import (
    AlreadyClosedError,
    CashLedgerError,
    ConsistencyError,
    FallbackWriteUsed,
    RegisterClosedError,
    RegisterNotFoundError,
    ValidationError,
)
from cashdesk.lifecycle import OpenOutcome
from cashdesk.reconciler import ReconcileResult
from cashdesk.service import CashLedgerService
from cashdesk.summary import MovementSummary, summarize_movements

__all__ = [
    "CashLedgerService",
    "OpenOutcome",
    "ReconcileResult",
    "MovementSummary",
    "summarize_movements",
    # Errors
    "CashLedgerError",
    "ValidationError",
    "RegisterNotFoundError",
    "RegisterClosedError",
    "AlreadyClosedError",
    "ConsistencyError",
    "FallbackWriteUsed",
]
