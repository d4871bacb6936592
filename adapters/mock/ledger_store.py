"""
Mock 원장 스토어

테스트용 인메모리 PostgREST 대체 구현.
ILedgerStore Protocol 준수.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any

from adapters.postgrest.errors import StoreApiError, TransientStoreError
from core.constants import RpcFunctions, Tables
from core.types import RegisterStatus
from core.utils.timezone import now_utc, to_iso


@dataclass
class MockState:
    """Mock 상태 (메모리 내 저장)"""

    # 테이블 (table -> id -> row)
    tables: dict[str, dict[str, dict[str, Any]]] = field(
        default_factory=lambda: {Tables.REGISTERS: {}, Tables.MOVEMENTS: {}}
    )

    # 존재하는 레스토랑 ID (None이면 FK 검사 안 함)
    restaurants: set[str] | None = None

    # 처리된 개설 요청 (requestId -> register id)
    open_requests: dict[str, str] = field(default_factory=dict)

    # 장애 시뮬레이션
    fail_selects: int = 0
    fail_rpc: bool = False
    fail_next_insert: bool = False
    fail_next_update: bool = False

    # 호출 기록
    select_calls: list[dict[str, Any]] = field(default_factory=list)
    select_count: int = 0
    write_count: int = 0
    rpc_count: int = 0

    last_timestamp: datetime | None = None


class MockLedgerStore:
    """Mock 원장 스토어

    ILedgerStore Protocol 구현.
    메모리 내 상태 관리로 장애/경합 시나리오 지원.

    사용 예시:
    ```python
    store = MockLedgerStore()
    register_row = store.seed_register(name="Caixa 1", initial_amount="100")

    # 다음 select 3회 실패
    store.state.fail_selects = 3

    rows = await store.select(Tables.REGISTERS)
    ```
    """

    def __init__(self, state: MockState | None = None):
        self.state = state or MockState()

    # -------------------------------------------------------------------------
    # 상태 조작 메서드 (테스트용)
    # -------------------------------------------------------------------------

    def _now(self) -> datetime:
        """단조 증가 시각 (같은 시각 행이 생기지 않도록)"""
        now = now_utc()
        last = self.state.last_timestamp
        if last is not None and now <= last:
            now = last + timedelta(microseconds=1)
        self.state.last_timestamp = now
        return now

    def add_restaurant(self, restaurant_id: str) -> None:
        """레스토랑 등록 (FK 검사 활성화)"""
        if self.state.restaurants is None:
            self.state.restaurants = set()
        self.state.restaurants.add(restaurant_id)

    def seed_register(
        self,
        name: str = "Caixa 1",
        initial_amount: str = "100.00",
        current_amount: str | None = None,
        status: RegisterStatus = RegisterStatus.OPEN,
        restaurant_id: str = "rest-1",
    ) -> dict[str, Any]:
        """레지스터 행 직접 추가 (쓰기 카운트에 포함되지 않음)"""
        now = to_iso(self._now())
        row = {
            "id": str(uuid.uuid4()),
            "name": name,
            "initialAmount": initial_amount,
            "currentAmount": current_amount if current_amount is not None else initial_amount,
            "status": status.value,
            "restaurantId": restaurant_id,
            "openedAt": now,
            "closedAt": now if status == RegisterStatus.CLOSED else None,
            "createdAt": now,
            "updatedAt": None,
        }
        self.state.tables[Tables.REGISTERS][row["id"]] = row
        return dict(row)

    def seed_movement(
        self,
        register_id: str,
        amount: str,
        movement_type: str = "INCOME",
        payment_method: str = "CASH",
        description: str = "Movimento",
        restaurant_id: str = "rest-1",
    ) -> dict[str, Any]:
        """입출금 행 직접 추가 (잔액은 갱신하지 않음)"""
        row = {
            "id": str(uuid.uuid4()),
            "description": description,
            "amount": amount,
            "type": movement_type,
            "paymentMethod": payment_method,
            "cashRegisterId": register_id,
            "restaurantId": restaurant_id,
            "orderId": None,
            "createdAt": to_iso(self._now()),
            "updatedAt": None,
        }
        self.state.tables[Tables.MOVEMENTS][row["id"]] = row
        return dict(row)

    def get_row(self, table: str, row_id: str) -> dict[str, Any] | None:
        """행 조회 (호출 기록 없음)"""
        row = self.state.tables.get(table, {}).get(row_id)
        return dict(row) if row is not None else None

    def rows(self, table: str) -> list[dict[str, Any]]:
        """테이블 전체 행 (삽입 순서)"""
        return [dict(row) for row in self.state.tables.get(table, {}).values()]

    # -------------------------------------------------------------------------
    # ILedgerStore 구현
    # -------------------------------------------------------------------------

    @staticmethod
    def _matches(row: dict[str, Any], filters: dict[str, Any] | None) -> bool:
        if not filters:
            return True
        return all(row.get(column) == value for column, value in filters.items())

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """행 조회"""
        self.state.select_count += 1
        self.state.select_calls.append(
            {
                "table": table,
                "columns": columns,
                "filters": dict(filters) if filters else None,
                "order_by": order_by,
                "descending": descending,
                "limit": limit,
            }
        )

        if self.state.fail_selects > 0:
            self.state.fail_selects -= 1
            raise TransientStoreError(code="503", message="Mock store unavailable")

        rows = [
            row for row in self.state.tables.get(table, {}).values()
            if self._matches(row, filters)
        ]
        if order_by:
            rows = sorted(rows, key=lambda r: str(r.get(order_by) or ""), reverse=descending)
        if limit is not None:
            rows = rows[:limit]

        if columns == "*":
            return [dict(row) for row in rows]
        wanted = [c.strip() for c in columns.split(",")]
        return [{c: row.get(c) for c in wanted} for row in rows]

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """행 삽입"""
        self.state.write_count += 1

        if self.state.fail_next_insert:
            self.state.fail_next_insert = False
            raise TransientStoreError(code="TIMEOUT", message="Mock insert timeout")

        self._check_foreign_keys(table, row)

        stored = dict(row)
        stored["id"] = str(uuid.uuid4())
        stored.setdefault("createdAt", to_iso(self._now()))
        stored.setdefault("updatedAt", None)
        if table == Tables.REGISTERS:
            stored.setdefault("closedAt", None)
        self.state.tables.setdefault(table, {})[stored["id"]] = stored
        return dict(stored)

    async def update(
        self,
        table: str,
        values: dict[str, Any],
        *,
        filters: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """조건부 행 수정"""
        self.state.write_count += 1

        if not filters:
            raise ValueError("update에는 최소 하나의 필터가 필요합니다")

        if self.state.fail_next_update:
            self.state.fail_next_update = False
            raise TransientStoreError(code="503", message="Mock update failed")

        updated = []
        for row in self.state.tables.get(table, {}).values():
            if self._matches(row, filters):
                row.update(values)
                updated.append(dict(row))
        return updated

    async def rpc(self, function: str, params: dict[str, Any]) -> Any:
        """저장 함수 호출 (create_cash_register만 지원)"""
        self.state.write_count += 1
        self.state.rpc_count += 1

        if self.state.fail_rpc:
            raise StoreApiError(
                code="PGRST202",
                message=f"Could not find the function public.{function}",
            )

        if function != RpcFunctions.CREATE_REGISTER:
            raise StoreApiError(code="PGRST202", message=f"Unknown function {function}")

        return self._create_register(params)

    # -------------------------------------------------------------------------
    # 서버 측 검증
    # -------------------------------------------------------------------------

    def _check_foreign_keys(self, table: str, row: dict[str, Any]) -> None:
        restaurants = self.state.restaurants
        if restaurants is not None and row.get("restaurantId") not in restaurants:
            raise StoreApiError(
                code="23503",
                message=f"restaurantId {row.get('restaurantId')} not present in Restaurants",
            )
        if table == Tables.MOVEMENTS:
            if row.get("cashRegisterId") not in self.state.tables[Tables.REGISTERS]:
                raise StoreApiError(
                    code="23503",
                    message=f"cashRegisterId {row.get('cashRegisterId')} not present",
                )

    def _create_register(self, params: dict[str, Any]) -> dict[str, Any]:
        """create_cash_register 시뮬레이션 (검증 + 요청 ID 중복 제거)"""
        request_id = params.get("requestId")
        if request_id and request_id in self.state.open_requests:
            existing = self.state.tables[Tables.REGISTERS][self.state.open_requests[request_id]]
            return dict(existing)

        name = str(params.get("name") or "").strip()
        if not name:
            raise StoreApiError(code="P0001", message="name is required")

        try:
            initial_amount = Decimal(str(params.get("initialAmount")))
        except InvalidOperation as e:
            raise StoreApiError(code="22P02", message="invalid initialAmount") from e
        if not initial_amount.is_finite() or initial_amount < 0:
            raise StoreApiError(code="P0001", message="initialAmount must be >= 0")

        row = {
            "name": name,
            "initialAmount": str(initial_amount),
            "currentAmount": str(initial_amount),
            "status": RegisterStatus.OPEN.value,
            "restaurantId": params.get("restaurantId"),
            "openedAt": params.get("openedAt") or to_iso(self._now()),
        }
        self._check_foreign_keys(Tables.REGISTERS, row)

        row["id"] = str(uuid.uuid4())
        row["createdAt"] = to_iso(self._now())
        row["updatedAt"] = None
        row["closedAt"] = None
        self.state.tables[Tables.REGISTERS][row["id"]] = row
        if request_id:
            self.state.open_requests[request_id] = row["id"]
        return dict(row)


