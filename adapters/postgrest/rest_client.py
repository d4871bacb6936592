"""
Supabase PostgREST REST 클라이언트

apikey/Bearer 인증, 동등 비교 필터, return=representation.
ILedgerStore Protocol 준수.

재시도하지 않음. 읽기 재시도는 fetcher가, 쓰기는 재시도하지 않는 것이 원칙.
"""

import logging
from typing import Any

import httpx

from adapters.postgrest.errors import (
    MalformedResponseError,
    StoreApiError,
    TransientStoreError,
)
from core.constants import Defaults

logger = logging.getLogger(__name__)


def _format_filter_value(value: Any) -> str:
    """필터 값을 PostgREST 리터럴로 변환"""
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    if hasattr(value, "value"):
        # str Enum
        value = value.value
    return f"eq.{value}"


class PostgrestClient:
    """PostgREST REST 클라이언트

    ILedgerStore Protocol 구현.

    Args:
        base_url: REST 베이스 URL (예: https://xxxx.supabase.co/rest/v1)
        api_key: Supabase API 키
        schema: DB 스키마 (Accept-Profile / Content-Profile 헤더)
        timeout: 요청 타임아웃 (초)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        schema: str = Defaults.STORE_SCHEMA,
        timeout: float = Defaults.REQUEST_TIMEOUT_SEC,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.schema = schema
        self.timeout = timeout

        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """HTTP 클라이언트 가져오기 (lazy initialization)"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        """HTTP 클라이언트 종료"""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _headers(self, write: bool = False) -> dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
            "Accept-Profile": self.schema,
        }
        if write:
            headers["Content-Type"] = "application/json"
            headers["Content-Profile"] = self.schema
            headers["Prefer"] = "return=representation"
        return headers

    @staticmethod
    def build_params(
        *,
        columns: str = "*",
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> dict[str, str]:
        """PostgREST 쿼리 파라미터 생성

        예: {"select": "*", "restaurantId": "eq.r1", "order": "createdAt.desc", "limit": "100"}
        """
        params: dict[str, str] = {"select": columns}
        for column, value in (filters or {}).items():
            params[column] = _format_filter_value(value)
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(limit)
        return params

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        json_body: Any = None,
        write: bool = False,
    ) -> Any:
        """API 요청 실행

        Args:
            method: HTTP 메서드 (GET, POST, PATCH)
            path: 경로 (예: /CashRegisters, /rpc/create_cash_register)
            params: 쿼리 파라미터
            json_body: 요청 본문
            write: 쓰기 요청 여부 (Prefer 헤더 추가)

        Returns:
            JSON 응답 (본문이 비어 있으면 None)

        Raises:
            TransientStoreError: 타임아웃, 네트워크 오류, 5xx, 429
            StoreApiError: 기타 4xx
            MalformedResponseError: JSON이 아닌 응답
        """
        url = f"{self.base_url}{path}"
        client = await self._get_client()

        try:
            response = await client.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=self._headers(write=write),
            )
        except httpx.TimeoutException as e:
            logger.warning(
                "Store request timeout",
                extra={"method": method, "path": path},
            )
            raise TransientStoreError(code="TIMEOUT", message=str(e) or "request timed out") from e
        except httpx.RequestError as e:
            logger.warning(
                "Store request error",
                extra={"method": method, "path": path, "error": str(e)},
            )
            raise TransientStoreError(code="NETWORK", message=str(e)) from e

        status = response.status_code

        if status == 429 or status >= 500:
            logger.warning(
                "Store unavailable",
                extra={"method": method, "path": path, "status": status},
            )
            raise TransientStoreError(code=str(status), message=response.text)

        if status >= 400:
            try:
                error_data = response.json()
                code = str(error_data.get("code") or status)
                message = error_data.get("message") or response.text
            except (ValueError, AttributeError):
                code = str(status)
                message = response.text
            logger.error(
                "Store API error",
                extra={"method": method, "path": path, "status": status, "code": code},
            )
            raise StoreApiError(code=code, message=message)

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"JSON 응답이 아닙니다: {path}") from e

    # =========================================================================
    # ILedgerStore
    # =========================================================================

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
        """행 조회 (GET /{table})"""
        params = self.build_params(
            columns=columns,
            filters=filters,
            order_by=order_by,
            descending=descending,
            limit=limit,
        )
        data = await self._request("GET", f"/{table}", params=params)
        if not isinstance(data, list):
            raise MalformedResponseError(f"{table} 조회 응답이 목록이 아닙니다")
        return data

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """행 삽입 (POST /{table}), 저장된 행 반환"""
        data = await self._request("POST", f"/{table}", json_body=row, write=True)
        if isinstance(data, list) and len(data) == 1 and isinstance(data[0], dict):
            return data[0]
        if isinstance(data, dict):
            return data
        raise MalformedResponseError(f"{table} 삽입 응답에 행이 없습니다")

    async def update(
        self,
        table: str,
        values: dict[str, Any],
        *,
        filters: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """조건부 행 수정 (PATCH /{table}?col=eq.v)

        필터 없는 전체 수정은 허용하지 않음.
        """
        if not filters:
            raise ValueError("update에는 최소 하나의 필터가 필요합니다")

        params = {column: _format_filter_value(value) for column, value in filters.items()}
        data = await self._request(
            "PATCH", f"/{table}", params=params, json_body=values, write=True
        )
        if data is None:
            return []
        if not isinstance(data, list):
            raise MalformedResponseError(f"{table} 수정 응답이 목록이 아닙니다")
        return data

    async def rpc(self, function: str, params: dict[str, Any]) -> Any:
        """저장 함수 호출 (POST /rpc/{function})"""
        return await self._request(
            "POST", f"/rpc/{function}", json_body=params, write=True
        )
