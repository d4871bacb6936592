"""
PostgREST 클라이언트 테스트

PostgrestClient 요청 구성 및 에러 매핑 테스트 (httpx mock 사용).
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from adapters.postgrest.errors import (
    MalformedResponseError,
    StoreApiError,
    StoreError,
    TransientStoreError,
)
from adapters.postgrest.rest_client import PostgrestClient
from core.types import RegisterStatus


BASE_URL = "https://test.supabase.co/rest/v1"


@pytest.fixture
def client() -> PostgrestClient:
    return PostgrestClient(base_url=BASE_URL + "/", api_key="anon_key")


def _mock_http(response: httpx.Response | None = None, error: Exception | None = None) -> AsyncMock:
    mock_client = AsyncMock()
    if error is not None:
        mock_client.request.side_effect = error
    else:
        mock_client.request.return_value = response
    return mock_client


class TestBuildParams:
    """쿼리 파라미터 생성 테스트"""

    def test_default_select(self) -> None:
        assert PostgrestClient.build_params() == {"select": "*"}

    def test_filters_order_limit(self) -> None:
        params = PostgrestClient.build_params(
            columns="id,name",
            filters={"restaurantId": "rest-1", "status": RegisterStatus.OPEN},
            order_by="createdAt",
            descending=True,
            limit=100,
        )

        assert params == {
            "select": "id,name",
            "restaurantId": "eq.rest-1",
            "status": "eq.OPEN",
            "order": "createdAt.desc",
            "limit": "100",
        }

    def test_ascending_order(self) -> None:
        params = PostgrestClient.build_params(order_by="createdAt")
        assert params["order"] == "createdAt.asc"

    def test_null_and_bool_filters(self) -> None:
        params = PostgrestClient.build_params(filters={"closedAt": None, "active": True})

        assert params["closedAt"] == "is.null"
        assert params["active"] == "eq.true"


class TestPostgrestClientRequests:
    """요청 구성 테스트"""

    @pytest.mark.asyncio
    async def test_select(self, client: PostgrestClient) -> None:
        """GET /{table} + 인증 헤더"""
        mock_http = _mock_http(httpx.Response(200, json=[{"id": "r1"}]))

        with patch.object(client, "_get_client", return_value=mock_http):
            rows = await client.select("CashRegisters", filters={"id": "r1"}, limit=1)

        assert rows == [{"id": "r1"}]
        args, kwargs = mock_http.request.call_args
        assert args == ("GET", f"{BASE_URL}/CashRegisters")
        assert kwargs["params"] == {"select": "*", "id": "eq.r1", "limit": "1"}
        assert kwargs["headers"]["apikey"] == "anon_key"
        assert kwargs["headers"]["Authorization"] == "Bearer anon_key"
        assert "Prefer" not in kwargs["headers"]

    @pytest.mark.asyncio
    async def test_insert_returns_single_row(self, client: PostgrestClient) -> None:
        """POST + return=representation, 단일 행 반환"""
        mock_http = _mock_http(httpx.Response(201, json=[{"id": "m1", "amount": "50.00"}]))

        with patch.object(client, "_get_client", return_value=mock_http):
            row = await client.insert("CashMovements", {"amount": "50.00"})

        assert row == {"id": "m1", "amount": "50.00"}
        args, kwargs = mock_http.request.call_args
        assert args[0] == "POST"
        assert kwargs["json"] == {"amount": "50.00"}
        assert kwargs["headers"]["Prefer"] == "return=representation"

    @pytest.mark.asyncio
    async def test_update_uses_filters(self, client: PostgrestClient) -> None:
        """PATCH + 조건 필터"""
        mock_http = _mock_http(httpx.Response(200, json=[{"id": "r1", "status": "CLOSED"}]))

        with patch.object(client, "_get_client", return_value=mock_http):
            rows = await client.update(
                "CashRegisters",
                {"status": "CLOSED"},
                filters={"id": "r1", "status": "OPEN"},
            )

        assert rows == [{"id": "r1", "status": "CLOSED"}]
        args, kwargs = mock_http.request.call_args
        assert args[0] == "PATCH"
        assert kwargs["params"] == {"id": "eq.r1", "status": "eq.OPEN"}

    @pytest.mark.asyncio
    async def test_update_no_match_returns_empty(self, client: PostgrestClient) -> None:
        mock_http = _mock_http(httpx.Response(200, json=[]))

        with patch.object(client, "_get_client", return_value=mock_http):
            rows = await client.update("CashRegisters", {"status": "CLOSED"}, filters={"id": "x"})

        assert rows == []

    @pytest.mark.asyncio
    async def test_update_empty_body(self, client: PostgrestClient) -> None:
        """204 응답은 빈 목록"""
        mock_http = _mock_http(httpx.Response(204))

        with patch.object(client, "_get_client", return_value=mock_http):
            rows = await client.update("CashRegisters", {"status": "CLOSED"}, filters={"id": "x"})

        assert rows == []

    @pytest.mark.asyncio
    async def test_update_without_filters_rejected(self, client: PostgrestClient) -> None:
        """전체 수정 방지"""
        with pytest.raises(ValueError):
            await client.update("CashRegisters", {"status": "CLOSED"}, filters={})

    @pytest.mark.asyncio
    async def test_rpc(self, client: PostgrestClient) -> None:
        """POST /rpc/{function}"""
        mock_http = _mock_http(httpx.Response(200, json={"id": "r1"}))

        with patch.object(client, "_get_client", return_value=mock_http):
            result = await client.rpc("create_cash_register", {"name": "Caixa 1"})

        assert result == {"id": "r1"}
        args, kwargs = mock_http.request.call_args
        assert args == ("POST", f"{BASE_URL}/rpc/create_cash_register")
        assert kwargs["json"] == {"name": "Caixa 1"}


class TestPostgrestClientErrors:
    """에러 매핑 테스트"""

    @pytest.mark.asyncio
    async def test_timeout_is_transient(self, client: PostgrestClient) -> None:
        mock_http = _mock_http(error=httpx.ReadTimeout("timed out"))

        with patch.object(client, "_get_client", return_value=mock_http):
            with pytest.raises(TransientStoreError) as exc_info:
                await client.select("CashRegisters")

        assert exc_info.value.code == "TIMEOUT"

    @pytest.mark.asyncio
    async def test_network_error_is_transient(self, client: PostgrestClient) -> None:
        mock_http = _mock_http(error=httpx.ConnectError("connection refused"))

        with patch.object(client, "_get_client", return_value=mock_http):
            with pytest.raises(TransientStoreError) as exc_info:
                await client.insert("CashMovements", {})

        assert exc_info.value.code == "NETWORK"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [429, 500, 502, 503])
    async def test_server_errors_are_transient(self, client: PostgrestClient, status: int) -> None:
        mock_http = _mock_http(httpx.Response(status, text="unavailable"))

        with patch.object(client, "_get_client", return_value=mock_http):
            with pytest.raises(TransientStoreError) as exc_info:
                await client.select("CashRegisters")

        assert exc_info.value.code == str(status)

    @pytest.mark.asyncio
    async def test_postgrest_error_code(self, client: PostgrestClient) -> None:
        """4xx는 PostgREST code를 가진 StoreApiError"""
        mock_http = _mock_http(
            httpx.Response(
                404,
                json={"code": "PGRST202", "message": "Could not find the function"},
            )
        )

        with patch.object(client, "_get_client", return_value=mock_http):
            with pytest.raises(StoreApiError) as exc_info:
                await client.rpc("create_cash_register", {})

        assert exc_info.value.code == "PGRST202"
        assert "Could not find" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_4xx_without_json(self, client: PostgrestClient) -> None:
        mock_http = _mock_http(httpx.Response(401, text="Unauthorized"))

        with patch.object(client, "_get_client", return_value=mock_http):
            with pytest.raises(StoreApiError) as exc_info:
                await client.select("CashRegisters")

        assert exc_info.value.code == "401"
        assert exc_info.value.message == "Unauthorized"

    @pytest.mark.asyncio
    async def test_non_json_body(self, client: PostgrestClient) -> None:
        mock_http = _mock_http(httpx.Response(200, text="<html>gateway</html>"))

        with patch.object(client, "_get_client", return_value=mock_http):
            with pytest.raises(MalformedResponseError):
                await client.select("CashRegisters")

    @pytest.mark.asyncio
    async def test_select_non_list(self, client: PostgrestClient) -> None:
        mock_http = _mock_http(httpx.Response(200, json={"id": "r1"}))

        with patch.object(client, "_get_client", return_value=mock_http):
            with pytest.raises(MalformedResponseError):
                await client.select("CashRegisters")

    @pytest.mark.asyncio
    async def test_insert_without_row(self, client: PostgrestClient) -> None:
        mock_http = _mock_http(httpx.Response(201, json=[]))

        with patch.object(client, "_get_client", return_value=mock_http):
            with pytest.raises(MalformedResponseError):
                await client.insert("CashMovements", {})

    def test_error_hierarchy(self) -> None:
        """모든 스토어 에러는 StoreError"""
        assert issubclass(TransientStoreError, StoreError)
        assert issubclass(StoreApiError, StoreError)
        assert issubclass(MalformedResponseError, StoreError)
        assert MalformedResponseError("bad").code == "MALFORMED"
        assert str(StoreApiError("23505", "dup")) == "Store Error [23505]: dup"


class TestPostgrestClientLifecycle:
    """HTTP 클라이언트 생성/종료 테스트"""

    @pytest.mark.asyncio
    async def test_lazy_client_and_close(self, client: PostgrestClient) -> None:
        http = await client._get_client()

        assert http is await client._get_client()

        await client.close()
        assert client._client is None
        assert http.is_closed
