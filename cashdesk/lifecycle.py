"""
Register Lifecycle Manager

레지스터 개설/마감.

개설 경로:
- VALIDATED: create_cash_register RPC (서버 측 검증)
- FALLBACK: RPC 실패 시 CashRegisters 직접 INSERT (검증 없음, degraded write)
  RPC가 2xx로 응답했지만 본문을 해석할 수 없으면 fallback 없이 에러 전파

마감은 status=OPEN 조건부 UPDATE로 closedAt을 정확히 한 번만 기록.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from adapters.interfaces import ILedgerStore
from adapters.models import OpeningDetails, Register
from adapters.postgrest.errors import MalformedResponseError, StoreError
from adapters.postgrest.models import parse_register, register_insert_row
from cashdesk.cache import RegisterListCache
from cashdesk.errors import AlreadyClosedError, ValidationError
from cashdesk.fetcher import RegisterFetcher
from core.constants import RpcFunctions, Tables
from core.types import RegisterStatus, WritePath
from core.utils.idempotency import validate_open_request_id
from core.utils.money import to_money
from core.utils.timezone import now_utc, to_iso

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpenOutcome:
    """레지스터 개설 결과

    Attributes:
        register: 생성된 레지스터
        path: 생성 경로 (VALIDATED / FALLBACK)
        fallback_reason: FALLBACK일 때 RPC 실패 사유
        replayed: 같은 request_id 재요청으로 기존 결과를 반환했는지 여부
    """

    register: Register
    path: WritePath
    fallback_reason: str | None = None
    replayed: bool = False

    @property
    def fallback_used(self) -> bool:
        return self.path == WritePath.FALLBACK


def _validate_open(
    name: Any,
    initial_amount: Any,
    restaurant_id: Any,
    details: OpeningDetails | None,
    request_id: str | None,
) -> tuple[str, Decimal]:
    """개설 입력 검증 (쓰기 전)

    Returns:
        (정리된 이름, 정규화된 개설 시재)
    """
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name", "레지스터 이름은 비어 있을 수 없습니다")

    try:
        amount = to_money(initial_amount)
    except (TypeError, ValueError) as e:
        raise ValidationError("initial_amount", str(e)) from e
    if amount < 0:
        raise ValidationError("initial_amount", "개설 시재는 0 이상이어야 합니다")

    if not isinstance(restaurant_id, str) or not restaurant_id.strip():
        raise ValidationError("restaurant_id", "레스토랑 ID가 필요합니다")

    if request_id is not None and not validate_open_request_id(request_id):
        raise ValidationError("request_id", f"요청 ID 형식이 올바르지 않습니다: {request_id}")

    if details is not None and details.denomination_total is not None:
        if to_money(details.denomination_total) != amount:
            raise ValidationError(
                "details.denominations",
                f"권종 합계({details.denomination_total})가 개설 시재({amount})와 다릅니다",
            )

    return name.strip(), amount


def _rpc_row(data: Any) -> dict[str, Any]:
    """RPC 반환 값에서 레지스터 행 추출 (객체 또는 단일 행 목록)"""
    if isinstance(data, list) and len(data) == 1:
        data = data[0]
    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"{RpcFunctions.CREATE_REGISTER} 반환 값이 레지스터 행이 아닙니다"
        )
    return data


class RegisterLifecycleManager:
    """레지스터 개설/마감 관리자

    Args:
        store: 원격 원장 스토어
        cache: 레지스터 목록 캐시 (쓰기 후 무효화)
        fetcher: 단건 조회용 fetcher
    """

    def __init__(
        self,
        store: ILedgerStore,
        cache: RegisterListCache,
        fetcher: RegisterFetcher,
    ):
        self.store = store
        self.cache = cache
        self.fetcher = fetcher

        # 완료된 개설 요청 (request_id -> 결과)
        self._completed_opens: dict[str, OpenOutcome] = {}

    async def open(
        self,
        name: str,
        initial_amount: Decimal | int | float | str,
        restaurant_id: str,
        details: OpeningDetails | None = None,
        request_id: str | None = None,
    ) -> OpenOutcome:
        """레지스터 개설

        Args:
            name: 레지스터 이름
            initial_amount: 개설 시재 (>= 0)
            restaurant_id: 소유 레스토랑
            details: 개설 메타데이터 (선택)
            request_id: 중복 제출 방지용 요청 ID (선택, cr-{uuid})

        Returns:
            OpenOutcome (생성 경로 포함)

        Raises:
            ValidationError: 입력 검증 실패 (쓰기 없음)
            StoreError: RPC와 직접 INSERT 모두 실패
        """
        clean_name, amount = _validate_open(
            name, initial_amount, restaurant_id, details, request_id
        )

        if request_id is not None and request_id in self._completed_opens:
            previous = self._completed_opens[request_id]
            logger.info(
                "이미 처리된 개설 요청, 기존 레지스터 반환",
                extra={"request_id": request_id, "register_id": previous.register.id},
            )
            return OpenOutcome(
                register=previous.register,
                path=previous.path,
                fallback_reason=previous.fallback_reason,
                replayed=True,
            )

        opened_at = now_utc()
        params = {
            "name": clean_name,
            "initialAmount": str(amount),
            "restaurantId": restaurant_id,
            "openedAt": to_iso(opened_at),
            "details": details.to_dict() if details is not None else None,
            "requestId": request_id,
        }

        try:
            data = await self.store.rpc(RpcFunctions.CREATE_REGISTER, params)
            register = parse_register(_rpc_row(data))
            outcome = OpenOutcome(register=register, path=WritePath.VALIDATED)

        except MalformedResponseError as e:
            # 2xx 응답이므로 RPC는 이미 커밋됐을 수 있음. 직접 INSERT 시 중복 레지스터
            self.cache.invalidate()
            logger.error(
                "검증 RPC 응답 해석 불가, 직접 INSERT 생략",
                extra={"error": e.message, "restaurant_id": restaurant_id},
            )
            raise

        except StoreError as e:
            logger.warning(
                "검증 RPC 실패, 직접 INSERT로 레지스터 생성 (degraded write)",
                extra={"code": e.code, "error": e.message, "restaurant_id": restaurant_id},
            )
            row = register_insert_row(clean_name, amount, restaurant_id, opened_at)
            data = await self.store.insert(Tables.REGISTERS, row)
            register = parse_register(data)
            outcome = OpenOutcome(
                register=register,
                path=WritePath.FALLBACK,
                fallback_reason=str(e),
            )

        self.cache.invalidate()
        if request_id is not None:
            self._completed_opens[request_id] = outcome

        logger.info(
            f"레지스터 개설: {register.name}",
            extra={
                "register_id": register.id,
                "initial_amount": str(register.initial_amount),
                "path": outcome.path.value,
            },
        )
        return outcome

    async def close(self, register_id: str) -> Register:
        """레지스터 마감

        current_amount는 변경하지 않음.

        Raises:
            ValidationError: register_id 누락
            RegisterNotFoundError: 레지스터 없음
            AlreadyClosedError: 이미 마감됨 (다른 단말이 먼저 마감한 경우 포함)
        """
        if not register_id:
            raise ValidationError("register_id", "레지스터 ID가 필요합니다")

        register = await self.fetcher.get_register(register_id)
        if register.is_closed:
            raise AlreadyClosedError(register)

        closed_at = to_iso(now_utc())
        rows = await self.store.update(
            Tables.REGISTERS,
            {
                "status": RegisterStatus.CLOSED.value,
                "closedAt": closed_at,
                "updatedAt": closed_at,
            },
            filters={"id": register_id, "status": RegisterStatus.OPEN.value},
        )

        if not rows:
            # 조회와 UPDATE 사이에 다른 단말이 마감
            self.cache.invalidate()
            current = await self.fetcher.get_register(register_id)
            logger.warning(
                "조건부 마감 불일치, 이미 마감된 레지스터",
                extra={"register_id": register_id},
            )
            raise AlreadyClosedError(current)

        self.cache.invalidate()
        closed = parse_register(rows[0])

        logger.info(
            f"레지스터 마감: {closed.name}",
            extra={"register_id": closed.id, "current_amount": str(closed.current_amount)},
        )
        return closed
