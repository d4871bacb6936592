"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ILedgerStore(Protocol):
    """원격 원장 스토어 인터페이스

    행 단위 select/insert/update와 RPC 호출만 제공.
    각 호출은 일시적 오류(TransientStoreError)를 낼 수 있으며,
    재시도 여부는 호출하는 쪽(fetcher/lifecycle/recorder)이 결정.
    """

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
        """행 조회

        Args:
            table: 테이블 이름
            columns: 조회 컬럼 (콤마 구분, 기본 전체)
            filters: 동등 비교 필터 {컬럼: 값}
            order_by: 정렬 컬럼
            descending: 내림차순 여부
            limit: 최대 행 수

        Returns:
            행 딕셔너리 목록
        """
        ...

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """행 삽입

        Returns:
            스토어가 저장한 행 (id, 타임스탬프 포함)
        """
        ...

    async def update(
        self,
        table: str,
        values: dict[str, Any],
        *,
        filters: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """조건부 행 수정

        Args:
            table: 테이블 이름
            values: 변경할 컬럼 값
            filters: 동등 비교 필터 (비어 있으면 안 됨)

        Returns:
            수정된 행 목록 (조건 불일치 시 빈 목록)
        """
        ...

    async def rpc(self, function: str, params: dict[str, Any]) -> Any:
        """저장 함수(RPC) 호출

        Returns:
            함수 반환 값 (JSON)
        """
        ...


@runtime_checkable
class INotifier(Protocol):
    """알림 서비스 인터페이스

    degraded write, 잔액 불일치 등 운영자 확인이 필요한 상황을 외부로 전송.
    """

    async def send(
        self,
        message: str,
        level: str = "INFO",
        extra: dict[str, Any] | None = None,
    ) -> bool:
        """알림 전송

        Args:
            message: 알림 메시지
            level: 알림 레벨 (INFO, WARNING, ERROR, CRITICAL)
            extra: 추가 데이터 (선택)

        Returns:
            전송 성공 여부
        """
        ...
