"""
레지스터 목록 Read-Through 캐시

TTL 동안 목록을 재사용하고, 쓰기 후에는 즉시 무효화.
모듈 전역 상태가 아니라 서비스가 소유하는 인스턴스.
"""

import time
from typing import Callable

from adapters.models import Register
from core.constants import CacheDefaults


class RegisterListCache:
    """레지스터 목록 캐시 (단일 엔트리)

    엔트리는 age < ttl 동안만 유효.

    Args:
        ttl: 유효 시간 (초)
        clock: 현재 시각 함수 (테스트에서 주입)
    """

    def __init__(
        self,
        ttl: float = CacheDefaults.REGISTER_LIST_TTL_SEC,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self._clock = clock
        self._entry: list[Register] | None = None
        self._stored_at: float = 0.0

    def get(self) -> list[Register] | None:
        """유효한 엔트리의 복사본 (없거나 만료되면 None)"""
        if self._entry is None:
            return None
        if self._clock() - self._stored_at >= self.ttl:
            return None
        return list(self._entry)

    def put(self, registers: list[Register]) -> None:
        self._entry = list(registers)
        self._stored_at = self._clock()

    def invalidate(self) -> None:
        self._entry = None

    @property
    def has_entry(self) -> bool:
        """만료 여부와 무관하게 엔트리 존재 여부"""
        return self._entry is not None
