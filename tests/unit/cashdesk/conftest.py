"""
캐시 원장 테스트 픽스처

Mock 스토어, 가짜 시계, 대기 기록용 sleep 제공.
"""

from unittest.mock import AsyncMock

import pytest

from adapters.mock.ledger_store import MockLedgerStore
from adapters.mock.notifier import MockNotifier
from cashdesk.cache import RegisterListCache
from cashdesk.fetcher import RegisterFetcher


RESTAURANT_ID = "rest-1"


class FakeClock:
    """수동으로 진행하는 monotonic 시계"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MockLedgerStore:
    return MockLedgerStore()


@pytest.fixture
def notifier() -> MockNotifier:
    return MockNotifier()


@pytest.fixture
def sleep() -> AsyncMock:
    """실제로 대기하지 않고 호출만 기록"""
    return AsyncMock()


@pytest.fixture
def cache(clock: FakeClock) -> RegisterListCache:
    return RegisterListCache(clock=clock)


@pytest.fixture
def fetcher(store: MockLedgerStore, cache: RegisterListCache, sleep: AsyncMock) -> RegisterFetcher:
    return RegisterFetcher(store, cache, restaurant_id=RESTAURANT_ID, sleep=sleep)
