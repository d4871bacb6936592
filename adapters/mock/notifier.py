"""
Mock 알림 서비스

운영자 알림을 메모리에 기록. INotifier Protocol 준수.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from core.utils.timezone import now_utc


@dataclass(frozen=True)
class NotificationRecord:
    """알림 기록"""

    message: str
    level: str
    extra: dict[str, Any] = field(default_factory=dict, hash=False)
    sent: bool = True
    timestamp: datetime = field(default_factory=now_utc)

    @property
    def register_id(self) -> str | None:
        """알림 대상 레지스터 (extra에 없으면 None)"""
        return self.extra.get("register_id")


class MockNotifier:
    """Mock 알림 서비스

    Args:
        should_fail: True면 모든 전송 실패
        fail_times: 앞에서부터 실패시킬 전송 횟수

    사용 예시:
    ```python
    notifier = MockNotifier()
    service = CashLedgerService(store, notifier=notifier)
    ...
    assert notifier.get_criticals()[0].register_id == register.id
    ```
    """

    def __init__(self, should_fail: bool = False, fail_times: int = 0):
        self.should_fail = should_fail
        self.fail_times = fail_times
        self.notifications: list[NotificationRecord] = []

    async def send(
        self,
        message: str,
        level: str = "INFO",
        extra: dict[str, Any] | None = None,
    ) -> bool:
        sent = not self.should_fail and self.fail_times <= 0
        if self.fail_times > 0:
            self.fail_times -= 1

        self.notifications.append(
            NotificationRecord(message=message, level=level, extra=dict(extra or {}), sent=sent)
        )
        return sent

    def clear(self) -> None:
        self.notifications.clear()

    def get_by_level(self, level: str) -> list[NotificationRecord]:
        return [n for n in self.notifications if n.level == level]

    def get_warnings(self) -> list[NotificationRecord]:
        return self.get_by_level("WARNING")

    def get_criticals(self) -> list[NotificationRecord]:
        return self.get_by_level("CRITICAL")

    def for_register(self, register_id: str) -> list[NotificationRecord]:
        """특정 레지스터에 대한 알림"""
        return [n for n in self.notifications if n.register_id == register_id]

    @property
    def levels(self) -> list[str]:
        """전송 순서대로 알림 레벨"""
        return [n.level for n in self.notifications]

    @property
    def last_notification(self) -> NotificationRecord | None:
        return self.notifications[-1] if self.notifications else None

    @property
    def message_count(self) -> int:
        return len(self.notifications)

    @property
    def failed_count(self) -> int:
        return sum(1 for n in self.notifications if not n.sent)
