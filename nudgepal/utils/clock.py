"""Clock abstraction so engine callers never read system time implicitly"""

from datetime import date, datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def today(self) -> date:
        ...

    def now(self) -> datetime:
        ...


class SystemClock:
    """Local calendar date, UTC timestamps"""

    def today(self) -> date:
        return date.today()

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Frozen clock for tests and replays"""

    def __init__(self, today: date, now: datetime | None = None):
        self._today = today
        self._now = now or datetime(today.year, today.month, today.day, 12, 0, tzinfo=timezone.utc)

    def today(self) -> date:
        return self._today

    def now(self) -> datetime:
        return self._now

    def advance(self, days: int = 1) -> None:
        self._today += timedelta(days=days)
        self._now += timedelta(days=days)
