from datetime import datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from clinic.core.config import settings


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in the clinic's timezone, returned naive to match stored appointment times."""

    def __init__(self, timezone: str | None = None) -> None:
        self._tz = ZoneInfo(timezone or settings.clinic_timezone)

    def now(self) -> datetime:
        return datetime.now(self._tz).replace(tzinfo=None)


class FixedClock:
    def __init__(self, instant: datetime) -> None:
        self.instant = instant

    def now(self) -> datetime:
        return self.instant
