from clinic.core.clock import Clock, SystemClock
from clinic.core.db import get_session

__all__ = ["get_clock", "get_session"]

_system_clock = SystemClock()


def get_clock() -> Clock:
    """Source of "now" for slot searches; overridden in tests with a fixed clock."""
    return _system_clock
