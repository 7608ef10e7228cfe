"""Injectable wall clock used for TTLs and quota periods."""
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def month_start(moment: datetime) -> datetime:
    """First instant of the calendar month containing ``moment``."""
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
