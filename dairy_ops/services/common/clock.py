# dairy_ops/services/common/clock.py
"""
Calendar "today" for business rules.

Skip and cancel cut-offs compare calendar dates in the operating timezone,
not the server's. Services accept any ``Clock`` so tests can pin the date.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Optional

import pytz

from dairy_ops.config.settings import settings

Clock = Callable[[], date]


def local_now(timezone: Optional[str] = None) -> datetime:
    """Current datetime in ``timezone`` (default: the configured one)."""
    tz_obj = pytz.timezone(timezone or settings.TIMEZONE)
    return datetime.now(tz_obj)


def local_today(timezone: Optional[str] = None) -> date:
    """Current calendar date in ``timezone`` (default: the configured one)."""
    return local_now(timezone).date()
