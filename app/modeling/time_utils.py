from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from app.core.config import settings


def slate_tz() -> ZoneInfo:
    return ZoneInfo(settings.slate_timezone)


def slate_now() -> datetime:
    return datetime.now(tz=slate_tz())


def slate_today() -> date:
    return slate_now().date()


def previous_day(day: date) -> date:
    return day - timedelta(days=1)
