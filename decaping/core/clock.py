"""Wall-clock helpers.

All timestamps are timezone-aware UTC. Calendar dates (operation ids, the
performance trend) are taken in the site timezone, ``SITE_TIMEZONE``.
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def now() -> datetime:
    return datetime.now(timezone.utc)


def site_date(site_timezone: str, moment: datetime | None = None) -> date:
    """Calendar date of ``moment`` (default: now) at the mine site."""
    moment = moment or now()
    return moment.astimezone(ZoneInfo(site_timezone)).date()
