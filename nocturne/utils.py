"""
utils.py - Small helpers shared by the Nocturne journal workflows

- `today_date_string()` returns the server-local calendar date used to scope
  per-day queries and to stamp new goals (`YYYY-MM-DD`).
- `truncate()` shortens text for log lines and diagnostics.
"""

import os
from datetime import datetime
from typing import Optional

import pytz

# Timezone that defines "today" for the server (UTC unless configured)
LOCAL_TIMEZONE = pytz.timezone(os.environ.get("LOCAL_TIMEZONE", "UTC"))

DATE_FORMAT = "%Y-%m-%d"


def today_date_string(now: Optional[datetime] = None) -> str:
    """
    Return today's date in LOCAL_TIMEZONE as a `YYYY-MM-DD` string.

    A naive `now` is interpreted as UTC.
    """
    utc_now = now or datetime.utcnow()
    if utc_now.tzinfo is None:
        utc_now = utc_now.replace(tzinfo=pytz.utc)
    return utc_now.astimezone(LOCAL_TIMEZONE).strftime(DATE_FORMAT)


def truncate(text: Optional[str], limit: int = 200) -> str:
    """Return at most `limit` characters of `text` ('' for None)."""
    if not text:
        return ""
    return text[:limit]
