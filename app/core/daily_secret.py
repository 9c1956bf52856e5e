"""Per-day attendance secrets.

Each calendar day (UTC) gets its own secret, computed as an HMAC-SHA256 of the
``YYYY-MM-DD`` date key under the long-lived base secret. Nothing is cached:
every call recomputes from its explicit inputs, so a day rollover can never
serve a stale value.
"""
import hashlib
import hmac
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from app.core.exceptions import ConfigurationError

DATE_KEY_FORMAT = "%Y-%m-%d"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo) and convert aware ones."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def get_utc_date_key(moment: Optional[datetime] = None) -> str:
    moment = as_utc(moment or utcnow())
    return moment.strftime(DATE_KEY_FORMAT)


def parse_date_key(date_key: str) -> date:
    return datetime.strptime(date_key, DATE_KEY_FORMAT).date()


def end_of_utc_day(moment: Optional[datetime] = None) -> datetime:
    moment = as_utc(moment or utcnow())
    return moment.replace(hour=23, minute=59, second=59, microsecond=999000)


def _require_base_secret(base_secret: Optional[str]) -> bytes:
    if not base_secret or not base_secret.strip():
        raise ConfigurationError("Attendance base secret is not configured")
    return base_secret.encode("utf-8")


def derive_daily_secret(base_secret: str, date_key: str) -> str:
    key = _require_base_secret(base_secret)
    return hmac.new(key, date_key.encode("utf-8"), hashlib.sha256).hexdigest()


def is_valid_daily_secret(candidate: str, base_secret: str, now: Optional[datetime] = None) -> bool:
    """Accept today's secret or yesterday's, nothing else."""
    if not candidate:
        return False
    today = as_utc(now or utcnow())
    for offset in (0, 1):
        expected = derive_daily_secret(base_secret, get_utc_date_key(today - timedelta(days=offset)))
        if hmac.compare_digest(candidate, expected):
            return True
    return False
