"""Date helpers. All stored timestamps are naive UTC."""
from datetime import date, datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def add_days(start: datetime, days: int) -> datetime:
    """Exact day arithmetic, not calendar months."""
    return start + timedelta(days=days)


def start_of_day(moment: Optional[datetime] = None) -> datetime:
    moment = moment or utcnow()
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def parse_kickoff(match_date: str, match_time: Optional[str]) -> datetime:
    """Build a kickoff timestamp from the provider's split date and time fields."""
    return datetime.strptime(f"{match_date} {match_time or '00:00'}:00", "%Y-%m-%d %H:%M:%S")


def parse_iso_date(value: str) -> date:
    return datetime.strptime(value, "%Y-%m-%d").date()
