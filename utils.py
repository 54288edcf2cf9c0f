import json
import math
from datetime import date, datetime, timezone

SECONDS_PER_DAY = 24 * 60 * 60

def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)

def parse_intervals(value):
    """Normalize a reminder interval list to a list of ints.

    Accepts a native list, a JSON array string ("[30, 15, 7]") or a
    comma-separated string ("30,15,7"). Returns None when nothing usable
    is found so callers can fall back to another source.
    """
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = json.loads(text)
        except ValueError:
            value = text.split(",")
        if isinstance(value, int) and not isinstance(value, bool):
            value = [value]
    if not isinstance(value, (list, tuple)):
        return None

    out = []
    for x in value:
        if isinstance(x, bool):
            continue
        if isinstance(x, float) and not x.is_integer():
            continue
        if isinstance(x, str):
            x = x.strip()
        try:
            n = int(x)
        except (TypeError, ValueError):
            continue
        if n not in out:
            out.append(n)
    return out or None

def days_until_expiry(end_date, now: datetime) -> int:
    """Whole days left until end_date, rounded up.

    A bare date counts as midnight of that day.
    """
    if not isinstance(end_date, datetime):
        end_date = datetime.combine(end_date, datetime.min.time())
    millis = round((end_date - now).total_seconds() * 1000)
    return math.ceil(millis / (SECONDS_PER_DAY * 1000))

def matching_interval(days: int, intervals) -> int | None:
    """Return the interval equal to days, if any. Exact match only."""
    for off in intervals or []:
        if off == days:
            return off
    return None

def urgency_for(days_left: int) -> str:
    if days_left <= 7:
        return "urgent"
    if days_left <= 14:
        return "important"
    return "notice"

def format_days_left(days_left: int) -> str:
    if days_left <= 0:
        return "EXPIRED"
    return f"{days_left} day{'' if days_left == 1 else 's'} remaining"

def format_expiry_date(d: date) -> str:
    return f"{d:%A, %B %d, %Y}"
