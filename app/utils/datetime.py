from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_epoch(timestamp: str | int | None) -> datetime | None:
    """Convert a gateway epoch timestamp (seconds or milliseconds) to UTC."""
    if timestamp in (None, ""):
        return None
    try:
        value = int(timestamp)
    except (TypeError, ValueError):
        return None
    if value > 10**12:
        value //= 1000
    return datetime.fromtimestamp(value, tz=timezone.utc)
