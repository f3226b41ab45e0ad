from datetime import datetime, timedelta, timezone


def iso_now() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def relative_time(created_at: datetime, now: datetime = None) -> str:
    """Convert datetime to relative time string"""
    if now is None:
        now = datetime.now()
    delta = now - created_at
    if delta < timedelta(minutes=1):
        return "Just now"
    elif delta < timedelta(hours=1):
        return f"{delta.seconds//60}m ago"
    elif delta < timedelta(days=1):
        return f"{delta.seconds//3600}h ago"
    return f"{delta.days}d ago"
