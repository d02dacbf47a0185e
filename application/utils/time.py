from datetime import UTC, datetime


def format_last_updated(timestamp: datetime, now: datetime | None = None) -> str:
    """Human readable age of a rate snapshot, e.g. '5 minutes ago'."""
    now = now or datetime.now(tz=UTC)
    diff_minutes = int((now - timestamp).total_seconds() // 60)

    if diff_minutes < 1:
        return 'just now'
    if diff_minutes < 60:
        return f"{diff_minutes} minute{'s' if diff_minutes > 1 else ''} ago"

    diff_hours = diff_minutes // 60
    if diff_hours < 24:
        return f"{diff_hours} hour{'s' if diff_hours > 1 else ''} ago"

    return timestamp.strftime('%Y-%m-%d %H:%M:%S')
