from datetime import UTC, datetime


def now_in_sec() -> int:
    """Return the current UTC time as whole epoch seconds."""
    return int(datetime.now(UTC).timestamp())
