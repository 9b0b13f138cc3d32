# app/helpers/time.py
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current UTC time for column defaults."""
    return datetime.now(timezone.utc)
