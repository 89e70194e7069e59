from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def to_iso_z(dt: datetime) -> str:
    """Format as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC. Naive values are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    # strftime("%Y") does not pad years below 1000
    stamp = f"{dt.year:04d}-" + dt.strftime("%m-%dT%H:%M:%S")
    return f"{stamp}.{dt.microsecond // 1000:03d}Z"


def utc_now_iso(now: Optional[datetime] = None) -> str:
    return to_iso_z(now or datetime.now(timezone.utc))
