from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Make a naive datetime timezone-aware (UTC). Already-aware datetimes pass through."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def parse_iso_datetime(value: object) -> Optional[datetime]:
    """Parse an ISO-8601 string from the API. Returns None for anything unusable."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return ensure_utc(datetime.fromisoformat(raw))
    except ValueError:
        return None


def resolve_asset_url(path: Optional[str], asset_base: str) -> Optional[str]:
    """Absolute URLs pass through, server-relative paths are joined to the asset host."""
    if not path:
        return None
    if path.startswith("http://") or path.startswith("https://"):
        return path
    return f"{asset_base.rstrip('/')}/{path.lstrip('/')}"


def format_points(points: int | float) -> str:
    """Compact point display used on the leaderboard: 1.2M, 12K, 999."""
    if points >= 1_000_000:
        return f"{points / 1_000_000:.1f}M"
    if points >= 1_000:
        return f"{points / 1_000:.0f}K"
    return str(int(points))
