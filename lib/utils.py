# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application:
# - UUID normalization for queries
# - Date/time helpers (ISO timestamps, YYYY-MM-DD dates)
# - Lenient numeric coercion for form-posted values
# - Search term sanitizing for PostgREST filter strings
# =============================================================================

from datetime import date, datetime, timezone
from typing import Any
from uuid import UUID


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Handles both string and UUID objects, ensuring consistent string output.

    Args:
        value: UUID as string or UUID object

    Returns:
        String representation of the UUID
    """
    return str(value) if isinstance(value, UUID) else value


def is_uuid(value: Any) -> bool:
    """Check whether a value parses as a UUID."""
    if isinstance(value, UUID):
        return True
    try:
        UUID(str(value))
        return True
    except (TypeError, ValueError):
        return False


# =============================================================================
# Date Utilities
# =============================================================================

def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time in ISO 8601, as stored in created_at/updated_at."""
    return utc_now().isoformat()


def today_iso() -> str:
    """Today's UTC date as YYYY-MM-DD."""
    return utc_now().date().isoformat()


def parse_date(value: Any) -> date | None:
    """
    Parse a date from a date, datetime, or ISO string.

    Accepts "2024-03-01", "2024-03-01T10:30:00", "2024-03-01T10:30:00Z".

    Returns:
        The date part, or None when the value is empty or unparseable
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO datetime string; date-only strings become midnight."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def to_date_string(value: Any) -> str | None:
    """Normalize a date-ish value to YYYY-MM-DD, or None."""
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else None


# =============================================================================
# Numeric Utilities
# =============================================================================

def to_float(value: Any, default: float = 0.0) -> float:
    """Coerce a form value to float, falling back to default."""
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def to_int(value: Any, default: int = 0) -> int:
    """Coerce a form value to int (via float, so "3.0" works)."""
    if value is None or value == "":
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def format_currency(amount: Any, currency: str = "SAR") -> str:
    """Format an amount for display, e.g. "SAR 1,250.00"."""
    return f"{currency} {to_float(amount):,.2f}"


# =============================================================================
# Query Utilities
# =============================================================================

def sanitize_search(term: str | None) -> str:
    """
    Strip characters that break PostgREST `or=(...)` filter strings.

    Commas separate conditions and parentheses group them, so neither can
    appear inside a value.
    """
    if not term:
        return ""
    for char in ",()":
        term = term.replace(char, " ")
    return term.strip()


def ilike_any(columns: list[str] | tuple[str, ...], term: str) -> str:
    """
    Build an `or_` filter matching term as a substring of any column.

    Example:
        ilike_any(["name", "code"], "abc") -> "name.ilike.%abc%,code.ilike.%abc%"
    """
    return ",".join(f"{column}.ilike.%{term}%" for column in columns)
