"""Request text helpers for trip endpoints."""

from typing import Optional, Tuple

MAX_STATION_INPUT_LENGTH = 100
UNSAFE_CHARS = str.maketrans("", "", "<>'\"&")


def sanitize_station_input(value: Optional[str]) -> str:
    """Clean a station code taken from the query string.

    Examples:
        "  ASD " -> "ASD"
        "<ut>" -> "ut"
    """
    if not value:
        return ""
    return value.strip()[:MAX_STATION_INPUT_LENGTH].translate(UNSAFE_CHARS)


def parse_departure(value: str) -> Tuple[int, int]:
    """Split an HH:MM departure into (hour, minute).

    Range checks are left to TripQuery.validate().

    Raises:
        ValueError: if the text is not two colon separated integers
    """
    parts = (value or "").strip().split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid departure format: {value}. Use HH:MM.")
    return int(parts[0]), int(parts[1])
