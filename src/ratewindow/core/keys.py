"""
Key and value encoding for fixed-window counters.

Every counter lives under ``KEY_PREFIX + action_id``. The increment and the
status paths must agree on the prefix, otherwise they address different
counters.
"""

KEY_PREFIX = "ARRL:"


def counter_key(action_id: str, prefix: str = KEY_PREFIX) -> str:
    """Build the store key for an action."""
    return f"{prefix}{action_id}"


def action_id_from_key(key: str, prefix: str = KEY_PREFIX) -> str:
    """
    Strip the prefix from a store key.

    Raises:
        ValueError: If the key does not carry the prefix.
    """
    if not key.startswith(prefix):
        raise ValueError(f"Key {key!r} does not start with prefix {prefix!r}")
    return key[len(prefix):]


def parse_counter(raw: str | bytes | None) -> tuple[int, bool]:
    """
    Parse a stored counter value.

    Returns:
        ``(value, malformed)``. An absent key parses to ``(0, False)``.
        A value that is not an integer parses to ``(0, True)`` so callers
        can tell corrupted state apart from a missing key.
    """
    if raw is None:
        return 0, False

    if isinstance(raw, bytes):
        try:
            raw = raw.decode()
        except UnicodeDecodeError:
            return 0, True

    try:
        return int(raw), False
    except ValueError:
        return 0, True
