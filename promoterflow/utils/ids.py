"""Identifier generation."""

from ulid import ULID


def generate_id(prefix: str = "") -> str:
    """Generate a text id (ULID format), optionally prefixed, e.g. ``tmp-01J...``."""
    value = str(ULID())
    return f"{prefix}{value}" if prefix else value
