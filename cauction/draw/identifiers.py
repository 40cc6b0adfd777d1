"""Identifier helpers for conflicts raised by the engine."""

from __future__ import annotations

import secrets
import string

BASE62_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase


def generate_conflict_id(prefix: str = "conflict", length: int = 12) -> str:
    """Return a random conflict identifier such as ``conflict-4fZ0...``."""
    if length <= 0:
        raise ValueError("length must be positive")
    suffix = "".join(secrets.choice(BASE62_ALPHABET) for _ in range(length))
    return f"{prefix}-{suffix}"


__all__ = ["BASE62_ALPHABET", "generate_conflict_id"]
