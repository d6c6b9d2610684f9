"""Unguessable link identifiers for admin and trust URLs."""

from __future__ import annotations

import secrets


def generate_secure_link_id(nbytes: int = 16) -> str:
    """Return URL-safe base64 (no padding) of ``nbytes`` random bytes."""
    return secrets.token_urlsafe(nbytes)


__all__ = ["generate_secure_link_id"]
