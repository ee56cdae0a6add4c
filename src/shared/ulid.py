"""Identifier and capability token helpers."""

import secrets

import ulid

ULID_LENGTH = 26
MANAGE_TOKEN_BYTES = 32


def generate_ulid() -> str:
    """Return a string ULID for record identifiers."""
    return str(ulid.new())


def generate_manage_token() -> str:
    """Return an unguessable URL-safe token granting self-service access."""
    return secrets.token_urlsafe(MANAGE_TOKEN_BYTES)


def tokens_match(expected: str, provided: str | None) -> bool:
    if not provided:
        return False
    return secrets.compare_digest(expected.encode(), provided.encode())
