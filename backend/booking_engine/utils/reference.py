import secrets

# 16 random bytes -> 22 url-safe characters.
_TOKEN_BYTES = 16


def new_reference_code() -> str:
    """Opaque guest-facing lookup token, not derivable from booking ids."""
    return secrets.token_urlsafe(_TOKEN_BYTES)
