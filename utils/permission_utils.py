"""
Permission utilities for the administrative API.

Admin endpoints require a pre-shared key in the X-Admin-Key header. It is a
separate credential from order tokens and never unlocks order mutations.
"""

import secrets

from exceptions.authorization import AdminAuthorizationException


def is_admin_key_valid(provided_key: str | None, admin_secret_key: str | None) -> bool:
    """
    Check an admin key in constant time.

    An unconfigured admin key disables admin access entirely.

    Example:
        >>> is_admin_key_valid("s3cr3t", "s3cr3t")
        True
        >>> is_admin_key_valid(None, "s3cr3t")
        False
    """
    if not provided_key or not admin_secret_key:
        return False
    return secrets.compare_digest(provided_key.encode("utf-8"), admin_secret_key.encode("utf-8"))


def require_admin_key(provided_key: str | None, admin_secret_key: str | None) -> None:
    """
    Raises:
        AdminAuthorizationException: If the key is missing or incorrect
    """
    if not is_admin_key_valid(provided_key, admin_secret_key):
        raise AdminAuthorizationException()
