"""
Secret Generator

Generates random secrets for ADMIN_SECRET_KEY and ORDER_TOKEN_SECRET.

Usage:
    python -m utils.secret_generator [length_bytes]

Example:
    python -m utils.secret_generator
    Output: 3f9c0a...
"""

import secrets
import sys

DEFAULT_LENGTH_BYTES = 32


def generate_secret(length_bytes: int = DEFAULT_LENGTH_BYTES) -> str:
    """
    Returns a hex secret of 2 * length_bytes characters.

    Raises:
        ValueError: length_bytes below 16 (secrets shorter than 32 chars fail startup validation)
    """
    if length_bytes < 16:
        raise ValueError(f"length_bytes must be at least 16 (got: {length_bytes})")
    return secrets.token_hex(length_bytes)


def main():
    """Command-line interface for secret generation."""
    if len(sys.argv) > 2:
        print("Usage: python -m utils.secret_generator [length_bytes]")
        sys.exit(1)

    try:
        length_bytes = int(sys.argv[1]) if len(sys.argv) == 2 else DEFAULT_LENGTH_BYTES
        secret = generate_secret(length_bytes)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print("\nAdd to your .env file:")
    print(f"ADMIN_SECRET_KEY={secret}")
    print("\nOptional, for signed order tokens (use a different value):")
    print(f"ORDER_TOKEN_SECRET={generate_secret(length_bytes)}")


if __name__ == "__main__":
    main()
