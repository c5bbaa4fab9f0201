"""
Configuration Validation Module

Validates critical configuration values at startup to fail-fast
with clear error messages instead of runtime failures.
"""

import sys
from typing import Optional

MIN_SECRET_LENGTH = 32


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


def validate_required_config(value: Optional[str], name: str, example: str = "") -> None:
    """
    Validate that a required config value is set.

    Raises:
        ConfigValidationError: If value is missing
    """
    if not value:
        error_msg = f"{name} is required but not set!"
        if example:
            error_msg += f"\nAdd to .env: {name}={example}"
        raise ConfigValidationError(error_msg)


def validate_secret(secret: Optional[str], name: str, required: bool = True) -> None:
    """
    Validate a shared secret (admin key, token signing key).

    Args:
        secret: The configured value
        name: Name of the config variable
        required: When False an unset secret passes, a set one must still be strong

    Raises:
        ConfigValidationError: If secret is missing or too weak
    """
    if not secret or len(secret.strip()) == 0:
        if not required:
            return
        raise ConfigValidationError(
            f"{name} is required and must not be empty!\n"
            "Generate a secure secret with: python -m utils.secret_generator\n"
            f"Add to .env: {name}=<your-generated-secret>"
        )

    if len(secret) < MIN_SECRET_LENGTH:
        raise ConfigValidationError(
            f"{name} is too weak (length: {len(secret)}, minimum: {MIN_SECRET_LENGTH})!\n"
            "Generate a secure secret with: python -m utils.secret_generator"
        )


def validate_url(value: Optional[str], name: str) -> None:
    validate_required_config(value, name, "https://example.com")
    if not value.startswith(("http://", "https://")):
        raise ConfigValidationError(f"{name} must be an http(s) URL (got: {value})")


def validate_startup_config(config_module) -> None:
    """
    Validate all critical configuration at startup.

    Raises:
        ConfigValidationError: If any validation fails
    """
    validate_required_config(config_module.WALLET_ADDRESS, 'WALLET_ADDRESS', '<your-payout-wallet-address>')
    validate_url(config_module.CALLBACK_BASE_URL, 'CALLBACK_BASE_URL')
    validate_url(config_module.PAYGATE_API_URL, 'PAYGATE_API_URL')
    validate_url(config_module.PAYGATE_CHECKOUT_URL, 'PAYGATE_CHECKOUT_URL')

    validate_secret(getattr(config_module, 'ADMIN_SECRET_KEY', None), 'ADMIN_SECRET_KEY')
    validate_secret(getattr(config_module, 'ORDER_TOKEN_SECRET', None), 'ORDER_TOKEN_SECRET', required=False)


def validate_or_exit(config_module) -> None:
    """
    Validate configuration and exit with error code 1 if validation fails.

    This is the main entry point for startup validation.
    """
    try:
        validate_startup_config(config_module)
    except ConfigValidationError as e:
        print(f"\n ERROR: Configuration Validation Failed\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        print("\nCheckout service startup aborted. Please fix configuration and try again.\n", file=sys.stderr)
        sys.exit(1)
