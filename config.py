import os
import sys

from dotenv import load_dotenv

from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows test scripts to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)


def _abort(name: str, reason, expected: str) -> None:
    print(f"\n ERROR: Invalid {name} configuration\n", file=sys.stderr)
    print(f"Reason: {reason}", file=sys.stderr)
    print(f"Expected: {expected}", file=sys.stderr)
    print(f"Current value: {os.environ.get(name, '(not set)')}\n", file=sys.stderr)
    sys.exit(1)


def _positive_int(name: str, default: str) -> int:
    try:
        value = int(os.environ.get(name, default))
        if value <= 0:
            raise ValueError(f"{name} must be positive (got: {value})")
        return value
    except ValueError as e:
        _abort(name, e, "Positive integer")


def _positive_float(name: str, default: str) -> float:
    try:
        value = float(os.environ.get(name, default))
        if value <= 0:
            raise ValueError(f"{name} must be positive (got: {value})")
        return value
    except ValueError as e:
        _abort(name, e, "Positive number (e.g., 5, 10.5)")


# Parse RUNTIME_ENVIRONMENT with clear error message on misconfiguration
try:
    RUNTIME_ENVIRONMENT = RuntimeEnvironment(os.environ.get("RUNTIME_ENVIRONMENT", "DEV"))
except ValueError as e:
    _abort("RUNTIME_ENVIRONMENT", e, ", ".join(env.value for env in RuntimeEnvironment))

WEBAPP_HOST = os.environ.get("WEBAPP_HOST", "0.0.0.0")
WEBAPP_PORT = _positive_int("WEBAPP_PORT", os.environ.get("PORT", "3000"))

# Order lifecycle
ORDER_TTL_MINUTES = _positive_int("ORDER_TTL_MINUTES", "60")
ORDER_SWEEP_INTERVAL_SECONDS = _positive_int("ORDER_SWEEP_INTERVAL_SECONDS", "3600")
# When set, order tokens are HMAC signatures over the order's immutable fields
# instead of random values stored next to the order
ORDER_TOKEN_SECRET = os.environ.get("ORDER_TOKEN_SECRET", "")

# Administrative read access (X-Admin-Key header)
ADMIN_SECRET_KEY = os.environ.get("ADMIN_SECRET_KEY", "")

# PayGate payment gateway
PAYGATE_API_URL = os.environ.get("PAYGATE_API_URL", "https://api.paygate.to").rstrip("/")
PAYGATE_CHECKOUT_URL = os.environ.get("PAYGATE_CHECKOUT_URL", "https://checkout.paygate.to").rstrip("/")
PAYGATE_PROVIDER = os.environ.get("PAYGATE_PROVIDER", "wert")
PAYGATE_CURRENCY = os.environ.get("PAYGATE_CURRENCY", "USD")
WALLET_ADDRESS = os.environ.get("WALLET_ADDRESS", "")
# Public base URL of this service, the gateway calls {CALLBACK_BASE_URL}/payment-callback/{order_id}
CALLBACK_BASE_URL = os.environ.get("CALLBACK_BASE_URL", "").rstrip("/")
GATEWAY_TIMEOUT_SECONDS = _positive_float("GATEWAY_TIMEOUT_SECONDS", "10")

# Storefront
STOREFRONT_SUCCESS_URL = os.environ.get("STOREFRONT_SUCCESS_URL", "")
STORE_NAME = os.environ.get("STORE_NAME", "Store")
CORS_ALLOWED_ORIGINS = [
    origin.strip() for origin in os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",") if origin.strip()
]

# Notification sinks
DISCORD_WEBHOOK_URL = os.environ.get("DISCORD_WEBHOOK_URL", os.environ.get("DISCORD_WEBHOOK", ""))

# Telegram admin notifications (optional, enabled when both are set)
TOKEN = os.environ.get("TOKEN", "")
try:
    ADMIN_ID_LIST = [
        int(admin_id.strip()) for admin_id in os.environ.get("ADMIN_ID_LIST", "").split(",") if admin_id.strip()
    ]
except ValueError as e:
    _abort("ADMIN_ID_LIST", e, "comma-separated list of Telegram user IDs (e.g., 123456789,987654321)")

# Logging Configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"  # Mask sensitive data in logs

# Log Retention: Environment-specific defaults
if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV:
    LOG_RETENTION_DAYS = _positive_int("LOG_RETENTION_DAYS", "30")
else:
    LOG_RETENTION_DAYS = _positive_int("LOG_RETENTION_DAYS", "5")
