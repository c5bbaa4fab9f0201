"""
Centralized Logging Configuration

Provides logging for the checkout service with:
- Configurable log levels
- Automatic log rotation
- Secret masking so order tokens, gateway credentials and customer PII never reach the log files
"""

import logging
import logging.handlers
import re
from pathlib import Path
from typing import Pattern

import config


class SecretMaskingFilter(logging.Filter):
    """
    Logging filter that masks sensitive data in log records.

    Masks:
    - Order tokens and gateway IPN tokens
    - Admin keys and API secrets
    - Deposit addresses and transaction hashes
    - Customer email addresses and phone numbers
    """

    PATTERNS: list[tuple[Pattern, str]] = [
        # Order and gateway credentials
        (re.compile(r'(order[_-]?token["\']?\s*[:=]\s*["\']?)([A-Za-z0-9_\-\.:]{16,})(["\']?)', re.IGNORECASE), r'\1[REDACTED_ORDER_TOKEN]\3'),
        (re.compile(r'(ipn[_-]?token["\']?\s*[:=]\s*["\']?)([A-Za-z0-9_\-%\.]{8,})(["\']?)', re.IGNORECASE), r'\1[REDACTED_IPN_TOKEN]\3'),
        (re.compile(r'(admin[_-]?(secret[_-]?)?key["\']?\s*[:=]\s*["\']?)([^\s"\']+)(["\']?)', re.IGNORECASE), r'\1[REDACTED_ADMIN_KEY]\4'),
        (re.compile(r'(api[_-]?(key|secret)["\']?\s*[:=]\s*["\']?)([A-Za-z0-9_\-]{20,})(["\']?)', re.IGNORECASE), r'\1[REDACTED_API_SECRET]\4'),

        # Bot tokens
        (re.compile(r'(token["\']?\s*[:=]\s*["\']?)([A-Za-z0-9_\-:]{20,})(["\']?)', re.IGNORECASE), r'\1[REDACTED_TOKEN]\3'),

        # Discord webhook URLs embed their own secret
        (re.compile(r'(discord(app)?\.com/api/webhooks/)\S+', re.IGNORECASE), r'\1[REDACTED_WEBHOOK]'),

        # Deposit addresses as query parameters (URL-encoded by the gateway)
        (re.compile(r'(address(_in)?=)([^&\s]{20,})', re.IGNORECASE), r'\1[REDACTED_CRYPTO_ADDRESS]'),

        # Crypto addresses (BTC, ETH, LTC, SOL)
        (re.compile(r'\b(bc1|ltc1|0x)[a-zA-Z0-9]{25,}\b', re.IGNORECASE), '[REDACTED_CRYPTO_ADDRESS]'),

        # Transaction hashes (64 hex chars, optional 0x prefix)
        (re.compile(r'\b(0x)?([a-fA-F0-9]{64})\b'), '[REDACTED_TX_HASH]'),

        # Email addresses (PII)
        (re.compile(r'\b([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\b'), '[REDACTED_EMAIL]'),

        # Phone numbers (various formats)
        (re.compile(r'(?<![\w.])(\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}\b'), '[REDACTED_PHONE]'),
    ]

    @classmethod
    def mask(cls, text: str) -> str:
        for pattern, replacement in cls.PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Mask secrets in the message and its arguments.

        Returns:
            True (always - we modify but don't block records)
        """
        if record.msg:
            record.msg = self.mask(str(record.msg))

        if record.args and isinstance(record.args, tuple):
            record.args = tuple(self.mask(arg) if isinstance(arg, str) else arg for arg in record.args)

        return True


def setup_logging():
    """
    Initialize centralized logging configuration.

    Call this function once at application startup (in run.py).

    Configuration:
    - Log level from config.LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)
    - Automatic rotation every midnight
    - Keeps logs for config.LOG_RETENTION_DAYS days
    - Masks secrets if config.LOG_MASK_SECRETS is True
    - Writes to logs/checkout.log
    """
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    log_level_str = getattr(config, "LOG_LEVEL", "INFO")
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)
    retention_days = getattr(config, "LOG_RETENTION_DAYS", 7)
    mask_secrets = getattr(config, "LOG_MASK_SECRETS", True)

    formatter = logging.Formatter(
        fmt='%(asctime)s | %(name)-25s | %(levelname)-8s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=log_dir / "checkout.log",
        when="midnight",
        interval=1,
        backupCount=retention_days,
        encoding="utf-8"
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(log_level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    if mask_secrets:
        file_handler.addFilter(SecretMaskingFilter())
        console_handler.addFilter(SecretMaskingFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.info("=" * 80)
    logging.info(f"Logging initialized: Level={log_level_str}, Retention={retention_days} days, Masking={'ENABLED' if mask_secrets else 'DISABLED'}")
    logging.info("=" * 80)
