"""
Runtime configuration.

Values come from the environment, optionally seeded from a .env file.
They are read at call time so tests can patch os.environ.

Environment variables
---------------------
EMAIL_PROVIDER   Webhook payload format (default: "postmark").
LOG_LEVEL        Root log level for entry points (default: "INFO").
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_EMAIL_PROVIDER = "postmark"
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_email_provider() -> str:
    return os.getenv("EMAIL_PROVIDER", DEFAULT_EMAIL_PROVIDER).lower().strip()


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper().strip()


def configure_logging() -> None:
    """Configure console logging. Only entry points call this."""
    logging.basicConfig(level=get_log_level(), format=LOG_FORMAT)
