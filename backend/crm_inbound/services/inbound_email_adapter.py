"""
Inbound email adapter service.

Validates a provider's raw inbound webhook JSON into InboundEmailPayload and
hands it to the mail classifier.

Supported providers:
  - postmark  (default)

Adding a new provider:
  1. Write a normalize_<provider>(payload: dict) -> InboundEmailPayload function
     that maps the provider's fields onto Postmark's field names.
  2. Register it in _NORMALIZERS.
  3. Set EMAIL_PROVIDER=<provider> in the environment.
"""

import logging
from typing import Callable, Optional

from crm_inbound.config import get_email_provider
from crm_inbound.models.inbound_email import InboundEmailPayload
from crm_inbound.models.parsed_mail import ParseResult
from crm_inbound.services.mail_classifier import parse_postmark_inbound_email

logger = logging.getLogger(__name__)


def normalize_postmark(payload: dict) -> InboundEmailPayload:
    """
    Validate a Postmark inbound webhook payload.

    Raises pydantic.ValidationError when FromFull is missing or FromFull.Email
    is not a valid address.
    """
    return InboundEmailPayload.model_validate(payload)


# ---------------------------------------------------------------------------
# Registry and dispatcher
# ---------------------------------------------------------------------------

_NORMALIZERS: dict[str, Callable[[dict], InboundEmailPayload]] = {
    "postmark": normalize_postmark,
}


def normalize_webhook(payload: dict, provider: Optional[str] = None) -> InboundEmailPayload:
    """
    Route to the correct normalizer based on the provider argument or the
    EMAIL_PROVIDER environment variable.

    Priority:
      1. provider argument (explicit, used in tests and scripts)
      2. EMAIL_PROVIDER env var
      3. Default: "postmark"

    Raises ValueError for unknown provider names.
    """
    resolved = (provider or get_email_provider()).lower().strip()

    normalizer = _NORMALIZERS.get(resolved)
    if normalizer is None:
        raise ValueError(
            f"Unknown email provider {resolved!r}. "
            f"Supported providers: {sorted(_NORMALIZERS)}"
        )

    return normalizer(payload)


def parse_inbound_webhook(payload: dict, provider: Optional[str] = None) -> ParseResult:
    """Normalize a raw webhook payload and classify it."""
    mail = normalize_webhook(payload, provider=provider)
    result = parse_postmark_inbound_email(mail)
    logger.debug(f"Inbound webhook classified as {result.mode}")
    return result
