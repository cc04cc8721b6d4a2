"""
Turns a classifier result into a record the persistence layer can store.

The classifier reports incomplete mails as ParsedMail with None fields;
this module is where they are rejected. Checks run in a fixed order and the
first failing one wins:

  1. ParseError                -> no_forwarded_message
  2. contact_email missing     -> missing_contact_email
  3. body missing              -> missing_body
  4. crm_user missing          -> missing_crm_user

An empty body string counts as present: a BCC mail with neither TextBody
nor HtmlBody is stored with empty content.
"""

import logging

from crm_inbound.models.email_record import InboundEmailRecord
from crm_inbound.models.parsed_mail import ParseError, ParseResult
from crm_inbound.services.contact_names import derive_names_from_email_local_part

logger = logging.getLogger(__name__)


class InboundMailRejected(ValueError):
    """
    Raised when an inbound email cannot be stored.

    reason is a stable machine-readable code, detail a message suitable for
    an API error body.
    """

    def __init__(self, reason: str, detail: str):
        super().__init__(detail)
        self.reason = reason
        self.detail = detail


def build_inbound_record(result: ParseResult) -> InboundEmailRecord:
    """
    Validate a classifier result and build the InboundEmailRecord for it.

    Raises InboundMailRejected if the result is a ParseError or lacks a
    contact email, body or CRM user.
    """
    if isinstance(result, ParseError):
        raise InboundMailRejected("no_forwarded_message", result.error)

    if not result.contact_email:
        raise InboundMailRejected(
            "missing_contact_email",
            f"Could not determine the contact email address ({result.mode})",
        )
    if result.body is None:
        raise InboundMailRejected("missing_body", "Inbound email has no body")
    if not result.crm_user:
        raise InboundMailRejected(
            "missing_crm_user",
            "Could not determine which CRM user sent the email",
        )

    local_part = result.contact_email.split("@")[0]
    first_name, last_name = derive_names_from_email_local_part(local_part)

    record = InboundEmailRecord(
        mode=result.mode,
        crm_user=result.crm_user,
        contact_email=result.contact_email,
        contact_first_name=first_name,
        contact_last_name=last_name,
        subject=result.subject,
        date=result.date,
        content=result.body,
        forward_comment=result.forward_comment,
    )
    logger.info(
        f"Built inbound {record.mode} record for contact {record.contact_email!r} "
        f"from {record.crm_user!r}"
    )
    return record
