"""
Inbound mail classification.

A CRM user gets an email into the CRM in one of two ways:

  BCC        — the user writes to the customer and BCCs the inbound
               mailbox. The customer is the To address.
  FORWARDED  — the user received (or sent) the email earlier and forwards
               it to the inbound mailbox afterwards. The customer is the
               From address inside the forwarded block, and anything the
               user typed above the forward marker becomes a comment.

The mode is decided once, by whether Postmark reports a non-blank Bcc.

parse_postmark_inbound_email() never raises on odd input. The only failure
it reports is a FORWARDED mail without a locatable forwarded block; missing
addresses or bodies surface as None fields and are rejected one layer up
(see inbound_record.build_inbound_record).
"""

import logging
import re
from typing import Optional

from crm_inbound.models.inbound_email import InboundEmailPayload
from crm_inbound.models.parsed_mail import ParsedMail, ParseError, ParseResult
from crm_inbound.services.forwarded_parser import parse_forwarded_messages

logger = logging.getLogger(__name__)

NO_FORWARDED_MESSAGES = "No forwarded messages found"

_ANGLE_BRACKETS_RE = re.compile(r"<([^>]+)>")


def extract_first_email_from_address_list(value: Optional[str]) -> Optional[str]:
    """
    Return the address of the first entry of a raw address header.

    '"Kunde Knutsen" <kunde@firma.com>, x@y.no' -> 'kunde@firma.com'
    'kunde@firma.com'                           -> 'kunde@firma.com'

    No validation: without angle brackets the whole first entry is returned.
    """
    if not value:
        return None
    first = value.split(",")[0]
    m = _ANGLE_BRACKETS_RE.search(first)
    return (m.group(1) if m else first).strip()


def derive_forward_comment(stripped_text_reply: Optional[str]) -> Optional[str]:
    """
    Extract the forwarding user's own text from Postmark's StrippedTextReply.

    StrippedTextReply ends with the forward marker line, so the last line is
    dropped and trailing whitespace removed.
    """
    if stripped_text_reply is None:
        return None
    lines = stripped_text_reply.split("\n")
    return "\n".join(lines[:-1]).rstrip()


def effective_body(mail: InboundEmailPayload) -> str:
    """TextBody, falling back to the raw (unstripped) HtmlBody, or ''."""
    return mail.TextBody or mail.HtmlBody or ""


def _crm_user(mail: InboundEmailPayload) -> Optional[str]:
    return mail.FromFull.Email or extract_first_email_from_address_list(mail.From)


def parse_postmark_inbound_email(mail: InboundEmailPayload) -> ParseResult:
    """
    Classify a validated Postmark payload as BCC or FORWARDED.

    Returns ParsedMail on success, or ParseError when a forwarded mail holds
    no forwarded block. Only the first forwarded block is used; date and
    subject always come from the outer message.
    """
    mode = "BCC" if mail.Bcc and mail.Bcc.strip() else "FORWARDED"
    crm_user = _crm_user(mail)
    body = effective_body(mail)

    if mode == "FORWARDED":
        forwarded = parse_forwarded_messages(body)
        if not forwarded:
            logger.warning(
                f"No forwarded message found in mail from {crm_user!r} "
                f"(subject {mail.Subject!r})"
            )
            return ParseError(error=NO_FORWARDED_MESSAGES)

        if len(forwarded) > 1:
            logger.info(
                f"Mail from {crm_user!r} holds {len(forwarded)} forwarded blocks; "
                "using the first"
            )

        first = forwarded[0]
        contact_email = extract_first_email_from_address_list(first.headers.from_addr)
        logger.info(f"FORWARDED mail from {crm_user!r}, original sender {contact_email!r}")
        return ParsedMail(
            mode="FORWARDED",
            crm_user=crm_user,
            contact_email=contact_email,
            date=mail.Date,
            subject=mail.Subject,
            body=first.body,
            forward_comment=derive_forward_comment(mail.StrippedTextReply),
        )

    to_full = mail.ToFull or []
    contact_email = (
        (to_full[0].Email if to_full else None)
        or extract_first_email_from_address_list(mail.To)
    )
    logger.info(f"BCC mail from {crm_user!r} to {contact_email!r}")
    return ParsedMail(
        mode="BCC",
        crm_user=crm_user,
        contact_email=contact_email,
        date=mail.Date,
        subject=mail.Subject,
        body=body,
    )
