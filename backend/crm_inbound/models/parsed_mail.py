"""
Result models produced by the forwarded-block extractor and the mail
classifier.

Models:
  ParsedAddress         — one "Name <email>" entry split into its parts
  ForwardedHeaders      — canonical header values of one forwarded block
  ForwardedMessage      — headers + body of one forwarded block
  OriginalHeaders       — forwarded headers with addresses parsed
  ParsedForwardedEmail  — detailed view of the first forwarded block
  ParsedMail            — classifier success result (BCC / FORWARDED)
  ParseError            — classifier failure result
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel


MailMode = Literal["BCC", "FORWARDED"]


# ---------------------------------------------------------------------------
# Forwarded-block extraction
# ---------------------------------------------------------------------------

class ParsedAddress(BaseModel):
    """A single address-list entry. raw is always the untouched input."""
    name: Optional[str] = None
    email: Optional[str] = None
    raw: str


class ForwardedHeaders(BaseModel):
    """
    Raw header values of one forwarded block, keyed by canonical name.

    Norwegian aliases (Fra, Til, Kopi, Dato/Sendt, Emne) are folded into the
    English keys. The From header is exposed as from_addr since "from" is a
    Python keyword. all holds every header of the block, including keys
    that have no canonical field.
    """
    from_addr: Optional[str] = None
    to: Optional[str] = None
    cc: Optional[str] = None
    date: Optional[str] = None
    subject: Optional[str] = None
    all: dict[str, str] = {}


class ForwardedMessage(BaseModel):
    headers: ForwardedHeaders
    body: str


class OriginalHeaders(BaseModel):
    from_addr: Optional[ParsedAddress] = None
    to: Optional[list[ParsedAddress]] = None
    cc: Optional[list[ParsedAddress]] = None
    date: Optional[str] = None
    subject: Optional[str] = None
    all: dict[str, str] = {}


class ParsedForwardedEmail(BaseModel):
    """
    The first forwarded block of a message, with its addresses parsed.

    remainder is the text in front of the block, which is usually what the
    forwarding user typed above the forward marker.
    """
    original_headers: OriginalHeaders
    original_body: str
    remainder: str


# ---------------------------------------------------------------------------
# Classifier results
# ---------------------------------------------------------------------------

class ParsedMail(BaseModel):
    """
    Classification of one inbound email.

    crm_user       — the CRM user doing the BCC or the forward
    contact_email  — BCC: the To address; FORWARDED: From of the forwarded block
    forward_comment — text the forwarding user wrote above the forwarded block,
                     stored as a comment in the CRM (FORWARDED only)
    """
    mode: MailMode
    crm_user: Optional[str] = None
    contact_email: Optional[str] = None
    date: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    forward_comment: Optional[str] = None


class ParseError(BaseModel):
    mode: Literal["ERROR"] = "ERROR"
    error: str


ParseResult = Union[ParsedMail, ParseError]
