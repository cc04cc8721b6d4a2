"""
Inbound email webhook payload models.

Postmark posts one JSON document per received message. Only the fields the
classifier reads are modelled; every other key Postmark sends (MessageID,
MailboxHash, Attachments, ...) is ignored (model_config extra="ignore").

FromFull.Email is the only hard requirement: it must be a syntactically valid
address. It is checked but stored exactly as Postmark sent it, so the CRM
user and contact addresses keep their original casing.
"""

from typing import Optional

from email_validator import validate_email
from pydantic import BaseModel, field_validator


class PostmarkEmailAddress(BaseModel):
    """One entry of Postmark's FromFull / ToFull address objects."""
    model_config = {"extra": "ignore"}

    Email: str
    Name: Optional[str] = None

    @field_validator("Email")
    @classmethod
    def check_email_syntax(cls, v: str) -> str:
        # EmailNotValidError is a ValueError, so pydantic reports it as a
        # ValidationError. The normalized form is discarded.
        validate_email(v, check_deliverability=False)
        return v


class InboundEmailPayload(BaseModel):
    """
    Subset of Postmark's inbound webhook JSON used by the mail classifier.

    Field names keep Postmark's PascalCase so that a raw webhook body can be
    validated directly with InboundEmailPayload.model_validate(payload).
    """
    model_config = {"extra": "ignore"}

    From: Optional[str] = None
    To: Optional[str] = None
    ToFull: Optional[list[PostmarkEmailAddress]] = None
    FromFull: PostmarkEmailAddress
    Date: Optional[str] = None
    Subject: Optional[str] = None
    Bcc: Optional[str] = None
    StrippedTextReply: Optional[str] = None
    TextBody: Optional[str] = None
    HtmlBody: Optional[str] = None
