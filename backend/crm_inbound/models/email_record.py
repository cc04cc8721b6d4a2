"""
Persistence-ready inbound email record.

Built from a successful ParsedMail once every required field is present.
The contact name fields are only suggestions for creating a contact that
does not exist yet; an existing contact keeps its stored name.
"""

from typing import Optional

from pydantic import BaseModel

from crm_inbound.models.parsed_mail import MailMode


class InboundEmailRecord(BaseModel):
    mode: MailMode
    crm_user: str
    contact_email: str
    contact_first_name: str
    contact_last_name: str = ""
    subject: Optional[str] = None
    date: Optional[str] = None
    content: str
    forward_comment: Optional[str] = None
