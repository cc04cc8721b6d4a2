"""
Tests for building persistence-ready inbound email records and the contact
name helpers they use.
"""

import pytest

from crm_inbound.models.parsed_mail import ParsedMail, ParseError
from crm_inbound.services.contact_names import (
    capitalize_name_part,
    derive_names_from_email_local_part,
)
from crm_inbound.services.inbound_record import InboundMailRejected, build_inbound_record


def _make_parsed_mail(**overrides) -> ParsedMail:
    fields = {
        "mode": "FORWARDED",
        "crm_user": "trygve@kodemaker.no",
        "contact_email": "kunde.knutsen@gmail.com",
        "date": "Thu, 11 Sep 2025 17:14:12 +0200",
        "subject": "Fwd: Viktig melding",
        "body": "Viktig melding (original body)",
        "forward_comment": "(Body lagt på ved forwarding)",
    }
    fields.update(overrides)
    return ParsedMail(**fields)


# ---------------------------------------------------------------------------
# Name helpers
# ---------------------------------------------------------------------------

class TestCapitalizeNamePart:

    def test_hyphenated_name(self):
        assert capitalize_name_part("ANNA-LISA") == "Anna-Lisa"

    def test_trims_whitespace(self):
        assert capitalize_name_part("  ola ") == "Ola"

    def test_blank_gives_empty_string(self):
        assert capitalize_name_part("   ") == ""

    def test_empty_segments_are_kept(self):
        assert capitalize_name_part("anna--lisa") == "Anna--Lisa"


class TestDeriveNamesFromEmailLocalPart:

    def test_dotted_local_part_and_plus_tag(self):
        assert derive_names_from_email_local_part("john.michael.doe+tag") == ("John", "Doe")

    def test_single_token_becomes_first_name_only(self):
        assert derive_names_from_email_local_part("sole") == ("Sole", "")

    def test_two_parts(self):
        assert derive_names_from_email_local_part("kunde.knutsen") == ("Kunde", "Knutsen")


# ---------------------------------------------------------------------------
# build_inbound_record
# ---------------------------------------------------------------------------

class TestBuildInboundRecord:

    def test_forwarded_record(self):
        record = build_inbound_record(_make_parsed_mail())

        assert record.model_dump() == {
            "mode": "FORWARDED",
            "crm_user": "trygve@kodemaker.no",
            "contact_email": "kunde.knutsen@gmail.com",
            "contact_first_name": "Kunde",
            "contact_last_name": "Knutsen",
            "subject": "Fwd: Viktig melding",
            "date": "Thu, 11 Sep 2025 17:14:12 +0200",
            "content": "Viktig melding (original body)",
            "forward_comment": "(Body lagt på ved forwarding)",
        }

    def test_bcc_record_without_comment(self):
        record = build_inbound_record(
            _make_parsed_mail(mode="BCC", contact_email="trygvea@gmail.com", forward_comment=None)
        )

        assert record.mode == "BCC"
        assert record.contact_first_name == "Trygvea"
        assert record.contact_last_name == ""
        assert record.forward_comment is None

    def test_empty_body_is_accepted(self):
        record = build_inbound_record(_make_parsed_mail(mode="BCC", body=""))
        assert record.content == ""

    def test_parse_error_is_rejected(self):
        with pytest.raises(InboundMailRejected) as exc_info:
            build_inbound_record(ParseError(error="No forwarded messages found"))

        assert exc_info.value.reason == "no_forwarded_message"
        assert exc_info.value.detail == "No forwarded messages found"

    @pytest.mark.parametrize(
        "overrides, reason",
        [
            ({"contact_email": None}, "missing_contact_email"),
            ({"contact_email": ""}, "missing_contact_email"),
            ({"body": None}, "missing_body"),
            ({"crm_user": None}, "missing_crm_user"),
        ],
    )
    def test_incomplete_mail_is_rejected(self, overrides, reason):
        with pytest.raises(InboundMailRejected) as exc_info:
            build_inbound_record(_make_parsed_mail(**overrides))

        assert exc_info.value.reason == reason

    def test_contact_email_checked_before_body(self):
        with pytest.raises(InboundMailRejected) as exc_info:
            build_inbound_record(_make_parsed_mail(contact_email=None, body=None, crm_user=None))

        assert exc_info.value.reason == "missing_contact_email"

    def test_rejection_is_a_value_error(self):
        with pytest.raises(ValueError):
            build_inbound_record(_make_parsed_mail(crm_user=None))
