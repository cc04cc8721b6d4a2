#!/usr/bin/env python3
"""
Dev helper: run an inbound-email webhook payload through the mail classifier.

Loads a Postmark inbound webhook JSON document (or builds a sample one),
classifies it as BCC or FORWARDED, and prints the parsed result plus the
record that would be stored.

Usage
-----
# Classify a payload captured from Postmark
python scripts/parse_inbound_email.py --file payload.json

# Built-in samples
python scripts/parse_inbound_email.py --sample bcc
python scripts/parse_inbound_email.py --sample forward

# Also print the detailed view of the forwarded block (addresses parsed)
python scripts/parse_inbound_email.py --sample forward --details

Environment / .env
------------------
EMAIL_PROVIDER   Payload format (default: postmark). Overridden by --provider.
LOG_LEVEL        Log level (default: INFO).
"""

import argparse
import json
import sys
import textwrap
from pathlib import Path

from pydantic import ValidationError

from crm_inbound.config import configure_logging, get_email_provider
from crm_inbound.services.forwarded_parser import parse_forwarded_message
from crm_inbound.services.inbound_email_adapter import normalize_webhook
from crm_inbound.services.inbound_record import InboundMailRejected, build_inbound_record
from crm_inbound.services.mail_classifier import effective_body, parse_postmark_inbound_email


_INBOUND_ADDRESS = "4bd2bba8259b7bf7fda7a600175ce1b3@inbound.postmarkapp.com"


# ---------------------------------------------------------------------------
# Sample payloads
# ---------------------------------------------------------------------------

def _build_bcc_sample() -> dict:
    """A mail written by a CRM user to a customer, BCC'd to the inbound mailbox."""
    return {
        "From": "ola@crm-bruker.no",
        "FromFull": {"Email": "ola@crm-bruker.no", "Name": "Ola Nordmann"},
        "To": '"Kari Kunde" <kari.kunde@firma.no>',
        "ToFull": [{"Email": "kari.kunde@firma.no", "Name": "Kari Kunde"}],
        "Bcc": _INBOUND_ADDRESS,
        "Subject": "Tilbud",
        "Date": "Thu, 11 Sep 2025 17:11:31 +0200",
        "TextBody": "Hei Kari,\n\nher er tilbudet vi snakket om.\n",
        "StrippedTextReply": "",
    }


def _build_forward_sample() -> dict:
    """A customer mail the CRM user forwards to the inbound mailbox afterwards."""
    return {
        "From": "ola@crm-bruker.no",
        "FromFull": {"Email": "ola@crm-bruker.no", "Name": "Ola Nordmann"},
        "To": _INBOUND_ADDRESS,
        "ToFull": [{"Email": _INBOUND_ADDRESS, "Name": ""}],
        "Bcc": "",
        "Subject": "Fwd: Spørsmål om tilbud",
        "Date": "Thu, 11 Sep 2025 17:14:12 +0200",
        "TextBody": (
            "Kunden vil ha svar innen fredag.\n\n"
            "---------- Forwarded message ---------\n"
            "From: Kari Kunde <kari.kunde@firma.no>\n"
            "Date: Thu, Sep 11, 2025 at 3:38 PM\n"
            "Subject: Spørsmål om tilbud\n"
            "To: Ola Nordmann <ola@crm-bruker.no>\n"
            "\n\n"
            "Hei, når kan vi få tilbudet?\n"
        ),
        "StrippedTextReply": (
            "Kunden vil ha svar innen fredag.\n\n"
            "---------- Forwarded message ---------"
        ),
    }


_SAMPLES = {
    "bcc": _build_bcc_sample,
    "forward": _build_forward_sample,
}


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def _print_section(title: str, data: dict) -> None:
    print(f"\n{title}:")
    print(json.dumps(data, indent=2, ensure_ascii=False))


def main() -> int:
    configure_logging()

    parser = argparse.ArgumentParser(
        prog="parse_inbound_email.py",
        description="Classify an inbound-email webhook payload as BCC or FORWARDED.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            Examples:
              python scripts/parse_inbound_email.py --sample bcc
              python scripts/parse_inbound_email.py --sample forward --details
              python scripts/parse_inbound_email.py --file payload.json
        """),
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--file",
        metavar="PATH",
        help="Path to a webhook payload JSON file.",
    )
    source.add_argument(
        "--sample",
        choices=list(_SAMPLES),
        help="Use a built-in sample payload.",
    )
    parser.add_argument(
        "--provider",
        default=get_email_provider(),
        help="Webhook payload format (default: EMAIL_PROVIDER or postmark)",
    )
    parser.add_argument(
        "--details",
        action="store_true",
        help="Also print the parsed forwarded block with addresses split.",
    )

    args = parser.parse_args()

    if args.file:
        file_path = Path(args.file)
        if not file_path.exists():
            print(f"ERROR: File not found: {file_path}", file=sys.stderr)
            return 1
        try:
            payload = json.loads(file_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            print(f"ERROR: {file_path} is not valid JSON: {exc}", file=sys.stderr)
            return 1
    else:
        payload = _SAMPLES[args.sample]()

    try:
        mail = normalize_webhook(payload, provider=args.provider)
    except ValidationError as exc:
        print(f"ERROR: Payload failed validation:\n{exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    result = parse_postmark_inbound_email(mail)
    _print_section("Parsed", result.model_dump())

    if args.details:
        forwarded = parse_forwarded_message(effective_body(mail))
        if forwarded is None:
            print("\nNo forwarded block found.")
        else:
            _print_section("Forwarded block", forwarded.model_dump())

    try:
        record = build_inbound_record(result)
    except InboundMailRejected as exc:
        print(f"\n[REJECTED] {exc.reason}: {exc.detail}", file=sys.stderr)
        return 1

    _print_section("Record", record.model_dump())
    return 0


if __name__ == "__main__":
    sys.exit(main())
