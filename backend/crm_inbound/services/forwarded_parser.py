"""
Forwarded-message extraction.

Finds the "---------- Forwarded message ---------" style blocks inside the
plain-text body of an email and parses the header cluster that follows each
marker (From/To/Cc/Date/Subject, English or Norwegian Bokmål) plus the body
text after it.

Block detection
---------------
1. Every match of every FORWARD_MARKERS pattern is a block start. Starts are
   deduplicated and sorted; block i runs from start[i] to start[i + 1] (or to
   the end of the text), so nested or sequential forwards come out one block
   each, in document order.
2. Without any marker, the first line beginning with "From:" / "Fra:" starts
   a single block that runs to the end of the text.
3. Otherwise the body holds no forwarded message and [] is returned.

The text is treated as already decoded: no MIME, charset or
quoted-printable handling happens here, and an HTML body is scanned as-is.
"""

import logging
import re
from typing import Optional

from crm_inbound.models.parsed_mail import (
    ForwardedHeaders,
    ForwardedMessage,
    OriginalHeaders,
    ParsedAddress,
    ParsedForwardedEmail,
)

logger = logging.getLogger(__name__)

_FLAGS = re.IGNORECASE | re.MULTILINE

FORWARD_MARKERS: list[re.Pattern] = [
    # English
    re.compile(r"^[ \t-]*forwarded message[ \t-]*\r?$", _FLAGS),
    re.compile(r"^begin forwarded message:?\r?$", _FLAGS),
    re.compile(r"^[-]{2,}[ \t]*forwarded message[ \t]*[-]{2,}[ \t]*\r?$", _FLAGS),
    # Norwegian (Bokmål)
    re.compile(r"^[ \t-]*videresendt melding[ \t-]*\r?$", _FLAGS),
    re.compile(r"^begynn videresendt melding:?\r?$", _FLAGS),
    re.compile(r"^[-]{2,}[ \t]*videresendt melding[ \t]*[-]{2,}[ \t]*\r?$", _FLAGS),
]

# Canonical header name -> accepted spellings (lowercase)
HEADER_ALIASES: dict[str, tuple[str, ...]] = {
    "from": ("from", "fra"),
    "to": ("to", "til"),
    "cc": ("cc", "kopi"),
    "date": ("date", "dato", "sendt"),
    "subject": ("subject", "emne"),
}

_HEADER_START_RE = re.compile(r"^(from|fra):\s*", _FLAGS)
_HEADER_LINE_RE = re.compile(r"^([^:]+):\s*(.*)$")
_LINE_SPLIT_RE = re.compile(r"\r?\n")

# Commas inside <...> do not separate recipients
_ADDRESS_SPLIT_RE = re.compile(r",(?![^<]*>)")
_ANGLE_ADDRESS_RE = re.compile(r"^(.*?)<([^>]+)>$")
_BARE_ADDRESS_RE = re.compile(r"<?([a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,})>?", re.IGNORECASE)
_SURROUNDING_QUOTES_RE = re.compile(r'^"|"$')


# ---------------------------------------------------------------------------
# Header helpers
# ---------------------------------------------------------------------------

def normalize_header_key(key: str) -> str:
    """
    Map a header name to its canonical English key.

    "Fra" -> "from", "Emne" -> "subject", "Sendt" -> "date". Unknown names
    are returned lowercased and trimmed.
    """
    lower = key.strip().lower()
    for canonical, spellings in HEADER_ALIASES.items():
        if lower in spellings:
            return canonical
    return lower


def parse_address_list(raw: str) -> list[ParsedAddress]:
    """
    Split a header value like 'Ola <ola@x.no>, "Kari" <kari@y.no>' into
    ParsedAddress entries.

    Entries without a recognisable address keep only their raw text.
    """
    parts = [p.strip() for p in _ADDRESS_SPLIT_RE.split(raw)]
    addresses: list[ParsedAddress] = []
    for part in parts:
        if not part:
            continue

        angle = _ANGLE_ADDRESS_RE.match(part)
        if angle:
            name = _SURROUNDING_QUOTES_RE.sub("", angle.group(1).strip())
            addresses.append(
                ParsedAddress(name=name or None, email=angle.group(2).strip(), raw=part)
            )
            continue

        bare = _BARE_ADDRESS_RE.search(part)
        if bare:
            # Whatever surrounds a bare address is taken as the display name
            name = _SURROUNDING_QUOTES_RE.sub("", part.replace(bare.group(0), "", 1).strip())
            addresses.append(ParsedAddress(name=name or None, email=bare.group(1), raw=part))
            continue

        addresses.append(ParsedAddress(raw=part))
    return addresses


def _is_marker_line(line: str) -> bool:
    return any(pattern.search(line) for pattern in FORWARD_MARKERS)


def _unfold(header_lines: list[str]) -> list[str]:
    """Join continuation lines (leading space or tab) onto the previous header."""
    unfolded: list[str] = []
    for line in header_lines:
        if line[:1] in (" ", "\t") and unfolded:
            unfolded[-1] += " " + line.strip()
        else:
            unfolded.append(line)
    return unfolded


def _parse_header_lines(lines: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for line in lines:
        m = _HEADER_LINE_RE.match(line)
        if not m:
            continue
        key = normalize_header_key(m.group(1))
        value = m.group(2).strip()
        # Repeated headers append instead of overwriting
        headers[key] = f"{headers[key]}, {value}" if headers.get(key) else value
    return headers


# ---------------------------------------------------------------------------
# Block segmentation
# ---------------------------------------------------------------------------

def _find_block_starts(text: str) -> list[int]:
    starts = {m.start() for pattern in FORWARD_MARKERS for m in pattern.finditer(text)}
    if starts:
        return sorted(starts)

    header_start = _HEADER_START_RE.search(text)
    if header_start:
        return [header_start.start()]
    return []


def _split_blocks(text: str) -> list[tuple[int, str]]:
    """Return (start_offset, block_text) pairs in document order."""
    starts = _find_block_starts(text)
    ends = starts[1:] + [len(text)]
    return [(start, text[start:end]) for start, end in zip(starts, ends)]


def _parse_block(block: str) -> Optional[tuple[dict[str, str], str]]:
    """
    Parse one block into (headers, body).

    Returns None when the block carries no "key: value" header at all; such
    blocks are dropped by the callers.
    """
    lines = _LINE_SPLIT_RE.split(block)
    i = 0
    if _is_marker_line(lines[0]):
        i = 1

    # Header cluster ends at the first blank line
    header_lines: list[str] = []
    while i < len(lines):
        line = lines[i]
        i += 1
        if not line.strip():
            break
        header_lines.append(line)

    headers = _parse_header_lines(_unfold(header_lines))
    if not headers:
        return None

    body = "\n".join(lines[i:]).strip()
    return headers, body


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_forwarded_messages(body_text: str) -> list[ForwardedMessage]:
    """
    Extract every forwarded block of an email body, in document order.

    Each ForwardedMessage carries the block's raw header values (canonical
    keys) and the trimmed body that followed the header cluster. An empty
    list means no forwarded message could be located.
    """
    if not body_text:
        return []

    messages: list[ForwardedMessage] = []
    blocks = _split_blocks(body_text)
    for _, block in blocks:
        parsed = _parse_block(block)
        if parsed is None:
            continue
        headers, body = parsed
        messages.append(
            ForwardedMessage(
                headers=ForwardedHeaders(
                    from_addr=headers.get("from"),
                    to=headers.get("to"),
                    cc=headers.get("cc"),
                    date=headers.get("date"),
                    subject=headers.get("subject"),
                    all=headers,
                ),
                body=body,
            )
        )

    logger.debug(
        "parse_forwarded_messages: %d candidate block(s), %d parsed",
        len(blocks),
        len(messages),
    )
    return messages


def parse_forwarded_message(body_text: str) -> Optional[ParsedForwardedEmail]:
    """
    Detailed view of the first forwarded block of an email body.

    Unlike parse_forwarded_messages(), addresses in From/To/Cc are split into
    ParsedAddress entries, and the text in front of the block is returned as
    remainder. Returns None if no forwarded block is found.
    """
    if not body_text:
        return None

    for start, block in _split_blocks(body_text):
        parsed = _parse_block(block)
        if parsed is None:
            continue
        headers, body = parsed

        from_list = parse_address_list(headers["from"]) if headers.get("from") else []
        original_headers = OriginalHeaders(
            from_addr=from_list[0] if from_list else None,
            to=parse_address_list(headers["to"]) if headers.get("to") else None,
            cc=parse_address_list(headers["cc"]) if headers.get("cc") else None,
            date=headers.get("date"),
            subject=headers.get("subject"),
            all=headers,
        )
        return ParsedForwardedEmail(
            original_headers=original_headers,
            original_body=body,
            remainder=body_text[:start].rstrip(),
        )

    return None
