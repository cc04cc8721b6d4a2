"""
Contact name suggestions derived from an email address.

Used when an inbound email comes from (or goes to) an address that has no
contact yet: "kari.nordmann+crm@firma.no" -> ("Kari", "Nordmann").
"""


def capitalize_name_part(value: str) -> str:
    """
    Capitalize each hyphen-separated segment of a name.

    "ANNA-LISA" -> "Anna-Lisa", "  ola " -> "Ola", "" -> "".
    """
    v = value.strip()
    if not v:
        return ""
    return "-".join(
        (seg[0].upper() + seg[1:].lower()) if seg else ""
        for seg in v.split("-")
    )


def derive_names_from_email_local_part(local: str) -> tuple[str, str]:
    """
    Return (first_name, last_name) guessed from the local part of an address.

    A "+tag" suffix is ignored. With two or more dot-separated parts the first
    and the last part are used; middle parts are dropped. A single part
    becomes the first name and the last name is "".
    """
    base = local.split("+")[0]
    parts = base.split(".")
    if len(parts) >= 2:
        return capitalize_name_part(parts[0]), capitalize_name_part(parts[-1])
    return capitalize_name_part(base), ""
