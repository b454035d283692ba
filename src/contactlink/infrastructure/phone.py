"""Phone number normalization to E.164 for storage and matching."""

import phonenumbers


def normalize_phone(raw: str, default_region: str | None = None) -> str | None:
    """Strict form: E.164 for a valid number, None for anything else.

    None means "no canonical form", not "reject": canonical_phone falls back
    to the trimmed input on None, so a stored "123456" still matches a later
    "123456". Once a number parses it is always stored as E.164, so
    "+1 202-555-1234" and "+12025551234" land on the same contact.
    """
    if not raw or not str(raw).strip():
        return None
    raw = str(raw).strip()
    try:
        parsed = phonenumbers.parse(raw, default_region)
    except phonenumbers.NumberParseException:
        return None
    if not phonenumbers.is_valid_number(parsed):
        return None
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def canonical_phone(raw: str | None, default_region: str | None = None) -> str | None:
    """E.164 when the number parses, otherwise the trimmed input (None if blank).

    Matching is by equality, so numbers that do not parse are kept verbatim
    rather than dropped.
    """
    stripped = (raw or "").strip()
    if not stripped:
        return None
    return normalize_phone(stripped, default_region) or stripped
