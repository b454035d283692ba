"""Tests for phone number normalization (E.164) and the verbatim fallback."""


from contactlink.infrastructure.phone import canonical_phone, normalize_phone


def test_normalize_with_country_code_returns_e164():
    assert normalize_phone("+39 312 345 6789", default_region=None) == "+393123456789"
    assert normalize_phone("+1 202 555 1234", default_region=None) == "+12025551234"


def test_normalize_without_country_code_uses_default_region():
    assert normalize_phone("202 555 1234", default_region="US") == "+12025551234"


def test_normalize_invalid_returns_none():
    assert normalize_phone("", default_region=None) is None
    assert normalize_phone("abc", default_region=None) is None
    assert normalize_phone("123", default_region="US") is None


def test_canonical_phone_normalizes_when_valid():
    assert canonical_phone("+1 (202) 555-1234") == "+12025551234"
    assert canonical_phone("202-555-1234", default_region="US") == "+12025551234"


def test_canonical_phone_keeps_unparseable_input_verbatim():
    assert canonical_phone("  123456 ") == "123456"
    assert canonical_phone("202-555-1234") == "202-555-1234"


def test_canonical_phone_blank_is_none():
    assert canonical_phone(None) is None
    assert canonical_phone("   ") is None


def test_canonical_phone_falls_back_only_when_normalize_gives_none():
    for raw in ("123456", "abc-1", "202-555-1234"):
        assert normalize_phone(raw) is None
        assert canonical_phone(raw) == raw
    spellings = ("+1 202-555-1234", "+12025551234", " +1 (202) 555 1234 ")
    assert {canonical_phone(s) for s in spellings} == {"+12025551234"}
