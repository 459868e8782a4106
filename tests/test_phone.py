import pytest

from official.utils.phone import (
    is_phone_number_from_allowed_country,
    is_plausible_phone_number,
    mask_phone_number,
    normalize_phone_number,
)


@pytest.mark.parametrize("raw", ["+1 (555) 123-4567", "15551234567", "+15551234567", "1.555.123.4567"])
def test_normalize_strips_formatting(raw):
    assert normalize_phone_number(raw) == "+15551234567"


@pytest.mark.parametrize("raw", ["+44 20 7946 0958", "0049-30-1234567", "+1+5551234567", ""])
def test_normalize_is_idempotent(raw):
    once = normalize_phone_number(raw)
    assert normalize_phone_number(once) == once
    assert once.startswith("+")


def test_normalize_none_gives_bare_plus():
    assert normalize_phone_number(None) == "+"


@pytest.mark.parametrize("phone", ["+15551234567", "+447700900123", "+351912345678", "+905321234567"])
def test_allowed_countries(phone):
    assert is_phone_number_from_allowed_country(phone)


@pytest.mark.parametrize("phone", ["+8613812345678", "+919876543210", "+5511987654321"])
def test_disallowed_countries(phone):
    assert not is_phone_number_from_allowed_country(phone)


def test_allow_list_normalizes_first():
    assert is_phone_number_from_allowed_country("1 (555) 123-4567")


def test_plausible_phone_length():
    assert is_plausible_phone_number("+1555123")
    assert not is_plausible_phone_number("123")


def test_mask_keeps_last_two_digits():
    assert mask_phone_number("+15551234567") == "+*********67"
    assert mask_phone_number("+12") == "+12"
