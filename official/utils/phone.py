import re

_NON_DIGITS = re.compile(r"\D")

# Country calling codes we deliver SMS to
ALLOWED_COUNTRY_CODES = (
    "+1",    # US/Canada
    "+61",   # Australia
    "+64",   # New Zealand
    "+44",   # UK
    "+49",   # Germany
    "+33",   # France
    "+34",   # Spain
    "+351",  # Portugal
    "+41",   # Switzerland
    "+31",   # Netherlands
    "+43",   # Austria
    "+36",   # Hungary
    "+46",   # Sweden
    "+47",   # Norway
    "+358",  # Finland
    "+48",   # Poland
    "+420",  # Czech Republic
    "+421",  # Slovakia
    "+40",   # Romania
    "+380",  # Ukraine
    "+30",   # Greece
    "+353",  # Ireland
    "+32",   # Belgium
    "+386",  # Slovenia
    "+385",  # Croatia
    "+370",  # Lithuania
    "+371",  # Latvia
    "+372",  # Estonia
    "+357",  # Cyprus
    "+90",   # Turkey
)

UNSUPPORTED_COUNTRY_MESSAGE = (
    "Phone number from unsupported country. We currently only support US, Canada, "
    "Australia, New Zealand, UK, and select European countries."
)

MIN_PHONE_LENGTH = 8

def normalize_phone_number(phone_number: str) -> str:
    """
    Canonicalize a raw phone number.

    Every non-digit character (including a stray "+") is dropped and a
    single "+" is put in front, so "+1 (555) 123-4567", "15551234567" and
    "+15551234567" all produce "+15551234567".
    """
    return "+" + _NON_DIGITS.sub("", phone_number or "")

def is_phone_number_from_allowed_country(phone_number: str) -> bool:
    normalized = normalize_phone_number(phone_number)
    return normalized.startswith(ALLOWED_COUNTRY_CODES)

def is_plausible_phone_number(phone_number: str) -> bool:
    return len(normalize_phone_number(phone_number)) >= MIN_PHONE_LENGTH

def mask_phone_number(phone_number: str) -> str:
    """Hide all but the last two digits, e.g. "+15551234567" -> "+*********67"."""
    normalized = normalize_phone_number(phone_number)
    digits = normalized[1:]
    if len(digits) <= 2:
        return normalized
    return "+" + "*" * (len(digits) - 2) + digits[-2:]
