"""
Shared helpers for request/response models.
"""

import re
from typing import Optional
from uuid import UUID

from exceptions import NotFoundError

_NON_DIGITS = re.compile(r"\D")


def phone_digits(value: Optional[str]) -> str:
    """Strip everything but digits from a phone number."""
    return _NON_DIGITS.sub("", value or "")


def to_e164(value: str, default_country_code: str = "+91") -> str:
    """
    Normalize a phone number for the OTP provider.

    Ten-digit local numbers get the default country code, numbers that
    already carry a leading "+" keep theirs.
    """
    raw = (value or "").strip()
    digits = phone_digits(raw)
    if not digits:
        return ""
    if raw.startswith("+"):
        return f"+{digits}"
    country_digits = phone_digits(default_country_code)
    if len(digits) == 10:
        return f"+{country_digits}{digits}"
    return f"+{digits}"


def local_phone(value: Optional[str], default_country_code: str = "+91") -> str:
    """Reduce an E.164 number back to the local digits stored on employee records."""
    digits = phone_digits(value)
    country_digits = phone_digits(default_country_code)
    if country_digits and len(digits) == 10 + len(country_digits) and digits.startswith(country_digits):
        return digits[len(country_digits):]
    return digits


def parse_record_id(value: str, resource: str) -> str:
    """
    Canonical form of a UUID path parameter.

    Ids that are not UUIDs cannot name a stored record, so they are reported
    as not found rather than reaching a UUID column.
    """
    try:
        return str(UUID(str(value).strip()))
    except ValueError:
        raise NotFoundError(f"{resource.replace('_', ' ').capitalize()} not found", resource=resource)
