"""Input normalization shared by the submission schema."""

from __future__ import annotations

import re

NATIONAL_ID_LENGTH = 12
PHONE_LENGTH = 10

NATIONAL_ID_ERROR = "CCCD phải đúng 12 số."
PHONE_ERROR = "Số điện thoại phải đúng 10 số."

_NON_DIGITS = re.compile(r"[^0-9]")


def digits_only(value: str | None) -> str:
    return _NON_DIGITS.sub("", value or "")


def mask_digits(value: str | None, max_length: int) -> str:
    """Keep digits only and cut to ``max_length``, as the form input does while typing."""
    return digits_only(value)[:max_length]


def normalize_national_id(value: str | None) -> str:
    digits = mask_digits(value, NATIONAL_ID_LENGTH)
    if len(digits) != NATIONAL_ID_LENGTH:
        raise ValueError(NATIONAL_ID_ERROR)
    return digits


def normalize_phone(value: str | None) -> str:
    digits = mask_digits(value, PHONE_LENGTH)
    if len(digits) != PHONE_LENGTH:
        raise ValueError(PHONE_ERROR)
    return digits
