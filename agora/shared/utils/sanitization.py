"""Input normalization for addresses and submitted codes."""

import re
from typing import ClassVar

from email_validator import EmailNotValidError, validate_email


class InputNormalizer:
    """Canonical forms for owner addresses and passcodes.

    Owners are compared trimmed and lowercased everywhere (store, accounts,
    broadcast recipients). Submitted codes are reduced to their digits so
    " 123 456 " or "123456\\n" match a stored "123456"; comparison after
    that stays exact.
    """

    NON_DIGIT_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"\D")

    @classmethod
    def normalize_address(cls, value: str | None) -> str:
        """Trim and lowercase an address. None becomes an empty string."""
        return (value or "").strip().lower()

    @classmethod
    def normalize_code(cls, value: str | int | None) -> str:
        """Strip every non-digit character from a submitted code."""
        if value is None:
            return ""
        return cls.NON_DIGIT_PATTERN.sub("", str(value))

    @classmethod
    def looks_like_address(cls, value: str | None) -> bool:
        """Cheap syntactic check used before contacting the relay."""
        return bool(value) and "@" in value

    @classmethod
    def local_part(cls, address: str) -> str:
        """Text before '@' (the whole value when there is none)."""
        return address.split("@", 1)[0]


def normalize_address(value: str | None) -> str:
    return InputNormalizer.normalize_address(value)


def normalize_code(value: str | int | None) -> str:
    return InputNormalizer.normalize_code(value)


def validate_address(value: str) -> str:
    """Return the normalized address if it is a syntactically valid email.

    Deliverability (DNS) is not checked.

    Raises:
        ValueError: If the address is not a valid email.
    """
    normalized = normalize_address(value)
    try:
        validate_email(normalized, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(str(e)) from e
    return normalized
