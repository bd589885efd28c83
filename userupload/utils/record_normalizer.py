"""
Record normalization utilities for user CSV rows.

This module turns one raw (name, surname, email) row into a normalized
record ready for insertion: whitespace trimmed, email sanitized, validated
and lowercased, name fields capitalized word by word.
"""

import re
from dataclasses import dataclass
from typing import Sequence, Union

from email_validator import EmailNotValidError, validate_email

from ..exceptions import INVALID_FORMAT, InvalidRecord

FIELD_COUNT = 3
NAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 100

# Everything outside letters, digits and !#$%&'*+-=?^_`{|}~@.[] is dropped
_EMAIL_ILLEGAL_CHARS = re.compile(r"[^A-Za-z0-9!#$%&'*+\-=?^_`{|}~@.\[\]]")
_WORD_START = re.compile(r"(^|\s)(\S)")


@dataclass(frozen=True)
class NormalizedRecord:
    """One validated user row."""

    name: str
    surname: str
    email: str

    def as_row(self) -> tuple:
        return (self.name, self.surname, self.email)


class RecordNormalizer:
    """Validates and normalizes raw user rows."""

    @staticmethod
    def normalize(raw: Sequence[str]) -> NormalizedRecord:
        """Normalize a raw (name, surname, email) row.

        Args:
            raw: Exactly three string fields as read from the CSV

        Returns:
            NormalizedRecord with capitalized names and a lowercased email

        Raises:
            InvalidRecord: If the row shape, email or field lengths are invalid
        """
        if len(raw) != FIELD_COUNT:
            raise InvalidRecord(INVALID_FORMAT, f"expected {FIELD_COUNT} fields, got {len(raw)}")

        name, surname, email = (RecordNormalizer.trim(value) for value in raw)

        email = RecordNormalizer.normalize_email(email)
        name = RecordNormalizer.capitalize_words(name)
        surname = RecordNormalizer.capitalize_words(surname)

        if len(name) > NAME_MAX_LENGTH or len(surname) > NAME_MAX_LENGTH:
            raise InvalidRecord(INVALID_FORMAT, f"name fields are limited to {NAME_MAX_LENGTH} characters")

        return NormalizedRecord(name, surname, email)

    @staticmethod
    def try_normalize(raw: Sequence[str]) -> Union[NormalizedRecord, str]:
        """Normalize a row, returning the failure reason instead of raising."""
        try:
            return RecordNormalizer.normalize(raw)
        except InvalidRecord as exc:
            return exc.reason

    @staticmethod
    def trim(value) -> str:
        """Strip leading/trailing whitespace; None becomes an empty string."""
        if value is None:
            return ""
        return str(value).strip()

    @staticmethod
    def sanitize_email(value: str) -> str:
        """Remove characters that can never appear in an address."""
        return _EMAIL_ILLEGAL_CHARS.sub("", value)

    @staticmethod
    def normalize_email(value: str) -> str:
        """Sanitize, validate and lowercase an email address.

        Raises:
            InvalidRecord: If the address is not syntactically valid
        """
        email = RecordNormalizer.sanitize_email(value)
        if not email:
            raise InvalidRecord(INVALID_FORMAT, "empty email")

        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError as exc:
            raise InvalidRecord(INVALID_FORMAT, str(exc)) from exc

        email = email.lower()
        if len(email) > EMAIL_MAX_LENGTH:
            raise InvalidRecord(INVALID_FORMAT, f"email is limited to {EMAIL_MAX_LENGTH} characters")
        return email

    @staticmethod
    def capitalize_words(value: str) -> str:
        """Lowercase a value, then title-case the first letter of each word.

        Words are separated by whitespace only, so "mary-jane" becomes
        "Mary-jane" and "o'neil" becomes "O'neil".
        """
        return _WORD_START.sub(lambda m: m.group(1) + m.group(2).title(), value.lower())


normalize = RecordNormalizer.normalize
try_normalize = RecordNormalizer.try_normalize
