"""Token id codec: ``<prefix>-<YYYY-MM-DD>-<NNN>``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Union

from core.constants import TokenDefaults
from core.exceptions import InvalidFormatError

TOKEN_ID_RE = re.compile(r"^([A-Za-z0-9]+)-(\d{4}-\d{2}-\d{2})-(\d+)$")
DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class Token:
    """An id plus the signature printed next to it in the QR code."""
    id: str
    signature: str


def parse_token_date(token_id: str) -> date:
    """Extract the embedded event day from a token id.

    Raises:
        InvalidFormatError: If the id does not match the expected pattern
            or the embedded date is not a real calendar day
    """
    match = TOKEN_ID_RE.match(token_id or "")
    if not match:
        raise InvalidFormatError(f"Malformed token id: {token_id!r}")
    try:
        return datetime.strptime(match.group(2), TokenDefaults.DATE_FORMAT).date()
    except ValueError as e:
        raise InvalidFormatError(f"Invalid date in token id {token_id!r}: {e}") from e


def parse_day(value: str) -> date:
    """Parse a zero-padded ``YYYY-MM-DD`` day.

    ``strptime`` alone accepts ``2025-8-11``, which would yield token ids
    the id pattern rejects.

    Raises:
        ValueError: If the value is not a padded calendar day
    """
    if not isinstance(value, str) or not DAY_RE.match(value):
        raise ValueError(f"Expected YYYY-MM-DD, got {value!r}")
    return datetime.strptime(value, TokenDefaults.DATE_FORMAT).date()


def token_day(token_id: str) -> str:
    """Return the ``YYYY-MM-DD`` string embedded in a token id."""
    return parse_token_date(token_id).strftime(TokenDefaults.DATE_FORMAT)


def is_token_id(token_id: str) -> bool:
    try:
        parse_token_date(token_id)
    except InvalidFormatError:
        return False
    return True


def build_token(prefix: str, day: Union[date, str], seq: int) -> str:
    """Format a token id with a zero-padded sequence number."""
    if seq < 0:
        raise ValueError("Sequence number must be non-negative")
    if isinstance(day, date):
        day = day.strftime(TokenDefaults.DATE_FORMAT)
    else:
        day = parse_day(day).isoformat()
    return f"{prefix}-{day}-{seq:0{TokenDefaults.SEQUENCE_WIDTH}d}"
