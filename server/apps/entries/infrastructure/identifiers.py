"""Id generation and input normalization for entries."""

import math
import re
import secrets
from datetime import UTC, datetime, timedelta
from typing import Final

from django.utils import timezone

from server.apps.entries.exceptions import InvalidArgumentError
from server.apps.entries.models import (
    ENTRY_ID_LENGTH,
    FILENAME_MAX_LENGTH,
    NOTE_MAX_LENGTH,
    Entry,
)

# No 0/O, 1/l/I: ids are read aloud and typed from short links
ID_ALPHABET: Final = 'abcdefghijkmnopqrstuvwxyzABCDEFGHJKLMNPQRSTUVWXYZ23456789'
MAX_EXPIRATION_DAYS: Final = 3650
# Largest value a PositiveBigIntegerField holds
MAX_DECLARED_SIZE: Final = 2**63 - 1

_MINT_ATTEMPTS: Final = 5
_DIGITS_PATTERN: Final = re.compile(r'^\d+$')


def generate_id() -> str:
    """Generate a random short id.

    Returns:
        Id of ENTRY_ID_LENGTH characters from ID_ALPHABET.
    """
    return ''.join(
        secrets.choice(ID_ALPHABET) for _ in range(ENTRY_ID_LENGTH)
    )


def mint_entry_id() -> str:
    """Generate an id not used by any existing entry.

    Returns:
        Fresh entry id.

    Raises:
        RuntimeError: If every attempt collided.
    """
    for _ in range(_MINT_ATTEMPTS):
        candidate = generate_id()
        if not Entry.objects.filter(pk=candidate).exists():
            return candidate
    raise RuntimeError('Could not mint a unique entry id')


def normalize_filename(filename: str | None, fallback: str) -> str:
    """Trim and bound a client supplied filename.

    Args:
        filename: Raw filename, possibly blank.
        fallback: Name to use when the filename is blank.

    Returns:
        Filename of at most FILENAME_MAX_LENGTH characters.
    """
    cleaned = (filename or '').strip()[:FILENAME_MAX_LENGTH]
    return cleaned or fallback


def normalize_note(note: str | None) -> str | None:
    """Trim and bound a note, mapping blank to None.

    Args:
        note: Raw note.

    Returns:
        Note of at most NOTE_MAX_LENGTH characters, or None.
    """
    if not isinstance(note, str):
        return None
    return note.strip()[:NOTE_MAX_LENGTH] or None


def parse_expiration_days(raw: object) -> int | None:
    """Parse a lifetime in days.

    Args:
        raw: Client input (int or numeric string).

    Returns:
        Days capped at MAX_EXPIRATION_DAYS, or None for missing,
        non-numeric or non-positive input (never expires).
    """
    if raw is None or isinstance(raw, bool):
        return None
    try:
        days = int(str(raw).strip())
    except ValueError:
        return None
    if days <= 0:
        return None
    return min(days, MAX_EXPIRATION_DAYS)


def expiration_from_days(
    days: int | None,
    now: datetime | None = None,
) -> datetime | None:
    """Turn a lifetime into an absolute expiration time.

    Args:
        days: Lifetime in days, None for no expiration.
        now: Reference time, defaults to the current time.

    Returns:
        Expiration time, or None if the entry never expires.
    """
    if not days:
        return None
    return (now or timezone.now()) + timedelta(days=days)


def parse_part_number(raw: object) -> int:
    """Validate a multipart part number.

    Args:
        raw: Part number as int or decimal string.

    Returns:
        Positive part number.

    Raises:
        InvalidArgumentError: If the part number is malformed.
    """
    if isinstance(raw, bool):
        raise InvalidArgumentError('invalid part number')
    if isinstance(raw, int):
        part_number = raw
    elif isinstance(raw, str) and _DIGITS_PATTERN.match(raw):
        part_number = int(raw)
    else:
        raise InvalidArgumentError('invalid part number')

    if part_number <= 0:
        raise InvalidArgumentError('invalid part number')
    return part_number


def parse_declared_size(raw: object) -> int:
    """Validate the size a client declares for a multipart upload.

    Args:
        raw: Declared size (number or numeric string, missing means 0).

    Returns:
        Size in whole bytes.

    Raises:
        InvalidArgumentError: If the size is not a finite number between 0
            and MAX_DECLARED_SIZE.
    """
    if raw is None or raw == '':
        return 0
    if isinstance(raw, bool):
        raise InvalidArgumentError('invalid file size')
    if isinstance(raw, int):
        size: float = raw
    else:
        try:
            size = float(raw)  # type: ignore[arg-type]
        except (OverflowError, TypeError, ValueError) as error:
            raise InvalidArgumentError('invalid file size') from error
        if not math.isfinite(size):
            raise InvalidArgumentError('invalid file size')

    if size < 0 or size > MAX_DECLARED_SIZE:
        raise InvalidArgumentError('invalid file size')
    return math.floor(size)


def parse_timestamp(raw: object) -> datetime | None:
    """Parse an ISO 8601 timestamp.

    Naive timestamps are taken as UTC.

    Args:
        raw: Client input.

    Returns:
        Aware datetime, or None for blank or unparsable input.
    """
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        parsed = datetime.fromisoformat(raw.strip().replace('Z', '+00:00'))
    except ValueError:
        return None
    if timezone.is_naive(parsed):
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
