"""Build immutable records from normalized statement fields."""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterator, Optional, Sequence

from budge_schemas import FIELD_COUNT, Record, RecordKey

from .errors import FieldParseError, MalformedRowError, ParseErrorKind

_DEFAULT_DATE_FORMATS: tuple[str, ...] = ("%m/%d/%Y",)

RecordValues = dict[str, Any]


class KeyAllocator:
    """Thread-safe, monotonically increasing source of record keys."""

    def __init__(self, start: int = 1) -> None:
        self._counter: Iterator[int] = itertools.count(start)
        self._lock = threading.Lock()

    def next_key(self) -> RecordKey:
        with self._lock:
            return next(self._counter)


_PROCESS_KEYS = KeyAllocator()


def parse_date(value: str, formats: Sequence[str] = _DEFAULT_DATE_FORMATS) -> date:
    candidate = value.strip()
    for fmt in formats:
        try:
            return datetime.strptime(candidate, fmt).date()
        except ValueError:
            continue
    raise FieldParseError(ParseErrorKind.BAD_DATE, value)


def parse_amount(value: str) -> Decimal:
    cleaned = value.strip()
    if cleaned == "":
        raise FieldParseError(ParseErrorKind.BAD_AMOUNT, value)
    try:
        amount = Decimal(cleaned)
    except InvalidOperation as exc:
        raise FieldParseError(ParseErrorKind.BAD_AMOUNT, value) from exc
    if not amount.is_finite():
        raise FieldParseError(ParseErrorKind.BAD_AMOUNT, value)
    return amount


@dataclass(slots=True)
class RecordFactory:
    """Turn an 8-field row into a ``Record`` with a fresh key.

    Field layout: account marker, date, type, description, amount, posted
    date, reference, balance. The posted date may be blank; every other
    parsed field is validated strictly.
    """

    date_formats: tuple[str, ...] = _DEFAULT_DATE_FORMATS
    keys: KeyAllocator = field(default_factory=lambda: _PROCESS_KEYS)

    def build(self, fields: Sequence[str], source_file: str = "") -> Record:
        return self.assign(self.parse(fields, source_file))

    def assign(self, values: RecordValues) -> Record:
        """Allocate the next key for already-validated ``values``."""
        return Record(key=self.keys.next_key(), **values)

    def parse(self, fields: Sequence[str], source_file: str = "") -> RecordValues:
        """Validate ``fields`` without allocating a key."""
        if len(fields) != FIELD_COUNT:
            raise FieldParseError(ParseErrorKind.FIELD_COUNT, str(len(fields)))
        account, date_raw, type_raw, description, amount_raw = fields[:5]
        posted_raw, reference, balance = fields[5:]

        account = account.strip()
        if not account:
            raise MalformedRowError("missing account marker")

        txn_date = parse_date(date_raw, self.date_formats)
        posted_date: Optional[date] = None
        if posted_raw.strip():
            posted_date = parse_date(posted_raw, self.date_formats)
        amount = parse_amount(amount_raw)

        return {
            "account": account,
            "date": txn_date,
            "posted_date": posted_date,
            "type": type_raw.strip(),
            "description": description.strip(),
            "amount": amount,
            "reference": reference.strip(),
            "balance": balance.strip(),
            "source_file": source_file,
        }


__all__ = ["KeyAllocator", "RecordFactory", "RecordValues", "parse_amount", "parse_date"]
