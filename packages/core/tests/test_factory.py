"""Tests for building records from normalized fields."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from budge_core import (
    FieldParseError,
    KeyAllocator,
    MalformedRowError,
    ParseErrorKind,
    RecordFactory,
    normalize,
)
from pydantic import ValidationError


def _fields(**overrides: str) -> tuple[str, ...]:
    values = {
        "account": "JCHK",
        "date": "01/05/2024",
        "type": "DEBIT",
        "description": "Coffee Shop",
        "amount": "-3.50",
        "posted": "01/06/2024",
        "reference": "",
        "balance": "1496.50",
    }
    values.update(overrides)
    return tuple(values.values())


def test_build_parses_dates_and_decimal_amount() -> None:
    factory = RecordFactory(keys=KeyAllocator(start=100))

    record = factory.build(_fields(), "march.csv")

    assert record.key == 100
    assert record.account == "JCHK"
    assert record.date == date(2024, 1, 5)
    assert record.posted_date == date(2024, 1, 6)
    assert record.amount == Decimal("-3.50")
    assert isinstance(record.amount, Decimal)
    assert record.balance == "1496.50"
    assert record.source_file == "march.csv"


def test_build_strips_description_padding_from_merged_fields() -> None:
    factory = RecordFactory()
    fields = normalize("JCHK,01/05/2024,DEBIT,Coffee, Shop, Downtown,3.50,,,")

    record = factory.build(fields)

    assert record.description == "Coffee  Shop  Downtown"
    assert record.posted_date is None
    assert record.reference == ""


def test_build_allocates_unique_increasing_keys() -> None:
    factory = RecordFactory(keys=KeyAllocator())

    keys = [factory.build(_fields()).key for _ in range(5)]

    assert keys == sorted(keys)
    assert len(set(keys)) == 5


def test_default_factories_share_process_wide_keys() -> None:
    first = RecordFactory().build(_fields())
    second = RecordFactory().build(_fields())

    assert second.key > first.key


def test_build_honours_configured_date_formats() -> None:
    factory = RecordFactory(date_formats=("%d/%m/%Y", "%Y-%m-%d"))

    record = factory.build(_fields(date="2024-03-09", posted="10/03/2024"))

    assert record.date == date(2024, 3, 9)
    assert record.posted_date == date(2024, 3, 10)


@pytest.mark.parametrize("value", ["13/45/2024", "2024-01-05", "", "yesterday"])
def test_build_rejects_bad_dates(value: str) -> None:
    with pytest.raises(FieldParseError) as excinfo:
        RecordFactory().build(_fields(date=value))

    assert excinfo.value.kind is ParseErrorKind.BAD_DATE


def test_build_rejects_bad_posted_date() -> None:
    with pytest.raises(FieldParseError) as excinfo:
        RecordFactory().build(_fields(posted="31/31/2024"))

    assert excinfo.value.kind is ParseErrorKind.BAD_DATE


@pytest.mark.parametrize("value", ["", "  ", "abc", "$3.50", "NaN", "Infinity"])
def test_build_rejects_bad_amounts(value: str) -> None:
    with pytest.raises(FieldParseError) as excinfo:
        RecordFactory().build(_fields(amount=value))

    assert excinfo.value.kind is ParseErrorKind.BAD_AMOUNT


def test_build_rejects_wrong_field_count() -> None:
    with pytest.raises(FieldParseError) as excinfo:
        RecordFactory().build(_fields()[:7])

    assert excinfo.value.kind is ParseErrorKind.FIELD_COUNT


def test_build_rejects_blank_account() -> None:
    with pytest.raises(MalformedRowError):
        RecordFactory().build(_fields(account="  "))


def test_parse_errors_report_location() -> None:
    error = FieldParseError(ParseErrorKind.BAD_AMOUNT, "abc").at("march.csv", 4)

    assert str(error) == "march.csv:4: bad amount 'abc'"


def test_records_are_immutable() -> None:
    record = RecordFactory().build(_fields())

    with pytest.raises(ValidationError):
        record.description = "changed"  # type: ignore[misc]


def test_parse_defers_key_allocation_to_assign() -> None:
    factory = RecordFactory(keys=KeyAllocator(start=7))

    first = factory.parse(_fields(description="First"))
    second = factory.parse(_fields(description="Second"))

    assert "key" not in first
    assert factory.assign(second).key == 7
    assert factory.assign(first).key == 8
