"""Tests for transfer description cleanup."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from budge_core import TransferResolver, strip_boilerplate
from budge_schemas import Category, ClassifiedRecord, Record

SCU_TRANSFER = "- -SCU Mobile/Home Banking Transfer/John to Jane/-SCU Mobile"


def _classified(description: str, category: Category | None) -> ClassifiedRecord:
    record = Record(
        key=1,
        account="JCHK",
        date=date(2024, 1, 7),
        type="DEBIT",
        description=description,
        amount=Decimal("-200.00"),
    )
    return ClassifiedRecord(
        record=record,
        category=category,
        description=description,
        amount=record.amount,
        is_classified=category is not None,
    )


def test_resolve_strips_mobile_banking_boilerplate() -> None:
    entry = _classified(SCU_TRANSFER, Category.TRANSFER)

    TransferResolver().resolve(entry)

    assert entry.description == "John to Jane"
    assert entry.record.description == SCU_TRANSFER


def test_resolve_leaves_non_transfers_alone() -> None:
    entry = _classified(SCU_TRANSFER, Category.OTHER)

    TransferResolver().resolve(entry)

    assert entry.description == SCU_TRANSFER


def test_resolve_ignores_unclassified_records() -> None:
    entry = _classified(SCU_TRANSFER, None)

    TransferResolver().resolve(entry)

    assert entry.description == SCU_TRANSFER


def test_resolve_tolerates_missing_boilerplate() -> None:
    entry = _classified("Home Banking Transfer/Rent share", Category.TRANSFER)

    TransferResolver().resolve(entry)

    assert entry.description == "Rent share"


def test_resolve_falls_back_to_raw_description() -> None:
    entry = _classified(SCU_TRANSFER, Category.TRANSFER)
    entry.description = None

    TransferResolver().resolve(entry)

    assert entry.description == "John to Jane"


def test_strip_boilerplate_removes_only_first_leading_separator() -> None:
    cleaned = strip_boilerplate("- Savings - Emergency", (), "- ")

    assert cleaned == "Savings - Emergency"


def test_resolver_accepts_custom_boilerplate() -> None:
    resolver = TransferResolver(boilerplate=("ONLINE XFER TO ",), leading_separator="")
    entry = _classified("ONLINE XFER TO Savings 4411", Category.TRANSFER)

    resolver.resolve(entry)

    assert entry.description == "Savings 4411"
