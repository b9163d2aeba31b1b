"""Typed schemas used across budge services."""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

RecordKey = int

FIELD_COUNT = 8


class FrozenModel(BaseModel):
    """Base model with shared configuration settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class Category(str, Enum):
    """Closed set of classification outcomes."""

    TRANSFER = "transfer"
    INCOME = "income"
    GROCERIES = "groceries"
    DINING = "dining"
    UTILITIES = "utilities"
    HOUSING = "housing"
    TRANSPORTATION = "transportation"
    SHOPPING = "shopping"
    HEALTH = "health"
    ENTERTAINMENT = "entertainment"
    FEES = "fees"
    OTHER = "other"


class Record(FrozenModel):
    """A raw transaction as ingested from one statement row."""

    key: RecordKey
    account: str
    date: date
    posted_date: Optional[date] = None
    type: str
    description: str
    amount: Decimal
    reference: str = ""
    balance: str = ""
    source_file: str = ""


class ClassifiedRecord(BaseModel):
    """A record together with its classification state.

    Unlike the other schemas this one is mutable: rule engines, the transfer
    resolver and account matchers update it in place. Take a ``clone()``
    before handing a stored record to any of them.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    record: Record
    category: Optional[Category] = None
    description: Optional[str] = None
    amount: Optional[Decimal] = None
    counter_account: Optional[str] = None
    counter_key: Optional[RecordKey] = None
    is_classified: bool = False

    @property
    def key(self) -> RecordKey:
        return self.record.key

    @property
    def is_transfer(self) -> bool:
        return self.category is Category.TRANSFER

    def clone(self) -> ClassifiedRecord:
        return self.model_copy(deep=True)


class RuleFields(FrozenModel):
    """Fields shared by stored rules and rule creation requests."""

    name: str
    pattern: str
    category: Category
    description: Optional[str] = None
    negate_amount: bool = False

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"Invalid rule pattern {value!r}: {exc}") from exc
        return value


class RuleDefinition(RuleFields):
    """Saved classification rule stored on disk."""


class AccountDefinition(FrozenModel):
    """A declared account that transfers can be matched against."""

    name: str
    marker: str
    aliases: list[str] = Field(default_factory=list)


class ProcessRequest(FrozenModel):
    """Payload accepted by the `/process` endpoint."""

    files: list[str]


class ProcessResponse(FrozenModel):
    """Outcome of a `/process` call."""

    committed: int
    error: Optional[str] = None


class ReprocessRequest(FrozenModel):
    """Optional restriction of reprocessing to specific record keys."""

    keys: Optional[list[RecordKey]] = None


class ReprocessResponse(FrozenModel):
    """Outcome of a `/reprocess` call."""

    candidates: int
    reprocessed: int


class RecordQuery(FrozenModel):
    """Filter criteria for listing stored records."""

    account: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    description: Optional[str] = None
    classified: Optional[bool] = None
    category: Optional[Category] = None


class StoreSummary(FrozenModel):
    """Counts of stored records by classification state."""

    total: int
    classified: int
    unclassified: int


class RecordListResponse(BaseModel):
    """Collection response for record listing."""

    records: list[ClassifiedRecord]
    summary: StoreSummary


class RuleCreateRequest(RuleFields):
    """Request payload for creating a new rule."""


__all__ = [
    "AccountDefinition",
    "Category",
    "ClassifiedRecord",
    "FIELD_COUNT",
    "FrozenModel",
    "ProcessRequest",
    "ProcessResponse",
    "Record",
    "RecordKey",
    "RecordListResponse",
    "RecordQuery",
    "ReprocessRequest",
    "ReprocessResponse",
    "RuleCreateRequest",
    "RuleDefinition",
    "RuleFields",
    "StoreSummary",
]
