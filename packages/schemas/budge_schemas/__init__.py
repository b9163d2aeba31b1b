"""Shared Pydantic schemas for budge."""

from .records import (
    FIELD_COUNT,
    AccountDefinition,
    Category,
    ClassifiedRecord,
    ProcessRequest,
    ProcessResponse,
    Record,
    RecordKey,
    RecordListResponse,
    RecordQuery,
    ReprocessRequest,
    ReprocessResponse,
    RuleCreateRequest,
    RuleDefinition,
    StoreSummary,
)

__all__ = [
    "AccountDefinition",
    "Category",
    "ClassifiedRecord",
    "FIELD_COUNT",
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
    "StoreSummary",
]
