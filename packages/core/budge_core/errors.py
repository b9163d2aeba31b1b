"""Exceptions raised while ingesting statement files."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Union


class ParseErrorKind(str, Enum):
    """Reason a statement field could not be parsed."""

    BAD_DATE = "bad date"
    BAD_AMOUNT = "bad amount"
    FIELD_COUNT = "wrong field count"


class IngestionError(Exception):
    """Base class for recoverable file and row failures.

    ``str()`` of every subclass is the line reported in the aggregate
    message returned by ``ClassificationPipeline.process``.
    """


def _location(source: str, line_number: int | None) -> str:
    if line_number is None:
        return source or "<line>"
    return f"{source}:{line_number}"


class FileAccessError(IngestionError):
    """A statement file is missing or cannot be read."""

    def __init__(self, path: Union[Path, str], reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path.name}: {reason}")


class MalformedRowError(IngestionError):
    """A statement row does not have the shape of a transaction."""

    def __init__(
        self, detail: str, source: str = "", line_number: int | None = None
    ) -> None:
        self.detail = detail
        self.source = source
        self.line_number = line_number
        super().__init__(f"{_location(source, line_number)}: {detail}")

    def at(self, source: str, line_number: int) -> MalformedRowError:
        return MalformedRowError(self.detail, source, line_number)


class FieldParseError(IngestionError):
    """A date or amount field failed strict validation."""

    def __init__(
        self,
        kind: ParseErrorKind,
        value: str,
        source: str = "",
        line_number: int | None = None,
    ) -> None:
        self.kind = kind
        self.value = value
        self.source = source
        self.line_number = line_number
        super().__init__(f"{_location(source, line_number)}: {kind.value} {value!r}")

    def at(self, source: str, line_number: int) -> FieldParseError:
        return FieldParseError(self.kind, self.value, source, line_number)


class StoreConsistencyError(Exception):
    """A bulk commit would break record key uniqueness or pairing."""


__all__ = [
    "FieldParseError",
    "FileAccessError",
    "IngestionError",
    "MalformedRowError",
    "ParseErrorKind",
    "StoreConsistencyError",
]
