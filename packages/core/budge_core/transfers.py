"""Cleanup of transfer descriptions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from budge_schemas import ClassifiedRecord

from .settings import DEFAULT_TRANSFER_BOILERPLATE


def strip_boilerplate(
    description: str, boilerplate: Sequence[str], leading_separator: str = "- "
) -> str:
    cleaned = description
    for literal in boilerplate:
        cleaned = cleaned.replace(literal, "")
    if leading_separator:
        cleaned = cleaned.replace(leading_separator, "", 1)
    return cleaned.strip()


@dataclass(slots=True)
class TransferResolver:
    """Strip banking-channel boilerplate from transfer descriptions.

    Only the parsed description changes. Working out which account a
    transfer came from or went to is the account matcher's job.
    """

    boilerplate: tuple[str, ...] = DEFAULT_TRANSFER_BOILERPLATE
    leading_separator: str = "- "

    def resolve(self, record: ClassifiedRecord) -> None:
        if not record.is_transfer:
            return
        source = record.description
        if source is None:
            source = record.record.description
        record.description = strip_boilerplate(
            source, self.boilerplate, self.leading_separator
        )


__all__ = ["TransferResolver", "strip_boilerplate"]
