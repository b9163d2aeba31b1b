"""Fixed-width recovery for ragged statement rows."""

from __future__ import annotations

from typing import Sequence

from budge_schemas import FIELD_COUNT

from .errors import MalformedRowError

DELIMITER = ","
_DESCRIPTION_SLOT = 3

NormalizedFields = tuple[str, ...]


def _contract(tokens: Sequence[str]) -> list[str]:
    head = list(tokens[:_DESCRIPTION_SLOT])
    merged = f"{tokens[_DESCRIPTION_SLOT]} {tokens[_DESCRIPTION_SLOT + 1]}"
    return [*head, merged, *tokens[_DESCRIPTION_SLOT + 2 :]]


def normalize(raw_line: str) -> NormalizedFields:
    """Split ``raw_line`` into exactly ``FIELD_COUNT`` fields.

    Statement exports do not quote the description column, so any comma in a
    description shows up as an extra token. Each surplus token is folded back
    into the description slot, one contraction at a time. Columns before the
    description are assumed never to contain the delimiter.
    """
    tokens = raw_line.rstrip("\r\n").split(DELIMITER)
    if len(tokens) < FIELD_COUNT:
        raise MalformedRowError(
            f"expected at least {FIELD_COUNT} fields, got {len(tokens)}"
        )
    for _ in range(len(tokens) - FIELD_COUNT):
        tokens = _contract(tokens)
    return tuple(tokens)


__all__ = ["DELIMITER", "NormalizedFields", "normalize"]
