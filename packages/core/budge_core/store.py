"""In-memory record store with atomic bulk commits."""

from __future__ import annotations

import threading
from datetime import date
from typing import Iterable, Optional, Sequence

from budge_schemas import Category, ClassifiedRecord, RecordKey, StoreSummary

from .errors import StoreConsistencyError
from .logging_setup import get_logger

logger = get_logger("budge.store")


class RecordStore:
    """Keyed collection of classified records.

    The backing collection is an immutable tuple. Writers build the next
    version in full under a lock and swap the reference in one assignment,
    so readers always see a complete pre- or post-commit state without
    taking the lock themselves.
    """

    def __init__(self, records: Iterable[ClassifiedRecord] = ()) -> None:
        self._write_lock = threading.Lock()
        self._records: tuple[ClassifiedRecord, ...] = ()
        self.replace_all(records)

    def __len__(self) -> int:
        return len(self._records)

    def records(self) -> tuple[ClassifiedRecord, ...]:
        return self._records

    def get(self, key: RecordKey) -> ClassifiedRecord:
        for record in self._records:
            if record.key == key:
                return record
        raise KeyError(f"Record {key} not found in store")

    def unclassified(self) -> list[ClassifiedRecord]:
        return [record for record in self._records if not record.is_classified]

    def summary(self) -> StoreSummary:
        snapshot = self._records
        classified = sum(1 for record in snapshot if record.is_classified)
        return StoreSummary(
            total=len(snapshot),
            classified=classified,
            unclassified=len(snapshot) - classified,
        )

    def filter(
        self,
        account: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        description: Optional[str] = None,
        classified: Optional[bool] = None,
        category: Optional[Category] = None,
    ) -> list[ClassifiedRecord]:
        needle = description.lower() if description else None
        matches: list[ClassifiedRecord] = []
        for item in self._records:
            raw = item.record
            if account and raw.account != account:
                continue
            if date_from is not None and raw.date < date_from:
                continue
            if date_to is not None and raw.date > date_to:
                continue
            if needle is not None:
                haystack = f"{raw.description} {item.description or ''}".lower()
                if needle not in haystack:
                    continue
            if classified is not None and item.is_classified != classified:
                continue
            if category is not None and item.category != category:
                continue
            matches.append(item)
        matches.sort(key=lambda item: (item.record.date, item.key))
        return matches

    def commit_batch(self, records: Sequence[ClassifiedRecord]) -> None:
        """Append ``records`` as one atomic step."""
        with self._write_lock:
            current = self._records
            seen = {record.key for record in current}
            for record in records:
                if record.key in seen:
                    raise StoreConsistencyError(
                        f"Record key {record.key} is already present in the store"
                    )
                seen.add(record.key)
            self._records = current + tuple(records)
        logger.info("Committed batch of %d records", len(records))

    def commit_reprocess(
        self,
        pre_images: Sequence[ClassifiedRecord],
        post_images: Sequence[ClassifiedRecord],
    ) -> None:
        """Replace each pre-image with its post-image as one atomic step.

        Every pre-image must still be the stored version of its record;
        otherwise nothing is replaced.
        """
        if len(pre_images) != len(post_images):
            msg = "Pre-images and post-images must be the same length"
            raise StoreConsistencyError(msg)
        expected: dict[RecordKey, ClassifiedRecord] = {}
        replacements: dict[RecordKey, ClassifiedRecord] = {}
        for before, after in zip(pre_images, post_images, strict=True):
            if before.key != after.key:
                raise StoreConsistencyError(
                    f"Post-image {after.key} does not match pre-image {before.key}"
                )
            if before.key in expected:
                raise StoreConsistencyError(
                    f"Record {before.key} appears more than once in the commit"
                )
            expected[before.key] = before
            replacements[after.key] = after
        with self._write_lock:
            current = self._records
            present = {record.key: record for record in current}
            missing = sorted(set(replacements) - set(present))
            if missing:
                raise StoreConsistencyError(f"Records {missing} not found in store")
            stale = sorted(
                key
                for key, before in expected.items()
                if present[key] is not before and present[key] != before
            )
            if stale:
                raise StoreConsistencyError(
                    f"Records {stale} changed since they were read"
                )
            self._records = tuple(
                replacements.get(record.key, record) for record in current
            )
        logger.info("Replaced %d reprocessed records", len(replacements))

    def replace_all(self, records: Iterable[ClassifiedRecord]) -> None:
        """Swap in an entirely new collection."""
        incoming = tuple(records)
        keys = [record.key for record in incoming]
        if len(set(keys)) != len(keys):
            raise StoreConsistencyError("Duplicate record keys in replacement set")
        with self._write_lock:
            self._records = incoming

    def clear(self) -> None:
        with self._write_lock:
            self._records = ()


__all__ = ["RecordStore"]
