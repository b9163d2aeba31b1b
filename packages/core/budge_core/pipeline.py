"""Ingestion, classification and reprocessing of statement records."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Iterable, Optional, Protocol, Sequence, Union

from budge_schemas import ClassifiedRecord, Record, RecordKey

from .errors import FieldParseError, FileAccessError, IngestionError, MalformedRowError
from .factory import RecordFactory, RecordValues
from .logging_setup import get_logger
from .matching import AccountMatcher, load_accounts
from .normalizer import normalize
from .rules import RuleEngine
from .settings import Settings
from .store import RecordStore
from .transfers import TransferResolver

logger = get_logger("budge.pipeline")

StatementPath = Union[str, PathLike[str]]


class Classifier(Protocol):
    def classify(self, record: ClassifiedRecord) -> bool: ...


class Matcher(Protocol):
    def match(
        self, record: ClassifiedRecord, peers: Iterable[ClassifiedRecord] = ()
    ) -> None: ...


@dataclass(frozen=True, slots=True)
class Unchanged:
    """No rule matched; the stored record stays as it is."""

    original: ClassifiedRecord


@dataclass(frozen=True, slots=True)
class Updated:
    """A rule matched; ``result`` replaces ``original`` on commit."""

    original: ClassifiedRecord
    result: ClassifiedRecord


Outcome = Union[Unchanged, Updated]


@dataclass(slots=True)
class FileReadResult:
    """Parsed rows and errors read from a single statement file."""

    path: Path
    rows: list[RecordValues] = field(default_factory=list)
    errors: list[IngestionError] = field(default_factory=list)


class ClassificationPipeline:
    """Turn statement files into classified records in a ``RecordStore``."""

    def __init__(
        self,
        store: RecordStore,
        rule_engine: Classifier,
        *,
        factory: Optional[RecordFactory] = None,
        transfer_resolver: Optional[TransferResolver] = None,
        account_matcher: Optional[Matcher] = None,
        read_workers: int = 1,
    ) -> None:
        self.store = store
        self.rule_engine = rule_engine
        self.factory = factory or RecordFactory()
        self.transfer_resolver = transfer_resolver or TransferResolver()
        self.account_matcher = account_matcher or AccountMatcher()
        self.read_workers = max(1, read_workers)

    @classmethod
    def from_settings(
        cls,
        store: RecordStore,
        settings: Optional[Settings] = None,
        *,
        rules_file: Optional[Path] = None,
        accounts_file: Optional[Path] = None,
    ) -> ClassificationPipeline:
        settings = settings or Settings()
        matcher = AccountMatcher(
            load_accounts(accounts_file),
            window_days=settings.match_window_days,
            amount_tolerance=settings.amount_tolerance,
            min_score=settings.match_min_score,
        )
        return cls(
            store,
            RuleEngine.from_workspace(rules_file),
            factory=RecordFactory(date_formats=settings.date_formats),
            transfer_resolver=TransferResolver(
                boilerplate=settings.transfer_boilerplate,
                leading_separator=settings.leading_separator,
            ),
            account_matcher=matcher,
            read_workers=settings.read_workers,
        )

    def process(self, files: Sequence[StatementPath]) -> str | None:
        """Ingest ``files`` and commit their records as one batch.

        Returns ``None`` on success. Otherwise returns every file and row
        failure joined by newlines, in file order then row order, and leaves
        the store untouched.
        """
        paths = [Path(item) for item in files]
        results = self._read_all(paths)

        errors = [error for result in results for error in result.errors]
        if errors:
            for error in errors:
                logger.warning("Ingestion error: %s", error)
            logger.warning(
                "Skipping commit: %d errors across %d files", len(errors), len(paths)
            )
            return "\n".join(str(error) for error in errors)

        # Keys are allocated only after the merge so they follow file then row order.
        records = [self.factory.assign(row) for result in results for row in result.rows]
        classified = self.classify_batch(records)
        self.store.commit_batch(classified)
        logger.info(
            "Processed %d records from %d files (%d classified)",
            len(classified),
            len(paths),
            sum(1 for item in classified if item.is_classified),
        )
        return None

    def reprocess(self, candidates: Optional[Iterable[ClassifiedRecord]] = None) -> int:
        """Retry classification for unclassified records.

        Candidates are looked up in the store by key; keys that are missing,
        repeated or already classified there are skipped. Every remaining
        record is classified on a clone. Only clones a rule matched are
        written back, in one bulk replacement; the rest of the store is not
        touched. Returns the number of records replaced.
        """
        if candidates is None:
            candidates = self.store.unclassified()
        visited = self._current_unclassified(candidates)
        outcomes = [self.attempt(item) for item in visited]
        updated = [outcome for outcome in outcomes if isinstance(outcome, Updated)]
        if updated:
            self.store.commit_reprocess(
                [outcome.original for outcome in updated],
                [outcome.result for outcome in updated],
            )
        logger.info("Reprocessed %d of %d candidates", len(updated), len(visited))
        return len(updated)

    def _current_unclassified(
        self, candidates: Iterable[ClassifiedRecord]
    ) -> list[ClassifiedRecord]:
        stored = {record.key: record for record in self.store.records()}
        seen: set[RecordKey] = set()
        visited: list[ClassifiedRecord] = []
        for candidate in candidates:
            current = stored.get(candidate.key)
            if current is None or current.is_classified or candidate.key in seen:
                continue
            seen.add(candidate.key)
            visited.append(current)
        return visited

    def attempt(self, record: ClassifiedRecord) -> Outcome:
        working = record.clone()
        if not self.rule_engine.classify(working):
            logger.debug("No rule matched record %s", record.key)
            return Unchanged(record)
        if working.is_transfer:
            self.transfer_resolver.resolve(working)
        self.account_matcher.match(working, self.store.records())
        return Updated(record, working)

    def classify_batch(self, records: Sequence[Record]) -> list[ClassifiedRecord]:
        wrapped = [ClassifiedRecord(record=record) for record in records]
        peers = (*self.store.records(), *wrapped)
        for item in wrapped:
            self.rule_engine.classify(item)
            if item.is_transfer:
                self.transfer_resolver.resolve(item)
            # Counter-account correlation does not depend on the rule outcome.
            self.account_matcher.match(item, peers)
        return wrapped

    def read_file(self, path: Path) -> FileReadResult:
        result = FileReadResult(path=path)
        try:
            with path.open("r", encoding="utf-8") as handle:
                lines = handle.readlines()
        except FileNotFoundError:
            result.errors.append(FileAccessError(path, "file not found"))
            return result
        except UnicodeDecodeError:
            result.errors.append(FileAccessError(path, "file is not valid UTF-8 text"))
            return result
        except OSError as exc:
            reason = exc.strerror or exc.__class__.__name__
            result.errors.append(FileAccessError(path, f"could not be read ({reason})"))
            return result

        # First line is the column header.
        for line_number, line in enumerate(lines[1:], start=2):
            if not line.strip():
                continue
            try:
                fields = normalize(line)
                result.rows.append(self.factory.parse(fields, path.name))
            except (MalformedRowError, FieldParseError) as exc:
                result.errors.append(exc.at(path.name, line_number))
        logger.debug(
            "Read %d rows and %d errors from %s",
            len(result.rows),
            len(result.errors),
            path.name,
        )
        return result

    def _read_all(self, paths: Sequence[Path]) -> list[FileReadResult]:
        if self.read_workers == 1 or len(paths) < 2:
            return [self.read_file(path) for path in paths]
        with ThreadPoolExecutor(max_workers=min(self.read_workers, len(paths))) as pool:
            # map() yields in submission order, which keeps the merge deterministic.
            return list(pool.map(self.read_file, paths))


__all__ = [
    "ClassificationPipeline",
    "Classifier",
    "FileReadResult",
    "Matcher",
    "Outcome",
    "Unchanged",
    "Updated",
]
