"""Counter-account matching for transfers."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Iterable, Optional, Sequence

import yaml
from budge_schemas import AccountDefinition, ClassifiedRecord
from rapidfuzz import fuzz, process

from .logging_setup import get_logger
from .workspace import accounts_path

logger = get_logger("budge.matching")

_DEFAULT_WINDOW_DAYS = 3
_DEFAULT_MIN_SCORE = 80


def load_accounts(path: Optional[Path] = None) -> list[AccountDefinition]:
    path = path or accounts_path()
    if not path.exists():
        return []
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not raw:
        return []
    return [AccountDefinition.model_validate(item) for item in raw]


class AccountMatcher:
    """Attach a counter-account reference to transfer records.

    A transfer is first linked to its other half: a record on a different
    account carrying the opposite amount within ``window_days``. Failing
    that, the cleaned description is fuzzy-matched against declared account
    aliases. Records that are not transfers are left alone.
    """

    def __init__(
        self,
        accounts: Sequence[AccountDefinition] = (),
        *,
        window_days: int = _DEFAULT_WINDOW_DAYS,
        amount_tolerance: Decimal = Decimal("0.00"),
        min_score: int = _DEFAULT_MIN_SCORE,
    ) -> None:
        self.window_days = window_days
        self.amount_tolerance = amount_tolerance
        self.min_score = min_score
        self._accounts: tuple[AccountDefinition, ...] = tuple(accounts)
        self._alias_lookup: dict[str, AccountDefinition] = {}
        for account in self._accounts:
            for alias in (account.name, *account.aliases):
                cleaned = alias.strip().lower()
                if cleaned:
                    self._alias_lookup[cleaned] = account
        self._aliases: tuple[str, ...] = tuple(self._alias_lookup.keys())

    @property
    def accounts(self) -> tuple[AccountDefinition, ...]:
        return self._accounts

    def match(
        self, record: ClassifiedRecord, peers: Iterable[ClassifiedRecord] = ()
    ) -> None:
        if not record.is_transfer:
            return
        counterpart = self.find_counterpart(record, peers)
        if counterpart is not None:
            record.counter_account = counterpart.record.account
            record.counter_key = counterpart.key
            logger.debug(
                "Linked transfer %s to %s on %s",
                record.key,
                counterpart.key,
                counterpart.record.account,
            )
            return
        account = self.match_alias(record)
        if account is not None:
            record.counter_account = account.marker
            logger.debug("Matched transfer %s to account %s", record.key, account.name)

    def find_counterpart(
        self, record: ClassifiedRecord, peers: Iterable[ClassifiedRecord]
    ) -> ClassifiedRecord | None:
        target = -record.record.amount
        best: tuple[int, int] | None = None
        chosen: ClassifiedRecord | None = None
        for peer in peers:
            if peer.key == record.key or peer.record.account == record.record.account:
                continue
            if abs(peer.record.amount - target) > self.amount_tolerance:
                continue
            distance = abs((peer.record.date - record.record.date).days)
            if distance > self.window_days:
                continue
            rank = (distance, peer.key)
            if best is None or rank < best:
                best = rank
                chosen = peer
        return chosen

    def match_alias(self, record: ClassifiedRecord) -> AccountDefinition | None:
        if not self._aliases:
            return None
        description = (record.description or record.record.description).lower()
        if not description:
            return None
        result = process.extractOne(
            description,
            self._aliases,
            scorer=fuzz.token_set_ratio,
        )
        if result is None or int(result[1] or 0) < self.min_score:
            return None
        account = self._alias_lookup[result[0]]
        if account.marker == record.record.account:
            return None
        return account


__all__ = ["AccountMatcher", "load_accounts"]
