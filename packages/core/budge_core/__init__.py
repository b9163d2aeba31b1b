"""Core utilities for budge."""

from .errors import (
    FieldParseError,
    FileAccessError,
    IngestionError,
    MalformedRowError,
    ParseErrorKind,
    StoreConsistencyError,
)
from .factory import KeyAllocator, RecordFactory
from .logging_setup import configure_logging, get_logger
from .matching import AccountMatcher, load_accounts
from .normalizer import normalize
from .pipeline import ClassificationPipeline, Unchanged, Updated
from .rules import RuleEngine, append_rule, load_rules, match_rule, save_rules
from .settings import Settings, load_settings
from .store import RecordStore
from .transfers import TransferResolver, strip_boilerplate
from .workspace import accounts_path, data_root, inputs_path, rules_path, settings_path

__all__ = [
    "AccountMatcher",
    "ClassificationPipeline",
    "FieldParseError",
    "FileAccessError",
    "IngestionError",
    "KeyAllocator",
    "MalformedRowError",
    "ParseErrorKind",
    "RecordFactory",
    "RecordStore",
    "RuleEngine",
    "Settings",
    "StoreConsistencyError",
    "TransferResolver",
    "Unchanged",
    "Updated",
    "accounts_path",
    "append_rule",
    "configure_logging",
    "data_root",
    "get_logger",
    "inputs_path",
    "load_accounts",
    "load_rules",
    "load_settings",
    "match_rule",
    "normalize",
    "rules_path",
    "save_rules",
    "settings_path",
    "strip_boilerplate",
]
