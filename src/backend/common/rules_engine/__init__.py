"""Source-agnostic rules engine for ledger entries.

This package intentionally contains only domain logic:
- Rule inputs are typed entries + reference catalogs + a compiled rule set.
- No Toshl, file-state, or network calls live here (rule documents are read from disk).
"""

from .config import RuleSet, compile_rules, load_rule_set, rules_hash
from .context import Catalog, LedgerContext
from .errors import ConfigurationError, ReferenceResolutionError
from .models import Account, Category, Entry, EntryDiff, EntryKind, Tag
from .rule import EntryRule, Rule, TransferRule
from .runner import EntryChange, RulesRunner, apply_diff, first_match
