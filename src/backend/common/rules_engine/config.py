from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import ConfigurationError
from .matcher import AmountFilter, Matcher
from .models import EntryKind
from .rule import EntryRule, Rule, TransferRule

_SHAPE_ERRORS = ("missing", "extra_forbidden")


class MatchDefinition(BaseModel):
    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)

    pattern: str
    type: Optional[str] = None
    account: Optional[str] = None
    amount: Optional[str] = None


class EntryRuleDefinition(BaseModel):
    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)

    match: Union[str, MatchDefinition]
    description: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None


class TransferRuleDefinition(BaseModel):
    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)

    match: Union[str, MatchDefinition]
    description: Optional[str] = None
    transfer: str


@dataclass(frozen=True)
class RuleSet:
    rules: Tuple[Rule, ...]
    rules_hash: str


def rules_hash(document: Any) -> str:
    """SHA-256 over a canonical JSON encoding, independent of source formatting."""
    canonical = json.dumps(
        document,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def load_rules_document(path: Union[str, Path]) -> Any:
    rules_path = Path(path).expanduser()
    if not rules_path.exists():
        raise ConfigurationError(f"Rules file not found: {rules_path}")
    try:
        with rules_path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Rules file {rules_path} is not valid YAML: {exc}") from exc


def load_rule_set(path: Union[str, Path]) -> RuleSet:
    document = load_rules_document(path)
    return RuleSet(rules=compile_rules(document), rules_hash=rules_hash(document))


def _definitions(document: Any) -> Sequence[Any]:
    if document is None:
        return []
    if isinstance(document, dict) and "rules" in document:
        document = document["rules"] or []
    if not isinstance(document, list):
        raise ConfigurationError("Rules document must be a list of rules (or a mapping with a 'rules' list).")
    return document


def compile_rules(document: Any) -> Tuple[Rule, ...]:
    return tuple(compile_rule(raw, position) for position, raw in enumerate(_definitions(document)))


def compile_rule(raw: Any, position: int = 0) -> Rule:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Rule #{position + 1} must be a mapping, got {type(raw).__name__}.")

    definition: Union[EntryRuleDefinition, TransferRuleDefinition]
    try:
        if "transfer" in raw:
            definition = TransferRuleDefinition.model_validate(raw)
        else:
            definition = EntryRuleDefinition.model_validate(raw)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "rule"
        if error["type"] in _SHAPE_ERRORS:
            raise ConfigurationError(
                f"Rule #{position + 1} is neither an entry rule nor a transfer rule: {field}: {error['msg']}"
            ) from exc
        raise ConfigurationError(f"Rule #{position + 1}: invalid {field}: {error['msg']}") from exc

    matcher = _compile_matcher(definition.match, position)
    if isinstance(definition, TransferRuleDefinition):
        return TransferRule(
            matcher=matcher,
            account=definition.transfer,
            description=definition.description,
            position=position,
        )
    return EntryRule(
        matcher=matcher,
        description=definition.description,
        category=definition.category,
        tags=tuple(definition.tags) if definition.tags is not None else None,
        position=position,
    )


def _compile_matcher(match: Union[str, MatchDefinition], position: int) -> Matcher:
    if isinstance(match, str):
        return Matcher.compile(match)

    kind: Optional[EntryKind] = None
    if match.type is not None:
        try:
            kind = EntryKind(match.type)
        except ValueError as exc:
            raise ConfigurationError(
                f"Rule #{position + 1}: match type must be 'expense' or 'income', got {match.type!r}."
            ) from exc

    amount: Optional[AmountFilter] = None
    if match.amount is not None:
        # Amounts are compared by magnitude, so the sign must come from the type.
        if kind is None:
            raise ConfigurationError(f"Rule #{position + 1}: an amount filter requires a match type.")
        amount = AmountFilter.parse(match.amount)

    return Matcher.compile(match.pattern, kind=kind, account=match.account, amount=amount)
