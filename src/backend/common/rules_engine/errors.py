from __future__ import annotations

from typing import Optional


class ConfigurationError(ValueError):
    """Raised when a rule document cannot be compiled."""


class ReferenceResolutionError(LookupError):
    def __init__(self, catalog: str, name: str, kind: Optional[str] = None, *, reason: str = "not found"):
        label = f"{name!r} ({kind})" if kind else repr(name)
        super().__init__(f"{catalog} {label} {reason}")
        self.catalog = catalog
        self.name = name
        self.kind = kind
