from __future__ import annotations

from typing import Any

from . import client
from .client import FetchResult
from .config import ToshlConfig, get_toshl_config


class ToshlLedgerService:
    """Blocking fetch/replace access to the Toshl REST API."""

    def __init__(self, config: ToshlConfig | None = None) -> None:
        self._config = config or get_toshl_config()

    @property
    def config(self) -> ToshlConfig:
        return self._config

    def fetch_all(self, resource: str, query: dict[str, Any] | None = None) -> FetchResult:
        return client.fetch_all(self._config, resource, params=query)

    def replace(self, resource: str, record_id: str, record: dict[str, Any]) -> dict[str, Any]:
        return client.replace(self._config, resource, record_id, record)
