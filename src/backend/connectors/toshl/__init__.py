"""Toshl connector (network + auth lives here; record adapters live in src/backend/adapters/toshl)."""

from .client import FetchResult, TransportError
from .config import ToshlConfig, get_toshl_config
from .service import ToshlLedgerService

__all__ = ["FetchResult", "TransportError", "ToshlConfig", "get_toshl_config", "ToshlLedgerService"]
