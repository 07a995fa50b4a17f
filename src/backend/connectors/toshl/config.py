from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


DEFAULT_BASE_URL = "https://api.toshl.com"
DEFAULT_PAGE_SIZE = 500
DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_RULES_PATH = "rules.yaml"
DEFAULT_STATE_PATH = ".toshl_sync_state.json"


@dataclass(frozen=True)
class ToshlConfig:
    base_url: str
    token: str
    page_size: int = DEFAULT_PAGE_SIZE
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS


def get_toshl_config() -> ToshlConfig:
    """
    Load Toshl connector configuration from environment variables (and `.env`).

    Reads TOSHL_TOKEN (required), TOSHL_BASE_URL, TOSHL_PAGE_SIZE, TOSHL_TIMEOUT_SECONDS.
    """
    return ToshlConfig(
        base_url=os.getenv("TOSHL_BASE_URL", DEFAULT_BASE_URL).strip().rstrip("/") or DEFAULT_BASE_URL,
        token=_require_env("TOSHL_TOKEN"),
        page_size=_int_env("TOSHL_PAGE_SIZE", DEFAULT_PAGE_SIZE),
        timeout_seconds=_int_env("TOSHL_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
    )


def rules_path_from_env() -> str:
    return os.getenv("TOSHL_RULES_PATH", DEFAULT_RULES_PATH)


def state_path_from_env() -> str:
    return os.getenv("TOSHL_STATE_PATH", DEFAULT_STATE_PATH)


def _require_env(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ValueError(f"Missing required environment variable: {name}")
    return value


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}.") from exc
    if value <= 0:
        raise ValueError(f"{name} must be > 0")
    return value
