from __future__ import annotations

import base64
import json
import logging
import re
from dataclasses import dataclass
from email.utils import parsedate_to_datetime
from typing import Any, Iterator
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode, urljoin
from urllib.request import Request, urlopen

from .config import ToshlConfig


logger = logging.getLogger(__name__)

_LINK_PART = re.compile(r'<(?P<url>[^>]*)>\s*;(?P<params>[^,]*)')
_REL_NEXT = re.compile(r'rel\s*=\s*"?next"?', re.IGNORECASE)


class TransportError(RuntimeError):
    def __init__(self, resource: str, status: int, message: str, body: str | None = None):
        super().__init__(f"Toshl {resource} HTTP {status}: {message}" + (f" {body}" if body else ""))
        self.resource = resource
        self.status = status
        self.body = body


@dataclass(frozen=True)
class Page:
    records: list[dict[str, Any]]
    next_url: str | None = None
    last_modified: str | None = None


@dataclass(frozen=True)
class FetchResult:
    records: list[dict[str, Any]]
    watermark: str | None = None


def iter_pages(
    config: ToshlConfig,
    resource: str,
    *,
    params: dict[str, Any] | None = None,
) -> Iterator[Page]:
    """
    Lazily yield every page of a list resource, following `Link: rel="next"` headers.
    """
    query = {"per_page": config.page_size}
    query.update({k: v for k, v in (params or {}).items() if v is not None})
    url: str | None = _build_url(config.base_url, resource, query)
    page_number = 0

    while url:
        payload, headers = _send(config, "GET", url, resource=resource)
        if not isinstance(payload, list):
            raise TransportError(resource, 200, "expected a JSON list", json.dumps(payload)[:500])
        link = _next_link(headers.get("link"))
        next_url = urljoin(config.base_url + "/", link) if link else None
        page_number += 1
        logger.debug("Fetched %s page %d (%d records)", resource, page_number, len(payload))
        yield Page(
            records=[r for r in payload if isinstance(r, dict)],
            next_url=next_url,
            last_modified=_watermark(headers.get("last-modified")),
        )
        url = next_url


def fetch_all(
    config: ToshlConfig,
    resource: str,
    *,
    params: dict[str, Any] | None = None,
) -> FetchResult:
    """Union of all pages plus the final page's `Last-Modified` watermark."""
    records: list[dict[str, Any]] = []
    watermark: str | None = None
    for page in iter_pages(config, resource, params=params):
        records.extend(page.records)
        watermark = page.last_modified
    logger.info("Fetched %d %s", len(records), resource)
    return FetchResult(records=records, watermark=watermark)


def replace(config: ToshlConfig, resource: str, record_id: str, record: dict[str, Any]) -> dict[str, Any]:
    """PUT the full record; any non-success response raises TransportError."""
    url = _build_url(config.base_url, f"{resource}/{record_id}", None)
    payload, _ = _send(config, "PUT", url, resource=resource, body=record)
    return payload if isinstance(payload, dict) else {}


def _send(
    config: ToshlConfig,
    method: str,
    url: str,
    *,
    resource: str,
    body: dict[str, Any] | None = None,
) -> tuple[Any, dict[str, str]]:
    data = json.dumps(body).encode("utf-8") if body is not None else None
    req = Request(url, data=data, method=method)
    req.add_header("Accept", "application/json")
    req.add_header("Authorization", f"Basic {_basic_auth(config.token)}")
    if data is not None:
        req.add_header("Content-Type", "application/json")

    try:
        with urlopen(req, timeout=config.timeout_seconds) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
            headers = {k.lower(): v for k, v in (resp.headers or {}).items()}
            return (json.loads(raw) if raw.strip() else None), headers
    except HTTPError as exc:
        err_body = exc.read().decode("utf-8", errors="replace") if exc.fp else None
        raise TransportError(resource, exc.code, str(exc.reason), err_body) from exc
    except URLError as exc:
        raise TransportError(resource, 0, str(exc.reason)) from exc


def _watermark(last_modified: str | None) -> str | None:
    # `since` takes ISO 8601 while Last-Modified is an HTTP-date.
    if not last_modified:
        return None
    try:
        return parsedate_to_datetime(last_modified).isoformat()
    except (TypeError, ValueError):
        return last_modified


def _basic_auth(token: str) -> str:
    # Toshl takes the personal token as the Basic auth username with an empty password.
    return base64.b64encode(f"{token}:".encode("utf-8")).decode("utf-8")


def _next_link(header: str | None) -> str | None:
    if not header:
        return None
    for m in _LINK_PART.finditer(header):
        if _REL_NEXT.search(m.group("params")):
            return m.group("url")
    return None


def _build_url(base_url: str, path: str, params: dict[str, Any] | None) -> str:
    normalized_path = path if path.startswith("/") else f"/{path}"
    url = urljoin(base_url, normalized_path)
    if params:
        url = f"{url}?{urlencode(params)}"
    return url
