# job_applier/http_client.py
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import requests
from requests.adapters import HTTPAdapter

LOG = logging.getLogger(__name__)


class HttpClient:
    """Shared HTTP client with sane defaults and simple helpers. One attempt per call."""

    def __init__(
        self,
        timeout: float = 15.0,
        user_agent: str = "JobApplier/0.1 (+https://example.invalid)",
    ):
        self.timeout = float(timeout)
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

        adapter = HTTPAdapter(max_retries=0, pool_connections=4, pool_maxsize=4)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def get_bytes(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> bytes:
        """GET and return the raw response body; raises on non-2xx."""
        resp = self.session.get(url, headers=headers, timeout=timeout or self.timeout)
        resp.raise_for_status()
        return resp.content

    def post_json(
        self,
        url: str,
        payload: Any,
        *,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """POST a JSON body and parse the JSON reply with clearer errors if decoding fails."""
        resp = self.session.post(url, json=payload, headers=headers, timeout=timeout or self.timeout)
        resp.raise_for_status()
        try:
            return resp.json()
        except ValueError as e:
            # Server may send text/plain with a JSON body.
            try:
                return json.loads(resp.text)
            except ValueError:
                preview = resp.text[:200].replace("\n", " ")
                raise ValueError(f"JSON decode failed for {url!r}; body starts: {preview!r}") from e

    def close(self) -> None:
        try:
            self.session.close()
        except Exception:
            LOG.debug("HttpClient.close() swallow", exc_info=True)
