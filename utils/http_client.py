"""
HTTP helper with retries + JSON decoding reused by the feed client and directory sources.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from utils.errors import DecodeFailure, RemoteSourceFailure
from utils.security import redact_secrets

logger = logging.getLogger(__name__)


class HttpClient:
    def __init__(self, timeout: int = 15, max_retries: int = 3, user_agent: str | None = None):
        self.timeout = timeout
        self.session = requests.Session()
        retry = Retry(
            total=max_retries,
            backoff_factor=0.6,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        self.session.headers.update(
            {
                "User-Agent": user_agent or "CivicFeed/1.0",
                "Accept": "application/json",
            }
        )

    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET ``url`` and return the decoded JSON body.

        Raises RemoteSourceFailure on transport errors or non-2xx statuses and
        DecodeFailure when the body is not JSON.
        """
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            message = redact_secrets(str(exc))
            logger.error("HTTP GET exception %s", message)
            raise RemoteSourceFailure(f"GET {redact_secrets(url)} failed: {message}") from exc

        if not 200 <= resp.status_code < 300:
            logger.warning("HTTP GET failed %s %s", resp.status_code, redact_secrets(resp.text[:200]))
            raise RemoteSourceFailure(
                f"GET {redact_secrets(url)} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise DecodeFailure(f"GET {redact_secrets(url)} returned a non-JSON body") from exc

    def close(self) -> None:
        self.session.close()
