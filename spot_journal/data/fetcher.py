"""Bybit v5 execution history client."""

import hashlib
import hmac
import logging
import os
import time
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import requests

logger = logging.getLogger(__name__)

# Configuration from environment
BYBIT_BASE_URL = os.environ.get("BYBIT_BASE_URL", "https://api.bybit.com")
BYBIT_RECV_WINDOW = os.environ.get("BYBIT_RECV_WINDOW", "5000")
BYBIT_LOOKBACK_DAYS = int(os.environ.get("BYBIT_LOOKBACK_DAYS", "730"))
BYBIT_CATEGORY = os.environ.get("BYBIT_CATEGORY", "spot")

MS_PER_DAY = 24 * 60 * 60 * 1000


class BybitAPIError(RuntimeError):
    """Bybit answered with a non-zero retCode."""

    def __init__(self, ret_code: Any, message: str):
        self.ret_code = ret_code
        super().__init__(message)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class BybitClientConfig:
    base_url: str = BYBIT_BASE_URL
    endpoint: str = "/v5/execution/list"
    category: str = BYBIT_CATEGORY
    recv_window: str = BYBIT_RECV_WINDOW
    page_limit: int = 100  # Bybit execution list maximum
    lookback_days: int = BYBIT_LOOKBACK_DAYS
    timeout_s: float = 30.0


class BybitExecutionClient:
    """Fetches the account's execution history from Bybit.

    Requests are signed with HMAC-SHA256 as required by the v5 API.
    A read-only API key is sufficient.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        *,
        cfg: BybitClientConfig | None = None,
        session: requests.Session | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: Bybit API key (surrounding whitespace is ignored)
            api_secret: Bybit API secret (surrounding whitespace is ignored)
            cfg: Endpoint and paging configuration
            session: HTTP session (a new one is created if not given)
        """
        self._api_key = api_key.strip()
        self._api_secret = api_secret.strip()
        self._cfg = cfg or BybitClientConfig()
        self._session = session or requests.Session()

    def _url(self) -> str:
        return f"{self._cfg.base_url}{self._cfg.endpoint}"

    def sign(self, timestamp: str, query_string: str = "") -> str:
        """Sign a GET request.

        Args:
            timestamp: Request timestamp in epoch ms, as sent in X-BAPI-TIMESTAMP
            query_string: Exact URL-encoded query string of the request

        Returns:
            Hex HMAC-SHA256 signature
        """
        payload = f"{timestamp}{self._api_key}{self._cfg.recv_window}{query_string}"
        return hmac.new(self._api_secret.encode(), payload.encode(), hashlib.sha256).hexdigest()

    def fetch_page(
        self,
        cursor: str | None = None,
        start_time: int | None = None,
    ) -> tuple[list[dict[str, Any]], str]:
        """Fetch one page of executions.

        Args:
            cursor: Cursor returned by the previous page
            start_time: Lower time bound in epoch ms (first page only)

        Returns:
            (execution records, next page cursor or '')

        Raises:
            BybitAPIError: if Bybit reports a non-zero retCode
            requests.HTTPError: on a non-2xx response
        """
        params: dict[str, str] = {
            "category": self._cfg.category,
            "limit": str(self._cfg.page_limit),
        }
        if cursor:
            params["cursor"] = cursor
        elif start_time is not None:
            params["startTime"] = str(start_time)

        # The signature covers the query string exactly as sent
        query_string = urlencode(params)
        timestamp = str(_now_ms())
        headers = {
            "X-BAPI-API-KEY": self._api_key,
            "X-BAPI-SIGN": self.sign(timestamp, query_string),
            "X-BAPI-SIGN-TYPE": "2",
            "X-BAPI-TIMESTAMP": timestamp,
            "X-BAPI-RECV-WINDOW": self._cfg.recv_window,
        }

        r = self._session.get(f"{self._url()}?{query_string}", headers=headers, timeout=self._cfg.timeout_s)
        r.raise_for_status()
        payload = r.json()

        if payload.get("retCode") != 0:
            raise BybitAPIError(payload.get("retCode"), payload.get("retMsg") or "Bybit API error")

        result = payload.get("result") or {}
        records = list(result.get("list") or [])
        next_cursor = result.get("nextPageCursor") or ""
        logger.debug(f"Fetched page of {len(records)} executions (next cursor: {bool(next_cursor)})")
        return records, next_cursor

    def fetch_all_executions(self, now_ms: int | None = None) -> list[dict[str, Any]]:
        """Fetch all executions within the lookback window.

        Args:
            now_ms: Reference time in epoch ms (defaults to the current time)

        Returns:
            Raw execution records in the order Bybit returned them
        """
        now = now_ms if now_ms is not None else _now_ms()
        start_time = now - self._cfg.lookback_days * MS_PER_DAY

        executions: list[dict[str, Any]] = []
        seen_cursors: set[str] = set()
        cursor = ""

        while True:
            records, cursor = self.fetch_page(cursor=cursor or None, start_time=start_time)
            executions.extend(records)
            if not cursor:
                break
            if cursor in seen_cursors:
                logger.warning(f"Bybit returned a repeated cursor after {len(executions)} executions, stopping")
                break
            seen_cursors.add(cursor)

        logger.info(f"Fetched {len(executions)} {self._cfg.category} executions from Bybit")
        return executions
