"""Classifier layer — remote classifier over HTTP.

Speaks the ``POST /analyze`` transport served by :mod:`sheetpilot.api`:
request ``{"message": text}``, response ``{"action": kind, "description": str}``.

Failures are not retried; the user resubmits.
"""

from __future__ import annotations

import time
from typing import Any

import httpx

from sheetpilot.classifier.base import IntentClassifier
from sheetpilot.exceptions import ClassifierTransportError
from sheetpilot.logging import get_logger
from sheetpilot.protocol.actions import Action, parse_action

log = get_logger(__name__)


class HttpClassifier(IntentClassifier):
    """Classify by delegating to a remote ``/analyze`` endpoint.

    Args:
        url:       Full endpoint URL (e.g. ``http://localhost:3001/analyze``).
        timeout:   HTTP timeout in seconds.  None waits indefinitely.
        transport: Optional httpx transport (used in tests).
    """

    name = "http"

    def __init__(
        self,
        url: str,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    def _get_http(self) -> httpx.AsyncClient:
        """Lazily create the async HTTP client."""
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._http

    async def classify(self, text: str) -> Action:
        http = self._get_http()
        start = time.time()
        try:
            resp = await http.post(self._url, json={"message": text})
            resp.raise_for_status()
            data: Any = resp.json()
        except httpx.HTTPStatusError as exc:
            raise ClassifierTransportError(
                self._url, f"HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise ClassifierTransportError(self._url, str(exc) or type(exc).__name__) from exc

        if not isinstance(data, dict) or not isinstance(data.get("action"), str):
            raise ClassifierTransportError(self._url, "response has no 'action' field")

        action = parse_action(data["action"])
        log.debug(
            "text_classified",
            classifier=self.name,
            kind=action.kind.value,
            latency_ms=round((time.time() - start) * 1000, 2),
        )
        return action

    async def close(self) -> None:
        if self._http is not None and not self._http.is_closed:
            await self._http.aclose()
        self._http = None
