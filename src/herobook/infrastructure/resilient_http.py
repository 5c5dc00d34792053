"""JSON POST helper for outbound text-generation calls.

Retries transient failures with exponential backoff. Each endpoint (the
client's ``base_url``) has its own circuit: after enough consecutive transient
failures it rejects calls with ``CircuitOpenError`` until the cool-down ends.
"""

import asyncio
import logging
import os
import time
from dataclasses import dataclass
from typing import Any

import httpx


logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {408, 425, 429, 500, 502, 503, 504}


class CircuitOpenError(RuntimeError):
    pass


def _breaker_settings() -> tuple[bool, int, float]:
    enabled = os.getenv("HEROBOOK_HTTP_CIRCUIT_BREAKER_ENABLED", "1").strip().lower() in {"1", "true", "yes"}
    threshold = max(1, int(os.getenv("HEROBOOK_HTTP_CIRCUIT_FAILURE_THRESHOLD", "3")))
    cool_down = max(0.0, float(os.getenv("HEROBOOK_HTTP_CIRCUIT_RESET_SECONDS", "120")))
    return enabled, threshold, cool_down


@dataclass
class _Circuit:
    endpoint: str
    consecutive_failures: int = 0
    open_until: float = 0.0

    def guard(self) -> None:
        if self.open_until > time.time():
            raise CircuitOpenError(f"Narration endpoint {self.endpoint} paused until {int(self.open_until)}")

    def succeeded(self) -> None:
        self.consecutive_failures = 0
        self.open_until = 0.0

    def failed(self, threshold: int, cool_down: float) -> None:
        self.consecutive_failures += 1
        if self.consecutive_failures >= threshold:
            self.open_until = time.time() + cool_down
            self.consecutive_failures = 0
            logger.warning("HTTP circuit opened", extra={"endpoint": self.endpoint, "cool_down": cool_down})


_CIRCUITS: dict[str, _Circuit] = {}


def _circuit_for(client: httpx.AsyncClient) -> _Circuit:
    endpoint = str(client.base_url or "unknown")
    return _CIRCUITS.setdefault(endpoint, _Circuit(endpoint))


def reset_circuit_breakers() -> None:
    _CIRCUITS.clear()


def _is_retryable_exception(exc: Exception) -> bool:
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _RETRYABLE_STATUS_CODES
    return False


async def post_json_with_retry(
    client: httpx.AsyncClient,
    path: str,
    *,
    payload: dict[str, Any],
    headers: dict[str, str] | None = None,
    retries: int = 0,
    backoff_seconds: float = 0.2,
) -> dict[str, Any]:
    breaker_enabled, threshold, cool_down = _breaker_settings()
    circuit = _circuit_for(client)
    last_attempt = max(0, int(retries))

    for attempt in range(last_attempt + 1):
        if breaker_enabled:
            circuit.guard()
        try:
            response = await client.post(path, json=payload, headers=headers)
            if response.status_code in _RETRYABLE_STATUS_CODES:
                raise httpx.HTTPStatusError(
                    f"Retryable HTTP status: {response.status_code}",
                    request=response.request,
                    response=response,
                )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as exc:
            if not _is_retryable_exception(exc):
                raise
            if breaker_enabled:
                circuit.failed(threshold, cool_down)
            if attempt == last_attempt:
                raise
            delay = max(0.0, backoff_seconds) * (2 ** attempt)
            logger.debug("Retrying HTTP request", extra={"path": path, "attempt": attempt + 1, "delay": delay})
            if delay > 0:
                await asyncio.sleep(delay)
            continue

        circuit.succeeded()
        return body if isinstance(body, dict) else {"results": body}

    return {}
