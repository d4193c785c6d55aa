"""Async HTTP transport for the Generative Language ``generateContent`` endpoint."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from .exceptions import GeminiConnectionError, MissingCredentialError
from .reconciler import RequestOutcome, TransportFailure, decode_response
from .turn_builder import RequestPayload

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-1.5-flash"


class GeminiClient:
    """Send one request per turn and report the result as an outcome variant.

    Network problems never escape :meth:`generate`; they are reported as
    :class:`TransportFailure` so the session can finalize the turn.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key.strip():
            raise MissingCredentialError(
                "No API key configured. Set gemini.api_key or GEMINI_API_KEY."
            )
        self.api_key = api_key.strip()
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def aclose(self) -> None:
        """Close the underlying HTTP client when this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def generate(self, payload: RequestPayload) -> RequestOutcome:
        """POST ``payload`` and classify the response."""
        started = time.monotonic()
        LOGGER.info(
            "request.dispatch",
            extra={
                "event": "request.dispatch",
                "model": self.model,
                "has_attachment": payload.attachment is not None,
            },
        )
        try:
            status_code, body = await self._post(payload.to_json())
        except GeminiConnectionError as exc:
            return TransportFailure(str(exc))

        LOGGER.info(
            "request.complete",
            extra={
                "event": "request.complete",
                "status_code": status_code,
                "elapsed_ms": int((time.monotonic() - started) * 1000),
            },
        )
        return decode_response(status_code, body)

    async def _post(self, body: dict[str, Any]) -> tuple[int, Any]:
        try:
            response = await self._client.post(
                self.endpoint,
                params={"key": self.api_key},
                json=body,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as exc:
            raise GeminiConnectionError(
                f"Request to {self.base_url} timed out after {self.timeout:g}s."
            ) from exc
        except httpx.TransportError as exc:
            raise GeminiConnectionError(
                f"Unable to reach {self.base_url}: {exc}"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise GeminiConnectionError(
                f"Request to {self.base_url} failed: {exc}"
            ) from exc

        try:
            parsed: Any = response.json()
        except ValueError:
            parsed = None
        return response.status_code, parsed
