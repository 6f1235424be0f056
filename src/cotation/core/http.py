"""Deadline-bounded JSON GET shared by the server and the client."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import httpx

from cotation.core.exceptions import (
    DeadlineExceededError,
    QuoteDecodeError,
    QuoteTransportError,
    RequestBuildError,
)

logger = logging.getLogger(__name__)


async def get_json(client: httpx.AsyncClient, url: str, timeout_ms: int) -> Any:
    """GET ``url`` and decode the body as JSON, all within one deadline.

    The deadline starts on entry and covers request construction, the
    exchange, reading the full body, and JSON decoding. The response body is
    closed on every exit path. The HTTP status code is not inspected; the
    caller decides from the decoded body.

    Raises:
        RequestBuildError: The request could not be constructed.
        DeadlineExceededError: The deadline elapsed before the body was decoded.
        QuoteTransportError: Connection or protocol failure.
        QuoteDecodeError: The body is not valid JSON.
    """
    try:
        async with asyncio.timeout(timeout_ms / 1000):
            request = _build_request(client, url)
            body = await _read_body(client, request, timeout_ms)
            return _decode(body, url)
    except TimeoutError as e:
        raise DeadlineExceededError(
            f"Deadline of {timeout_ms}ms exceeded requesting {url}",
            context={"url": url, "timeout_ms": timeout_ms},
        ) from e


def _build_request(client: httpx.AsyncClient, url: str) -> httpx.Request:
    try:
        return client.build_request("GET", url)
    except (httpx.InvalidURL, ValueError) as e:
        raise RequestBuildError(
            f"Error creating request for {url}: {e}",
            context={"url": url, "error": str(e)},
        ) from e


async def _read_body(
    client: httpx.AsyncClient, request: httpx.Request, timeout_ms: int
) -> bytes:
    url = str(request.url)
    try:
        response = await client.send(request, stream=True)
        try:
            body = await response.aread()
        finally:
            await response.aclose()
    except httpx.TimeoutException as e:
        raise DeadlineExceededError(
            f"Deadline of {timeout_ms}ms exceeded requesting {url}: {e}",
            context={"url": url, "timeout_ms": timeout_ms, "error": str(e)},
        ) from e
    except httpx.HTTPError as e:
        raise QuoteTransportError(
            f"Error making request to {url}: {e}",
            context={"url": url, "error": str(e)},
        ) from e

    logger.debug("GET %s -> %d (%d bytes)", url, response.status_code, len(body))
    return body


def _decode(body: bytes, url: str) -> Any:
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise QuoteDecodeError(
            f"Error decoding response from {url}: {e}",
            context={"url": url, "reason": "invalid_json"},
        ) from e
