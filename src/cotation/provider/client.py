"""Async HTTP client for the upstream quote provider (AwesomeAPI)."""

from __future__ import annotations

import logging

import httpx

from cotation.core.config import ProviderConfig
from cotation.core.http import get_json
from cotation.core.models import UpstreamQuoteDocument

logger = logging.getLogger(__name__)


class ProviderClient:
    """Fetches the current quote document from the upstream provider.

    One call to `fetch_document` is exactly one upstream request: nothing is
    cached and nothing is retried. The underlying `httpx.AsyncClient` is
    shared across concurrent requests.

    Use via `async with ProviderClient(...) as provider:`.
    """

    def __init__(
        self,
        config: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout),
            transport=transport,
        )

    async def __aenter__(self) -> ProviderClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client. Called automatically by __aexit__."""
        await self._client.aclose()

    async def fetch_document(self) -> UpstreamQuoteDocument:
        """Fetch and decode one quote document within the provider deadline.

        Returns:
            The decoded document for the configured pair.

        Raises:
            QuoteFetchError: Request construction, transport, deadline, or
                decode failure (see `cotation.core.http.get_json`).
        """
        payload = await get_json(self._client, self._config.url, self._config.timeout_ms)
        document = UpstreamQuoteDocument.from_payload(payload, self._config.pair)
        logger.debug("Provider quote %s bid=%r", document.pair, document.bid)
        return document
