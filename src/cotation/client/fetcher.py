"""Quote client: fetch one quote from the server and save it to a file."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx
from pydantic import ValidationError

from cotation.core.config import ClientConfig
from cotation.core.exceptions import OutputError, QuoteDecodeError
from cotation.core.http import get_json
from cotation.core.models import Quote

logger = logging.getLogger(__name__)

_OUTPUT_TEMPLATE = "Dólar: {bid}"


def format_quote(quote: Quote) -> str:
    """Render a quote the way it is written to the output file."""
    return _OUTPUT_TEMPLATE.format(bid=quote.bid)


class QuoteFetcher:
    """Single-shot client for the quote server.

    `fetch_and_save` performs one request and one file write; it never
    retries. Every failure is raised as a CotationError subclass and the
    output file is only touched once a quote has been decoded.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

    async def fetch(self) -> Quote:
        """Request a quote from the server within the client deadline.

        Raises:
            QuoteFetchError: Construction, transport, deadline, or decode failure.
        """
        url = self._config.server_url
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self._config.timeout),
            transport=self._transport,
        ) as client:
            payload = await get_json(client, url, self._config.timeout_ms)

        try:
            return Quote.model_validate(payload)
        except ValidationError as e:
            raise QuoteDecodeError(
                f"Error parsing response JSON body from {url}: {e}",
                context={"url": url, "reason": "invalid_quote"},
            ) from e

    def save(self, quote: Quote) -> Path:
        """Create or truncate the output file and write the quote line.

        Raises:
            OutputError: The file could not be created or written.
        """
        path = Path(self._config.output_path)
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(format_quote(quote))
        except OSError as e:
            raise OutputError(
                f"Error writing to file {path}: {e}",
                context={"path": str(path)},
            ) from e
        return path

    async def fetch_and_save(self) -> Path:
        """Fetch one quote and write it to the output file.

        Returns:
            Path of the written file.
        """
        quote = await self.fetch()
        path = self.save(quote)
        logger.info("Quote saved to file: %s", path.name)
        return path
