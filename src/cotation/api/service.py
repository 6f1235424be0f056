"""Quote server request pipeline, independent of the HTTP framework."""

from __future__ import annotations

import logging

from cotation.core.config import CotationConfig
from cotation.core.exceptions import QuoteFetchError, StorageError
from cotation.core.models import PersistResult, Quote
from cotation.provider.client import ProviderClient
from cotation.storage.store import LedgerProtocol

logger = logging.getLogger(__name__)


class QuoteServer:
    """Services one inbound quote request at a time, many concurrently.

    Built once at startup with its own provider client and ledger. Holds no
    per-request state, so concurrent `handle` calls are independent.

    Pipeline per request:
        1. fetch one document from the provider (provider deadline)
        2. extract the bid, unvalidated
        3. append it to the ledger (storage deadline), best effort
        4. return the quote
    """

    def __init__(
        self,
        config: CotationConfig,
        provider: ProviderClient,
        store: LedgerProtocol,
    ) -> None:
        self._config = config
        self._provider = provider
        self._store = store

    @property
    def config(self) -> CotationConfig:
        return self._config

    @property
    def store(self) -> LedgerProtocol:
        return self._store

    async def handle(self) -> Quote:
        """Run the full pipeline for one request.

        Raises:
            QuoteFetchError: The upstream step failed; nothing was persisted.
        """
        try:
            document = await self._provider.fetch_document()
        except QuoteFetchError as e:
            logger.error("Upstream quote fetch failed: %s", e)
            raise

        quote = document.to_quote()

        # Result is for the log only; the caller gets the quote either way.
        await self.persist(quote)

        return quote

    async def persist(self, quote: Quote) -> PersistResult:
        """Append a quote to the ledger without ever raising.

        Returns:
            PersistResult describing the outcome. Failures are logged here.
        """
        try:
            record_id = await self._store.append(quote, self._config.storage.timeout)
        except StorageError as e:
            logger.warning("Error inserting quote into ledger: %s", e)
            return PersistResult.failure(str(e))
        logger.debug("Quote persisted as ledger row %s", record_id)
        return PersistResult.success(record_id)

    async def close(self) -> None:
        await self._provider.close()
