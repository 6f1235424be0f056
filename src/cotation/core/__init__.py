"""cotation.core — Foundation types, config, and exceptions."""

from cotation.core.config import (
    ClientConfig,
    CotationConfig,
    ProviderConfig,
    ServerConfig,
    StorageConfig,
    load_config,
)
from cotation.core.exceptions import (
    ConfigError,
    CotationError,
    DeadlineExceededError,
    OutputError,
    QuoteDecodeError,
    QuoteFetchError,
    QuoteTransportError,
    RequestBuildError,
    StorageError,
)
from cotation.core.models import (
    Bid,
    PairCode,
    PairQuote,
    PersistResult,
    Quote,
    StoredQuoteRecord,
    UpstreamQuoteDocument,
    pair_key,
)

__all__ = [
    # Type aliases
    "Bid",
    "PairCode",
    # Models
    "Quote",
    "PairQuote",
    "UpstreamQuoteDocument",
    "StoredQuoteRecord",
    "PersistResult",
    "pair_key",
    # Config
    "CotationConfig",
    "ProviderConfig",
    "StorageConfig",
    "ServerConfig",
    "ClientConfig",
    "load_config",
    # Exceptions
    "CotationError",
    "ConfigError",
    "QuoteFetchError",
    "RequestBuildError",
    "QuoteTransportError",
    "DeadlineExceededError",
    "QuoteDecodeError",
    "StorageError",
    "OutputError",
]
