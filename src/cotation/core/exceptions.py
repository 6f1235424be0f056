"""Custom exception hierarchy for cotation."""

from typing import Any


class CotationError(Exception):
    """Base exception for all cotation errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(CotationError):
    """Invalid or missing configuration.

    Raised by load_config() during startup. Should be treated as fatal.

    Context keys:
        field: str — the config field that failed validation
        value: Any — the invalid value
    """


class QuoteFetchError(CotationError):
    """Failed to obtain a quote over HTTP (server→provider or client→server).

    Policy: on the server, answer the caller with HTTP 500 and the message as
    body. On the client, log and exit. Never retried.

    Context keys:
        url: str — the URL that was being fetched
    """


class RequestBuildError(QuoteFetchError):
    """The outbound request could not be constructed (bad URL or method)."""


class QuoteTransportError(QuoteFetchError):
    """The HTTP exchange failed before a complete body was received.

    Context keys:
        error: str — the underlying transport error
    """


class DeadlineExceededError(QuoteTransportError):
    """The exchange did not complete within its deadline.

    Context keys:
        timeout_ms: int — the deadline that elapsed
    """


class QuoteDecodeError(QuoteFetchError):
    """The response body is not JSON of the expected shape.

    Context keys:
        reason: str — why decoding failed
    """


class StorageError(CotationError):
    """Ledger operation failed.

    Policy: on the request path, contained by QuoteServer.persist — logged,
    never surfaced to the HTTP caller. Elsewhere (schema init), fatal.

    Context keys:
        operation: str — "initialize", "insert", "query"
        table: str — the table involved
        path: str — the SQLite database path
    """


class OutputError(CotationError):
    """The client could not write its output file.

    Policy: fatal for the client process.

    Context keys:
        path: str — the output file path
    """
