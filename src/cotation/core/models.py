"""Pydantic data models — the system's type contracts."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from cotation.core.exceptions import QuoteDecodeError

# --- Type Aliases ---

Bid = str
PairCode = str


def pair_key(pair: PairCode) -> str:
    """Map a provider pair code to its key in the response document.

    The provider is queried as ``USD-BRL`` but answers under ``USDBRL``.
    """
    return pair.replace("-", "").upper()


# --- Quote ---


class Quote(BaseModel):
    """The value handed from server to client.

    ``bid`` is carried as text exactly as the provider sent it; no numeric
    validation is applied, so an empty or malformed string passes through. A
    missing or null bid reads as empty.
    """

    model_config = ConfigDict(frozen=True)

    bid: Bid = ""

    @field_validator("bid", mode="before")
    @classmethod
    def null_bid_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v


# --- Upstream Provider Document ---


class PairQuote(BaseModel):
    """Market data for one currency pair, as published by the provider.

    Every field defaults to ``""`` when absent. Only ``bid`` is consumed;
    the rest is passthrough data.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    code: str = ""
    codein: str = ""
    name: str = ""
    high: str = ""
    low: str = ""
    var_bid: str = Field("", alias="varBid")
    pct_change: str = Field("", alias="pctChange")
    bid: Bid = ""
    ask: str = ""
    timestamp: str = Field("", alias="timeStamp")
    create_date: str = ""

    @model_validator(mode="before")
    @classmethod
    def drop_null_fields(cls, data: Any) -> Any:
        # null reads as absent
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class UpstreamQuoteDocument(BaseModel):
    """Full provider response: ``{"USDBRL": {...}}`` keyed by pair."""

    model_config = ConfigDict(frozen=True)

    pair: str
    quote: PairQuote

    @property
    def bid(self) -> Bid:
        return self.quote.bid

    @classmethod
    def from_payload(cls, payload: Any, pair: PairCode) -> UpstreamQuoteDocument:
        """Build a document from decoded JSON.

        A missing or null pair entry yields an empty quote, so the provider's
        error documents decode to an empty bid.

        Raises:
            QuoteDecodeError: If the payload or the pair entry is not an
                object, or the entry has non-string fields.
        """
        key = pair_key(pair)
        if not isinstance(payload, dict):
            raise QuoteDecodeError(
                f"Expected a JSON object, got {type(payload).__name__}",
                context={"reason": "not_an_object", "pair": pair},
            )
        entry = payload.get(key)
        if entry is None:
            return cls(pair=key, quote=PairQuote())
        if not isinstance(entry, dict):
            raise QuoteDecodeError(
                f"Quote entry {key!r} is not an object, got {type(entry).__name__}",
                context={"reason": "invalid_entry", "pair": pair},
            )
        try:
            return cls(pair=key, quote=PairQuote.model_validate(entry))
        except ValidationError as e:
            raise QuoteDecodeError(
                f"Malformed quote entry {key!r}: {e}",
                context={"reason": "invalid_entry", "pair": pair},
            ) from e

    def to_quote(self) -> Quote:
        return Quote(bid=self.bid)


# --- Ledger ---


class StoredQuoteRecord(BaseModel):
    """One row of the append-only ``cotation`` table."""

    model_config = ConfigDict(frozen=True)

    id: int
    bid: Bid | None
    timestamp: datetime


class PersistResult(BaseModel):
    """Outcome of one best-effort ledger write.

    Consumed only for logging: the request path ignores it on purpose so a
    storage failure never changes what the caller receives.
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    record_id: int | None = None
    error: str | None = None

    @classmethod
    def success(cls, record_id: int | None) -> PersistResult:
        return cls(ok=True, record_id=record_id)

    @classmethod
    def failure(cls, error: str) -> PersistResult:
        return cls(ok=False, error=error)
