"""API-specific response schemas (Pydantic v2)."""

from __future__ import annotations

from pydantic import BaseModel


class QuoteResponse(BaseModel):
    """Body of a successful GET /cotacao. Exactly one field."""

    bid: str
