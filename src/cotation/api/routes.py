"""FastAPI route definitions for the quote server."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from cotation.api.deps import get_quote_server
from cotation.api.schemas import QuoteResponse
from cotation.api.service import QuoteServer

router = APIRouter()


@router.get("/cotacao", response_model=QuoteResponse)
async def get_cotacao(server: QuoteServer = Depends(get_quote_server)):
    """Fetch a fresh USD-BRL quote, record it, and return its bid."""
    quote = await server.handle()
    return QuoteResponse(bid=quote.bid)
