"""Dependency injection for FastAPI routes."""

from __future__ import annotations

from fastapi import Request

from cotation.api.service import QuoteServer


def get_quote_server(request: Request) -> QuoteServer:
    """Dependency: retrieve the QuoteServer built during lifespan."""
    return request.app.state.quote_server
