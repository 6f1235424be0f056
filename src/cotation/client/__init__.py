"""Quote client: fetch from the server, save to a file."""

from cotation.client.fetcher import QuoteFetcher, format_quote

__all__ = ["QuoteFetcher", "format_quote"]
