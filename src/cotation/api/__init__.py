"""HTTP surface of the quote server."""
