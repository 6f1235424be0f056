"""Append-only quote ledger."""

from cotation.storage.store import LedgerProtocol, SqliteStore, create_store

__all__ = ["LedgerProtocol", "SqliteStore", "create_store"]
