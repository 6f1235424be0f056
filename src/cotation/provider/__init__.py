"""Upstream quote provider integration."""

from cotation.provider.client import ProviderClient

__all__ = ["ProviderClient"]
