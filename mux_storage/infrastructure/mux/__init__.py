"""Mux Video API integration."""

from .client import MuxClient, create_mux_client

__all__ = ["MuxClient", "create_mux_client"]
