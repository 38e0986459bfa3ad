"""
Application configuration using Pydantic settings.

Configuration comes from environment variables with sensible defaults.
The adapter itself consumes an explicit, immutable StorageConfig.
"""

from .settings import Settings, StorageConfig, get_settings

__all__ = ["Settings", "StorageConfig", "get_settings"]
