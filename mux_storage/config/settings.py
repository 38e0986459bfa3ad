"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

The adapter does not read Settings directly. It is handed a StorageConfig,
resolved once, so the same adapter can be embedded by a host that has its
own configuration story.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal, Mapping, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.errors import MissingCredential
from ..core.models import EncodingTier, PlaybackPolicy, ResolvePolicy
from ..core.references import DEFAULT_MANIFEST_ROUTE_BASE, DEFAULT_THUMBNAIL_ROUTE_BASE
from ..infrastructure.mux.client import MUX_API_BASE_URL as DEFAULT_API_BASE_URL
from ..infrastructure.transfer.stream import DEFAULT_CHUNK_SIZE

ENCODING_TIER_ENV = "ENCODING_TIER"
DEFAULT_CORS_ORIGIN = "https://cms.vigue.me"


@dataclass(frozen=True)
class StorageConfig:
    """
    Immutable adapter configuration.

    Both Mux secrets are required; construction fails with
    MissingCredential otherwise and the adapter is unusable.
    """
    token_id: str
    token_secret: str
    encoding_tier: EncodingTier = EncodingTier.SMART
    playback_policy: PlaybackPolicy = PlaybackPolicy.PUBLIC
    cors_origin: str = DEFAULT_CORS_ORIGIN
    api_base_url: str = DEFAULT_API_BASE_URL
    manifest_route_base: str = DEFAULT_MANIFEST_ROUTE_BASE
    thumbnail_route_base: str = DEFAULT_THUMBNAIL_ROUTE_BASE
    chunk_size: int = DEFAULT_CHUNK_SIZE
    resolve_policy: ResolvePolicy = ResolvePolicy()

    def __post_init__(self) -> None:
        if not self.token_id:
            raise MissingCredential("No Mux Token ID provided")
        if not self.token_secret:
            raise MissingCredential("No Mux Token Secret provided")
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be positive")

    @classmethod
    def resolve(
        cls,
        token_id: Optional[str] = None,
        token_secret: Optional[str] = None,
        encoding_tier: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        **options,
    ) -> "StorageConfig":
        """
        Build a config from explicit values.

        The encoding tier follows a fixed precedence: the ENCODING_TIER
        environment variable, then the explicit argument, then "smart".
        An unknown tier raises ValueError.
        """
        env = os.environ if environ is None else environ
        tier = env.get(ENCODING_TIER_ENV) or encoding_tier or EncodingTier.SMART.value

        return cls(
            token_id=token_id or "",
            token_secret=token_secret or "",
            encoding_tier=EncodingTier(tier),
            **options,
        )


class Settings(BaseSettings):
    """
    Service settings loaded from environment variables.

    All settings can be overridden via environment variables.
    """

    # API Configuration
    api_title: str = "Mux Storage API"
    api_version: str = "v1"
    log_level: str = Field(
        default="INFO",
        description="Root log level for the service."
    )
    cors_origins: str = Field(
        default="http://localhost:2368",
        description="Comma-separated list of origins allowed to call this service."
    )

    # Mux Configuration
    mux_token_id: str = Field(
        default="",
        description="Mux access token ID. Required."
    )
    mux_token_secret: str = Field(
        default="",
        description="Mux access token secret. Required."
    )
    mux_api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        description="Base URL of the Mux Video API."
    )
    encoding_tier: Literal["baseline", "smart"] = Field(
        default="smart",
        description="Encoding tier requested for new assets."
    )
    playback_policy: Literal["public", "signed"] = Field(
        default="public",
        description="Playback policy attached to new assets."
    )
    cors_origin: str = Field(
        default=DEFAULT_CORS_ORIGIN,
        description="Origin allowed to PUT into direct upload URLs."
    )

    # Reference URLs
    manifest_route_base: str = Field(
        default=DEFAULT_MANIFEST_ROUTE_BASE,
        description="Route prefix for video references. The asset id is appended."
    )
    thumbnail_route_base: str = Field(
        default=DEFAULT_THUMBNAIL_ROUTE_BASE,
        description="Route prefix for thumbnail references. The asset id is appended."
    )

    # Upload Behavior
    upload_chunk_size: int = Field(
        default=DEFAULT_CHUNK_SIZE,
        description="Bytes read from disk per chunk while streaming an upload."
    )
    asset_resolve_attempts: int = Field(
        default=1,
        ge=1,
        description="Lookups of the asset id after upload. 1 fails fast if Mux is still processing."
    )
    asset_resolve_interval_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Pause between asset id lookups when attempts > 1."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def validate_required_fields(self) -> list[str]:
        """Return the names of required variables that are not set."""
        missing = []
        if not self.mux_token_id:
            missing.append("MUX_TOKEN_ID")
        if not self.mux_token_secret:
            missing.append("MUX_TOKEN_SECRET")
        return missing

    def storage_config(self) -> StorageConfig:
        """Resolve the adapter configuration from these settings."""
        return StorageConfig.resolve(
            token_id=self.mux_token_id,
            token_secret=self.mux_token_secret,
            encoding_tier=self.encoding_tier,
            playback_policy=PlaybackPolicy(self.playback_policy),
            cors_origin=self.cors_origin,
            api_base_url=self.mux_api_base_url,
            manifest_route_base=self.manifest_route_base,
            thumbnail_route_base=self.thumbnail_route_base,
            chunk_size=self.upload_chunk_size,
            resolve_policy=ResolvePolicy(
                attempts=self.asset_resolve_attempts,
                interval_seconds=self.asset_resolve_interval_seconds,
            ),
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once per process. For tests, call
    get_settings.cache_clear() to reset.
    """
    return Settings()
