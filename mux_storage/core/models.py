"""
Domain models for the upload pipeline.

These models describe what flows through a single save call: the asset
the host hands us, the upload session Mux provisions, and the asset Mux
creates from it. None of them are persisted by this package.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MediaKind(Enum):
    """Which branch of the pipeline an asset takes."""
    VIDEO = "video"
    NON_VIDEO = "non_video"


class EncodingTier(Enum):
    """
    Encoding tier requested when Mux creates the asset.

    Passed through unchanged; Mux decides what each tier means.
    """
    BASELINE = "baseline"
    SMART = "smart"


class PlaybackPolicy(Enum):
    """Playback policy attached to newly created assets."""
    PUBLIC = "public"
    SIGNED = "signed"


# Upload statuses after which Mux will never attach an asset.
TERMINAL_UPLOAD_STATUSES = frozenset({"errored", "cancelled", "timed_out"})


@dataclass(frozen=True)
class AssetDescriptor:
    """
    An incoming file as described by the host.

    Read-only to us. `type` is the declared MIME type, `path` the
    location of the already-written local file.
    """
    path: str
    name: str
    type: str
    target_dir: Optional[str] = None


@dataclass(frozen=True)
class UploadSession:
    """
    A single-use direct upload target.

    The URL accepts exactly one PUT. It is held only for the duration
    of one save call.
    """
    id: str
    url: str

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Upload session id cannot be empty")
        if not self.url:
            raise ValueError("Upload session url cannot be empty")


@dataclass(frozen=True)
class UploadStatus:
    """State of an upload as reported by the retrieval call."""
    upload_id: str
    status: str
    asset_id: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_UPLOAD_STATUSES


@dataclass(frozen=True)
class RemoteAsset:
    """The asset Mux created from an upload. We only ever read its id."""
    id: str
    status: str
    playback_policy: PlaybackPolicy = PlaybackPolicy.PUBLIC

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Remote asset id cannot be empty")


@dataclass(frozen=True)
class ResolvePolicy:
    """
    How hard to look for the asset id once the transfer succeeded.

    Mux attaches the asset to the upload asynchronously, so a single
    lookup can race it. One attempt fails fast; more attempts poll while
    the upload is still waiting.
    """
    attempts: int = 1
    interval_seconds: float = 1.0

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")
        if self.interval_seconds < 0:
            raise ValueError("interval_seconds cannot be negative")
