"""Media type classification."""

from .models import MediaKind

VIDEO_PREFIX = "video/"


def classify_media_type(media_type: str) -> MediaKind:
    """Anything declared as video/* goes to Mux; everything else is a thumbnail."""
    if media_type and media_type.startswith(VIDEO_PREFIX):
        return MediaKind.VIDEO
    return MediaKind.NON_VIDEO
