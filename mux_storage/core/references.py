"""
Reference URL mapping.

A reference is the URL we hand back to the host in place of a stored
file location. The host later resolves it into a playable manifest or
a thumbnail, so both formats are fixed: a route base followed by the
Mux asset id.
"""

DEFAULT_MANIFEST_ROUTE_BASE = "https://vigue.me/api/muxManifest"
DEFAULT_THUMBNAIL_ROUTE_BASE = "https://vigue.me/api/muxThumbnail"

THUMBNAIL_ID_DELIMITER = "_"


def thumbnail_asset_id(name: str) -> str:
    """
    Derive the asset id from a thumbnail filename.

    Thumbnails are named `<assetID>_<anything>`, so the id is whatever
    precedes the first underscore. A name without one is used whole.
    """
    return name.split(THUMBNAIL_ID_DELIMITER, 1)[0]


class ReferenceMapper:
    """Builds outward reference URLs from Mux asset ids."""

    def __init__(
        self,
        manifest_route_base: str = DEFAULT_MANIFEST_ROUTE_BASE,
        thumbnail_route_base: str = DEFAULT_THUMBNAIL_ROUTE_BASE,
    ) -> None:
        self._manifest_base = manifest_route_base.rstrip("/")
        self._thumbnail_base = thumbnail_route_base.rstrip("/")

    def thumbnail(self, name: str) -> str:
        """
        Map a non-video filename to its thumbnail reference.

        No network access and no existence check: the id is trusted to
        belong to an asset created by an earlier video upload.
        """
        return f"{self._thumbnail_base}/{thumbnail_asset_id(name)}"

    def manifest(self, asset_id: str) -> str:
        """Map a resolved asset id to its manifest reference."""
        if not asset_id:
            raise ValueError("asset_id cannot be empty")
        return f"{self._manifest_base}/{asset_id}"
