"""
Pydantic data models for the zls GitHub releases listing.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from zi.zi_utils import PlatformUtils


class ZlsAsset(BaseModel):
    """A file attached to a zls release."""

    model_config = ConfigDict(extra="ignore")

    browser_download_url: str
    size: int
    name: str


class ZlsRelease(BaseModel):
    """A tagged zls release."""

    model_config = ConfigDict(extra="ignore")

    tag_name: str
    assets: List[ZlsAsset] = Field(default_factory=list)

    def get_native_asset(self, asset_names: Optional[List[str]] = None) -> Optional[ZlsAsset]:
        """
        Find the release asset built for the running platform.

        Asset names sometimes carry a ``zls-`` prefix, so names are matched
        by suffix.

        Args:
            asset_names: Name suffixes to accept. Defaults to PlatformUtils.get_zls_asset_names()
        """
        if asset_names is None:
            asset_names = PlatformUtils.get_zls_asset_names()
        for asset in self.assets:
            for name in asset_names:
                if asset.name.endswith(name):
                    return asset
        return None


_RELEASES_ADAPTER = TypeAdapter(List[ZlsRelease])


def parse_zls_releases(data) -> List[ZlsRelease]:
    """Parse the JSON body of the releases API."""
    return _RELEASES_ADAPTER.validate_json(data)
