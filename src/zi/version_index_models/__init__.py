"""
Version index models.

This package provides Pydantic data models for the remote listings zi
reads: the Zig download index and the zls releases listing.
"""

from .zig_index import ArchiveSource, ZigVersion, ZigVersionIndex
from .zls_releases import ZlsAsset, ZlsRelease, parse_zls_releases

__all__ = [
    # Zig index
    "ArchiveSource",
    "ZigVersion",
    "ZigVersionIndex",
    # zls releases
    "ZlsAsset",
    "ZlsRelease",
    "parse_zls_releases",
]
