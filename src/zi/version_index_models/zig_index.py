"""
Pydantic data models for the Zig download index (index.json).

The index maps a version name ("master", "0.13.0", ...) to a version entry.
Each entry carries a few fixed fields plus one object per build target,
keyed "<arch>-<os>", describing where to download that build from.
"""

import posixpath
from typing import Dict, Iterator, List, Optional, Tuple
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, RootModel, ValidationError, field_validator

from zi.zi_exceptions import FormatError
from zi.zi_utils import PlatformUtils

# Entries shaped like a build target that are not one.
NON_TARGET_KEYS = frozenset({"src", "bootstrap"})


class ArchiveSource(BaseModel):
    """
    A downloadable build for one target.

    This is the actual downloadable resource.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    tarball: str = Field(..., description="URL to download from")
    shasum: str = Field(..., description="Hex encoded SHA-256 of the archive")
    size: str = Field(..., description="Archive size in bytes, as a decimal string")

    @field_validator("size")
    @classmethod
    def validate_size(cls, value: str) -> str:
        if not (value.isascii() and value.isdigit()):
            raise ValueError(f"size must be a decimal number of bytes, got {value!r}")
        return value

    @property
    def size_bytes(self) -> int:
        return int(self.size, 10)

    @property
    def filename(self) -> str:
        """The last path component of the tarball URL."""
        return posixpath.basename(urlparse(self.tarball).path)


class ZigVersion(BaseModel):
    """
    One version entry of the index.

    Build targets are kept as extra fields since their set changes between
    releases. Non-target extras ("docs", "notes", "src", ...) are skipped by
    the target accessors.
    """

    model_config = ConfigDict(extra="allow")

    date: Optional[str] = Field(None, description="Release or build date")
    version: Optional[str] = Field(
        None, description="Full version string, present for master builds"
    )

    def get_source(self, target: str) -> Optional[ArchiveSource]:
        """
        Get the download source for a target key.

        Args:
            target: The target key (e.g., "x86_64-linux")

        Returns:
            ArchiveSource or None if the version has no build for the target

        Raises:
            FormatError: If the target entry is malformed
        """
        if target in NON_TARGET_KEYS:
            return None
        data = (self.model_extra or {}).get(target)
        if not isinstance(data, dict) or "tarball" not in data:
            return None
        try:
            return ArchiveSource(**data)
        except ValidationError as e:
            raise FormatError(f"Invalid download entry for {target}: {e}") from e

    def get_native_source(self, targets: Optional[List[str]] = None) -> Optional[ArchiveSource]:
        """
        Get the download source for the running platform.

        Args:
            targets: Target keys to try in order. Defaults to PlatformUtils.get_target_keys()
        """
        if targets is None:
            targets = PlatformUtils.get_target_keys()
        for target in targets:
            source = self.get_source(target)
            if source is not None:
                return source
        return None

    def targets(self) -> Dict[str, ArchiveSource]:
        """
        Get all build targets of this version.

        Returns:
            Dictionary mapping target keys to ArchiveSource objects
        """
        result = {}
        for key in (self.model_extra or {}):
            source = self.get_source(key)
            if source is not None:
                result[key] = source
        return result


class ZigVersionIndex(RootModel[Dict[str, ZigVersion]]):
    """
    The complete download index, in the order the server lists it.
    """

    def get(self, key: str) -> Optional[ZigVersion]:
        return self.root.get(key)

    def keys(self) -> List[str]:
        return list(self.root.keys())

    def items(self) -> Iterator[Tuple[str, ZigVersion]]:
        return iter(self.root.items())

    def __contains__(self, key: str) -> bool:
        return key in self.root

    def __len__(self) -> int:
        return len(self.root)

    @classmethod
    def from_json(cls, data) -> "ZigVersionIndex":
        return cls.model_validate_json(data)
