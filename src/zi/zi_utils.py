"""
Platform helpers for zi.
"""

import platform
import sys
from enum import Enum
from typing import List, Optional


class OSName(str, Enum):
    """
    Operating system tokens as used by the Zig download index
    """

    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"
    FREEBSD = "freebsd"


class ArchName(str, Enum):
    """
    CPU architecture tokens as used by the Zig download index
    """

    X86_64 = "x86_64"
    X86 = "x86"
    AARCH64 = "aarch64"
    LOONGARCH64 = "loongarch64"
    POWERPC64LE = "powerpc64le"
    POWERPC = "powerpc"
    RISCV64 = "riscv64"


_MACHINE_ALIASES = {
    "x86_64": ArchName.X86_64,
    "amd64": ArchName.X86_64,
    "x64": ArchName.X86_64,
    "i386": ArchName.X86,
    "i486": ArchName.X86,
    "i586": ArchName.X86,
    "i686": ArchName.X86,
    "x86": ArchName.X86,
    "aarch64": ArchName.AARCH64,
    "arm64": ArchName.AARCH64,
    "loongarch64": ArchName.LOONGARCH64,
    "ppc64le": ArchName.POWERPC64LE,
    "powerpc64le": ArchName.POWERPC64LE,
    "ppc": ArchName.POWERPC,
    "powerpc": ArchName.POWERPC,
    "riscv64": ArchName.RISCV64,
}

# Index keys to try, in order, for each (os, arch) pair. Some targets were
# renamed over time (i386 -> x86), so older and newer spellings are both listed.
_TARGET_KEYS = {
    OSName.LINUX: {
        ArchName.X86_64: ["x86_64-linux"],
        ArchName.X86: ["x86-linux", "i386-linux"],
        ArchName.AARCH64: ["aarch64-linux"],
        ArchName.LOONGARCH64: ["loongarch64-linux"],
        ArchName.POWERPC64LE: ["powerpc64le-linux"],
        ArchName.POWERPC: ["powerpc-linux"],
        ArchName.RISCV64: ["riscv64-linux"],
    },
    OSName.MACOS: {
        ArchName.X86_64: ["x86_64-macos"],
        ArchName.AARCH64: ["aarch64-macos"],
    },
    OSName.WINDOWS: {
        ArchName.X86_64: ["x86_64-windows"],
        ArchName.X86: ["i386-windows", "x86-windows"],
        ArchName.AARCH64: ["aarch64-windows"],
    },
    OSName.FREEBSD: {
        ArchName.X86_64: ["x86_64-freebsd"],
    },
}

# zls release asset names spell some architectures differently.
_ZLS_ARCH_NAMES = {
    ArchName.X86_64: ["x86_64"],
    ArchName.X86: ["x86", "i386"],
    ArchName.AARCH64: ["aarch64"],
    ArchName.LOONGARCH64: ["loongarch64"],
    ArchName.POWERPC64LE: ["powerpc64le"],
    ArchName.RISCV64: ["riscv64"],
}


class PlatformUtils:
    """
    This class provides utilities for platform detection and identification.
    """

    @staticmethod
    def get_os() -> Optional[OSName]:
        """
        Returns the OS token for the current platform, or None if unsupported
        """
        if sys.platform.startswith("linux"):
            return OSName.LINUX
        if sys.platform == "darwin":
            return OSName.MACOS
        if sys.platform in ("win32", "cygwin"):
            return OSName.WINDOWS
        if sys.platform.startswith("freebsd"):
            return OSName.FREEBSD
        return None

    @staticmethod
    def get_arch() -> Optional[ArchName]:
        """
        Returns the CPU architecture token for the current machine, or None if unsupported
        """
        return _MACHINE_ALIASES.get(platform.machine().lower())

    @staticmethod
    def get_target_keys(
        os_name: Optional[OSName] = None, arch: Optional[ArchName] = None
    ) -> List[str]:
        """
        Returns the download index keys for a platform, most preferred first.

        Defaults to the running platform. An unsupported platform yields an
        empty list.
        """
        os_name = os_name or PlatformUtils.get_os()
        arch = arch or PlatformUtils.get_arch()
        if os_name is None or arch is None:
            return []
        return list(_TARGET_KEYS.get(os_name, {}).get(arch, []))

    @staticmethod
    def get_zls_asset_names(
        os_name: Optional[OSName] = None, arch: Optional[ArchName] = None
    ) -> List[str]:
        """
        Returns the zls release asset name suffixes for a platform.

        Names follow the ``<arch>-<os>.<ext>`` pattern for every supported
        archive extension.
        """
        os_name = os_name or PlatformUtils.get_os()
        arch = arch or PlatformUtils.get_arch()
        if os_name is None or arch is None or os_name == OSName.FREEBSD:
            return []
        names = []
        for ext in ("zip", "tar", "tar.xz", "tar.gz"):
            for arch_name in _ZLS_ARCH_NAMES.get(arch, []):
                names.append(f"{arch_name}-{os_name.value}.{ext}")
        return names

    @staticmethod
    def executable_name(name: str, os_name: Optional[OSName] = None) -> str:
        """
        Returns the platform specific file name of an executable
        """
        os_name = os_name or PlatformUtils.get_os()
        if os_name == OSName.WINDOWS:
            return f"{name}.exe"
        return name
