"""
Local install management.

This package handles:
1. Listing installed versions under the base install directory
2. Creating and clearing per-version install directories
3. Locating executables and linking the active version into the link directory
"""

from .install_manager import ExecutablePaths, InstalledVersion, InstallManager

__all__ = ["ExecutablePaths", "InstalledVersion", "InstallManager"]
