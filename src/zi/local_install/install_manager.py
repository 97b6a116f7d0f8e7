"""
Local install manager.

Keeps track of the Zig versions installed under the base install directory
and of the symlinks that make one of them the active version.
"""

import logging
import os
import pathlib
import shutil
import stat
import sys
import uuid
from typing import Iterator, Optional

from zi.zi_config import ZiConfig
from zi.zi_exceptions import MissingExecutable
from zi.zi_logger import ZiLogger
from zi.zi_settings import ZiSettings
from zi.zi_utils import PlatformUtils


class ExecutablePaths:
    """
    Locations of the executables inside one install directory.
    """

    def __init__(self, zig: pathlib.Path, zls: Optional[pathlib.Path] = None):
        self.zig = zig
        self.zls = zls

    def __repr__(self) -> str:
        return f"ExecutablePaths(zig={self.zig}, zls={self.zls})"


class InstalledVersion:
    """
    A version directory found under the base install directory.
    """

    def __init__(self, name: str, path: pathlib.Path):
        """
        Args:
            name: Directory name, which is the full version string
            path: Absolute path of the directory
        """
        self.name = name
        self.path = path

    def executables(self) -> ExecutablePaths:
        return InstallManager.locate_executables(self.path)

    def __repr__(self) -> str:
        return f"InstalledVersion(name={self.name}, path={self.path})"


class InstallManager:
    """
    Manages install directories and the links to the active version.
    """

    def __init__(self, config: ZiConfig, logger: ZiLogger):
        self.config = config
        self.logger = logger
        self.install_dir = pathlib.Path(ZiSettings.get_install_directory(config.install_dir))
        self.link_dir = pathlib.Path(ZiSettings.get_link_directory(config.link_dir))

    def iterate_installed_versions(self) -> Iterator[InstalledVersion]:
        """
        Yield every installed version, creating the base directory if needed.

        Hidden directories (such as interrupted staging directories) are skipped.
        """
        self.install_dir.mkdir(parents=True, exist_ok=True)
        for entry in sorted(self.install_dir.iterdir()):
            if entry.name.startswith("."):
                continue
            if entry.is_dir():
                yield InstalledVersion(entry.name, entry)

    def version_path(self, version: str) -> pathlib.Path:
        return self.install_dir / version

    def open_install_dir(self, version: str) -> pathlib.Path:
        """
        Return the install directory of an installed version.

        Raises:
            FileNotFoundError: If the version is not installed
        """
        path = self.version_path(version)
        if not path.is_dir():
            raise FileNotFoundError(f"{version} is not installed at {path}")
        return path

    def make_install_dir(self, version: str) -> pathlib.Path:
        """
        Return the install directory of a version, creating it if needed.
        """
        path = self.version_path(version)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def clear_install_dir(self, version: str) -> pathlib.Path:
        """
        Remove everything inside a version's install directory.
        """
        path = self.make_install_dir(version)
        self.logger.log(f"Clearing {path}", logging.INFO)
        for entry in path.iterdir():
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        return path

    @staticmethod
    def locate_executables(directory: pathlib.Path) -> ExecutablePaths:
        """
        Walk a version directory for the zig and zls executables.

        Only regular files with the owner execute bit count. The first match
        of each name in walk order wins.

        Raises:
            MissingExecutable: If no zig executable is found
        """
        zig_name = PlatformUtils.executable_name("zig")
        zls_name = PlatformUtils.executable_name("zls")
        zig_path: Optional[pathlib.Path] = None
        zls_path: Optional[pathlib.Path] = None

        for root, dirs, files in os.walk(directory):
            dirs.sort()
            for name in sorted(files):
                is_zig = zig_path is None and name == zig_name
                is_zls = zls_path is None and name == zls_name
                if not is_zig and not is_zls:
                    continue
                path = pathlib.Path(root) / name
                if not _is_executable(path):
                    continue
                if is_zig:
                    zig_path = path.absolute()
                else:
                    zls_path = path.absolute()
            if zig_path is not None and zls_path is not None:
                break

        if zig_path is None:
            raise MissingExecutable(f"No zig executable found in {directory}")
        return ExecutablePaths(zig=zig_path, zls=zls_path)

    def link_executable(self, executable: pathlib.Path, name: str) -> pathlib.Path:
        """
        Point ``<link_dir>/<name>`` at ``executable``, replacing any previous link atomically.

        Raises:
            FileNotFoundError: If the link directory does not exist
        """
        link_path = self.link_dir / PlatformUtils.executable_name(name)
        temp_link = self.link_dir / f".{link_path.name}.{uuid.uuid4().hex}"
        os.symlink(executable, temp_link)
        try:
            os.replace(temp_link, link_path)
        except OSError:
            temp_link.unlink()
            raise
        self.logger.log(f"Linked {link_path} -> {executable}", logging.INFO)
        return link_path


def _is_executable(path: pathlib.Path) -> bool:
    if sys.platform == "win32":
        return True
    st = os.stat(path, follow_symlinks=False)
    return stat.S_ISREG(st.st_mode) and bool(st.st_mode & stat.S_IXUSR)
