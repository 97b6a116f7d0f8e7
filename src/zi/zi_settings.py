"""
Defines the directories used by zi.
"""

import os
import pathlib
import tempfile
from typing import Optional


class ZiSettings:
    """
    Provides the various directories zi reads from and writes to
    """

    # Checked in order before falling back to the platform default.
    TEMP_DIR_ENV_VARS = ("TEMPDIR", "TMPDIR", "TEMP", "TMP")

    @staticmethod
    def get_home_directory() -> str:
        return str(pathlib.Path.home())

    @staticmethod
    def get_install_directory(install_dir: Optional[str] = None) -> str:
        """
        Returns the directory holding one sub directory per installed Zig version
        """
        if install_dir:
            return os.path.expanduser(install_dir)
        return str(pathlib.PurePath(ZiSettings.get_home_directory(), ".zi"))

    @staticmethod
    def get_link_directory(link_dir: Optional[str] = None) -> str:
        """
        Returns the directory in which the active zig and zls symlinks are placed
        """
        if link_dir:
            return os.path.expanduser(link_dir)
        return str(pathlib.PurePath(ZiSettings.get_home_directory(), ".local", "bin"))

    @staticmethod
    def get_config_file() -> str:
        """
        Returns the path of the zi TOML configuration file (which may not exist)
        """
        explicit = os.environ.get("ZI_CONFIG")
        if explicit:
            return os.path.expanduser(explicit)
        config_home = os.environ.get("XDG_CONFIG_HOME") or str(
            pathlib.PurePath(ZiSettings.get_home_directory(), ".config")
        )
        return str(pathlib.PurePath(config_home, "zi", "config.toml"))

    @staticmethod
    def get_temp_directory() -> str:
        """
        Returns the directory used for temporary files such as spooled zip archives
        """
        for env_var in ZiSettings.TEMP_DIR_ENV_VARS:
            value = os.environ.get(env_var)
            if value:
                return value
        return tempfile.gettempdir()
