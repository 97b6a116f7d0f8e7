"""
Configuration parameters for zi.
"""

import dataclasses
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

try:
    import tomllib
except ModuleNotFoundError:
    # Python < 3.11
    import tomli as tomllib

from zi.zi_exceptions import ZiException
from zi.zi_settings import ZiSettings

ZIG_INDEX_URL = "https://ziglang.org/download/index.json"
ZIG_MIRROR_LIST_URL = "https://ziglang.org/download/community-mirrors.txt"
ZLS_RELEASES_URL = "https://api.github.com/repos/zigtools/zls/releases"
ZLS_MASTER_ARCHIVE_URL = "https://github.com/zigtools/zls/archive/refs/heads/master.tar.gz"

# Key the Zig Software Foundation signs release tarballs with.
ZIG_PUBLIC_KEY = "RWSGOq2NVecA2UPNdBUZykf1CCb147pkmdtYxgb3Ti+JO/wCYvhbAb/U"

# Environment variables and the config fields they set.
ENV_OVERRIDES = {
    "ZI_INSTALL_DIR": "install_dir",
    "ZI_LINK_DIR": "link_dir",
    "ZI_MIRROR": "mirror",
}


@dataclass
class ZiConfig:
    """
    Configuration parameters
    """

    install_dir: Optional[str] = None
    link_dir: Optional[str] = None
    mirror: Optional[str] = None
    no_mirrors: bool = False
    index_url: str = ZIG_INDEX_URL
    mirror_list_url: str = ZIG_MIRROR_LIST_URL
    zls_releases_url: str = ZLS_RELEASES_URL
    zls_master_archive_url: str = ZLS_MASTER_ARCHIVE_URL
    public_key: str = ZIG_PUBLIC_KEY
    timeout: Optional[float] = None

    @classmethod
    def from_dict(cls, env: Dict[str, Any]) -> "ZiConfig":
        """
        Create a ZiConfig from a dictionary.

        Raises:
            ZiException: If the dictionary contains unknown keys
        """
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(env) - known)
        if unknown:
            raise ZiException(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**env)

    @classmethod
    def load(
        cls,
        config_file: Optional[str] = None,
        environ: Optional[Dict[str, str]] = None,
    ) -> "ZiConfig":
        """
        Load the configuration, layering defaults < TOML file < environment.

        Args:
            config_file: Path of the TOML file. Defaults to ZiSettings.get_config_file()
            environ: Environment mapping. Defaults to os.environ

        Returns:
            ZiConfig instance
        """
        environ = os.environ if environ is None else environ
        config_file = config_file or ZiSettings.get_config_file()

        values: Dict[str, Any] = {}
        if os.path.exists(config_file):
            with open(config_file, "rb") as f:
                try:
                    toml_dict = tomllib.load(f)
                except tomllib.TOMLDecodeError as e:
                    raise ZiException(f"Invalid configuration file {config_file}: {e}") from e
            section = toml_dict.get("zi", {})
            if not isinstance(section, dict):
                raise ZiException(f"'zi' in {config_file} must be a table")
            values.update(section)

        for env_var, field_name in ENV_OVERRIDES.items():
            value = environ.get(env_var)
            if value:
                values[field_name] = value

        return cls.from_dict(values)

    def with_overrides(self, **overrides: Any) -> "ZiConfig":
        """
        Return a copy with every non-None override applied
        """
        return dataclasses.replace(
            self, **{k: v for k, v in overrides.items() if v is not None}
        )
