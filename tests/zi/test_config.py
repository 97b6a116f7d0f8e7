"""
Tests for ZiConfig and ZiSettings.
"""

import pathlib

import pytest

from zi.zi_config import ZIG_INDEX_URL, ZiConfig
from zi.zi_exceptions import ZiException
from zi.zi_settings import ZiSettings


class TestZiConfig:
    """Tests for loading configuration."""

    def test_defaults(self, tmp_path):
        config = ZiConfig.load(config_file=str(tmp_path / "missing.toml"), environ={})
        assert config.index_url == ZIG_INDEX_URL
        assert config.mirror is None
        assert config.no_mirrors is False

    def test_toml_file(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text(
            '[zi]\nmirror = "https://mirror.example/zig"\nno_mirrors = true\ntimeout = 30.0\n'
        )
        config = ZiConfig.load(config_file=str(config_file), environ={})
        assert config.mirror == "https://mirror.example/zig"
        assert config.no_mirrors is True
        assert config.timeout == 30.0

    def test_environment_overrides_file(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text('[zi]\ninstall_dir = "/from/file"\nlink_dir = "/links"\n')
        config = ZiConfig.load(
            config_file=str(config_file),
            environ={"ZI_INSTALL_DIR": "/from/env", "ZI_MIRROR": "https://env.example"},
        )
        assert config.install_dir == "/from/env"
        assert config.link_dir == "/links"
        assert config.mirror == "https://env.example"

    def test_unknown_key(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text('[zi]\nmirorr = "typo"\n')
        with pytest.raises(ZiException):
            ZiConfig.load(config_file=str(config_file), environ={})

    def test_invalid_toml(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text("[zi\n")
        with pytest.raises(ZiException):
            ZiConfig.load(config_file=str(config_file), environ={})

    def test_with_overrides_ignores_none(self):
        config = ZiConfig(mirror="https://a.example")
        assert config.with_overrides(mirror=None, no_mirrors=True) == ZiConfig(
            mirror="https://a.example", no_mirrors=True
        )


class TestZiSettings:
    """Tests for directory resolution."""

    def test_default_directories(self, monkeypatch, tmp_path):
        monkeypatch.setattr(ZiSettings, "get_home_directory", staticmethod(lambda: str(tmp_path)))
        assert ZiSettings.get_install_directory() == str(tmp_path / ".zi")
        assert ZiSettings.get_link_directory() == str(tmp_path / ".local" / "bin")

    def test_explicit_directories(self):
        assert ZiSettings.get_install_directory("/opt/zi") == "/opt/zi"
        assert ZiSettings.get_link_directory("/opt/bin") == "/opt/bin"

    def test_config_file_location(self, monkeypatch, tmp_path):
        monkeypatch.delenv("ZI_CONFIG", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert pathlib.Path(ZiSettings.get_config_file()) == tmp_path / "zi" / "config.toml"

        monkeypatch.setenv("ZI_CONFIG", str(tmp_path / "custom.toml"))
        assert ZiSettings.get_config_file() == str(tmp_path / "custom.toml")

    def test_temp_directory_order(self, monkeypatch):
        for name in ZiSettings.TEMP_DIR_ENV_VARS:
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("TMP", "/tmp/last")
        monkeypatch.setenv("TMPDIR", "/tmp/second")
        assert ZiSettings.get_temp_directory() == "/tmp/second"
        monkeypatch.setenv("TEMPDIR", "/tmp/first")
        assert ZiSettings.get_temp_directory() == "/tmp/first"
