"""
The ``zi`` command.

Usage:
    zi ls [--remote | --local]
    zi install <version> [--force] [--skip-zls] [--mirror URL] [--no-mirrors]
    zi --version

Environment variables:
    ZI_INSTALL_DIR    Directory to install Zig versions (default: $HOME/.zi)
    ZI_LINK_DIR       Directory for the active zig and zls symlinks (default: $HOME/.local/bin)
    ZI_MIRROR         Mirror to download Zig from
"""

import logging
import sys
from contextlib import contextmanager
from typing import Dict, Iterator, Optional
from urllib.parse import urlparse

import typer

from zi import __version__
from zi.local_install import InstallManager
from zi.remote_downloader import ZigDownloader
from zi.version_index_models import ZigVersionIndex
from zi.zi_config import ZiConfig
from zi.zi_exceptions import (
    CorruptArchive,
    IntegrityError,
    MissingExecutable,
    NoTaggedRelease,
    VersionNotFound,
    ZiException,
)
from zi.zi_logger import ZiLogger

app = typer.Typer(
    name="zi",
    help="zi is a simple Zig version manager.",
    no_args_is_help=True,
    add_completion=False,
)


def create_downloader(config: ZiConfig, logger: ZiLogger) -> ZigDownloader:
    return ZigDownloader(config, logger)


def _fail(*lines: str) -> None:
    for line in lines:
        typer.echo(line, err=True)
    raise typer.Exit(1)


def _load_config(**overrides) -> ZiConfig:
    try:
        return ZiConfig.load().with_overrides(**overrides)
    except ZiException as e:
        _fail(f"zi: {e}")


def _create_logger(verbose: bool) -> ZiLogger:
    logger = ZiLogger()
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(message)s", stream=sys.stderr)
        logger.set_level(logging.DEBUG)
    else:
        logger.set_level(logging.WARNING)
    return logger


class _ProgressReporter:
    """
    Feeds download progress into a progress bar, created once the total is known.
    """

    def __init__(self, label: str):
        self.label = label
        self.bar = None
        self.reported = 0

    def __call__(self, completed: int, total: Optional[int]) -> None:
        if self.bar is None:
            if total is None:
                return
            self.bar = typer.progressbar(length=total, label=self.label, file=sys.stderr)
        self.bar.update(completed - self.reported)
        self.reported = completed

    def finish(self) -> None:
        if self.bar is not None:
            self.bar.render_finish()


@contextmanager
def _progress(label: str) -> Iterator[_ProgressReporter]:
    reporter = _ProgressReporter(label)
    try:
        yield reporter
    finally:
        reporter.finish()


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"zi version {__version__}")
        raise typer.Exit(0)


@app.callback()
def _root(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Print version information",
    ),
) -> None:
    """zi is a simple Zig version manager."""


@app.command("ls")
def list_versions(
    remote: bool = typer.Option(False, "--remote", "-r", help="List only remote versions"),
    local: bool = typer.Option(False, "--local", "-l", help="List only local versions"),
    verbose: bool = typer.Option(False, "--verbose", help="Log progress to stderr"),
) -> None:
    """List Zig versions.

    Without flags, installed and remote versions are merged and installed
    ones are marked with '+'.
    """
    config = _load_config()
    logger = _create_logger(verbose)
    manager = InstallManager(config, logger)

    if local:
        for installed in manager.iterate_installed_versions():
            typer.echo(installed.name)
        return

    index = _fetch_index(create_downloader(config, logger))

    if remote:
        for key, info in index.items():
            typer.echo(f"{key} -> {info.version}" if info.version else key)
        return

    # Installed versions first, then remote only ones, in index order.
    installed: Dict[str, bool] = {v.name: True for v in manager.iterate_installed_versions()}
    merged: Dict[str, bool] = dict(installed)
    for key, info in index.items():
        merged.setdefault(info.version or key, False)

    indent = "  " if installed else ""
    for name, is_installed in merged.items():
        typer.echo(f"+ {name}" if is_installed else f"{indent}{name}")


def _fetch_index(downloader: ZigDownloader) -> ZigVersionIndex:
    try:
        return downloader.fetch_zig_versions()
    except ZiException as e:
        _fail(f"zi: {e}")


@app.command()
def install(
    version: str = typer.Argument(..., help="Version to install, as listed by 'zi ls --remote'"),
    force: bool = typer.Option(
        False, "--force", "-f", help="Remove the existing download if it exists"
    ),
    skip_zls: bool = typer.Option(
        False, "--skip-zls", "-s", help="Skip downloading and/or linking the zls executable"
    ),
    mirror: Optional[str] = typer.Option(None, "--mirror", help="Download Zig from this mirror"),
    no_mirrors: bool = typer.Option(
        False, "--no-mirrors", help="Download Zig from ziglang.org only"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log progress to stderr"),
) -> None:
    """Install a specific Zig version and make it the active one."""
    config = _load_config(mirror=mirror, no_mirrors=no_mirrors or None)
    logger = _create_logger(verbose)
    manager = InstallManager(config, logger)
    downloader = create_downloader(config, logger)

    try:
        _install(manager, downloader, version, force, skip_zls)
    except VersionNotFound:
        _fail(
            "Version not found in index.",
            "See 'zi ls --remote' for a list of available versions.",
        )
    except (IntegrityError, CorruptArchive) as e:
        if e.mirror:
            source = f"mirror {e.mirror}"
        else:
            source = urlparse(e.url).netloc if e.url else "ziglang.org"
        _fail(
            f"Warning: {e}",
            f"The download from {source} could not be verified and was not installed.",
            "Retry with '--no-mirrors' or choose another mirror with '--mirror'.",
        )
    except ZiException as e:
        _fail(f"zi: {e}")


def _install(
    manager: InstallManager,
    downloader: ZigDownloader,
    version: str,
    force: bool,
    skip_zls: bool,
) -> None:
    info = downloader.fetch_zig_version(version)
    full_version = info.version or version
    new_install = force
    try:
        install_dir = manager.open_install_dir(full_version)
    except FileNotFoundError:
        install_dir = manager.make_install_dir(full_version)
        new_install = True

    if new_install:
        manager.clear_install_dir(full_version)
        with _progress("Downloading zig") as reporter:
            downloader.download_zig(info, install_dir, reporter)

    try:
        executables = manager.locate_executables(install_dir)
    except MissingExecutable:
        _fail(
            "Failed to locate zig executable.",
            "Try reinstalling using the '--force' flag.",
        )

    try:
        manager.link_executable(executables.zig, "zig")
    except FileNotFoundError:
        _fail("Invalid link directory.")

    if skip_zls:
        return

    if new_install:
        with _progress("Downloading zls") as reporter:
            if version == "master":
                downloader.download_compile_master_zls(
                    str(executables.zig), full_version, install_dir, reporter
                )
            else:
                try:
                    downloader.download_tagged_zls(version, install_dir, reporter)
                except NoTaggedRelease:
                    typer.echo("Warning: zls not installed!", err=True)
                    typer.echo(
                        "Unable to find a matching zls tagged release. "
                        "Use '--skip-zls' to switch to this version in the future.",
                        err=True,
                    )
                    return

    zls = manager.locate_executables(install_dir).zls
    if zls is None:
        _fail(
            "Failed to locate zls executable.",
            "Try reinstalling using the '--force' flag or ignoring this error using '--skip-zls'.",
        )
    manager.link_executable(zls, "zls")


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
