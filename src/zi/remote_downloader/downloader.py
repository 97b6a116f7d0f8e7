"""
Remote downloader implementation.

Handles fetching the version index, choosing where to download from, and
streaming archives through verification into extraction.
"""

import gzip
import hashlib
import logging
import lzma
import os
import pathlib
import random
import shutil
import subprocess
import tarfile
import tempfile
import zipfile
import zlib
from dataclasses import dataclass
from typing import List, Optional, Union
from urllib.parse import urlparse

import requests
import urllib3
from pydantic import ValidationError

from zi.archive_pipeline import extract_archive
from zi.minisign import PublicKey, Signature
from zi.remote_downloader.mirrors import MirrorList
from zi.stream_adapters import (
    ByteWriter,
    HashWriter,
    MultiWriter,
    ProgressCallback,
    ProgressWriter,
    TeeReader,
)
from zi.version_index_models import (
    ArchiveSource,
    ZigVersion,
    ZigVersionIndex,
    ZlsRelease,
    parse_zls_releases,
)
from zi.zi_config import ZiConfig
from zi.zi_exceptions import (
    CompileError,
    CorruptArchive,
    FormatError,
    NoNativeAsset,
    NoSourceForVersion,
    NoTaggedRelease,
    PublicKeyMismatch,
    SignatureInvalid,
    SumMismatch,
    TransportError,
    VersionNotFound,
)
from zi.zi_logger import ZiLogger

MINISIG_SUFFIX = ".minisig"

# Raised by the decompressors and archive readers on damaged input.
ARCHIVE_ERRORS = (
    tarfile.TarError,
    zipfile.BadZipFile,
    gzip.BadGzipFile,
    zlib.error,
    lzma.LZMAError,
    EOFError,
)

PathLike = Union[str, pathlib.Path]


@dataclass(frozen=True)
class DownloadLocation:
    """
    Where an archive and its signature are fetched from.
    """

    tarball_url: str
    signature_url: str
    mirror: Optional[str] = None


class ZigDownloader:
    """
    Downloads, verifies and extracts Zig toolchains and zls builds.

    A Zig download is read exactly once: the response body is teed into a
    SHA-256 digest, the minisign verifier and a progress counter while the
    archive pipeline extracts it. Nothing from the download is placed in the
    target directory until both the digest and the signature check out.
    """

    def __init__(
        self,
        config: ZiConfig,
        logger: ZiLogger,
        session: Optional[requests.Session] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the downloader.

        Args:
            config: ZiConfig with URLs, mirror preferences and the trusted key
            logger: Logger for progress and error messages
            session: HTTP session to issue requests with
            rng: Random source used to pick a mirror
        """
        self.config = config
        self.logger = logger
        self.session = session if session is not None else requests.Session()
        self.rng = rng if rng is not None else random.Random()
        self.public_key = PublicKey.parse(config.public_key)

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _get(self, url: str, stream: bool = False) -> requests.Response:
        try:
            response = self.session.get(url, stream=stream, timeout=self.config.timeout)
        except requests.RequestException as e:
            raise TransportError(f"Request to {url} failed: {e}", url) from e

        if response.status_code != 200:
            response.close()
            raise TransportError(
                f"Request to {url} returned HTTP {response.status_code}",
                url,
                response.status_code,
            )
        return response

    def _fetch_bytes(self, url: str) -> bytes:
        response = self._get(url)
        try:
            return response.content
        finally:
            response.close()

    # ------------------------------------------------------------------
    # Index and mirrors
    # ------------------------------------------------------------------

    def fetch_zig_versions(self) -> ZigVersionIndex:
        """
        Fetch the Zig download index.
        """
        self.logger.log(f"Fetching Zig versions from {self.config.index_url}", logging.INFO)
        body = self._fetch_bytes(self.config.index_url)
        try:
            return ZigVersionIndex.from_json(body)
        except ValidationError as e:
            raise FormatError(f"Invalid version index from {self.config.index_url}: {e}") from e

    def fetch_zig_version(self, key: str) -> ZigVersion:
        """
        Fetch the index entry for one version.

        Raises:
            VersionNotFound: If the index has no such version
        """
        version = self.fetch_zig_versions().get(key)
        if version is None:
            raise VersionNotFound(f"Version {key} not found in index")
        return version

    def fetch_mirror_list(self) -> MirrorList:
        """
        Fetch the community mirror list.
        """
        self.logger.log(f"Fetching mirror list from {self.config.mirror_list_url}", logging.INFO)
        body = self._fetch_bytes(self.config.mirror_list_url)
        return MirrorList(body.decode("utf-8", errors="replace"))

    def resolve_location(self, source: ArchiveSource) -> DownloadLocation:
        """
        Decide where to download an archive and its signature from.

        An explicitly configured mirror wins; otherwise, unless mirrors are
        disabled, a random entry of the community mirror list is used; the
        canonical URL is the last resort.
        """
        if self.config.mirror:
            return self._mirror_location(self.config.mirror, source)

        if not self.config.no_mirrors:
            mirrors = self.fetch_mirror_list()
            if len(mirrors) > 0:
                return self._mirror_location(mirrors.choose(self.rng), source)
            self.logger.log("Mirror list is empty, using the canonical source", logging.WARNING)

        return DownloadLocation(
            tarball_url=source.tarball,
            signature_url=source.tarball + MINISIG_SUFFIX,
        )

    @staticmethod
    def _mirror_location(mirror: str, source: ArchiveSource) -> DownloadLocation:
        # Mirrors serve files flat, by the tarball's file name.
        tarball_url = f"{mirror.rstrip('/')}/{source.filename}"
        return DownloadLocation(
            tarball_url=tarball_url,
            signature_url=tarball_url + MINISIG_SUFFIX,
            mirror=mirror,
        )

    def fetch_signature(self, url: str) -> Signature:
        """
        Fetch and parse a minisign signature file.
        """
        self.logger.log(f"Fetching signature from {url}", logging.INFO)
        body = self._fetch_bytes(url)
        return Signature.from_minisig(body.decode("utf-8", errors="replace"))

    # ------------------------------------------------------------------
    # Zig
    # ------------------------------------------------------------------

    def download_zig(
        self,
        version: ZigVersion,
        target_dir: PathLike,
        progress_callback: Optional[ProgressCallback] = None,
        targets: Optional[List[str]] = None,
    ) -> DownloadLocation:
        """
        Download, verify and extract a Zig version into ``target_dir``.

        Args:
            version: The index entry to install
            target_dir: Existing directory receiving the extracted files
            progress_callback: Called with (bytes_done, bytes_total) as data arrives
            targets: Target keys to try. Defaults to the running platform

        Returns:
            The DownloadLocation the archive was fetched from

        Raises:
            NoSourceForVersion: If the version has no build for the platform
            TransportError: If a request fails
            SumMismatch, SignatureInvalid, PublicKeyMismatch: If verification fails
            CorruptArchive: If the download cannot be decompressed or unpacked
        """
        source = version.get_native_source(targets)
        if source is None:
            raise NoSourceForVersion(
                f"Version {version.version or version.date} has no build for this platform"
            )

        location = self.resolve_location(source)
        if location.mirror:
            self.logger.log(f"Using mirror {location.mirror}", logging.INFO)

        signature = self.fetch_signature(location.signature_url)
        try:
            verifier = signature.verifier(self.public_key)
        except PublicKeyMismatch as e:
            e.url = location.signature_url
            e.mirror = location.mirror
            raise

        digest = HashWriter(hashlib.sha256())
        progress = ProgressWriter(source.size_bytes, progress_callback)

        target_dir = pathlib.Path(target_dir)
        staging_dir = pathlib.Path(
            tempfile.mkdtemp(prefix=".zi-staging-", dir=target_dir.parent)
        )
        try:
            try:
                self._download_and_extract(
                    location.tarball_url,
                    staging_dir,
                    MultiWriter([digest, verifier, progress]),
                )
            except CorruptArchive as e:
                e.mirror = location.mirror
                raise

            actual = digest.hexdigest()
            if actual.lower() != source.shasum.lower():
                raise SumMismatch(
                    f"SHA-256 mismatch for {location.tarball_url}: "
                    f"expected {source.shasum}, got {actual}",
                    url=location.tarball_url,
                    mirror=location.mirror,
                )

            try:
                verifier.finalize()
            except SignatureInvalid as e:
                raise SignatureInvalid(
                    f"Signature verification failed for {location.tarball_url}",
                    url=location.tarball_url,
                    mirror=location.mirror,
                ) from e

            self.logger.log(
                f"Verified {location.tarball_url} ({progress.completed} bytes)", logging.INFO
            )
            for entry in staging_dir.iterdir():
                os.replace(entry, target_dir / entry.name)
        finally:
            shutil.rmtree(staging_dir, ignore_errors=True)

        return location

    def _download_and_extract(
        self, url: str, target_dir: PathLike, observer: Optional[ByteWriter] = None
    ) -> None:
        """
        Stream the archive at ``url`` into ``target_dir``.

        If ``observer`` is given it receives every byte of the response body
        (before decompression), including bytes past the end of the archive.
        """
        self.logger.log(f"Downloading {url}", logging.INFO)
        response = self._get(url, stream=True)
        with response:
            response.raw.decode_content = True
            observers = (observer,) if observer is not None else ()
            reader = TeeReader(response.raw, *observers)
            try:
                extract_archive(self.logger, reader, urlparse(url).path, target_dir)
            except (requests.RequestException, urllib3.exceptions.HTTPError) as e:
                raise TransportError(f"Download from {url} failed: {e}", url) from e
            except ARCHIVE_ERRORS as e:
                raise CorruptArchive(f"Archive from {url} is corrupt: {e}", url=url) from e

    # ------------------------------------------------------------------
    # zls
    # ------------------------------------------------------------------

    def fetch_zls_releases(self) -> List[ZlsRelease]:
        """
        Fetch the zls releases from the GitHub releases API.
        """
        self.logger.log(f"Fetching zls releases from {self.config.zls_releases_url}", logging.INFO)
        body = self._fetch_bytes(self.config.zls_releases_url)
        try:
            return parse_zls_releases(body)
        except ValidationError as e:
            raise FormatError(f"Invalid zls releases listing: {e}") from e

    def download_tagged_zls(
        self,
        tag_name: str,
        target_dir: PathLike,
        progress_callback: Optional[ProgressCallback] = None,
        asset_names: Optional[List[str]] = None,
    ) -> None:
        """
        Download the prebuilt zls release matching a Zig version tag.

        Raises:
            NoTaggedRelease: If zls has no release with that tag
            NoNativeAsset: If the release has no build for the platform
        """
        releases = self.fetch_zls_releases()
        release = next((r for r in releases if r.tag_name == tag_name), None)
        if release is None:
            raise NoTaggedRelease(f"No zls release tagged {tag_name}")

        asset = release.get_native_asset(asset_names)
        if asset is None:
            raise NoNativeAsset(f"zls {tag_name} has no build for this platform")

        progress = ProgressWriter(asset.size, progress_callback)
        self._download_and_extract(asset.browser_download_url, target_dir, progress)

    def download_compile_master_zls(
        self,
        compiler: str,
        version_string: str,
        target_dir: PathLike,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> pathlib.Path:
        """
        Download the zls master branch and build it with ``compiler``.

        Returns:
            The zls source directory the build ran in

        Raises:
            CompileError: If the build exits with a non-zero status
        """
        progress = ProgressWriter(None, progress_callback)
        self._download_and_extract(self.config.zls_master_archive_url, target_dir, progress)

        source_dir = pathlib.Path(target_dir) / "zls-master"
        args = [
            compiler,
            "build",
            "-Doptimize=ReleaseSafe",
            f"-Dversion-string={version_string}",
        ]
        self.logger.log(f"Compiling zls: {' '.join(args)}", logging.INFO)
        try:
            result = subprocess.run(
                args,
                cwd=str(source_dir),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
            )
        finally:
            shutil.rmtree(source_dir / ".zig-cache", ignore_errors=True)

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            self.logger.log(f"zls build failed: {stderr}", logging.ERROR)
            raise CompileError(
                f"zls build exited with status {result.returncode}", result.returncode
            )
        return source_dir
