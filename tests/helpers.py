"""
Shared helpers for the zi tests: a fake HTTP session, minisign signing and
in-memory archive builders.
"""

import base64
import hashlib
import io
import json
import tarfile
import zipfile
from typing import Dict, Iterable, List, Optional, Union

import nacl.signing

KEY_ID = bytes.fromhex("0102030405060708")
OTHER_KEY_ID = bytes.fromhex("1112131415161718")


# ============================================================================
# HTTP
# ============================================================================


class FakeRaw(io.BytesIO):
    """Stands in for urllib3's HTTPResponse."""

    decode_content = False


class FakeResponse:
    """The parts of requests.Response the downloader uses."""

    def __init__(self, body: bytes = b"", status_code: int = 200):
        self.status_code = status_code
        self.raw = FakeRaw(body)
        self.closed = False

    @property
    def content(self) -> bytes:
        return self.raw.getvalue()

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *args) -> None:
        self.close()


Route = Union[bytes, FakeResponse, Exception]


class FakeSession:
    """
    A requests.Session replacement serving canned bodies by URL.

    Unknown URLs answer 404. Exceptions are raised from get().
    """

    def __init__(self, routes: Optional[Dict[str, Route]] = None):
        self.routes: Dict[str, Route] = dict(routes or {})
        self.requests: List[str] = []
        self.responses: List[FakeResponse] = []

    def get(self, url: str, stream: bool = False, timeout=None) -> FakeResponse:
        self.requests.append(url)
        route = self.routes.get(url)
        if isinstance(route, Exception):
            raise route
        if route is None:
            response = FakeResponse(b"not found", 404)
        elif isinstance(route, FakeResponse):
            response = route
        else:
            response = FakeResponse(route)
        self.responses.append(response)
        return response


# ============================================================================
# Minisign
# ============================================================================


def make_signing_key(seed: int = 7) -> nacl.signing.SigningKey:
    return nacl.signing.SigningKey(bytes([seed]) * 32)


def public_key_line(signing_key: nacl.signing.SigningKey, key_id: bytes = KEY_ID) -> str:
    """Base64 key line of a minisign public key file."""
    raw = b"Ed" + key_id + signing_key.verify_key.encode()
    return base64.b64encode(raw).decode("ascii")


def signature_line(
    signing_key: nacl.signing.SigningKey,
    data: bytes,
    prehash: bool = True,
    key_id: bytes = KEY_ID,
) -> str:
    """Base64 signature line of a .minisig file over ``data``."""
    if prehash:
        tag = b"ED"
        message = hashlib.blake2b(data, digest_size=64).digest()
    else:
        tag = b"Ed"
        message = data
    signature = signing_key.sign(message).signature
    return base64.b64encode(tag + key_id + signature).decode("ascii")


def minisig_file(
    signing_key: nacl.signing.SigningKey,
    data: bytes,
    prehash: bool = True,
    key_id: bytes = KEY_ID,
) -> bytes:
    """A complete .minisig file. The global signature is not meaningful."""
    lines = [
        "untrusted comment: signature from zi test key",
        signature_line(signing_key, data, prehash, key_id),
        "trusted comment: timestamp:1700000000\tfile:test",
        base64.b64encode(bytes(64)).decode("ascii"),
    ]
    return ("\n".join(lines) + "\n").encode("ascii")


# ============================================================================
# Archives
# ============================================================================


def make_tar(
    files: Dict[str, bytes],
    compression: str = "",
    executables: Iterable[str] = (),
) -> bytes:
    """
    Build a tar archive in memory.

    Args:
        files: Archive member names mapped to their contents
        compression: "", "gz" or "xz"
        executables: Member names that get mode 0755
    """
    executables = set(executables)
    buffer = io.BytesIO()
    mode = f"w:{compression}" if compression else "w"
    with tarfile.open(fileobj=buffer, mode=mode) as tar:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o755 if name in executables else 0o644
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def make_zip(files: Dict[str, bytes], executables: Iterable[str] = ()) -> bytes:
    """Build a zip archive in memory, recording unix permissions."""
    executables = set(executables)
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, data in files.items():
            info = zipfile.ZipInfo(name)
            info.create_system = 3
            mode = 0o755 if name in executables else 0o644
            info.external_attr = (0o100000 | mode) << 16
            archive.writestr(info, data)
    return buffer.getvalue()


# ============================================================================
# Listings
# ============================================================================


def make_index(
    entries: Dict[str, Dict[str, object]],
) -> bytes:
    """Serialize a version index."""
    return json.dumps(entries).encode("utf-8")


def make_source(tarball: str, data: bytes) -> Dict[str, str]:
    """An index target entry for ``data`` served at ``tarball``."""
    return {
        "tarball": tarball,
        "shasum": hashlib.sha256(data).hexdigest(),
        "size": str(len(data)),
    }


def make_zls_releases(releases: Dict[str, Dict[str, str]]) -> bytes:
    """
    Serialize a zls releases listing.

    Args:
        releases: Tag names mapped to {asset name: download url}
    """
    payload = []
    for tag_name, assets in releases.items():
        payload.append(
            {
                "tag_name": tag_name,
                "assets": [
                    {"name": name, "browser_download_url": url, "size": 1234}
                    for name, url in assets.items()
                ],
            }
        )
    return json.dumps(payload).encode("utf-8")
