"""
Minisign public key and signature handling.

Only the base64 lines of the minisign formats are understood: the key line
of a public key file and the file-data signature line of a ``.minisig``
file. The trusted comment and its global signature are not checked.

Layouts after base64 decoding::

    public key:  "Ed" | key id (8) | Ed25519 public key (32)
    signature:   "Ed" or "ED" | key id (8) | Ed25519 signature (64)

``Ed`` signatures cover the file bytes themselves (legacy). ``ED``
signatures cover the Blake2b-512 digest of the file bytes (prehash).
"""

import base64
import binascii
import hashlib
from dataclasses import dataclass
from enum import Enum

from zi.minisign.ed25519 import Ed25519Verifier
from zi.zi_exceptions import MinisignParseError, PublicKeyMismatch

PUBLIC_KEY_LINE_LENGTH = 56
SIGNATURE_LINE_LENGTH = 100

_KEY_ALGORITHM = b"Ed"
_LEGACY_ALGORITHM = b"Ed"
_PREHASH_ALGORITHM = b"ED"

BLAKE2B_512_DIGEST_SIZE = 64


def _decode(line: str, expected_length: int, decoded_length: int, what: str) -> bytes:
    if len(line) != expected_length:
        raise MinisignParseError(
            f"Invalid {what} length: expected {expected_length} characters, got {len(line)}"
        )
    try:
        data = base64.b64decode(line, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MinisignParseError(f"Invalid base64 encoding in {what}: {e}") from e
    if len(data) != decoded_length:
        raise MinisignParseError(
            f"Invalid {what} length: expected {decoded_length} bytes, got {len(data)}"
        )
    return data


class SignatureAlgorithm(str, Enum):
    LEGACY = "legacy"  # ed25519(<file data>)
    PREHASH = "prehash"  # ed25519(Blake2b-512(<file data>))


@dataclass(frozen=True)
class PublicKey:
    """
    A minisign Ed25519 public key.
    """

    key_id: bytes
    key: bytes

    @classmethod
    def parse(cls, line: str) -> "PublicKey":
        """
        Parse the base64 line of a minisign public key.

        The key bytes are not checked here; a key that cannot verify
        anything makes verification fail with SignatureInvalid.

        Raises:
            MinisignParseError: On a wrong length, bad base64 or an algorithm
                other than Ed25519
        """
        data = _decode(line, PUBLIC_KEY_LINE_LENGTH, 42, "public key")
        if data[:2] != _KEY_ALGORITHM:
            raise MinisignParseError(
                f"Unexpected public key algorithm: {data[:2]!r}"
            )
        return cls(key_id=data[2:10], key=data[10:42])


@dataclass(frozen=True)
class Signature:
    """
    A minisign signature over file data.
    """

    key_id: bytes
    algorithm: SignatureAlgorithm
    signature: bytes

    @classmethod
    def parse(cls, line: str) -> "Signature":
        """
        Parse the base64 signature line of a minisign signature file.

        Raises:
            MinisignParseError: On a wrong length, bad base64 or unknown algorithm
        """
        data = _decode(line, SIGNATURE_LINE_LENGTH, 74, "signature")
        tag = data[:2]
        if tag == _LEGACY_ALGORITHM:
            algorithm = SignatureAlgorithm.LEGACY
        elif tag == _PREHASH_ALGORITHM:
            algorithm = SignatureAlgorithm.PREHASH
        else:
            raise MinisignParseError(f"Invalid signature algorithm: {tag!r}")
        return cls(key_id=data[2:10], algorithm=algorithm, signature=data[10:74])

    @classmethod
    def from_minisig(cls, text: str) -> "Signature":
        """
        Parse a whole ``.minisig`` file; the signature is on its second line.
        """
        lines = text.splitlines()
        if len(lines) < 2:
            raise MinisignParseError("Invalid signature file: expected at least 2 lines")
        return cls.parse(lines[1].strip())

    def verifier(self, public_key: PublicKey) -> "Verifier":
        """
        Create a streaming verifier for this signature.

        Raises:
            PublicKeyMismatch: If the signature was made with a different key
        """
        if self.key_id != public_key.key_id:
            raise PublicKeyMismatch(
                f"Signature key id {self.key_id.hex()} does not match "
                f"public key id {public_key.key_id.hex()}"
            )
        return Verifier(self, public_key)


class Verifier:
    """
    Verifies a minisign signature over a stream of bytes.

    Every byte of the signed file must be passed to update() (or write(),
    so the verifier can sit behind a TeeReader) before finalize() is called
    exactly once.
    """

    def __init__(self, signature: Signature, public_key: PublicKey):
        self.algorithm = signature.algorithm
        self._ed_verifier = Ed25519Verifier(signature.signature, public_key.key)
        self._hash = None
        if signature.algorithm == SignatureAlgorithm.PREHASH:
            self._hash = hashlib.blake2b(digest_size=BLAKE2B_512_DIGEST_SIZE)
        self._finalized = False

    def update(self, message: bytes) -> None:
        if self._finalized:
            raise RuntimeError("Verifier has already been finalized")
        if self._hash is not None:
            self._hash.update(message)
        else:
            self._ed_verifier.update(message)

    def write(self, data: bytes) -> int:
        self.update(data)
        return len(data)

    def finalize(self) -> None:
        """
        Verify the signature over all bytes seen so far.

        Raises:
            SignatureInvalid: If the signature does not verify
        """
        if self._finalized:
            raise RuntimeError("Verifier has already been finalized")
        self._finalized = True
        if self._hash is not None:
            self._ed_verifier.update(self._hash.digest())
        self._ed_verifier.verify()

