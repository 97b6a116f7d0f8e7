"""
Tests for minisign parsing and streaming verification.
"""

import base64
import hashlib

import pytest

from tests.helpers import (
    KEY_ID,
    OTHER_KEY_ID,
    make_signing_key,
    minisig_file,
    public_key_line,
    signature_line,
)
from zi.minisign import PublicKey, Signature, SignatureAlgorithm
from zi.minisign.ed25519 import GROUP_ORDER
from zi.zi_config import ZIG_PUBLIC_KEY
from zi.zi_exceptions import MinisignParseError, PublicKeyMismatch, SignatureInvalid

MESSAGE = b"The quick brown fox jumps over the lazy dog\n" * 50


@pytest.fixture
def signing_key():
    return make_signing_key()


@pytest.fixture
def public_key(signing_key):
    return PublicKey.parse(public_key_line(signing_key))


def verify(signature_text: str, public_key: PublicKey, chunks) -> None:
    verifier = Signature.parse(signature_text).verifier(public_key)
    for chunk in chunks:
        verifier.update(chunk)
    verifier.finalize()


def chunked(data: bytes, size: int):
    return [data[i : i + size] for i in range(0, len(data), size)]


def secret_scalar(seed: int = 7) -> int:
    """The clamped Ed25519 secret scalar of make_signing_key(seed)."""
    h = hashlib.sha512(bytes([seed]) * 32).digest()
    a = int.from_bytes(h[:32], "little")
    a &= (1 << 254) - 8
    a |= 1 << 254
    return a


# Encoding of the neutral element, a point of order 1.
IDENTITY_POINT = bytes([1]) + bytes(31)


class TestPublicKey:
    """Tests for PublicKey.parse."""

    def test_parse_zig_key(self):
        key = PublicKey.parse(ZIG_PUBLIC_KEY)
        assert len(key.key_id) == 8
        assert len(key.key) == 32

    def test_parse_generated_key(self, signing_key):
        key = PublicKey.parse(public_key_line(signing_key))
        assert key.key_id == KEY_ID
        assert key.key == signing_key.verify_key.encode()

    def test_wrong_length(self):
        with pytest.raises(MinisignParseError):
            PublicKey.parse(ZIG_PUBLIC_KEY[:-1])

    def test_invalid_base64(self):
        with pytest.raises(MinisignParseError):
            PublicKey.parse("!" * 56)

    def test_wrong_algorithm(self, signing_key):
        raw = b"Xy" + KEY_ID + signing_key.verify_key.encode()
        with pytest.raises(MinisignParseError):
            PublicKey.parse(base64.b64encode(raw).decode())

    @pytest.mark.parametrize("i", range(64))
    def test_any_key_bytes_round_trip(self, i):
        """Key bytes are carried through whether or not they are a curve point."""
        key = hashlib.sha256(bytes([i])).digest()
        line = base64.b64encode(b"Ed" + KEY_ID + key).decode()
        assert len(line) == 56
        parsed = PublicKey.parse(line)
        assert parsed.key_id == KEY_ID
        assert parsed.key == key


class TestSignatureParsing:
    """Tests for Signature.parse and Signature.from_minisig."""

    def test_legacy_tag(self, signing_key):
        signature = Signature.parse(signature_line(signing_key, MESSAGE, prehash=False))
        assert signature.algorithm == SignatureAlgorithm.LEGACY
        assert signature.key_id == KEY_ID

    def test_prehash_tag(self, signing_key):
        signature = Signature.parse(signature_line(signing_key, MESSAGE, prehash=True))
        assert signature.algorithm == SignatureAlgorithm.PREHASH

    def test_unknown_tag(self, signing_key):
        raw = b"Ex" + KEY_ID + bytes(64)
        with pytest.raises(MinisignParseError):
            Signature.parse(base64.b64encode(raw).decode())

    def test_truncated(self, signing_key):
        line = signature_line(signing_key, MESSAGE)
        with pytest.raises(MinisignParseError):
            Signature.parse(line[:-4])

    def test_from_minisig_reads_second_line(self, signing_key):
        text = minisig_file(signing_key, MESSAGE).decode()
        signature = Signature.from_minisig(text)
        assert signature.algorithm == SignatureAlgorithm.PREHASH

    def test_from_minisig_too_short(self):
        with pytest.raises(MinisignParseError):
            Signature.from_minisig("untrusted comment: nothing else\n")


class TestVerifier:
    """Tests for the streaming Verifier."""

    @pytest.mark.parametrize("prehash", [False, True])
    def test_valid_signature(self, signing_key, public_key, prehash):
        verify(signature_line(signing_key, MESSAGE, prehash=prehash), public_key, [MESSAGE])

    @pytest.mark.parametrize("prehash", [False, True])
    def test_chunking_does_not_matter(self, signing_key, public_key, prehash):
        line = signature_line(signing_key, MESSAGE, prehash=prehash)
        for size in (1, 7, 64, 1000):
            verify(line, public_key, chunked(MESSAGE, size))

    @pytest.mark.parametrize("prehash", [False, True])
    def test_empty_message(self, signing_key, public_key, prehash):
        verify(signature_line(signing_key, b"", prehash=prehash), public_key, [])

    @pytest.mark.parametrize("prehash", [False, True])
    def test_flipped_byte_fails(self, signing_key, public_key, prehash):
        line = signature_line(signing_key, MESSAGE, prehash=prehash)
        tampered = bytearray(MESSAGE)
        tampered[100] ^= 0x01
        with pytest.raises(SignatureInvalid):
            verify(line, public_key, [bytes(tampered)])

    @pytest.mark.parametrize("prehash", [False, True])
    def test_truncated_message_fails(self, signing_key, public_key, prehash):
        line = signature_line(signing_key, MESSAGE, prehash=prehash)
        with pytest.raises(SignatureInvalid):
            verify(line, public_key, [MESSAGE[:-1]])

    def test_signature_from_other_key_fails(self, public_key):
        other = make_signing_key(seed=9)
        with pytest.raises(SignatureInvalid):
            verify(signature_line(other, MESSAGE), public_key, [MESSAGE])

    def test_corrupted_signature_fails(self, signing_key, public_key):
        raw = bytearray(base64.b64decode(signature_line(signing_key, MESSAGE, prehash=False)))
        raw[20] ^= 0x40
        with pytest.raises(SignatureInvalid):
            verify(base64.b64encode(bytes(raw)).decode(), public_key, [MESSAGE])

    def test_key_id_mismatch(self, signing_key, public_key):
        line = signature_line(signing_key, MESSAGE, key_id=OTHER_KEY_ID)
        with pytest.raises(PublicKeyMismatch):
            Signature.parse(line).verifier(public_key)

    def test_finalize_only_once(self, signing_key, public_key):
        verifier = Signature.parse(signature_line(signing_key, MESSAGE)).verifier(public_key)
        verifier.update(MESSAGE)
        verifier.finalize()
        with pytest.raises(RuntimeError):
            verifier.finalize()
        with pytest.raises(RuntimeError):
            verifier.update(b"more")

    def test_write_interface(self, signing_key, public_key):
        verifier = Signature.parse(signature_line(signing_key, MESSAGE)).verifier(public_key)
        assert verifier.write(MESSAGE) == len(MESSAGE)
        verifier.finalize()

    def test_unusable_key_fails_verification(self, signing_key):
        """A key of small order parses but never verifies."""
        weak_key = PublicKey(key_id=KEY_ID, key=bytes(32))
        with pytest.raises(SignatureInvalid):
            verify(signature_line(signing_key, MESSAGE, prehash=False), weak_key, [MESSAGE])

    def test_small_order_r_is_rejected(self, signing_key, public_key):
        """
        With R the identity and S = k*a, [S]B == R + [k]A holds, yet libsodium
        refuses such a signature. So must the streaming verifier.
        """
        k_digest = hashlib.sha512(IDENTITY_POINT + public_key.key + MESSAGE).digest()
        k = int.from_bytes(k_digest, "little") % GROUP_ORDER
        s = (k * secret_scalar()) % GROUP_ORDER
        raw = b"Ed" + KEY_ID + IDENTITY_POINT + s.to_bytes(32, "little")

        with pytest.raises(SignatureInvalid):
            verify(base64.b64encode(raw).decode(), public_key, [MESSAGE])
