"""
Incremental Ed25519 signature verification.

``nacl.signing.VerifyKey.verify`` needs the whole message in memory. Ed25519
only ever looks at the message through ``SHA-512(R || A || M)``, so the hash
can be fed chunk by chunk and the group equation ``[S]B == R + [k]A`` checked
once the stream ends, using libsodium's point arithmetic.

Like ``crypto_sign_verify_detached``, verification refuses a non-canonical
``S`` and small-order ``R`` or ``A``. ``R`` and ``A`` must moreover lie in the
prime-order subgroup, which every honestly generated key and signature does.
"""

import hashlib
import hmac

from nacl import bindings
from nacl.exceptions import CryptoError

from zi.zi_exceptions import SignatureInvalid

PUBLIC_KEY_LENGTH = 32
SIGNATURE_LENGTH = 64

# Order of the Ed25519 base point.
GROUP_ORDER = 2**252 + 27742317777372353535851937790883648493


class Ed25519Verifier:
    """
    Verifies one Ed25519 signature over a message supplied in pieces.
    """

    def __init__(self, signature: bytes, public_key: bytes):
        if len(signature) != SIGNATURE_LENGTH:
            raise ValueError(f"Ed25519 signature must be {SIGNATURE_LENGTH} bytes")
        if len(public_key) != PUBLIC_KEY_LENGTH:
            raise ValueError(f"Ed25519 public key must be {PUBLIC_KEY_LENGTH} bytes")

        self._r = signature[:32]
        self._s = signature[32:]
        self._public_key = public_key
        self._hash = hashlib.sha512()
        self._hash.update(self._r)
        self._hash.update(public_key)

    def update(self, message: bytes) -> None:
        self._hash.update(message)

    def verify(self) -> None:
        """
        Check the signature against everything passed to update().

        Raises:
            SignatureInvalid: If the signature does not verify
        """
        if int.from_bytes(self._s, "little") >= GROUP_ORDER:
            raise SignatureInvalid("Signature scalar is not canonical")
        if not bindings.crypto_core_ed25519_is_valid_point(self._public_key):
            raise SignatureInvalid("Public key is not a usable Ed25519 point")
        if not bindings.crypto_core_ed25519_is_valid_point(self._r):
            raise SignatureInvalid("Signature R is not a usable Ed25519 point")

        k = bindings.crypto_core_ed25519_scalar_reduce(self._hash.digest())
        try:
            s_b = bindings.crypto_scalarmult_ed25519_base_noclamp(self._s)
            k_a = bindings.crypto_scalarmult_ed25519_noclamp(k, self._public_key)
            expected_r = bindings.crypto_core_ed25519_sub(s_b, k_a)
        except CryptoError as e:
            raise SignatureInvalid("Signature verification failed") from e

        if not hmac.compare_digest(expected_r, self._r):
            raise SignatureInvalid("Signature verification failed")
