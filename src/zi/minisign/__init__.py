"""
Minisign signature verification.

This package provides:
1. Parsing of minisign public key and signature lines
2. A streaming verifier supporting legacy and prehashed signatures
"""

from .minisign import PublicKey, Signature, SignatureAlgorithm, Verifier

__all__ = ["PublicKey", "Signature", "SignatureAlgorithm", "Verifier"]
