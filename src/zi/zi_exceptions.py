"""
Exceptions raised by zi.

Errors fall into four groups so callers can attribute blame:
transport (the network or server failed), format (the input could not be
parsed or is of an unsupported kind), integrity (the bytes do not match what
was promised) and lookup (the requested version or asset does not exist).
Resource errors (temporary files, extraction) surface as plain ``OSError``.
"""

from typing import Optional


class ZiException(Exception):
    """Base exception for zi."""

    pass


# ============================================================================
# Transport
# ============================================================================


class TransportError(ZiException):
    """A request failed or the server answered with a non-OK status."""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


# ============================================================================
# Format
# ============================================================================


class FormatError(ZiException):
    """Input could not be parsed or is of an unsupported kind."""

    pass


class UnknownArchiveType(FormatError):
    """The archive path carries no suffix at all."""

    pass


class UnsupportedArchiveType(FormatError):
    """The archive container is neither zip nor tar."""

    pass


class UnsupportedCompressionType(FormatError):
    """The tar compression suffix is neither gz nor xz."""

    pass


class MinisignParseError(FormatError):
    """A minisign public key or signature line is malformed."""

    pass


class CorruptArchive(FormatError):
    """
    A downloaded archive could not be decompressed or unpacked.

    Carries the URL and the mirror (if any) the archive came from.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        mirror: Optional[str] = None,
    ):
        super().__init__(message)
        self.url = url
        self.mirror = mirror


# ============================================================================
# Integrity
# ============================================================================


class IntegrityError(ZiException):
    """
    Downloaded bytes do not match what was promised.

    Carries the URL the bytes came from and the mirror used (if any) so
    callers can point at the responsible source.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        mirror: Optional[str] = None,
    ):
        super().__init__(message)
        self.url = url
        self.mirror = mirror


class SumMismatch(IntegrityError):
    """The SHA-256 digest of the download differs from the index."""

    pass


class SignatureInvalid(IntegrityError):
    """The minisign signature does not verify over the downloaded bytes."""

    pass


class PublicKeyMismatch(IntegrityError):
    """The signature was made with a different key than the trusted one."""

    pass


# ============================================================================
# Lookup
# ============================================================================


class VersionNotFound(ZiException):
    pass


class NoSourceForVersion(ZiException):
    pass


class NoTaggedRelease(ZiException):
    pass


class NoNativeAsset(ZiException):
    pass


class MissingExecutable(ZiException):
    pass


class CompileError(ZiException):
    """Building zls from source failed."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode
