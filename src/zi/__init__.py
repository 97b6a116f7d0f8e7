"""
zi is a simple Zig version manager.

Downloads are streamed once through SHA-256 and minisign verification while
they are being extracted, so nothing unverified is ever installed.
"""

__version__ = "0.1.0"
