"""
Remote downloader.

This package handles:
1. Fetching the Zig version index and the zls releases listing
2. Choosing between an explicit mirror, a random community mirror and the canonical source
3. Streaming downloads through digest and signature verification into extraction
"""

from .downloader import DownloadLocation, ZigDownloader
from .mirrors import MirrorList

__all__ = ["DownloadLocation", "MirrorList", "ZigDownloader"]
