"""
File downloader.

This package handles:
1. Describing download requests and their outcomes
2. Downloading batches of requests concurrently over HTTP(S)
3. Reporting progress and completion to registered listeners
"""

from .base import FileDownloader
from .http_downloader import HttpFileDownloader
from .listeners import DownloadCompletionListener, DownloadProgressListener
from .request import DownloadRequest, DownloadResult, DownloadState

__all__ = [
    "FileDownloader",
    "HttpFileDownloader",
    "DownloadCompletionListener",
    "DownloadProgressListener",
    "DownloadRequest",
    "DownloadResult",
    "DownloadState",
]
