"""
Callbacks a caller can register to observe downloads.
"""

from typing import Protocol, runtime_checkable

from launchkit.downloader.request import DownloadRequest


@runtime_checkable
class DownloadProgressListener(Protocol):
    """
    Receives the running byte count of an in-flight download.

    ``total_bytes`` is -1 when the transport does not announce the length.
    """

    def on_progress(self, request: DownloadRequest, bytes_read: int, total_bytes: int) -> None: ...


@runtime_checkable
class DownloadCompletionListener(Protocol):
    """
    Receives exactly one terminal notification per request.
    """

    def on_success(self, request: DownloadRequest, duration: float) -> None: ...

    def on_failure(self, request: DownloadRequest, error: BaseException) -> None: ...
