"""
Abstract file downloader.

Several implementations can coexist, each handling a distinct transport;
``can_handle`` tells them apart.
"""

import abc
from typing import Iterable, List, Optional

from launchkit.downloader.listeners import DownloadCompletionListener, DownloadProgressListener
from launchkit.downloader.request import DownloadRequest, DownloadResult, DownloadState


class FileDownloader(abc.ABC):
    """
    Queues download requests and fetches them in batches.
    """

    progress_listener: Optional[DownloadProgressListener] = None
    completion_listener: Optional[DownloadCompletionListener] = None

    def set_progress_listener(self, listener: Optional[DownloadProgressListener]) -> None:
        self.progress_listener = listener

    def set_completion_listener(self, listener: Optional[DownloadCompletionListener]) -> None:
        self.completion_listener = listener

    @abc.abstractmethod
    def can_handle(self, request: DownloadRequest) -> bool:
        """Whether this downloader understands the request's transport."""

    @abc.abstractmethod
    def is_busy(self) -> bool:
        """Whether a batch is currently being downloaded."""

    @abc.abstractmethod
    def state_of(self, request: DownloadRequest) -> Optional[DownloadState]:
        """The lifecycle state of a request, or None if it was never enqueued."""

    @abc.abstractmethod
    def enqueue(self, request: DownloadRequest) -> None:
        """
        Queue a request for the next batch.

        Raises:
            UnsupportedDownloadRequestError: If ``can_handle`` is False for the request
        """

    @abc.abstractmethod
    def enqueue_all(self, download_requests: Iterable[Optional[DownloadRequest]]) -> None:
        """Queue several requests at once, ignoring None entries."""

    @abc.abstractmethod
    def download(self) -> List[DownloadResult]:
        """Download every queued request and block until all have finished."""

    @abc.abstractmethod
    def cancel(self) -> None:
        """Stop in-flight downloads of the current batch."""

    @abc.abstractmethod
    def close(self) -> None:
        """Finish or stop outstanding work and release transport resources."""

    def __enter__(self) -> "FileDownloader":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
