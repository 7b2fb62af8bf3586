"""
HTTP(S) implementation of the file downloader.

Handles:
1. Queueing requests for http and https sources
2. Downloading a batch concurrently on a fixed-size worker pool
3. Reporting progress and exactly one completion outcome per request
4. Cancellation and bounded shutdown
"""

import collections
import concurrent.futures
import logging
import os
import threading
import time
from typing import Deque, Dict, Iterable, List, Optional

import requests
from requests.adapters import HTTPAdapter

from launchkit.downloader.base import FileDownloader
from launchkit.downloader.listeners import DownloadCompletionListener, DownloadProgressListener
from launchkit.downloader.request import DownloadRequest, DownloadResult, DownloadState
from launchkit.launchkit_exceptions import (
    ConfigurationError,
    DownloadCancelledError,
    DownloadError,
    DownloadStatusError,
    DownloaderClosedError,
    DownloaderTerminationError,
    UnsupportedDownloadRequestError,
)
from launchkit.launchkit_logger import LaunchkitLogger


class HttpFileDownloader(FileDownloader):
    """
    Downloads http and https requests concurrently.

    Each call to ``download`` makes exactly one attempt per queued request;
    re-enqueueing failed requests within their retry budget is up to the caller.
    Requests downloaded concurrently must target distinct destination paths.

    Example usage:
    ```python
    with HttpFileDownloader(pool_size=4) as downloader:
        downloader.set_completion_listener(listener)
        downloader.enqueue_all(requests)
        results = downloader.download()
    ```
    """

    SUPPORTED_SCHEMES = ("http", "https")
    HTTP_OK_STATUS_CODE = 200
    CONTENT_LENGTH_HEADER = "Content-Length"

    DEFAULT_POOL_SIZE = 1
    DEFAULT_CHUNK_SIZE = 8 * 1024
    TERMINATION_TIMEOUT_SECONDS = 30.0

    def __init__(
        self,
        pool_size: int = DEFAULT_POOL_SIZE,
        session: Optional[requests.Session] = None,
        logger: Optional[LaunchkitLogger] = None,
        progress_listener: Optional[DownloadProgressListener] = None,
        completion_listener: Optional[DownloadCompletionListener] = None,
        termination_timeout: float = TERMINATION_TIMEOUT_SECONDS,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """
        Initialize the downloader.

        Args:
            pool_size: Number of downloads that may run at the same time
            session: HTTP session to share between workers; one is created if omitted
            logger: Logger for progress and error messages
            progress_listener: Receives byte counts while downloading
            completion_listener: Receives one success or failure per request
            termination_timeout: Grace period, in seconds, for each shutdown phase
            chunk_size: Size of the buffered reads from the response body
        """
        if pool_size < 1:
            raise ConfigurationError("Pool size must be greater than zero")
        if termination_timeout <= 0:
            raise ConfigurationError("Termination timeout must be greater than zero")

        self.pool_size = pool_size
        self.termination_timeout = termination_timeout
        self.chunk_size = chunk_size
        self.logger = logger or LaunchkitLogger()
        self.progress_listener = progress_listener
        self.completion_listener = completion_listener

        self._session = session if session is not None else self._create_session(pool_size)
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=pool_size, thread_name_prefix="launchkit-download"
        )

        self._queue: Deque[DownloadRequest] = collections.deque()
        self._states: Dict[DownloadRequest, DownloadState] = {}
        self._queue_lock = threading.Lock()
        self._batch_lock = threading.Lock()

        self._busy = threading.Event()
        self._cancelled = threading.Event()
        self._closed = False

    @staticmethod
    def _create_session(pool_size: int) -> requests.Session:
        session = requests.Session()
        adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    # ------------------------------------------------------------------
    # Queue
    # ------------------------------------------------------------------

    def can_handle(self, request: DownloadRequest) -> bool:
        if request is None:
            raise TypeError("Download request must not be None")
        return request.scheme in self.SUPPORTED_SCHEMES

    def is_busy(self) -> bool:
        return self._busy.is_set()

    def queued(self) -> List[DownloadRequest]:
        with self._queue_lock:
            return list(self._queue)

    def state_of(self, request: DownloadRequest) -> Optional[DownloadState]:
        """
        Where the request is in its lifecycle, or None if it was never enqueued.

        The terminal state of a request is kept until it is enqueued again.
        """
        with self._queue_lock:
            return self._states.get(request)

    def _set_state(self, request: DownloadRequest, state: DownloadState) -> None:
        with self._queue_lock:
            self._states[request] = state

    def enqueue(self, request: DownloadRequest) -> None:
        self._ensure_open()
        if not self.can_handle(request):
            raise UnsupportedDownloadRequestError(request)
        with self._queue_lock:
            self._queue.append(request)
            self._states[request] = DownloadState.QUEUED

    def enqueue_all(self, download_requests: Iterable[Optional[DownloadRequest]]) -> None:
        self._ensure_open()
        if download_requests is None:
            raise TypeError("Download requests must not be None")
        batch = [request for request in download_requests if request is not None]
        for request in batch:
            if not self.can_handle(request):
                raise UnsupportedDownloadRequestError(request)
        with self._queue_lock:
            self._queue.extend(batch)
            for request in batch:
                self._states[request] = DownloadState.QUEUED

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def download(self) -> List[DownloadResult]:
        """
        Download every request queued so far and wait for all of them.

        Requests enqueued while the batch runs are left for the next call.

        Returns:
            One DownloadResult per request of the batch, in enqueue order

        Raises:
            KeyboardInterrupt: Re-raised after in-flight downloads were stopped and reported
        """
        self._ensure_open()

        with self._batch_lock:
            self._ensure_open()
            with self._queue_lock:
                batch = list(self._queue)
                self._queue.clear()

            if not batch:
                return []

            self.logger.log(f"Starting download of {len(batch)} files", logging.INFO)
            self._cancelled.clear()
            self._busy.set()
            interrupted: Optional[BaseException] = None
            try:
                futures = [self._submit(request) for request in batch]
                try:
                    concurrent.futures.wait(futures)
                except KeyboardInterrupt as e:
                    interrupted = e
                    self.logger.log("Download batch interrupted, cancelling", logging.WARNING)
                    self.cancel()
                    concurrent.futures.wait(futures)
                results = [self._collect(future, request) for future, request in zip(futures, batch)]
            finally:
                self._busy.clear()

        if interrupted is not None:
            raise interrupted

        failed = sum(1 for result in results if not result.succeeded)
        self.logger.log(
            f"Download batch finished: {len(results) - failed} succeeded, {failed} failed",
            logging.INFO,
        )
        return results

    def cancel(self) -> None:
        self._cancelled.set()

    def _submit(self, request: DownloadRequest) -> concurrent.futures.Future:
        try:
            return self._executor.submit(self._run, request)
        except RuntimeError:
            # the pool was shut down by close() after it gave up waiting for this batch
            future: concurrent.futures.Future = concurrent.futures.Future()
            future.set_result(self._fail(request, DownloaderClosedError("Downloader is closed")))
            return future

    def _collect(self, future: concurrent.futures.Future, request: DownloadRequest) -> DownloadResult:
        try:
            return future.result()
        except concurrent.futures.CancelledError as e:
            return self._fail(request, e)

    def _fail(self, request: DownloadRequest, error: BaseException) -> DownloadResult:
        self.logger.log(f"Failed to download {request.source_uri}: {error}", logging.ERROR)
        self._set_state(request, DownloadState.FAILED)
        self._notify_failure(request, error)
        return DownloadResult(request, DownloadState.FAILED, error=error)

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    def _run(self, request: DownloadRequest) -> DownloadResult:
        started_at = time.monotonic()
        try:
            if self._cancelled.is_set():
                raise DownloadCancelledError(request)

            self._set_state(request, DownloadState.IN_FLIGHT)
            self.logger.log(f"Downloading {request.source_uri}", logging.DEBUG)
            self._transfer(request)
        except Exception as e:
            self._discard_partial(request)
            return self._fail(request, e)

        duration = time.monotonic() - started_at
        self.logger.log(
            f"Downloaded {request.source_uri} to {request.destination_path} in {duration:.2f}s",
            logging.INFO,
        )
        self._set_state(request, DownloadState.SUCCEEDED)
        self._notify_success(request, duration)
        return DownloadResult(request, DownloadState.SUCCEEDED, duration=duration)

    def _transfer(self, request: DownloadRequest) -> None:
        request.destination_path.parent.mkdir(parents=True, exist_ok=True)
        partial_path = request.partial_path

        try:
            with self._session.get(
                request.source_uri,
                stream=True,
                timeout=request.timeout,
                allow_redirects=True,
            ) as response:
                if response.status_code != self.HTTP_OK_STATUS_CODE:
                    raise DownloadStatusError(response.status_code, request)

                total_bytes = self._total_bytes(response)
                bytes_read = 0

                with open(partial_path, "wb") as out:
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        if self._cancelled.is_set():
                            raise DownloadCancelledError(request)
                        if not chunk:
                            continue
                        out.write(chunk)
                        bytes_read += len(chunk)
                        self._notify_progress(request, bytes_read, total_bytes)
        except requests.RequestException as e:
            raise DownloadError(f"Failed to download {request.source_uri}: {e}", request) from e

        os.replace(partial_path, request.destination_path)

    def _total_bytes(self, response: requests.Response) -> int:
        value = response.headers.get(self.CONTENT_LENGTH_HEADER)
        if value is None:
            return -1
        try:
            return int(value)
        except (TypeError, ValueError):
            return -1

    @staticmethod
    def _discard_partial(request: DownloadRequest) -> None:
        try:
            request.partial_path.unlink()
        except FileNotFoundError:
            pass

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def _notify_progress(self, request: DownloadRequest, bytes_read: int, total_bytes: int) -> None:
        listener = self.progress_listener
        if listener is None:
            return
        try:
            listener.on_progress(request, bytes_read, total_bytes)
        except Exception as e:
            self.logger.log(f"Progress listener failed for {request.source_uri}: {e}", logging.WARNING)

    def _notify_success(self, request: DownloadRequest, duration: float) -> None:
        listener = self.completion_listener
        if listener is None:
            return
        try:
            listener.on_success(request, duration)
        except Exception as e:
            self.logger.log(f"Completion listener failed for {request.source_uri}: {e}", logging.WARNING)

    def _notify_failure(self, request: DownloadRequest, error: BaseException) -> None:
        listener = self.completion_listener
        if listener is None:
            return
        try:
            listener.on_failure(request, error)
        except Exception as e:
            self.logger.log(f"Completion listener failed for {request.source_uri}: {e}", logging.WARNING)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise DownloaderClosedError("Downloader is closed")

    def close(self) -> None:
        """
        Wait for the running batch, then cancel stragglers and release the session.

        Each phase waits at most ``termination_timeout`` seconds. A batch that
        settles within the grace period completes normally and reports every
        request.

        Raises:
            DownloaderTerminationError: If the batch is still running after cancellation
        """
        if self._closed:
            return
        self._closed = True

        try:
            if not self._batch_lock.acquire(timeout=self.termination_timeout):
                self.logger.log(
                    f"Download batch still running after {self.termination_timeout:g}s, cancelling",
                    logging.WARNING,
                )
                self.cancel()
                if not self._batch_lock.acquire(timeout=self.termination_timeout):
                    raise DownloaderTerminationError(
                        "Download workers failed to terminate even after cancellation"
                    )
            self._batch_lock.release()
        finally:
            self._executor.shutdown(wait=False)
            self._session.close()
            with self._queue_lock:
                self._queue.clear()
                self._states.clear()
