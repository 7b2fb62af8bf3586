"""
Tests for DownloadRequest and HttpFileDownloader.
"""

import concurrent.futures
import threading
import time
from unittest import mock

import pytest
import requests

from launchkit.downloader import DownloadRequest, DownloadState, HttpFileDownloader
from launchkit.launchkit_exceptions import (
    ConfigurationError,
    DownloadCancelledError,
    DownloaderClosedError,
    DownloaderTerminationError,
    DownloadError,
    DownloadStatusError,
    UnsupportedDownloadRequestError,
)
from tests.launchkit.fakes import BackgroundCall, FakeResponse, FakeSession, RecordingListener, wait_until

BASE_URL = "https://files.example.org"


class TestDownloadRequest:
    """Tests for DownloadRequest."""

    def test_defaults(self, tmp_path):
        request = DownloadRequest.create(f"{BASE_URL}/a.jar", tmp_path / "a.jar")

        assert request.timeout == 300.0
        assert request.retries == 1
        assert request.scheme == "https"
        assert request.partial_path == tmp_path / "a.jar.part"

    def test_destination_is_a_path(self, tmp_path):
        request = DownloadRequest.create(f"{BASE_URL}/a.jar", str(tmp_path / "a.jar"))

        assert request.destination_path == tmp_path / "a.jar"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"source_uri": " "},
            {"timeout": 0},
            {"timeout": -1.0},
            {"retries": 0},
        ],
    )
    def test_invalid_values(self, tmp_path, kwargs):
        values = {"source_uri": f"{BASE_URL}/a.jar", "destination_path": tmp_path / "a.jar"}
        values.update(kwargs)
        with pytest.raises(ConfigurationError):
            DownloadRequest(**values)

    def test_equal_requests_hash_alike(self, tmp_path):
        first = DownloadRequest.create(f"{BASE_URL}/a.jar", tmp_path / "a.jar")
        second = DownloadRequest.create(f"{BASE_URL}/a.jar", tmp_path / "a.jar")

        assert first == second
        assert len({first, second}) == 1


class TestHttpFileDownloader:
    """Tests for HttpFileDownloader."""

    @pytest.fixture
    def bodies(self):
        return {f"{BASE_URL}/{name}": name.encode() * 5000 for name in ("a.jar", "b.jar", "c.jar")}

    @pytest.fixture
    def session(self, bodies):
        return FakeSession({url: FakeResponse(body) for url, body in bodies.items()}, delay=0.05)

    @pytest.fixture
    def listener(self):
        return RecordingListener()

    @pytest.fixture
    def downloader(self, session, logger, listener):
        downloader = HttpFileDownloader(
            pool_size=2,
            session=session,
            logger=logger,
            progress_listener=listener,
            completion_listener=listener,
            termination_timeout=5.0,
        )
        yield downloader
        downloader.close()

    def request_for(self, tmp_path, name, **kwargs):
        return DownloadRequest.create(f"{BASE_URL}/{name}", tmp_path / "out" / name, **kwargs)

    def test_download_batch(self, downloader, session, listener, bodies, tmp_path):
        batch = [self.request_for(tmp_path, name) for name in ("a.jar", "b.jar", "c.jar")]
        downloader.enqueue_all(batch)

        results = downloader.download()

        assert [result.request for result in results] == batch
        assert all(result.state == DownloadState.SUCCEEDED for result in results)
        assert all(result.duration is not None for result in results)
        for request in batch:
            assert request.destination_path.read_bytes() == bodies[request.source_uri]
            assert not request.partial_path.exists()
        assert sorted(r.source_uri for r in listener.successes) == sorted(bodies)
        assert listener.failures == []
        assert session.max_in_flight <= 2
        assert downloader.queued() == []

    def test_progress_is_cumulative(self, downloader, listener, tmp_path):
        downloader.enqueue(self.request_for(tmp_path, "a.jar"))
        downloader.download()

        counts = [bytes_read for _, bytes_read, _ in listener.progress]
        assert counts == sorted(counts)
        assert counts[-1] == len(b"a.jar") * 5000
        assert all(total == len(b"a.jar") * 5000 for _, _, total in listener.progress)

    def test_unknown_length(self, logger, listener, tmp_path):
        session = FakeSession({f"{BASE_URL}/a.jar": FakeResponse(b"abc", headers={})})
        with HttpFileDownloader(session=session, logger=logger, progress_listener=listener) as downloader:
            downloader.enqueue(self.request_for(tmp_path, "a.jar"))
            downloader.download()

        assert listener.progress[-1][1:] == (3, -1)

    def test_empty_queue(self, downloader):
        assert downloader.download() == []

    def test_is_busy_only_during_batch(self, logger, tmp_path):
        gate = threading.Event()
        session = FakeSession({f"{BASE_URL}/a.jar": FakeResponse(b"abc", gate=gate)})
        downloader = HttpFileDownloader(session=session, logger=logger)
        downloader.enqueue(self.request_for(tmp_path, "a.jar"))
        assert not downloader.is_busy()

        worker = threading.Thread(target=downloader.download)
        worker.start()
        try:
            deadline = time.monotonic() + 5
            while not downloader.is_busy() and time.monotonic() < deadline:
                time.sleep(0.01)
            assert downloader.is_busy()
        finally:
            gate.set()
            worker.join(timeout=10)

        assert not downloader.is_busy()
        downloader.close()

    def test_unsupported_scheme(self, downloader, tmp_path):
        with pytest.raises(UnsupportedDownloadRequestError):
            downloader.enqueue(DownloadRequest.create("ftp://files.example.org/a.jar", tmp_path / "a.jar"))

        assert downloader.queued() == []

    def test_enqueue_all_is_all_or_nothing(self, downloader, tmp_path):
        batch = [
            self.request_for(tmp_path, "a.jar"),
            DownloadRequest.create("file:///tmp/b.jar", tmp_path / "b.jar"),
        ]

        with pytest.raises(UnsupportedDownloadRequestError):
            downloader.enqueue_all(batch)

        assert downloader.queued() == []

    def test_enqueue_all_skips_none(self, downloader, tmp_path):
        request = self.request_for(tmp_path, "a.jar")
        downloader.enqueue_all([None, request, None])

        assert downloader.queued() == [request]
        assert downloader.state_of(request) == DownloadState.QUEUED
        assert downloader.state_of(self.request_for(tmp_path, "b.jar")) is None

    def test_can_handle(self, downloader, tmp_path):
        assert downloader.can_handle(DownloadRequest.create("http://example.org/a", tmp_path / "a"))
        assert downloader.can_handle(DownloadRequest.create("HTTPS://example.org/a", tmp_path / "a"))
        assert not downloader.can_handle(DownloadRequest.create("s3://bucket/a", tmp_path / "a"))

    def test_non_ok_status(self, logger, listener, tmp_path):
        session = FakeSession({f"{BASE_URL}/a.jar": FakeResponse(b"moved", status_code=206)})
        with HttpFileDownloader(session=session, logger=logger, completion_listener=listener) as downloader:
            request = self.request_for(tmp_path, "a.jar")
            downloader.enqueue(request)
            (result,) = downloader.download()

        assert result.state == DownloadState.FAILED
        assert isinstance(result.error, DownloadStatusError)
        assert result.error.status_code == 206
        assert not request.destination_path.exists()
        assert listener.failures == [(request, result.error)]
        assert listener.successes == []

    def test_transport_error(self, logger, tmp_path):
        session = FakeSession({f"{BASE_URL}/a.jar": requests.ConnectionError("connection refused")})
        with HttpFileDownloader(session=session, logger=logger) as downloader:
            downloader.enqueue(self.request_for(tmp_path, "a.jar"))
            (result,) = downloader.download()

        assert isinstance(result.error, DownloadError)
        assert "connection refused" in str(result.error)

    def test_partial_file_removed_on_failure(self, logger, tmp_path):
        response = FakeResponse(b"x" * 20000, fail_after_first_chunk=requests.ConnectionError("reset"))
        session = FakeSession({f"{BASE_URL}/a.jar": response})
        request = self.request_for(tmp_path, "a.jar")
        with HttpFileDownloader(session=session, logger=logger) as downloader:
            downloader.enqueue(request)
            (result,) = downloader.download()

        assert not result.succeeded
        assert not request.partial_path.exists()
        assert not request.destination_path.exists()

    def test_failures_do_not_affect_other_requests(self, downloader, session, tmp_path):
        batch = [self.request_for(tmp_path, "a.jar"), self.request_for(tmp_path, "missing.jar")]
        downloader.enqueue_all(batch)

        results = downloader.download()

        assert [r.succeeded for r in results] == [True, False]
        assert downloader.state_of(batch[0]) == DownloadState.SUCCEEDED
        assert downloader.state_of(batch[1]) == DownloadState.FAILED
        assert isinstance(results[1].error, DownloadStatusError)
        assert results[1].error.status_code == 404

    def test_failing_progress_listener_is_ignored(self, session, logger, tmp_path):
        class ExplodingListener:
            def on_progress(self, request, bytes_read, total_bytes):
                raise RuntimeError("boom")

        with HttpFileDownloader(session=session, logger=logger, progress_listener=ExplodingListener()) as downloader:
            downloader.enqueue(self.request_for(tmp_path, "a.jar"))
            (result,) = downloader.download()

        assert result.succeeded

    def test_cancel_stops_in_flight_download(self, session, logger, tmp_path):
        downloader = HttpFileDownloader(session=session, logger=logger, chunk_size=1024)

        class CancellingListener:
            def on_progress(self, request, bytes_read, total_bytes):
                downloader.cancel()

        downloader.set_progress_listener(CancellingListener())
        request = self.request_for(tmp_path, "a.jar")
        downloader.enqueue(request)

        (result,) = downloader.download()
        downloader.close()

        assert isinstance(result.error, DownloadCancelledError)
        assert not request.partial_path.exists()
        assert not request.destination_path.exists()

    def test_cancellation_does_not_carry_over(self, downloader, tmp_path):
        downloader.cancel()
        downloader.enqueue(self.request_for(tmp_path, "a.jar"))

        (result,) = downloader.download()

        assert result.succeeded

    def test_close(self, session, logger, tmp_path):
        downloader = HttpFileDownloader(session=session, logger=logger)
        downloader.enqueue(self.request_for(tmp_path, "a.jar"))

        downloader.close()
        downloader.close()

        assert session.closed
        assert downloader.queued() == []
        with pytest.raises(DownloaderClosedError):
            downloader.enqueue(self.request_for(tmp_path, "b.jar"))
        with pytest.raises(DownloaderClosedError):
            downloader.download()

    def test_enqueue_during_batch_waits_for_next_call(self, logger, listener, tmp_path):
        gate = threading.Event()
        session = FakeSession(
            {
                f"{BASE_URL}/a.jar": FakeResponse(b"abc", gate=gate),
                f"{BASE_URL}/b.jar": FakeResponse(b"def"),
            }
        )
        first = self.request_for(tmp_path, "a.jar")
        second = self.request_for(tmp_path, "b.jar")

        with HttpFileDownloader(session=session, logger=logger, completion_listener=listener) as downloader:
            downloader.enqueue(first)
            running = BackgroundCall(downloader.download)
            wait_until(lambda: downloader.state_of(first) == DownloadState.IN_FLIGHT)

            downloader.enqueue(second)
            assert downloader.state_of(second) == DownloadState.QUEUED
            gate.set()
            running.join()

            assert running.error is None
            assert [result.request for result in running.result] == [first]
            assert downloader.queued() == [second]

            (result,) = downloader.download()

        assert result.request == second
        assert result.succeeded
        assert session.calls == [first.source_uri, second.source_uri]
        assert listener.successes == [first, second]

    def test_close_waits_for_running_batch(self, logger, listener, tmp_path):
        gate = threading.Event()
        names = ("a.jar", "b.jar", "c.jar")
        session = FakeSession({f"{BASE_URL}/{name}": FakeResponse(name.encode(), gate=gate) for name in names})
        downloader = HttpFileDownloader(
            pool_size=2,
            session=session,
            logger=logger,
            completion_listener=listener,
            termination_timeout=5.0,
        )
        batch = [self.request_for(tmp_path, name) for name in names]
        downloader.enqueue_all(batch)

        running = BackgroundCall(downloader.download)
        wait_until(downloader.is_busy)
        closing = BackgroundCall(downloader.close)
        time.sleep(0.1)
        assert closing.is_alive()

        gate.set()
        running.join()
        closing.join()

        assert running.error is None
        assert closing.error is None
        assert all(result.succeeded for result in running.result)
        assert len(listener.successes) == 3
        assert set(listener.successes) == set(batch)
        assert listener.failures == []
        assert session.closed

    def test_rejected_submissions_are_reported_as_failures(self, downloader, session, listener, tmp_path):
        batch = [self.request_for(tmp_path, "a.jar"), self.request_for(tmp_path, "b.jar")]
        downloader.enqueue_all(batch)
        downloader._executor.shutdown()

        results = downloader.download()

        assert [result.state for result in results] == [DownloadState.FAILED, DownloadState.FAILED]
        assert all(isinstance(result.error, DownloaderClosedError) for result in results)
        assert [request for request, _ in listener.failures] == batch
        assert listener.successes == []
        assert session.calls == []

    def test_close_cancels_stragglers(self, logger, listener, tmp_path):
        session = FakeSession({f"{BASE_URL}/a.jar": FakeResponse(b"x" * 10000, chunk_delay=0.01)})
        downloader = HttpFileDownloader(
            session=session,
            logger=logger,
            completion_listener=listener,
            chunk_size=1,
            termination_timeout=0.2,
        )
        request = self.request_for(tmp_path, "a.jar")
        downloader.enqueue(request)

        running = BackgroundCall(downloader.download)
        wait_until(lambda: downloader.state_of(request) == DownloadState.IN_FLIGHT)
        downloader.close()
        running.join()

        (result,) = running.result
        assert isinstance(result.error, DownloadCancelledError)
        assert listener.failures == [(request, result.error)]
        assert listener.successes == []
        assert not request.partial_path.exists()
        assert not request.destination_path.exists()
        assert session.closed

    def test_close_raises_when_workers_never_finish(self, logger, listener, tmp_path):
        gate = threading.Event()
        session = FakeSession({f"{BASE_URL}/a.jar": FakeResponse(b"abc", gate=gate)})
        downloader = HttpFileDownloader(
            session=session,
            logger=logger,
            completion_listener=listener,
            termination_timeout=0.1,
        )
        request = self.request_for(tmp_path, "a.jar")
        downloader.enqueue(request)

        running = BackgroundCall(downloader.download)
        wait_until(lambda: downloader.state_of(request) == DownloadState.IN_FLIGHT)
        try:
            with pytest.raises(DownloaderTerminationError):
                downloader.close()
            assert session.closed
        finally:
            gate.set()
            running.join()

        (result,) = running.result
        assert isinstance(result.error, DownloadCancelledError)
        assert listener.failures == [(request, result.error)]

    def test_interrupt_cancels_batch_and_propagates(self, logger, listener, tmp_path):
        session = FakeSession(
            {
                f"{BASE_URL}/{name}": FakeResponse(b"x" * 10000, chunk_delay=0.01)
                for name in ("a.jar", "b.jar")
            }
        )
        downloader = HttpFileDownloader(
            pool_size=2,
            session=session,
            logger=logger,
            completion_listener=listener,
            chunk_size=1,
        )
        batch = [self.request_for(tmp_path, "a.jar"), self.request_for(tmp_path, "b.jar")]
        downloader.enqueue_all(batch)

        real_wait = concurrent.futures.wait
        interrupted = []

        def interrupt_first_wait(*args, **kwargs):
            if not interrupted:
                interrupted.append(True)
                raise KeyboardInterrupt
            return real_wait(*args, **kwargs)

        with mock.patch("concurrent.futures.wait", side_effect=interrupt_first_wait):
            with pytest.raises(KeyboardInterrupt):
                downloader.download()

        assert not downloader.is_busy()
        assert {request for request, _ in listener.failures} == set(batch)
        assert all(isinstance(error, DownloadCancelledError) for _, error in listener.failures)
        assert listener.successes == []
        for request in batch:
            assert not request.partial_path.exists()
            assert not request.destination_path.exists()
        downloader.close()

    def test_invalid_pool_size(self):
        with pytest.raises(ConfigurationError):
            HttpFileDownloader(pool_size=0, session=FakeSession())
