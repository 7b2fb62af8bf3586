"""
Download requests and their per-attempt outcomes.
"""

import dataclasses
import os
import pathlib
from enum import Enum
from typing import Optional, Union
from urllib.parse import urlparse

from launchkit.launchkit_exceptions import ConfigurationError

DEFAULT_TIMEOUT_SECONDS = 5 * 60.0
DEFAULT_RETRIES = 1


@dataclasses.dataclass(frozen=True)
class DownloadRequest:
    """
    A single file to fetch: where from, where to, how long to wait and how many attempts to allow.

    ``retries`` is the total number of attempts a caller may make, including the first.
    The downloader itself only ever makes one attempt per batch.
    """

    source_uri: str
    destination_path: pathlib.Path
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    retries: int = DEFAULT_RETRIES

    def __post_init__(self) -> None:
        if not self.source_uri or not str(self.source_uri).strip():
            raise ConfigurationError("Source URI (source_uri) must not be empty")
        if self.destination_path is None or not str(self.destination_path).strip():
            raise ConfigurationError("Destination path (destination_path) must not be empty")
        if self.timeout is None or self.timeout <= 0:
            raise ConfigurationError("Timeout must be greater than zero")
        if self.retries is None or self.retries < 1:
            raise ConfigurationError("Retries must be greater than zero")
        object.__setattr__(self, "source_uri", str(self.source_uri).strip())
        object.__setattr__(self, "destination_path", pathlib.Path(self.destination_path))

    @classmethod
    def create(
        cls,
        source_uri: str,
        destination_path: Union[str, "os.PathLike[str]"],
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        retries: int = DEFAULT_RETRIES,
    ) -> "DownloadRequest":
        return cls(source_uri, pathlib.Path(destination_path), timeout, retries)

    @property
    def scheme(self) -> str:
        return urlparse(self.source_uri).scheme.lower()

    @property
    def partial_path(self) -> pathlib.Path:
        """Where bytes are written until the download completes."""
        return self.destination_path.with_name(self.destination_path.name + ".part")


class DownloadState(str, Enum):
    """Lifecycle of a request within one batch."""

    QUEUED = "queued"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclasses.dataclass(frozen=True)
class DownloadResult:
    """
    Terminal outcome of one download attempt.
    """

    request: DownloadRequest
    state: DownloadState
    duration: Optional[float] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.state == DownloadState.SUCCEEDED

    def __repr__(self) -> str:
        return (
            f"DownloadResult(uri={self.request.source_uri}, "
            f"state={self.state.value}, error={self.error!r})"
        )
