"""
Capabilities a resource may expose, as structural protocols.

A resource is Downloadable, Conditional or Checkable when it carries the
corresponding attributes; no common base class is required.
"""

from typing import Mapping, Protocol, runtime_checkable

from launchkit.integrity.checksum import ChecksumAlgorithm
from launchkit.integrity.hashing import HashAlgorithm


@runtime_checkable
class Downloadable(Protocol):
    """Exposes the location bytes can be fetched from."""

    @property
    def source_uri(self) -> str: ...


@runtime_checkable
class Conditional(Protocol):
    """Exposes condition-key to expected-value requirements. Empty means no restriction."""

    @property
    def conditions(self) -> Mapping[str, str]: ...


@runtime_checkable
class Checkable(Protocol):
    """Exposes expected checksums and hashes. Empty mappings mean nothing is checked."""

    @property
    def checksums(self) -> Mapping[ChecksumAlgorithm, int]: ...

    @property
    def hashes(self) -> Mapping[HashAlgorithm, str]: ...
