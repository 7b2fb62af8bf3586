"""
Integrity verification of downloaded files against the checksums and hashes declared by a resource.
"""

import dataclasses
import logging
import os
from typing import List, Mapping, Optional, Union

from launchkit.integrity.checksum import ChecksumAlgorithm, ChecksumCalculator
from launchkit.integrity.hashing import HashAlgorithm, HashCalculator
from launchkit.launchkit_exceptions import IntegrityError
from launchkit.launchkit_logger import LaunchkitLogger


@dataclasses.dataclass(frozen=True)
class IntegrityMismatch:
    """
    A single declared value that did not match the computed one.
    """

    algorithm: str
    expected: str
    actual: str

    def __str__(self) -> str:
        return f"{self.algorithm} expected {self.expected}, got {self.actual}"


@dataclasses.dataclass(frozen=True)
class IntegrityReport:
    """
    Outcome of verifying one file.

    ``verified`` is False when the resource declares no checksums or hashes; such a
    file is accepted without any integrity claim.
    """

    path: str
    checked: int
    mismatches: List[IntegrityMismatch] = dataclasses.field(default_factory=list)

    @property
    def verified(self) -> bool:
        return self.checked > 0

    @property
    def accepted(self) -> bool:
        return not self.mismatches


class IntegrityVerifier:
    """
    Verifies files against every checksum and hash a resource declares.

    Algorithms a resource does not declare are not checked.
    """

    def __init__(self, logger: Optional[LaunchkitLogger] = None):
        self.logger = logger or LaunchkitLogger()

    def verify(self, resource, path: Union[str, "os.PathLike[str]"]) -> IntegrityReport:
        """
        Verify a file against the resource's declared checksums and hashes.

        Args:
            resource: Any object exposing ``checksums`` and ``hashes`` mappings
            path: The local file to verify

        Returns:
            IntegrityReport listing every mismatch
        """
        checksums: Mapping[ChecksumAlgorithm, int] = getattr(resource, "checksums", None) or {}
        hashes: Mapping[HashAlgorithm, str] = getattr(resource, "hashes", None) or {}

        mismatches = []
        for algorithm, expected in checksums.items():
            actual = ChecksumCalculator(algorithm).calculate_file(path)
            if actual != expected:
                mismatches.append(
                    IntegrityMismatch(
                        algorithm=ChecksumAlgorithm(algorithm).value,
                        expected=format(expected, "x"),
                        actual=format(actual, "x"),
                    )
                )

        for algorithm, expected_hex in hashes.items():
            actual_hash = HashCalculator(algorithm).calculate_file(path)
            if not actual_hash.matches(expected_hex):
                mismatches.append(
                    IntegrityMismatch(
                        algorithm=HashAlgorithm(algorithm).value,
                        expected=expected_hex.lower(),
                        actual=actual_hash.hex(),
                    )
                )

        report = IntegrityReport(
            path=os.fspath(path),
            checked=len(checksums) + len(hashes),
            mismatches=mismatches,
        )

        if not report.verified:
            self.logger.log(
                f"No checksums or hashes declared for {report.path}, accepting without verification",
                logging.DEBUG,
            )
        elif report.accepted:
            self.logger.log(
                f"Verified {report.path} against {report.checked} declared values",
                logging.DEBUG,
            )
        else:
            self.logger.log(
                f"Integrity mismatch for {report.path}: "
                + ", ".join(str(m) for m in mismatches),
                logging.WARNING,
            )

        return report

    def is_valid(self, resource, path: Union[str, "os.PathLike[str]"]) -> bool:
        return self.verify(resource, path).accepted

    def ensure_valid(self, resource, path: Union[str, "os.PathLike[str]"]) -> IntegrityReport:
        """
        Verify a file and raise if any declared value does not match.

        Raises:
            IntegrityError: If the file does not match the resource
        """
        report = self.verify(resource, path)
        if not report.accepted:
            raise IntegrityError(resource, report.path, report.mismatches)
        return report
