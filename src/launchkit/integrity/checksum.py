"""
Non-cryptographic checksums (CRC32, CRC32C, Adler32) computed over bytes, streams or files.
"""

import os
import zlib
from enum import Enum
from typing import BinaryIO, Callable, Optional, Union

import google_crc32c

from launchkit.launchkit_exceptions import UnsupportedAlgorithmError

BUFFER_SIZE = 8 * 1024

Checksummable = Union[bytes, bytearray, memoryview, BinaryIO, str, "os.PathLike[str]"]


class ChecksumAlgorithm(str, Enum):
    """Checksum algorithms understood by launchkit. Values are the external names."""

    CRC32 = "crc32"
    CRC32C = "crc32c"
    ADLER32 = "adler32"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = value.strip().lower()
            for algorithm in cls:
                if algorithm.value == normalized:
                    return algorithm
        return None

    @classmethod
    def find_by_name(cls, name: str) -> Optional["ChecksumAlgorithm"]:
        """
        Look up an algorithm case-insensitively. Returns None for blank or unknown names.
        """
        if name is None:
            raise TypeError("Checksum algorithm name must not be None")
        if not name.strip():
            return None
        try:
            return cls(name)
        except ValueError:
            return None

    @classmethod
    def get_by_name(cls, name: str) -> "ChecksumAlgorithm":
        algorithm = cls.find_by_name(name)
        if algorithm is None:
            raise UnsupportedAlgorithmError("checksum", name)
        return algorithm


# Each entry is (initial value, update function). zlib and google_crc32c both
# take the running value and return the updated one.
_CHECKSUM_FUNCTIONS = {
    ChecksumAlgorithm.CRC32: (0, lambda data, value: zlib.crc32(data, value)),
    ChecksumAlgorithm.CRC32C: (0, lambda data, value: google_crc32c.extend(value, data)),
    ChecksumAlgorithm.ADLER32: (1, lambda data, value: zlib.adler32(data, value)),
}


class ChecksumCalculator:
    """
    Calculates a checksum with reset-then-update-then-finalize semantics.

    Instances keep running state while calculating, so a single calculator
    must not be shared between threads.
    """

    def __init__(self, algorithm: ChecksumAlgorithm, buffer_size: int = BUFFER_SIZE):
        if algorithm is None:
            raise TypeError("Checksum algorithm must not be None")
        self.algorithm = ChecksumAlgorithm(algorithm)
        self.buffer_size = buffer_size
        self._initial, self._update_fn = _CHECKSUM_FUNCTIONS[self.algorithm]
        self._value = self._initial

    def reset(self) -> None:
        self._value = self._initial

    def update(self, data: bytes) -> None:
        self._value = self._update_fn(bytes(data), self._value)

    def value(self) -> int:
        return self._value & 0xFFFFFFFF

    def calculate_bytes(self, data: bytes) -> int:
        self.reset()
        self.update(data)
        return self.value()

    def calculate_stream(self, stream: BinaryIO) -> int:
        self.reset()
        while True:
            chunk = stream.read(self.buffer_size)
            if not chunk:
                break
            self.update(chunk)
        return self.value()

    def calculate_file(self, path: Union[str, "os.PathLike[str]"]) -> int:
        with open(path, "rb") as f:
            return self.calculate_stream(f)

    def calculate(self, source: Checksummable) -> int:
        """
        Calculate the checksum of bytes, a binary stream, or a file path.

        All three forms give the same result for the same content.
        """
        return dispatch_source(source, self.calculate_bytes, self.calculate_stream, self.calculate_file)


def create_calculator(algorithm: Union[ChecksumAlgorithm, str]) -> ChecksumCalculator:
    if isinstance(algorithm, str) and not isinstance(algorithm, ChecksumAlgorithm):
        algorithm = ChecksumAlgorithm.get_by_name(algorithm)
    return ChecksumCalculator(algorithm)


def dispatch_source(
    source,
    on_bytes: Callable,
    on_stream: Callable,
    on_file: Callable,
):
    if isinstance(source, (bytes, bytearray, memoryview)):
        return on_bytes(bytes(source))
    if isinstance(source, (str, os.PathLike)):
        return on_file(source)
    if hasattr(source, "read"):
        return on_stream(source)
    raise TypeError(f"Unsupported source type: {type(source).__name__}")
