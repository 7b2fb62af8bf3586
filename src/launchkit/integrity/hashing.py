"""
Cryptographic hashes (MD5, SHA-1, SHA-256, SHA-512) computed over bytes, streams or files.
"""

import hashlib
import os
from enum import Enum
from typing import BinaryIO, Optional, Union

from launchkit.integrity.checksum import BUFFER_SIZE, dispatch_source
from launchkit.launchkit_exceptions import UnsupportedAlgorithmError


class HashAlgorithm(str, Enum):
    """Hash algorithms understood by launchkit. Values are the external names."""

    MD5 = "md5"
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"

    @property
    def hashlib_name(self) -> str:
        return self.value

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = value.strip().lower().replace("-", "")
            for algorithm in cls:
                if algorithm.value == normalized:
                    return algorithm
        return None

    @classmethod
    def find_by_name(cls, name: str) -> Optional["HashAlgorithm"]:
        if name is None:
            raise TypeError("Hash algorithm name must not be None")
        if not name.strip():
            return None
        try:
            return cls(name)
        except ValueError:
            return None

    @classmethod
    def get_by_name(cls, name: str) -> "HashAlgorithm":
        algorithm = cls.find_by_name(name)
        if algorithm is None:
            raise UnsupportedAlgorithmError("hash", name)
        return algorithm


class Hash:
    """
    An immutable digest tagged with the algorithm that produced it.
    """

    __slots__ = ("_algorithm", "_digest")

    def __init__(self, algorithm: HashAlgorithm, digest: bytes):
        if algorithm is None:
            raise TypeError("Hash algorithm must not be None")
        if not digest:
            raise ValueError("Hash bytes must not be empty")
        self._algorithm = HashAlgorithm(algorithm)
        self._digest = bytes(digest)

    @property
    def algorithm(self) -> HashAlgorithm:
        return self._algorithm

    @property
    def digest(self) -> bytes:
        return self._digest

    def hex(self) -> str:
        return self._digest.hex()

    def matches(self, expected_hex: str) -> bool:
        return self.hex() == expected_hex.strip().lower()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Hash):
            return NotImplemented
        return self._algorithm == other._algorithm and self._digest == other._digest

    def __hash__(self) -> int:
        return hash((self._algorithm, self._digest))

    def __repr__(self) -> str:
        return f"Hash(algorithm={self._algorithm.value!r}, hex={self.hex()!r})"


class HashCalculator:
    """
    Calculates a cryptographic hash of bytes, a binary stream or a file.
    """

    def __init__(self, algorithm: HashAlgorithm, buffer_size: int = BUFFER_SIZE):
        if algorithm is None:
            raise TypeError("Hash algorithm must not be None")
        self.algorithm = HashAlgorithm(algorithm)
        self.buffer_size = buffer_size

    def _new_digest(self):
        return hashlib.new(self.algorithm.hashlib_name)

    def calculate_bytes(self, data: bytes) -> Hash:
        digest = self._new_digest()
        digest.update(data)
        return Hash(self.algorithm, digest.digest())

    def calculate_text(self, text: str) -> Hash:
        return self.calculate_bytes(text.encode("utf-8"))

    def calculate_stream(self, stream: BinaryIO) -> Hash:
        digest = self._new_digest()
        while True:
            chunk = stream.read(self.buffer_size)
            if not chunk:
                break
            digest.update(chunk)
        return Hash(self.algorithm, digest.digest())

    def calculate_file(self, path: Union[str, "os.PathLike[str]"]) -> Hash:
        with open(path, "rb") as f:
            return self.calculate_stream(f)

    def calculate(self, source) -> Hash:
        """
        Calculate the hash of bytes, a binary stream, or a file path.
        """
        return dispatch_source(source, self.calculate_bytes, self.calculate_stream, self.calculate_file)
