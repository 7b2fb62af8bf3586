"""
Integrity verification for downloaded resources.

This package handles:
1. Non-cryptographic checksums (CRC32, CRC32C, Adler32)
2. Cryptographic hashes (MD5, SHA-1, SHA-256, SHA-512)
3. Verifying files against the values a resource declares
"""

from .checksum import ChecksumAlgorithm, ChecksumCalculator, create_calculator
from .hashing import Hash, HashAlgorithm, HashCalculator
from .verifier import IntegrityMismatch, IntegrityReport, IntegrityVerifier

__all__ = [
    "ChecksumAlgorithm",
    "ChecksumCalculator",
    "create_calculator",
    "Hash",
    "HashAlgorithm",
    "HashCalculator",
    "IntegrityMismatch",
    "IntegrityReport",
    "IntegrityVerifier",
]
