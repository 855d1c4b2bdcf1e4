"""
Hashing service for content fingerprints.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import Enum, auto
from typing import BinaryIO, Optional

import xxhash


class HashAlgorithm(Enum):
    """Supported hash algorithms."""
    MD5 = auto()
    SHA1 = auto()
    SHA256 = auto()
    XXH64 = auto()  # Fast non-cryptographic hash


@dataclass
class HashResult:
    """Result of a hash operation."""
    algorithm: HashAlgorithm
    hash_hex: str
    hash_bytes: bytes
    size: int

    def matches(self, other: 'HashResult') -> bool:
        """Check if this hash matches another."""
        return (self.algorithm == other.algorithm and
                self.hash_hex == other.hash_hex)


class HashingService:
    """Service for computing content hashes."""

    def __init__(
        self,
        default_algorithm: HashAlgorithm = HashAlgorithm.XXH64,
        chunk_size: int = 65536
    ):
        self.default_algorithm = default_algorithm
        self.chunk_size = chunk_size

    def hash_stream(
        self,
        stream: BinaryIO,
        algorithm: Optional[HashAlgorithm] = None
    ) -> HashResult:
        """
        Hash a binary stream until exhausted.

        The stream is read in ``chunk_size`` blocks and is not closed.
        """
        algorithm = algorithm or self.default_algorithm
        hasher = self._create_hasher(algorithm)
        size = 0

        while chunk := stream.read(self.chunk_size):
            hasher.update(chunk)
            size += len(chunk)

        return HashResult(
            algorithm=algorithm,
            hash_hex=hasher.hexdigest(),
            hash_bytes=hasher.digest(),
            size=size
        )

    def compare_streams(
        self,
        first: BinaryIO,
        second: BinaryIO,
        algorithm: Optional[HashAlgorithm] = None
    ) -> bool:
        """Compare two streams by their hash values."""
        return self.hash_stream(first, algorithm).matches(
            self.hash_stream(second, algorithm)
        )

    def _create_hasher(self, algorithm: HashAlgorithm):
        """Create a hasher for the given algorithm."""
        if algorithm == HashAlgorithm.MD5:
            return hashlib.md5()
        elif algorithm == HashAlgorithm.SHA1:
            return hashlib.sha1()
        elif algorithm == HashAlgorithm.SHA256:
            return hashlib.sha256()
        elif algorithm == HashAlgorithm.XXH64:
            return xxhash.xxh64()
        else:
            raise ValueError(f"Unknown algorithm: {algorithm}")
