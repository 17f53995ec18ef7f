"""
Content hashing for snapshot comparison.

Two snapshot copies of a file with equal size are classified as
changed or unchanged by a full-content digest.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Optional

import xxhash


class HashAlgorithm(Enum):
    """Supported hash algorithms."""
    MD5 = auto()
    SHA1 = auto()
    SHA256 = auto()
    SHA512 = auto()
    XXH64 = auto()  # Fast non-cryptographic hash

    @classmethod
    def from_string(cls, value: str) -> 'HashAlgorithm':
        """Create from a case-insensitive name such as 'sha256'."""
        try:
            return cls[value.upper()]
        except KeyError:
            raise ValueError(f"Unknown algorithm: {value}") from None


HASHER_FACTORIES = {
    HashAlgorithm.MD5: hashlib.md5,
    HashAlgorithm.SHA1: hashlib.sha1,
    HashAlgorithm.SHA256: hashlib.sha256,
    HashAlgorithm.SHA512: hashlib.sha512,
    HashAlgorithm.XXH64: xxhash.xxh64,
}


@dataclass(frozen=True)
class ContentDigest:
    """Digest of one snapshot file."""
    algorithm: HashAlgorithm
    hex_digest: str

    def matches(self, other: 'ContentDigest') -> bool:
        """Digests only match when taken with the same algorithm."""
        return self.algorithm == other.algorithm and self.hex_digest == other.hex_digest


class HashingService:
    """Streams snapshot files through a hasher in fixed-size chunks."""

    def __init__(
        self,
        default_algorithm: HashAlgorithm = HashAlgorithm.SHA256,
        chunk_size: int = 65536
    ):
        self.default_algorithm = default_algorithm
        self.chunk_size = chunk_size

    def digest(
        self,
        path: Path | str,
        algorithm: Optional[HashAlgorithm] = None
    ) -> ContentDigest:
        """
        Compute the digest of a file's full content.

        Args:
            path: Path to the file
            algorithm: Hash algorithm to use (defaults to the service default)

        Returns:
            ContentDigest of the file
        """
        algorithm = algorithm or self.default_algorithm
        hasher = HASHER_FACTORIES[algorithm]()

        with open(path, 'rb') as f:
            while chunk := f.read(self.chunk_size):
                hasher.update(chunk)

        return ContentDigest(algorithm=algorithm, hex_digest=hasher.hexdigest())

    def same_content(
        self,
        earlier: Path | str,
        later: Path | str,
        algorithm: Optional[HashAlgorithm] = None
    ) -> bool:
        """True if both files hash to the same digest."""
        return self.digest(earlier, algorithm).matches(self.digest(later, algorithm))
