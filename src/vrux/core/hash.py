"""Hashing for cache keys and identifiers.

xxhash for fast non-cryptographic keys, SHA256 where a stable
cryptographic digest is needed.
"""

import hashlib
from enum import Enum

import xxhash


class Algorithm(str, Enum):
    """Supported hash algorithms."""

    XXHASH64 = "xxhash64"  # Fast, non-cryptographic (cache keys)
    SHA256 = "sha256"


def hash_bytes(
    data: bytes,
    algorithm: Algorithm = Algorithm.XXHASH64,
    truncate: int | None = None,
) -> str:
    """
    Hash bytes to hex digest.

    Args:
        data: Bytes to hash
        algorithm: Hash algorithm
        truncate: Optional length to truncate digest

    Returns:
        Hex digest string
    """
    if algorithm == Algorithm.XXHASH64:
        digest = xxhash.xxh64(data).hexdigest()
    elif algorithm == Algorithm.SHA256:
        digest = hashlib.sha256(data).hexdigest()
    else:
        raise ValueError(f"Unknown algorithm: {algorithm}")

    return digest[:truncate] if truncate else digest


def hash_string(
    text: str,
    algorithm: Algorithm = Algorithm.XXHASH64,
    truncate: int | None = None,
) -> str:
    """
    Hash string to hex digest.

    Examples:
        >>> len(hash_string("test"))
        16
        >>> len(hash_string("test", Algorithm.SHA256, truncate=16))
        16
    """
    return hash_bytes(text.encode("utf-8"), algorithm, truncate)


__all__ = ["Algorithm", "hash_string", "hash_bytes"]
