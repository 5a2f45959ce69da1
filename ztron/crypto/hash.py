"""
ztron Hash Functions

SHA-256 for the transaction sighash, personalized BLAKE2 for key
derivation, nullifiers, KDFs and the commitment tree.
"""

from __future__ import annotations
import hashlib
from typing import Union

from ztron.core.types import Hash

BytesLike = Union[bytes, bytearray, memoryview]


def sha256(data: BytesLike) -> Hash:
    """
    SHA-256 hash function.

    Args:
        data: Input data to hash

    Returns:
        Hash: 32-byte hash output wrapped in Hash type
    """
    return Hash(hashlib.sha256(data).digest())


def blake2b_personal(personal: bytes, *parts: BytesLike, digest_size: int = 32) -> bytes:
    """
    BLAKE2b with a 16-byte personalization.

    Args:
        personal: Domain separation tag (at most 16 bytes)
        parts: Inputs, absorbed in order
        digest_size: Output length in bytes (1..64)
    """
    hasher = hashlib.blake2b(digest_size=digest_size, person=personal)
    for part in parts:
        hasher.update(part)
    return hasher.digest()


def blake2s_personal(personal: bytes, *parts: BytesLike) -> bytes:
    """BLAKE2s-256 with an 8-byte personalization."""
    hasher = hashlib.blake2s(digest_size=32, person=personal)
    for part in parts:
        hasher.update(part)
    return hasher.digest()


def prf_expand(personal: bytes, key: bytes, tag: bytes) -> bytes:
    """64-byte expansion of a 32-byte key with a one-byte domain tag."""
    return blake2b_personal(personal, key, tag, digest_size=64)
