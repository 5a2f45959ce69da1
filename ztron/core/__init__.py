"""
ztron Core Data Structures
"""

from ztron.core.types import (
    FixedBytes,
    Hash,
    Point,
    Nullifier,
    ZkProof,
    EncCiphertext,
    OutCiphertext,
    Signature,
    Scalar,
)
from ztron.core.amount import Amount
from ztron.core.serialization import (
    serialize_u64,
    serialize_u256,
    deserialize_u64,
    deserialize_u256,
    ByteReader,
    ByteWriter,
)

__all__ = [
    # Types
    "FixedBytes",
    "Hash",
    "Point",
    "Nullifier",
    "ZkProof",
    "EncCiphertext",
    "OutCiphertext",
    "Signature",
    "Scalar",
    "Amount",
    # Serialization
    "serialize_u64",
    "serialize_u256",
    "deserialize_u64",
    "deserialize_u256",
    "ByteReader",
    "ByteWriter",
]
