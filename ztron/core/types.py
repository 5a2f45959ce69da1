"""
ztron Fixed-Size Cryptographic Types

Proofs, ciphertexts, signatures and curve encodings have protocol-fixed
lengths. Each type rejects a wrong length at construction time.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar

from ztron.constants import (
    HASH_SIZE,
    POINT_SIZE,
    SCALAR_SIZE,
    NULLIFIER_SIZE,
    GROTH_PROOF_SIZE,
    ENC_CIPHERTEXT_SIZE,
    OUT_CIPHERTEXT_SIZE,
    SIGNATURE_SIZE,
    LITTLE_ENDIAN,
)


@dataclass(frozen=True, slots=True)
class FixedBytes:
    """
    Byte string of a fixed, type-defined length.

    SERIALIZATION: raw bytes
    """
    SIZE: ClassVar[int] = 0

    data: bytes = b""

    def __post_init__(self):
        if not isinstance(self.data, (bytes, bytearray)):
            raise TypeError(f"{type(self).__name__} requires bytes, got {type(self.data).__name__}")
        if len(self.data) != self.SIZE:
            raise ValueError(f"{type(self).__name__} must be {self.SIZE} bytes, got {len(self.data)}")
        if isinstance(self.data, bytearray):
            object.__setattr__(self, "data", bytes(self.data))

    def __bytes__(self) -> bytes:
        return self.data

    def __len__(self) -> int:
        return self.SIZE

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.data.hex()[:16]}...)"

    def hex(self) -> str:
        return self.data.hex()

    @classmethod
    def from_hex(cls, hex_string: str):
        return cls(bytes.fromhex(hex_string))

    @classmethod
    def zero(cls):
        return cls(bytes(cls.SIZE))

    def serialize(self) -> bytes:
        """Serialize to raw bytes."""
        return self.data

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0):
        """Deserialize from bytes, return (instance, bytes_consumed)."""
        return cls(data[offset:offset + cls.SIZE]), cls.SIZE


class Hash(FixedBytes):
    """32-byte digest or merkle tree node."""
    __slots__ = ()
    SIZE: ClassVar[int] = HASH_SIZE


class Point(FixedBytes):
    """Compressed curve point (value commitments, keys, ephemeral keys)."""
    __slots__ = ()
    SIZE: ClassVar[int] = POINT_SIZE


class Nullifier(FixedBytes):
    """Spent-note nullifier."""
    __slots__ = ()
    SIZE: ClassVar[int] = NULLIFIER_SIZE


class ZkProof(FixedBytes):
    """Groth16 proof bytes (A || B || C)."""
    __slots__ = ()
    SIZE: ClassVar[int] = GROTH_PROOF_SIZE


class EncCiphertext(FixedBytes):
    """Note plaintext encrypted to the recipient."""
    __slots__ = ()
    SIZE: ClassVar[int] = ENC_CIPHERTEXT_SIZE


class OutCiphertext(FixedBytes):
    """Outgoing plaintext encrypted to the sender's ovk."""
    __slots__ = ()
    SIZE: ClassVar[int] = OUT_CIPHERTEXT_SIZE


class Signature(FixedBytes):
    """
    RedDSA signature.

    SIZE: 64 bytes
    SERIALIZATION: R (32) || S (32)
    """
    __slots__ = ()
    SIZE: ClassVar[int] = SIGNATURE_SIZE

    @property
    def r_bytes(self) -> bytes:
        return self.data[:32]

    @property
    def s_bytes(self) -> bytes:
        return self.data[32:]


class Scalar(FixedBytes):
    """
    Curve scalar, little-endian, reduced modulo the group order.

    NOTE: Randomness and secret keys are scalars; repr never shows the value.
    """
    __slots__ = ()
    SIZE: ClassVar[int] = SCALAR_SIZE

    def __repr__(self) -> str:
        return "Scalar(<redacted>)"

    def to_int(self) -> int:
        return int.from_bytes(self.data, LITTLE_ENDIAN)

    @classmethod
    def from_int(cls, value: int) -> Scalar:
        return cls(value.to_bytes(SCALAR_SIZE, LITTLE_ENDIAN))
