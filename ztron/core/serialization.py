"""
ztron Serialization Utilities

Integers on the contract wire are BIG-ENDIAN and padded to 32-byte words.
"""

from __future__ import annotations
from typing import Tuple

from ztron.constants import BIG_ENDIAN, WORD_SIZE, MAX_U64, MAX_U256


# ==============================================================================
# Integer Serialization (Big-Endian)
# ==============================================================================

def serialize_u64(value: int) -> bytes:
    """Serialize unsigned 64-bit integer (big-endian)."""
    if not 0 <= value <= MAX_U64:
        raise ValueError(f"u64 value out of range: {value}")
    return value.to_bytes(8, BIG_ENDIAN)


def serialize_u256(value: int) -> bytes:
    """Serialize unsigned 256-bit integer as one big-endian word."""
    if not 0 <= value <= MAX_U256:
        raise ValueError(f"u256 value out of range: {value}")
    return value.to_bytes(WORD_SIZE, BIG_ENDIAN)


def deserialize_u64(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Deserialize unsigned 64-bit integer (big-endian).
    Returns (value, bytes_consumed).
    """
    if offset + 8 > len(data):
        raise ValueError(f"Not enough data for u64 at offset {offset}")
    return int.from_bytes(data[offset:offset + 8], BIG_ENDIAN), 8


def deserialize_u256(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Deserialize one big-endian word.
    Returns (value, bytes_consumed).
    """
    if offset + WORD_SIZE > len(data):
        raise ValueError(f"Not enough data for u256 at offset {offset}")
    return int.from_bytes(data[offset:offset + WORD_SIZE], BIG_ENDIAN), WORD_SIZE


# ==============================================================================
# Word Helpers
# ==============================================================================

def pad_to_size(data: bytes, size: int, pad_byte: int = 0) -> bytes:
    """Pad byte array to specified size."""
    if len(data) >= size:
        return data[:size]
    return data + bytes([pad_byte] * (size - len(data)))


class ByteReader:
    """
    Helper class for sequential deserialization.
    """

    def __init__(self, data: bytes, offset: int = 0):
        self.data = data
        self.offset = offset

    def read_u64(self) -> int:
        value, size = deserialize_u64(self.data, self.offset)
        self.offset += size
        return value

    def read_u256(self) -> int:
        value, size = deserialize_u256(self.data, self.offset)
        self.offset += size
        return value

    def read_fixed_bytes(self, size: int) -> bytes:
        """Read fixed-length byte array."""
        if self.offset + size > len(self.data):
            raise ValueError(
                f"Truncated data: need {size} bytes at offset {self.offset}, "
                f"have {self.remaining()}"
            )
        value = self.data[self.offset:self.offset + size]
        self.offset += size
        return value

    def remaining(self) -> int:
        """Return number of bytes remaining."""
        return len(self.data) - self.offset


class ByteWriter:
    """
    Helper class for sequential serialization.
    """

    def __init__(self):
        self.buffer = bytearray()

    def write_u64(self, value: int) -> "ByteWriter":
        self.buffer.extend(serialize_u64(value))
        return self

    def write_u256(self, value: int) -> "ByteWriter":
        self.buffer.extend(serialize_u256(value))
        return self

    def write_fixed_bytes(self, data: bytes, size: int) -> "ByteWriter":
        """Write fixed-length byte array, rejecting length mismatches."""
        if len(data) != size:
            raise ValueError(f"Expected {size} bytes, got {len(data)}")
        self.buffer.extend(data)
        return self

    def write_raw(self, data: bytes) -> "ByteWriter":
        """Write raw bytes without length prefix."""
        self.buffer.extend(data)
        return self

    def write_zeros(self, count: int) -> "ByteWriter":
        self.buffer.extend(bytes(count))
        return self

    def to_bytes(self) -> bytes:
        """Return the serialized bytes."""
        return bytes(self.buffer)

    def __len__(self) -> int:
        return len(self.buffer)
