"""
ztron Notes and Memos

A Note is the shielded record of value owned by a payment address.
Immutable once constructed.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar, Optional

from ztron.constants import MEMO_SIZE, EMPTY_MEMO_LEAD_BYTE, MAX_U64
from ztron.core.serialization import pad_to_size
from ztron.core.types import FixedBytes, Hash, Nullifier, Point, Scalar
from ztron.crypto import curve
from ztron.crypto.curve import Rng
from ztron.crypto.keys import PaymentAddress, ViewingKey
from ztron.crypto.pedersen import note_commitment, nullifier
from ztron.errors import InvalidAddressError, InvalidAmountError


class Memo(FixedBytes):
    """
    512-byte memo field.

    An empty memo is 0xF6 followed by zeros; shorter text is zero padded.
    """
    __slots__ = ()
    SIZE: ClassVar[int] = MEMO_SIZE

    @classmethod
    def empty(cls) -> Memo:
        return cls(bytes([EMPTY_MEMO_LEAD_BYTE]) + bytes(MEMO_SIZE - 1))

    @classmethod
    def from_bytes(cls, data: bytes) -> Memo:
        if len(data) > MEMO_SIZE:
            raise ValueError(f"Memo too long: {len(data)} > {MEMO_SIZE}")
        return cls(pad_to_size(data, MEMO_SIZE))

    @classmethod
    def from_text(cls, text: str) -> Memo:
        return cls.from_bytes(text.encode("utf-8"))

    def is_empty(self) -> bool:
        return self == Memo.empty()

    def to_text(self) -> Optional[str]:
        """Decode a UTF-8 memo, None for empty or binary memos."""
        if self.is_empty() or self.data[0] >= EMPTY_MEMO_LEAD_BYTE:
            return None
        try:
            return self.data.rstrip(b"\x00").decode("utf-8")
        except UnicodeDecodeError:
            return None

    def __repr__(self) -> str:
        return "Memo(<empty>)" if self.is_empty() else f"Memo({self.data[:16].hex()}...)"


@dataclass(frozen=True, slots=True)
class Note:
    """
    Shielded note.

    value: u64 atomic units
    rcm:   note commitment randomness
    g_d, pk_d: diversified recipient address components
    """
    value: int
    rcm: Scalar
    g_d: Point
    pk_d: Point

    def __post_init__(self):
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise InvalidAmountError(reason=f"note value must be an integer, got {type(self.value).__name__}")
        if not 0 <= self.value <= MAX_U64:
            raise InvalidAmountError(self.value, "note value must fit in u64")

    def __repr__(self) -> str:
        return f"Note(value={self.value}, pk_d={self.pk_d.hex()[:16]}...)"

    @classmethod
    def create(cls, to: PaymentAddress, value: int, rng: Optional[Rng] = None) -> Note:
        """
        Create a note for a payment address with fresh randomness.

        Raises:
            InvalidAddressError: If the address diversifier has no base point
            InvalidAmountError: If the value does not fit in u64
        """
        g_d = to.g_d()
        if g_d is None:
            raise InvalidAddressError("diversifier has no valid base point")
        return cls(value=value, rcm=Scalar(curve.scalar_random(rng)), g_d=g_d, pk_d=to.pk_d)

    def cm(self) -> Hash:
        """Note commitment (tree leaf)."""
        return note_commitment(self.g_d, self.pk_d, self.value, self.rcm)

    def nf(self, vk: ViewingKey, position: int) -> Nullifier:
        """Nullifier of this note at a tree position."""
        return nullifier(vk.nk, self.cm(), position)
