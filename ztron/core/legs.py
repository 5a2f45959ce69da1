"""
ztron Transaction Legs

Shielded legs (spends, outputs) and transparent legs (one TRC-20 input or
output) accumulated by the builder before proving.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar, Optional

from ztron.constants import (
    MAX_U256,
    TRON_ADDRESS_PREFIX,
    TRON_ADDRESS_SIZE,
)
from ztron.core.amount import Amount
from ztron.core.note import Memo, Note
from ztron.core.types import FixedBytes, Hash, Scalar
from ztron.crypto import curve
from ztron.crypto.curve import Rng
from ztron.crypto.keys import Diversifier, ExpandedSpendingKey, OutgoingViewingKey, PaymentAddress
from ztron.crypto.merkle import MerklePath
from ztron.errors import InvalidAddressError, InvalidAmountError


class TronAddress(FixedBytes):
    """
    TRON account or contract address.

    SIZE: 21 bytes
    SERIALIZATION: 0x41 || 20-byte TVM address
    """
    __slots__ = ()
    SIZE: ClassVar[int] = TRON_ADDRESS_SIZE

    def __post_init__(self):
        if not isinstance(self.data, (bytes, bytearray)) or len(self.data) != TRON_ADDRESS_SIZE:
            raise InvalidAddressError(f"TRON address must be {TRON_ADDRESS_SIZE} bytes")
        if self.data[0] != TRON_ADDRESS_PREFIX:
            raise InvalidAddressError(f"TRON address must start with {TRON_ADDRESS_PREFIX:#04x}")
        super().__post_init__()

    @classmethod
    def from_hex(cls, hex_string: str) -> TronAddress:
        try:
            data = bytes.fromhex(hex_string.removeprefix("0x"))
        except ValueError as e:
            raise InvalidAddressError(f"not hex: {hex_string!r}") from e
        return cls(data)

    @classmethod
    def from_tvm_bytes(cls, data: bytes) -> TronAddress:
        return cls(bytes([TRON_ADDRESS_PREFIX]) + data)

    def as_tvm_bytes(self) -> bytes:
        """20-byte address as seen by the TVM (prefix stripped)."""
        return self.data[1:]

    def __repr__(self) -> str:
        return f"TronAddress({self.data.hex()})"


def _check_u256(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise InvalidAmountError(reason="transparent amount must be an integer")
    if not 0 <= amount <= MAX_U256:
        raise InvalidAmountError(amount, "transparent amount must fit in u256")


@dataclass(frozen=True, slots=True)
class TransparentInput:
    """TRC-20 tokens entering the shielded pool (scaled units)."""
    amount: int

    def __post_init__(self):
        _check_u256(self.amount)


@dataclass(frozen=True, slots=True)
class TransparentOutput:
    """TRC-20 tokens leaving the shielded pool (scaled units)."""
    address: TronAddress
    amount: int

    def __post_init__(self):
        _check_u256(self.amount)


@dataclass(frozen=True, slots=True)
class ShieldedSpend:
    """
    A note being spent.

    alpha re-randomizes the spend authority for this transaction only.
    """
    expsk: ExpandedSpendingKey
    diversifier: Diversifier
    note: Note
    alpha: Scalar
    merkle_path: MerklePath

    def __repr__(self) -> str:
        return f"ShieldedSpend(value={self.note.value}, position={self.merkle_path.position})"

    @classmethod
    def new(cls, expsk: ExpandedSpendingKey, diversifier: Diversifier, note: Note,
            merkle_path: MerklePath, rng: Optional[Rng] = None) -> ShieldedSpend:
        return cls(
            expsk=expsk,
            diversifier=diversifier,
            note=note,
            alpha=Scalar(curve.scalar_random(rng)),
            merkle_path=merkle_path,
        )

    @property
    def value(self) -> Amount:
        return Amount.from_u64(self.note.value)

    def anchor(self) -> Hash:
        """Tree root the spent note is proven against."""
        return self.merkle_path.root(self.note.cm())


@dataclass(frozen=True, slots=True)
class ShieldedOutput:
    """A note being created for a recipient."""
    ovk: OutgoingViewingKey
    to: PaymentAddress
    note: Note
    memo: Memo

    def __repr__(self) -> str:
        return f"ShieldedOutput(value={self.note.value}, to={self.to!r})"

    @classmethod
    def new(cls, ovk: OutgoingViewingKey, to: PaymentAddress, value: int,
            memo: Optional[Memo] = None, rng: Optional[Rng] = None) -> ShieldedOutput:
        """
        Create an output with fresh commitment randomness.

        Raises:
            InvalidAddressError: If the recipient diversifier is invalid
            InvalidAmountError: If the value is negative or out of range
        """
        amount = Amount.from_u64(value)
        note = Note.create(to, amount.value, rng)
        return cls(ovk=ovk, to=to, note=note, memo=memo if memo is not None else Memo.empty())

    @property
    def value(self) -> Amount:
        return Amount.from_u64(self.note.value)
