"""
ztron Shielded Amount

Signed, range-checked amount used for note values and the value balance.
Valid range is [-MAX_MONEY, MAX_MONEY]; arithmetic leaving it raises.
"""

from __future__ import annotations
from dataclasses import dataclass

from ztron.constants import MAX_MONEY
from ztron.errors import InvalidAmountError


@dataclass(frozen=True, slots=True, order=True)
class Amount:
    """
    Shielded amount in atomic units.

    RANGE: -MAX_MONEY <= value <= MAX_MONEY
    """
    value: int = 0

    def __post_init__(self):
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise InvalidAmountError(reason=f"amount must be an integer, got {type(self.value).__name__}")
        if not -MAX_MONEY <= self.value <= MAX_MONEY:
            raise InvalidAmountError(self.value, "out of range")

    @classmethod
    def zero(cls) -> Amount:
        return cls(0)

    @classmethod
    def from_u64(cls, value: int) -> Amount:
        """Create a non-negative amount from an unsigned note value."""
        if value < 0:
            raise InvalidAmountError(value, "must be non-negative")
        return cls(value)

    def is_positive(self) -> bool:
        return self.value > 0

    def is_negative(self) -> bool:
        return self.value < 0

    def __int__(self) -> int:
        return self.value

    def __add__(self, other: Amount) -> Amount:
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(self.value + other.value)

    def __sub__(self, other: Amount) -> Amount:
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(self.value - other.value)

    def __neg__(self) -> Amount:
        return Amount(-self.value)

    def __repr__(self) -> str:
        return f"Amount({self.value})"
