"""
ztron Shielded Key Material

Key hierarchy:

    SpendingKey sk
      -> ExpandedSpendingKey (ask, nsk, ovk)
      -> ProofGenerationKey (ak, nsk)
      -> ViewingKey (ak, nk) -> ivk
      -> PaymentAddress (d, pk_d = ivk * g_d)

Address encoding is handled by the caller; this module only works with
raw bytes.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple

from ztron.constants import (
    DIVERSIFIER_SIZE,
    OVK_SIZE,
    PAYMENT_ADDRESS_SIZE,
    PERSONAL_DIVERSIFY,
    PERSONAL_EXPAND_SEED,
    PERSONAL_IVK,
    SPENDING_KEY_SIZE,
    LITTLE_ENDIAN,
)
from ztron.core.types import FixedBytes, Point, Scalar
from ztron.crypto import curve
from ztron.crypto.curve import Generators, Rng
from ztron.crypto.hash import blake2s_personal, prf_expand
from ztron.errors import InvalidAddressError

logger = logging.getLogger(__name__)


class SpendingKey(FixedBytes):
    """Root spending key (32 random bytes). Never leaves the wallet."""
    __slots__ = ()
    SIZE: ClassVar[int] = SPENDING_KEY_SIZE

    def __repr__(self) -> str:
        return "SpendingKey(<redacted>)"

    @classmethod
    def generate(cls, rng: Optional[Rng] = None) -> SpendingKey:
        return cls((rng or curve.default_rng)(SPENDING_KEY_SIZE))

    def expand(self) -> ExpandedSpendingKey:
        return ExpandedSpendingKey.from_spending_key(self)


class OutgoingViewingKey(FixedBytes):
    """Key that lets the sender recover outputs it created."""
    __slots__ = ()
    SIZE: ClassVar[int] = OVK_SIZE


class Diversifier(FixedBytes):
    """11-byte address diversifier."""
    __slots__ = ()
    SIZE: ClassVar[int] = DIVERSIFIER_SIZE

    @classmethod
    def from_index(cls, index: int) -> Diversifier:
        return cls(index.to_bytes(DIVERSIFIER_SIZE, LITTLE_ENDIAN))

    def g_d(self) -> Optional[Point]:
        """
        Diversified base point, or None for an invalid diversifier.

        A single hash attempt: only a fraction of diversifiers are valid.
        """
        point = curve.try_decode_point(blake2s_personal(PERSONAL_DIVERSIFY, self.data))
        return Point(point) if point is not None else None


@dataclass(frozen=True, slots=True)
class ProofGenerationKey:
    """Key material handed to the prover for spend proofs."""
    ak: Point
    nsk: Scalar

    def to_viewing_key(self) -> ViewingKey:
        nk = curve.scalarmult(self.nsk.data, Generators.proof_generation_key())
        return ViewingKey(ak=self.ak, nk=Point(nk))


@dataclass(frozen=True, slots=True)
class ViewingKey:
    """Spend validating key ak and nullifier deriving key nk."""
    ak: Point
    nk: Point

    def ivk(self) -> Scalar:
        """Incoming viewing key, truncated to 251 bits so it is below L."""
        digest = bytearray(blake2s_personal(PERSONAL_IVK, self.ak.data, self.nk.data))
        digest[31] &= 0x07
        return Scalar(bytes(digest))

    def rk(self, alpha: Scalar) -> Point:
        """Randomized spend validating key: ak + alpha * G."""
        return Point(curve.point_add(
            self.ak.data,
            curve.scalarmult(alpha.data, Generators.spending_key()),
        ))

    def to_payment_address(self, diversifier: Diversifier) -> Optional[PaymentAddress]:
        g_d = diversifier.g_d()
        if g_d is None:
            return None
        pk_d = curve.scalarmult(self.ivk().data, g_d.data)
        if pk_d == curve.IDENTITY:
            return None
        return PaymentAddress(diversifier=diversifier, pk_d=Point(pk_d))


@dataclass(frozen=True, slots=True)
class ExpandedSpendingKey:
    """
    Spend authorizing key ask, proof authorizing key nsk and ovk.
    """
    ask: Scalar
    nsk: Scalar
    ovk: OutgoingViewingKey

    def __repr__(self) -> str:
        return f"ExpandedSpendingKey(ovk={self.ovk})"

    @classmethod
    def from_spending_key(cls, sk: SpendingKey) -> ExpandedSpendingKey:
        ask = curve.scalar_reduce(prf_expand(PERSONAL_EXPAND_SEED, sk.data, b"\x00"))
        nsk = curve.scalar_reduce(prf_expand(PERSONAL_EXPAND_SEED, sk.data, b"\x01"))
        ovk = prf_expand(PERSONAL_EXPAND_SEED, sk.data, b"\x02")[:OVK_SIZE]
        return cls(ask=Scalar(ask), nsk=Scalar(nsk), ovk=OutgoingViewingKey(ovk))

    def ak(self) -> Point:
        return Point(curve.scalarmult(self.ask.data, Generators.spending_key()))

    def proof_generation_key(self) -> ProofGenerationKey:
        return ProofGenerationKey(ak=self.ak(), nsk=self.nsk)

    def full_viewing_key(self) -> FullViewingKey:
        return FullViewingKey(vk=self.proof_generation_key().to_viewing_key(), ovk=self.ovk)


@dataclass(frozen=True, slots=True)
class FullViewingKey:
    vk: ViewingKey
    ovk: OutgoingViewingKey

    def default_address(self, start_index: int = 0, max_attempts: int = 1024) -> Tuple[Diversifier, PaymentAddress]:
        """
        First valid payment address at or after a diversifier index.

        Raises:
            InvalidAddressError: If no valid diversifier is found
        """
        for index in range(start_index, start_index + max_attempts):
            diversifier = Diversifier.from_index(index)
            address = self.vk.to_payment_address(diversifier)
            if address is not None:
                return diversifier, address
        raise InvalidAddressError(f"no valid diversifier in {max_attempts} attempts from index {start_index}")


@dataclass(frozen=True, slots=True)
class PaymentAddress:
    """
    Shielded payment address.

    SIZE: 43 bytes
    SERIALIZATION: diversifier (11) || pk_d (32)
    """
    diversifier: Diversifier
    pk_d: Point

    def g_d(self) -> Optional[Point]:
        return self.diversifier.g_d()

    def to_bytes(self) -> bytes:
        return self.diversifier.data + self.pk_d.data

    @classmethod
    def from_bytes(cls, data: bytes) -> PaymentAddress:
        """
        Parse and validate a raw payment address.

        Raises:
            InvalidAddressError: On wrong length, bad diversifier or bad pk_d
        """
        if len(data) != PAYMENT_ADDRESS_SIZE:
            raise InvalidAddressError(f"expected {PAYMENT_ADDRESS_SIZE} bytes, got {len(data)}")
        diversifier = Diversifier(data[:DIVERSIFIER_SIZE])
        if diversifier.g_d() is None:
            raise InvalidAddressError("invalid diversifier")
        pk_d = data[DIVERSIFIER_SIZE:]
        if not curve.is_valid_point(pk_d):
            raise InvalidAddressError("pk_d is not a valid point")
        return cls(diversifier=diversifier, pk_d=Point(pk_d))

    def __repr__(self) -> str:
        return f"PaymentAddress(d={self.diversifier.hex()}, pk_d={self.pk_d.hex()[:16]}...)"
