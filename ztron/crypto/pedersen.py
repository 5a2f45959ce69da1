"""
ztron Commitments

- Value commitment:  cv = v * V + rcv * R
- Note commitment:   cm = HashToPoint(g_d || pk_d || v) + rcm * N
- Nullifier:         nf = BLAKE2s(nk || cm + pos * J)

Value commitments are homomorphic, so
sum(cv_spend) - sum(cv_output) - value_balance * V = bsk * R
which is what the binding signature proves knowledge of.
"""

from __future__ import annotations
import struct
from typing import Iterable

from ztron.constants import PERSONAL_NOTE_COMMIT, PERSONAL_NULLIFIER
from ztron.core.types import Hash, Nullifier, Point, Scalar
from ztron.crypto import curve
from ztron.crypto.curve import Generators
from ztron.crypto.hash import blake2s_personal


def value_commitment(value: int, rcv: Scalar) -> Point:
    """
    Commit to a (possibly negative) value with randomness rcv.
    """
    v_term = curve.scalarmult(curve.scalar_from_int(value), Generators.value_commitment_value())
    r_term = curve.scalarmult(rcv.data, Generators.value_commitment_randomness())
    return Point(curve.point_add(v_term, r_term))


def value_balance_point(value_balance: int) -> bytes:
    """value_balance * V, the public part removed before checking bvk."""
    return curve.scalarmult(curve.scalar_from_int(value_balance), Generators.value_commitment_value())


def sum_points(points: Iterable[bytes]) -> bytes:
    total = curve.IDENTITY
    for point in points:
        total = curve.point_add(total, point)
    return total


def note_commitment(g_d: Point, pk_d: Point, value: int, rcm: Scalar) -> Hash:
    """
    Commit to a note's recipient and value.

    Returns the commitment encoding used as the tree leaf (cmu).
    """
    message = PERSONAL_NOTE_COMMIT + g_d.data + pk_d.data + struct.pack("<Q", value)
    base = curve.hash_to_point(message)
    blind = curve.scalarmult(rcm.data, Generators.note_commitment_randomness())
    return Hash(curve.point_add(base, blind))


def nullifier(nk: Point, cm: Hash, position: int) -> Nullifier:
    """
    Derive the nullifier of a note at a tree position.

    The position term makes two identical notes at different leaves
    produce different nullifiers.
    """
    rho = curve.point_add(
        cm.data,
        curve.scalarmult(curve.scalar_from_int(position), Generators.nullifier_position()),
    )
    return Nullifier(blake2s_personal(PERSONAL_NULLIFIER, nk.data, rho))
