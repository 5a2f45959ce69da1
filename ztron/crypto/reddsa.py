"""
ztron RedDSA Signatures

Schnorr signatures with re-randomizable keys over a chosen generator:

    R = r * G,  c = H(R || vk || M),  S = r + c * sk

Used for spend authorization (generator G_spend, key ask + alpha) and for
the binding signature (generator R_value, key bsk).
"""

from __future__ import annotations
import hmac
from typing import Optional

from ztron.constants import PERSONAL_SIGNATURE
from ztron.core.types import Hash, Point, Scalar, Signature
from ztron.crypto import curve
from ztron.crypto.curve import Generators, Rng
from ztron.crypto.hash import blake2b_personal

NONCE_ENTROPY_SIZE = 80


def _challenge(r_point: bytes, vk: bytes, message: bytes) -> bytes:
    return curve.scalar_reduce(blake2b_personal(PERSONAL_SIGNATURE, r_point, vk, message, digest_size=64))


def public_key(sk: Scalar, generator: bytes) -> Point:
    return Point(curve.scalarmult(sk.data, generator))


def randomize_private(sk: Scalar, alpha: Scalar) -> Scalar:
    return Scalar(curve.scalar_add(sk.data, alpha.data))


def sign(sk: Scalar, generator: bytes, message: bytes, rng: Optional[Rng] = None) -> Signature:
    """
    Sign a message.

    The nonce hashes fresh entropy with the key and message, so a weak RNG
    alone does not leak the key.
    """
    rng = rng or curve.default_rng
    vk = curve.scalarmult(sk.data, generator)
    r = curve.hash_to_scalar(rng(NONCE_ENTROPY_SIZE) + sk.data + vk + message)
    r_point = curve.scalarmult(r, generator)
    c = _challenge(r_point, vk, message)
    s = curve.scalar_add(r, curve.scalar_mul(c, sk.data))
    return Signature(r_point + s)


def verify(vk: Point, generator: bytes, message: bytes, signature: Signature) -> bool:
    """Verify S * G == R + c * vk."""
    r_point = signature.r_bytes
    s = signature.s_bytes
    if not curve.is_valid_point(r_point):
        return False
    if curve.scalar_to_int(s) >= curve.CURVE_ORDER:
        return False

    c = _challenge(r_point, vk.data, message)
    lhs = curve.scalarmult(s, generator)
    rhs = curve.point_add(r_point, curve.scalarmult(c, vk.data))
    return hmac.compare_digest(lhs, rhs)


# ============================================================================
# SPEND AUTHORIZATION
# ============================================================================

def spend_sig(ask: Scalar, alpha: Scalar, sighash: Hash, rng: Optional[Rng] = None) -> Signature:
    """
    Spend authorization signature over rk || sighash.

    Binds the spend authority and the per-spend alpha to this transaction.
    """
    generator = Generators.spending_key()
    rsk = randomize_private(ask, alpha)
    rk = public_key(rsk, generator)
    return sign(rsk, generator, rk.data + sighash.data, rng)


def verify_spend_sig(rk: Point, sighash: Hash, signature: Signature) -> bool:
    return verify(rk, Generators.spending_key(), rk.data + sighash.data, signature)


# ============================================================================
# BINDING SIGNATURE
# ============================================================================

def binding_sig(bsk: Scalar, sighash: Hash, rng: Optional[Rng] = None) -> Signature:
    """Binding signature over bvk || sighash."""
    generator = Generators.value_commitment_randomness()
    bvk = public_key(bsk, generator)
    return sign(bsk, generator, bvk.data + sighash.data, rng)


def verify_binding_sig(bvk: Point, sighash: Hash, signature: Signature) -> bool:
    return verify(bvk, Generators.value_commitment_randomness(), bvk.data + sighash.data, signature)
