"""
ztron Curve Primitives

Prime-order group operations over Ed25519 via libsodium (PyNaCl):
- Scalar arithmetic modulo L
- Point addition, subtraction, scalar multiplication
- Hash to point and the lazily derived independent generators

Points are 32-byte compressed encodings, scalars 32-byte little-endian.
"""

from __future__ import annotations
import hashlib
import logging
import secrets
import struct
import threading
from typing import Callable, Dict, Optional

import nacl.bindings
import nacl.exceptions

from ztron.constants import (
    LITTLE_ENDIAN,
    SCALAR_SIZE,
    POINT_SIZE,
    GENERATOR_SPENDING_KEY,
    GENERATOR_PROOF_GENERATION_KEY,
    GENERATOR_VALUE_COMMITMENT_VALUE,
    GENERATOR_VALUE_COMMITMENT_RANDOMNESS,
    GENERATOR_NOTE_COMMITMENT_RANDOMNESS,
    GENERATOR_NULLIFIER_POSITION,
)
from ztron.errors import CurveError

logger = logging.getLogger(__name__)

# Random byte source: takes a length, returns that many bytes
Rng = Callable[[int], bytes]

# Ed25519 group order (L)
CURVE_ORDER = 2**252 + 27742317777372353535851937790883648493

# Neutral element, compressed (y = 1)
IDENTITY = b"\x01" + bytes(31)

ZERO_SCALAR = bytes(SCALAR_SIZE)

DOMAIN_HASH_TO_POINT = b"ztron:hash_to_point:v1"


def default_rng(n: int) -> bytes:
    """Cryptographically secure random bytes."""
    return secrets.token_bytes(n)


class LockedRng:
    """
    Serializes calls to a wrapped Rng.

    Proof workers draw rcv and esk concurrently; stateful sources must
    never hand the same bytes to two draws.
    """

    def __init__(self, rng: Optional[Rng] = None):
        self._rng = rng or default_rng
        self._lock = threading.Lock()

    def __call__(self, n: int) -> bytes:
        with self._lock:
            return self._rng(n)


# ============================================================================
# SCALARS
# ============================================================================

def scalar_reduce(data: bytes) -> bytes:
    """Reduce a 64-byte value to a scalar mod L."""
    if len(data) != 64:
        data = hashlib.sha512(data).digest()
    return nacl.bindings.crypto_core_ed25519_scalar_reduce(data)


def scalar_from_int(value: int) -> bytes:
    """Encode an integer (possibly negative) as a scalar mod L."""
    return (value % CURVE_ORDER).to_bytes(SCALAR_SIZE, LITTLE_ENDIAN)


def scalar_to_int(scalar: bytes) -> int:
    return int.from_bytes(scalar, LITTLE_ENDIAN)


def scalar_add(a: bytes, b: bytes) -> bytes:
    """Add two scalars mod L."""
    return nacl.bindings.crypto_core_ed25519_scalar_add(a, b)


def scalar_sub(a: bytes, b: bytes) -> bytes:
    """Subtract two scalars mod L: a - b."""
    return nacl.bindings.crypto_core_ed25519_scalar_sub(a, b)


def scalar_mul(a: bytes, b: bytes) -> bytes:
    """Multiply two scalars mod L."""
    return nacl.bindings.crypto_core_ed25519_scalar_mul(a, b)


def scalar_random(rng: Optional[Rng] = None) -> bytes:
    """Uniform non-zero scalar from 64 random bytes."""
    rng = rng or default_rng
    while True:
        s = scalar_reduce(rng(64))
        if s != ZERO_SCALAR:
            return s


def hash_to_scalar(data: bytes) -> bytes:
    """Hash data to scalar using SHA-512 and reduction."""
    return scalar_reduce(hashlib.sha512(data).digest())


# ============================================================================
# POINTS
# ============================================================================

def is_valid_point(point: bytes) -> bool:
    """Check if bytes encode a point in the prime-order subgroup."""
    if len(point) != POINT_SIZE:
        return False
    return bool(nacl.bindings.crypto_core_ed25519_is_valid_point(point))


def point_add(p: bytes, q: bytes) -> bytes:
    """Add two points."""
    try:
        return nacl.bindings.crypto_core_ed25519_add(p, q)
    except nacl.exceptions.CryptoError as e:
        raise CurveError("point_add", str(e)) from e


def point_sub(p: bytes, q: bytes) -> bytes:
    """Subtract points: p - q."""
    try:
        return nacl.bindings.crypto_core_ed25519_sub(p, q)
    except nacl.exceptions.CryptoError as e:
        raise CurveError("point_sub", str(e)) from e


def point_negate(p: bytes) -> bytes:
    """Negate point: -P."""
    return point_sub(IDENTITY, p)


def scalarmult(scalar: bytes, point: bytes) -> bytes:
    """
    Scalar multiplication: s * P.

    libsodium refuses the neutral element as input or output, so
    0 * P and s * O are answered here.
    """
    if scalar == ZERO_SCALAR or point == IDENTITY:
        return IDENTITY
    try:
        return nacl.bindings.crypto_scalarmult_ed25519_noclamp(scalar, point)
    except nacl.exceptions.CryptoError as e:
        raise CurveError("scalarmult", str(e)) from e


def try_decode_point(candidate: bytes) -> Optional[bytes]:
    """
    Single-attempt map from 32 bytes to a prime-order point.

    Returns None when the bytes do not encode a subgroup point; callers
    that need a total function use hash_to_point.
    """
    if is_valid_point(candidate) and candidate != IDENTITY:
        return candidate
    return None


def hash_to_point(data: bytes) -> bytes:
    """
    Hash data to a prime-order curve point.

    Uses try-and-increment with domain separation.
    """
    for counter in range(256):
        hash_input = DOMAIN_HASH_TO_POINT + data + struct.pack("<B", counter)
        candidate = hashlib.sha256(hash_input).digest()

        point = try_decode_point(candidate)
        if point is not None:
            return point

    raise CurveError("hash_to_point", "no valid point after 256 attempts")


# ============================================================================
# GENERATORS
# ============================================================================

class Generators:
    """
    Independent generators derived by hash-to-point.

    Derived once per process on first use and never mutated afterwards.
    """

    _cache: Dict[bytes, bytes] = {}
    _lock = threading.Lock()

    @classmethod
    def _get(cls, seed: bytes) -> bytes:
        point = cls._cache.get(seed)
        if point is None:
            with cls._lock:
                point = cls._cache.get(seed)
                if point is None:
                    point = hash_to_point(seed)
                    cls._cache[seed] = point
                    logger.debug(f"Derived generator {seed.decode()}: {point.hex()[:16]}...")
        return point

    @classmethod
    def spending_key(cls) -> bytes:
        """Spend authorization generator (ak = ask * G)."""
        return cls._get(GENERATOR_SPENDING_KEY)

    @classmethod
    def proof_generation_key(cls) -> bytes:
        """Nullifier key generator (nk = nsk * H)."""
        return cls._get(GENERATOR_PROOF_GENERATION_KEY)

    @classmethod
    def value_commitment_value(cls) -> bytes:
        """Value base V of cv = v * V + rcv * R."""
        return cls._get(GENERATOR_VALUE_COMMITMENT_VALUE)

    @classmethod
    def value_commitment_randomness(cls) -> bytes:
        """Randomness base R of value commitments and binding keys."""
        return cls._get(GENERATOR_VALUE_COMMITMENT_RANDOMNESS)

    @classmethod
    def note_commitment_randomness(cls) -> bytes:
        return cls._get(GENERATOR_NOTE_COMMITMENT_RANDOMNESS)

    @classmethod
    def nullifier_position(cls) -> bytes:
        return cls._get(GENERATOR_NULLIFIER_POSITION)
