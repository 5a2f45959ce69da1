"""
ztron Proving Context

Per-transaction accumulator of value commitment randomness:

    bsk = sum(rcv_spend) - sum(rcv_output)
    cv_sum = sum(cv_spend) - sum(cv_output)

At signing time bvk = cv_sum - value_balance * V must equal bsk * R,
otherwise the values do not balance and no binding signature exists.
"""

from __future__ import annotations
import logging
import threading
from typing import Optional

from ztron.core.types import Hash, Point, Scalar, Signature
from ztron.crypto import curve, reddsa
from ztron.crypto.curve import Generators, Rng
from ztron.crypto.pedersen import value_balance_point, value_commitment
from ztron.errors import BindingSignatureError

logger = logging.getLogger(__name__)


class SaplingProvingContext:
    """
    Mutable accumulator owned by a single build.

    Commitments may be added from proof worker threads; the sums are
    order independent.
    """

    def __init__(self):
        self.bsk = curve.ZERO_SCALAR
        self.cv_sum = curve.IDENTITY
        self.spends = 0
        self.outputs = 0
        self._lock = threading.Lock()

    def add_spend(self, value: int, rcv: Scalar) -> Point:
        """Commit to a spent value, return cv."""
        cv = value_commitment(value, rcv)
        with self._lock:
            self.bsk = curve.scalar_add(self.bsk, rcv.data)
            self.cv_sum = curve.point_add(self.cv_sum, cv.data)
            self.spends += 1
        return cv

    def add_output(self, value: int, rcv: Scalar) -> Point:
        """Commit to an output value, return cv."""
        cv = value_commitment(value, rcv)
        with self._lock:
            self.bsk = curve.scalar_sub(self.bsk, rcv.data)
            self.cv_sum = curve.point_sub(self.cv_sum, cv.data)
            self.outputs += 1
        return cv

    def binding_verification_key(self, value_balance: int) -> Point:
        return Point(curve.point_sub(self.cv_sum, value_balance_point(value_balance)))

    def binding_sig(self, value_balance: int, sighash: Hash, rng: Optional[Rng] = None) -> Signature:
        """
        Sign the sighash with bsk.

        Raises:
            BindingSignatureError: If the committed values do not balance
        """
        bvk = self.binding_verification_key(value_balance)
        expected = curve.scalarmult(self.bsk, Generators.value_commitment_randomness())
        if bvk.data != expected:
            logger.warning(
                f"Binding check failed: {self.spends} spends, {self.outputs} outputs, "
                f"value_balance={value_balance}"
            )
            raise BindingSignatureError("value commitments do not balance")

        signature = reddsa.binding_sig(Scalar(self.bsk), sighash, rng)
        if not reddsa.verify_binding_sig(bvk, sighash, signature):
            raise BindingSignatureError("signature failed self-verification")
        return signature
