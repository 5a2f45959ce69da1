"""
ztron Transaction Prover

TxProver is the capability the builder drives: spend proofs, output
proofs and the binding signature. The base class derives the public
values (cv, rk) and checks the witness; subclasses only produce the
proof bytes.

- MockTxProver: zero proof bytes, real commitments and signatures.
- LocalTxProver: proof bytes from a ProofBackend fed with lazily loaded
  circuit parameters.
"""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

from ztron.core.note import Note
from ztron.core.types import Hash, Point, Scalar, Signature, ZkProof
from ztron.crypto import curve
from ztron.crypto.curve import Rng
from ztron.crypto.keys import Diversifier, PaymentAddress, ProofGenerationKey
from ztron.crypto.merkle import MerklePath
from ztron.errors import SpendProofError, ZtronError
from ztron.proving.context import SaplingProvingContext
from ztron.proving.params import ProvingParameters, get_parameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpendWitness:
    """Private inputs of the spend circuit."""
    proof_generation_key: ProofGenerationKey
    diversifier: Diversifier
    rcm: Scalar
    alpha: Scalar
    value: int
    anchor: Hash
    merkle_path: MerklePath
    rcv: Scalar
    cv: Point
    rk: Point


@dataclass(frozen=True)
class OutputWitness:
    """Private inputs of the output circuit."""
    esk: Scalar
    to: PaymentAddress
    rcm: Scalar
    value: int
    rcv: Scalar
    cv: Point


class TxProver(ABC):
    """Proving capability consumed by the builder."""

    def __init__(self, rng: Optional[Rng] = None):
        # rcv draws may come from parallel proof workers
        self.rng = curve.LockedRng(rng)

    def new_proving_context(self) -> SaplingProvingContext:
        return SaplingProvingContext()

    def spend_proof(
        self,
        ctx: SaplingProvingContext,
        proof_generation_key: ProofGenerationKey,
        diversifier: Diversifier,
        rcm: Scalar,
        alpha: Scalar,
        value: int,
        anchor: Hash,
        merkle_path: MerklePath,
    ) -> Tuple[ZkProof, Point, Point]:
        """
        Prove a spend, return (zkproof, cv, rk).

        Raises:
            SpendProofError: If the witness is inconsistent or proving fails
        """
        vk = proof_generation_key.to_viewing_key()
        address = vk.to_payment_address(diversifier)
        if address is None:
            raise SpendProofError("diversifier has no valid base point")

        note = Note(value=value, rcm=rcm, g_d=address.g_d(), pk_d=address.pk_d)
        if merkle_path.root(note.cm()) != anchor:
            raise SpendProofError("note is not in the tree at the given anchor")

        rk = vk.rk(alpha)
        rcv = Scalar(curve.scalar_random(self.rng))
        cv = ctx.add_spend(value, rcv)

        witness = SpendWitness(
            proof_generation_key=proof_generation_key,
            diversifier=diversifier,
            rcm=rcm,
            alpha=alpha,
            value=value,
            anchor=anchor,
            merkle_path=merkle_path,
            rcv=rcv,
            cv=cv,
            rk=rk,
        )
        zkproof = self._prove(self.prove_spend, witness, "spend")
        return zkproof, cv, rk

    def output_proof(
        self,
        ctx: SaplingProvingContext,
        esk: Scalar,
        to: PaymentAddress,
        rcm: Scalar,
        value: int,
    ) -> Tuple[ZkProof, Point]:
        """
        Prove an output, return (zkproof, cv).

        Raises:
            SpendProofError: If proving fails
        """
        rcv = Scalar(curve.scalar_random(self.rng))
        cv = ctx.add_output(value, rcv)
        witness = OutputWitness(esk=esk, to=to, rcm=rcm, value=value, rcv=rcv, cv=cv)
        zkproof = self._prove(self.prove_output, witness, "output")
        return zkproof, cv

    def binding_sig(self, ctx: SaplingProvingContext, value_balance: int, sighash: Hash) -> Signature:
        """
        Raises:
            BindingSignatureError: If the value balance does not match the commitments
        """
        return ctx.binding_sig(value_balance, sighash, self.rng)

    @staticmethod
    def _prove(prove, witness, kind: str) -> ZkProof:
        try:
            proof = prove(witness)
        except ZtronError:
            raise
        except Exception as e:
            logger.error(f"{kind} proof generation failed: {e}")
            raise SpendProofError(f"{kind} proof: {e}") from e

        try:
            return proof if isinstance(proof, ZkProof) else ZkProof(proof)
        except (TypeError, ValueError) as e:
            raise SpendProofError(f"{kind} proof: {e}") from e

    @abstractmethod
    def prove_spend(self, witness: SpendWitness) -> bytes:
        """Produce spend proof bytes."""
        pass

    @abstractmethod
    def prove_output(self, witness: OutputWitness) -> bytes:
        """Produce output proof bytes."""
        pass


class MockTxProver(TxProver):
    """
    Prover that returns all-zero proofs.

    Everything except the proof bytes is real, so sighashes, spend
    authorization and binding signatures verify.
    """

    def prove_spend(self, witness: SpendWitness) -> bytes:
        return ZkProof.zero().data

    def prove_output(self, witness: OutputWitness) -> bytes:
        return ZkProof.zero().data


class ProofBackend(ABC):
    """Groth16 engine producing proof bytes from parameters and a witness."""

    @abstractmethod
    def prove_spend(self, params: bytes, witness: SpendWitness) -> bytes:
        pass

    @abstractmethod
    def prove_output(self, params: bytes, witness: OutputWitness) -> bytes:
        pass


class LocalTxProver(TxProver):
    """
    Prover backed by local parameter files.

    Parameters are loaded on the first proof, not at construction.
    """

    def __init__(self, config, backend: ProofBackend, rng: Optional[Rng] = None):
        super().__init__(rng)
        self.config = config
        self.backend = backend

    @property
    def parameters(self) -> ProvingParameters:
        return get_parameters(self.config)

    def prove_spend(self, witness: SpendWitness) -> bytes:
        return self.backend.prove_spend(self.parameters.spend, witness)

    def prove_output(self, witness: OutputWitness) -> bytes:
        return self.backend.prove_output(self.parameters.output, witness)
