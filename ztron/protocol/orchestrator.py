"""
ztron Proof Orchestrator

Turns shielded legs into public descriptions by driving a TxProver.
Descriptions come back in leg insertion order whether proofs run
sequentially or on a thread pool.
"""

from __future__ import annotations
import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from ztron.core.descriptors import OutputDescription, SpendDescription
from ztron.core.legs import ShieldedOutput, ShieldedSpend
from ztron.crypto.curve import Rng
from ztron.crypto.note_encryption import NoteEncryption
from ztron.proving.context import SaplingProvingContext
from ztron.proving.prover import TxProver

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

MAX_PROOF_WORKERS = 4


def generate_spend_description(prover: TxProver, ctx: SaplingProvingContext,
                               spend: ShieldedSpend) -> SpendDescription:
    """
    Prove one spend. The description is returned unsigned.

    Raises:
        SpendProofError: If the prover fails
    """
    fvk = spend.expsk.full_viewing_key()
    position = spend.merkle_path.position
    nullifier = spend.note.nf(fvk.vk, position)
    anchor = spend.anchor()

    zkproof, cv, rk = prover.spend_proof(
        ctx,
        spend.expsk.proof_generation_key(),
        spend.diversifier,
        spend.note.rcm,
        spend.alpha,
        spend.note.value,
        anchor,
        spend.merkle_path,
    )
    logger.debug(f"Spend proof at position {position}: nf={nullifier.hex()[:16]}...")

    return SpendDescription(cv=cv, anchor=anchor, nullifier=nullifier, rk=rk, zkproof=zkproof)


def generate_output_description(prover: TxProver, ctx: SaplingProvingContext,
                                output: ShieldedOutput, rng: Optional[Rng] = None) -> OutputDescription:
    """
    Prove one output and encrypt its note to the recipient and to ovk.

    Raises:
        SpendProofError: If the prover fails
    """
    enc = NoteEncryption.new(output.ovk, output.note, output.to, output.memo, rng)
    return _prove_output(prover, ctx, output, enc)


def _prove_output(prover: TxProver, ctx: SaplingProvingContext,
                  output: ShieldedOutput, enc: NoteEncryption) -> OutputDescription:
    cmu = output.note.cm()
    enc_ciphertext = enc.encrypt_note_plaintext()

    zkproof, cv = prover.output_proof(ctx, enc.esk, output.to, output.note.rcm, output.note.value)
    out_ciphertext = enc.encrypt_outgoing_plaintext(cv, cmu)
    logger.debug(f"Output proof: cmu={cmu.hex()[:16]}...")

    return OutputDescription(
        cv=cv,
        cmu=cmu,
        ephemeral_key=enc.epk,
        enc_ciphertext=enc_ciphertext,
        out_ciphertext=out_ciphertext,
        zkproof=zkproof,
    )


def _run_ordered(func: Callable[[T], R], items: Sequence[T], parallel: bool) -> List[R]:
    if not parallel or len(items) < 2:
        return [func(item) for item in items]

    max_workers = min(MAX_PROOF_WORKERS, os.cpu_count() or 2, len(items))
    results: List[Optional[R]] = [None] * len(items)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_idx = {executor.submit(func, item): idx for idx, item in enumerate(items)}
        for future in as_completed(future_to_idx):
            results[future_to_idx[future]] = future.result()

    return results


def generate_descriptions(
    prover: TxProver,
    ctx: SaplingProvingContext,
    spends: Sequence[ShieldedSpend],
    outputs: Sequence[ShieldedOutput],
    rng: Optional[Rng] = None,
    parallel: bool = False,
) -> Tuple[List[SpendDescription], List[OutputDescription]]:
    """
    Prove every spend, then every output.

    The first failing proof propagates; no partial result is returned.
    Ephemeral keys are drawn from rng on the calling thread, so rng is
    never shared with proof workers.
    """
    logger.debug(f"Generating proofs for {len(spends)} spends, {len(outputs)} outputs (parallel={parallel})")

    spend_descs = _run_ordered(
        lambda spend: generate_spend_description(prover, ctx, spend), spends, parallel
    )
    encryptions = [
        NoteEncryption.new(output.ovk, output.note, output.to, output.memo, rng) for output in outputs
    ]
    output_descs = _run_ordered(
        lambda item: _prove_output(prover, ctx, *item), list(zip(outputs, encryptions)), parallel
    )

    logger.debug("Generating proofs... done")
    return spend_descs, output_descs
