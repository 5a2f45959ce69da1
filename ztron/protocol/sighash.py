"""
ztron Sighash and Binding Signature

The sighash is SHA-256 over the data the contract re-serializes:

    MINT:     contract (20) || value (u64 BE) || output body || ciphertexts
    TRANSFER: contract (20) || spend bodies || output bodies || ciphertexts

Spend bodies exclude the spend authorization signature; output bodies
exclude the ciphertexts, which follow in a separate block.
"""

from __future__ import annotations
import logging
from typing import Optional, Sequence

from ztron.core.descriptors import OutputDescription, SpendDescription
from ztron.core.legs import ShieldedSpend, TronAddress
from ztron.core.serialization import ByteWriter
from ztron.core.types import Hash, Signature
from ztron.crypto import reddsa
from ztron.crypto.curve import Rng
from ztron.crypto.hash import sha256
from ztron.errors import BindingSignatureError, InvalidTransactionError, ZtronError
from ztron.proving.context import SaplingProvingContext
from ztron.proving.prover import TxProver

logger = logging.getLogger(__name__)


def mint_sighash_data(contract: TronAddress, value: int, output: OutputDescription) -> bytes:
    writer = ByteWriter()
    writer.write_raw(contract.as_tvm_bytes())
    writer.write_u64(value)
    writer.write_raw(output.serialize_without_ciphertexts())
    writer.write_raw(output.serialize_ciphertexts())
    return writer.to_bytes()


def transfer_sighash_data(contract: TronAddress, spends: Sequence[SpendDescription],
                          outputs: Sequence[OutputDescription]) -> bytes:
    writer = ByteWriter()
    writer.write_raw(contract.as_tvm_bytes())
    for spend in spends:
        writer.write_raw(spend.serialize_without_sig())
    for output in outputs:
        writer.write_raw(output.serialize_without_ciphertexts())
    for output in outputs:
        writer.write_raw(output.serialize_ciphertexts())
    return writer.to_bytes()


def compute_sighash(transaction_data: bytes) -> Hash:
    sighash = sha256(transaction_data)
    logger.debug(f"sighash => {sighash.hex()}")
    return sighash


def sign_spends(spend_descs: Sequence[SpendDescription], spends: Sequence[ShieldedSpend],
                sighash: Hash, rng: Optional[Rng] = None) -> None:
    """
    Attach a spend authorization signature to each description.

    Signs with rsk = ask + alpha over rk || sighash.
    """
    if len(spend_descs) != len(spends):
        raise InvalidTransactionError("spend descriptions do not match spends")

    for desc, spend in zip(spend_descs, spends):
        desc.spend_auth_sig = reddsa.spend_sig(spend.expsk.ask, spend.alpha, sighash, rng)


def create_binding_sig(prover: TxProver, ctx: SaplingProvingContext,
                       value_balance: int, sighash: Hash) -> Signature:
    """
    Request the binding signature from the prover.

    Raises:
        BindingSignatureError: On any prover failure
    """
    try:
        return prover.binding_sig(ctx, value_balance, sighash)
    except BindingSignatureError:
        raise
    except ZtronError as e:
        raise BindingSignatureError(e.message) from e
