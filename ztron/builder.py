"""
ztron Shielded Transaction Builder

Accumulates legs, then builds the contract call payload in one consuming
step:

    classify -> prove -> sighash -> spend signatures -> binding signature -> encode

Limits: 2 shielded spends, 2 shielded outputs, 1 transparent input,
1 transparent output. All spends share one anchor.
"""

from __future__ import annotations
import logging
from typing import List, Optional, Tuple, Union

from ztron.config import BuilderConfig
from ztron.constants import (
    DEFAULT_SCALING_EXPONENT,
    MAX_SCALING_EXPONENT,
    MAX_SHIELDED_OUTPUTS,
    MAX_SHIELDED_SPENDS,
)
from ztron.core.amount import Amount
from ztron.core.legs import (
    ShieldedOutput,
    ShieldedSpend,
    TransparentInput,
    TransparentOutput,
    TronAddress,
)
from ztron.core.note import Memo, Note
from ztron.core.types import Hash
from ztron.crypto.curve import Rng
from ztron.crypto.keys import Diversifier, ExpandedSpendingKey, OutgoingViewingKey, PaymentAddress
from ztron.crypto.merkle import MerklePath
from ztron.errors import (
    AmountMismatchError,
    AnchorMismatchError,
    BuilderConsumedError,
    InvalidAmountError,
    InvalidParameterError,
    InvalidTransactionError,
    NotImplementedFeatureError,
)
from ztron.protocol.abi import encode_mint, encode_transfer
from ztron.protocol.classifier import TransactionType, classify
from ztron.protocol.orchestrator import generate_descriptions, generate_output_description
from ztron.protocol.sighash import (
    compute_sighash,
    create_binding_sig,
    mint_sighash_data,
    sign_spends,
    transfer_sighash_data,
)
from ztron.proving.prover import TxProver

logger = logging.getLogger(__name__)


class Builder:
    """
    Single-use builder for one shielded TRC-20 contract call.

    Not thread safe; one owner adds legs and calls build() once.
    rng is only called from the owner thread, also with parallel_proofs.
    """

    def __init__(
        self,
        contract_address: Union[TronAddress, str],
        scaling_exponent: int = DEFAULT_SCALING_EXPONENT,
        rng: Optional[Rng] = None,
        parallel_proofs: bool = False,
    ):
        if isinstance(contract_address, str):
            contract_address = TronAddress.from_hex(contract_address)
        if not 0 <= scaling_exponent <= MAX_SCALING_EXPONENT:
            raise InvalidParameterError(
                "scaling_exponent", f"must be between 0 and {MAX_SCALING_EXPONENT}"
            )

        self.contract_address = contract_address
        self.scaling_exponent = scaling_exponent
        self.scaling_factor = 10 ** scaling_exponent
        self.rng = rng
        self.parallel_proofs = parallel_proofs

        self._value_balance = Amount.zero()
        self._anchor: Optional[Hash] = None
        self._spends: List[ShieldedSpend] = []
        self._outputs: List[ShieldedOutput] = []
        self._transparent_input: Optional[TransparentInput] = None
        self._transparent_output: Optional[TransparentOutput] = None
        self._consumed = False

    @classmethod
    def from_config(cls, config: BuilderConfig, rng: Optional[Rng] = None) -> Builder:
        """
        Raises:
            InvalidParameterError: If the configuration does not validate
        """
        errors = config.validate()
        if errors:
            raise InvalidParameterError("config", "; ".join(errors))
        return cls(
            TronAddress.from_hex(config.contract.address),
            config.contract.scaling_exponent,
            rng=rng,
            parallel_proofs=config.prover.parallel_proofs,
        )

    def __repr__(self) -> str:
        return (
            f"Builder(contract={self.contract_address.hex()}, spends={len(self._spends)}, "
            f"outputs={len(self._outputs)}, value_balance={self._value_balance.value})"
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def _check_not_consumed(self, operation: str) -> None:
        if self._consumed:
            raise BuilderConsumedError(operation)

    @property
    def value_balance(self) -> Amount:
        """Sum of spent note values minus sum of output values."""
        return self._value_balance

    @property
    def anchor(self) -> Optional[Hash]:
        return self._anchor

    @property
    def num_spends(self) -> int:
        return len(self._spends)

    @property
    def num_outputs(self) -> int:
        return len(self._outputs)

    @property
    def transparent_input(self) -> Optional[TransparentInput]:
        return self._transparent_input

    @property
    def transparent_output(self) -> Optional[TransparentOutput]:
        return self._transparent_output

    @property
    def consumed(self) -> bool:
        return self._consumed

    # ------------------------------------------------------------------
    # Legs
    # ------------------------------------------------------------------

    def add_shielded_spend(
        self,
        expsk: ExpandedSpendingKey,
        diversifier: Diversifier,
        note: Note,
        merkle_path: MerklePath,
    ) -> None:
        """
        Add a note to spend.

        Raises:
            InvalidTransactionError: If the spend limit is reached
            AnchorMismatchError: If the note's path root differs from the first spend's
            InvalidAmountError: If the value balance leaves the valid range
        """
        self._check_not_consumed("add_shielded_spend")
        if len(self._spends) >= MAX_SHIELDED_SPENDS:
            raise InvalidTransactionError("too many shielded spends")

        root = merkle_path.root(note.cm())
        if self._anchor is not None and root != self._anchor:
            logger.warning(f"Rejected spend: anchor {root.hex()[:16]}... != {self._anchor.hex()[:16]}...")
            raise AnchorMismatchError(self._anchor.data, root.data)

        value_balance = self._value_balance + Amount.from_u64(note.value)
        spend = ShieldedSpend.new(expsk, diversifier, note, merkle_path, self.rng)

        if self._anchor is None:
            self._anchor = root
        self._value_balance = value_balance
        self._spends.append(spend)
        logger.debug(f"Added spend #{len(self._spends)}, value_balance={value_balance.value}")

    def add_shielded_output(
        self,
        ovk: OutgoingViewingKey,
        to: PaymentAddress,
        value: int,
        memo: Optional[Memo] = None,
    ) -> None:
        """
        Add a shielded recipient.

        Raises:
            InvalidTransactionError: If the output limit is reached
            InvalidAddressError: If the recipient address is invalid
            InvalidAmountError: If value is negative or the balance leaves the valid range
        """
        self._check_not_consumed("add_shielded_output")
        if len(self._outputs) >= MAX_SHIELDED_OUTPUTS:
            raise InvalidTransactionError("too many shielded outputs")

        output = ShieldedOutput.new(ovk, to, value, memo, self.rng)
        value_balance = self._value_balance - output.value

        self._value_balance = value_balance
        self._outputs.append(output)
        logger.debug(f"Added output #{len(self._outputs)}, value_balance={value_balance.value}")

    def add_transparent_input(self, amount: int) -> None:
        """
        Add TRC-20 tokens entering the pool (scaled units).

        Raises:
            InvalidTransactionError: If a transparent input already exists
        """
        self._check_not_consumed("add_transparent_input")
        if self._transparent_input is not None:
            raise InvalidTransactionError("mint can only have one transparent input")
        self._transparent_input = TransparentInput(amount)

    def add_transparent_output(self, address: Union[TronAddress, str], amount: int) -> None:
        """
        Add a TRC-20 recipient for tokens leaving the pool (scaled units).

        Raises:
            InvalidTransactionError: If a transparent output already exists
        """
        self._check_not_consumed("add_transparent_output")
        if self._transparent_output is not None:
            raise InvalidTransactionError("burn can only have one transparent output")
        if isinstance(address, str):
            address = TronAddress.from_hex(address)
        self._transparent_output = TransparentOutput(address, amount)

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def transaction_type(self) -> TransactionType:
        """
        Raises:
            InvalidTransactionError: If the legs fit no contract shape
        """
        self._check_not_consumed("transaction_type")
        return self._classify()

    def _classify(self) -> TransactionType:
        return classify(
            len(self._spends),
            len(self._outputs),
            int(self._transparent_input is not None),
            int(self._transparent_output is not None),
        )

    def build(self, prover: TxProver) -> Tuple[TransactionType, bytes]:
        """
        Build the contract call payload. Consumes the builder, also on failure.

        Returns:
            (transaction type, payload bytes)
        """
        self._check_not_consumed("build")
        self._consumed = True
        kind = self._classify()

        if kind == TransactionType.MINT:
            payload = self._build_mint(prover)
        elif kind == TransactionType.TRANSFER:
            payload = self._build_transfer(prover)
        else:
            payload = self._build_burn(prover)

        logger.info(f"Built {kind} payload: {len(payload)} bytes")
        return kind, payload

    def _build_mint(self, prover: TxProver) -> bytes:
        value_balance = self._value_balance.value
        if value_balance > 0:
            raise InvalidAmountError(value_balance, "mint cannot spend shielded notes")

        shielded_value = -value_balance
        scaled_value = shielded_value * self.scaling_factor
        if scaled_value != self._transparent_input.amount:
            raise AmountMismatchError(scaled_value, self._transparent_input.amount)

        ctx = prover.new_proving_context()
        output_desc = generate_output_description(prover, ctx, self._outputs[0], self.rng)

        sighash = compute_sighash(mint_sighash_data(self.contract_address, shielded_value, output_desc))
        binding_sig = create_binding_sig(prover, ctx, value_balance, sighash)

        return encode_mint(scaled_value, output_desc, binding_sig)

    def _build_transfer(self, prover: TxProver) -> bytes:
        value_balance = self._value_balance.value
        if value_balance != 0:
            raise InvalidAmountError(value_balance, "transfer value balance must be zero")

        ctx = prover.new_proving_context()
        spend_descs, output_descs = generate_descriptions(
            prover, ctx, self._spends, self._outputs, self.rng, self.parallel_proofs
        )

        sighash = compute_sighash(transfer_sighash_data(self.contract_address, spend_descs, output_descs))
        sign_spends(spend_descs, self._spends, sighash, self.rng)
        binding_sig = create_binding_sig(prover, ctx, value_balance, sighash)

        return encode_transfer(spend_descs, output_descs, binding_sig)

    def _build_burn(self, prover: TxProver) -> bytes:
        value_balance = self._value_balance.value
        if value_balance < 0:
            raise InvalidAmountError(value_balance, "burn cannot create more than it spends")

        scaled_value = value_balance * self.scaling_factor
        if scaled_value != self._transparent_output.amount:
            raise AmountMismatchError(scaled_value, self._transparent_output.amount)

        raise NotImplementedFeatureError("burn payload encoding")
