"""
ztron Transaction Classifier

Decides which contract entry point a set of legs targets. Precedence is
fixed: a transparent input means mint, a transparent output means burn,
anything else must be a transfer.
"""

from __future__ import annotations
import logging
from enum import Enum

from ztron.errors import InvalidTransactionError

logger = logging.getLogger(__name__)


class TransactionType(Enum):
    MINT = "mint"
    TRANSFER = "transfer"
    BURN = "burn"

    def __str__(self) -> str:
        return self.value


def classify(spends: int, outputs: int, transparent_inputs: int, transparent_outputs: int) -> TransactionType:
    """
    Classify by leg counts.

    Raises:
        InvalidTransactionError: If the legs fit no contract shape
    """
    if transparent_inputs:
        if outputs == 1 and spends == 0 and not transparent_outputs:
            kind = TransactionType.MINT
        else:
            raise InvalidTransactionError("mint must be a transaction to 1 shielded output")
    elif transparent_outputs:
        if spends == 1 and outputs <= 1:
            kind = TransactionType.BURN
        else:
            raise InvalidTransactionError(
                "burn must be a transaction from 1 shielded output, to max 1 shielded output"
            )
    elif spends >= 1 and outputs >= 1:
        kind = TransactionType.TRANSFER
    else:
        raise InvalidTransactionError("neither mint, burn, nor transfer")

    logger.debug(
        f"Classified {spends} spends, {outputs} outputs, {transparent_inputs} transparent in, "
        f"{transparent_outputs} transparent out as {kind}"
    )
    return kind
