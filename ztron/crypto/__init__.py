"""
ztron Cryptographic Primitives
"""

from ztron.crypto.hash import sha256, blake2b_personal, blake2s_personal
from ztron.crypto.merkle import MerklePath, CommitmentTree
from ztron.crypto.keys import (
    SpendingKey,
    ExpandedSpendingKey,
    FullViewingKey,
    OutgoingViewingKey,
    Diversifier,
    PaymentAddress,
)

__all__ = [
    # Hash functions
    "sha256",
    "blake2b_personal",
    "blake2s_personal",
    # Merkle tree
    "MerklePath",
    "CommitmentTree",
    # Keys
    "SpendingKey",
    "ExpandedSpendingKey",
    "FullViewingKey",
    "OutgoingViewingKey",
    "Diversifier",
    "PaymentAddress",
]
