"""
ztron Build Pipeline: classification, proving, signing, encoding
"""

from ztron.protocol.classifier import TransactionType, classify
from ztron.protocol.abi import encode_mint, encode_transfer, decode_transfer

__all__ = [
    "TransactionType",
    "classify",
    "encode_mint",
    "encode_transfer",
    "decode_transfer",
]
