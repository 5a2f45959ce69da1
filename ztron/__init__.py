"""
ztron Shielded TRC-20 Transaction Builder

Builds mint and transfer payloads for the TRON shielded TRC-20 contract:
shielded legs are proven, signed and encoded into the exact call data the
contract expects.
"""

__version__ = "0.1.0"
__author__ = "ztron"

from ztron.builder import Builder
from ztron.protocol.classifier import TransactionType
from ztron.errors import ZtronError, ErrorCode

__all__ = [
    "Builder",
    "TransactionType",
    "ZtronError",
    "ErrorCode",
    "__version__",
]
