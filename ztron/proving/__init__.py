"""
ztron Proving Capability
"""

from ztron.proving.context import SaplingProvingContext
from ztron.proving.prover import TxProver, MockTxProver, LocalTxProver, ProofBackend
from ztron.proving.params import ProvingParameters, load_parameters, get_parameters

__all__ = [
    "SaplingProvingContext",
    "TxProver",
    "MockTxProver",
    "LocalTxProver",
    "ProofBackend",
    "ProvingParameters",
    "load_parameters",
    "get_parameters",
]
