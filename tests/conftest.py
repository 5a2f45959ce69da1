"""
ztron Test Fixtures
"""

import hashlib
import threading
import time
from typing import List, Tuple

import pytest

from ztron.core.legs import TronAddress
from ztron.core.note import Note
from ztron.crypto.keys import SpendingKey, ExpandedSpendingKey, FullViewingKey, Diversifier, PaymentAddress
from ztron.crypto.merkle import CommitmentTree, MerklePath
from ztron.proving.params import reset_parameters
from ztron.proving.prover import MockTxProver


class DeterministicRng:
    """Reproducible byte stream: SHA-256(seed || counter)."""

    def __init__(self, seed: bytes):
        self.seed = seed
        self.counter = 0

    def __call__(self, n: int) -> bytes:
        out = b""
        while len(out) < n:
            out += hashlib.sha256(self.seed + self.counter.to_bytes(8, "big")).digest()
            self.counter += 1
        return out[:n]


class RecordingRng(DeterministicRng):
    """DeterministicRng that records calling threads and counts overlapping calls."""

    def __init__(self, seed: bytes):
        super().__init__(seed)
        self.threads = set()
        self.overlaps = 0
        self._active = False

    def __call__(self, n: int) -> bytes:
        if self._active:
            self.overlaps += 1
        self._active = True
        self.threads.add(threading.get_ident())
        time.sleep(0.001)
        try:
            return super().__call__(n)
        finally:
            self._active = False


@pytest.fixture
def rng() -> DeterministicRng:
    """Deterministic randomness for reproducible tests."""
    return DeterministicRng(b"ztron-tests")


@pytest.fixture
def recording_rng():
    """Factory for RecordingRng instances."""
    return RecordingRng


@pytest.fixture
def spending_key() -> SpendingKey:
    return SpendingKey(bytes([i % 256 for i in range(32)]))


@pytest.fixture
def expsk(spending_key) -> ExpandedSpendingKey:
    return spending_key.expand()


@pytest.fixture
def fvk(expsk) -> FullViewingKey:
    return expsk.full_viewing_key()


@pytest.fixture
def own_address(fvk) -> Tuple[Diversifier, PaymentAddress]:
    """Sender's default (diversifier, address)."""
    return fvk.default_address()


@pytest.fixture
def recipient_expsk() -> ExpandedSpendingKey:
    return SpendingKey(bytes([(i + 50) % 256 for i in range(32)])).expand()


@pytest.fixture
def recipient_address(recipient_expsk) -> PaymentAddress:
    return recipient_expsk.full_viewing_key().default_address()[1]


@pytest.fixture
def invalid_diversifier() -> Diversifier:
    """First diversifier index without a base point."""
    for index in range(256):
        diversifier = Diversifier.from_index(index)
        if diversifier.g_d() is None:
            return diversifier
    pytest.skip("no invalid diversifier in the first 256 indices")


@pytest.fixture
def contract_address() -> TronAddress:
    return TronAddress(bytes([0x41] + [(i + 100) % 256 for i in range(20)]))


@pytest.fixture
def mock_prover(rng) -> MockTxProver:
    return MockTxProver(rng)


@pytest.fixture
def spendable_notes(own_address, rng) -> Tuple[CommitmentTree, List[Tuple[Note, MerklePath]]]:
    """
    Tree holding two notes (values 5 and 7) owned by the sender,
    preceded by an unrelated leaf.
    """
    _, address = own_address
    tree = CommitmentTree()
    tree.append(Note.create(address, 1000, rng).cm())

    notes = [Note.create(address, value, rng) for value in (5, 7)]
    positions = [tree.append(note.cm()) for note in notes]

    return tree, [(note, tree.path(position)) for note, position in zip(notes, positions)]


@pytest.fixture(autouse=True)
def clear_parameter_cache():
    """Proving parameters are process-wide; isolate tests from each other."""
    reset_parameters()
    yield
    reset_parameters()
