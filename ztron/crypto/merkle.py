"""
ztron Note Commitment Tree

Fixed-depth binary Merkle tree over note commitments with personalized
BLAKE2b. Spends carry a MerklePath; the builder only needs its root.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Tuple

from ztron.constants import MERKLE_DEPTH, PERSONAL_MERKLE, HASH_SIZE
from ztron.core.serialization import ByteReader, ByteWriter
from ztron.core.types import Hash
from ztron.crypto.hash import blake2b_personal

EMPTY_LEAF = Hash.zero()


def combine(level: int, left: Hash, right: Hash) -> Hash:
    """Parent node of two children at the given level (0 = leaves)."""
    return Hash(blake2b_personal(PERSONAL_MERKLE, bytes([level]), left.data, right.data))


@lru_cache(maxsize=None)
def empty_root(level: int) -> Hash:
    """Root of an empty subtree of the given height."""
    if level == 0:
        return EMPTY_LEAF
    below = empty_root(level - 1)
    return combine(level - 1, below, below)


@dataclass
class MerklePath:
    """
    Authentication path from a leaf to the root.

    Bit i of position is 1 when the node at level i is a right child,
    i.e. its sibling auth_path[i] sits on the left.
    """
    auth_path: List[Hash]
    position: int

    def __post_init__(self):
        if self.position < 0 or self.position >= (1 << len(self.auth_path)):
            raise ValueError(f"Position {self.position} out of range for depth {len(self.auth_path)}")

    @property
    def depth(self) -> int:
        return len(self.auth_path)

    def root(self, leaf: Hash) -> Hash:
        """Recompute the root this path authenticates the leaf against."""
        current = leaf
        for level, sibling in enumerate(self.auth_path):
            if (self.position >> level) & 1:
                current = combine(level, sibling, current)
            else:
                current = combine(level, current, sibling)
        return current

    def verify(self, leaf: Hash, root: Hash) -> bool:
        return self.root(leaf) == root

    def serialize(self) -> bytes:
        """Serialize: depth (1) || siblings (32 each) || position (u64 BE)."""
        writer = ByteWriter().write_raw(bytes([self.depth]))
        for sibling in self.auth_path:
            writer.write_fixed_bytes(sibling.data, HASH_SIZE)
        writer.write_u64(self.position)
        return writer.to_bytes()

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple[MerklePath, int]:
        reader = ByteReader(data, offset)
        depth = reader.read_fixed_bytes(1)[0]
        siblings = [Hash(reader.read_fixed_bytes(HASH_SIZE)) for _ in range(depth)]
        position = reader.read_u64()
        return cls(auth_path=siblings, position=position), reader.offset - offset


@dataclass
class CommitmentTree:
    """
    Append-only commitment tree holding its leaves in memory.

    Sufficient for building witnesses in tools and tests; a wallet keeps
    incremental witnesses instead.
    """
    depth: int = MERKLE_DEPTH
    leaves: List[Hash] = field(default_factory=list)

    def append(self, leaf: Hash) -> int:
        """Append a leaf, return its position."""
        if len(self.leaves) >= (1 << self.depth):
            raise ValueError("Commitment tree is full")
        self.leaves.append(leaf)
        return len(self.leaves) - 1

    def _levels(self) -> List[List[Hash]]:
        levels = [list(self.leaves)]
        for level in range(self.depth):
            nodes = levels[-1]
            if len(nodes) % 2 == 1:
                nodes = nodes + [empty_root(level)]
            levels.append([
                combine(level, nodes[i], nodes[i + 1])
                for i in range(0, len(nodes), 2)
            ])
        return levels

    def root(self) -> Hash:
        if not self.leaves:
            return empty_root(self.depth)
        return self._levels()[-1][0]

    def path(self, position: int) -> MerklePath:
        """Authentication path for the leaf at position."""
        if not 0 <= position < len(self.leaves):
            raise IndexError(f"No leaf at position {position}")

        levels = self._levels()
        siblings = []
        index = position
        for level in range(self.depth):
            sibling_index = index ^ 1
            nodes = levels[level]
            siblings.append(nodes[sibling_index] if sibling_index < len(nodes) else empty_root(level))
            index >>= 1
        return MerklePath(auth_path=siblings, position=position)
