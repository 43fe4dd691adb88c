"""
Merkle Anonymity-Set Tree
=========================
Binary hash tree over an ordered eligibility set with inclusion proofs.

Leaves are hashed as H("leaf:" || data) and interior nodes as
H("node:" || left || right). An odd-length layer pairs its last node with
itself, and that duplication rule has to match exactly for proofs from
another implementation to verify here.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from hashing import DIGEST_SIZE, digests_equal, hash_bytes

logger = logging.getLogger(__name__)

LEAF_TAG = b"leaf:"
NODE_TAG = b"node:"


def hash_leaf(data: bytes) -> bytes:
    return hash_bytes(LEAF_TAG, data)


def hash_node(left: bytes, right: bytes) -> bytes:
    return hash_bytes(NODE_TAG, left, right)


@dataclass(frozen=True)
class MerkleProof:
    """Inclusion proof: leaf hash, leaf index and siblings from leaf to root"""
    leaf: bytes
    index: int
    siblings: Tuple[bytes, ...]

    def __post_init__(self):
        if self.index < 0:
            raise ValueError("Merkle proof index must be non-negative")
        object.__setattr__(self, 'siblings', tuple(self.siblings))

    @property
    def depth(self) -> int:
        return len(self.siblings)


class MerkleTree:
    """Merkle tree with the full layer pyramid kept in memory"""

    def __init__(self, leaves: Sequence[bytes]):
        leaf_hashes = [hash_leaf(bytes(leaf)) for leaf in leaves]
        if not leaf_hashes:
            # an empty set still commits to something: one leaf over b""
            leaf_hashes = [hash_leaf(b"")]

        self._layers: List[List[bytes]] = [leaf_hashes]
        while len(self._layers[-1]) > 1:
            self._layers.append(self._next_layer(self._layers[-1]))

        logger.debug(
            f"Built Merkle tree over {len(leaf_hashes)} leaves, depth {self.depth}")

    @staticmethod
    def _next_layer(layer: List[bytes]) -> List[bytes]:
        parents = []
        for i in range(0, len(layer), 2):
            left = layer[i]
            right = layer[i + 1] if i + 1 < len(layer) else left
            parents.append(hash_node(left, right))
        return parents

    @property
    def root(self) -> bytes:
        return self._layers[-1][0]

    @property
    def leaf_hashes(self) -> Tuple[bytes, ...]:
        return tuple(self._layers[0])

    @property
    def layers(self) -> Tuple[Tuple[bytes, ...], ...]:
        return tuple(tuple(layer) for layer in self._layers)

    @property
    def depth(self) -> int:
        return len(self._layers) - 1

    def __len__(self) -> int:
        return len(self._layers[0])

    def proof(self, index: int) -> Optional[MerkleProof]:
        """Build the inclusion proof for leaf ``index``, or None if out of range"""
        if index < 0 or index >= len(self):
            return None

        siblings = []
        position = index
        for layer in self._layers[:-1]:
            sibling = position ^ 1
            siblings.append(layer[sibling] if sibling < len(layer) else layer[position])
            position >>= 1

        return MerkleProof(leaf=self._layers[0][index], index=index, siblings=tuple(siblings))

    @staticmethod
    def verify(root: bytes, proof: MerkleProof) -> bool:
        """Replay the path from the proof's leaf and compare against ``root``.

        The index must fit in ``depth`` bits; otherwise one path would
        verify under several indices.
        """
        if len(proof.leaf) != DIGEST_SIZE or len(root) != DIGEST_SIZE:
            return False
        if proof.index >> len(proof.siblings):
            return False

        current = proof.leaf
        position = proof.index
        for sibling in proof.siblings:
            if len(sibling) != DIGEST_SIZE:
                return False
            if position & 1:
                current = hash_node(sibling, current)
            else:
                current = hash_node(current, sibling)
            position >>= 1

        return digests_equal(current, root)


__all__ = ['MerkleTree', 'MerkleProof', 'hash_leaf', 'hash_node', 'LEAF_TAG', 'NODE_TAG']
