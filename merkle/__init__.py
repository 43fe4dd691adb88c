"""
Merkle tree membership proofs for eligibility sets
"""

from .merkle_tree import (
    MerkleTree,
    MerkleProof,
    hash_leaf,
    hash_node,
)

__version__ = "1.0.0"

__all__ = [
    'MerkleTree',
    'MerkleProof',
    'hash_leaf',
    'hash_node',
]
