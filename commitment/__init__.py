"""
Pedersen-style hiding/binding commitments with homomorphic addition
"""

from .pedersen import (
    CommitmentKey,
    PedersenCommitment,
    DEFAULT_COMMITMENT_DOMAIN,
)

__version__ = "1.0.0"

__all__ = [
    'CommitmentKey',
    'PedersenCommitment',
    'DEFAULT_COMMITMENT_DOMAIN',
]
