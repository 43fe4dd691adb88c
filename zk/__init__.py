"""
Zero-Knowledge Proof Module for the Anonymous Voting Toolkit
Fiat-Shamir transcripts, nullifiers and the bit-vote OR-proof
"""

from .transcript import Transcript
from .nullifier import (
    Nullifier,
    NullifierSecret,
    derive_nullifier,
)
from .vote_proof import (
    # Core classes
    VoteProof,

    # Exceptions
    ProofError,
    ProofErrorKind,
    InvalidVoteValueError,
)

__version__ = "1.0.0"
__author__ = "Cryptographic Voting System Team"

__all__ = [
    # Classes
    'Transcript',
    'Nullifier',
    'NullifierSecret',
    'VoteProof',

    # Functions
    'derive_nullifier',

    # Exceptions
    'ProofError',
    'ProofErrorKind',
    'InvalidVoteValueError',
]
