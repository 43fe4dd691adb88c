"""
Election orchestration: eligibility, nullifiers, proofs and homomorphic tally
"""

from .election import (
    # Core classes
    Election,
    Vote,

    # Enums
    ElectionStatus,
    VoteErrorKind,

    # Exceptions
    VoteSubmissionError,
    InvalidProofError,
    InvalidEligibilityError,
    DuplicateNullifierError,
    InvalidVoteValueError,
    ElectionClosedError,
)

__version__ = "1.0.0"

__all__ = [
    # Classes
    'Election',
    'Vote',

    # Enums
    'ElectionStatus',
    'VoteErrorKind',

    # Exceptions
    'VoteSubmissionError',
    'InvalidProofError',
    'InvalidEligibilityError',
    'DuplicateNullifierError',
    'InvalidVoteValueError',
    'ElectionClosedError',
]
