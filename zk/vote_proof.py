"""
Bit-Vote OR-Proof
=================
Non-interactive Cramer-Damgard-Schoenmakers disjunction showing that a
Pedersen commitment C = v*g + b*h opens to v = 0 or v = 1, without
revealing which.

Each disjunct is a Sigma protocol proving knowledge of b with
C - v*g = b*h. The prover runs the real protocol for its actual vote and
the simulator for the other branch, then splits one Fiat-Shamir challenge
between them: c0 + c1 must equal the transcript challenge, so only one
half can have been picked freely.

WARNING: the prover's nonces (r_real, c_sim, z_sim) are derived
deterministically from the transcript and the secret blinding instead of
from fresh randomness. The formula is kept fixed for compatibility with
the reference construction, but predictable nonces are a classic Sigma
protocol pitfall and this must not be used as a production proof system.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from commitment import CommitmentKey, PedersenCommitment
from gf import Scalar

from .transcript import Transcript

logger = logging.getLogger(__name__)

COMMITMENT_LABEL = b"commitment"
BLINDING_LABEL = b"blinding"
FIRST_MESSAGE_LABELS = (b"a0", b"a1")
CHALLENGE_LABEL = b"challenge"
NONCE_LABELS = (b"r_real", b"c_sim", b"z_sim")

# ============================================================================
# EXCEPTIONS
# ============================================================================


class ProofErrorKind(Enum):
    """Reasons proof construction can fail"""
    INVALID_VOTE_VALUE = "invalid_vote_value"


class ProofError(Exception):
    """Base exception for proof construction"""
    kind: ProofErrorKind


class InvalidVoteValueError(ProofError):
    """Vote value is neither 0 nor 1"""
    kind = ProofErrorKind.INVALID_VOTE_VALUE


# ============================================================================
# PROOF
# ============================================================================


def _bind_statement(label: bytes, commitment: PedersenCommitment) -> Transcript:
    transcript = Transcript(label)
    transcript.append_scalar(COMMITMENT_LABEL, commitment.value)
    return transcript


def _combined_challenge(transcript: Transcript, a0: Scalar, a1: Scalar) -> Scalar:
    transcript.append_scalar(FIRST_MESSAGE_LABELS[0], a0)
    transcript.append_scalar(FIRST_MESSAGE_LABELS[1], a1)
    return transcript.challenge_scalar(CHALLENGE_LABEL)


@dataclass(frozen=True)
class VoteProof:
    """One (first message, response, challenge) triple per disjunct.

    Slot 0 belongs to the statement "v = 0" and slot 1 to "v = 1"; the
    layout is the same whichever branch was real.
    """
    a0: Scalar
    z0: Scalar
    c0: Scalar
    a1: Scalar
    z1: Scalar
    c1: Scalar

    @classmethod
    def prove(
        cls,
        key: CommitmentKey,
        commitment: PedersenCommitment,
        vote: int,
        blinding: Scalar,
        label: bytes,
    ) -> 'VoteProof':
        """Prove that ``commitment`` = commit(key, vote, blinding) with vote in {0, 1}.

        Args:
            key: Commitment key the commitment was made under
            commitment: The public commitment
            vote: Committed value, 0 or 1
            blinding: Blinding factor used in the commitment
            label: Transcript label; the verifier must use the same one

        Returns:
            The assembled proof

        Raises:
            InvalidVoteValueError: if vote is not 0 or 1
        """
        if not isinstance(vote, int) or vote not in (0, 1):
            raise InvalidVoteValueError(f"Vote must be 0 or 1, got {vote!r}")

        transcript = _bind_statement(label, commitment)

        nonce_source = transcript.fork()
        nonce_source.append_scalar(BLINDING_LABEL, blinding)
        r_real, c_sim, z_sim = (
            nonce_source.challenge_scalar(nonce_label) for nonce_label in NONCE_LABELS
        )

        # Simulated transcript for the false statement "v = 1 - vote"
        v_sim = Scalar.from_int(1 - vote)
        shifted = commitment.value - v_sim * key.g
        a_sim = z_sim * key.h - c_sim * shifted

        a_real = r_real * key.h

        if vote == 0:
            a0, a1 = a_real, a_sim
        else:
            a0, a1 = a_sim, a_real

        c_total = _combined_challenge(transcript, a0, a1)
        c_real = c_total - c_sim
        z_real = r_real + c_real * blinding

        if vote == 0:
            return cls(a0=a0, z0=z_real, c0=c_real, a1=a1, z1=z_sim, c1=c_sim)
        return cls(a0=a0, z0=z_sim, c0=c_sim, a1=a1, z1=z_real, c1=c_real)

    def verify(self, key: CommitmentKey, commitment: PedersenCommitment, label: bytes) -> bool:
        """Check the proof against ``commitment`` under transcript ``label``"""
        transcript = _bind_statement(label, commitment)
        c_expected = _combined_challenge(transcript, self.a0, self.a1)

        if self.c0 + self.c1 != c_expected:
            logger.debug("Vote proof rejected: challenge split mismatch")
            return False

        # branch v = 0: C - 0*g = C
        if self.z0 * key.h != self.a0 + self.c0 * commitment.value:
            logger.debug("Vote proof rejected: branch 0 equation")
            return False

        # branch v = 1
        if self.z1 * key.h != self.a1 + self.c1 * (commitment.value - key.g):
            logger.debug("Vote proof rejected: branch 1 equation")
            return False

        return True


__all__ = [
    'VoteProof',
    'ProofError',
    'ProofErrorKind',
    'InvalidVoteValueError',
]
