"""
Anonymous Election Orchestration
================================
Composes eligibility (Merkle membership), double-vote prevention
(nullifiers), ballot validity (bit OR-proofs) and a homomorphic running
tally into one vote-acceptance pipeline.

A submitted vote passes four gates in order: election still open,
nullifier unseen, eligibility proof valid against the fixed roster root,
OR-proof valid for the commitment. Only when all four pass is state
touched, and then the nullifier set, the tally and the audit log are
updated together. A rejected vote leaves no trace.

Elections assume a single writer. Two concurrent submit_vote calls could
both pass the nullifier gate before either records it, so callers that
share an Election across threads must serialise access themselves.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Set, Tuple

from commitment import CommitmentKey, PedersenCommitment
from gf import Scalar
from merkle import MerkleProof, MerkleTree
from zk import Nullifier, NullifierSecret, VoteProof, derive_nullifier
from zk import InvalidVoteValueError as ProofInvalidVoteValueError

logger = logging.getLogger(__name__)

# ============================================================================
# EXCEPTIONS AND ENUMS
# ============================================================================


class ElectionStatus(Enum):
    """Election lifecycle; OPEN -> CLOSED is one-way"""
    OPEN = "open"
    CLOSED = "closed"


class VoteErrorKind(Enum):
    """Reasons a vote can be refused"""
    INVALID_PROOF = "invalid_proof"
    INVALID_ELIGIBILITY = "invalid_eligibility"
    DUPLICATE_NULLIFIER = "duplicate_nullifier"
    INVALID_VOTE_VALUE = "invalid_vote_value"
    ELECTION_CLOSED = "election_closed"


class VoteSubmissionError(Exception):
    """Base exception for refused votes"""
    kind: VoteErrorKind


class InvalidProofError(VoteSubmissionError):
    """OR-proof does not verify against the submitted commitment"""
    kind = VoteErrorKind.INVALID_PROOF


class InvalidEligibilityError(VoteSubmissionError):
    """Merkle proof does not verify against the eligibility root"""
    kind = VoteErrorKind.INVALID_ELIGIBILITY


class DuplicateNullifierError(VoteSubmissionError):
    """Nullifier already recorded in this election"""
    kind = VoteErrorKind.DUPLICATE_NULLIFIER


class InvalidVoteValueError(VoteSubmissionError):
    """Vote value outside {0, 1} at construction time"""
    kind = VoteErrorKind.INVALID_VOTE_VALUE


class ElectionClosedError(VoteSubmissionError):
    """Election no longer accepts votes"""
    kind = VoteErrorKind.ELECTION_CLOSED


# ============================================================================
# DATA STRUCTURES
# ============================================================================


@dataclass(frozen=True)
class Vote:
    """Ballot bundle submitted as a unit"""
    commitment: PedersenCommitment
    proof: VoteProof
    nullifier: Nullifier
    eligibility_proof: MerkleProof


# ============================================================================
# ELECTION
# ============================================================================


class Election:
    """Single election bound to a fixed voter roster"""

    def __init__(self, election_id: bytes, roster: Sequence[bytes], key: CommitmentKey):
        """
        Args:
            election_id: Election identifier; also the Fiat-Shamir label of every proof
            roster: Ordered eligibility set (one credential per voter)
            key: Commitment key shared by every ballot in this election
        """
        if not isinstance(election_id, (bytes, bytearray)):
            raise TypeError("Election id must be bytes")
        if not election_id:
            raise ValueError("Election id must not be empty")

        self.election_id = bytes(election_id)
        self.key = key
        self.eligibility_tree = MerkleTree(roster)
        self.eligibility_root = self.eligibility_tree.root

        self._seen_nullifiers: Set[Nullifier] = set()
        self._tally = PedersenCommitment.identity()
        self._accepted: List[Vote] = []
        self._status = ElectionStatus.OPEN

        logger.info(
            f"Opened election {self.election_id!r} with {len(self.eligibility_tree)} eligible voters, "
            f"root {self.eligibility_root.hex()[:16]}...")

    # ------------------------------------------------------------------
    # State inspection
    # ------------------------------------------------------------------

    @property
    def status(self) -> ElectionStatus:
        return self._status

    @property
    def is_closed(self) -> bool:
        return self._status is ElectionStatus.CLOSED

    @property
    def tally(self) -> PedersenCommitment:
        return self._tally

    @property
    def accepted_votes(self) -> Tuple[Vote, ...]:
        return tuple(self._accepted)

    def num_accepted(self) -> int:
        return len(self._accepted)

    def has_nullifier(self, nullifier: Nullifier) -> bool:
        return nullifier in self._seen_nullifiers

    # ------------------------------------------------------------------
    # Voter-side helpers
    # ------------------------------------------------------------------

    def eligibility_proof(self, index: int) -> Optional[MerkleProof]:
        """Membership proof for roster entry ``index``"""
        return self.eligibility_tree.proof(index)

    def build_vote(
        self,
        vote: int,
        blinding: Scalar,
        nullifier_secret: NullifierSecret,
        eligibility_proof: MerkleProof,
    ) -> Vote:
        """Assemble a ballot: commitment, OR-proof, nullifier and eligibility proof.

        Raises:
            InvalidVoteValueError: if vote is not 0 or 1
        """
        if not isinstance(vote, int):
            raise TypeError(f"Vote must be an int, got {type(vote).__name__}")

        commitment = PedersenCommitment.commit(self.key, Scalar.from_int(vote), blinding)
        try:
            proof = VoteProof.prove(self.key, commitment, vote, blinding, self.election_id)
        except ProofInvalidVoteValueError as e:
            raise InvalidVoteValueError(str(e)) from e

        return Vote(
            commitment=commitment,
            proof=proof,
            nullifier=derive_nullifier(nullifier_secret, self.election_id),
            eligibility_proof=eligibility_proof,
        )

    # ------------------------------------------------------------------
    # Vote acceptance
    # ------------------------------------------------------------------

    def _reject(self, error: VoteSubmissionError, vote: Vote) -> VoteSubmissionError:
        logger.warning(
            f"Rejected vote ({error.kind.value}) with nullifier {vote.nullifier.hex()[:16]}...")
        return error

    def submit_vote(self, vote: Vote):
        """Run the four acceptance gates and, if all pass, record the vote.

        Raises:
            ElectionClosedError: election already closed
            DuplicateNullifierError: nullifier seen before
            InvalidEligibilityError: Merkle proof fails against the roster root
            InvalidProofError: OR-proof fails against the commitment
        """
        if self.is_closed:
            raise self._reject(ElectionClosedError("Election is closed"), vote)

        # set lookup before any cryptographic work, so replays are cheap to refuse
        if vote.nullifier in self._seen_nullifiers:
            raise self._reject(DuplicateNullifierError("Nullifier already used"), vote)

        if not MerkleTree.verify(self.eligibility_root, vote.eligibility_proof):
            raise self._reject(InvalidEligibilityError("Eligibility proof does not verify"), vote)

        if not vote.proof.verify(self.key, vote.commitment, self.election_id):
            raise self._reject(InvalidProofError("Vote proof does not verify"), vote)

        self._seen_nullifiers.add(vote.nullifier)
        self._tally = self._tally + vote.commitment
        self._accepted.append(vote)

        logger.info(
            f"Accepted vote #{len(self._accepted)} with nullifier {vote.nullifier.hex()[:16]}...")

    def close(self):
        """Stop accepting votes; closing twice is a no-op"""
        if self.is_closed:
            return
        self._status = ElectionStatus.CLOSED
        logger.info(
            f"Closed election {self.election_id!r} with {len(self._accepted)} accepted votes")

    # ------------------------------------------------------------------
    # Tally
    # ------------------------------------------------------------------

    def open_tally(self, sum_blinding: Scalar) -> Optional[int]:
        """Recover the plaintext tally from the summed blinding factor.

        Linear search over 0..=num_accepted(); only suitable for small
        elections.

        Returns:
            The unique count whose commitment matches the running tally,
            or None if no count in range matches
        """
        for candidate in range(len(self._accepted) + 1):
            if self._tally.verify(self.key, Scalar.from_int(candidate), sum_blinding):
                logger.info(f"Opened tally for election {self.election_id!r}: {candidate}")
                return candidate

        logger.warning(f"Tally for election {self.election_id!r} did not open")
        return None
