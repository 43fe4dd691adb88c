"""
Fiat-Shamir Transcript
======================
Append-only labeled message log backed by an incremental SHA-256 state.

Messages are absorbed as label || u64-le(len(data)) || data. The explicit
length keeps ("ab", "c") and ("a", "bc") from producing the same byte
stream. Challenges are read from a copy of the running state, so reading
one does not consume the transcript.
"""

import logging
import struct

from gf import Scalar
from hashing import new_hasher

logger = logging.getLogger(__name__)

TRANSCRIPT_TAG = b"transcript:"
CHALLENGE_TAG = b"challenge:"


class Transcript:
    """Mutable Fiat-Shamir transcript"""

    def __init__(self, label: bytes, _state=None):
        if _state is None:
            _state = new_hasher(TRANSCRIPT_TAG, bytes(label))
        self._state = _state

    def append_message(self, label: bytes, data: bytes):
        data = bytes(data)
        self._state.update(bytes(label))
        self._state.update(struct.pack('<Q', len(data)))
        self._state.update(data)

    def append_scalar(self, label: bytes, scalar: Scalar):
        self.append_message(label, scalar.to_bytes())

    def challenge_scalar(self, label: bytes) -> Scalar:
        """Derive a challenge from the current state without mutating it"""
        snapshot = self._state.copy()
        snapshot.update(CHALLENGE_TAG)
        snapshot.update(bytes(label))
        return Scalar.from_hash(snapshot.finalize())

    def fork(self) -> 'Transcript':
        """Independent copy; appends to either side do not affect the other"""
        return Transcript(b"", _state=self._state.copy())


__all__ = ['Transcript', 'TRANSCRIPT_TAG', 'CHALLENGE_TAG']
