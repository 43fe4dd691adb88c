"""
Per-election nullifiers.

nullifier = H("nullifier:" || secret || ":" || election_id)

The same secret under the same election id always produces the same tag,
which is how a second ballot from one voter is spotted. Changing the
election id yields an unrelated tag, so ballots cannot be linked across
elections.
"""

from dataclasses import dataclass

from gf import Scalar
from hashing import DIGEST_SIZE, hash_bytes

NULLIFIER_TAG = b"nullifier:"
NULLIFIER_SEPARATOR = b":"

# The voter's secret is an ordinary field element
NullifierSecret = Scalar


@dataclass(frozen=True)
class Nullifier:
    """32-byte double-vote tag"""
    value: bytes

    def __post_init__(self):
        if not isinstance(self.value, (bytes, bytearray)):
            raise TypeError("Nullifier value must be bytes")
        if len(self.value) != DIGEST_SIZE:
            raise ValueError(
                f"Nullifier must be {DIGEST_SIZE} bytes, got {len(self.value)}")
        object.__setattr__(self, 'value', bytes(self.value))

    @classmethod
    def from_hex(cls, text: str) -> 'Nullifier':
        return cls(bytes.fromhex(text))

    def to_bytes(self) -> bytes:
        return self.value

    def hex(self) -> str:
        return self.value.hex()

    def __str__(self) -> str:
        return self.hex()


def derive_nullifier(secret: NullifierSecret, election_id: bytes) -> Nullifier:
    """Derive the nullifier for ``secret`` in election ``election_id``"""
    return Nullifier(hash_bytes(
        NULLIFIER_TAG,
        secret.to_bytes(),
        NULLIFIER_SEPARATOR,
        bytes(election_id),
    ))


__all__ = ['Nullifier', 'NullifierSecret', 'derive_nullifier', 'NULLIFIER_TAG']
