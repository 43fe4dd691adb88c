"""
Pedersen-Style Commitments
==========================
C = v*g + b*h over the scalar field, with (g, h) derived from a domain
string. Commitments are additively homomorphic, which is what lets an
election keep a running tally without ever seeing an individual vote.

The generators are plain field elements rather than curve points, so the
binding and hiding properties are only as strong as this reference field
construction.
"""

import logging
from dataclasses import dataclass

from gf import Scalar
from hashing import hash_bytes

logger = logging.getLogger(__name__)

# Domain string applications conventionally derive their key from.
# Nothing reads it implicitly; callers thread the derived key explicitly.
DEFAULT_COMMITMENT_DOMAIN = b"anon-vote/pedersen/v1"

GENERATOR_G_TAG = b"G"
GENERATOR_H_TAG = b"H"


@dataclass(frozen=True)
class CommitmentKey:
    """Public commitment parameters (g, h)"""
    g: Scalar
    h: Scalar

    @classmethod
    def derive(cls, domain: bytes) -> 'CommitmentKey':
        """Derive (g, h) deterministically from a domain-separation string.

        g = H(domain || "G"), h = H(domain || "H"), each with the top bit
        cleared. Independence of g and h is assumed, not proven.
        """
        if not isinstance(domain, (bytes, bytearray)):
            raise TypeError("Commitment domain must be bytes")
        domain = bytes(domain)
        g = Scalar.from_hash(hash_bytes(domain, GENERATOR_G_TAG))
        h = Scalar.from_hash(hash_bytes(domain, GENERATOR_H_TAG))
        logger.debug(f"Derived commitment key for domain {domain!r}")
        return cls(g=g, h=h)


@dataclass(frozen=True)
class PedersenCommitment:
    """A single committed scalar"""
    value: Scalar

    @classmethod
    def commit(cls, key: CommitmentKey, v: Scalar, b: Scalar) -> 'PedersenCommitment':
        """Commit to value v with blinding b"""
        return cls(v * key.g + b * key.h)

    @classmethod
    def identity(cls) -> 'PedersenCommitment':
        """Commitment to 0 under blinding 0; neutral element of add"""
        return cls(Scalar.zero())

    def verify(self, key: CommitmentKey, v: Scalar, b: Scalar) -> bool:
        """Check that (v, b) opens this commitment exactly"""
        return PedersenCommitment.commit(key, v, b).value == self.value

    def add(self, other: 'PedersenCommitment') -> 'PedersenCommitment':
        # valid because commit() is linear in (v, b)
        return PedersenCommitment(self.value + other.value)

    def __add__(self, other: 'PedersenCommitment') -> 'PedersenCommitment':
        if not isinstance(other, PedersenCommitment):
            return NotImplemented
        return self.add(other)

    def to_bytes(self) -> bytes:
        return self.value.to_bytes()

    def hex(self) -> str:
        return self.value.hex()
