"""
Hash primitive for the voting toolkit.

Every derivation in the system (leaf/node hashing, nullifiers, commitment
generators, Fiat-Shamir challenges) goes through the SHA-256 context
defined here, so a producer and a verifier always agree bit-for-bit.
"""

from cryptography.hazmat.primitives import constant_time, hashes

DIGEST_SIZE = 32


def new_hasher(*parts: bytes) -> hashes.Hash:
    """Create an incremental SHA-256 context seeded with ``parts``.

    The returned context supports ``update``, ``copy`` and ``finalize``;
    ``copy`` is what lets a transcript read a challenge without consuming
    its running state.
    """
    ctx = hashes.Hash(hashes.SHA256())
    for part in parts:
        ctx.update(part)
    return ctx


def hash_bytes(*parts: bytes) -> bytes:
    """One-shot SHA-256 over the concatenation of ``parts``"""
    return new_hasher(*parts).finalize()


def digests_equal(a: bytes, b: bytes) -> bool:
    """Compare two public digests"""
    return constant_time.bytes_eq(bytes(a), bytes(b))


__all__ = ['DIGEST_SIZE', 'new_hasher', 'hash_bytes', 'digests_equal']
