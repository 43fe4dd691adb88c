"""
Prime-Field Scalar Arithmetic
=============================
Fixed-width arithmetic modulo the pseudo-Mersenne prime p = 2^256 - 189.

Values are held as four little-endian 64-bit limbs. Addition and
subtraction propagate carries/borrows limb by limb, multiplication builds
the full 512-bit schoolbook product and folds the high half back in using
2^256 = 189 (mod p). Every Scalar handed out is the canonical
representative in [0, p), so equality, hashing and byte encoding are
always defined on the reduced value.

NOTE: this is reference arithmetic. It is not constant-time and the field
is not a prime-order elliptic-curve group, so nothing built on it carries
discrete-log hardness.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import List, Sequence, Tuple

logger = logging.getLogger(__name__)

# ============================================================================
# FIELD CONSTANTS
# ============================================================================

LIMB_BITS = 64
NUM_LIMBS = 4
LIMB_MASK = (1 << LIMB_BITS) - 1
SCALAR_BYTES = 32

# 2^256 = REDUCTION_CONSTANT (mod P)
REDUCTION_CONSTANT = 189
P = (1 << 256) - REDUCTION_CONSTANT

Limbs = Tuple[int, int, int, int]


def _int_to_limbs(value: int, width: int = NUM_LIMBS) -> List[int]:
    return [(value >> (LIMB_BITS * i)) & LIMB_MASK for i in range(width)]


def _limbs_to_int(limbs: Sequence[int]) -> int:
    value = 0
    for i, limb in enumerate(limbs):
        value |= limb << (LIMB_BITS * i)
    return value


P_LIMBS: Limbs = tuple(_int_to_limbs(P))

# ============================================================================
# LIMB ROUTINES
# ============================================================================


def _add_limbs(a: Sequence[int], b: Sequence[int]) -> Tuple[List[int], int]:
    """Limb-wise a + b, returning (sum mod 2^256, carry out)"""
    out = []
    carry = 0
    for x, y in zip(a, b):
        acc = x + y + carry
        out.append(acc & LIMB_MASK)
        carry = acc >> LIMB_BITS
    return out, carry


def _sub_limbs(a: Sequence[int], b: Sequence[int]) -> Tuple[List[int], int]:
    """Limb-wise a - b, returning (difference mod 2^256, borrow out)"""
    out = []
    borrow = 0
    for x, y in zip(a, b):
        acc = x - y - borrow
        if acc < 0:
            acc += 1 << LIMB_BITS
            borrow = 1
        else:
            borrow = 0
        out.append(acc)
    return out, borrow


def _less_than(a: Sequence[int], b: Sequence[int]) -> bool:
    for x, y in zip(reversed(a), reversed(b)):
        if x != y:
            return x < y
    return False


def _mul_wide(a: Sequence[int], b: Sequence[int]) -> List[int]:
    """Schoolbook product of two 4-limb values into 8 limbs"""
    product = [0] * (2 * NUM_LIMBS)
    for i in range(NUM_LIMBS):
        carry = 0
        for j in range(NUM_LIMBS):
            acc = product[i + j] + a[i] * b[j] + carry
            product[i + j] = acc & LIMB_MASK
            carry = acc >> LIMB_BITS
        product[i + NUM_LIMBS] = carry
    return product


def _fold_high(limbs: Sequence[int]) -> List[int]:
    """Replace the limbs above 2^256 by REDUCTION_CONSTANT times themselves"""
    low = list(limbs[:NUM_LIMBS]) + [0] * max(0, NUM_LIMBS - len(limbs))
    high = limbs[NUM_LIMBS:]

    scaled = []
    carry = 0
    for limb in high:
        acc = limb * REDUCTION_CONSTANT + carry
        scaled.append(acc & LIMB_MASK)
        carry = acc >> LIMB_BITS
    scaled.append(carry)

    width = max(NUM_LIMBS, len(scaled)) + 1
    out = []
    carry = 0
    for i in range(width):
        acc = carry
        if i < NUM_LIMBS:
            acc += low[i]
        if i < len(scaled):
            acc += scaled[i]
        out.append(acc & LIMB_MASK)
        carry = acc >> LIMB_BITS

    while len(out) > NUM_LIMBS and out[-1] == 0:
        out.pop()
    return out


def _reduce(limbs: Sequence[int]) -> Limbs:
    """Reduce a little-endian limb vector of any width to [0, P)"""
    current = list(limbs)
    while len(current) > NUM_LIMBS:
        current = _fold_high(current)
    current += [0] * (NUM_LIMBS - len(current))

    while not _less_than(current, P_LIMBS):
        current, _ = _sub_limbs(current, P_LIMBS)
    return tuple(current)


# ============================================================================
# SCALAR
# ============================================================================


@dataclass(frozen=True)
class Scalar:
    """Canonical element of GF(2^256 - 189)"""
    limbs: Limbs

    def __post_init__(self):
        if len(self.limbs) != NUM_LIMBS:
            raise ValueError(
                f"Scalar needs {NUM_LIMBS} limbs, got {len(self.limbs)}")
        for limb in self.limbs:
            if not isinstance(limb, int) or limb < 0 or limb > LIMB_MASK:
                raise ValueError(f"Limb {limb!r} is not a 64-bit word")
        if not _less_than(self.limbs, P_LIMBS):
            raise ValueError("Scalar limbs are not reduced modulo p")
        object.__setattr__(self, 'limbs', tuple(self.limbs))

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def zero(cls) -> 'Scalar':
        return cls((0, 0, 0, 0))

    @classmethod
    def one(cls) -> 'Scalar':
        return cls((1, 0, 0, 0))

    @classmethod
    def from_int(cls, value: int) -> 'Scalar':
        """Map any Python integer onto the field (negatives via negation)"""
        if value < 0:
            return cls.from_int(-value).neg()
        width = max(NUM_LIMBS, (value.bit_length() + LIMB_BITS - 1) // LIMB_BITS)
        return cls(_reduce(_int_to_limbs(value, width)))

    @classmethod
    def from_bytes(cls, data: bytes) -> 'Scalar':
        """Interpret 32 little-endian bytes, reducing modulo p"""
        if len(data) != SCALAR_BYTES:
            raise ValueError(
                f"Scalar encoding must be {SCALAR_BYTES} bytes, got {len(data)}")
        limbs = [
            int.from_bytes(data[8 * i:8 * (i + 1)], 'little')
            for i in range(NUM_LIMBS)
        ]
        return cls(_reduce(limbs))

    @classmethod
    def from_hash(cls, digest: bytes) -> 'Scalar':
        """Interpret a 32-byte digest with its top bit cleared.

        Clearing bit 255 keeps the value below 2^255 < p, which stands in
        for a proper hash-to-field map.
        """
        if len(digest) != SCALAR_BYTES:
            raise ValueError(
                f"Digest must be {SCALAR_BYTES} bytes, got {len(digest)}")
        masked = bytearray(digest)
        masked[-1] &= 0x7F
        return cls.from_bytes(bytes(masked))

    @classmethod
    def random(cls) -> 'Scalar':
        """Sample a field element from OS randomness"""
        return cls.from_bytes(secrets.token_bytes(SCALAR_BYTES))

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def add(self, other: 'Scalar') -> 'Scalar':
        total, carry = _add_limbs(self.limbs, other.limbs)
        # a + b < 2p, so a single subtraction restores canonical form
        if carry or not _less_than(total, P_LIMBS):
            total, _ = _sub_limbs(total, P_LIMBS)
        return Scalar(tuple(total))

    def sub(self, other: 'Scalar') -> 'Scalar':
        if _less_than(self.limbs, other.limbs):
            complement, _ = _sub_limbs(P_LIMBS, other.limbs)
            total, _ = _add_limbs(self.limbs, complement)
            return Scalar(tuple(total))
        diff, _ = _sub_limbs(self.limbs, other.limbs)
        return Scalar(tuple(diff))

    def mul(self, other: 'Scalar') -> 'Scalar':
        return Scalar(_reduce(_mul_wide(self.limbs, other.limbs)))

    def neg(self) -> 'Scalar':
        return Scalar.zero().sub(self)

    def __add__(self, other: 'Scalar') -> 'Scalar':
        if not isinstance(other, Scalar):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: 'Scalar') -> 'Scalar':
        if not isinstance(other, Scalar):
            return NotImplemented
        return self.sub(other)

    def __mul__(self, other: 'Scalar') -> 'Scalar':
        if not isinstance(other, Scalar):
            return NotImplemented
        return self.mul(other)

    def __neg__(self) -> 'Scalar':
        return self.neg()

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def is_zero(self) -> bool:
        return not any(self.limbs)

    def to_bytes(self) -> bytes:
        return b''.join(limb.to_bytes(8, 'little') for limb in self.limbs)

    def to_int(self) -> int:
        return _limbs_to_int(self.limbs)

    def hex(self) -> str:
        return self.to_bytes().hex()

    def __repr__(self) -> str:
        return f"Scalar(0x{self.to_int():064x})"


__all__ = [
    'Scalar',
    'P',
    'P_LIMBS',
    'REDUCTION_CONSTANT',
    'SCALAR_BYTES',
]
