"""
Prime-field arithmetic over p = 2^256 - 189
"""

from .scalar import (
    Scalar,
    P,
    P_LIMBS,
    REDUCTION_CONSTANT,
    SCALAR_BYTES,
)

__version__ = "1.0.0"

__all__ = [
    'Scalar',
    'P',
    'P_LIMBS',
    'REDUCTION_CONSTANT',
    'SCALAR_BYTES',
]
