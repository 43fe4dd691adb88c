"""
SHA-256 binding shared by every cryptographic primitive
"""

from .digest import (
    DIGEST_SIZE,
    new_hasher,
    hash_bytes,
    digests_equal,
)

__version__ = "1.0.0"

__all__ = [
    'DIGEST_SIZE',
    'new_hasher',
    'hash_bytes',
    'digests_equal',
]
