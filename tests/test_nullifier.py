import hashlib

import pytest

from gf import Scalar
from zk import Nullifier, derive_nullifier


@pytest.fixture
def secret():
    return Scalar.from_int(0xC0FFEE)


def test_nullifier_is_deterministic(secret):
    assert derive_nullifier(secret, b"e1") == derive_nullifier(secret, b"e1")


def test_nullifier_layout(secret):
    expected = hashlib.sha256(b"nullifier:" + secret.to_bytes() + b":" + b"e1").digest()
    assert derive_nullifier(secret, b"e1").to_bytes() == expected


def test_elections_are_unlinkable(secret):
    assert derive_nullifier(secret, b"e1") != derive_nullifier(secret, b"e2")


def test_secrets_are_distinguished(secret):
    assert derive_nullifier(secret, b"e1") != derive_nullifier(secret + Scalar.one(), b"e1")


def test_hex_rendering(secret):
    nullifier = derive_nullifier(secret, b"e1")
    text = nullifier.hex()
    assert len(text) == 64
    assert text == text.lower()
    assert str(nullifier) == text
    assert Nullifier.from_hex(text) == nullifier


def test_nullifiers_work_as_set_members(secret):
    seen = {derive_nullifier(secret, b"e1")}
    assert derive_nullifier(secret, b"e1") in seen
    assert derive_nullifier(secret, b"e2") not in seen


def test_nullifier_length_is_checked():
    with pytest.raises(ValueError):
        Nullifier(b"\x00" * 31)
    with pytest.raises(TypeError):
        Nullifier("00" * 32)
