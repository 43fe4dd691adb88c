import dataclasses
import hashlib

import pytest

from merkle import MerkleProof, MerkleTree, hash_leaf, hash_node

VOTERS = [b"alice", b"bob", b"carol", b"dave", b"eve"]


def flip_bit(data: bytes, bit: int = 0) -> bytes:
    mutated = bytearray(data)
    mutated[bit // 8] ^= 1 << (bit % 8)
    return bytes(mutated)


def test_hashes_are_domain_separated():
    assert hash_leaf(b"x") == hashlib.sha256(b"leaf:x").digest()
    assert hash_node(b"a" * 32, b"b" * 32) == hashlib.sha256(b"node:" + b"a" * 32 + b"b" * 32).digest()
    assert hash_leaf(b"x") != hashlib.sha256(b"x").digest()


def test_odd_layer_duplicates_last_node():
    tree = MerkleTree(VOTERS[:3])
    l0, l1, l2 = (hash_leaf(v) for v in VOTERS[:3])
    assert tree.root == hash_node(hash_node(l0, l1), hash_node(l2, l2))


@pytest.mark.parametrize("size", [1, 2, 3, 4, 5, 7, 8, 9, 16])
def test_every_index_verifies(size):
    leaves = [f"voter-{i}".encode() for i in range(size)]
    tree = MerkleTree(leaves)
    assert len(tree) == size

    for index in range(size):
        proof = tree.proof(index)
        assert proof is not None
        assert proof.leaf == hash_leaf(leaves[index])
        assert proof.depth == tree.depth
        assert MerkleTree.verify(tree.root, proof)


def test_out_of_range_index_has_no_proof():
    tree = MerkleTree(VOTERS)
    assert tree.proof(len(VOTERS)) is None
    assert tree.proof(100) is None
    assert tree.proof(-1) is None


def test_negative_proof_index_is_rejected():
    with pytest.raises(ValueError):
        MerkleProof(leaf=hash_leaf(b"x"), index=-1, siblings=())


def test_tampered_leaf_fails():
    tree = MerkleTree(VOTERS)
    proof = tree.proof(2)
    for bit in (0, 7, 255):
        forged = dataclasses.replace(proof, leaf=flip_bit(proof.leaf, bit))
        assert not MerkleTree.verify(tree.root, forged)


def test_tampered_sibling_fails():
    tree = MerkleTree(VOTERS)
    proof = tree.proof(1)
    siblings = list(proof.siblings)
    siblings[-1] = flip_bit(siblings[-1], 3)
    assert not MerkleTree.verify(tree.root, dataclasses.replace(proof, siblings=tuple(siblings)))


def test_wrong_index_fails():
    tree = MerkleTree(VOTERS[:4])
    proof = tree.proof(0)
    assert not MerkleTree.verify(tree.root, dataclasses.replace(proof, index=1))


def test_index_must_fit_the_proof_depth():
    tree = MerkleTree(VOTERS[:4])
    proof = tree.proof(1)
    assert MerkleTree.verify(tree.root, proof)

    for alias in (1 + 4, 1 + 8, 1 + 1024):
        assert not MerkleTree.verify(tree.root, dataclasses.replace(proof, index=alias))

    single = MerkleTree([b"only"])
    assert not MerkleTree.verify(single.root, dataclasses.replace(single.proof(0), index=1))


def test_wrong_root_fails():
    tree = MerkleTree(VOTERS)
    other = MerkleTree(VOTERS[:4])
    assert not MerkleTree.verify(other.root, tree.proof(0))
    assert not MerkleTree.verify(flip_bit(tree.root), tree.proof(0))


def test_malformed_digests_fail():
    tree = MerkleTree(VOTERS)
    proof = tree.proof(0)
    assert not MerkleTree.verify(tree.root[:31], proof)
    assert not MerkleTree.verify(tree.root, dataclasses.replace(proof, leaf=b"short"))


def test_leaf_order_matters():
    assert MerkleTree(VOTERS).root != MerkleTree(list(reversed(VOTERS))).root


def test_empty_set_commits_to_empty_leaf():
    tree = MerkleTree([])
    assert len(tree) == 1
    assert tree.depth == 0
    assert tree.root == hash_leaf(b"")

    proof = tree.proof(0)
    assert proof.siblings == ()
    assert MerkleTree.verify(tree.root, proof)
    assert tree.proof(1) is None


def test_single_leaf_root_is_leaf_hash():
    tree = MerkleTree([b"only"])
    assert tree.root == hash_leaf(b"only")
    assert tree.proof(0).depth == 0


def test_layers_shrink_to_root():
    tree = MerkleTree(VOTERS)
    sizes = [len(layer) for layer in tree.layers]
    assert sizes == [5, 3, 2, 1]
    assert tree.leaf_hashes == tree.layers[0]
    assert tree.layers[-1] == (tree.root,)
