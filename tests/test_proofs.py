from dataclasses import replace

import pytest

from adaptorsig.paillier import EncryptionKey, generate_keypair
from adaptorsig.proofs import (
    CompositeDLogProof,
    DLogProof,
    DLogStatement,
    ECDDHProof,
    ECDDHStatement,
    ECDDHWitness,
    NiCorrectKeyProof,
    ProofError,
    create_commitment,
    hash_ints,
    hash_points,
    point_to_int,
)
from adaptorsig.secp256k1 import Point, Scalar, mod_inv, sample_below


@pytest.fixture(scope="module")
def keys():
    return generate_keypair(512)


def _dlog_setup(dk):
    n = dk.n
    phi = (dk.p - 1) * (dk.q - 1)
    while True:
        h1 = sample_below(phi)
        try:
            h1_inv = mod_inv(h1, n)
        except ValueError:
            continue
        if h1 > 1:
            break
    xhi = sample_below(2**256)
    h2 = pow(h1_inv, xhi, n)
    return DLogStatement(n=n, g=h1, ni=h2), xhi


def test_hash_of_nothing_is_sha256_of_empty_input():
    assert hash_ints() == int(
        "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855", 16
    )


def test_hash_ints_concatenates_without_framing():
    assert hash_ints(0x0102) == hash_ints(1, 2)
    assert hash_ints(1, 2) != hash_ints(2, 1)


def test_point_to_int_uses_compressed_encoding():
    g = Point.generator()
    assert point_to_int(g) == 0x0279BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798
    assert hash_points(g) == hash_ints(point_to_int(g))


def test_commitment_binds_message_and_blinding():
    assert create_commitment(10, 20) == create_commitment(10, 20)
    assert create_commitment(10, 20) != create_commitment(10, 21)
    assert create_commitment(10, 20) == hash_ints(10, 20)


def test_dlog_proof_round_trip():
    secret = Scalar.random()
    proof = DLogProof.prove(secret)
    assert proof.pk == Point.generator() * secret
    proof.verify()
    assert proof.pk_t_rand_commitment.is_infinity() is False


def test_dlog_proof_tampered_response_rejected():
    proof = DLogProof.prove(Scalar.random())
    forged = replace(proof, challenge_response=proof.challenge_response + 1)
    with pytest.raises(ProofError):
        forged.verify()


def test_dlog_proof_wrong_public_key_rejected():
    proof = DLogProof.prove(Scalar.random())
    forged = replace(proof, pk=Point.generator() * Scalar.random())
    with pytest.raises(ProofError):
        forged.verify()


def _ddh_statement(x):
    g, h = Point.generator(), Point.base_point2()
    return ECDDHStatement(g1=g, h1=g * x, g2=h, h2=h * x)


def test_ecddh_proof_round_trip():
    x = Scalar.random()
    statement = _ddh_statement(x)
    proof = ECDDHProof.prove(ECDDHWitness(x=x), statement)
    proof.verify(statement)
    assert proof.a1 * Scalar.from_int(1) == proof.a1


def test_ecddh_proof_rejects_unequal_logs():
    x = Scalar.random()
    statement = _ddh_statement(x)
    bad = replace(statement, h2=Point.base_point2() * (x + 1))
    proof = ECDDHProof.prove(ECDDHWitness(x=x), bad)
    with pytest.raises(ProofError):
        proof.verify(bad)


def test_ecddh_proof_bound_to_statement():
    x = Scalar.random()
    proof = ECDDHProof.prove(ECDDHWitness(x=x), _ddh_statement(x))
    with pytest.raises(ProofError):
        proof.verify(_ddh_statement(Scalar.random()))


def test_composite_dlog_proof_round_trip(keys):
    _, dk = keys
    statement, xhi = _dlog_setup(dk)
    proof = CompositeDLogProof.prove(statement, xhi)
    proof.verify(statement)
    assert pow(statement.g, proof.y, statement.n) * pow(
        statement.ni, hash_ints(proof.x, statement.g, statement.n, statement.ni), statement.n
    ) % statement.n == proof.x


def test_composite_dlog_proof_wrong_secret_rejected(keys):
    _, dk = keys
    statement, xhi = _dlog_setup(dk)
    proof = CompositeDLogProof.prove(statement, xhi + 1)
    with pytest.raises(ProofError):
        proof.verify(statement)


def test_composite_dlog_proof_tampered_rejected(keys):
    _, dk = keys
    statement, xhi = _dlog_setup(dk)
    proof = CompositeDLogProof.prove(statement, xhi)
    with pytest.raises(ProofError):
        replace(proof, y=proof.y + 1).verify(statement)


def test_correct_key_proof_default_salt(keys):
    ek, dk = keys
    proof = NiCorrectKeyProof.prove(dk)
    proof.verify(ek)
    assert len(proof.sigma_vec) == 11


def test_correct_key_proof_custom_salt(keys):
    ek, dk = keys
    proof = NiCorrectKeyProof.prove(dk, b"salt")
    proof.verify(ek, b"salt")
    with pytest.raises(ProofError):
        proof.verify(ek, b"other")


def test_correct_key_proof_bound_to_key(keys):
    _, dk = keys
    other_ek, _ = generate_keypair(512)
    proof = NiCorrectKeyProof.prove(dk)
    with pytest.raises(ProofError):
        proof.verify(other_ek)


def test_correct_key_proof_rejects_small_factor(keys):
    ek, dk = keys
    proof = NiCorrectKeyProof.prove(dk)
    with pytest.raises(ProofError):
        proof.verify(EncryptionKey(n=ek.n * 3))