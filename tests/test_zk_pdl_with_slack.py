import dataclasses

import pytest

from adaptorsig import paillier
from adaptorsig.proofs import CompositeDLogProof, DLogStatement, ProofError
from adaptorsig.secp256k1 import Point, Scalar, mod_inv, sample_below
from adaptorsig.zk_pdl_with_slack import (
    PDLwSlackProof,
    PDLwSlackStatement,
    PDLwSlackWitness,
    ZkPdlWithSlackError,
    commitment_unknown_order,
)

KEY_BITS = 1024


@pytest.fixture(scope="module")
def setup():
    ek_tilde, dk_tilde = paillier.generate_keypair(KEY_BITS)
    phi = (dk_tilde.p - 1) * (dk_tilde.q - 1)
    while True:
        h1 = sample_below(phi)
        if h1 > 1:
            try:
                h1_inv = mod_inv(h1, ek_tilde.n)
                break
            except ValueError:
                continue
    xhi = sample_below(2**256)
    h2 = pow(h1_inv, xhi, ek_tilde.n)
    statement = DLogStatement(n=ek_tilde.n, g=h1, ni=h2)
    composite_dlog_proof = CompositeDLogProof.prove(statement, xhi)
    ek, _ = paillier.generate_keypair(KEY_BITS)
    return statement, composite_dlog_proof, ek


def _statement(setup, plaintext_offset=0):
    dlog_statement, _, ek = setup
    randomness = paillier.sample_randomness(ek)
    x = Scalar.random()
    q_point = Point.generator() * x
    c = paillier.encrypt_with_randomness(ek, x.to_int() + plaintext_offset, randomness)
    statement = PDLwSlackStatement(
        ciphertext=c,
        ek=ek,
        q_point=q_point,
        g_point=Point.generator(),
        h1=dlog_statement.g,
        h2=dlog_statement.ni,
        n_tilde=dlog_statement.n,
    )
    return statement, PDLwSlackWitness(x=x, r=randomness)


def test_zk_pdl_with_slack(setup):
    dlog_statement, composite_dlog_proof, _ = setup
    statement, witness = _statement(setup)
    proof = PDLwSlackProof.prove(witness, statement)
    assert composite_dlog_proof.verify(dlog_statement) is None
    assert proof.verify(statement) is None


def test_zk_pdl_with_slack_soundness(setup):
    dlog_statement, composite_dlog_proof, _ = setup
    statement, witness = _statement(setup, plaintext_offset=1)
    proof = PDLwSlackProof.prove(witness, statement)
    assert composite_dlog_proof.verify(dlog_statement) is None
    with pytest.raises(ZkPdlWithSlackError):
        proof.verify(statement)


def test_tampered_proof_rejected(setup):
    statement, witness = _statement(setup)
    proof = PDLwSlackProof.prove(witness, statement)
    with pytest.raises(ZkPdlWithSlackError):
        dataclasses.replace(proof, s1=proof.s1 + 1).verify(statement)


def test_wrong_point_rejected(setup):
    statement, witness = _statement(setup)
    proof = PDLwSlackProof.prove(witness, statement)
    other = dataclasses.replace(statement, q_point=statement.q_point + Point.generator())
    with pytest.raises(ProofError):
        proof.verify(other)


def test_commitment_pinned_values():
    assert commitment_unknown_order(2, 3, 11, 3, 2) == 6
    assert commitment_unknown_order(2, 3, 11, 0, -1) == 4


def test_commitment_negative_exponent_inverts():
    n = 1009 * 1013
    value = commitment_unknown_order(5, 7, n, 4, 9)
    inverse_part = commitment_unknown_order(1, 7, n, 0, -9)
    assert value * inverse_part % n == pow(5, 4, n)