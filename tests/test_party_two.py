from dataclasses import replace
from types import SimpleNamespace

import pytest

from adaptorsig import paillier, party_one, party_two
from adaptorsig.proofs import NiCorrectKeyProof, ProofError
from adaptorsig.secp256k1 import N, Point, Scalar


@pytest.fixture(scope="module")
def keys():
    p1_msg1, comm_witness, keypair_party1 = party_one.keygen_first_message()
    p2_msg1, keypair_party2 = party_two.keygen_first_message()
    p1_msg2, paillier_pair, party1_private = party_one.keygen_second_message(
        comm_witness, keypair_party1, comm_witness.d_log_proof
    )
    return SimpleNamespace(
        p1_msg1=p1_msg1,
        p1_msg2=p1_msg2,
        keypair_party1=keypair_party1,
        p2_msg1=p2_msg1,
        keypair_party2=keypair_party2,
        paillier_pair=paillier_pair,
        party1_private=party1_private,
    )


def _presign(keys, y, message):
    p2_msg1, local = party_two.sign_first_message(y)
    eph_msg1, r1 = party_one.sign_first_message()
    partial_sig = party_two.sign_second_message(
        local.k2_commit,
        eph_msg1,
        keys.paillier_pair.ek,
        keys.paillier_pair.encrypted_share,
        keys.keypair_party2,
        local.k2_pair,
        eph_msg1.public_share,
        local.k3_pair,
        message,
    )
    return p2_msg1, local, eph_msg1, r1, partial_sig


def test_keygen_second_message_accepts_honest_party_one(keys):
    public = party_two.keygen_second_message(keys.p1_msg1, keys.p1_msg2)
    assert public.ek == keys.paillier_pair.ek
    assert public.encrypted_secret_share == keys.p1_msg2.c_key


def test_keygen_second_message_rejects_wrong_salt(keys):
    with pytest.raises(party_two.PartyTwoError):
        party_two.keygen_second_message(keys.p1_msg1, keys.p1_msg2, bytes([75, 90, 101, 110]))


def test_keygen_second_message_rejects_bad_commitment(keys):
    bad_msg1 = replace(keys.p1_msg1, pk_commitment=keys.p1_msg1.pk_commitment + 1)
    with pytest.raises(party_two.PartyTwoError):
        party_two.keygen_second_message(bad_msg1, keys.p1_msg2)


def test_verify_commitments_rejects_bad_zk_pok_commitment(keys):
    bad_msg1 = replace(keys.p1_msg1, zk_pok_commitment=keys.p1_msg1.zk_pok_commitment ^ 1)
    with pytest.raises(ProofError):
        party_two.verify_commitments_and_dlog_proof(bad_msg1, keys.p1_msg2)


def test_pdl_verify_rejects_wrong_public_share(keys):
    msg2 = keys.p1_msg2
    public = party_two.PaillierPublic(ek=msg2.ek, encrypted_secret_share=msg2.c_key)
    wrong_q = Point.generator() * Scalar.from_int(5)
    with pytest.raises(party_two.PartyTwoError):
        party_two.PaillierPublic.pdl_verify(
            msg2.composite_dlog_proof, msg2.pdl_statement, msg2.pdl_proof, public, wrong_q
        )


def test_pdl_verify_rejects_wrong_ciphertext(keys):
    msg2 = keys.p1_msg2
    public = party_two.PaillierPublic(ek=msg2.ek, encrypted_secret_share=msg2.c_key + 1)
    with pytest.raises(party_two.PartyTwoError):
        party_two.PaillierPublic.pdl_verify(
            msg2.composite_dlog_proof,
            msg2.pdl_statement,
            msg2.pdl_proof,
            public,
            msg2.comm_witness.public_share,
        )


def test_verify_ni_proof_correct_key_rejects_small_modulus():
    ek, dk = paillier.generate_keypair(512)
    proof = NiCorrectKeyProof.prove(dk)
    with pytest.raises(ProofError):
        party_two.PaillierPublic.verify_ni_proof_correct_key(proof, ek)


def test_verify_ni_proof_correct_key_accepts_full_key(keys):
    proof = keys.p1_msg2.correct_key_proof
    assert party_two.PaillierPublic.verify_ni_proof_correct_key(proof, keys.p1_msg2.ek) is None
    other = NiCorrectKeyProof(sigma_vec=tuple(v + 1 for v in proof.sigma_vec))
    with pytest.raises(ProofError):
        party_two.PaillierPublic.verify_ni_proof_correct_key(other, keys.p1_msg2.ek)


def test_compute_pubkey_is_symmetric(keys):
    from_two = party_two.compute_pubkey(keys.keypair_party2, keys.keypair_party1.public_share)
    from_one = party_one.compute_pubkey(keys.keypair_party1, keys.keypair_party2.public_share)
    assert from_two == from_one


def test_create_with_fixed_secret_share():
    secret = Scalar.from_int(42)
    msg, pair = party_two.create_with_fixed_secret_share(secret)
    assert pair.secret_share == secret
    assert pair.public_share == Point.generator() * 42
    assert msg.public_share == pair.public_share
    assert msg.d_log_proof.pk == pair.public_share


def test_sign_first_message_links_nonces():
    y = Scalar.from_int(7)
    msg, local = party_two.sign_first_message(y)
    assert local.k3_pair.secret_share == y * local.k2_pair.secret_share
    assert local.k2_commit.public_share == local.k2_pair.public_share
    assert local.k2_commit.c == Point.base_point2() * local.k2_pair.secret_share
    assert party_one.verify_commitments_and_dlog_proof(msg, local.k2_commit) is None
    with pytest.raises(ProofError):
        party_one.verify_commitments_and_dlog_proof(msg, local.k3_commit)


def test_sign_second_message_rejects_bad_party_one_proof(keys):
    _, local = party_two.sign_first_message(Scalar.random())
    eph_msg1, _ = party_one.sign_first_message()
    bad = replace(eph_msg1, c=eph_msg1.c + Point.generator())
    with pytest.raises(ProofError):
        party_two.sign_second_message(
            local.k2_commit,
            bad,
            keys.paillier_pair.ek,
            keys.paillier_pair.encrypted_share,
            keys.keypair_party2,
            local.k2_pair,
            bad.public_share,
            local.k3_pair,
            1234,
        )


def test_update_private_key_multiplies_share(keys):
    private = party_two.Party2Private.set_private_key(keys.keypair_party2)
    assert private.x2 == keys.keypair_party2.secret_share
    updated = private.update_private_key(3)
    assert updated.x2 == keys.keypair_party2.secret_share * 3


def test_to_mta_message_b_gives_additive_shares(keys):
    private = party_two.Party2Private.set_private_key(keys.keypair_party2)
    message_b, beta = private.to_mta_message_b(
        keys.paillier_pair.ek, keys.paillier_pair.encrypted_share
    )
    alpha, _ = keys.party1_private.to_mta_message_b(message_b)
    assert alpha + beta == keys.keypair_party1.secret_share * keys.keypair_party2.secret_share


def test_decrypt_signature_is_low_s():
    sd_prime = Scalar.random()
    y = Scalar.random()
    k3 = Scalar.random()
    r1 = Point.generator() * Scalar.random()
    signature = party_two.decrypt_signature(
        party_two.EncryptedSignature(sd_prime=sd_prime.to_int()) if hasattr(party_two, "EncryptedSignature") else None,
        y,
        r1,
        k3,
    )
    full = (y.invert() * sd_prime).to_int()
    assert signature.s in (full, N - full)
    assert signature.s <= N - signature.s
    assert signature.r == (r1 * k3).x_coord()