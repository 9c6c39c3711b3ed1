"""The first party of the two-party adaptor signature protocol.

Party one holds a share of the signing key together with a Paillier key pair;
the Paillier encryption of its share is handed to party two during key
generation. While signing, party one turns party two's encrypted partial
signature into an encrypted (adaptor) signature.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass
from typing import Any

from . import paillier
from .mta import MessageB
from .paillier import DecryptionKey, EncryptionKey
from .proofs import (
    CompositeDLogProof,
    DLogProof,
    DLogStatement,
    ECDDHProof,
    ECDDHStatement,
    ECDDHWitness,
    NiCorrectKeyProof,
    ProofError,
    create_commitment,
    hash_points,
    point_to_int,
)
from .secp256k1 import N as CURVE_ORDER
from .secp256k1 import Point, Scalar, mod_inv, sample_below, sample_bits
from .signature import (
    SECURITY_BITS,
    AdaptorError,
    EncryptedSignature,
    ErrorKind,
    Signature,
)
from .zk_pdl_with_slack import PDLwSlackProof, PDLwSlackStatement, PDLwSlackWitness

PAILLIER_KEY_BITS = 2048
_XHI_BOUND = 2**256


@dataclass(frozen=True)
class EcKeyPair:
    public_share: Point
    secret_share: Scalar


@dataclass(frozen=True)
class CommWitness:
    """The opening of party one's key generation commitments."""

    pk_commitment_blind_factor: int
    zk_pok_blind_factor: int
    public_share: Point
    d_log_proof: DLogProof


@dataclass(frozen=True)
class SignatureRecid:
    s: int
    r: int
    recid: int


@dataclass(frozen=True)
class EphEcKeyPair:
    """An ephemeral nonce and its public point."""

    public_share: Point
    secret_share: Scalar


@dataclass(frozen=True)
class KeyGenMsg1:
    pk_commitment: int
    zk_pok_commitment: int
    public_share: Point


@dataclass(frozen=True)
class KeyGenMsg2:
    comm_witness: CommWitness
    ek: EncryptionKey
    c_key: int
    correct_key_proof: NiCorrectKeyProof
    pdl_statement: PDLwSlackStatement
    pdl_proof: PDLwSlackProof
    composite_dlog_proof: CompositeDLogProof


@dataclass(frozen=True)
class PreSignMsg1:
    d_log_proof: ECDDHProof
    public_share: Point
    c: Point  # secret_share * base_point2


@dataclass(frozen=True)
class Party1Private:
    """Party one's secret share, Paillier private key and encryption randomness."""

    x1: Scalar
    paillier_priv: DecryptionKey
    c_key_randomness: int

    @classmethod
    def set_private_key(cls, ec_key: EcKeyPair, paillier_key: PaillierKeyPair) -> Party1Private:
        return cls(
            x1=ec_key.secret_share,
            paillier_priv=paillier_key.dk,
            c_key_randomness=paillier_key.randomness,
        )

    def refresh_private_key(
        self, factor: int
    ) -> tuple[
        EncryptionKey,
        int,
        Party1Private,
        NiCorrectKeyProof,
        PDLwSlackStatement,
        PDLwSlackProof,
        CompositeDLogProof,
    ]:
        """Multiply the share by factor under a fresh Paillier key.

        Returns the new encryption key, the new encrypted share, the new private
        state, and the proofs that go with them.
        """
        ek_new, dk_new = paillier.generate_keypair(PAILLIER_KEY_BITS)
        randomness = paillier.sample_randomness(ek_new)
        x1_new = self.x1 * Scalar.from_int(factor)
        c_key_new = paillier.encrypt_with_randomness(ek_new, x1_new.to_int(), randomness)
        correct_key_proof = NiCorrectKeyProof.prove(dk_new)

        paillier_key_pair = PaillierKeyPair(
            ek=ek_new, dk=dk_new, encrypted_share=c_key_new, randomness=randomness
        )
        private_new = Party1Private(x1=x1_new, paillier_priv=dk_new, c_key_randomness=randomness)
        pdl_statement, pdl_proof, composite_dlog_proof = paillier_key_pair.pdl_proof(private_new)
        return (
            ek_new,
            c_key_new,
            private_new,
            correct_key_proof,
            pdl_statement,
            pdl_proof,
            composite_dlog_proof,
        )

    def to_mta_message_b(self, message_b: MessageB) -> tuple[Scalar, int]:
        """Finish an MtA exchange against the encrypted share; returns alpha and its raw value."""
        return message_b.verify_proofs_get_alpha(self.paillier_priv, self.x1)


@dataclass(frozen=True)
class PaillierKeyPair:
    """A Paillier key pair and the encryption of party one's share under it."""

    ek: EncryptionKey
    dk: DecryptionKey
    encrypted_share: int
    randomness: int

    @classmethod
    def generate_keypair_and_encrypted_share(cls, keygen: EcKeyPair) -> PaillierKeyPair:
        ek, dk = paillier.generate_keypair(PAILLIER_KEY_BITS)
        return cls.generate_encrypted_share_from_fixed_paillier_keypair(ek, dk, keygen)

    @classmethod
    def generate_encrypted_share_from_fixed_paillier_keypair(
        cls, ek: EncryptionKey, dk: DecryptionKey, keygen: EcKeyPair
    ) -> PaillierKeyPair:
        randomness = paillier.sample_randomness(ek)
        encrypted_share = paillier.encrypt_with_randomness(
            ek, keygen.secret_share.to_int(), randomness
        )
        return cls(ek=ek, dk=dk, encrypted_share=encrypted_share, randomness=randomness)

    def generate_ni_proof_correct_key(self) -> NiCorrectKeyProof:
        return NiCorrectKeyProof.prove(self.dk)

    def pdl_proof(
        self, party1_private: Party1Private
    ) -> tuple[PDLwSlackStatement, PDLwSlackProof, CompositeDLogProof]:
        """Prove that the encrypted share is the discrete log of party one's public share."""
        n_tilde, h1, h2, xhi = generate_h1_h2_n_tilde()
        dlog_statement = DLogStatement(n=n_tilde, g=h1, ni=h2)
        composite_dlog_proof = CompositeDLogProof.prove(dlog_statement, xhi)

        generator = Point.generator()
        statement = PDLwSlackStatement(
            ciphertext=self.encrypted_share,
            ek=self.ek,
            q_point=generator * party1_private.x1,
            g_point=generator,
            h1=dlog_statement.g,
            h2=dlog_statement.ni,
            n_tilde=dlog_statement.n,
        )
        witness = PDLwSlackWitness(x=party1_private.x1, r=party1_private.c_key_randomness)
        return statement, PDLwSlackProof.prove(witness, statement), composite_dlog_proof


def keygen_first_message() -> tuple[KeyGenMsg1, CommWitness, EcKeyPair]:
    """Pick a secret share and commit to its public share and proof."""
    secret_share = Scalar.random()
    public_share = Point.generator() * secret_share
    d_log_proof = DLogProof.prove(secret_share)

    pk_commitment_blind_factor = sample_bits(SECURITY_BITS)
    pk_commitment = create_commitment(point_to_int(public_share), pk_commitment_blind_factor)

    zk_pok_blind_factor = sample_bits(SECURITY_BITS)
    zk_pok_commitment = create_commitment(
        point_to_int(d_log_proof.pk_t_rand_commitment), zk_pok_blind_factor
    )

    key_pair = EcKeyPair(public_share=public_share, secret_share=secret_share)
    return (
        KeyGenMsg1(
            pk_commitment=pk_commitment,
            zk_pok_commitment=zk_pok_commitment,
            public_share=public_share,
        ),
        CommWitness(
            pk_commitment_blind_factor=pk_commitment_blind_factor,
            zk_pok_blind_factor=zk_pok_blind_factor,
            public_share=public_share,
            d_log_proof=d_log_proof,
        ),
        key_pair,
    )


def keygen_second_message(
    comm_witness: CommWitness, ec_key_pair_party1: EcKeyPair, proof: DLogProof
) -> tuple[KeyGenMsg2, PaillierKeyPair, Party1Private]:
    """Open the commitments and send the Paillier-encrypted share with its proofs.

    Raises ProofError if the discrete log proof does not verify.
    """
    proof.verify()
    paillier_key_pair = PaillierKeyPair.generate_keypair_and_encrypted_share(ec_key_pair_party1)
    private = Party1Private.set_private_key(ec_key_pair_party1, paillier_key_pair)
    pdl_statement, pdl_proof, composite_dlog_proof = paillier_key_pair.pdl_proof(private)
    correct_key_proof = paillier_key_pair.generate_ni_proof_correct_key()
    message = KeyGenMsg2(
        comm_witness=comm_witness,
        ek=paillier_key_pair.ek,
        c_key=paillier_key_pair.encrypted_share,
        correct_key_proof=correct_key_proof,
        pdl_statement=pdl_statement,
        pdl_proof=pdl_proof,
        composite_dlog_proof=composite_dlog_proof,
    )
    return message, paillier_key_pair, private


def compute_pubkey(local_private: EcKeyPair, other_share_public_share: Point) -> Point:
    """The joint public key from the local secret share and the other public share."""
    return other_share_public_share * local_private.secret_share


def sign_first_message() -> tuple[PreSignMsg1, EphEcKeyPair]:
    """Pick the nonce k1 and prove that R1 and c share its discrete log."""
    generator = Point.generator()
    h = Point.base_point2()
    k1 = Scalar.random()
    r1 = generator * k1
    c = h * k1
    statement = ECDDHStatement(g1=generator, h1=r1, g2=h, h2=c)
    d_log_proof = ECDDHProof.prove(ECDDHWitness(x=k1), statement)
    return (
        PreSignMsg1(d_log_proof=d_log_proof, public_share=r1, c=c),
        EphEcKeyPair(public_share=r1, secret_share=k1),
    )


def verify_commitments_and_dlog_proof(
    party_two_first_message: Any, party_two_comm_witness: Any
) -> None:
    """Check party two's opened nonce commitments and DDH proof; raise ProofError if bad."""
    public_share = party_two_comm_witness.public_share
    d_log_proof = party_two_comm_witness.d_log_proof

    pk_ok = party_two_first_message.pk_commitment == create_commitment(
        point_to_int(public_share), party_two_comm_witness.pk_commitment_blind_factor
    )
    zk_ok = party_two_first_message.zk_pok_commitment == create_commitment(
        hash_points(d_log_proof.a1, d_log_proof.a2),
        party_two_comm_witness.zk_pok_blind_factor,
    )
    if not (pk_ok and zk_ok):
        raise ProofError("commitments of party two do not open")

    statement = ECDDHStatement(
        g1=Point.generator(),
        h1=public_share,
        g2=Point.base_point2(),
        h2=party_two_comm_witness.c,
    )
    d_log_proof.verify(statement)


def sign_second_message(
    party_one_private: Party1Private,
    party_one_public: Point,
    partial_sig_c3: int,
    k1: EphEcKeyPair,
    ephemeral_other_public_share: Point,
    r3_pub: Point,
    message: int,
) -> EncryptedSignature:
    """Decrypt party two's partial signature and turn it into an adaptor signature."""
    r = r3_pub * k1.secret_share
    rx = Scalar.from_int(r.x_coord() % CURVE_ORDER)

    s_tag = paillier.decrypt(party_one_private.paillier_priv, partial_sig_c3)
    s_prime = Scalar.from_int(s_tag % CURVE_ORDER)

    # U = r * Q + m * G
    u = party_one_public * rx + Point.generator() * Scalar.from_int(message)
    if ephemeral_other_public_share == u:
        raise AdaptorError(ErrorKind.INVALID_SIG, "invalid pre-signature")

    sd_prime = k1.secret_share.invert() * s_prime
    return EncryptedSignature(sd_prime=sd_prime.to_int())


def recover_witness(adaptor: EncryptedSignature, signature: Signature) -> Scalar:
    """Extract the adaptor witness from a pre-signature and its completed signature."""
    sd_prime_inv = Scalar.from_int(adaptor.sd_prime).invert()
    y = Scalar.from_int(signature.s) * sd_prime_inv
    return y.invert()


def verify_signature(signature: Signature, pubkey: Point, message: int) -> None:
    """Raise AdaptorError(INVALID_SIG) unless the signature is valid and low-s."""
    s_fe = Scalar.from_int(signature.s)
    if s_fe.to_int() == 0:
        raise AdaptorError(ErrorKind.INVALID_SIG)
    rx_fe = Scalar.from_int(signature.r)
    s_inv = s_fe.invert()
    e_fe = Scalar.from_int(message % CURVE_ORDER)

    u1 = Point.generator() * e_fe * s_inv
    u2 = pubkey * rx_fe * s_inv
    total = u1 + u2
    if total.is_infinity() or signature.r < 0:
        raise AdaptorError(ErrorKind.INVALID_SIG)

    rx_bytes = _minimal_bytes(signature.r)
    sum_bytes = _minimal_bytes(total.x_coord())
    # Requiring the low s value guards against malleability.
    if hmac.compare_digest(rx_bytes, sum_bytes) and signature.s < CURVE_ORDER - signature.s:
        return
    raise AdaptorError(ErrorKind.INVALID_SIG)


def _minimal_bytes(value: int) -> bytes:
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")


def generate_h1_h2_n_tilde() -> tuple[int, int, int, int]:
    """A modulus N~ with h1, h2 = h1^(-xhi) and the secret xhi."""
    ek_tilde, dk_tilde = paillier.generate_keypair(PAILLIER_KEY_BITS)
    phi = (dk_tilde.p - 1) * (dk_tilde.q - 1)
    h1 = sample_below(phi)
    xhi = sample_below(_XHI_BOUND)
    h1_inv = mod_inv(h1, ek_tilde.n)
    h2 = pow(h1_inv, xhi, ek_tilde.n)
    return ek_tilde.n, h1, h2, xhi