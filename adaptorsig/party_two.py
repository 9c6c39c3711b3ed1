"""The second party of the two-party adaptor signature protocol.

Party two holds a share of the signing key and, after key generation, the
Paillier encryption of party one's share. While signing it commits to its
nonces, folds the adaptor witness into one of them, and sends party one an
encrypted partial signature. Given party one's adaptor signature and the
witness it can then produce the final ECDSA signature.
"""

from __future__ import annotations

from dataclasses import dataclass

from . import paillier, party_one
from .mta import MessageA, MessageB
from .paillier import EncryptionKey
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
from .signature import SECURITY_BITS, EncryptedSignature, Signature
from .zk_pdl_with_slack import PDLwSlackProof, PDLwSlackStatement

PAILLIER_KEY_SIZE = 2048


class PartyTwoError(ProofError):
    """Party two rejected what party one sent during key generation."""


@dataclass(frozen=True)
class EcKeyPair:
    public_share: Point
    secret_share: Scalar


@dataclass(frozen=True)
class EccKeyPair:
    """An ephemeral nonce and its public point."""

    public_share: Point
    secret_share: Scalar


@dataclass(frozen=True)
class DlogCommWitness:
    """The opening of party two's nonce commitments."""

    pk_commitment_blind_factor: int
    zk_pok_blind_factor: int
    public_share: Point
    d_log_proof: ECDDHProof
    c: Point  # secret_share * base_point2


@dataclass(frozen=True)
class KeyGenMsg1:
    d_log_proof: DLogProof
    public_share: Point


@dataclass(frozen=True)
class PreSignMsg1:
    pk_commitment: int
    zk_pok_commitment: int


@dataclass(frozen=True)
class PreSignRound1Local:
    """Party two's private state after the first pre-signing round."""

    k2_pair: EccKeyPair
    k3_pair: EccKeyPair
    k2_commit: DlogCommWitness
    k3_commit: DlogCommWitness


@dataclass(frozen=True)
class PreSignMsg2:
    c3: int
    comm_witness: DlogCommWitness
    k3_public: Point
    message: int


@dataclass(frozen=True)
class PaillierPublic:
    """Party one's Paillier public key and its encrypted secret share."""

    ek: EncryptionKey
    encrypted_secret_share: int

    @staticmethod
    def pdl_verify(
        composite_dlog_proof: CompositeDLogProof,
        pdl_w_slack_statement: PDLwSlackStatement,
        pdl_w_slack_proof: PDLwSlackProof,
        paillier_public: PaillierPublic,
        q1: Point,
    ) -> None:
        """Raise PartyTwoError unless the ciphertext encrypts the discrete log of q1."""
        if (
            pdl_w_slack_statement.ek != paillier_public.ek
            or pdl_w_slack_statement.ciphertext != paillier_public.encrypted_secret_share
            or pdl_w_slack_statement.q_point != q1
        ):
            raise PartyTwoError("party two pdl verify failed: statement does not match")
        dlog_statement = DLogStatement(
            n=pdl_w_slack_statement.n_tilde,
            g=pdl_w_slack_statement.h1,
            ni=pdl_w_slack_statement.h2,
        )
        try:
            composite_dlog_proof.verify(dlog_statement)
            pdl_w_slack_proof.verify(pdl_w_slack_statement)
        except ProofError as exc:
            raise PartyTwoError("party two pdl verify failed") from exc

    @staticmethod
    def verify_ni_proof_correct_key(proof: NiCorrectKeyProof, ek: EncryptionKey) -> None:
        """Raise ProofError unless the key is large enough and the proof holds."""
        if ek.n.bit_length() < PAILLIER_KEY_SIZE - 1:
            raise ProofError("paillier modulus is too small")
        proof.verify(ek)


@dataclass(frozen=True)
class Party2Private:
    """Party two's secret share of the signing key."""

    x2: Scalar

    @classmethod
    def set_private_key(cls, ec_key: EcKeyPair) -> Party2Private:
        return cls(x2=ec_key.secret_share)

    def update_private_key(self, factor: int) -> Party2Private:
        return Party2Private(x2=self.x2 * Scalar.from_int(factor))

    def to_mta_message_b(self, ek: EncryptionKey, ciphertext: int) -> tuple[MessageB, Scalar]:
        """Answer party one's encrypted share in an MtA exchange; returns the message and beta."""
        message_a = MessageA(c=ciphertext, range_proofs=())
        message_b, beta, _, _ = MessageB.b(self.x2, ek, message_a, ())
        return message_b, beta


def _key_pair_from_secret(secret_share: Scalar) -> tuple[KeyGenMsg1, EcKeyPair]:
    public_share = Point.generator() * secret_share
    d_log_proof = DLogProof.prove(secret_share)
    return (
        KeyGenMsg1(d_log_proof=d_log_proof, public_share=public_share),
        EcKeyPair(public_share=public_share, secret_share=secret_share),
    )


def keygen_first_message() -> tuple[KeyGenMsg1, EcKeyPair]:
    """Pick a random secret share and prove knowledge of it."""
    return _key_pair_from_secret(Scalar.random())


def create_with_fixed_secret_share(secret_share: Scalar) -> tuple[KeyGenMsg1, EcKeyPair]:
    """Like keygen_first_message, but with a given secret share."""
    return _key_pair_from_secret(secret_share)


def keygen_second_message(
    party_one_first_message: party_one.KeyGenMsg1,
    party_one_second_message: party_one.KeyGenMsg2,
    salt: bytes | None = None,
) -> PaillierPublic:
    """Check everything party one sent and keep its Paillier key and encrypted share.

    Raises PartyTwoError if any commitment or proof fails.
    """
    paillier_public = PaillierPublic(
        ek=party_one_second_message.ek,
        encrypted_secret_share=party_one_second_message.c_key,
    )
    PaillierPublic.pdl_verify(
        party_one_second_message.composite_dlog_proof,
        party_one_second_message.pdl_statement,
        party_one_second_message.pdl_proof,
        paillier_public,
        party_one_second_message.comm_witness.public_share,
    )
    try:
        party_one_second_message.correct_key_proof.verify(paillier_public.ek, salt)
    except ProofError as exc:
        raise PartyTwoError("correct key proof does not verify") from exc
    try:
        verify_commitments_and_dlog_proof(party_one_first_message, party_one_second_message)
    except ProofError as exc:
        raise PartyTwoError("commitments or dlog proof of party one do not verify") from exc
    return paillier_public


def verify_commitments_and_dlog_proof(
    party_one_first_message: party_one.KeyGenMsg1,
    party_one_second_message: party_one.KeyGenMsg2,
) -> None:
    """Check party one's opened key commitments and dlog proof; raise ProofError if bad."""
    witness = party_one_second_message.comm_witness
    d_log_proof = witness.d_log_proof

    pk_ok = party_one_first_message.pk_commitment == create_commitment(
        point_to_int(witness.public_share), witness.pk_commitment_blind_factor
    )
    zk_ok = party_one_first_message.zk_pok_commitment == create_commitment(
        point_to_int(d_log_proof.pk_t_rand_commitment), witness.zk_pok_blind_factor
    )
    if not (pk_ok and zk_ok):
        raise ProofError("commitments of party one do not open")
    d_log_proof.verify()


def compute_pubkey(local_share: EcKeyPair, other_share_public_share: Point) -> Point:
    """The joint public key from the local secret share and the other public share."""
    return other_share_public_share * local_share.secret_share


def _commit_to_dlog(x: Scalar) -> tuple[PreSignMsg1, DlogCommWitness, EccKeyPair]:
    g = Point.generator()
    h = Point.base_point2()
    x_pub = g * x
    c = h * x
    statement = ECDDHStatement(g1=g, h1=x_pub, g2=h, h2=c)
    d_log_proof = ECDDHProof.prove(ECDDHWitness(x=x), statement)

    pk_commitment_blind_factor = sample_bits(SECURITY_BITS)
    pk_commitment = create_commitment(point_to_int(x_pub), pk_commitment_blind_factor)

    zk_pok_blind_factor = sample_bits(SECURITY_BITS)
    zk_pok_commitment = create_commitment(
        hash_points(d_log_proof.a1, d_log_proof.a2), zk_pok_blind_factor
    )

    return (
        PreSignMsg1(pk_commitment=pk_commitment, zk_pok_commitment=zk_pok_commitment),
        DlogCommWitness(
            pk_commitment_blind_factor=pk_commitment_blind_factor,
            zk_pok_blind_factor=zk_pok_blind_factor,
            public_share=x_pub,
            d_log_proof=d_log_proof,
            c=c,
        ),
        EccKeyPair(public_share=x_pub, secret_share=x),
    )


def sign_first_message(witness: Scalar) -> tuple[PreSignMsg1, PreSignRound1Local]:
    """Pick the nonce k2, set k3 = witness * k2 and commit to k2."""
    k2 = Scalar.random()
    k3 = witness * k2
    message, k2_commit, k2_pair = _commit_to_dlog(k2)
    _, k3_commit, k3_pair = _commit_to_dlog(k3)
    local = PreSignRound1Local(
        k2_pair=k2_pair, k3_pair=k3_pair, k2_commit=k2_commit, k3_commit=k3_commit
    )
    return message, local


def _verify_party_one_nonce(party_one_first_message: party_one.PreSignMsg1) -> None:
    statement = ECDDHStatement(
        g1=Point.generator(),
        h1=party_one_first_message.public_share,
        g2=Point.base_point2(),
        h2=party_one_first_message.c,
    )
    party_one_first_message.d_log_proof.verify(statement)


def sign_second_message(
    k2: DlogCommWitness,
    party_one_first_message: party_one.PreSignMsg1,
    ek: EncryptionKey,
    encrypted_secret_share: int,
    local_share: EcKeyPair,
    ephemeral_local_share: EccKeyPair,
    k1_public: Point,
    k3_pair: EccKeyPair,
    message: int,
) -> PreSignMsg2:
    """Build the encrypted partial signature; raise ProofError if party one's proof fails."""
    _verify_party_one_nonce(party_one_first_message)

    x2 = Party2Private.set_private_key(local_share).x2
    q = CURVE_ORDER
    r = k1_public * k3_pair.secret_share
    rx = r.x_coord() % q

    rho = sample_below(q**2)
    k2_inv = mod_inv(ephemeral_local_share.secret_share.to_int(), q)
    partial_sig = rho * q + k2_inv * message % q
    c1 = paillier.encrypt(ek, partial_sig)
    v = k2_inv * (rx * x2.to_int() % q) % q
    c2 = paillier.mul(ek, encrypted_secret_share, v)

    return PreSignMsg2(
        c3=paillier.add(ek, c2, c1),
        comm_witness=k2,
        k3_public=k3_pair.public_share,
        message=message,
    )


def decrypt_signature(
    adaptor: EncryptedSignature,
    decryption_key: Scalar,
    r1_pub: Point,
    k3: Scalar,
) -> Signature:
    """Adapt the pre-signature with the witness into a low-s ECDSA signature."""
    s = (decryption_key.invert() * Scalar.from_int(adaptor.sd_prime)).to_int()
    s = min(s, CURVE_ORDER - s)
    r = r1_pub * k3
    return Signature(s=s, r=r.x_coord())