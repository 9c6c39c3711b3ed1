"""Multiplicative-to-additive share conversion over Paillier encryption.

Alice holds a and Bob holds b; after one exchange Alice holds alpha and Bob
holds beta with alpha + beta = a * b modulo the curve order.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from . import paillier
from .paillier import DecryptionKey, EncryptionKey
from .proofs import DLogProof, DLogStatement, ProofError
from .range_proofs import AliceProof
from .secp256k1 import Point, Scalar, sample_below
from .signature import AdaptorError, ErrorKind


@dataclass(frozen=True)
class PartyPrivate:
    """A party's private values together with its Paillier decryption key."""

    u_i: Scalar
    x_i: Scalar
    dk: DecryptionKey

    def decrypt(self, ciphertext: int) -> int:
        return paillier.decrypt(self.dk, ciphertext)


@dataclass(frozen=True)
class MessageA:
    """Alice's encrypted input with range proofs for the other parties."""

    c: int
    range_proofs: tuple[AliceProof, ...] = ()

    @classmethod
    def a(
        cls,
        a: Scalar,
        alice_ek: EncryptionKey,
        dlog_statements: Sequence[DLogStatement] = (),
    ) -> tuple[MessageA, int]:
        """Encrypt a under fresh randomness; returns the message and the randomness.

        With no dlog statements no range proofs are produced.
        """
        randomness = sample_below(alice_ek.n)
        message = cls.a_with_predefined_randomness(a, alice_ek, randomness, dlog_statements)
        return message, randomness

    @classmethod
    def a_with_predefined_randomness(
        cls,
        a: Scalar,
        alice_ek: EncryptionKey,
        randomness: int,
        dlog_statements: Sequence[DLogStatement] = (),
    ) -> MessageA:
        c_a = paillier.encrypt_with_randomness(alice_ek, a.to_int(), randomness)
        proofs = tuple(
            AliceProof.generate(a.to_int(), c_a, alice_ek, statement, randomness)
            for statement in dlog_statements
        )
        return cls(c=c_a, range_proofs=proofs)


@dataclass(frozen=True)
class MessageB:
    """Bob's answer: Enc(a * b + beta_tag) with proofs of knowledge of b and beta_tag."""

    c: int
    b_proof: DLogProof
    beta_tag_proof: DLogProof

    @classmethod
    def b(
        cls,
        b: Scalar,
        alice_ek: EncryptionKey,
        m_a: MessageA,
        dlog_statements: Sequence[DLogStatement] = (),
    ) -> tuple[MessageB, Scalar, int, int]:
        """Answer Alice's message; returns (message, beta, randomness, beta_tag)."""
        beta_tag = sample_below(alice_ek.n)
        randomness = sample_below(alice_ek.n)
        message, beta = cls.b_with_predefined_randomness(
            b, alice_ek, m_a, randomness, beta_tag, dlog_statements
        )
        return message, beta, randomness, beta_tag

    @classmethod
    def b_with_predefined_randomness(
        cls,
        b: Scalar,
        alice_ek: EncryptionKey,
        m_a: MessageA,
        randomness: int,
        beta_tag: int,
        dlog_statements: Sequence[DLogStatement] = (),
    ) -> tuple[MessageB, Scalar]:
        statements = list(dlog_statements)
        if len(m_a.range_proofs) != len(statements):
            raise AdaptorError(ErrorKind.INVALID_KEY, "range proof count does not match")
        if not all(
            proof.verify(m_a.c, alice_ek, statement)
            for proof, statement in zip(m_a.range_proofs, statements)
        ):
            raise AdaptorError(ErrorKind.INVALID_KEY, "range proof does not verify")

        beta_tag_fe = Scalar.from_int(beta_tag)
        c_beta_tag = paillier.encrypt_with_randomness(alice_ek, beta_tag, randomness)
        b_c_a = paillier.mul(alice_ek, m_a.c, b.to_int())
        c_b = paillier.add(alice_ek, b_c_a, c_beta_tag)
        beta = -beta_tag_fe
        message = cls(
            c=c_b,
            b_proof=DLogProof.prove(b),
            beta_tag_proof=DLogProof.prove(beta_tag_fe),
        )
        return message, beta

    def _check_and_get_alpha(self, plaintext: int, a: Scalar) -> Scalar:
        alpha = Scalar.from_int(plaintext)
        g_alpha = Point.generator() * alpha
        try:
            self.b_proof.verify()
            self.beta_tag_proof.verify()
            ba_btag = self.b_proof.pk * a + self.beta_tag_proof.pk
        except ProofError:
            raise AdaptorError(ErrorKind.INVALID_KEY, "dlog proof does not verify") from None
        # Together with the proof for beta_tag this shows the ciphertext is well formed.
        if ba_btag != g_alpha:
            raise AdaptorError(ErrorKind.INVALID_KEY, "ciphertext does not match the proofs")
        return alpha

    def verify_proofs_get_alpha(self, dk: DecryptionKey, a: Scalar) -> tuple[Scalar, int]:
        """Decrypt Alice's share; returns alpha and the raw decrypted value."""
        plaintext = paillier.decrypt(dk, self.c)
        return self._check_and_get_alpha(plaintext, a), plaintext

    def verify_proofs_get_alpha_gg18(self, private: PartyPrivate, a: Scalar) -> Scalar:
        """Decrypt Alice's share with a party's private key; returns alpha."""
        return self._check_and_get_alpha(private.decrypt(self.c), a)

    @staticmethod
    def verify_b_against_public(public_gb: Point, mta_gb: Point) -> bool:
        return public_gb == mta_gb