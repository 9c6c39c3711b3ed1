"""Proof that a Paillier ciphertext encrypts the discrete log of a curve point.

Statement (c, ek, Q, G); witness (x, r) with Q = x * G and c = Enc(ek, x, r).
Because of the range proof the soundness has slack: x lies in [-q^3, q^3].
"""

from __future__ import annotations

from dataclasses import dataclass

from .paillier import EncryptionKey
from .proofs import ProofError, hash_ints, point_to_int
from .secp256k1 import N as CURVE_ORDER
from .secp256k1 import Point, Scalar, mod_inv, sample_below, sample_range


class ZkPdlWithSlackError(ProofError):
    """The PDL-with-slack proof failed to verify."""


@dataclass(frozen=True)
class PDLwSlackStatement:
    ciphertext: int
    ek: EncryptionKey
    q_point: Point
    g_point: Point
    h1: int
    h2: int
    n_tilde: int


@dataclass(frozen=True)
class PDLwSlackWitness:
    x: Scalar
    r: int


def commitment_unknown_order(h1: int, h2: int, n_tilde: int, x: int, r: int) -> int:
    """h1^x * h2^r modulo n_tilde; a negative r uses the inverse of h2."""
    h1_x = pow(h1, x, n_tilde)
    if r < 0:
        h2_r = pow(mod_inv(h2, n_tilde), -r, n_tilde)
    else:
        h2_r = pow(h2, r, n_tilde)
    return h1_x * h2_r % n_tilde


def _challenge(statement: PDLwSlackStatement, z: int, u1: Point, u2: int, u3: int) -> int:
    return hash_ints(
        point_to_int(statement.g_point),
        point_to_int(statement.q_point),
        statement.ciphertext,
        z,
        point_to_int(u1),
        u2,
        u3,
    )


@dataclass(frozen=True)
class PDLwSlackProof:
    z: int
    u1: Point
    u2: int
    u3: int
    s1: int
    s2: int
    s3: int

    @classmethod
    def prove(cls, witness: PDLwSlackWitness, statement: PDLwSlackStatement) -> PDLwSlackProof:
        q3 = CURVE_ORDER**3
        n, nn = statement.ek.n, statement.ek.nn
        x = witness.x.to_int()

        alpha = sample_below(q3)
        beta = sample_range(1, n - 1)
        rho = sample_below(CURVE_ORDER * statement.n_tilde)
        gamma = sample_below(q3 * statement.n_tilde)

        z = commitment_unknown_order(statement.h1, statement.h2, statement.n_tilde, x, rho)
        u1 = statement.g_point * Scalar.from_int(alpha)
        u2 = commitment_unknown_order(n + 1, beta, nn, alpha, n)
        u3 = commitment_unknown_order(statement.h1, statement.h2, statement.n_tilde, alpha, gamma)

        e = _challenge(statement, z, u1, u2, u3)

        return cls(
            z=z,
            u1=u1,
            u2=u2,
            u3=u3,
            s1=e * x + alpha,
            s2=commitment_unknown_order(witness.r, beta, n, e, 1),
            s3=e * rho + gamma,
        )

    def verify(self, statement: PDLwSlackStatement) -> None:
        """Raise ZkPdlWithSlackError unless the proof holds for the statement."""
        n, nn = statement.ek.n, statement.ek.nn
        try:
            e = _challenge(statement, self.z, self.u1, self.u2, self.u3)

            g_s1 = statement.g_point * Scalar.from_int(self.s1)
            y_minus_e = statement.q_point * Scalar.from_int(CURVE_ORDER - e)
            u1_test = g_s1 + y_minus_e

            u2_test_tmp = commitment_unknown_order(n + 1, self.s2, nn, self.s1, n)
            u2_test = commitment_unknown_order(u2_test_tmp, statement.ciphertext, nn, 1, -e)

            u3_test_tmp = commitment_unknown_order(
                statement.h1, statement.h2, statement.n_tilde, self.s1, self.s3
            )
            u3_test = commitment_unknown_order(u3_test_tmp, self.z, statement.n_tilde, 1, -e)
        except ValueError:
            raise ZkPdlWithSlackError("zk pdl with slack verification failed") from None

        if self.u1 != u1_test or self.u2 != u2_test or self.u3 != u3_test:
            raise ZkPdlWithSlackError("zk pdl with slack verification failed")