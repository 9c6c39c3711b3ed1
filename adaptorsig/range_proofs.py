"""Zero-knowledge range proofs for the MtA protocol.

Alice proves that the plaintext of her Paillier ciphertext is small; Bob proves
that his answer was formed from a small secret and a masked additive share.
Challenges are computed with Fiat-Shamir over SHA-256.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .paillier import EncryptionKey
from .proofs import DLogStatement, hash_ints
from .secp256k1 import N as CURVE_ORDER
from .secp256k1 import Point, Scalar, mod_inv, sample_below


def sample_from_modulo(n: int) -> int:
    """A random element of the multiplicative group modulo n."""
    while True:
        r = sample_below(n)
        if math.gcd(r, n) == 1:
            return r


def sample_from_paillier_key(ek: EncryptionKey) -> int:
    """A random unit modulo the Paillier modulus."""
    return sample_from_modulo(ek.n)


def _pedersen(h1: int, h2: int, modulus: int, x: int, r: int) -> int:
    return pow(h1, x, modulus) * pow(h2, r, modulus) % modulus


def _inverse_of_power(base: int, exponent: int, modulus: int) -> int | None:
    try:
        return mod_inv(pow(base, exponent, modulus), modulus)
    except ValueError:
        return None


@dataclass(frozen=True)
class AliceProof:
    """Alice's proof that her encrypted value lies in the expected range."""

    z: int
    e: int
    s: int
    s1: int
    s2: int

    @classmethod
    def generate(
        cls,
        a: int,
        cipher: int,
        alice_ek: EncryptionKey,
        dlog_statement: DLogStatement,
        r: int,
    ) -> AliceProof:
        """Prove knowledge of a and r with cipher = Enc(a, r); a is assumed below q."""
        q = CURVE_ORDER
        h1, h2, n_tilde = dlog_statement.g, dlog_statement.ni, dlog_statement.n
        n, nn = alice_ek.n, alice_ek.nn

        alpha = sample_below(q**3)
        beta = sample_from_paillier_key(alice_ek)
        gamma = sample_below(q**3 * n_tilde)
        ro = sample_below(q * n_tilde)
        z = _pedersen(h1, h2, n_tilde, a, ro)
        u = (alpha * n + 1) * pow(beta, n, nn) % nn
        w = _pedersen(h1, h2, n_tilde, alpha, gamma)

        e = hash_ints(n, n + 1, cipher, z, u, w)

        return cls(
            z=z,
            e=e,
            s=pow(r, e, n) * beta % n,
            s1=e * a + alpha,
            s2=e * ro + gamma,
        )

    def verify(self, cipher: int, alice_ek: EncryptionKey, dlog_statement: DLogStatement) -> bool:
        n, nn = alice_ek.n, alice_ek.nn
        h1, h2, n_tilde = dlog_statement.g, dlog_statement.ni, dlog_statement.n

        if self.s1 > CURVE_ORDER**3:
            return False
        try:
            z_e_inv = _inverse_of_power(self.z, self.e, n_tilde)
            if z_e_inv is None:
                return False
            w = pow(h1, self.s1, n_tilde) * pow(h2, self.s2, n_tilde) * z_e_inv % n_tilde

            gs1 = (self.s1 * n + 1) % nn
            cipher_e_inv = _inverse_of_power(cipher, self.e, nn)
            if cipher_e_inv is None:
                return False
            u = gs1 * pow(self.s, n, nn) * cipher_e_inv % nn
        except ValueError:
            return False

        return hash_ints(n, n + 1, cipher, self.z, u, w) == self.e


@dataclass(frozen=True)
class BobCheck:
    """Extra values bound into Bob's challenge when MtA is run with check."""

    u: Point
    x_point: Point


def _check_coordinates(check: BobCheck) -> tuple[int, int, int, int]:
    return (
        check.x_point.x_coord(),
        check.x_point.y_coord(),
        check.u.x_coord(),
        check.u.y_coord(),
    )


@dataclass(frozen=True)
class BobProof:
    """Bob's proof that his MtA answer was built from small values."""

    t: int
    z: int
    e: int
    s: int
    s1: int
    s2: int
    t1: int
    t2: int

    @classmethod
    def generate(
        cls,
        a_encrypted: int,
        mta_encrypted: int,
        b: Scalar,
        beta_prim: int,
        alice_ek: EncryptionKey,
        dlog_statement: DLogStatement,
        r: int,
        check: bool,
    ) -> tuple[BobProof, Point | None]:
        """Build the proof; with check, also return the point u bound into the challenge."""
        q = CURVE_ORDER
        h1, h2, n_tilde = dlog_statement.g, dlog_statement.ni, dlog_statement.n
        n, nn = alice_ek.n, alice_ek.nn
        b_int = b.to_int()

        alpha = sample_below(q**3)
        beta = sample_from_paillier_key(alice_ek)
        gamma = sample_below(q**2 * n)
        ro = sample_below(q * n_tilde)
        ro_prim = sample_below(q**3 * n_tilde)
        sigma = sample_below(q * n_tilde)
        tau = sample_below(q**3 * n_tilde)
        z = _pedersen(h1, h2, n_tilde, b_int, ro)
        z_prim = _pedersen(h1, h2, n_tilde, alpha, ro_prim)
        t = _pedersen(h1, h2, n_tilde, beta_prim, sigma)
        w = _pedersen(h1, h2, n_tilde, gamma, tau)
        v = pow(a_encrypted, alpha, nn) * (gamma * n + 1) * pow(beta, n, nn) % nn

        values = [n, n + 1, a_encrypted, mta_encrypted, z, z_prim, t, v, w]
        check_u = None
        if check:
            generator = Point.generator()
            check_u = generator * Scalar.from_int(alpha)
            values.extend(_check_coordinates(BobCheck(u=check_u, x_point=generator * b)))
        e = hash_ints(*values)

        proof = cls(
            t=t,
            z=z,
            e=e,
            s=pow(r, e, n) * beta % n,
            s1=e * b_int + alpha,
            s2=e * ro + ro_prim,
            t1=e * beta_prim + gamma,
            t2=e * sigma + tau,
        )
        return proof, check_u

    def verify(
        self,
        a_enc: int,
        mta_avc_out: int,
        alice_ek: EncryptionKey,
        dlog_statement: DLogStatement,
        check: BobCheck | None = None,
    ) -> bool:
        n, nn = alice_ek.n, alice_ek.nn
        h1, h2, n_tilde = dlog_statement.g, dlog_statement.ni, dlog_statement.n

        if self.s1 > CURVE_ORDER**3:
            return False
        try:
            z_e_inv = _inverse_of_power(self.z, self.e, n_tilde)
            if z_e_inv is None:
                return False
            z_prim = pow(h1, self.s1, n_tilde) * pow(h2, self.s2, n_tilde) * z_e_inv % n_tilde

            mta_e_inv = _inverse_of_power(mta_avc_out, self.e, nn)
            if mta_e_inv is None:
                return False
            v = (
                pow(a_enc, self.s1, nn)
                * pow(self.s, n, nn)
                * (self.t1 * n + 1)
                * mta_e_inv
                % nn
            )

            t_e_inv = _inverse_of_power(self.t, self.e, n_tilde)
            if t_e_inv is None:
                return False
            w = pow(h1, self.t1, n_tilde) * pow(h2, self.t2, n_tilde) * t_e_inv % n_tilde
        except ValueError:
            return False

        values = [n, n + 1, a_enc, mta_avc_out, self.z, z_prim, self.t, v, w]
        if check is not None:
            try:
                values.extend(_check_coordinates(check))
            except ValueError:
                return False
        return hash_ints(*values) == self.e


@dataclass(frozen=True)
class BobProofExt:
    """Bob's proof extended with knowledge of b such that X = b * G."""

    proof: BobProof
    u: Point

    @classmethod
    def generate(
        cls,
        a_encrypted: int,
        mta_encrypted: int,
        b: Scalar,
        beta_prim: int,
        alice_ek: EncryptionKey,
        dlog_statement: DLogStatement,
        r: int,
    ) -> BobProofExt:
        proof, u = BobProof.generate(
            a_encrypted, mta_encrypted, b, beta_prim, alice_ek, dlog_statement, r, True
        )
        return cls(proof=proof, u=u)

    def verify(
        self,
        a_enc: int,
        mta_avc_out: int,
        alice_ek: EncryptionKey,
        dlog_statement: DLogStatement,
        x_point: Point,
    ) -> bool:
        check = BobCheck(u=self.u, x_point=x_point)
        if not self.proof.verify(a_enc, mta_avc_out, alice_ek, dlog_statement, check):
            return False
        generator = Point.generator()
        left = generator * Scalar.from_int(self.proof.s1)
        right = x_point * Scalar.from_int(self.proof.e) + self.u
        return left == right