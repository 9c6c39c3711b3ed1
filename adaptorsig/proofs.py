"""Hash commitments and zero-knowledge proofs used by the signing protocol."""

from __future__ import annotations

import hashlib
import math
from dataclasses import dataclass
from functools import lru_cache

from .paillier import DecryptionKey, EncryptionKey
from .secp256k1 import Point, Scalar, sample_bits

DEFAULT_SALT = b"adaptor-correct-key"
_CORRECT_KEY_ROUNDS = 11
_SMALL_PRIME_BOUND = 6370
_COMPOSITE_SLACK_BITS = 256 + 128


class ProofError(Exception):
    """A zero-knowledge proof or commitment failed to verify."""


def _int_bytes(value: int) -> bytes:
    if value < 0:
        raise ValueError("cannot hash a negative integer")
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def hash_ints(*args: int) -> int:
    """SHA-256 over the minimal big-endian bytes of each integer."""
    digest = hashlib.sha256()
    for value in args:
        digest.update(_int_bytes(value))
    return int.from_bytes(digest.digest(), "big")


def hash_points(*args: Point) -> int:
    """SHA-256 over the compressed encodings of the points."""
    digest = hashlib.sha256()
    for point in args:
        digest.update(point.to_bytes(True))
    return int.from_bytes(digest.digest(), "big")


def point_to_int(point: Point) -> int:
    """The compressed encoding of a point read as a big-endian integer."""
    return int.from_bytes(point.to_bytes(True), "big")


def create_commitment(message: int, blind_factor: int) -> int:
    """A hash commitment to message under the given blinding factor."""
    return hash_ints(message, blind_factor)


def _challenge(*points: Point) -> Scalar:
    try:
        return Scalar.from_int(hash_points(*points))
    except ValueError:
        raise ProofError("proof involves the point at infinity") from None


@dataclass(frozen=True)
class DLogProof:
    """A Schnorr proof of knowledge of the discrete log of pk."""

    pk: Point
    pk_t_rand_commitment: Point
    challenge_response: Scalar

    @classmethod
    def prove(cls, secret: Scalar) -> DLogProof:
        g = Point.generator()
        nonce = Scalar.random()
        commitment = g * nonce
        pk = g * secret
        challenge = _challenge(commitment, g, pk)
        return cls(pk, commitment, nonce - challenge * secret)

    def verify(self) -> None:
        g = Point.generator()
        challenge = _challenge(self.pk_t_rand_commitment, g, self.pk)
        expected = g * self.challenge_response + self.pk * challenge
        if expected != self.pk_t_rand_commitment:
            raise ProofError("discrete log proof does not verify")


@dataclass(frozen=True)
class ECDDHStatement:
    g1: Point
    h1: Point
    g2: Point
    h2: Point


@dataclass(frozen=True)
class ECDDHWitness:
    x: Scalar


@dataclass(frozen=True)
class ECDDHProof:
    """A proof that h1 = x * g1 and h2 = x * g2 for the same x."""

    a1: Point
    a2: Point
    z: Scalar

    @classmethod
    def prove(cls, witness: ECDDHWitness, statement: ECDDHStatement) -> ECDDHProof:
        s = Scalar.random()
        a1 = statement.g1 * s
        a2 = statement.g2 * s
        e = _challenge(statement.g1, statement.h1, statement.g2, statement.h2, a1, a2)
        return cls(a1, a2, s + e * witness.x)

    def verify(self, statement: ECDDHStatement) -> None:
        e = _challenge(statement.g1, statement.h1, statement.g2, statement.h2, self.a1, self.a2)
        if statement.g1 * self.z != self.a1 + statement.h1 * e:
            raise ProofError("first relation of the DDH proof does not hold")
        if statement.g2 * self.z != self.a2 + statement.h2 * e:
            raise ProofError("second relation of the DDH proof does not hold")


@dataclass(frozen=True)
class DLogStatement:
    """The statement ni = g^(-secret) modulo a composite n."""

    n: int
    g: int
    ni: int


@dataclass(frozen=True)
class CompositeDLogProof:
    """A proof of knowledge of the discrete log relating g and ni modulo n."""

    x: int
    y: int

    @classmethod
    def prove(cls, statement: DLogStatement, secret: int) -> CompositeDLogProof:
        r = sample_bits(statement.n.bit_length() + _COMPOSITE_SLACK_BITS)
        x = pow(statement.g, r, statement.n)
        e = hash_ints(x, statement.g, statement.n, statement.ni)
        return cls(x, r + e * secret)

    def verify(self, statement: DLogStatement) -> None:
        n, g, ni = statement.n, statement.g, statement.ni
        if n <= 1 or not 1 < g < n or not 0 < ni < n or math.gcd(g, n) != 1:
            raise ProofError("malformed composite dlog statement")
        if self.y < 0 or not 0 <= self.x < n:
            raise ProofError("malformed composite dlog proof")
        e = hash_ints(self.x, g, n, ni)
        if pow(g, self.y, n) * pow(ni, e, n) % n != self.x:
            raise ProofError("composite dlog proof does not verify")


@lru_cache(maxsize=1)
def _small_primes() -> tuple[int, ...]:
    sieve = bytearray([1]) * _SMALL_PRIME_BOUND
    sieve[0:2] = b"\x00\x00"
    for i in range(2, math.isqrt(_SMALL_PRIME_BOUND - 1) + 1):
        if sieve[i]:
            sieve[i * i :: i] = bytearray(len(sieve[i * i :: i]))
    return tuple(i for i, flag in enumerate(sieve) if flag)


def _derive_rho(n: int, salt: bytes, index: int) -> int:
    length = (n.bit_length() + 7) // 8
    prefix = _int_bytes(n) + salt + index.to_bytes(4, "big")
    stream = b""
    counter = 0
    while len(stream) < length:
        stream += hashlib.sha256(prefix + counter.to_bytes(4, "big")).digest()
        counter += 1
    return int.from_bytes(stream[:length], "big") % n


@dataclass(frozen=True)
class NiCorrectKeyProof:
    """A non-interactive proof that a Paillier modulus is well formed."""

    sigma_vec: tuple[int, ...]

    @classmethod
    def prove(cls, dk: DecryptionKey, salt: bytes | None = None) -> NiCorrectKeyProof:
        salt = DEFAULT_SALT if salt is None else bytes(salt)
        n = dk.n
        exponent = pow(n, -1, (dk.p - 1) * (dk.q - 1))
        return cls(
            tuple(pow(_derive_rho(n, salt, i), exponent, n) for i in range(_CORRECT_KEY_ROUNDS))
        )

    def verify(self, ek: EncryptionKey, salt: bytes | None = None) -> None:
        salt = DEFAULT_SALT if salt is None else bytes(salt)
        n = ek.n
        if len(self.sigma_vec) != _CORRECT_KEY_ROUNDS:
            raise ProofError("wrong number of proof elements")
        if any(n % prime == 0 for prime in _small_primes()):
            raise ProofError("modulus has a small factor")
        for index, sigma in enumerate(self.sigma_vec):
            if pow(sigma, n, n) != _derive_rho(n, salt, index):
                raise ProofError("correct key proof does not verify")