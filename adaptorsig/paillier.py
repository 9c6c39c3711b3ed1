"""The Paillier additively homomorphic cryptosystem with g = n + 1."""

from __future__ import annotations

import math
import secrets
from dataclasses import dataclass


def _primes_below(limit: int) -> list[int]:
    sieve = bytearray([1]) * limit
    sieve[0:2] = b"\x00\x00"
    for i in range(2, math.isqrt(limit - 1) + 1):
        if sieve[i]:
            sieve[i * i :: i] = bytearray(len(sieve[i * i :: i]))
    return [i for i, flag in enumerate(sieve) if flag]


_SMALL_PRIMES = _primes_below(2000)
_MILLER_RABIN_ROUNDS = 32


@dataclass(frozen=True)
class EncryptionKey:
    """A Paillier public key."""

    n: int

    @property
    def nn(self) -> int:
        return self.n * self.n


@dataclass(frozen=True)
class DecryptionKey:
    """A Paillier private key: the two prime factors of n."""

    p: int
    q: int

    @property
    def n(self) -> int:
        return self.p * self.q

    @property
    def nn(self) -> int:
        return self.n * self.n


def _is_probable_prime(candidate: int) -> bool:
    if candidate < 2:
        return False
    for prime in _SMALL_PRIMES:
        if candidate == prime:
            return True
        if candidate % prime == 0:
            return False
    d, s = candidate - 1, 0
    while d % 2 == 0:
        d //= 2
        s += 1
    for _ in range(_MILLER_RABIN_ROUNDS):
        a = secrets.randbelow(candidate - 3) + 2
        x = pow(a, d, candidate)
        if x in (1, candidate - 1):
            continue
        for _ in range(s - 1):
            x = x * x % candidate
            if x == candidate - 1:
                break
        else:
            return False
    return True


def _random_prime(bits: int) -> int:
    while True:
        candidate = secrets.randbits(bits) | (3 << (bits - 2)) | 1
        if _is_probable_prime(candidate):
            return candidate


def generate_keypair(bits: int = 2048) -> tuple[EncryptionKey, DecryptionKey]:
    """A fresh key pair whose modulus has exactly the given number of bits."""
    if bits < 32 or bits % 2:
        raise ValueError("modulus size must be an even number of at least 32 bits")
    p = _random_prime(bits // 2)
    q = _random_prime(bits // 2)
    while q == p:
        q = _random_prime(bits // 2)
    return EncryptionKey(p * q), DecryptionKey(p, q)


def sample_randomness(ek: EncryptionKey) -> int:
    """A random unit modulo n for use as encryption randomness."""
    while True:
        r = secrets.randbelow(ek.n)
        if r > 0 and math.gcd(r, ek.n) == 1:
            return r


def encrypt_with_randomness(ek: EncryptionKey, plaintext: int, randomness: int) -> int:
    nn = ek.nn
    gm = (plaintext * ek.n + 1) % nn
    return gm * pow(randomness, ek.n, nn) % nn


def encrypt(ek: EncryptionKey, plaintext: int) -> int:
    return encrypt_with_randomness(ek, plaintext, sample_randomness(ek))


def decrypt(dk: DecryptionKey, ciphertext: int) -> int:
    n, nn = dk.n, dk.nn
    lam = (dk.p - 1) * (dk.q - 1)
    u = pow(ciphertext % nn, lam, nn)
    return (u - 1) // n * pow(lam, -1, n) % n


def add(ek: EncryptionKey, c1: int, c2: int) -> int:
    """A ciphertext of the sum of the two plaintexts."""
    return c1 * c2 % ek.nn


def mul(ek: EncryptionKey, ciphertext: int, plaintext: int) -> int:
    """A ciphertext of the encrypted plaintext times a known plaintext."""
    return pow(ciphertext, plaintext, ek.nn)