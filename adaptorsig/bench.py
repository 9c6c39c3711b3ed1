"""Timing runs of the two-party adaptor signature protocols.

Two protocols are measured. The first is the two-party adaptor scheme in
``party_one`` and ``party_two``. The second derives the signing nonce from the
adaptor statement point Y, so that a pre-signature is checked against (Y, Z).
"""

from __future__ import annotations

import argparse
import time
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field

from . import paillier, party_one, party_two
from .proofs import (
    ECDDHProof,
    ECDDHStatement,
    ECDDHWitness,
    ProofError,
    hash_points,
)
from .secp256k1 import N as CURVE_ORDER
from .secp256k1 import Point, Scalar, mod_inv, sample_below
from .signature import AdaptorError, ErrorKind

DEFAULT_ITERATIONS = 10
MESSAGE = 1234


@dataclass(frozen=True)
class AssignedBaseDLogProof:
    """A Schnorr proof of knowledge of sk with pk = sk * base_point."""

    base_point: Point
    pk: Point
    pk_t_rand_commitment: Point
    challenge_response: Scalar

    def _challenge(self) -> Scalar:
        return Scalar.from_int(hash_points(self.pk_t_rand_commitment, self.base_point, self.pk))

    def verify(self) -> None:
        """Raise ProofError unless the proof holds for its base point."""
        challenge = self._challenge()
        expected = self.base_point * self.challenge_response + self.pk * challenge
        if expected != self.pk_t_rand_commitment:
            raise ProofError("dlog proof over the assigned base point does not verify")


@dataclass
class BenchmarkReport:
    """Accumulated nanoseconds per protocol phase over a number of iterations."""

    label: str
    iterations: int
    timings: dict[str, int] = field(default_factory=dict)

    @contextmanager
    def measure(self, phase: str) -> Iterator[None]:
        start = time.perf_counter_ns()
        try:
            yield
        finally:
            self.add(phase, time.perf_counter_ns() - start)

    def add(self, phase: str, nanoseconds: int) -> None:
        self.timings[phase] = self.timings.get(phase, 0) + nanoseconds

    def lines(self) -> list[str]:
        return [
            f"[ITER {self.iterations} times] {self.label} {phase} time: {ns} ns"
            for phase, ns in self.timings.items()
        ]


def instance_generate(y: Scalar, pk: Point) -> tuple[Point, Point, ECDDHProof]:
    """The adaptor statement Y = y * G, Z = y * pk and a proof that both share y."""
    base = Point.generator()
    y_point = base * y
    z_point = pk * y
    statement = ECDDHStatement(g1=base, h1=y_point, g2=pk, h2=z_point)
    proof = ECDDHProof.prove(ECDDHWitness(x=y), statement)
    return y_point, z_point, proof


def prove_with_assigned_point(sk: Scalar, base_point: Point) -> AssignedBaseDLogProof:
    """Prove knowledge of sk for pk = sk * base_point."""
    nonce = Scalar.random()
    commitment = base_point * nonce
    pk = base_point * sk
    challenge = Scalar.from_int(hash_points(commitment, base_point, pk))
    return AssignedBaseDLogProof(
        base_point=base_point,
        pk=pk,
        pk_t_rand_commitment=commitment,
        challenge_response=nonce - challenge * sk,
    )


def com_nonce(k: Scalar, base: Point) -> tuple[Point, AssignedBaseDLogProof]:
    """The nonce point k * base with a proof of knowledge of k."""
    return base * k, prove_with_assigned_point(k, base)


def com_party_two_nonce(base: Point) -> tuple[Point, AssignedBaseDLogProof]:
    """Like com_nonce, with a freshly sampled nonce."""
    return com_nonce(Scalar.random(), base)


def _keygen():
    p1_msg1, comm_witness, keypair_party1 = party_one.keygen_first_message()
    p2_msg1, keypair_party2 = party_two.keygen_first_message()
    p1_msg2, paillier_pair, party1_private = party_one.keygen_second_message(
        comm_witness, keypair_party1, comm_witness.d_log_proof
    )
    party_two.keygen_second_message(p1_msg1, p1_msg2)
    return keypair_party1, p2_msg1, keypair_party2, paillier_pair, party1_private


def _check_iterations(iterations: int) -> None:
    if iterations < 1:
        raise ValueError("iterations must be at least 1")


def run_ndss(iterations: int = DEFAULT_ITERATIONS) -> BenchmarkReport:
    """Run the party_one/party_two adaptor protocol and time its phases.

    The vrfy phase is party one's step that checks the pre-signature and
    produces the adaptor signature.
    """
    _check_iterations(iterations)
    report = BenchmarkReport("NDSS", iterations)
    for _ in range(iterations):
        with report.measure("keygen"):
            keypair_party1, p2_msg1, keypair_party2, paillier_pair, _ = _keygen()

        presign_start = time.perf_counter_ns()
        y = Scalar.random()
        p2_presign_msg1, p2_local = party_two.sign_first_message(y)
        eph_p1_msg1, r1 = party_one.sign_first_message()

        partial_sig = party_two.sign_second_message(
            p2_local.k2_commit,
            eph_p1_msg1,
            paillier_pair.ek,
            paillier_pair.encrypted_share,
            keypair_party2,
            p2_local.k2_pair,
            eph_p1_msg1.public_share,
            p2_local.k3_pair,
            MESSAGE,
        )
        party_one.verify_commitments_and_dlog_proof(p2_presign_msg1, partial_sig.comm_witness)
        private = party_one.Party1Private.set_private_key(keypair_party1, paillier_pair)

        with report.measure("vrfy"):
            encrypted_sig = party_one.sign_second_message(
                private,
                keypair_party1.public_share,
                partial_sig.c3,
                r1,
                partial_sig.comm_witness.public_share,
                p2_local.k3_pair.public_share,
                MESSAGE,
            )
        report.add("pre sign", time.perf_counter_ns() - presign_start)

        with report.measure("adapt"):
            signature = party_two.decrypt_signature(
                encrypted_sig, y, r1.public_share, p2_local.k3_pair.secret_share
            )

        pubkey = party_one.compute_pubkey(keypair_party1, p2_msg1.public_share)
        party_one.verify_signature(signature, pubkey, MESSAGE)

        with report.measure("recover witness"):
            party_one.recover_witness(encrypted_sig, signature)
    return report


def run_ours(iterations: int = DEFAULT_ITERATIONS) -> BenchmarkReport:
    """Run the statement-based adaptor protocol and time its phases."""
    _check_iterations(iterations)
    report = BenchmarkReport("Ours lindell", iterations)
    q = CURVE_ORDER
    for _ in range(iterations):
        with report.measure("keygen"):
            keypair_party1, p2_msg1, keypair_party2, paillier_pair, _ = _keygen()
        pk = party_one.compute_pubkey(keypair_party1, p2_msg1.public_share)

        y = Scalar.random()
        y_point, z_point, _ = instance_generate(y, pk)

        offline_start = time.perf_counter_ns()
        k1 = Scalar.random()
        r1_point, proof_1 = com_nonce(k1, y_point)
        k2 = Scalar.random()
        _, proof_2 = com_nonce(k2, y_point)
        proof_2.verify()
        proof_1.verify()
        r = (r1_point * k2).x_coord() % q

        rho = sample_below(q**2)
        k2_inv = mod_inv(k2.to_int(), q)
        partial_sig = rho * q + k2_inv * MESSAGE % q
        ek = paillier_pair.ek
        c1 = paillier.encrypt(ek, partial_sig)
        v = k2_inv * (r * keypair_party2.secret_share.to_int() % q) % q
        c2 = paillier.mul(ek, paillier_pair.encrypted_share, v)
        c3 = paillier.add(ek, c2, c1)
        report.add("offline", time.perf_counter_ns() - offline_start)

        online_start = time.perf_counter_ns()
        s1 = paillier.decrypt(paillier_pair.dk, c3)
        s_tag = mod_inv(k1.to_int(), q) * s1 % q
        s_hat = min(s_tag, q - s_tag)

        with report.measure("vrfy"):
            s_hat_inv = Scalar.from_int(mod_inv(s_hat, q))
            r_prime = (y_point * Scalar.from_int(MESSAGE) + z_point * Scalar.from_int(r)) * s_hat_inv
            if r_prime.x_coord() % q != r:
                raise AdaptorError(ErrorKind.INVALID_SIG, "pre-signature does not verify")
        now = time.perf_counter_ns()
        report.add("online", now - online_start)
        report.add("sign", now - offline_start)

        with report.measure("adapt"):
            Scalar.from_int(s_hat) * y.invert()
    return report


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return value


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="adaptorsig-bench", description="Time the two-party adaptor signature protocols."
    )
    parser.add_argument("--iterations", type=_positive_int, default=DEFAULT_ITERATIONS)
    parser.add_argument("--protocol", choices=("ndss", "ours", "both"), default="both")
    args = parser.parse_args(argv)

    runners = {"ndss": (run_ndss,), "ours": (run_ours,), "both": (run_ndss, run_ours)}
    for runner in runners[args.protocol]:
        for line in runner(args.iterations).lines():
            print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())