import dataclasses

import pytest

from adaptorsig import bench
from adaptorsig.proofs import ECDDHStatement, ProofError
from adaptorsig.secp256k1 import Point, Scalar


def test_instance_generate_points_and_proof():
    y = Scalar.random()
    pk = Point.generator() * Scalar.random()
    y_point, z_point, proof = bench.instance_generate(y, pk)
    assert y_point == Point.generator() * y
    assert z_point == pk * y
    statement = ECDDHStatement(g1=Point.generator(), h1=y_point, g2=pk, h2=z_point)
    proof.verify(statement)
    bad = ECDDHStatement(g1=Point.generator(), h1=y_point, g2=pk, h2=z_point + Point.generator())
    with pytest.raises(ProofError):
        proof.verify(bad)


def test_prove_with_assigned_point_verifies():
    base = Point.generator() * Scalar.random()
    sk = Scalar.random()
    proof = bench.prove_with_assigned_point(sk, base)
    assert proof.pk == base * sk
    assert proof.base_point == base
    proof.verify()


def test_prove_with_assigned_point_tampered_fails():
    base = Point.base_point2()
    proof = bench.prove_with_assigned_point(Scalar.random(), base)
    tampered = dataclasses.replace(proof, challenge_response=proof.challenge_response + 1)
    with pytest.raises(ProofError):
        tampered.verify()
    wrong_base = dataclasses.replace(proof, base_point=Point.generator())
    with pytest.raises(ProofError):
        wrong_base.verify()


def test_com_nonce_matches_proof():
    base = Point.generator() * Scalar.random()
    k = Scalar.random()
    r_point, proof = bench.com_nonce(k, base)
    assert r_point == base * k
    assert proof.pk == r_point
    proof.verify()


def test_com_party_two_nonce():
    base = Point.base_point2()
    r_point, proof = bench.com_party_two_nonce(base)
    assert proof.pk == r_point
    assert proof.base_point == base
    proof.verify()


def test_run_rejects_zero_iterations():
    with pytest.raises(ValueError):
        bench.run_ndss(0)
    with pytest.raises(ValueError):
        bench.run_ours(0)


def test_run_ndss_reports_all_phases():
    report = bench.run_ndss(1)
    assert report.iterations == 1
    assert set(report.timings) == {"keygen", "pre sign", "vrfy", "adapt", "recover witness"}
    assert all(ns >= 0 for ns in report.timings.values())
    assert report.timings["keygen"] > 0
    assert report.timings["pre sign"] >= report.timings["vrfy"]


def test_main_ours_prints_lines(capsys):
    assert bench.main(["--iterations", "1", "--protocol", "ours"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert len(out) == 6
    assert all(line.startswith("[ITER 1 times] Ours lindell ") for line in out)
    assert any("adapt time:" in line for line in out)
    assert any("offline time:" in line for line in out)


def test_main_rejects_bad_iterations():
    with pytest.raises(SystemExit):
        bench.main(["--iterations", "0"])


def test_report_lines_format():
    report = bench.BenchmarkReport("NDSS", 3)
    report.add("keygen", 5)
    report.add("keygen", 7)
    assert report.lines() == ["[ITER 3 times] NDSS keygen time: 12 ns"]