# adaptorsig

Two-party ECDSA adaptor signatures over secp256k1 in pure Python.

Two parties share an ECDSA key. Party one holds its secret share and a
Paillier key pair. Party two holds its own share and a Paillier encryption of
party one's share. Together they produce an *encrypted* (pre-)signature that
becomes a valid low-s ECDSA signature only once it is adapted with a secret
witness `y`. Anyone who holds both the encrypted signature and the final
signature can recover `y`.

## Modules

- `adaptorsig.secp256k1`: `Scalar` (integers modulo the curve order) and
  `Point` arithmetic on secp256k1, `Point.base_point2()` as a second
  generator, and the helpers `sample_below`, `sample_bits`, `sample_range`
  and `mod_inv`.
- `adaptorsig.paillier`: `EncryptionKey`, `DecryptionKey`,
  `generate_keypair`, `sample_randomness`, `encrypt`,
  `encrypt_with_randomness`, `decrypt` and the homomorphic `add` and `mul`.
- `adaptorsig.proofs`: `DLogProof`, `ECDDHProof` (with `ECDDHStatement` and
  `ECDDHWitness`), `CompositeDLogProof` over a `DLogStatement`,
  `NiCorrectKeyProof` for Paillier moduli, and the hashing and commitment
  helpers `hash_ints`, `hash_points`, `point_to_int` and `create_commitment`.
- `adaptorsig.range_proofs`: the MtA range proofs `AliceProof`, `BobProof`
  (optionally bound to a `BobCheck`) and `BobProofExt`, plus
  `sample_from_modulo` and `sample_from_paillier_key`.
- `adaptorsig.mta`: multiplicative-to-additive share conversion with
  `MessageA` and `MessageB`; `PartyPrivate` holds a party's values and
  decryption key.
- `adaptorsig.zk_pdl_with_slack`: `PDLwSlackProof`, proving that a Paillier
  ciphertext encrypts the discrete log of a curve point, with
  `PDLwSlackStatement`, `PDLwSlackWitness` and `commitment_unknown_order`.
- `adaptorsig.party_one` and `adaptorsig.party_two`: the two sides of key
  generation, presigning, adapting, signature verification and witness
  recovery, plus key refresh (`Party1Private.refresh_private_key`,
  `Party2Private.update_private_key`) and conversion of the key shares into
  an MtA exchange (`to_mta_message_b` on both private types).
- `adaptorsig.signature`: the `Signature` and `EncryptedSignature` records,
  `ErrorKind` and the `AdaptorError` exception.
- `adaptorsig.bench`: the timing runs behind the `adaptorsig-bench` command.

## Installation

```
pip install .
```

There are no runtime dependencies. To run the tests:

```
pip install ".[test]"
pytest
```

## A full run

```python
from adaptorsig import party_one, party_two
from adaptorsig.secp256k1 import Scalar

# Key generation
p1_msg1, comm_witness, p1_keys = party_one.keygen_first_message()
p2_msg1, p2_keys = party_two.keygen_first_message()
p1_msg2, paillier_keys, p1_private = party_one.keygen_second_message(
    comm_witness, p1_keys, comm_witness.d_log_proof
)
party_two.keygen_second_message(p1_msg1, p1_msg2)

# The adaptor witness
y = Scalar.random()

# Presigning
p2_sign_msg1, p2_local = party_two.sign_first_message(y)
p1_sign_msg1, r1 = party_one.sign_first_message()

message = 1234
partial = party_two.sign_second_message(
    p2_local.k2_commit,
    p1_sign_msg1,
    paillier_keys.ek,
    paillier_keys.encrypted_share,
    p2_keys,
    p2_local.k2_pair,
    p1_sign_msg1.public_share,
    p2_local.k3_pair,
    message,
)
party_one.verify_commitments_and_dlog_proof(p2_sign_msg1, partial.comm_witness)

encrypted_sig = party_one.sign_second_message(
    p1_private,
    p1_keys.public_share,
    partial.c3,
    r1,
    partial.comm_witness.public_share,
    p2_local.k3_pair.public_share,
    message,
)

# Adapting with the witness yields an ordinary ECDSA signature
signature = party_two.decrypt_signature(
    encrypted_sig, y, r1.public_share, p2_local.k3_pair.secret_share
)
pubkey = party_one.compute_pubkey(p1_keys, p2_msg1.public_share)
party_one.verify_signature(signature, pubkey, message)

# The encrypted signature and the final signature reveal the witness
assert party_one.recover_witness(encrypted_sig, signature) == y
```

`party_two.keygen_second_message` takes an optional salt for the correct-key
proof; it must match the salt the proof was made with, and
`PaillierKeyPair.generate_ni_proof_correct_key` always uses the default one,
so leave it out in the ordinary flow.

Failed checks raise exceptions rather than returning status values:

- `ProofError` for a failed commitment or sigma proof;
- `ZkPdlWithSlackError` (a `ProofError`) for a failed PDL proof;
- `PartyTwoError` (a `ProofError`) when party one's key-generation
  messages do not verify;
- `AdaptorError`, carrying an `ErrorKind`, for an invalid signature or
  pre-signature (`INVALID_SIG`) or a rejected MtA message (`INVALID_KEY`).

## Benchmark

```
adaptorsig-bench [--iterations N] [--protocol ndss|ours|both]
```

runs, by default 10 times each, the presigning protocol above (`ndss`) and a
variant in which the nonce proofs are taken with respect to the statement
point `Y` and the pre-signature is checked against `(Y, Z)` (`ours`). It
prints the accumulated time of each phase in nanoseconds, one line per
phase, such as `[ITER 10 times] NDSS keygen time: ... ns`. The same runs are
available as `adaptorsig.bench.run_ndss` and `adaptorsig.bench.run_ours`,
which return a `BenchmarkReport`.

## What it does not do

- The parties exchange plain Python objects. There is no network transport
  and no wire format for the messages; carrying them between two processes
  is left to the caller.
- There is no storage of keys or protocol state.
- Signatures carry no recovery id; `SignatureRecid` exists as a record only.

## Caveats

Each key generation creates two 2048-bit Paillier moduli in pure Python,
which takes a while. Nothing here is constant-time. The package is meant for
experimenting with and measuring the protocol, not for guarding real funds.