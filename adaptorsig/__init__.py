"""Two-party ECDSA adaptor signatures on secp256k1 with Paillier presigning and zero-knowledge proofs."""

__version__ = "0.1.0"