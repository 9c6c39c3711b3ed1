"""Signature types and errors shared by both parties."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

SECURITY_BITS = 256


@dataclass(frozen=True)
class Signature:
    """An ECDSA signature (s, r)."""

    s: int
    r: int


@dataclass(frozen=True)
class EncryptedSignature:
    """A pre-signature that becomes a signature once adapted with the witness."""

    sd_prime: int


class ErrorKind(Enum):
    INVALID_KEY = "invalid key"
    INVALID_SS = "invalid secret share"
    INVALID_COM = "invalid commitment"
    INVALID_SIG = "invalid signature"
    PHASE5_BAD_SUM = "phase 5 bad sum"
    PHASE6_ERROR = "phase 6 error"


class AdaptorError(Exception):
    """A protocol failure of a given kind."""

    def __init__(self, kind: ErrorKind, message: str | None = None) -> None:
        self.kind = kind
        super().__init__(message or kind.value)