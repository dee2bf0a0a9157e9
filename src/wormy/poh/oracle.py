# src/wormy/poh/oracle.py
from __future__ import annotations

"""
Proof-of-humanity oracle.

Gated actions call ``verify(signature, claimed_identity)`` before touching
any state. The oracle is read-only.

Ed25519PohOracle accepts an identity when the configured PoH authority
signed ``poh_message(identity)`` with its Ed25519 key. The attestation is
issued once per identity and replayed on every action.
"""

from typing import Protocol

from wormy.crypto.sig import public_key_hex, sign_ed25519, verify_ed25519_signature

POH_DOMAIN = b"wormy-poh:v1:"


class IdentityOracle(Protocol):
    def verify(self, signature: bytes, claimed_identity: str) -> bool: ...


def poh_message(identity: str) -> bytes:
    return POH_DOMAIN + str(identity).strip().encode("utf-8")


class Ed25519PohOracle:
    def __init__(self, authority_pubkey: str) -> None:
        pk = str(authority_pubkey or "").strip()
        if not pk:
            raise ValueError("authority_pubkey must be a non-empty string")
        self.authority_pubkey = pk

    def verify(self, signature: bytes, claimed_identity: str) -> bool:
        if not signature or not str(claimed_identity or "").strip():
            return False
        return verify_ed25519_signature(message=poh_message(claimed_identity), sig=signature, pubkey=self.authority_pubkey)


class AllowAllOracle:
    """Accepts every identity. Only for WORMY_MODE=dev."""

    def verify(self, signature: bytes, claimed_identity: str) -> bool:
        return bool(str(claimed_identity or "").strip())


def issue_attestation(*, identity: str, authority_privkey: str) -> bytes:
    """Sign a PoH attestation for ``identity`` (authority-side helper)."""
    return sign_ed25519(message=poh_message(identity), privkey=authority_privkey)


def authority_pubkey_for(authority_privkey: str) -> str:
    return public_key_hex(authority_privkey)
