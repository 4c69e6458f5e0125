"""Linked-data proof signing backend for ldp_vc credentials."""

from .signer import LdSigner, verify_ld_proof

__all__ = ["LdSigner", "verify_ld_proof"]
