"""Compact JWT signing backend for jwt_vc credentials."""

from .signer import JwtVcSigner

__all__ = ["JwtVcSigner"]
