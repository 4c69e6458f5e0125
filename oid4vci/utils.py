"""Utility functions for the OID4VCI issuer."""

import logging
from typing import Optional, Type

from .context import IssuerContext
from .error import InvalidToken, IssuerError, NotFound
from .models.realm import AuthResult

LOGGER = logging.getLogger(__name__)


def bearer_from_header(header: Optional[str]) -> Optional[str]:
    """Extract the token from an `Authorization: Bearer` header."""
    if not header:
        return None
    try:
        scheme, cred = header.split(" ", 1)
    except ValueError:
        return None
    if scheme.lower() != "bearer":
        return None
    return cred.strip() or None


async def authenticate(
    context: IssuerContext,
    token: Optional[str],
    error: Type[IssuerError] = InvalidToken,
) -> AuthResult:
    """Resolve the bearer token or raise error."""
    result = await context.provider.authenticate(token)
    if result is None:
        LOGGER.debug("Bearer authentication failed")
        raise error("Bearer token missing or invalid")
    return result


def assert_issuer_did(context: IssuerContext, issuer_did: str):
    """Raise NotFound unless issuer_did is the configured issuer."""
    if issuer_did != context.issuer_did:
        raise NotFound("No such issuer exists.")
