"""Credential offers and the pre-authorized code exchange.

An offer moves from OFFERED to REDEEMED when its nonce is materialized into an
offer document, or to EXPIRED once OFFER_TTL seconds pass. The pre-authorized
code embedded in that document is redeemable exactly once at the token
endpoint.
"""

import logging
from secrets import token_urlsafe
from typing import Optional

from marshmallow import ValidationError

from .context import IssuerContext
from .error import InvalidRequest, InvalidToken
from .issuance import normalize_format
from .models.offer import (
    PRE_AUTHORIZED_CODE_GRANT_TYPE,
    CredentialOffer,
    CredentialOfferURI,
    OfferNote,
    TokenResponse,
)
from .models.realm import AuthResult
from .models.supported_cred import Format, SupportedCredential

LOGGER = logging.getLogger(__name__)

OFFER_TTL = 30
NONCE_BYTES = 16


class OfferExchange:
    """Offer creation, materialization and token exchange."""

    def __init__(self, context: IssuerContext):
        """Initialize the exchange."""
        self.context = context

    async def create_offer(
        self, auth: AuthResult, vc_type: str, fmt: Format
    ) -> CredentialOfferURI:
        """Create an offer of (vc_type, fmt) for the authenticated session."""
        LOGGER.info("Get an offer for %s - %s", vc_type, fmt.value)
        resolution_format, _ = normalize_format(fmt)
        registry = await self.context.registry()
        registry.resolve(vc_type, resolution_format)

        client_session = await self.context.provider.get_client_session(
            auth.session.id, auth.client.id
        )
        if not client_session:
            raise InvalidToken("No client session for the authenticated client")

        nonce = token_urlsafe(NONCE_BYTES)
        expires_at = self.context.clock.epoch() + OFFER_TTL
        note = OfferNote(
            offered_credential=SupportedCredential(vc_type, fmt),
            user_session_id=auth.session.id,
            client_id=auth.client.id,
            expires_at=expires_at,
        )
        try:
            value = note.to_json()
        except (TypeError, ValueError) as err:
            LOGGER.error("Could not serialize offer: %s", err)
            raise InvalidRequest("Unable to serialize offer") from err
        await self.context.notes.put(nonce, value, expires_at)

        LOGGER.info("Responding with nonce: %s", nonce)
        return CredentialOfferURI(issuer=self.context.config.issuer_url, nonce=nonce)

    async def materialize_offer(self, nonce: str) -> CredentialOffer:
        """Consume an offer nonce and embed a fresh pre-authorized code."""
        value = await self.context.notes.pop(nonce)
        if value is None:
            LOGGER.info("No pending offer for nonce %s", nonce)
            raise InvalidRequest("Offer not found or expired")

        try:
            note = OfferNote.from_json(value)
        except (ValueError, ValidationError) as err:
            LOGGER.error("Could not read offer note: %s", err)
            raise InvalidRequest("Offer is malformed") from err

        if self.context.clock.epoch() > note.expires_at:
            LOGGER.info("Offer %s expired at %s", nonce, note.expires_at)
            raise InvalidRequest("Offer not found or expired")

        client_session = await self.context.provider.get_client_session(
            note.user_session_id, note.client_id
        )
        if not client_session:
            raise InvalidToken("Session of the offer has ended")

        offered = note.offered_credential
        LOGGER.info("Creating an offer for %s - %s", offered.type, offered.format.value)
        code = await self.context.provider.issue_code(client_session)
        return CredentialOffer(
            credential_issuer=self.context.config.issuer_url,
            credentials=[offered],
            pre_authorized_code=code,
        )

    async def exchange_token(
        self,
        grant_type: Optional[str],
        code: Optional[str],
        pre_authorized_code: Optional[str] = None,
    ) -> TokenResponse:
        """Exchange a pre-authorized code for an access token.

        A missing grant type is tolerated when the legacy pre-authorized_code
        field is used.
        """
        LOGGER.info("Received token request for grant %s", grant_type)
        if grant_type is not None:
            if grant_type != PRE_AUTHORIZED_CODE_GRANT_TYPE:
                raise InvalidToken(f"Unsupported grant type {grant_type}")
        elif pre_authorized_code is None:
            raise InvalidToken("grant_type is required")

        code_to_use = code or pre_authorized_code
        if not code_to_use:
            raise InvalidToken("pre-authorized code is missing")

        result = await self.context.provider.redeem_code(code_to_use)
        if result.expired or result.illegal or not result.client_session:
            raise InvalidToken("pre-authorized code is invalid, expired or used")

        access_token = await self.context.provider.create_access_token(
            result.client_session
        )
        expires_in = access_token.exp - self.context.clock.epoch()
        LOGGER.info(
            "Issued access token for session %s", result.client_session.user_session.id
        )
        return TokenResponse(access_token=access_token.token, expires_in=expires_in)
