"""Credential issuance: request validation, claim mapping and signing."""

import logging
from typing import Any, List, Optional, Sequence, Tuple

from marshmallow import ValidationError

from .context import IssuerContext
from .error import InvalidOrMissingProof, InvalidRequest
from .models.credential import TYPE_VERIFIABLE_CREDENTIAL
from .models.offer import PRE_AUTHORIZED_CODE_GRANT_TYPE
from .models.realm import AuthResult
from .models.request import CredentialRequestSchema, Proof, ProofType
from .models.supported_cred import Format, SupportedCredential
from .pipeline import ClaimPipeline, mappers_for_clients
from .utils import authenticate

LOGGER = logging.getLogger(__name__)


def normalize_format(requested: Format) -> Tuple[Format, Format]:
    """Return the format to resolve and sign with, and the format to respond with.

    Wallets asking for jwt_vc rarely distinguish JSON from JSON-LD, so the
    request is served as jwt_vc_json while the response keeps the label the
    wallet asked for.
    """
    if requested is Format.JWT_VC:
        return Format.JWT_VC_JSON, requested
    return requested, requested


def resolve_credential_type(types: Sequence[str]) -> str:
    """Return the single concrete type left after dropping VerifiableCredential."""
    remaining = [t for t in types if t != TYPE_VERIFIABLE_CREDENTIAL]
    if len(remaining) != 1:
        LOGGER.info("Credential request must name exactly one type, got %s", types)
        raise InvalidRequest("Exactly one credential type must be requested")
    return remaining[0]


def validate_proof(proof: Proof):
    """Check the proof type.

    The proof token itself is not verified yet.
    """
    if proof.proof_type != ProofType.JWT.value:
        LOGGER.warning("We currently only support JWT proofs, got %s", proof.proof_type)
        raise InvalidOrMissingProof(f"Unsupported proof type {proof.proof_type}")
    LOGGER.warning("Accepting JWT proof without verifying its signature")


class CredentialIssuer:
    """Issues credentials to authenticated users."""

    def __init__(self, context: IssuerContext):
        """Initialize the issuer."""
        self.context = context

    async def supported_credentials(self) -> List[SupportedCredential]:
        """Return every credential the realm's clients declare."""
        registry = await self.context.registry()
        return registry.list_all()

    async def issuer_metadata(self) -> dict:
        """Return the credential issuer metadata document."""
        config = self.context.config
        return {
            "credential_issuer": config.issuer_url,
            "credential_endpoint": config.credential_endpoint,
            "credentials_supported": [
                cred.to_issuer_metadata() for cred in await self.supported_credentials()
            ],
        }

    async def openid_configuration(self) -> dict:
        """Return the realm discovery document extended for this issuer."""
        config = self.context.config
        discovery = dict(
            await self.context.provider.openid_configuration(config.endpoint)
        )
        grant_types = list(discovery.get("grant_types_supported") or [])
        if PRE_AUTHORIZED_CODE_GRANT_TYPE not in grant_types:
            grant_types.append(PRE_AUTHORIZED_CODE_GRANT_TYPE)
        discovery["grant_types_supported"] = grant_types
        discovery["token_endpoint"] = config.token_endpoint
        discovery["credential_endpoint"] = config.credential_endpoint
        return discovery

    async def get_credential(
        self, auth: AuthResult, vc_type: str, fmt: Format
    ) -> Any:
        """Build and sign a credential of vc_type in fmt for auth's user."""
        registry = await self.context.registry()
        clients = registry.resolve(vc_type, fmt)

        pipeline = ClaimPipeline(mappers_for_clients(clients, self.context.mappers))
        unsigned = pipeline.build(
            vc_type, self.context.issuer_did, self.context.clock, auth.session
        )
        credential = await self.context.processors.sign(fmt, unsigned)
        LOGGER.info(
            "Issued %s credential %s to user %s", fmt.value, unsigned.id, auth.user.id
        )
        return credential

    async def request_credential(self, token: Optional[str], body: Any) -> dict:
        """Handle a credential request and return the credential response."""
        auth = await authenticate(self.context, token)

        try:
            request = CredentialRequestSchema().load(body)
        except ValidationError as err:
            LOGGER.info("Malformed credential request: %s", err.messages)
            raise InvalidRequest(f"Malformed credential request: {err.messages}")
        LOGGER.debug("Received credentials request %s", request)

        vc_type = resolve_credential_type(request.types)
        if request.proof is not None:
            validate_proof(request.proof)

        resolution_format, response_format = normalize_format(request.format)
        credential = await self.get_credential(auth, vc_type, resolution_format)
        return {"format": response_format.value, "credential": credential}

    async def issue_ldp_credential(self, token: Optional[str], vc_type: str) -> Any:
        """Issue a linked-data credential directly, for wallets without OIDC4VCI."""
        auth = await authenticate(self.context, token)
        return await self.get_credential(auth, vc_type, Format.LDP_VC)
