"""Issuer identity, supported types and discovery documents."""

from acapy_agent.messaging.models.openapi import OpenAPISchema
from aiohttp import web
from aiohttp_apispec import docs, match_info_schema, response_schema
from marshmallow import fields

from ..context import IssuerContext
from ..error import NotAuthorized
from ..issuance import CredentialIssuer
from ..models.supported_cred import (
    SupportedCredentialMetadataSchema,
    SupportedCredentialSchema,
)
from ..utils import assert_issuer_did, authenticate, bearer_from_header
from .constants import LOGGER


class IssuerDIDMatchSchema(OpenAPISchema):
    """Path parameters naming the issuer."""

    issuer_did = fields.Str(
        required=True,
        metadata={"description": "Issuer DID", "example": "did:key:z6Mk..."},
    )


class CredentialIssuerMetadataSchema(OpenAPISchema):
    """Credential issuer metadata document."""

    credential_issuer = fields.Str(
        required=True,
        metadata={
            "description": "The credential issuer identifier",
            "example": "https://issuer.example.com/did:key:z6Mk...",
        },
    )
    credential_endpoint = fields.Str(
        required=True,
        metadata={"description": "URL of the credential endpoint"},
    )
    credentials_supported = fields.List(
        fields.Nested(SupportedCredentialMetadataSchema()),
        metadata={"description": "Credentials the issuer can issue"},
    )


class OpenIDConfigurationSchema(OpenAPISchema):
    """Subset of the OpenID provider configuration this issuer sets."""

    issuer = fields.Str(required=False)
    token_endpoint = fields.Str(required=True)
    credential_endpoint = fields.Str(required=True)
    grant_types_supported = fields.List(fields.Str(), required=True)


@docs(tags=["oid4vci"], summary="Get the DID credentials are issued under")
async def get_issuer_did(request: web.Request):
    """Return the issuer DID as plain text."""
    context: IssuerContext = request["context"]
    return web.Response(text=context.issuer_did, content_type="text/plain")


@docs(tags=["oid4vci"], summary="List the credential types the user may request")
@match_info_schema(IssuerDIDMatchSchema())
@response_schema(SupportedCredentialSchema(many=True), 200)
async def get_types(request: web.Request):
    """Return the supported credentials of the realm."""
    context: IssuerContext = request["context"]
    assert_issuer_did(context, request.match_info["issuer_did"])
    auth = await authenticate(
        context,
        bearer_from_header(request.headers.get("Authorization")),
        error=NotAuthorized,
    )
    LOGGER.debug("User is %s", auth.user.id)

    supported = await CredentialIssuer(context).supported_credentials()
    return web.json_response([cred.serialize() for cred in supported])


@docs(tags=["oid4vci"], summary="Get credential issuer metadata")
@match_info_schema(IssuerDIDMatchSchema())
@response_schema(CredentialIssuerMetadataSchema(), 200)
async def credential_issuer_metadata(request: web.Request):
    """Credential issuer metadata endpoint."""
    context: IssuerContext = request["context"]
    assert_issuer_did(context, request.match_info["issuer_did"])
    metadata = await CredentialIssuer(context).issuer_metadata()
    LOGGER.debug("METADATA: %s", metadata)
    return web.json_response(metadata)


@docs(tags=["oid4vci"], summary="Get the OpenID configuration of the issuer")
@match_info_schema(IssuerDIDMatchSchema())
@response_schema(OpenIDConfigurationSchema(), 200)
async def openid_configuration(request: web.Request):
    """Discovery document with the pre-authorized code grant."""
    context: IssuerContext = request["context"]
    assert_issuer_did(context, request.match_info["issuer_did"])
    return web.json_response(await CredentialIssuer(context).openid_configuration())
