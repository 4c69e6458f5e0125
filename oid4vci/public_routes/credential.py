"""Credential endpoints."""

from aiohttp import web
from aiohttp_apispec import (
    docs,
    match_info_schema,
    querystring_schema,
    request_schema,
    response_schema,
)

from ..context import IssuerContext
from ..issuance import CredentialIssuer
from ..models.request import (
    CredentialRequestSchema,
    CredentialResponseSchema,
    IssueCredentialQuerySchema,
)
from ..utils import assert_issuer_did, bearer_from_header
from .constants import LOGGER
from .metadata import IssuerDIDMatchSchema


@docs(tags=["oid4vci"], summary="Issue a credential")
@match_info_schema(IssuerDIDMatchSchema())
@request_schema(CredentialRequestSchema())
@response_schema(CredentialResponseSchema(), 200)
async def issue_cred(request: web.Request):
    """Credential endpoint."""
    context: IssuerContext = request["context"]
    assert_issuer_did(context, request.match_info["issuer_did"])
    token = bearer_from_header(request.headers.get("Authorization"))

    try:
        body = await request.json()
    except ValueError:
        # Malformed JSON or text encoding; rejected as invalid_request once
        # the token has been checked.
        body = None

    response = await CredentialIssuer(context).request_credential(token, body)
    return web.json_response(response)


@docs(tags=["oid4vci"], summary="Issue a linked-data credential of the given type")
@match_info_schema(IssuerDIDMatchSchema())
@querystring_schema(IssueCredentialQuerySchema())
async def issue_ldp_cred(request: web.Request):
    """Issue an ldp_vc credential; the token may be passed as a query parameter."""
    context: IssuerContext = request["context"]
    vc_type = request.query.get("type")
    token = request.query.get("token")
    LOGGER.debug("Get a VC of type %s. Token parameter given: %s", vc_type, bool(token))
    assert_issuer_did(context, request.match_info["issuer_did"])

    token = token or bearer_from_header(request.headers.get("Authorization"))
    credential = await CredentialIssuer(context).issue_ldp_credential(token, vc_type)
    return web.json_response(credential)
