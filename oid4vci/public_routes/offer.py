"""Credential offer endpoints."""

from acapy_agent.messaging.models.openapi import OpenAPISchema
from aiohttp import web
from aiohttp_apispec import (
    docs,
    match_info_schema,
    querystring_schema,
    response_schema,
)
from marshmallow import fields

from ..context import IssuerContext
from ..error import InvalidRequest
from ..exchange import OfferExchange
from ..models.offer import (
    CredOfferQuerySchema,
    CredOfferSchema,
    CredOfferURIResponseSchema,
)
from ..models.supported_cred import Format
from ..utils import assert_issuer_did, authenticate, bearer_from_header
from .constants import LOGGER
from .metadata import IssuerDIDMatchSchema


class CredOfferMatchSchema(IssuerDIDMatchSchema):
    """Path parameters of an offer."""

    nonce = fields.Str(
        required=True, metadata={"description": "Nonce returned with the offer URI"}
    )


def parse_format(value) -> Format:
    """Parse the format query parameter."""
    if not value:
        raise InvalidRequest("format is required")
    try:
        return Format.from_str(value)
    except ValueError as err:
        raise InvalidRequest(str(err)) from err


@docs(tags=["oid4vci"], summary="Create an offer for a credential of the given type")
@match_info_schema(IssuerDIDMatchSchema())
@querystring_schema(CredOfferQuerySchema())
@response_schema(CredOfferURIResponseSchema(), 200)
async def credential_offer_uri(request: web.Request):
    """Create an offer for the authenticated user and return its nonce."""
    context: IssuerContext = request["context"]
    assert_issuer_did(context, request.match_info["issuer_did"])
    fmt = parse_format(request.query.get("format"))
    auth = await authenticate(
        context, bearer_from_header(request.headers.get("Authorization"))
    )

    offer_uri = await OfferExchange(context).create_offer(
        auth, request.query.get("type"), fmt
    )
    return web.json_response(offer_uri.serialize())


@docs(tags=["oid4vci"], summary="Dereference a credential offer")
@match_info_schema(CredOfferMatchSchema())
@response_schema(CredOfferSchema(), 200)
async def credential_offer(request: web.Request):
    """Consume an offer nonce and return the offer document."""
    context: IssuerContext = request["context"]
    issuer_did = request.match_info["issuer_did"]
    nonce = request.match_info["nonce"]
    LOGGER.info("Get an offer from issuer %s for nonce %s", issuer_did, nonce)
    assert_issuer_did(context, issuer_did)

    offer = await OfferExchange(context).materialize_offer(nonce)
    document = offer.serialize()
    LOGGER.debug("Responding with offer: %s", document)
    return web.json_response(document)
