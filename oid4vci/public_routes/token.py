"""Token endpoint."""

from aiohttp import web
from aiohttp_apispec import docs, form_schema, match_info_schema, response_schema
from marshmallow import ValidationError

from ..context import IssuerContext
from ..error import InvalidRequest
from ..exchange import OfferExchange
from ..models.offer import GetTokenSchema, TokenResponseSchema
from ..utils import assert_issuer_did
from .constants import LOGGER
from .metadata import IssuerDIDMatchSchema


@docs(tags=["oid4vci"], summary="Exchange a pre-authorized code for an access token")
@match_info_schema(IssuerDIDMatchSchema())
@form_schema(GetTokenSchema())
@response_schema(TokenResponseSchema(), 200)
async def token(request: web.Request):
    """Token endpoint for the pre-authorized code grant."""
    context: IssuerContext = request["context"]
    assert_issuer_did(context, request.match_info["issuer_did"])

    form = await request.post()
    try:
        data = GetTokenSchema().load(dict(form))
    except ValidationError as err:
        LOGGER.info("Malformed token request: %s", err.messages)
        raise InvalidRequest(f"Malformed token request: {err.messages}")

    response = await OfferExchange(context).exchange_token(
        data.get("grant_type"), data.get("code"), data.get("pre_authorized_code")
    )
    return web.json_response(response.serialize())
