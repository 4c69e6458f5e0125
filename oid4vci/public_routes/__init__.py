"""Public routes for the OID4VCI issuer.

Every route except `/issuer` lives below the issuer DID path segment.
"""

from aiohttp import web

from ..context import IssuerContext
from .constants import ACCESS_CONTROL_HEADER, CONTEXT_KEY, LOGGER
from .credential import issue_cred, issue_ldp_cred
from .metadata import (
    credential_issuer_metadata,
    get_issuer_did,
    get_types,
    openid_configuration,
)
from .middleware import error_middleware, setup_context
from .offer import credential_offer, credential_offer_uri
from .token import token

__all__ = [
    "ACCESS_CONTROL_HEADER",
    "CONTEXT_KEY",
    "LOGGER",
    "cors_preflight",
    "credential_issuer_metadata",
    "credential_offer",
    "credential_offer_uri",
    "get_issuer_did",
    "get_types",
    "issue_cred",
    "issue_ldp_cred",
    "make_application",
    "openid_configuration",
    "register",
    "token",
]


async def cors_preflight(request: web.Request):
    """Accept preflight requests from any origin."""
    return web.Response(
        headers={
            ACCESS_CONTROL_HEADER: "*",
            "Access-Control-Allow-Methods": "POST,GET,OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type,Authorization",
        }
    )


async def register(app: web.Application):
    """Register the issuer routes."""
    subpath = "/{issuer_did}"
    app.add_routes(
        [
            web.get("/issuer", get_issuer_did, allow_head=False),
            web.get(f"{subpath}/types", get_types, allow_head=False),
            web.get(
                f"{subpath}/.well-known/openid-credential-issuer",
                credential_issuer_metadata,
                allow_head=False,
            ),
            web.get(
                f"{subpath}/.well-known/openid-configuration",
                openid_configuration,
                allow_head=False,
            ),
            web.get(
                f"{subpath}/credential-offer-uri", credential_offer_uri, allow_head=False
            ),
            web.get(
                f"{subpath}/credential-offer/{{nonce}}",
                credential_offer,
                allow_head=False,
            ),
            web.post(f"{subpath}/token", token),
            web.get(f"{subpath}/", issue_ldp_cred, allow_head=False),
            web.post(f"{subpath}/credential", issue_cred),
            # Wallets run in browsers on origins unknown in advance.
            web.options("/{tail:.*}", cors_preflight),
        ]
    )


async def make_application(context: IssuerContext) -> web.Application:
    """Create the issuer web application."""
    app = web.Application(middlewares=[error_middleware, setup_context])
    app[CONTEXT_KEY] = context
    await register(app)
    LOGGER.debug("Registered issuer routes for %s", context.issuer_did)
    return app
