"""Constants for the OID4VCI public routes."""

import logging

from aiohttp import web

from ..context import IssuerContext

LOGGER = logging.getLogger(__name__)

CONTEXT_KEY = web.AppKey("context", IssuerContext)
ACCESS_CONTROL_HEADER = "Access-Control-Allow-Origin"
