"""Request context, error translation and CORS for the public routes."""

from aiohttp import web

from ..cred_processor import CredProcessorError
from ..error import IssuerError
from .constants import ACCESS_CONTROL_HEADER, CONTEXT_KEY, LOGGER


@web.middleware
async def setup_context(request: web.Request, handler):
    """Expose the issuer context to handlers as request["context"]."""
    request["context"] = request.app[CONTEXT_KEY]
    return await handler(request)


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Render issuer errors as JSON and allow every origin."""
    try:
        response = await handler(request)
    except IssuerError as err:
        LOGGER.info(
            "%s %s failed: %s", request.method, request.path, err.error_type.value
        )
        response = web.json_response(err.to_json(), status=err.status)
    except CredProcessorError as err:
        LOGGER.exception("Credential processing failed")
        response = web.json_response(
            {"error": "server_error", "error_description": err.roll_up}, status=500
        )
    except web.HTTPException as err:
        err.headers[ACCESS_CONTROL_HEADER] = "*"
        raise

    response.headers[ACCESS_CONTROL_HEADER] = "*"
    return response
