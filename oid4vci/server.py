"""Standalone HTTP server for the OID4VCI issuer."""

import logging
from typing import Optional

from acapy_agent.core.error import BaseError
from aiohttp import web
from aiohttp_apispec import setup_aiohttp_apispec

from .context import IssuerContext
from .public_routes import make_application

LOGGER = logging.getLogger(__name__)


class ServerSetupError(BaseError):
    """Raised when the issuer server cannot be started."""


class Oid4vciServer:
    """Serves the issuer routes on host:port."""

    def __init__(self, host: str, port: int, context: IssuerContext):
        """Initialize the server."""
        self.host = host
        self.port = port
        self.context = context
        self.app: Optional[web.Application] = None
        self.runner: Optional[web.AppRunner] = None
        self.site: Optional[web.TCPSite] = None

    async def make_application(self) -> web.Application:
        """Create the application with swagger docs."""
        app = await make_application(self.context)
        setup_aiohttp_apispec(
            app=app,
            title="OID4VCI Issuer",
            version="v1",
            swagger_path="/api/docs",
        )
        return app

    async def start(self):
        """Start the server."""
        self.app = await self.make_application()
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        self.site = web.TCPSite(self.runner, host=self.host, port=self.port)
        try:
            await self.site.start()
        except OSError as err:
            await self.runner.cleanup()
            raise ServerSetupError(
                f"Unable to start OID4VCI server on {self.host}:{self.port}"
            ) from err
        LOGGER.info("OID4VCI server listening on %s:%s", self.host, self.port)

    async def stop(self):
        """Stop the server."""
        if self.runner:
            await self.runner.cleanup()
        self.site = None
        self.runner = None
