"""OID4VCI credential issuer."""

import logging
from typing import Optional

from .clock import Clock, SystemClock
from .config import Config
from .context import IssuerContext
from .cred_processor import (
    JWT_FORMATS,
    LDP_FORMATS,
    CredProcessors,
    SigningServiceError,
)
from .provider import IdentityProvider
from .server import Oid4vciServer
from .store import NoteStore

LOGGER = logging.getLogger(__name__)


def load_processors(config: Config, clock: Clock) -> CredProcessors:
    """Build the signing backends; a backend that fails to load is skipped."""
    from jwt_vc import JwtVcSigner
    from ldp_vc import LdSigner

    processors = CredProcessors()
    try:
        processors.register_signer(
            JWT_FORMATS, JwtVcSigner.from_key_path(config.key_path)
        )
        LOGGER.info("Registered jwt_vc signing backend")
    except SigningServiceError as err:
        LOGGER.warning("jwt_vc signing backend unavailable: %s", err.roll_up)

    try:
        processors.register_signer(
            LDP_FORMATS, LdSigner.from_key_path(config.key_path, clock)
        )
        LOGGER.info("Registered ldp_vc signing backend")
    except SigningServiceError as err:
        LOGGER.warning("ldp_vc signing backend unavailable: %s", err.roll_up)

    if not processors.available_formats:
        LOGGER.warning("No signing backend loaded; credential requests will fail")
    return processors


async def setup(
    config: Config,
    provider: IdentityProvider,
    clock: Optional[Clock] = None,
    notes: Optional[NoteStore] = None,
) -> IssuerContext:
    """Set up the issuer."""
    LOGGER.info("Setting up OID4VCI issuer for %s", config.issuer_did)
    clock = clock or SystemClock()
    return IssuerContext(
        config=config,
        provider=provider,
        processors=load_processors(config, clock),
        clock=clock,
        notes=notes,
    )


async def startup(context: IssuerContext) -> Oid4vciServer:
    """Start the OID4VCI server."""
    config = context.config
    LOGGER.info("OID4VCI server config: host=%s, port=%s", config.host, config.port)
    server = Oid4vciServer(config.host, config.port, context)
    try:
        await server.start()
    except Exception:
        LOGGER.exception("Unable to start OID4VCI server")
        raise
    return server


async def shutdown(server: Oid4vciServer):
    """Stop the OID4VCI server."""
    await server.stop()
