"""Run the OID4VCI issuer as a standalone service.

Usage:
    python -m oid4vci --realm realm.json --key-path issuer.jwk
    oid4vci-issuer --host 0.0.0.0 --port 8081 --endpoint https://issuer.example.com

Options not given on the command line fall back to the OID4VCI_* environment
variables.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from acapy_agent.config.settings import Settings
from marshmallow import ValidationError

from . import setup, shutdown, startup
from .clock import Clock, SystemClock
from .config import Config
from .provider import InMemoryIdentityProvider

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="oid4vci", description="OID4VCI credential issuer"
    )
    parser.add_argument("--host", help="Bind address (OID4VCI_HOST)")
    parser.add_argument("--port", type=int, help="Bind port (OID4VCI_PORT)")
    parser.add_argument("--endpoint", help="Public base URL (OID4VCI_ENDPOINT)")
    parser.add_argument("--issuer-did", help="Issuer DID (OID4VCI_ISSUER_DID)")
    parser.add_argument("--key-path", help="Private JWK file (OID4VCI_KEY_PATH)")
    parser.add_argument("--realm", help="JSON file with the realm's clients and users")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser.parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Plugin settings holding the options given on the command line."""
    values = {
        "host": args.host,
        "port": args.port,
        "endpoint": args.endpoint,
        "issuer_did": args.issuer_did,
        "key_path": args.key_path,
    }
    return Settings(
        {"plugin_config": {"oid4vci": {k: v for k, v in values.items() if v}}}
    )


def load_provider(realm_path: Optional[str], clock: Clock) -> InMemoryIdentityProvider:
    """Create the identity provider, seeded from a realm file if given."""
    provider = InMemoryIdentityProvider(clock)
    if realm_path:
        provider.load_realm(json.loads(Path(realm_path).read_text()))
    return provider


async def serve(config: Config, provider: InMemoryIdentityProvider):
    """Run the issuer until cancelled."""
    server = await startup(await setup(config, provider, provider.clock))
    try:
        await asyncio.Event().wait()
    finally:
        await shutdown(server)


def main(argv: Optional[Sequence[str]] = None):
    """CLI entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = Config.from_settings(settings_from_args(args))
        provider = load_provider(args.realm, SystemClock())
    except (OSError, ValueError, ValidationError) as err:
        LOGGER.error("Unable to start OID4VCI issuer: %s", err)
        sys.exit(1)

    try:
        asyncio.run(serve(config, provider))
    except KeyboardInterrupt:
        LOGGER.info("OID4VCI issuer stopped")


if __name__ == "__main__":
    main()
