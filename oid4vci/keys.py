"""Load signing key material."""

import json
import logging
from pathlib import Path
from typing import Optional

from aries_askar import AskarError, Key

from .cred_processor import SigningServiceError
from .jwt import ALGS

LOGGER = logging.getLogger(__name__)


def load_signing_key(key_path: Optional[str]) -> Key:
    """Load a private JWK from key_path as an askar key.

    Raises:
        SigningServiceError: if the file is missing, is not a private JWK, or
            holds a key type that cannot sign credentials.
    """
    if not key_path:
        raise SigningServiceError("No key path configured")

    path = Path(key_path)
    try:
        jwk = json.loads(path.read_text())
    except OSError as err:
        raise SigningServiceError(f"Unable to read key file {key_path}") from err
    except ValueError as err:
        raise SigningServiceError(f"Key file {key_path} is not a JWK") from err

    if not isinstance(jwk, dict) or "d" not in jwk:
        raise SigningServiceError(f"Key file {key_path} holds no private key")

    try:
        key = Key.from_jwk(jwk)
    except AskarError as err:
        raise SigningServiceError(f"Unsupported JWK in {key_path}") from err

    if key.algorithm not in ALGS:
        raise SigningServiceError(f"Unsupported key type {key.algorithm}")

    LOGGER.debug("Loaded %s signing key from %s", key.algorithm, key_path)
    return key
