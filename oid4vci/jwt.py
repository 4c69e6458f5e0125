"""JWT utilities."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from acapy_agent.wallet.jwt import BadJWSHeaderError, b64_to_dict, dict_to_b64
from acapy_agent.wallet.util import b64_to_bytes, bytes_to_b64
from aries_askar import Key, KeyAlg

LOGGER = logging.getLogger(__name__)

ALGS = {
    KeyAlg.ED25519: "EdDSA",
    KeyAlg.P256: "ES256",
}


@dataclass
class JWTVerifyResult:
    """JWT Verification Result."""

    headers: Mapping[str, Any]
    payload: Mapping[str, Any]
    verified: bool


def alg_for_key(key: Key) -> str:
    """Return the JWS alg for an askar key."""
    alg = ALGS.get(key.algorithm)
    if not alg:
        raise ValueError(f"Unable to determine JWT signing alg for {key.algorithm}")
    return alg


def jwt_sign(
    key: Key,
    headers: Dict[str, Any],
    payload: Mapping[str, Any],
    kid: Optional[str] = None,
) -> str:
    """Create a signed JWT given headers, payload, and signing key."""
    encoded_payload = dict_to_b64(payload)

    if not headers.get("typ", None):
        headers["typ"] = "JWT"

    headers = {**headers, "alg": alg_for_key(key)}
    if kid:
        headers["kid"] = kid

    encoded_headers = dict_to_b64(headers)
    sig_bytes = key.sign_message(f"{encoded_headers}.{encoded_payload}".encode())
    sig = bytes_to_b64(sig_bytes, urlsafe=True, pad=False)
    return f"{encoded_headers}.{encoded_payload}.{sig}"


def jwt_verify(key: Key, jwt: str) -> JWTVerifyResult:
    """Verify a JWT and return the headers and payload."""
    try:
        encoded_headers, encoded_payload, encoded_signature = jwt.split(".", 3)
    except ValueError as err:
        raise BadJWSHeaderError("Token is not a compact JWS") from err
    headers = b64_to_dict(encoded_headers)
    payload = b64_to_dict(encoded_payload)
    if not isinstance(headers, dict) or not isinstance(payload, dict):
        raise BadJWSHeaderError("Token header and payload must be JSON objects")

    alg = headers.get("alg")
    if alg != alg_for_key(key):
        raise BadJWSHeaderError(f"Unexpected alg {alg}")

    decoded_signature = b64_to_bytes(encoded_signature, urlsafe=True)
    valid = key.verify_signature(
        f"{encoded_headers}.{encoded_payload}".encode(),
        decoded_signature,
    )
    return JWTVerifyResult(headers, payload, valid)
