"""Issue jwt_vc credentials."""

import logging
from typing import Optional

from aries_askar import AskarError, Key

from oid4vci.cred_processor import SigningServiceError
from oid4vci.jwt import JWTVerifyResult, alg_for_key, jwt_sign, jwt_verify
from oid4vci.keys import load_signing_key
from oid4vci.models.credential import UnsignedCredential

LOGGER = logging.getLogger(__name__)


class JwtVcSigner:
    """Signs credentials as compact JWTs carrying the credential in `vc`."""

    def __init__(self, key: Key):
        """Initialize the signer with the issuer key."""
        try:
            self.alg = alg_for_key(key)
        except ValueError as err:
            raise SigningServiceError(str(err)) from err
        self.key = key

    @classmethod
    def from_key_path(cls, key_path: Optional[str]) -> "JwtVcSigner":
        """Create a signer from a private JWK file."""
        return cls(load_signing_key(key_path))

    async def sign(self, credential: UnsignedCredential) -> str:
        """Return the signed credential in JWT format."""
        payload = {
            "vc": credential.serialize(),
            "iss": credential.issuer,
            "jti": credential.id,
            "nbf": int(credential.issuance_date.timestamp()),
        }
        if credential.subject_id:
            payload["sub"] = credential.subject_id
        if credential.expiration_date:
            payload["exp"] = int(credential.expiration_date.timestamp())

        try:
            jws = jwt_sign(self.key, {}, payload, kid=credential.issuer)
        except AskarError as err:
            raise SigningServiceError(f"Unable to sign {credential.id}") from err
        LOGGER.debug("Signed %s as %s JWT", credential.id, self.alg)
        return jws

    def verify(self, jwt: str) -> JWTVerifyResult:
        """Verify a JWT issued by this signer."""
        return jwt_verify(self.key, jwt)
