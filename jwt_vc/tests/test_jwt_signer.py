import datetime

import pytest
from acapy_agent.wallet.jwt import BadJWSHeaderError
from aries_askar import Key, KeyAlg

from jwt_vc import JwtVcSigner
from oid4vci.cred_processor import SigningServiceError
from oid4vci.models.credential import CredentialBuilder

ISSUER = "did:key:z6MkhaXgBZDvotDkL5257faiztiGiC2QtKLGpbnnEGta2doK"


@pytest.fixture
def credential():
    builder = CredentialBuilder(
        id="urn:uuid:3978344f-8596-4c3a-a978-8fcaba3903c5",
        issuer=ISSUER,
        issuance_date=datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc),
        credential_type="ExampleCredential",
        subject_claims={"id": "did:key:z6MkAlice", "email": "alice@example.com"},
    )
    builder.expiration_date = builder.issuance_date + datetime.timedelta(days=1)
    return builder.build()


class TestJwtVcSigner:
    """Tests for JwtVcSigner."""

    @pytest.mark.asyncio
    async def test_sign(self, signing_key, credential):
        signer = JwtVcSigner(signing_key)
        result = signer.verify(await signer.sign(credential))

        assert result.verified
        assert result.headers == {"typ": "JWT", "alg": "EdDSA", "kid": ISSUER}
        assert result.payload == {
            "vc": credential.serialize(),
            "iss": ISSUER,
            "jti": credential.id,
            "nbf": 1704067200,
            "sub": "did:key:z6MkAlice",
            "exp": 1704153600,
        }

    @pytest.mark.asyncio
    async def test_sign_deterministic(self, signing_key, credential):
        signer = JwtVcSigner(signing_key)
        assert await signer.sign(credential) == await signer.sign(credential)

    @pytest.mark.asyncio
    async def test_sign_without_subject_id(self, signing_key, credential):
        credential.subject_claims.pop("id")
        credential.expiration_date = None
        payload = JwtVcSigner(signing_key).verify(
            await JwtVcSigner(signing_key).sign(credential)
        ).payload
        assert "sub" not in payload
        assert "exp" not in payload

    @pytest.mark.asyncio
    async def test_sign_p256(self, credential):
        signer = JwtVcSigner(Key.generate(KeyAlg.P256))
        result = signer.verify(await signer.sign(credential))
        assert result.verified
        assert result.headers["alg"] == "ES256"

    def test_unsupported_key(self):
        with pytest.raises(SigningServiceError):
            JwtVcSigner(Key.generate(KeyAlg.X25519))

    @pytest.mark.asyncio
    async def test_from_key_path(self, key_path, credential, signing_key):
        signer = JwtVcSigner.from_key_path(str(key_path))
        assert JwtVcSigner(signing_key).verify(await signer.sign(credential)).verified

    def test_from_missing_key_path(self, tmp_path):
        with pytest.raises(SigningServiceError):
            JwtVcSigner.from_key_path(None)
        with pytest.raises(SigningServiceError):
            JwtVcSigner.from_key_path(str(tmp_path / "missing.jwk"))

    def test_from_public_key(self, tmp_path, signing_key):
        path = tmp_path / "public.jwk"
        path.write_text(signing_key.get_jwk_public())
        with pytest.raises(SigningServiceError):
            JwtVcSigner.from_key_path(str(path))

    def test_verify_rejects_non_object_segments(self, signing_key):
        signer = JwtVcSigner(signing_key)
        with pytest.raises(BadJWSHeaderError):
            signer.verify("WzFd.eyB9.AA")
        with pytest.raises(BadJWSHeaderError):
            signer.verify("eyB9.WzFd.AA")
