"""Fixtures shared by the issuer tests."""

import datetime
import json

import pytest
from acapy_agent.wallet.util import bytes_to_b64
from aiohttp.test_utils import TestClient, TestServer
from aries_askar import Key, KeyAlg

from oid4vci import load_processors
from oid4vci.config import Config
from oid4vci.context import IssuerContext
from oid4vci.models.realm import ClientModel, ProtocolMapperModel, UserModel
from oid4vci.provider import InMemoryIdentityProvider
from oid4vci.public_routes import make_application

ISSUER_DID = "did:key:z6MkhaXgBZDvotDkL5257faiztiGiC2QtKLGpbnnEGta2doK"
ENDPOINT = "http://localhost:8081"
WALLET_CLIENT = "wallet"
SERVICE_CLIENT = "service"


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime.datetime = None):
        self.current = start or datetime.datetime(
            2024, 1, 1, tzinfo=datetime.timezone.utc
        )

    def now(self) -> datetime.datetime:
        return self.current

    def epoch(self) -> int:
        return int(self.current.timestamp())

    def advance(self, seconds: int):
        self.current += datetime.timedelta(seconds=seconds)


def write_jwk(path, key: Key):
    """Write key as a private JWK file."""
    jwk = json.loads(key.get_jwk_public())
    jwk["d"] = bytes_to_b64(key.get_secret_bytes(), urlsafe=True, pad=False)
    path.write_text(json.dumps(jwk))
    return path


@pytest.fixture
def clock():
    yield FakeClock()


@pytest.fixture
def signing_key():
    yield Key.generate(KeyAlg.ED25519)


@pytest.fixture
def jwk_writer():
    yield write_jwk


@pytest.fixture
def key_path(tmp_path, signing_key):
    yield write_jwk(tmp_path / "issuer.jwk", signing_key)


@pytest.fixture
def wallet_client():
    yield ClientModel(
        id="c1",
        client_id=WALLET_CLIENT,
        protocol="oid4vp",
        attributes={
            "vctypes_ExampleCredential": "ldp_vc,jwt_vc_json",
            "vctypes_BatteryPassAuthCredential": "jwt_vc",
            "description": "Wallet used for issuance",
        },
        protocol_mappers=[
            ProtocolMapperModel(
                "subject-id", "oid4vp-subject-id-mapper", {}
            ),
            ProtocolMapperModel(
                "email",
                "oid4vp-user-attribute-mapper",
                {"subjectProperty": "email", "userAttribute": "email"},
            ),
            ProtocolMapperModel(
                "roles",
                "oid4vp-target-role-mapper",
                {"subjectProperty": "roles", "clientId": SERVICE_CLIENT},
            ),
        ],
    )


@pytest.fixture
def user():
    yield UserModel(
        id="user-1",
        username="alice",
        email="alice@example.com",
        first_name="Alice",
        last_name="Liddell",
        attributes={"subjectDid": ["did:key:z6MkAlice"]},
        client_roles={SERVICE_CLIENT: {"READER", "ADMIN"}},
    )


@pytest.fixture
def provider(clock, wallet_client, user):
    provider = InMemoryIdentityProvider(clock)
    provider.add_client(wallet_client)
    provider.add_client(
        ClientModel(
            id="c2",
            client_id="portal",
            protocol="openid-connect",
            attributes={"vctypes_PortalCredential": "ldp_vc"},
        )
    )
    provider.add_user(user)
    yield provider


@pytest.fixture
def config(key_path):
    yield Config(
        host="localhost",
        port=8081,
        endpoint=ENDPOINT,
        issuer_did=ISSUER_DID,
        key_path=str(key_path),
    )


@pytest.fixture
def context(config, provider, clock):
    yield IssuerContext(
        config=config,
        provider=provider,
        processors=load_processors(config, clock),
        clock=clock,
    )


@pytest.fixture
async def access_token(provider):
    yield await provider.login("alice", WALLET_CLIENT)


@pytest.fixture
async def auth(provider, access_token):
    yield await provider.authenticate(access_token)


@pytest.fixture
async def client(context):
    app = await make_application(context)
    async with TestClient(TestServer(app)) as client:
        yield client
