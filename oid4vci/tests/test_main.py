import json

import pytest
from marshmallow import ValidationError

from oid4vci.__main__ import load_provider, main, parse_args, settings_from_args
from oid4vci.config import Config

DID = "did:key:z6MkhaXgBZDvotDkL5257faiztiGiC2QtKLGpbnnEGta2doK"

REALM = {
    "clients": [
        {
            "id": "c1",
            "clientId": "wallet",
            "protocol": "oid4vp",
            "attributes": {"vctypes_ExampleCredential": "ldp_vc"},
            "protocolMappers": [
                {
                    "name": "email",
                    "protocolMapper": "oid4vp-user-attribute-mapper",
                    "config": {"subjectProperty": "email", "userAttribute": "email"},
                }
            ],
        }
    ],
    "users": [
        {
            "id": "user-1",
            "username": "alice",
            "email": "alice@example.com",
            "clientRoles": {"service": ["READER", "READER", "ADMIN"]},
        }
    ],
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in (
        "OID4VCI_HOST",
        "OID4VCI_PORT",
        "OID4VCI_ENDPOINT",
        "OID4VCI_ISSUER_DID",
        "OID4VCI_KEY_PATH",
    ):
        monkeypatch.delenv(var, raising=False)


def test_settings_from_args():
    args = parse_args(
        [
            "--host",
            "0.0.0.0",
            "--port",
            "8081",
            "--endpoint",
            "https://issuer.example.com",
            "--issuer-did",
            DID,
        ]
    )
    config = Config.from_settings(settings_from_args(args))
    assert config.host == "0.0.0.0"
    assert config.port == 8081
    assert config.issuer_did == DID
    assert config.key_path is None


def test_settings_fall_back_to_env(monkeypatch):
    monkeypatch.setenv("OID4VCI_HOST", "127.0.0.1")
    monkeypatch.setenv("OID4VCI_ENDPOINT", "http://localhost:8081")
    monkeypatch.setenv("OID4VCI_ISSUER_DID", DID)
    config = Config.from_settings(settings_from_args(parse_args(["--port", "9000"])))
    assert config.host == "127.0.0.1"
    assert config.port == 9000


@pytest.mark.asyncio
async def test_load_provider_from_realm(tmp_path, clock):
    path = tmp_path / "realm.json"
    path.write_text(json.dumps(REALM))
    provider = load_provider(str(path), clock)

    (client,) = await provider.get_clients()
    assert client.client_id == "wallet"
    assert client.protocol_mappers[0].mapper_kind == "oid4vp-user-attribute-mapper"
    assert client.protocol_mappers[0].config["userAttribute"] == "email"

    token = await provider.login("alice", "wallet")
    auth = await provider.authenticate(token)
    assert auth.user.email == "alice@example.com"
    assert auth.user.roles_for_client("service") == {"READER", "ADMIN"}


def test_load_provider_rejects_bad_realm(tmp_path, clock):
    path = tmp_path / "realm.json"
    path.write_text(json.dumps({"clients": [{"id": "c1"}]}))
    with pytest.raises(ValidationError):
        load_provider(str(path), clock)


def test_main_exits_without_config():
    with pytest.raises(SystemExit) as exc:
        main(["--host", "0.0.0.0"])
    assert exc.value.code == 1
