import pytest

from ldp_vc.signer import verification_method_for
from oid4vci.models.offer import PRE_AUTHORIZED_CODE_GRANT_TYPE
from oid4vci.public_routes import ACCESS_CONTROL_HEADER


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_issuer_did(client, context):
    response = await client.get("/issuer")
    assert response.status == 200
    assert await response.text() == context.issuer_did
    assert response.headers[ACCESS_CONTROL_HEADER] == "*"


@pytest.mark.asyncio
async def test_types(client, context, access_token):
    response = await client.get(f"/{context.issuer_did}/types")
    assert response.status == 401
    assert (await response.json())["error"] == "not_authorized"

    response = await client.get(
        f"/{context.issuer_did}/types", headers=bearer(access_token)
    )
    assert response.status == 200
    assert {"type": "ExampleCredential", "format": "ldp_vc"} in await response.json()


@pytest.mark.asyncio
async def test_unknown_issuer(client):
    response = await client.get("/did:key:z6MkOther/.well-known/openid-credential-issuer")
    assert response.status == 404
    assert (await response.json())["error"] == "not_found"
    assert response.headers[ACCESS_CONTROL_HEADER] == "*"


@pytest.mark.asyncio
async def test_metadata(client, context):
    response = await client.get(
        f"/{context.issuer_did}/.well-known/openid-credential-issuer"
    )
    assert response.status == 200
    metadata = await response.json()
    assert metadata["credential_issuer"] == context.config.issuer_url
    assert metadata["credential_endpoint"] == context.config.credential_endpoint
    assert len(metadata["credentials_supported"]) == 3

    response = await client.get(f"/{context.issuer_did}/.well-known/openid-configuration")
    assert response.status == 200
    discovery = await response.json()
    assert discovery["token_endpoint"] == context.config.token_endpoint
    assert PRE_AUTHORIZED_CODE_GRANT_TYPE in discovery["grant_types_supported"]


@pytest.mark.asyncio
async def test_cors_preflight(client, context):
    response = await client.options(f"/{context.issuer_did}/credential")
    assert response.status == 200
    assert response.headers[ACCESS_CONTROL_HEADER] == "*"
    assert response.headers["Access-Control-Allow-Methods"] == "POST,GET,OPTIONS"
    assert (
        response.headers["Access-Control-Allow-Headers"] == "Content-Type,Authorization"
    )


@pytest.mark.asyncio
async def test_pre_authorized_flow(client, context, access_token):
    did = context.issuer_did
    response = await client.get(
        f"/{did}/credential-offer-uri",
        params={"type": "ExampleCredential", "format": "jwt_vc"},
        headers=bearer(access_token),
    )
    assert response.status == 200
    offer_uri = await response.json()
    assert offer_uri["issuer"] == context.config.issuer_url

    response = await client.get(f"/{did}/credential-offer/{offer_uri['nonce']}")
    assert response.status == 200
    offer = await response.json()
    assert offer["credentials"] == [{"type": "ExampleCredential", "format": "jwt_vc"}]
    code = offer["grants"][PRE_AUTHORIZED_CODE_GRANT_TYPE]["pre-authorized_code"]

    response = await client.get(f"/{did}/credential-offer/{offer_uri['nonce']}")
    assert response.status == 400
    assert (await response.json())["error"] == "invalid_request"

    response = await client.post(
        f"/{did}/token",
        data={"grant_type": PRE_AUTHORIZED_CODE_GRANT_TYPE, "pre-authorized_code": code},
    )
    assert response.status == 200
    token = await response.json()
    assert token["token_type"] == "bearer"
    assert token["expires_in"] == 300

    response = await client.post(
        f"/{did}/token",
        data={"grant_type": PRE_AUTHORIZED_CODE_GRANT_TYPE, "code": code},
    )
    assert response.status == 400
    assert (await response.json())["error"] == "invalid_token"

    response = await client.post(
        f"/{did}/credential",
        json={"types": ["VerifiableCredential", "ExampleCredential"], "format": "jwt_vc"},
        headers=bearer(token["access_token"]),
    )
    assert response.status == 200
    assert response.headers[ACCESS_CONTROL_HEADER] == "*"
    body = await response.json()
    assert body["format"] == "jwt_vc"
    assert body["credential"].count(".") == 2


@pytest.mark.asyncio
async def test_token_legacy_underscore_field(client, context, access_token):
    did = context.issuer_did
    response = await client.get(
        f"/{did}/credential-offer-uri",
        params={"type": "ExampleCredential", "format": "ldp_vc"},
        headers=bearer(access_token),
    )
    nonce = (await response.json())["nonce"]
    offer = await (await client.get(f"/{did}/credential-offer/{nonce}")).json()
    code = offer["grants"][PRE_AUTHORIZED_CODE_GRANT_TYPE]["pre-authorized_code"]

    response = await client.post(f"/{did}/token", data={"pre_authorized_code": code})
    assert response.status == 200


@pytest.mark.asyncio
async def test_offer_errors(client, context, access_token):
    did = context.issuer_did
    response = await client.get(
        f"/{did}/credential-offer-uri",
        params={"type": "ExampleCredential", "format": "ldp_vc"},
    )
    assert response.status == 400
    assert (await response.json())["error"] == "invalid_token"

    response = await client.get(
        f"/{did}/credential-offer-uri",
        params={"type": "ExampleCredential", "format": "mso_mdoc"},
        headers=bearer(access_token),
    )
    assert (await response.json())["error"] == "invalid_request"

    response = await client.get(
        f"/{did}/credential-offer-uri",
        params={"type": "UnknownCredential", "format": "ldp_vc"},
        headers=bearer(access_token),
    )
    assert response.status == 400
    assert (await response.json())["error"] == "unsupported_credential_type"


@pytest.mark.asyncio
async def test_credential_errors(client, context, access_token):
    did = context.issuer_did
    response = await client.post(
        f"/{did}/credential", data="{not json", headers=bearer(access_token)
    )
    assert response.status == 400
    assert (await response.json())["error"] == "invalid_request"

    response = await client.post(f"/{did}/credential", data="{not json")
    assert response.status == 400
    assert (await response.json())["error"] == "invalid_token"

    response = await client.post(
        f"/{did}/credential",
        json={"types": ["ExampleCredential"], "format": "ldp_vc", "proof": {"proof_type": "cwt"}},
        headers=bearer(access_token),
    )
    assert response.status == 400
    assert (await response.json())["error"] == "invalid_or_missing_proof"

    response = await client.post(
        f"/{did}/credential", data=b"\xff", headers=bearer(access_token)
    )
    assert response.status == 400
    assert (await response.json())["error"] == "invalid_request"


@pytest.mark.asyncio
async def test_legacy_issuance(client, context, access_token):
    response = await client.get(
        f"/{context.issuer_did}/",
        params={"type": "ExampleCredential", "token": access_token},
    )
    assert response.status == 200
    credential = await response.json()
    assert credential["proof"]["verificationMethod"] == verification_method_for(
        context.issuer_did
    )

    response = await client.get(
        f"/{context.issuer_did}/",
        params={"type": "ExampleCredential"},
        headers=bearer(access_token),
    )
    assert response.status == 200

    response = await client.get(
        f"/{context.issuer_did}/", params={"type": "ExampleCredential"}
    )
    assert response.status == 400


@pytest.mark.asyncio
async def test_token_with_non_object_header(client, context):
    # Header segment decodes to the JSON array [1]
    token = "WzFd.eyB9.AA"
    response = await client.get(f"/{context.issuer_did}/types", headers=bearer(token))
    assert response.status == 401
    assert (await response.json())["error"] == "not_authorized"
    assert response.headers[ACCESS_CONTROL_HEADER] == "*"

    response = await client.post(
        f"/{context.issuer_did}/credential",
        json={"types": ["ExampleCredential"], "format": "ldp_vc"},
        headers=bearer(token),
    )
    assert response.status == 400
    assert (await response.json())["error"] == "invalid_token"
