import pytest

from oid4vci.error import UnsupportedCredentialType
from oid4vci.models.realm import ClientModel
from oid4vci.models.supported_cred import Format, SupportedCredential
from oid4vci.registry import CapabilityRegistry, parse_capability, split_formats


def client(id, protocol="oid4vp", **attributes):
    return ClientModel(id=id, client_id=id, protocol=protocol, attributes=attributes)


@pytest.fixture
def clients():
    return [
        client("a", vctypes_ExampleCredential="ldp_vc, jwt_vc_json"),
        client("b", vctypes_ExampleCredential="jwt_vc", vctypes_BadgeCredential="ldp_vc"),
        client("c", vctypes_LegacyCredential="jwt_vc_json-ld"),
        client("oidc", protocol="openid-connect", vctypes_ExampleCredential="ldp_vc"),
    ]


def test_split_formats():
    assert split_formats("ldp_vc, jwt_vc ,,") == ["ldp_vc", "jwt_vc"]
    assert split_formats(None) == []
    assert split_formats("") == []


def test_resolve_exact_format(clients):
    registry = CapabilityRegistry(clients)
    resolved = registry.resolve("ExampleCredential", Format.LDP_VC)
    assert [c.client_id for c in resolved] == ["a"]


def test_resolve_jwt_aliases(clients):
    registry = CapabilityRegistry(clients)
    for fmt in (Format.JWT_VC, Format.JWT_VC_JSON):
        resolved = registry.resolve("ExampleCredential", fmt)
        assert [c.client_id for c in resolved] == ["a", "b"]


def test_resolve_json_ld_alias(clients):
    registry = CapabilityRegistry(clients)
    assert [c.client_id for c in registry.resolve("LegacyCredential", Format.JWT_VC_JSON_LD)] == ["c"]
    with pytest.raises(UnsupportedCredentialType):
        registry.resolve("LegacyCredential", Format.JWT_VC_JSON)


def test_resolve_undeclared(clients):
    registry = CapabilityRegistry(clients)
    with pytest.raises(UnsupportedCredentialType):
        registry.resolve("BadgeCredential", Format.JWT_VC)
    with pytest.raises(UnsupportedCredentialType):
        registry.resolve("UnknownCredential", Format.LDP_VC)


def test_resolve_requires_type(clients):
    registry = CapabilityRegistry(clients)
    with pytest.raises(UnsupportedCredentialType):
        registry.resolve(None, Format.LDP_VC)
    with pytest.raises(UnsupportedCredentialType):
        registry.resolve("", Format.LDP_VC)


def test_other_protocols_ignored(clients):
    registry = CapabilityRegistry(clients)
    assert "oidc" not in [c.client_id for c in registry.clients]


def test_list_all_deduplicates(clients):
    registry = CapabilityRegistry(clients)
    assert registry.list_all() == [
        SupportedCredential("BadgeCredential", Format.LDP_VC),
        SupportedCredential("ExampleCredential", Format.JWT_VC),
        SupportedCredential("ExampleCredential", Format.JWT_VC_JSON),
        SupportedCredential("ExampleCredential", Format.LDP_VC),
        SupportedCredential("LegacyCredential", Format.JWT_VC_JSON_LD),
    ]


def test_list_all_idempotent_and_order_independent(clients):
    first = CapabilityRegistry(clients).list_all()
    assert CapabilityRegistry(clients).list_all() == first
    assert set(CapabilityRegistry(list(reversed(clients))).list_all()) == set(first)


def test_unknown_declared_format_skipped():
    capability = parse_capability(
        client("x", vctypes_ExampleCredential="ldp_vc,mso_mdoc")
    )
    assert capability.declared_types == frozenset(
        {SupportedCredential("ExampleCredential", Format.LDP_VC)}
    )


def test_format_from_str():
    assert Format.from_str("jwt_vc_json-ld") is Format.JWT_VC_JSON_LD
    assert Format.from_str("LDP_VC") is Format.LDP_VC
    assert Format.from_str("Jwt_Vc") is Format.JWT_VC
    with pytest.raises(ValueError):
        Format.from_str("mso_mdoc")
