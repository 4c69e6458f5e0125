"""Realm entities owned by the identity provider."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from acapy_agent.messaging.models.openapi import OpenAPISchema
from marshmallow import fields, post_load


@dataclass
class ProtocolMapperModel:
    """A configured claim mapper attached to a client."""

    name: str
    mapper_kind: str
    config: Dict[str, str] = field(default_factory=dict)


@dataclass
class ClientModel:
    """A client registered in the realm."""

    id: str
    client_id: str
    protocol: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    protocol_mappers: List[ProtocolMapperModel] = field(default_factory=list)


@dataclass
class UserModel:
    """A realm user."""

    id: str
    username: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    attributes: Dict[str, List[str]] = field(default_factory=dict)
    client_roles: Dict[str, Set[str]] = field(default_factory=dict)

    def attribute_values(self, name: str) -> List[str]:
        """Return the values of a built-in property or custom attribute."""
        builtin = {
            "username": self.username,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
        }
        if name in builtin:
            value = builtin[name]
            return [value] if value is not None else []
        return list(self.attributes.get(name, []))

    def roles_for_client(self, client_id: str) -> Set[str]:
        """Return the names of the roles the user holds on a client."""
        return set(self.client_roles.get(client_id, set()))


@dataclass
class UserSessionModel:
    """An authenticated user session."""

    id: str
    user: UserModel


@dataclass
class ClientSessionModel:
    """A user session's authentication at one client."""

    id: str
    user_session: UserSessionModel
    client: ClientModel


@dataclass
class AuthResult:
    """Result of bearer token authentication."""

    user: UserModel
    session: UserSessionModel
    client: ClientModel


@dataclass
class CodeParseResult:
    """Result of redeeming a one-time code."""

    client_session: Optional[ClientSessionModel] = None
    expired: bool = False
    illegal: bool = False


@dataclass
class AccessToken:
    """An encoded access token and its absolute expiry."""

    token: str
    exp: int


class ProtocolMapperModelSchema(OpenAPISchema):
    """Schema for ProtocolMapperModel."""

    name = fields.Str(required=True, metadata={"example": "subject-id"})
    mapper_kind = fields.Str(
        required=True,
        data_key="protocolMapper",
        metadata={"example": "oid4vp-subject-id-mapper"},
    )
    config = fields.Dict(keys=fields.Str(), values=fields.Str(), load_default=dict)

    @post_load
    def make_mapper(self, data, **kwargs):
        """Build the model."""
        return ProtocolMapperModel(**data)


class ClientModelSchema(OpenAPISchema):
    """Schema for ClientModel."""

    id = fields.Str(required=True)
    client_id = fields.Str(required=True, data_key="clientId")
    protocol = fields.Str(load_default=None, metadata={"example": "oid4vp"})
    attributes = fields.Dict(keys=fields.Str(), values=fields.Str(), load_default=dict)
    protocol_mappers = fields.List(
        fields.Nested(ProtocolMapperModelSchema()),
        data_key="protocolMappers",
        load_default=list,
    )

    @post_load
    def make_client(self, data, **kwargs):
        """Build the model."""
        return ClientModel(**data)


class UserModelSchema(OpenAPISchema):
    """Schema for UserModel."""

    id = fields.Str(required=True)
    username = fields.Str(required=True)
    email = fields.Str(load_default=None)
    first_name = fields.Str(load_default=None, data_key="firstName")
    last_name = fields.Str(load_default=None, data_key="lastName")
    attributes = fields.Dict(
        keys=fields.Str(), values=fields.List(fields.Str()), load_default=dict
    )
    client_roles = fields.Dict(
        keys=fields.Str(),
        values=fields.List(fields.Str()),
        data_key="clientRoles",
        load_default=dict,
    )

    @post_load
    def make_user(self, data, **kwargs):
        """Build the model."""
        data["client_roles"] = {
            client: set(roles) for client, roles in data["client_roles"].items()
        }
        return UserModel(**data)


class RealmSchema(OpenAPISchema):
    """Clients and users seeding an in-memory realm."""

    clients = fields.List(fields.Nested(ClientModelSchema()), load_default=list)
    users = fields.List(fields.Nested(UserModelSchema()), load_default=list)
