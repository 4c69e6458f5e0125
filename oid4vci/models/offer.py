"""Offer, pre-authorized code and token documents."""

import json
from dataclasses import dataclass
from typing import List

from acapy_agent.messaging.models.openapi import OpenAPISchema
from marshmallow import fields, post_load, pre_load

from .supported_cred import SupportedCredential, SupportedCredentialSchema

PRE_AUTHORIZED_CODE_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:pre-authorized_code"


@dataclass
class OfferNote:
    """Pending offer stored under its nonce until materialized."""

    offered_credential: SupportedCredential
    user_session_id: str
    client_id: str
    expires_at: int

    def to_json(self) -> str:
        """Serialize for the note store."""
        return json.dumps(OfferNoteSchema().dump(self))

    @classmethod
    def from_json(cls, value: str) -> "OfferNote":
        """Deserialize a stored note.

        Raises:
            ValueError: if the value is not JSON
            ValidationError: if the JSON is not an offer note
        """
        return OfferNoteSchema().load(json.loads(value))


class OfferNoteSchema(OpenAPISchema):
    """Schema for OfferNote."""

    offered_credential = fields.Nested(
        SupportedCredentialSchema(), required=True, data_key="offeredCredential"
    )
    user_session_id = fields.Str(required=True, data_key="sessionId")
    client_id = fields.Str(required=True, data_key="clientId")
    expires_at = fields.Int(required=True, data_key="exp")

    @post_load
    def make_note(self, data, **kwargs):
        """Build the value object."""
        return OfferNote(**data)


@dataclass
class CredentialOfferURI:
    """Reference to a pending offer."""

    issuer: str
    nonce: str

    def serialize(self) -> dict:
        """Return the JSON representation."""
        return {"issuer": self.issuer, "nonce": self.nonce}


@dataclass
class CredentialOffer:
    """OIDC4VCI credential offer document."""

    credential_issuer: str
    credentials: List[SupportedCredential]
    pre_authorized_code: str
    user_pin_required: bool = False

    def serialize(self) -> dict:
        """Return the JSON representation."""
        return {
            "credential_issuer": self.credential_issuer,
            "credentials": [cred.serialize() for cred in self.credentials],
            "grants": {
                PRE_AUTHORIZED_CODE_GRANT_TYPE: {
                    "pre-authorized_code": self.pre_authorized_code,
                    "user_pin_required": self.user_pin_required,
                }
            },
        }


@dataclass
class TokenResponse:
    """Token endpoint response."""

    access_token: str
    expires_in: int
    token_type: str = "bearer"

    def serialize(self) -> dict:
        """Return the JSON representation."""
        return {
            "access_token": self.access_token,
            "token_type": self.token_type,
            "expires_in": self.expires_in,
        }


class CredOfferQuerySchema(OpenAPISchema):
    """Query schema for creating an offer."""

    type = fields.Str(
        required=True, metadata={"example": "UniversityDegreeCredential"}
    )
    format = fields.Str(required=True, metadata={"example": "ldp_vc"})


class CredOfferURIResponseSchema(OpenAPISchema):
    """Response schema for the credential offer URI."""

    issuer = fields.Str(
        required=True, metadata={"example": "https://issuer.example.com/did:web:x"}
    )
    nonce = fields.Str(required=True)


class PreAuthorizedGrantSchema(OpenAPISchema):
    """Schema for the pre-authorized code grant of an offer."""

    pre_authorized_code = fields.Str(required=True, data_key="pre-authorized_code")
    user_pin_required = fields.Bool(required=False)


class CredOfferGrantsSchema(OpenAPISchema):
    """Schema for offer grants."""

    pre_authorized = fields.Nested(
        PreAuthorizedGrantSchema(), data_key=PRE_AUTHORIZED_CODE_GRANT_TYPE
    )


class CredOfferSchema(OpenAPISchema):
    """Credential Offer Schema."""

    credential_issuer = fields.Str(
        required=True,
        metadata={
            "description": "The URL of the credential issuer.",
            "example": "https://example.com",
        },
    )
    credentials = fields.List(fields.Nested(SupportedCredentialSchema()))
    grants = fields.Nested(CredOfferGrantsSchema(), required=True)


class GetTokenSchema(OpenAPISchema):
    """Schema for the token endpoint.

    The code is read from `code`; non-conformant wallets send it as
    `pre-authorized_code` or `pre_authorized_code` instead.
    """

    grant_type = fields.Str(
        required=False,
        allow_none=True,
        metadata={"example": PRE_AUTHORIZED_CODE_GRANT_TYPE},
    )
    code = fields.Str(required=False, allow_none=True)
    pre_authorized_code = fields.Str(
        data_key="pre-authorized_code", required=False, allow_none=True
    )

    @pre_load
    def normalize_fields(self, data, **kwargs):
        """Map the underscore field to the hyphenated key."""
        mutable = dict(data)
        if "pre_authorized_code" in mutable and "pre-authorized_code" not in mutable:
            mutable["pre-authorized_code"] = mutable.pop("pre_authorized_code")
        return mutable


class TokenResponseSchema(OpenAPISchema):
    """Response schema for the token endpoint."""

    access_token = fields.Str(required=True)
    token_type = fields.Str(required=True, metadata={"example": "bearer"})
    expires_in = fields.Int(required=True, metadata={"example": 300})
