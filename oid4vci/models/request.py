"""Credential request value objects."""

import json
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from acapy_agent.messaging.models.openapi import OpenAPISchema
from marshmallow import ValidationError, fields, post_load, validates_schema

from .supported_cred import Format, FormatField


class ProofType(str, Enum):
    """Proof of possession types."""

    JWT = "jwt"
    CWT = "cwt"
    LDP_VP = "ldp_vp"


@dataclass
class Proof:
    """Proof of possession attached to a credential request."""

    proof_type: Optional[str]
    jwt: Optional[str] = None


@dataclass
class CredentialRequest:
    """A parsed credential request."""

    types: List[str]
    format: Format
    proof: Optional[Proof] = None


def parse_type_param(value) -> List[str]:
    """Parse a `type` parameter holding a type name or a JSON encoded list."""
    if isinstance(value, list):
        return [str(item) for item in value]
    if not isinstance(value, str):
        raise ValidationError("type must be a string or a list of strings", "type")
    if value.strip().startswith("["):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError as err:
            raise ValidationError(f"Unable to read type parameter: {err}", "type")
        if not isinstance(parsed, list):
            raise ValidationError("type must encode a list", "type")
        return [str(item) for item in parsed]
    return [value]


class ProofSchema(OpenAPISchema):
    """Schema for a proof of possession."""

    proof_type = fields.Str(
        required=False, allow_none=True, metadata={"example": "jwt"}
    )
    jwt = fields.Str(required=False, metadata={"description": "Proof token"})

    @post_load
    def make_proof(self, data, **kwargs):
        """Build the value object."""
        return Proof(proof_type=data.get("proof_type"), jwt=data.get("jwt"))


class CredentialRequestSchema(OpenAPISchema):
    """Request schema for the credential endpoint."""

    types = fields.List(
        fields.Str(),
        required=False,
        metadata={"example": ["VerifiableCredential", "UniversityDegreeCredential"]},
    )
    type = fields.Raw(
        required=False,
        metadata={
            "description": "Single type or JSON encoded list; used when types is absent",
            "example": "UniversityDegreeCredential",
        },
    )
    format = FormatField(required=True, metadata={"example": "jwt_vc"})
    proof = fields.Nested(ProofSchema(), required=False, allow_none=True)

    @validates_schema
    def validate_types(self, data, **kwargs):
        """Require either types or type."""
        if data.get("types") is None and data.get("type") is None:
            raise ValidationError("types or type is required")

    @post_load
    def make_request(self, data, **kwargs):
        """Build the value object."""
        if data.get("types") is not None:
            types = list(data["types"])
        else:
            types = parse_type_param(data["type"])
        return CredentialRequest(
            types=types, format=data["format"], proof=data.get("proof")
        )


class CredentialResponseSchema(OpenAPISchema):
    """Response schema for the credential endpoint."""

    format = fields.Str(required=True, metadata={"example": "jwt_vc"})
    credential = fields.Raw(
        required=True,
        metadata={"description": "Compact JWT or linked-data credential document"},
    )


class IssueCredentialQuerySchema(OpenAPISchema):
    """Query schema for legacy credential retrieval."""

    type = fields.Str(
        required=True, metadata={"example": "UniversityDegreeCredential"}
    )
    token = fields.Str(
        required=False,
        metadata={"description": "Access token used instead of the Authorization header"},
    )
