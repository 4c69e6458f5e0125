"""Supported credential value objects."""

from dataclasses import dataclass
from enum import Enum
from typing import List

from acapy_agent.messaging.models.openapi import OpenAPISchema
from marshmallow import ValidationError, fields, post_load


class Format(str, Enum):
    """Credential formats the issuer can be asked for."""

    JWT_VC = "jwt_vc"
    JWT_VC_JSON = "jwt_vc_json"
    JWT_VC_JSON_LD = "jwt_vc_json-ld"
    LDP_VC = "ldp_vc"

    @classmethod
    def from_str(cls, value: str) -> "Format":
        """Parse a wire value or enum name, ignoring case."""
        if isinstance(value, Format):
            return value
        normalized = str(value).strip().lower()
        for fmt in cls:
            if normalized in (fmt.value, fmt.name.lower()):
                return fmt
        raise ValueError(f"Unknown credential format {value}")

    def matching_formats(self) -> List[str]:
        """Declared format strings a client may use to support this format."""
        if self is Format.LDP_VC:
            return [Format.LDP_VC.value]
        if self is Format.JWT_VC_JSON_LD:
            return [Format.JWT_VC.value, Format.JWT_VC_JSON_LD.value]
        return [Format.JWT_VC.value, Format.JWT_VC_JSON.value]


class FormatField(fields.Field):
    """Marshmallow field for Format values."""

    def _serialize(self, value, attr, obj, **kwargs):
        if value is None:
            return None
        return Format.from_str(value).value

    def _deserialize(self, value, attr, data, **kwargs):
        try:
            return Format.from_str(value)
        except ValueError as err:
            raise ValidationError(str(err)) from err


@dataclass(frozen=True)
class SupportedCredential:
    """One issuable (type, format) combination."""

    type: str
    format: Format

    def serialize(self) -> dict:
        """Return the JSON representation."""
        return SupportedCredentialSchema().dump(self)

    @classmethod
    def deserialize(cls, value: dict) -> "SupportedCredential":
        """Load from the JSON representation."""
        return SupportedCredentialSchema().load(value)

    def to_issuer_metadata(self) -> dict:
        """Return the credentials_supported entry for issuer metadata."""
        return {
            "id": f"{self.type}_{self.format.value}",
            "format": self.format.value,
            "types": [self.type],
            "cryptographic_binding_methods_supported": ["did"],
            "cryptographic_suites_supported": ["Ed25519Signature2018"],
        }


class SupportedCredentialSchema(OpenAPISchema):
    """Schema for SupportedCredential."""

    type = fields.Str(
        required=True, metadata={"example": "UniversityDegreeCredential"}
    )
    format = FormatField(required=True, metadata={"example": "ldp_vc"})

    @post_load
    def make_supported(self, data, **kwargs):
        """Build the value object."""
        return SupportedCredential(**data)


class SupportedCredentialMetadataSchema(OpenAPISchema):
    """Schema for a credentials_supported entry of issuer metadata."""

    id = fields.Str(
        required=True, metadata={"example": "UniversityDegreeCredential_ldp_vc"}
    )
    format = fields.Str(required=True, metadata={"example": "ldp_vc"})
    types = fields.List(fields.Str(), required=True)
    cryptographic_binding_methods_supported = fields.List(
        fields.Str(), metadata={"example": ["did"]}
    )
    cryptographic_suites_supported = fields.List(
        fields.Str(), metadata={"example": ["Ed25519Signature2018"]}
    )
