"""Unsigned verifiable credential and its builder."""

import copy
import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..clock import format_datetime

VC_CONTEXT = "https://www.w3.org/2018/credentials/v1"
TYPE_VERIFIABLE_CREDENTIAL = "VerifiableCredential"


@dataclass
class UnsignedCredential:
    """A credential ready for signing."""

    id: str
    issuer: str
    issuance_date: datetime.datetime
    types: List[str]
    subject_claims: Dict[str, Any]
    context: List[str] = field(default_factory=lambda: [VC_CONTEXT])
    expiration_date: Optional[datetime.datetime] = None
    additional: Dict[str, Any] = field(default_factory=dict)

    @property
    def subject_id(self) -> Optional[str]:
        """Identifier of the credential subject, if a mapper set one."""
        return self.subject_claims.get("id")

    def serialize(self) -> dict:
        """Return the JSON-LD document for this credential."""
        document = {
            "@context": list(self.context),
            "type": list(self.types),
            "id": self.id,
            "issuer": self.issuer,
            "issuanceDate": format_datetime(self.issuance_date),
            "credentialSubject": copy.deepcopy(self.subject_claims),
        }
        if self.expiration_date:
            document["expirationDate"] = format_datetime(self.expiration_date)
        for key, value in self.additional.items():
            document.setdefault(key, copy.deepcopy(value))
        return document


class CredentialBuilder:
    """Mutable envelope handed to claim mappers during the credential pass."""

    def __init__(
        self,
        id: str,
        issuer: str,
        issuance_date: datetime.datetime,
        credential_type: str,
        subject_claims: Dict[str, Any],
    ):
        """Initialize the builder with the finalized envelope fields."""
        self.id = id
        self.issuer = issuer
        self.issuance_date = issuance_date
        self.types = [TYPE_VERIFIABLE_CREDENTIAL, credential_type]
        self.context = [VC_CONTEXT]
        self.subject_claims = subject_claims
        self.expiration_date: Optional[datetime.datetime] = None
        self.additional: Dict[str, Any] = {}

    def add_context(self, context: str):
        """Append a JSON-LD context unless already present."""
        if context not in self.context:
            self.context.append(context)

    def build(self) -> UnsignedCredential:
        """Return the credential."""
        return UnsignedCredential(
            id=self.id,
            issuer=self.issuer,
            issuance_date=self.issuance_date,
            types=list(self.types),
            subject_claims=dict(self.subject_claims),
            context=list(self.context),
            expiration_date=self.expiration_date,
            additional=dict(self.additional),
        )
