"""Built-in claim mappers."""

import datetime
from typing import Any, Dict, Mapping

from ..models.credential import CredentialBuilder
from ..models.realm import UserSessionModel
from .base import ClaimMappers, MapperError

SUBJECT_DID = "subjectDid"


class BaseClaimMapper:
    """Mapper adding nothing unless a pass is overridden."""

    def __init__(self, config: Mapping[str, str]):
        """Initialize with the mapper config."""
        self.config = config

    def set_claims_for_subject(
        self, claims: Dict[str, Any], user_session: UserSessionModel
    ):
        """Add nothing."""

    def set_claims_for_credential(
        self, builder: CredentialBuilder, user_session: UserSessionModel
    ):
        """Add nothing."""

    def _require(self, name: str) -> str:
        value = self.config.get(name)
        if not value:
            raise MapperError(f"{type(self).__name__} requires {name}")
        return value


class UserAttributeMapper(BaseClaimMapper):
    """Copy a user property or attribute into the subject."""

    def set_claims_for_subject(
        self, claims: Dict[str, Any], user_session: UserSessionModel
    ):
        """Set subjectProperty from userAttribute."""
        prop = self._require("subjectProperty")
        values = user_session.user.attribute_values(self._require("userAttribute"))
        if not values:
            return

        aggregate = str(self.config.get("aggregateAttributeValues", "")).lower()
        existing = claims.get(prop)
        if aggregate == "true" and existing is not None:
            merged = existing if isinstance(existing, list) else [existing]
            claims[prop] = merged + [v for v in values if v not in merged]
        else:
            claims[prop] = values[0] if len(values) == 1 else values


class TargetRoleMapper(BaseClaimMapper):
    """Add the user's roles on a target client."""

    def set_claims_for_subject(
        self, claims: Dict[str, Any], user_session: UserSessionModel
    ):
        """Append {names, target} to the roles claim."""
        prop = self.config.get("subjectProperty") or "roles"
        client_id = self._require("clientId")
        names = user_session.user.roles_for_client(client_id)
        if not names:
            return

        role = {"names": sorted(names), "target": client_id}
        existing = claims.get(prop)
        roles = list(existing) if isinstance(existing, list) else []
        if role not in roles:
            roles.append(role)
        claims[prop] = roles


class StaticClaimMapper(BaseClaimMapper):
    """Set a fixed claim value."""

    def set_claims_for_subject(
        self, claims: Dict[str, Any], user_session: UserSessionModel
    ):
        """Set subjectProperty to staticValue."""
        claims[self._require("subjectProperty")] = self._require("staticValue")


class SubjectIdMapper(BaseClaimMapper):
    """Set the subject identifier."""

    def set_claims_for_subject(
        self, claims: Dict[str, Any], user_session: UserSessionModel
    ):
        """Use the user's DID, or a urn:uuid derived from the user id."""
        prop = self.config.get("subjectIdProperty") or "id"
        dids = user_session.user.attribute_values(SUBJECT_DID)
        claims[prop] = dids[0] if dids else f"urn:uuid:{user_session.user.id}"


class ContextMapper(BaseClaimMapper):
    """Add JSON-LD contexts to the credential."""

    def set_claims_for_credential(
        self, builder: CredentialBuilder, user_session: UserSessionModel
    ):
        """Append each comma separated entry of context."""
        for context in self._require("context").split(","):
            if context.strip():
                builder.add_context(context.strip())


class ExpiryMapper(BaseClaimMapper):
    """Set the credential expiration date."""

    def set_claims_for_credential(
        self, builder: CredentialBuilder, user_session: UserSessionModel
    ):
        """Expire expiryInMinutes after issuance."""
        try:
            minutes = int(self._require("expiryInMinutes"))
        except ValueError as err:
            raise MapperError("expiryInMinutes must be an integer") from err
        builder.expiration_date = builder.issuance_date + datetime.timedelta(
            minutes=minutes
        )


BUILTIN_MAPPERS = {
    "oid4vp-user-attribute-mapper": UserAttributeMapper,
    "oid4vp-target-role-mapper": TargetRoleMapper,
    "oid4vp-static-claim-mapper": StaticClaimMapper,
    "oid4vp-subject-id-mapper": SubjectIdMapper,
    "oid4vp-context-mapper": ContextMapper,
    "oid4vp-expiry-mapper": ExpiryMapper,
}


def default_mappers() -> ClaimMappers:
    """Return a registry holding the built-in mapper kinds."""
    return ClaimMappers(BUILTIN_MAPPERS)
