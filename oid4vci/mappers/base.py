"""Claim mapper protocol and registry."""

from typing import Any, Callable, Dict, Mapping, Optional, Protocol

from ..cred_processor import CredProcessorError
from ..models.credential import CredentialBuilder
from ..models.realm import ProtocolMapperModel, UserSessionModel


class ClaimMapper(Protocol):
    """Contributes claims to a credential being issued."""

    def set_claims_for_subject(
        self, claims: Dict[str, Any], user_session: UserSessionModel
    ):
        """Add claims to the credential subject."""
        ...

    def set_claims_for_credential(
        self, builder: CredentialBuilder, user_session: UserSessionModel
    ):
        """Add credential level fields."""
        ...


MapperFactory = Callable[[Mapping[str, str]], ClaimMapper]


class MapperError(CredProcessorError):
    """Raised when a protocol mapper cannot be created or applied."""


class ClaimMappers:
    """Registry of mapper kinds."""

    def __init__(self, factories: Optional[Mapping[str, MapperFactory]] = None):
        """Initialize the mapper registry."""
        self.factories: Dict[str, MapperFactory] = dict(factories) if factories else {}

    def register(self, mapper_kind: str, factory: MapperFactory):
        """Register a factory building mappers of the given kind from config."""
        self.factories[mapper_kind] = factory

    def create(self, model: ProtocolMapperModel) -> ClaimMapper:
        """Create the mapper for a configured protocol mapper."""
        factory = self.factories.get(model.mapper_kind)
        if not factory:
            raise MapperError(
                f"No mapper registered for kind {model.mapper_kind} ({model.name})"
            )
        return factory(dict(model.config or {}))
