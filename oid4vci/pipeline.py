"""Build the unsigned credential from the resolved clients' mappers."""

import logging
import uuid
from typing import Any, Dict, List, Sequence

from .clock import Clock
from .mappers import ClaimMapper, ClaimMappers
from .models.credential import CredentialBuilder, UnsignedCredential
from .models.realm import ClientModel, UserSessionModel

LOGGER = logging.getLogger(__name__)


def mappers_for_clients(
    clients: Sequence[ClientModel], registry: ClaimMappers
) -> List[ClaimMapper]:
    """Instantiate the protocol mappers of clients in declaration order."""
    return [
        registry.create(model)
        for client in clients
        for model in client.protocol_mappers
    ]


class ClaimPipeline:
    """Applies an ordered list of mappers to a credential."""

    def __init__(self, mappers: Sequence[ClaimMapper]):
        """Initialize the pipeline."""
        self.mappers = list(mappers)

    def subject_claims(self, user_session: UserSessionModel) -> Dict[str, Any]:
        """Run the subject pass; later mappers overwrite earlier keys."""
        claims: Dict[str, Any] = {}
        for mapper in self.mappers:
            mapper.set_claims_for_subject(claims, user_session)
        return claims

    def build(
        self,
        vc_type: str,
        issuer: str,
        clock: Clock,
        user_session: UserSessionModel,
    ) -> UnsignedCredential:
        """Build a fresh credential of vc_type for the session's user."""
        claims = self.subject_claims(user_session)
        LOGGER.debug("Will set %s", claims)

        builder = CredentialBuilder(
            id=f"urn:uuid:{uuid.uuid4()}",
            issuer=issuer,
            issuance_date=clock.now().replace(microsecond=0),
            credential_type=vc_type,
            subject_claims=claims,
        )
        for mapper in self.mappers:
            mapper.set_claims_for_credential(builder, user_session)
        return builder.build()
