"""Which client declares which credential types and formats."""

import logging
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Sequence

from .error import UnsupportedCredentialType
from .models.realm import ClientModel
from .models.supported_cred import Format, SupportedCredential
from .provider import IdentityProvider

LOGGER = logging.getLogger(__name__)

VC_TYPES_PREFIX = "vctypes_"
ISSUANCE_PROTOCOL = "oid4vp"


@dataclass(frozen=True)
class ClientCapability:
    """Credentials a single client declares."""

    client_id: str
    declared_types: FrozenSet[SupportedCredential] = field(default_factory=frozenset)


def split_formats(value: Optional[str]) -> List[str]:
    """Split a comma separated capability declaration."""
    if not value:
        return []
    return [token.strip() for token in value.split(",") if token.strip()]


def parse_capability(client: ClientModel) -> ClientCapability:
    """Parse the credential declarations from a client's attributes."""
    declared = set()
    for key, value in (client.attributes or {}).items():
        if not key.startswith(VC_TYPES_PREFIX):
            continue
        vc_type = key[len(VC_TYPES_PREFIX) :]
        for token in split_formats(value):
            try:
                declared.add(SupportedCredential(vc_type, Format.from_str(token)))
            except ValueError:
                LOGGER.warning(
                    "Client %s declares unknown format %s for %s",
                    client.client_id,
                    token,
                    vc_type,
                )
    return ClientCapability(client.client_id, frozenset(declared))


class CapabilityRegistry:
    """Credential capabilities of the realm's issuance clients."""

    def __init__(self, clients: Sequence[ClientModel]):
        """Initialize the registry from the realm's clients."""
        self.clients = [
            client for client in clients if client.protocol == ISSUANCE_PROTOCOL
        ]

    @classmethod
    async def from_provider(cls, provider: IdentityProvider) -> "CapabilityRegistry":
        """Load the current client set from the identity provider."""
        return cls(await provider.get_clients())

    def resolve(self, vc_type: Optional[str], fmt: Format) -> List[ClientModel]:
        """Return the clients declaring vc_type in a format matching fmt.

        Raises:
            UnsupportedCredentialType: if no type is given or no client matches
        """
        if not vc_type:
            LOGGER.info("No VC type was provided.")
            raise UnsupportedCredentialType(
                "No VerifiableCredential-Type was provided in the request."
            )

        prefixed_type = f"{VC_TYPES_PREFIX}{vc_type}"
        format_strings = fmt.matching_formats()
        LOGGER.info(
            "Looking for client supporting %s with format %s",
            prefixed_type,
            format_strings,
        )
        vc_clients = [
            client
            for client in self.clients
            if any(
                format_string in split_formats(client.attributes.get(prefixed_type))
                for format_string in format_strings
            )
        ]
        if not vc_clients:
            LOGGER.info("No issuance client supporting type %s registered.", vc_type)
            raise UnsupportedCredentialType(
                f"No client supports {vc_type} as {fmt.value}"
            )
        return vc_clients

    def capabilities(self) -> List[ClientCapability]:
        """Return the declarations of every issuance client."""
        return [parse_capability(client) for client in self.clients]

    def list_all(self) -> List[SupportedCredential]:
        """Return every declared (type, format) pair, deduplicated."""
        supported = set()
        for capability in self.capabilities():
            supported |= capability.declared_types
        return sorted(supported, key=lambda cred: (cred.type, cred.format.value))
