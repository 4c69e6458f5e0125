"""Per-application collaborators shared by all requests."""

from dataclasses import dataclass, field
from typing import Optional

from .clock import Clock, SystemClock
from .config import Config
from .cred_processor import CredProcessors
from .mappers import ClaimMappers, default_mappers
from .provider import IdentityProvider
from .registry import CapabilityRegistry
from .store import InMemoryNoteStore, NoteStore


@dataclass
class IssuerContext:
    """Everything a request handler needs.

    Signers are built once at startup and only read afterwards; all mutable
    protocol state lives in the note store and the identity provider.
    """

    config: Config
    provider: IdentityProvider
    processors: CredProcessors
    clock: Clock = field(default_factory=SystemClock)
    mappers: ClaimMappers = field(default_factory=default_mappers)
    notes: Optional[NoteStore] = None

    def __post_init__(self):
        """Default the note store to process memory."""
        if self.notes is None:
            self.notes = InMemoryNoteStore(self.clock)

    @property
    def issuer_did(self) -> str:
        """DID credentials are issued under."""
        return self.config.issuer_did

    async def registry(self) -> CapabilityRegistry:
        """Return a registry over the realm's current clients."""
        return await CapabilityRegistry.from_provider(self.provider)
