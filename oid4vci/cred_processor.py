"""Signing backends and the format dispatch table."""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from acapy_agent.core.error import BaseError

from .error import UnsupportedCredentialType
from .models.credential import UnsignedCredential
from .models.supported_cred import Format

LOGGER = logging.getLogger(__name__)

LDP_FORMATS = (Format.LDP_VC,)
JWT_FORMATS = (Format.JWT_VC, Format.JWT_VC_JSON, Format.JWT_VC_JSON_LD)


class CredSigner(Protocol):
    """Signing backend protocol."""

    async def sign(self, credential: UnsignedCredential) -> Any:
        """Sign a credential and return the serialized artifact."""
        ...


class CredProcessorError(BaseError):
    """Base class for CredProcessor errors."""


class SigningServiceError(CredProcessorError):
    """Raised when a signing backend cannot be created or cannot sign."""


class CredProcessors:
    """Registry mapping credential formats to signing backends."""

    def __init__(self, signers: Optional[Mapping[Format, CredSigner]] = None):
        """Initialize the processor registry."""
        self.signers: Dict[Format, CredSigner] = dict(signers) if signers else {}

    def register_signer(self, formats: Iterable[Format], signer: CredSigner):
        """Register a signer for each of the given formats."""
        for fmt in formats:
            self.signers[fmt] = signer

    def signer_for_format(self, fmt: Format) -> CredSigner:
        """Return the signer handling the given format."""
        signer = self.signers.get(fmt)
        if not signer:
            LOGGER.warning("No signing backend loaded for format %s", fmt.value)
            raise UnsupportedCredentialType(
                f"No loaded signer for format {fmt.value}"
            )
        return signer

    @property
    def available_formats(self) -> List[Format]:
        """Formats with a loaded signer."""
        return [fmt for fmt in Format if fmt in self.signers]

    async def sign(self, fmt: Format, credential: UnsignedCredential) -> Any:
        """Sign a credential with the backend for fmt."""
        return await self.signer_for_format(fmt).sign(credential)
