"""Issue ldp_vc credentials with an embedded Ed25519Signature2018 proof."""

import logging
from typing import Any, List, Mapping, Optional, Union

from acapy_agent.did.did_key import DIDKey
from acapy_agent.vc.ld_proofs import (
    AssertionProofPurpose,
    Ed25519Signature2018,
    KeyPair,
    LinkedDataProofException,
    sign,
    verify,
)
from acapy_agent.vc.ld_proofs.document_downloader import StaticCacheJsonLdDownloader
from acapy_agent.wallet.util import b58_to_bytes
from aries_askar import AskarError, Key, KeyAlg

from oid4vci.clock import Clock, SystemClock, format_datetime
from oid4vci.cred_processor import SigningServiceError
from oid4vci.keys import load_signing_key
from oid4vci.models.credential import UnsignedCredential

LOGGER = logging.getLogger(__name__)

SIGNATURE_SUITE = "Ed25519Signature2018"
CLAIMS_VOCAB = "https://www.w3.org/ns/credentials/issuer-dependent#"


def verification_method_for(did: str) -> str:
    """Return the verification method id used for proofs made by did."""
    if did.startswith("did:key:"):
        return DIDKey.from_did(did).key_id
    return f"{did}#0"


class IssuerDocumentLoader:
    """JSON-LD document loader.

    Contexts come from the static cache shipped with acapy. did:key documents
    are derived from the DID itself, so proofs by did:key issuers verify
    without a resolver.
    """

    def __init__(self):
        """Initialize the loader."""
        self.downloader = StaticCacheJsonLdDownloader()

    def __call__(self, url: str, options: Optional[dict] = None) -> dict:
        """Load the document at url."""
        if url.startswith("did:key:"):
            return {
                "contentType": "application/ld+json",
                "contextUrl": None,
                "documentUrl": url,
                "document": DIDKey.from_did(url.split("#")[0]).did_doc,
            }
        return self.downloader.load(url, options)


class AskarKeyPair(KeyPair):
    """Linked-data key pair backed by an askar Ed25519 key."""

    def __init__(self, key: Key):
        """Initialize the key pair."""
        self.key = key

    async def sign(self, message: Union[List[bytes], bytes]) -> bytes:
        """Sign message with the key."""
        if isinstance(message, list):
            raise LinkedDataProofException(
                f"{SIGNATURE_SUITE} signs a single message"
            )
        return self.key.sign_message(message)

    async def verify(
        self, message: Union[List[bytes], bytes], signature: bytes
    ) -> bool:
        """Check signature over message."""
        if isinstance(message, list):
            return False
        try:
            return self.key.verify_signature(message, signature)
        except AskarError:
            return False

    @property
    def has_public_key(self) -> bool:
        """Whether the key pair has a public key."""
        return True

    @property
    def public_key(self) -> Optional[bytes]:
        """Public key bytes."""
        return self.key.get_public_bytes()

    def from_verification_method(self, verification_method: dict) -> "AskarKeyPair":
        """Create a public-only key pair from an Ed25519 verification method."""
        if "publicKeyBase58" not in verification_method:
            raise LinkedDataProofException(
                "Verification method has no publicKeyBase58"
            )
        return AskarKeyPair(
            Key.from_public_bytes(
                KeyAlg.ED25519, b58_to_bytes(verification_method["publicKeyBase58"])
            )
        )


class LdSigner:
    """Embeds a linked-data proof into the credential document."""

    def __init__(self, key: Key, clock: Optional[Clock] = None):
        """Initialize the signer with an Ed25519 issuer key."""
        if key.algorithm != KeyAlg.ED25519:
            raise SigningServiceError(
                f"{SIGNATURE_SUITE} requires an Ed25519 key, got {key.algorithm}"
            )
        self.key_pair = AskarKeyPair(key)
        self.clock = clock or SystemClock()
        self.document_loader = IssuerDocumentLoader()

    @classmethod
    def from_key_path(
        cls, key_path: Optional[str], clock: Optional[Clock] = None
    ) -> "LdSigner":
        """Create a signer from a private JWK file."""
        return cls(load_signing_key(key_path), clock)

    async def sign(self, credential: UnsignedCredential) -> dict:
        """Return the credential document with its proof."""
        document = credential.serialize()
        document["@context"] = [*document["@context"], {"@vocab": CLAIMS_VOCAB}]

        created = self.clock.now()
        suite = Ed25519Signature2018(
            key_pair=self.key_pair,
            verification_method=verification_method_for(credential.issuer),
            proof={"created": format_datetime(created)},
            date=created,
        )
        try:
            signed = await sign(
                document=document,
                suite=suite,
                purpose=AssertionProofPurpose(),
                document_loader=self.document_loader,
            )
        except (LinkedDataProofException, AskarError) as err:
            raise SigningServiceError(f"Unable to sign {credential.id}") from err

        LOGGER.debug("Signed %s with %s", credential.id, SIGNATURE_SUITE)
        return signed


async def verify_ld_proof(document: Mapping[str, Any], key: Key) -> bool:
    """Check the embedded proof of a document against key."""
    result = await verify(
        document=dict(document),
        suites=[Ed25519Signature2018(key_pair=AskarKeyPair(key))],
        purpose=AssertionProofPurpose(),
        document_loader=IssuerDocumentLoader(),
    )
    if not result.verified:
        LOGGER.debug("Proof verification failed: %s", result.errors)
    return result.verified
