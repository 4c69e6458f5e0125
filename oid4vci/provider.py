"""Identity provider the issuer relies on for users, clients and sessions."""

import json
import logging
import uuid
from abc import ABC, abstractmethod
from secrets import token_urlsafe
from typing import Any, Dict, List, Mapping, Optional

from acapy_agent.wallet.jwt import BadJWSHeaderError
from aries_askar import AskarError, Key, KeyAlg

from .clock import Clock
from .jwt import jwt_sign, jwt_verify
from .models.realm import (
    AccessToken,
    AuthResult,
    ClientModel,
    ClientSessionModel,
    CodeParseResult,
    RealmSchema,
    UserModel,
    UserSessionModel,
)
from .store import InMemoryNoteStore, NoteStore

LOGGER = logging.getLogger(__name__)

ACCESS_TOKEN_LIFESPAN = 300
ACCESS_CODE_LIFESPAN = 60
CODE_BYTES = 16


class IdentityProvider(ABC):
    """Users, clients, sessions, one-time codes and access tokens of a realm."""

    @abstractmethod
    async def authenticate(self, token: Optional[str]) -> Optional[AuthResult]:
        """Resolve a bearer token to its user, session and client."""

    @abstractmethod
    async def get_clients(self) -> List[ClientModel]:
        """Return the realm's clients in declaration order."""

    @abstractmethod
    async def get_client_session(
        self, user_session_id: str, client_id: str
    ) -> Optional[ClientSessionModel]:
        """Return the client session of a user session, if still active."""

    @abstractmethod
    async def issue_code(self, client_session: ClientSessionModel) -> str:
        """Issue a one-time code bound to a client session."""

    @abstractmethod
    async def redeem_code(self, code: str) -> CodeParseResult:
        """Consume a one-time code."""

    @abstractmethod
    async def create_access_token(
        self, client_session: ClientSessionModel
    ) -> AccessToken:
        """Create an access token for a client session."""

    @abstractmethod
    async def openid_configuration(self, base_url: str) -> dict:
        """Return the realm's OpenID discovery document."""


class InMemoryIdentityProvider(IdentityProvider):
    """Identity provider keeping its realm in process memory."""

    def __init__(
        self,
        clock: Clock,
        *,
        realm: str = "default",
        access_token_lifespan: int = ACCESS_TOKEN_LIFESPAN,
        access_code_lifespan: int = ACCESS_CODE_LIFESPAN,
        code_store: Optional[NoteStore] = None,
    ):
        """Initialize the provider with an empty realm."""
        self.clock = clock
        self.realm = realm
        self.access_token_lifespan = access_token_lifespan
        self.access_code_lifespan = access_code_lifespan
        self._codes = code_store or InMemoryNoteStore(clock)
        self._key = Key.generate(KeyAlg.ED25519)
        self._clients: List[ClientModel] = []
        self._users: Dict[str, UserModel] = {}
        self._sessions: Dict[str, UserSessionModel] = {}
        self._client_sessions: Dict[str, ClientSessionModel] = {}

    def add_client(self, client: ClientModel) -> ClientModel:
        """Register a client."""
        self._clients.append(client)
        return client

    def add_user(self, user: UserModel) -> UserModel:
        """Register a user."""
        self._users[user.username] = user
        return user

    def load_realm(self, realm: Mapping[str, Any]):
        """Register the clients and users of a realm document.

        Raises:
            ValidationError: if the document does not describe a realm
        """
        loaded = RealmSchema().load(realm)
        for client in loaded["clients"]:
            self.add_client(client)
        for user in loaded["users"]:
            self.add_user(user)
        LOGGER.info(
            "Loaded %d clients and %d users into realm %s",
            len(loaded["clients"]),
            len(loaded["users"]),
            self.realm,
        )

    async def login(self, username: str, client_id: str) -> str:
        """Open a session for a user at a client and return its access token."""
        user = self._users.get(username)
        client = self._client_by_client_id(client_id)
        if not user or not client:
            raise ValueError(f"Unknown user {username} or client {client_id}")

        user_session = UserSessionModel(id=str(uuid.uuid4()), user=user)
        self._sessions[user_session.id] = user_session
        client_session = ClientSessionModel(
            id=str(uuid.uuid4()), user_session=user_session, client=client
        )
        self._client_sessions[self._session_key(user_session.id, client.id)] = (
            client_session
        )
        LOGGER.debug("Opened session %s for %s", user_session.id, username)
        return (await self.create_access_token(client_session)).token

    def logout(self, user_session_id: str):
        """End a user session and its client sessions."""
        self._sessions.pop(user_session_id, None)
        for key in [
            k for k in self._client_sessions if k.startswith(f"{user_session_id}/")
        ]:
            del self._client_sessions[key]

    async def authenticate(self, token: Optional[str]) -> Optional[AuthResult]:
        """Verify an access token and resolve its session."""
        if not token:
            return None
        try:
            result = jwt_verify(self._key, token)
        except (ValueError, BadJWSHeaderError, AskarError) as err:
            LOGGER.debug("Rejected malformed access token: %s", err)
            return None
        payload = result.payload
        if not result.verified or payload.get("exp", 0) < self.clock.epoch():
            return None

        client_session = await self.get_client_session(
            payload.get("sid", ""), payload.get("azp", "")
        )
        if not client_session:
            return None
        return AuthResult(
            user=client_session.user_session.user,
            session=client_session.user_session,
            client=client_session.client,
        )

    async def get_clients(self) -> List[ClientModel]:
        """Return all clients."""
        return list(self._clients)

    async def get_client_session(
        self, user_session_id: str, client_id: str
    ) -> Optional[ClientSessionModel]:
        """Return the client session if the user session is still open."""
        if user_session_id not in self._sessions:
            return None
        return self._client_sessions.get(self._session_key(user_session_id, client_id))

    async def issue_code(self, client_session: ClientSessionModel) -> str:
        """Issue a code redeemable once within the access code lifespan."""
        code = token_urlsafe(CODE_BYTES)
        expires_at = self.clock.epoch() + self.access_code_lifespan
        await self._codes.put(
            code,
            json.dumps(
                {
                    "sessionId": client_session.user_session.id,
                    "clientId": client_session.client.id,
                }
            ),
            expires_at,
        )
        return code

    async def redeem_code(self, code: str) -> CodeParseResult:
        """Consume a code; unknown, used and expired codes are illegal."""
        stored = await self._codes.pop(code)
        if stored is None:
            return CodeParseResult(illegal=True)
        binding = json.loads(stored)
        client_session = await self.get_client_session(
            binding["sessionId"], binding["clientId"]
        )
        if not client_session:
            return CodeParseResult(expired=True)
        return CodeParseResult(client_session=client_session)

    async def create_access_token(
        self, client_session: ClientSessionModel
    ) -> AccessToken:
        """Sign an access token for the client session."""
        now = self.clock.epoch()
        exp = now + self.access_token_lifespan
        payload = {
            "jti": str(uuid.uuid4()),
            "sub": client_session.user_session.user.id,
            "azp": client_session.client.id,
            "sid": client_session.user_session.id,
            "typ": "Bearer",
            "iat": now,
            "exp": exp,
        }
        return AccessToken(token=jwt_sign(self._key, {}, payload), exp=exp)

    async def openid_configuration(self, base_url: str) -> dict:
        """Return a minimal discovery document for the realm."""
        base = f"{base_url}/realms/{self.realm}/protocol/openid-connect"
        return {
            "issuer": f"{base_url}/realms/{self.realm}",
            "authorization_endpoint": f"{base}/auth",
            "token_endpoint": f"{base}/token",
            "jwks_uri": f"{base}/certs",
            "response_types_supported": ["code", "id_token", "code id_token"],
            "grant_types_supported": ["authorization_code", "refresh_token"],
            "subject_types_supported": ["public"],
            "id_token_signing_alg_values_supported": ["EdDSA"],
        }

    def _client_by_client_id(self, client_id: str) -> Optional[ClientModel]:
        return next((c for c in self._clients if c.client_id == client_id), None)

    @staticmethod
    def _session_key(user_session_id: str, client_id: str) -> str:
        return f"{user_session_id}/{client_id}"
