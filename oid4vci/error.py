"""Errors returned by the issuer endpoints."""

from enum import Enum

from acapy_agent.core.error import BaseError


class ErrorType(str, Enum):
    """Error codes sent to wallets in the `error` field."""

    INVALID_REQUEST = "invalid_request"
    INVALID_TOKEN = "invalid_token"
    INVALID_OR_MISSING_PROOF = "invalid_or_missing_proof"
    UNSUPPORTED_CREDENTIAL_TYPE = "unsupported_credential_type"
    NOT_AUTHORIZED = "not_authorized"
    NOT_FOUND = "not_found"


class IssuerError(BaseError):
    """Base class for errors terminating an issuer request."""

    error_type: ErrorType = ErrorType.INVALID_REQUEST
    status: int = 400

    def to_json(self) -> dict:
        """Return the error response body."""
        body = {"error": self.error_type.value}
        if self.message:
            body["error_description"] = self.message
        return body


class InvalidRequest(IssuerError):
    """Malformed credential request, type list or offer payload."""

    error_type = ErrorType.INVALID_REQUEST


class InvalidToken(IssuerError):
    """Unknown, expired or consumed code; bad grant type; invalid bearer token."""

    error_type = ErrorType.INVALID_TOKEN


class InvalidOrMissingProof(IssuerError):
    """Unsupported proof type."""

    error_type = ErrorType.INVALID_OR_MISSING_PROOF


class UnsupportedCredentialType(IssuerError):
    """No client declares the type and format, or no signer is loaded for it."""

    error_type = ErrorType.UNSUPPORTED_CREDENTIAL_TYPE


class NotAuthorized(IssuerError):
    """Missing or invalid bearer credential."""

    error_type = ErrorType.NOT_AUTHORIZED
    status = 401


class NotFound(IssuerError):
    """The requested issuer does not exist."""

    error_type = ErrorType.NOT_FOUND
    status = 404
