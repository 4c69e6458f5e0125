"""Retrieve configuration values."""

import re
from dataclasses import dataclass
from os import getenv
from typing import Any, Mapping, Optional, Union

from acapy_agent.config.base import BaseSettings
from acapy_agent.config.settings import Settings
from pydid import DID


class ConfigError(ValueError):
    """Base class for configuration errors."""

    def __init__(self, var: str, env: str):
        """Initialize a ConfigError."""
        super().__init__(
            f"Invalid {var} specified for OID4VCI issuer; use either "
            f"oid4vci.{var} plugin config value or environment variable {env}"
        )


def expand_vars(text: str) -> str:
    """Expand ${VAR} and ${VAR:-default} references from the environment."""

    def replacer(match):
        var_expr = match.group(1)
        if ":-" in var_expr:
            var_name, default_value = var_expr.split(":-", 1)
            return getenv(var_name.strip(), default_value.strip())
        return getenv(var_expr.strip(), match.group(0))

    return re.sub(r"\$\{([^}]+)\}", replacer, text)


@dataclass
class Config:
    """Configuration for the OID4VCI issuer."""

    host: str
    port: int
    endpoint: str
    issuer_did: str
    key_path: Optional[str] = None

    @classmethod
    def from_settings(
        cls, settings: Union[BaseSettings, Mapping[str, Any]]
    ) -> "Config":
        """Retrieve configuration from settings, falling back to the environment."""
        if not isinstance(settings, BaseSettings):
            settings = Settings(settings)
        plugin_settings = settings.for_plugin("oid4vci") or {}

        host = plugin_settings.get("host") or getenv("OID4VCI_HOST")
        port = int(plugin_settings.get("port") or getenv("OID4VCI_PORT", "0"))
        endpoint = plugin_settings.get("endpoint") or getenv("OID4VCI_ENDPOINT")
        issuer_did = plugin_settings.get("issuer_did") or getenv("OID4VCI_ISSUER_DID")
        key_path = plugin_settings.get("key_path") or getenv("OID4VCI_KEY_PATH")

        if not host:
            raise ConfigError("host", "OID4VCI_HOST")
        if not port:
            raise ConfigError("port", "OID4VCI_PORT")
        if not endpoint:
            raise ConfigError("endpoint", "OID4VCI_ENDPOINT")
        if not issuer_did or not DID.is_valid(issuer_did):
            raise ConfigError("issuer_did", "OID4VCI_ISSUER_DID")

        return cls(host, port, expand_vars(endpoint).rstrip("/"), issuer_did, key_path)

    @property
    def issuer_url(self) -> str:
        """URL identifying this credential issuer."""
        return f"{self.endpoint}/{self.issuer_did}"

    @property
    def credential_endpoint(self) -> str:
        """URL of the credential endpoint."""
        return f"{self.issuer_url}/credential"

    @property
    def token_endpoint(self) -> str:
        """URL of the token endpoint."""
        return f"{self.issuer_url}/token"
