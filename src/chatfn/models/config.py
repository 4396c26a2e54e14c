"""Client configuration.

ClientConfig holds everything needed to reach the completion service:
credential, base URL, optional organization, timeout and retry budget.
Construction is the single validating step -- a config without an API key
cannot exist.

Example::

    from chatfn import ClientConfig
    config = ClientConfig(api_key="sk-...", timeout=30.0)
    config = ClientConfig.from_env()  # CHATFN_API_KEY / OPENAI_API_KEY
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from chatfn.exceptions import ConfigError

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_TIMEOUT = 60.0


@dataclass(frozen=True)
class ClientConfig:
    """Validated, immutable connection settings.

    Attributes:
        api_key: Bearer credential for the service. Required.
        base_url: API base URL; ``/chat/completions`` is appended.
        organization: Optional organization id sent as ``OpenAI-Organization``.
        timeout: Per-request timeout in seconds.
        max_retries: Total attempts per request. 1 disables retries.
    """

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    organization: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = 1

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ConfigError(
                "No API key provided. Pass api_key= or set CHATFN_API_KEY "
                "(or OPENAI_API_KEY) environment variable."
            )
        if not self.base_url:
            raise ConfigError("base_url must not be empty")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if self.max_retries < 1:
            raise ConfigError(f"max_retries must be at least 1, got {self.max_retries}")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @property
    def endpoint(self) -> str:
        """Full URL of the chat completions endpoint."""
        return f"{self.base_url}/chat/completions"

    def headers(self) -> dict[str, str]:
        """Request headers carrying the credential."""
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        if self.organization:
            headers["OpenAI-Organization"] = self.organization
        return headers

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: object,
    ) -> ClientConfig:
        """Build a config from environment variables.

        Reads ``CHATFN_API_KEY`` (falling back to ``OPENAI_API_KEY``),
        ``CHATFN_BASE_URL``, ``CHATFN_ORGANIZATION``, ``CHATFN_TIMEOUT`` and
        ``CHATFN_MAX_RETRIES``. Keyword overrides that are not None win over
        the environment.

        Raises:
            ConfigError: If no credential is found or a numeric value is invalid.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {
            "api_key": env.get("CHATFN_API_KEY") or env.get("OPENAI_API_KEY", ""),
            "base_url": env.get("CHATFN_BASE_URL") or DEFAULT_BASE_URL,
            "organization": env.get("CHATFN_ORGANIZATION") or None,
        }
        try:
            if env.get("CHATFN_TIMEOUT"):
                values["timeout"] = float(env["CHATFN_TIMEOUT"])
            if env.get("CHATFN_MAX_RETRIES"):
                values["max_retries"] = int(env["CHATFN_MAX_RETRIES"])
        except ValueError as exc:
            raise ConfigError(f"Invalid numeric setting in environment: {exc}") from exc

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        return (
            f"ClientConfig(api_key='***', base_url={self.base_url!r}, "
            f"organization={self.organization!r}, timeout={self.timeout}, "
            f"max_retries={self.max_retries})"
        )
