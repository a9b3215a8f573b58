"""Identity providers.

Turn a bearer token into the signed-in user's ``uid`` and ``email``.
Role resolution happens in the application layer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

import httpx
import structlog

logger = structlog.get_logger()


@dataclass(frozen=True)
class IdentityUser:
    """User as known to the identity provider."""

    uid: str
    email: str | None = None


class IdentityProvider(ABC):
    """Token verification interface."""

    @abstractmethod
    async def verify_token(self, token: str) -> IdentityUser | None:
        """Resolve a token to a user.

        Args:
            token: Bearer token from the request.

        Returns:
            The user, or None if the token is not valid.
        """

    async def close(self) -> None:
        """Release backend resources."""
        return None


class StaticIdentityProvider(IdentityProvider):
    """Fixed token table, for development and tests."""

    def __init__(self, tokens: dict[str, tuple[str, str | None]]) -> None:
        """Initialize with ``{token: (uid, email)}``."""
        self._tokens = dict(tokens)

    async def verify_token(self, token: str) -> IdentityUser | None:
        entry = self._tokens.get(token)
        if entry is None:
            return None
        uid, email = entry
        return IdentityUser(uid=uid, email=email)


class FirebaseIdentityProvider(IdentityProvider):
    """Verifies ID tokens with the Identity Toolkit ``accounts:lookup`` call."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://identitytoolkit.googleapis.com",
        timeout: float = 30.0,
    ) -> None:
        """Initialize the identity client.

        Args:
            api_key: Web API key of the project.
            base_url: Identity Toolkit base URL.
            timeout: Request timeout in seconds.
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def verify_token(self, token: str) -> IdentityUser | None:
        client = await self._get_client()
        response = await client.post(
            "/v1/accounts:lookup",
            params={"key": self.api_key},
            json={"idToken": token},
        )

        # Expired or malformed tokens come back as 400 INVALID_ID_TOKEN
        if response.status_code == 400:
            logger.info("Identity token rejected")
            return None
        response.raise_for_status()

        users = response.json().get("users") or []
        if not users:
            return None
        return IdentityUser(uid=users[0]["localId"], email=users[0].get("email"))
