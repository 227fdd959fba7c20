"""
Identity provider — resolves a bearer token to the authenticated caller.

The provider is opaque to the rest of the service: it answers "who is this
token?" and nothing else. Roles live in the user store, not here.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx
from combinators import flow, lift as L
from kungfu import Result, Ok, Error

from storefront._errors import Errors, StorefrontError
from storefront.auth._types import Identity

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    async def resolve(self, token: str) -> Result[Identity | None, StorefrontError]:
        """
        Resolve a session token.

        Returns Ok(None) when the token carries no valid session.
        """
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Supabase Auth
# ═══════════════════════════════════════════════════════════════════════════════


class SupabaseIdentityProvider:
    """
    Resolves tokens against a Supabase-compatible `GET /auth/v1/user`.

    Example:
        provider = SupabaseIdentityProvider(
            client=httpx.AsyncClient(),
            base_url="https://xyz.supabase.co",
            anon_key=settings.supabase_anon_key.get_secret_value(),
        )
        match await provider.resolve(token):
            case Ok(Identity() as who): ...
            case Ok(None): ...  # no session
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        anon_key: str,
        timeout_seconds: float = 5.0,
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._anon_key = anon_key
        self._timeout = timeout_seconds

    async def resolve(self, token: str) -> Result[Identity | None, StorefrontError]:
        if not token:
            return Ok(None)

        result = await (
            flow(
                L.catching_async(
                    lambda: self._fetch_identity(token),
                    on_error=lambda e: Errors.upstream(f"Identity provider unavailable: {type(e).__name__}"),
                )
            )
            .timeout(seconds=self._timeout)
            .compile()
        )

        match result:
            case Ok(identity):
                return Ok(identity)
            case Error(StorefrontError() as e):
                logger.error("identity lookup failed: %s", e.message)
                return Error(e)
            case Error(_):
                logger.error("identity lookup timed out after %ss", self._timeout)
                return Error(Errors.upstream("Identity provider timed out"))

    async def _fetch_identity(self, token: str) -> Identity | None:
        response = await self._client.get(
            f"{self._base_url}/auth/v1/user",
            headers={
                "apikey": self._anon_key,
                "Authorization": f"Bearer {token}",
            },
        )
        if response.status_code in (401, 403):
            return None
        response.raise_for_status()
        return _to_identity(response.json())


def _to_identity(payload: dict[str, Any]) -> Identity:
    provider = (payload.get("app_metadata") or {}).get("provider") or "email"
    return Identity(
        user_id=str(payload["id"]),
        email=str(payload.get("email") or ""),
        auth_type=str(provider),
    )


__all__ = (
    "IdentityProvider",
    "SupabaseIdentityProvider",
)
