"""Contracts and shared types for the brightspace-auth strategy stack."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

from pydantic import Field

from .models import AuthBaseModel


class ProviderError(Exception):
    """Standardized provider error with HTTP-style status information."""

    def __init__(self, error: str, description: str | None = None, status_code: int = 400):
        super().__init__(description or error)
        self.error = error
        self.description = description
        self.status_code = status_code


class InternalOAuthError(ProviderError):
    """An OAuth request to the provider failed below the protocol level.

    The underlying failure is kept on ``oauth_error`` (and as ``__cause__``
    when raised with ``from``).
    """

    def __init__(self, message: str, oauth_error: BaseException | None = None):
        super().__init__("server_error", message, status_code=500)
        self.oauth_error = oauth_error


class AuthorizationError(ProviderError):
    """The authorization server redirected back with an ``error`` parameter."""

    _STATUS_BY_ERROR = {
        "access_denied": 403,
        "server_error": 502,
        "temporarily_unavailable": 503,
    }

    def __init__(self, error: str, description: str | None = None, uri: str | None = None):
        super().__init__(error, description, status_code=self._STATUS_BY_ERROR.get(error, 500))
        self.uri = uri


class TokenExchangeResult(AuthBaseModel):
    """Tokens returned by the token endpoint.

    ``raw_fields`` holds every decoded field except ``refresh_token``; values
    decoded from JSON keep their JSON types, form-decoded values are strings.
    """

    # Any: form-decoded and misbehaving JSON responses are passed through as-is.
    access_token: Any = None
    refresh_token: Any = None
    raw_fields: dict[str, Any] = Field(default_factory=dict)


class ProfileEmail(AuthBaseModel):
    value: str


class NormalizedProfile(AuthBaseModel):
    """Provider-agnostic user profile.

    Fields the normalizer could not fill are left unset rather than set to
    ``None``; ``to_dict()`` omits them.
    """

    id: Any = None
    display_name: str | None = Field(default=None, alias="displayName")
    emails: list[ProfileEmail] | None = None
    provider: str | None = None
    raw: str | None = Field(default=None, alias="_raw")
    parsed: Any = Field(default=None, alias="_json")

    def to_dict(self) -> dict[str, Any]:
        """Return the passport-shaped profile (``displayName``, ``_raw``, ``_json``)."""
        return self.model_dump(by_alias=True, exclude_unset=True)


@runtime_checkable
class ProviderAdapter(Protocol):
    """Interface all provider strategies implement."""

    provider_name: str

    def build_authorize_url(
        self,
        *,
        redirect_uri: str | None = None,
        state: str | None = None,
        scopes: Sequence[str] | None = None,
        code_challenge: str | None = None,
        code_challenge_method: str | None = None,
        extra_params: Mapping[str, str] | None = None,
    ) -> str:
        """Construct the provider authorize URL."""

    async def exchange_code(
        self,
        *,
        code: str,
        redirect_uri: str | None = None,
        code_verifier: str | None = None,
    ) -> TokenExchangeResult:
        """Exchange an authorization code for provider tokens."""

    async def refresh_token(
        self, *, refresh_token: str, scopes: Sequence[str] | None = None
    ) -> TokenExchangeResult:
        """Refresh provider tokens."""

    async def user_profile(self, access_token: str) -> NormalizedProfile | None:
        """Fetch the profile associated with a provider access token."""


__all__ = [
    "AuthorizationError",
    "InternalOAuthError",
    "NormalizedProfile",
    "ProfileEmail",
    "ProviderAdapter",
    "ProviderError",
    "TokenExchangeResult",
]
