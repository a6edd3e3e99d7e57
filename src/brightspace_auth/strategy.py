"""Generic OAuth 2.0 authorization-code strategy.

``OAuth2Strategy`` drives one provider's login: it builds the authorize URL,
exchanges the returned code for tokens, loads the user's profile and hands
everything to an application supplied ``verify`` callable. Provider
strategies subclass it and override ``get_oauth_access_token`` and
``user_profile``.

State/PKCE generation and session handling belong to the caller.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import httpx

from .contracts import (
    AuthorizationError,
    InternalOAuthError,
    NormalizedProfile,
    ProviderAdapter,
    ProviderError,
    TokenExchangeResult,
)
from .models import OAuth2StrategyConfigModel
from .oauth2 import OAuth2Client, OAuth2RequestError

logger = logging.getLogger(__name__)

# verify(access_token, refresh_token, profile) -> user, or an awaitable of it
VerifyFunction = Callable[[Any, Any, Any], Any]

TRANSPORT_ERRORS: tuple[type[Exception], ...] = (httpx.HTTPError, OAuth2RequestError)


class OAuth2Strategy(ProviderAdapter):
    """Authenticate users against an OAuth 2.0 provider.

    Args:
        config: Validated strategy configuration.
        verify: Called with ``(access_token, refresh_token, profile)`` after a
            successful exchange; may be a coroutine function. Its return value
            is returned by ``authenticate()``.
        client: Optional pre-built ``OAuth2Client``; by default one is created
            from ``config``.
    """

    name = "oauth2"
    provider_name = "oauth2"

    def __init__(
        self,
        config: OAuth2StrategyConfigModel,
        verify: VerifyFunction,
        *,
        client: OAuth2Client | None = None,
    ):
        self.config = config
        self._verify = verify
        self._oauth2 = client or OAuth2Client(
            config.client_id,
            config.client_secret,
            config.authorization_url,
            config.token_url,
            config.custom_headers,
        )

    @property
    def oauth2(self) -> OAuth2Client:
        return self._oauth2

    # ----- authorize -----
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
        params: dict[str, str] = {"response_type": "code"}
        callback_url = redirect_uri or self.config.callback_url
        if callback_url:
            params["redirect_uri"] = callback_url
        scope = self._join_scope(scopes)
        if scope:
            params["scope"] = scope
        if state:
            params["state"] = state
        if code_challenge:
            params["code_challenge"] = code_challenge
        if code_challenge_method:
            params["code_challenge_method"] = code_challenge_method
        if extra_params:
            params.update(extra_params)
        return self._oauth2.get_authorize_url(params)

    def _join_scope(self, scopes: Sequence[str] | None) -> str | None:
        if scopes:
            return self.config.scope_separator.join(scopes)
        configured = self.config.scope
        if configured is None or isinstance(configured, str):
            return configured
        return self.config.scope_separator.join(configured)

    # ----- token exchange -----
    async def get_oauth_access_token(
        self, code: str, params: Mapping[str, str] | None = None
    ) -> TokenExchangeResult:
        """Exchange ``code`` (or a refresh token) at the token endpoint."""
        return await self._oauth2.get_oauth_access_token(code, params)

    async def exchange_code(
        self,
        *,
        code: str,
        redirect_uri: str | None = None,
        code_verifier: str | None = None,
    ) -> TokenExchangeResult:
        params = {"grant_type": "authorization_code"}
        callback_url = redirect_uri or self.config.callback_url
        if callback_url:
            params["redirect_uri"] = callback_url
        if code_verifier:
            params["code_verifier"] = code_verifier
        return await self.get_oauth_access_token(code, params)

    async def refresh_token(
        self, *, refresh_token: str, scopes: Sequence[str] | None = None
    ) -> TokenExchangeResult:
        params = {"grant_type": "refresh_token"}
        if scopes:
            params["scope"] = self.config.scope_separator.join(scopes)
        return await self.get_oauth_access_token(refresh_token, params)

    # ----- profile -----
    async def user_profile(self, access_token: str) -> NormalizedProfile | None:
        """Load the user's profile; providers without a profile endpoint return None."""
        return None

    # ----- callback -----
    async def authenticate(
        self,
        *,
        code: str,
        redirect_uri: str | None = None,
        code_verifier: str | None = None,
    ) -> Any:
        """Complete a login for ``code`` and return whatever ``verify`` returns."""
        try:
            tokens = await self.exchange_code(
                code=code, redirect_uri=redirect_uri, code_verifier=code_verifier
            )
        except TRANSPORT_ERRORS as exc:
            logger.warning(
                "Token exchange failed",
                extra={"provider": self.provider_name, "endpoint": "token"},
            )
            raise InternalOAuthError("Failed to obtain access token", exc) from exc

        profile = None
        if not self.config.skip_user_profile:
            profile = await self.user_profile(tokens.access_token)

        user = self._verify(tokens.access_token, tokens.refresh_token, profile)
        if inspect.isawaitable(user):
            user = await user
        return user

    async def handle_callback(
        self,
        query: Mapping[str, str],
        *,
        redirect_uri: str | None = None,
        code_verifier: str | None = None,
    ) -> Any:
        """Handle the provider's redirect back to the callback URL."""
        error = query.get("error")
        if error:
            raise AuthorizationError(error, query.get("error_description"), query.get("error_uri"))

        code = query.get("code")
        if not code:
            raise ProviderError("invalid_request", "Missing authorization code", status_code=400)

        return await self.authenticate(
            code=code, redirect_uri=redirect_uri, code_verifier=code_verifier
        )


__all__ = ["OAuth2Strategy", "TRANSPORT_ERRORS", "VerifyFunction"]
