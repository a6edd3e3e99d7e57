"""Brightspace (D2L) OAuth 2.0 strategy."""

from __future__ import annotations

import base64
import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

from ..contracts import (
    InternalOAuthError,
    NormalizedProfile,
    ProfileEmail,
    ProviderError,
    TokenExchangeResult,
)
from ..models import BrightspaceAuthConfigModel
from ..oauth2 import (
    FORM_CONTENT_TYPE,
    OAuth2Client,
    build_exchange_result,
    decode_json,
    parse_token_response,
)
from ..strategy import TRANSPORT_ERRORS, OAuth2Strategy, VerifyFunction

logger = logging.getLogger(__name__)

PROVIDER_NAME = "brightspace"


def _name_part(data: Mapping[str, Any], key: str) -> str:
    # Rendered the way a JavaScript template literal would: undefined, null, true, 1.
    if key not in data:
        return "undefined"
    value = data[key]
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_profile(data: Any) -> NormalizedProfile:
    """Normalize a Brightspace ``whoami`` response.

    Accepts the decoded JSON or its raw text. For a list only the first element
    is used. Sets ``id``, ``display_name`` and, when ``Email`` is a non-empty
    string, ``emails``; every other field is left unset.
    """
    if isinstance(data, (str, bytes)):
        data = decode_json(data)
    if isinstance(data, list):
        data = data[0] if data else {}
    if not isinstance(data, Mapping):
        data = {}

    fields: dict[str, Any] = {
        "display_name": f"{_name_part(data, 'FirstName')} {_name_part(data, 'LastName')}",
    }
    if "Identifier" in data:
        fields["id"] = data["Identifier"]

    email = data.get("Email")
    if isinstance(email, str) and email:
        fields["emails"] = [ProfileEmail(value=email)]

    return NormalizedProfile.model_validate(fields)


class BrightspaceStrategy(OAuth2Strategy):
    """Authenticate users against Brightspace using OAuth 2.0.

    The token endpoint is called with HTTP Basic client authentication, and the
    profile is read from the Learning Platform ``whoami`` route of ``host``.

    Options (snake_case or passport-style camelCase):
        - ``host``            your Brightspace instance, e.g. ``https://school.brightspace.com``
        - ``client_id``       your Brightspace application's Client ID
        - ``client_secret``   your Brightspace application's Client Secret
        - ``callback_url``    URL Brightspace redirects to after authorization

    Example:
        >>> strategy = BrightspaceStrategy(
        ...     {
        ...         "host": "https://brightspace.example.net",
        ...         "clientID": "123-456-789",
        ...         "clientSecret": "shhh-its-a-secret",
        ...         "callbackURL": "https://www.example.net/auth/brightspace/callback",
        ...     },
        ...     lambda access_token, refresh_token, profile: profile,
        ... )
        >>> strategy.user_profile_url
        'https://brightspace.example.net/d2l/api/lp/1.31/users/whoami'
    """

    name = PROVIDER_NAME
    provider_name = PROVIDER_NAME
    config: BrightspaceAuthConfigModel

    parse = staticmethod(parse_profile)

    def __init__(
        self,
        config: BrightspaceAuthConfigModel | Mapping[str, Any],
        verify: VerifyFunction,
        *,
        client: OAuth2Client | None = None,
    ):
        if not isinstance(config, BrightspaceAuthConfigModel):
            config = BrightspaceAuthConfigModel.model_validate(config)
        super().__init__(config, verify, client=client)

        self.user_profile_url = config.user_profile_url
        self._oauth2.use_authorization_header_for_get(True)

        logger.info(
            "Configured Brightspace strategy",
            extra={
                "provider": self.provider_name,
                "client_id": config.client_id,
                "authorization_url": config.authorization_url,
                "token_url": config.token_url,
                "user_profile_url": self.user_profile_url,
            },
        )

    # ----- token exchange -----
    async def get_oauth_access_token(
        self, code: str, params: Mapping[str, str] | None = None
    ) -> TokenExchangeResult:
        """Exchange an authorization code or refresh token.

        ``code`` is sent as ``refresh_token`` when ``params["grant_type"]`` is
        ``"refresh_token"`` and as ``code`` otherwise. Client credentials go in
        a Basic ``Authorization`` header, never in the body. Transport errors
        are raised unchanged.
        """
        payload = dict(params or {})
        code_param = "refresh_token" if payload.get("grant_type") == "refresh_token" else "code"
        payload[code_param] = code

        response = await self._oauth2.request(
            "POST",
            self._oauth2.access_token_url,
            {
                "Content-Type": FORM_CONTENT_TYPE,
                "Authorization": self._basic_auth_header(),
            },
            urlencode(payload),
        )
        return build_exchange_result(parse_token_response(response.body))

    def _basic_auth_header(self) -> str:
        credentials = f"{self._oauth2.client_id}:{self._oauth2.client_secret}".encode()
        return f"Basic {base64.b64encode(credentials).decode()}"

    # ----- profile -----
    async def user_profile(self, access_token: str) -> NormalizedProfile:
        """Retrieve the user's profile from Brightspace.

        The returned profile has ``id``, ``display_name``, optional ``emails``,
        ``provider`` (always ``"brightspace"``), ``raw`` (the response body)
        and ``parsed`` (the decoded body).

        Raises:
            InternalOAuthError: The request failed, or no profile URL is configured.
            ProviderError: The response body is not JSON.
        """
        try:
            response = await self._oauth2.get(self.user_profile_url, access_token)
        except TRANSPORT_ERRORS as exc:
            logger.warning(
                "Brightspace whoami request failed",
                extra={"provider": self.provider_name, "endpoint": "whoami"},
            )
            raise InternalOAuthError("Failed to fetch user profile", exc) from exc

        body = response.body
        try:
            parsed = decode_json(body)
        except ValueError as exc:
            logger.warning(
                "Brightspace whoami endpoint returned invalid JSON",
                extra={
                    "provider": self.provider_name,
                    "endpoint": "whoami",
                    "status_code": response.status_code,
                },
            )
            raise ProviderError(
                "invalid_profile", "Failed to parse user profile", status_code=500
            ) from exc

        profile = parse_profile(parsed)
        return NormalizedProfile.model_validate(
            {
                **profile.model_dump(exclude_unset=True),
                "provider": self.provider_name,
                "raw": body,
                "parsed": parsed,
            }
        )


__all__ = ["BrightspaceStrategy", "PROVIDER_NAME", "parse_profile"]
