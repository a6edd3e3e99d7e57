"""Pydantic models for strategy configuration.

Every configuration field accepts either its snake_case name or the
camelCase option name used by passport-style strategies (``clientID``,
``tokenURL``, ``userProfileURL``...), so existing option dictionaries can be
passed through unchanged.

## Security-relevant configuration fields

- ``client_secret``: sent to the token endpoint as HTTP Basic credentials.
  It is never logged.
- ``callback_url``: the redirect URI registered with Brightspace; affects
  redirect binding and open-redirect risk.
- ``custom_headers``: attached to every outbound request, including the
  token exchange.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

BRIGHTSPACE_AUTHORIZATION_URL = "https://auth.brightspace.com/oauth2/auth"
BRIGHTSPACE_TOKEN_URL = "https://auth.brightspace.com/core/connect/token"
BRIGHTSPACE_WHOAMI_PATH = "/d2l/api/lp/1.31/users/whoami"


class AuthBaseModel(BaseModel):
    """Base model for all brightspace-auth Pydantic models.

    - extra="forbid": Rejects any fields not defined in the model
    - frozen=True: Makes instances immutable once validated
    - populate_by_name=True: Fields may be given by name or by alias
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


class OAuth2StrategyConfigModel(AuthBaseModel):
    """Configuration shared by every OAuth2 strategy."""

    client_id: str = Field(alias="clientID")
    client_secret: str = Field(alias="clientSecret")
    authorization_url: str = Field(alias="authorizationURL")
    token_url: str = Field(alias="tokenURL")
    callback_url: str | None = Field(default=None, alias="callbackURL")
    # Space separated string or list; joined with scope_separator when building URLs.
    scope: str | list[str] | None = None
    scope_separator: str = Field(default=" ", alias="scopeSeparator")
    custom_headers: dict[str, str] = Field(default_factory=dict, alias="customHeaders")
    skip_user_profile: bool = Field(default=False, alias="skipUserProfile")


class BrightspaceAuthConfigModel(OAuth2StrategyConfigModel):
    """Brightspace OAuth2 configuration.

    Endpoint URLs, the scope separator and custom headers fall back to the
    Brightspace defaults when omitted or empty. The profile URL is derived from
    ``host`` unless ``user_profile_url`` is given.

    Neither ``host`` nor ``user_profile_url`` is required: a strategy that never
    loads a profile does not need them, so a missing profile URL only surfaces
    as an error when a profile fetch is attempted.
    """

    authorization_url: str = Field(default=BRIGHTSPACE_AUTHORIZATION_URL, alias="authorizationURL")
    token_url: str = Field(default=BRIGHTSPACE_TOKEN_URL, alias="tokenURL")
    host: str | None = None
    user_profile_url: str | None = Field(default=None, alias="userProfileURL")

    @model_validator(mode="before")
    @classmethod
    def _resolve_defaults(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data

        resolved = dict(data)
        defaults: dict[str, Any] = {
            "authorization_url": BRIGHTSPACE_AUTHORIZATION_URL,
            "token_url": BRIGHTSPACE_TOKEN_URL,
            "scope_separator": " ",
            "custom_headers": {},
        }
        for name, default in defaults.items():
            if not _lookup(cls, resolved, name):
                resolved.pop(cls.model_fields[name].alias, None)
                resolved[name] = default

        if not _lookup(cls, resolved, "user_profile_url"):
            resolved.pop("userProfileURL", None)
            host = resolved.get("host")
            resolved["user_profile_url"] = f"{host}{BRIGHTSPACE_WHOAMI_PATH}" if host else None

        return resolved


def _lookup(model: type[BaseModel], data: Mapping[str, Any], name: str) -> Any:
    """Return a raw input value given either by field name or by alias."""
    if data.get(name):
        return data[name]
    alias = model.model_fields[name].alias
    return data.get(alias) if alias else None


__all__ = [
    "AuthBaseModel",
    "BRIGHTSPACE_AUTHORIZATION_URL",
    "BRIGHTSPACE_TOKEN_URL",
    "BRIGHTSPACE_WHOAMI_PATH",
    "BrightspaceAuthConfigModel",
    "OAuth2StrategyConfigModel",
]
