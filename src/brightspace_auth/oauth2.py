"""Generic OAuth 2.0 client used by the strategies.

``OAuth2Client`` is the transport-facing half of a strategy: it knows the
client credentials and endpoint URLs, issues raw requests through an
``httpx.AsyncClient`` and implements the default (credentials-in-body) token
exchange. Provider strategies that need a different client authentication
scheme override the exchange on the strategy and call ``request()`` directly.

Failures surface as exceptions:

- ``httpx.HTTPError`` for network-level failures
- ``OAuth2RequestError`` for non-2xx responses or a missing request URL
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from mcp.shared._httpx_utils import create_mcp_http_client

from .contracts import TokenExchangeResult
from .version import USER_AGENT

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class OAuth2RequestError(Exception):
    """A request reached no endpoint or the endpoint answered with a non-2xx status."""

    def __init__(self, status_code: int | None, data: str | None = None):
        if status_code is None:
            message = data or "OAuth2 request failed"
        else:
            message = f"OAuth2 request failed with status {status_code}"
        super().__init__(message)
        self.status_code = status_code
        self.data = data


@dataclass(frozen=True)
class OAuth2Response:
    """Body and status of a successful OAuth2 request."""

    body: str
    status_code: int


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def decode_json(body: str | bytes) -> Any:
    """Decode strict JSON; ``NaN``, ``Infinity`` and ``-Infinity`` raise ``ValueError``."""
    return json.loads(body, parse_constant=_reject_constant)


def parse_token_response(body: str) -> dict[str, Any]:
    """Decode a token endpoint body.

    JSON objects are returned as decoded. Anything else is read as a
    form-encoded string, which never fails (at worst it yields a sparse
    mapping of string values).
    """
    try:
        results = decode_json(body)
    except ValueError:
        results = None

    if isinstance(results, dict):
        return results

    # Some servers send form-encoded tokens with a missing or wrong content type.
    logger.debug("Token response is not a JSON object, decoding as form data")
    return dict(parse_qsl(body, keep_blank_values=True))


def build_exchange_result(results: Mapping[str, Any]) -> TokenExchangeResult:
    """Split decoded token fields into access token, refresh token and the rest."""
    fields = dict(results)
    refresh_token = fields.pop("refresh_token", None)
    return TokenExchangeResult(
        access_token=fields.get("access_token"),
        refresh_token=refresh_token,
        raw_fields=fields,
    )


def _with_query(url: str, params: Mapping[str, str]) -> str:
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True) + list(params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))


class OAuth2Client:
    """Low-level OAuth 2.0 client bound to one set of client credentials."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        authorize_url: str,
        access_token_url: str,
        custom_headers: Mapping[str, str] | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.authorize_url = authorize_url
        self.access_token_url = access_token_url
        self.custom_headers = dict(custom_headers or {})
        self.access_token_name = "access_token"
        self.auth_method = "Bearer"
        self._use_authorization_header_for_get = False

    @property
    def uses_authorization_header_for_get(self) -> bool:
        return self._use_authorization_header_for_get

    def use_authorization_header_for_get(self, use_it: bool) -> None:
        """Send the access token of ``get()`` calls as a header instead of a query parameter."""
        self._use_authorization_header_for_get = use_it

    def build_auth_header(self, token: str) -> str:
        return f"{self.auth_method} {token}"

    def get_authorize_url(self, params: Mapping[str, str] | None = None) -> str:
        query: list[tuple[str, str]] = [("client_id", self.client_id)]
        query.extend((key, value) for key, value in (params or {}).items() if key != "client_id")
        return f"{self.authorize_url}?{urlencode(query)}"

    async def request(
        self,
        method: str,
        url: str | None,
        headers: Mapping[str, str] | None = None,
        body: str | None = None,
        access_token: str | None = None,
    ) -> OAuth2Response:
        """Issue a single request and return the body of a 2xx response.

        ``User-Agent`` and the configured custom headers are sent with every
        request; ``headers`` take precedence over both.
        """
        if not url:
            raise OAuth2RequestError(None, "No URL configured for OAuth2 request")

        request_headers = {"User-Agent": USER_AGENT, **self.custom_headers, **(headers or {})}
        if access_token:
            url = _with_query(url, {self.access_token_name: access_token})

        async with create_mcp_http_client() as client:
            resp = await client.request(method, url, headers=request_headers, content=body)

        if not 200 <= resp.status_code <= 299:
            logger.warning(
                "OAuth2 endpoint returned non-2xx",
                extra={"http_method": method, "status_code": resp.status_code},
            )
            raise OAuth2RequestError(resp.status_code, resp.text)

        return OAuth2Response(body=resp.text, status_code=resp.status_code)

    async def get(self, url: str | None, access_token: str) -> OAuth2Response:
        """GET a protected resource with ``access_token``."""
        if self._use_authorization_header_for_get:
            return await self.request(
                "GET", url, {"Authorization": self.build_auth_header(access_token)}
            )
        return await self.request("GET", url, access_token=access_token)

    async def get_oauth_access_token(
        self, code: str, params: Mapping[str, str] | None = None
    ) -> TokenExchangeResult:
        """Exchange a code or refresh token, sending client credentials in the body."""
        payload = dict(params or {})
        payload["client_id"] = self.client_id
        payload["client_secret"] = self.client_secret
        code_param = "refresh_token" if payload.get("grant_type") == "refresh_token" else "code"
        payload[code_param] = code

        response = await self.request(
            "POST",
            self.access_token_url,
            {"Content-Type": FORM_CONTENT_TYPE},
            urlencode(payload),
        )
        return build_exchange_result(parse_token_response(response.body))


__all__ = [
    "FORM_CONTENT_TYPE",
    "OAuth2Client",
    "OAuth2RequestError",
    "OAuth2Response",
    "build_exchange_result",
    "decode_json",
    "parse_token_response",
]
