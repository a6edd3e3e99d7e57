"""Brightspace authentication strategy built on a generic OAuth 2.0 client.

## Key Components

- `BrightspaceStrategy`: resolves Brightspace endpoint defaults, exchanges
  codes with HTTP Basic client authentication and normalizes the `whoami`
  profile
- `OAuth2Strategy`: generic authorization-code strategy the provider extends
- `OAuth2Client`: low-level HTTP client for token and resource requests
- `BrightspaceAuthConfigModel`: configuration with Brightspace defaults

## Quick Example

```python
from brightspace_auth import BrightspaceStrategy

async def verify(access_token, refresh_token, profile):
    return await users.find_or_create(brightspace_id=profile.id)

strategy = BrightspaceStrategy(
    {
        "host": "https://school.brightspace.com",
        "client_id": "123-456-789",
        "client_secret": "shhh-its-a-secret",
        "callback_url": "https://www.example.net/auth/brightspace/callback",
    },
    verify,
)

redirect_to = strategy.build_authorize_url(state=state, scopes=["core:*:*"])
# ...later, in the callback route:
user = await strategy.handle_callback(request.query_params)
```
"""

from .contracts import (
    AuthorizationError,
    InternalOAuthError,
    NormalizedProfile,
    ProfileEmail,
    ProviderAdapter,
    ProviderError,
    TokenExchangeResult,
)
from .models import BrightspaceAuthConfigModel, OAuth2StrategyConfigModel
from .oauth2 import OAuth2Client, OAuth2RequestError, OAuth2Response
from .providers.brightspace import BrightspaceStrategy, parse_profile
from .strategy import OAuth2Strategy

Strategy = BrightspaceStrategy

__all__ = [
    # Configuration
    "BrightspaceAuthConfigModel",
    "OAuth2StrategyConfigModel",
    # Strategies
    "BrightspaceStrategy",
    "OAuth2Strategy",
    "Strategy",
    "parse_profile",
    # Transport
    "OAuth2Client",
    "OAuth2RequestError",
    "OAuth2Response",
    # Contracts
    "AuthorizationError",
    "InternalOAuthError",
    "NormalizedProfile",
    "ProfileEmail",
    "ProviderAdapter",
    "ProviderError",
    "TokenExchangeResult",
]
