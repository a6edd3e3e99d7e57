import pytest
from pydantic import ValidationError

from brightspace_auth.models import (
    BRIGHTSPACE_AUTHORIZATION_URL,
    BRIGHTSPACE_TOKEN_URL,
    BrightspaceAuthConfigModel,
)
from brightspace_auth.providers.brightspace import BrightspaceStrategy


def _verify(access_token, refresh_token, profile):
    return None


def test_defaults_applied_when_options_omitted() -> None:
    config = BrightspaceAuthConfigModel(client_id="ABC123", client_secret="secret")
    assert config.authorization_url == BRIGHTSPACE_AUTHORIZATION_URL
    assert config.authorization_url == "https://auth.brightspace.com/oauth2/auth"
    assert config.token_url == BRIGHTSPACE_TOKEN_URL
    assert config.token_url == "https://auth.brightspace.com/core/connect/token"
    assert config.scope_separator == " "
    assert config.custom_headers == {}


def test_empty_values_fall_back_to_defaults() -> None:
    config = BrightspaceAuthConfigModel(
        client_id="ABC123",
        client_secret="secret",
        authorization_url="",
        token_url="",
        scope_separator="",
        custom_headers={},
    )
    assert config.authorization_url == BRIGHTSPACE_AUTHORIZATION_URL
    assert config.token_url == BRIGHTSPACE_TOKEN_URL
    assert config.scope_separator == " "


def test_supplied_values_are_preserved() -> None:
    config = BrightspaceAuthConfigModel(
        client_id="ABC123",
        client_secret="secret",
        authorization_url="https://custom.brightspace.com/oauth2/auth",
        token_url="https://custom.brightspace.com/oauth2/token",
        scope_separator=",",
        custom_headers={"X-Tenant": "school"},
    )
    assert config.authorization_url == "https://custom.brightspace.com/oauth2/auth"
    assert config.token_url == "https://custom.brightspace.com/oauth2/token"
    assert config.scope_separator == ","
    assert config.custom_headers == {"X-Tenant": "school"}


def test_camel_case_option_names_are_accepted() -> None:
    config = BrightspaceAuthConfigModel.model_validate(
        {
            "host": "https://example.brightspace.com",
            "clientID": "ABC123",
            "clientSecret": "secret",
            "callbackURL": "https://www.example.net/auth/brightspace/callback",
            "tokenURL": "https://custom.brightspace.com/token",
            "userProfileURL": "https://custom.brightspace.com/api/profile",
        }
    )
    assert config.client_id == "ABC123"
    assert config.client_secret == "secret"
    assert config.callback_url == "https://www.example.net/auth/brightspace/callback"
    assert config.token_url == "https://custom.brightspace.com/token"
    assert config.authorization_url == BRIGHTSPACE_AUTHORIZATION_URL
    assert config.user_profile_url == "https://custom.brightspace.com/api/profile"


def test_profile_url_derived_from_host() -> None:
    config = BrightspaceAuthConfigModel(host="https://h", client_id="ABC123", client_secret="secret")
    assert config.user_profile_url == "https://h/d2l/api/lp/1.31/users/whoami"


def test_profile_url_override_wins_over_host() -> None:
    config = BrightspaceAuthConfigModel(
        host="https://h",
        client_id="ABC123",
        client_secret="secret",
        user_profile_url="https://custom.brightspace.com/api/profile",
    )
    assert config.user_profile_url == "https://custom.brightspace.com/api/profile"


def test_missing_host_is_accepted() -> None:
    config = BrightspaceAuthConfigModel(client_id="ABC123", client_secret="secret")
    assert config.host is None
    assert config.user_profile_url is None


def test_unknown_option_is_rejected() -> None:
    with pytest.raises(ValidationError):
        BrightspaceAuthConfigModel(client_id="ABC123", client_secret="secret", hots="typo")


def test_config_is_frozen() -> None:
    config = BrightspaceAuthConfigModel(client_id="ABC123", client_secret="secret")
    with pytest.raises(ValidationError):
        config.token_url = "https://elsewhere.example.com/token"  # type: ignore[misc]


def test_strategy_without_host_constructs() -> None:
    strategy = BrightspaceStrategy({"clientID": "ABC123", "clientSecret": "secret"}, _verify)
    assert strategy.user_profile_url is None


def test_strategy_name(strategy: BrightspaceStrategy) -> None:
    assert strategy.name == "brightspace"
    assert strategy.provider_name == "brightspace"


def test_strategy_configures_oauth2_client(strategy: BrightspaceStrategy) -> None:
    assert strategy.oauth2.uses_authorization_header_for_get is True
    assert strategy.oauth2.client_id == "ABC123"
    assert strategy.oauth2.client_secret == "secret"
    assert strategy.oauth2.authorize_url == "https://auth.brightspace.com/oauth2/auth"
    assert strategy.oauth2.access_token_url == "https://auth.brightspace.com/core/connect/token"


def test_strategy_uses_custom_endpoint_urls() -> None:
    strategy = BrightspaceStrategy(
        BrightspaceAuthConfigModel(
            host="https://api.brightspace.im",
            client_id="XYZ789",
            client_secret="different-secret",
            authorization_url="https://custom.brightspace.com/oauth2/auth",
            token_url="https://custom.brightspace.com/oauth2/token",
        ),
        _verify,
    )
    assert strategy.oauth2.authorize_url == "https://custom.brightspace.com/oauth2/auth"
    assert strategy.oauth2.access_token_url == "https://custom.brightspace.com/oauth2/token"
    assert strategy.oauth2.client_id == "XYZ789"
    assert strategy.oauth2.client_secret == "different-secret"
    assert strategy.user_profile_url == "https://api.brightspace.im/d2l/api/lp/1.31/users/whoami"


def test_configuration_log_omits_secret(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("INFO", logger="brightspace_auth.providers.brightspace"):
        BrightspaceStrategy(
            {"host": "https://h", "client_id": "ABC123", "client_secret": "top-secret"}, _verify
        )

    records = [r for r in caplog.records if r.getMessage() == "Configured Brightspace strategy"]
    assert len(records) == 1
    assert records[0].client_id == "ABC123"
    assert "top-secret" not in repr(records[0].__dict__)
