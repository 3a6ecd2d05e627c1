"""Tests for rolegate/core/cors.py - CORS middleware configuration."""

from unittest.mock import MagicMock

from rolegate.core.constants import CLIENT_PRINCIPAL_HEADER
from rolegate.core.cors import add_cors_middleware
from rolegate.core.settings import Settings, get_settings


def test_add_cors_middleware():
    """Test add_cors_middleware() adds CORS with correct configuration."""
    mock_app = MagicMock()
    settings = get_settings()

    add_cors_middleware(mock_app)

    mock_app.add_middleware.assert_called_once()
    call_kwargs = mock_app.add_middleware.call_args[1]
    assert call_kwargs["allow_origins"] == settings.cors_origins_list
    assert call_kwargs["allow_credentials"] is True
    assert call_kwargs["allow_methods"] == ["GET", "POST", "PUT", "OPTIONS"]
    assert CLIENT_PRINCIPAL_HEADER in call_kwargs["allow_headers"]


def test_cors_origins_list_parsing():
    """Test that Settings.cors_origins_list trims and drops empty entries."""
    settings = Settings(cors_origins=" https://a.example.com, ,https://b.example.com ")

    assert settings.cors_origins_list == [
        "https://a.example.com",
        "https://b.example.com",
    ]


def test_trusted_email_suffix_is_normalised():
    settings = Settings(allowed_admin_domain=" Somos.TECH ")

    assert settings.trusted_email_suffix == "@somos.tech"


def test_moderation_enabled_follows_url():
    assert Settings(moderation_api_url=None).moderation_enabled is False
    assert Settings(moderation_api_url="https://m.example.com").moderation_enabled
    assert Settings(moderation_api_url="  ").moderation_enabled is False
