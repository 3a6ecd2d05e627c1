"""Tests for rolegate/main.py - Application lifespan and initialization."""

from unittest.mock import patch

import pytest
from fastapi import FastAPI

from rolegate.core.settings import Settings
from rolegate.main import lifespan
from rolegate.moderation.gate import ModerationGate
from rolegate.moderation.pipeline import (
    DisabledModerationPipeline,
    HttpModerationPipeline,
)
from rolegate.roles.resolver import RoleResolver


@pytest.mark.asyncio
async def test_lifespan_without_moderation_url():
    """Test lifespan builds the resolver and a pass-through gate."""
    mock_app = FastAPI()
    settings = Settings(moderation_api_url=None, role_lookup_timeout_seconds=1.5)

    with (
        patch("rolegate.main.get_settings", return_value=settings),
        patch("rolegate.main.init_db") as mock_init_db,
    ):
        async with lifespan(mock_app):
            mock_init_db.assert_called_once()
            assert isinstance(mock_app.state.role_resolver, RoleResolver)
            assert isinstance(mock_app.state.moderation_gate, ModerationGate)
            assert isinstance(
                mock_app.state.moderation_gate._pipeline, DisabledModerationPipeline
            )
            assert mock_app.state.role_resolver._lookup_timeout == 1.5


@pytest.mark.asyncio
async def test_lifespan_with_moderation_url_closes_client():
    """Test lifespan wires the HTTP pipeline and closes its client on shutdown."""
    mock_app = FastAPI()
    settings = Settings(
        moderation_api_url="https://moderation.example.com/api/moderate",
        moderation_api_key="secret",
    )

    with (
        patch("rolegate.main.get_settings", return_value=settings),
        patch("rolegate.main.init_db"),
    ):
        async with lifespan(mock_app):
            pipeline = mock_app.state.moderation_gate._pipeline
            assert isinstance(pipeline, HttpModerationPipeline)
            client = pipeline._client
            assert not client.is_closed

    assert client.is_closed


@pytest.mark.asyncio
async def test_lifespan_blank_moderation_url_disables_pipeline():
    """Test a whitespace-only MODERATION_API_URL leaves moderation disabled."""
    mock_app = FastAPI()
    settings = Settings(moderation_api_url="   ")

    with (
        patch("rolegate.main.get_settings", return_value=settings),
        patch("rolegate.main.init_db"),
    ):
        async with lifespan(mock_app):
            assert isinstance(
                mock_app.state.moderation_gate._pipeline, DisabledModerationPipeline
            )
