"""Moderation pipeline clients.

The tiered classifiers live in a separate service. This module only knows how
to hand it a ModerationRequest and read back a ModerationVerdict.
"""

import logging
from typing import Protocol

import httpx

from rolegate.moderation.exceptions import ModerationUnavailableError
from rolegate.moderation.schemas import (
    ModerationAction,
    ModerationRequest,
    ModerationVerdict,
    TierStep,
)

logger = logging.getLogger(__name__)


class ModerationPipeline(Protocol):
    async def moderate(self, request: ModerationRequest) -> ModerationVerdict:
        """Run the content through the configured tiers and return the verdict."""
        ...


class HttpModerationPipeline:
    """Calls the moderation service over HTTP.

    Any transport failure, non-2xx status or unreadable body is reported as
    ModerationUnavailableError; deciding what that means is the caller's job.
    """

    def __init__(self, client: httpx.AsyncClient, url: str):
        self._client = client
        self._url = url

    async def moderate(self, request: ModerationRequest) -> ModerationVerdict:
        payload = request.model_dump(by_alias=True)
        try:
            response = await self._client.post(self._url, json=payload)
        except httpx.HTTPError as e:
            raise ModerationUnavailableError("Moderation pipeline unreachable") from e

        if not response.is_success:
            logger.info(
                "Moderation pipeline returned %s for %s",
                response.status_code,
                request.content_id,
                extra={
                    "status_code": response.status_code,
                    "workflow": request.workflow,
                },
            )
            raise ModerationUnavailableError(
                f"Moderation pipeline returned {response.status_code}"
            )

        try:
            return ModerationVerdict.model_validate(response.json())
        except ValueError as e:
            raise ModerationUnavailableError(
                "Moderation pipeline returned an invalid verdict"
            ) from e


class DisabledModerationPipeline:
    """Stand-in when no moderation service is configured: everything passes."""

    async def moderate(self, request: ModerationRequest) -> ModerationVerdict:
        return ModerationVerdict(
            allowed=True,
            action=ModerationAction.allow,
            tier_flow=[TierStep(tier=0, action="skip")],
            reason="moderation_disabled",
        )
