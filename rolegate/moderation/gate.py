"""Moderation gate for profile updates.

Turns a proposed profile mutation into Allow, AllowWithReview or Block.

This gate fails open: if the pipeline raises or times out, the update is
allowed exactly as if the verdict had been clean. That policy belongs to the
profile workflow only. Other content types moderated by the same pipeline
(messages, comments) must build their own gate that fails closed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from rolegate.auth.principal import Principal
from rolegate.moderation.pipeline import ModerationPipeline
from rolegate.moderation.schemas import ModerationRequest, ModerationVerdict

logger = logging.getLogger(__name__)

PROFILE_WORKFLOW = "profile"
PROFILE_CONTENT_TYPE = "profile"

# Text-bearing profile fields, in the order they are joined for moderation.
MODERATED_FIELDS = ("displayName", "bio", "website")

GUIDELINES_VIOLATION_MESSAGE = (
    "Your profile contains inappropriate content that violates our "
    "community guidelines."
)
HARMFUL_LINK_MESSAGE = (
    "Your profile contains a link that has been flagged as potentially harmful."
)
FLAGGED_FOR_REVIEW_MESSAGE = (
    "Your profile content has been flagged for review. Please revise and try again."
)


class GateOutcome(str, Enum):
    allow = "allow"
    allow_with_review = "allow_with_review"
    block = "block"


@dataclass(frozen=True)
class GateDecision:
    outcome: GateOutcome
    reason: str | None = None

    @property
    def allowed(self) -> bool:
        return self.outcome is not GateOutcome.block


ALLOW = GateDecision(GateOutcome.allow)
ALLOW_WITH_REVIEW = GateDecision(GateOutcome.allow_with_review)


def moderation_subject(fields: Mapping[str, Any]) -> str | None:
    """Space-join the non-empty text fields of an update; None when there are none."""
    parts = [
        fields[name]
        for name in MODERATED_FIELDS
        if isinstance(fields.get(name), str) and fields[name]
    ]
    return " ".join(parts) if parts else None


def block_reason(verdict: ModerationVerdict) -> str:
    # Policy matches (tier 1) outrank risk heuristics (tier 2).
    if verdict.tier1_result is not None and verdict.tier1_result.matches:
        return GUIDELINES_VIOLATION_MESSAGE
    if verdict.tier2_result is not None and verdict.tier2_result.issues:
        return HARMFUL_LINK_MESSAGE
    return FLAGGED_FOR_REVIEW_MESSAGE


def decide(verdict: ModerationVerdict) -> GateDecision:
    if not verdict.allowed:
        return GateDecision(GateOutcome.block, block_reason(verdict))
    if verdict.needs_review:
        return ALLOW_WITH_REVIEW
    return ALLOW


class ModerationGate:
    """Profile-workflow gate in front of the moderation pipeline."""

    def __init__(self, pipeline: ModerationPipeline, timeout: float):
        self._pipeline = pipeline
        self._timeout = timeout

    async def evaluate(
        self, fields: Mapping[str, Any], actor: Principal
    ) -> GateDecision:
        subject = moderation_subject(fields)
        if subject is None:
            return ALLOW

        request = ModerationRequest(
            type=PROFILE_CONTENT_TYPE,
            text=subject,
            user_id=actor.user_id,
            user_email=actor.email,
            content_id=f"profile-{actor.user_id}",
            workflow=PROFILE_WORKFLOW,
        )
        try:
            async with asyncio.timeout(self._timeout):
                verdict = await self._pipeline.moderate(request)
        except Exception:
            logger.error(
                "[Profile Moderation] Pipeline failed for %s; allowing update",
                request.content_id,
                exc_info=True,
                extra={"workflow": PROFILE_WORKFLOW},
            )
            return ALLOW

        decision = decide(verdict)
        logger.info(
            "[Profile Moderation] %s: allowed=%s action=%s reason=%s",
            request.content_id,
            verdict.allowed,
            verdict.action.value if verdict.action else None,
            verdict.reason,
            extra={
                "workflow": PROFILE_WORKFLOW,
                "action": verdict.action.value if verdict.action else None,
                "tier_flow": verdict.tier_summary(),
            },
        )
        if decision.outcome is GateOutcome.allow_with_review:
            logger.info(
                "[Profile Moderation] %s allowed but flagged for review",
                request.content_id,
                extra={"workflow": PROFILE_WORKFLOW},
            )
        return decision
