"""Moderation pipeline wire schemas.

The pipeline speaks camelCase JSON. Only `allowed` must be a real boolean.
Every other verdict field is detail: null, missing or mistyped detail
degrades to an empty default, and unknown keys are ignored.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class ModerationAction(str, Enum):
    allow = "allow"
    block = "block"
    flag = "flag"


# Pipeline spellings for "allowed but queued for a human".
_FLAG_ALIASES = {"flag", "review", "pending"}
_KNOWN_ACTIONS = {action.value for action in ModerationAction}


class ModerationRequest(CamelModel):
    type: str
    text: str
    user_id: str | None = None
    user_email: str | None = None
    content_id: str
    workflow: str


def _list_or_empty(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _bool_or_none(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


class TierStep(CamelModel):
    """One entry of the tierFlow audit trail.

    Later tiers report steps with a name and no action, so both fields are
    optional.
    """

    tier: int | None = None
    action: str | None = None

    @field_validator("tier", mode="before")
    @classmethod
    def _int_or_none(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        return value

    @field_validator("action", mode="before")
    @classmethod
    def _action_str(cls, value: Any) -> Any:
        return _str_or_none(value)


class TierResult(CamelModel):
    passed: bool | None = None
    action: str | None = None

    @field_validator("passed", mode="before")
    @classmethod
    def _passed_bool(cls, value: Any) -> Any:
        return _bool_or_none(value)

    @field_validator("action", mode="before")
    @classmethod
    def _action_str(cls, value: Any) -> Any:
        return _str_or_none(value)


class Tier1Result(TierResult):
    """Exact/pattern match stage."""

    matches: list[Any] = Field(default_factory=list)

    @field_validator("matches", mode="before")
    @classmethod
    def _matches_list(cls, value: Any) -> Any:
        return _list_or_empty(value)


class Tier2Result(TierResult):
    """Link and content-risk stage."""

    issues: list[Any] = Field(default_factory=list)

    @field_validator("issues", mode="before")
    @classmethod
    def _issues_list(cls, value: Any) -> Any:
        return _list_or_empty(value)


class ModerationVerdict(CamelModel):
    """Pipeline verdict.

    Only `allowed` is load-bearing and must be a real boolean. Every other
    part is advisory detail, and a malformed detail degrades to its empty
    value instead of failing the parse.
    """

    allowed: bool = Field(strict=True)
    action: ModerationAction | None = None
    needs_review: bool = False
    tier_flow: list[TierStep] = Field(default_factory=list)
    tier1_result: Tier1Result | None = None
    tier2_result: Tier2Result | None = None
    reason: str | None = None

    @field_validator("action", mode="before")
    @classmethod
    def _normalize_action(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return None
        value = value.lower()
        if value in _FLAG_ALIASES:
            return ModerationAction.flag
        if value not in _KNOWN_ACTIONS:
            return None
        return value

    @field_validator("needs_review", mode="before")
    @classmethod
    def _review_flag(cls, value: Any) -> Any:
        return value is True

    @field_validator("tier_flow", mode="before")
    @classmethod
    def _steps_only(cls, value: Any) -> Any:
        return [
            step
            for step in _list_or_empty(value)
            if isinstance(step, (dict, TierStep))
        ]

    @field_validator("tier1_result", "tier2_result", mode="before")
    @classmethod
    def _objects_only(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, TierResult)) else None

    @field_validator("reason", mode="before")
    @classmethod
    def _reason_str(cls, value: Any) -> Any:
        return _str_or_none(value)

    @model_validator(mode="after")
    def _default_action(self) -> "ModerationVerdict":
        if self.action is None:
            if not self.allowed:
                self.action = ModerationAction.block
            elif self.needs_review:
                self.action = ModerationAction.flag
            else:
                self.action = ModerationAction.allow
        return self

    def tier_summary(self) -> list[dict[str, Any]]:
        return [{"tier": step.tier, "action": step.action} for step in self.tier_flow]
