"""
Conversation Data Model

Pydantic models for the dialogue sent to models and for the transcript a
client keeps between turns:
- Message: one system/user/assistant message
- ModelResult: one model's outcome within a fan-out (response or error)
- MultiModelTurn: an assistant turn holding one ModelResult per requested model
- SynthesisTurn: a consolidated answer derived from a MultiModelTurn
- TranscriptTurn: discriminated union of the three turn shapes

The engine never mutates a conversation it receives; new turns are returned
to the caller, who appends them.
"""

from collections.abc import Sequence
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Discriminator, Field, Tag, field_validator, model_validator

from quorum.registry.models import get_model_registry


RESPONSE_SEPARATOR = "\n\n---\n\n"
NO_SUCCESSFUL_RESPONSES = "No successful responses"


class Role(str, Enum):
    """Roles a message can carry in the dialogue sent to a model."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single message in a conversation."""

    role: Role = Field(..., description="Who authored the message")

    content: str = Field(..., description="Message text")


class ModelResult(BaseModel):
    """
    Outcome of one model call within a fan-out.

    Exactly one of `response` (success) or `error` (failure) is populated,
    selected by `success`.
    """

    model: str = Field(..., description="Model ID that was called")

    success: bool = Field(..., description="Whether the call produced a response")

    response: str | None = Field(
        default=None, description="Response text (successful calls only)"
    )

    error: str | None = Field(
        default=None, description="Error message (failed calls only)"
    )

    error_code: str | None = Field(
        default=None, description="Machine-readable failure kind (failed calls only)"
    )

    @model_validator(mode="after")
    def check_tagged_union(self) -> "ModelResult":
        """Ensure the populated field matches the success flag."""
        if self.success:
            if self.response is None or self.error is not None:
                raise ValueError("successful result must carry a response and no error")
        elif self.error is None or self.response is not None:
            raise ValueError("failed result must carry an error and no response")
        return self

    @classmethod
    def succeeded(cls, model: str, response: str) -> "ModelResult":
        """Build a successful result."""
        return cls(model=model, success=True, response=response)

    @classmethod
    def failed(cls, model: str, error: str, error_code: str | None = None) -> "ModelResult":
        """Build a failed result."""
        return cls(model=model, success=False, error=error, error_code=error_code)


class MultiModelTurn(BaseModel):
    """
    Assistant turn holding one result per requested model.

    Results are kept in request order, not completion order.
    """

    role: Literal["assistant"] = "assistant"

    responses: list[ModelResult] = Field(
        default_factory=list, description="Per-model results in request order"
    )

    timestamp: datetime | None = Field(default=None, description="When the turn was produced")

    @field_validator("responses", mode="before")
    @classmethod
    def drop_empty_successes(cls, v: Any) -> Any:
        """
        Drop raw entries flagged successful that carry no response text.

        Client transcripts can hold such entries; they have nothing to price
        or replay, so they are skipped rather than rejecting the turn.
        """
        if not isinstance(v, list):
            return v
        return [
            entry
            for entry in v
            if not (
                isinstance(entry, dict)
                and entry.get("success") is True
                and entry.get("response") is None
                and entry.get("error") is None
            )
        ]

    @property
    def successful_responses(self) -> list[ModelResult]:
        """Results whose call succeeded."""
        return [r for r in self.responses if r.success]


class SynthesisTurn(BaseModel):
    """Consolidated answer produced from a MultiModelTurn."""

    role: Literal["synthesis"] = "synthesis"

    model: str | None = Field(
        default=None,
        description="Model ID that produced the synthesis (unset in older transcripts)",
    )

    content: str = Field(..., description="Synthesized text")

    source_index: int | None = Field(
        default=None,
        ge=0,
        description="Transcript position of the MultiModelTurn being summarized",
    )


def _turn_tag(value: Any) -> str:
    """Pick the transcript turn shape for a raw dict or model instance."""
    if isinstance(value, dict):
        role = value.get("role")
        responses = value.get("responses")
    else:
        role = getattr(value, "role", None)
        responses = getattr(value, "responses", None)

    if role == "synthesis":
        return "synthesis"
    if responses is not None:
        return "multi"
    return "message"


TranscriptTurn = Annotated[
    Union[
        Annotated[Message, Tag("message")],
        Annotated[MultiModelTurn, Tag("multi")],
        Annotated[SynthesisTurn, Tag("synthesis")],
    ],
    Discriminator(_turn_tag),
]


def display_name_for(model_id: str) -> str:
    """Display name of a registered model, or the ID itself if unknown."""
    model = get_model_registry().get_model(model_id)
    return model.display_name if model else model_id


def to_model_messages(turns: Sequence[Message | MultiModelTurn | SynthesisTurn]) -> list[Message]:
    """
    Flatten a transcript into the message list sent to models.

    Synthesis turns are dropped. Each multi-model turn becomes one assistant
    message combining its successful responses, attributed by display name.

    Args:
        turns: Transcript in conversation order

    Returns:
        New list of Message objects; the transcript is not modified
    """
    messages: list[Message] = []
    for turn in turns:
        if isinstance(turn, SynthesisTurn):
            continue
        if isinstance(turn, MultiModelTurn):
            combined = RESPONSE_SEPARATOR.join(
                f"[{display_name_for(r.model)}]:\n{r.response}"
                for r in turn.successful_responses
            )
            messages.append(
                Message(role=Role.ASSISTANT, content=combined or NO_SUCCESSFUL_RESPONSES)
            )
            continue
        messages.append(turn)
    return messages
