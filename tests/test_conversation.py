"""
Conversation Model Tests

Validates the transcript data model: result invariants, transcript turn
discrimination and flattening a transcript into model messages.
"""

import pytest
from pydantic import TypeAdapter, ValidationError

from quorum.schemas.conversation import (
    NO_SUCCESSFUL_RESPONSES,
    Message,
    ModelResult,
    MultiModelTurn,
    Role,
    SynthesisTurn,
    TranscriptTurn,
    display_name_for,
    to_model_messages,
)


transcript_adapter = TypeAdapter(list[TranscriptTurn])


class TestModelResult:
    """Tests for the ModelResult success/error invariant."""

    def test_succeeded(self):
        result = ModelResult.succeeded("gpt-5", "Hello")

        assert result.success is True
        assert result.response == "Hello"
        assert result.error is None

    def test_failed(self):
        result = ModelResult.failed("gpt-5", "OpenAI API error", "UPSTREAM_ERROR")

        assert result.success is False
        assert result.error == "OpenAI API error"
        assert result.error_code == "UPSTREAM_ERROR"
        assert result.response is None

    def test_success_requires_response(self):
        """A successful result without a response is rejected."""
        with pytest.raises(ValidationError):
            ModelResult(model="gpt-5", success=True)

    def test_failure_rejects_response(self):
        """A failed result cannot also carry a response."""
        with pytest.raises(ValidationError):
            ModelResult(model="gpt-5", success=False, error="boom", response="Hello")

    def test_empty_response_is_valid(self):
        """An empty string is still a response."""
        assert ModelResult.succeeded("gpt-5", "").response == ""


class TestTranscriptTurn:
    """Tests for discriminating raw transcript JSON."""

    def test_discriminates_turn_shapes(self):
        turns = transcript_adapter.validate_python(
            [
                {"role": "user", "content": "Hi"},
                {
                    "role": "assistant",
                    "responses": [{"model": "gpt-5", "success": True, "response": "Hello"}],
                },
                {"role": "synthesis", "model": "gemini-2.5-flash", "content": "Summary"},
                {"role": "assistant", "content": "Plain reply"},
            ]
        )

        assert isinstance(turns[0], Message)
        assert isinstance(turns[1], MultiModelTurn)
        assert isinstance(turns[2], SynthesisTurn)
        assert isinstance(turns[3], Message)
        assert turns[3].role == Role.ASSISTANT

    def test_invalid_result_in_turn_rejected(self):
        with pytest.raises(ValidationError):
            transcript_adapter.validate_python(
                [{"role": "assistant", "responses": [{"model": "gpt-5", "success": False}]}]
            )

    def test_success_without_response_dropped(self):
        """A success entry with a null response is skipped, not rejected."""
        turns = transcript_adapter.validate_python(
            [
                {
                    "role": "assistant",
                    "responses": [
                        {"model": "gpt-5", "success": True, "response": None},
                        {"model": "grok-4", "success": True, "response": "Hi"},
                    ],
                }
            ]
        )

        assert [r.model for r in turns[0].responses] == ["grok-4"]

    def test_synthesis_without_model(self):
        turns = transcript_adapter.validate_python(
            [{"role": "synthesis", "content": "Summary"}]
        )

        assert isinstance(turns[0], SynthesisTurn)
        assert turns[0].model is None


class TestToModelMessages:
    """Tests for to_model_messages()."""

    def test_combines_successful_responses(self):
        turns = [
            Message(role=Role.USER, content="Hi"),
            MultiModelTurn(
                responses=[
                    ModelResult.succeeded("gpt-5", "Hello"),
                    ModelResult.failed("grok-4", "xai API error"),
                    ModelResult.succeeded("claude-sonnet-4", "Hey"),
                ]
            ),
        ]

        messages = to_model_messages(turns)

        assert len(messages) == 2
        assert messages[1].role == Role.ASSISTANT
        assert messages[1].content == "[GPT-5]:\nHello\n\n---\n\n[Claude Sonnet 4]:\nHey"

    def test_drops_synthesis_turns(self):
        turns = [
            Message(role=Role.USER, content="Hi"),
            SynthesisTurn(model="gemini-2.5-flash", content="Summary"),
            Message(role=Role.USER, content="More"),
        ]

        assert [m.content for m in to_model_messages(turns)] == ["Hi", "More"]

    def test_no_successful_responses(self):
        turns = [MultiModelTurn(responses=[ModelResult.failed("gpt-5", "boom")])]

        assert to_model_messages(turns)[0].content == NO_SUCCESSFUL_RESPONSES

    def test_unknown_model_uses_id(self):
        assert display_name_for("retired-model") == "retired-model"
        assert display_name_for("gpt-5-mini") == "GPT-5 Mini"
