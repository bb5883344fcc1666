"""
Conversation Cost Tests

Validates transcript-wide cost aggregation across multi-model and
synthesis turns.

Test Categories:
1. TestBuildInputText - Reconstruction of the text a model saw
2. TestConversationCost - Aggregation, attribution and edge cases
"""

import pytest

from quorum.metrics.conversation import (
    ConversationCost,
    build_input_text,
    calculate_conversation_cost,
)
from quorum.metrics.cost import estimate_tokens
from quorum.schemas.conversation import (
    Message,
    ModelResult,
    MultiModelTurn,
    Role,
    SynthesisTurn,
)


def _rate(tokens: int, per_million: float) -> float:
    return tokens / 1_000_000 * per_million


@pytest.fixture
def fan_out_transcript():
    """User question followed by a fan-out where one model failed."""
    return [
        Message(role=Role.USER, content="Hi"),
        MultiModelTurn(
            responses=[
                ModelResult.succeeded("gpt-5-mini", "Hello"),
                ModelResult.failed(
                    "claude-sonnet-4", "ANTHROPIC_API_KEY not configured", "CONFIGURATION_ERROR"
                ),
            ]
        ),
    ]


class TestBuildInputText:
    """Tests for build_input_text()."""

    def test_starts_with_system_prompt(self):
        """The system prompt leads the input text."""
        turns = [Message(role=Role.USER, content="Hi")]

        assert build_input_text(turns, "Be brief.") == "Be brief.\nHi"

    def test_no_system_prompt(self):
        """Without a system prompt the text starts with a newline."""
        turns = [Message(role=Role.USER, content="Hi")]

        assert build_input_text(turns) == "\nHi"

    def test_includes_prior_successful_responses(self, fan_out_transcript):
        """Successful responses of earlier fan-outs are part of the input."""
        turns = [*fan_out_transcript, Message(role=Role.USER, content="Thanks")]

        assert build_input_text(turns) == "\nHi\nHello\nThanks"

    def test_skips_synthesis_and_empty_assistant(self):
        """Synthesis turns and empty assistant messages add nothing."""
        turns = [
            Message(role=Role.USER, content="Hi"),
            Message(role=Role.ASSISTANT, content=""),
            SynthesisTurn(model="gemini-2.5-flash", content="Summary"),
            Message(role=Role.ASSISTANT, content="Earlier answer"),
        ]

        assert build_input_text(turns) == "\nHi\nEarlier answer"


class TestConversationCost:
    """Tests for calculate_conversation_cost()."""

    def test_empty_conversation(self):
        """An empty transcript costs nothing."""
        summary = calculate_conversation_cost([])

        assert summary.total_cost_usd == 0.0
        assert summary.total_input_tokens == 0
        assert summary.total_output_tokens == 0
        assert summary.total_tokens == 0
        assert summary.model_costs == {}
        assert summary.formatted == "$0.000000"

    def test_only_successful_model_is_charged(self, fan_out_transcript):
        """A failed model in the fan-out contributes nothing."""
        summary = calculate_conversation_cost(fan_out_transcript)

        input_tokens = estimate_tokens("\nHi")
        output_tokens = estimate_tokens("Hello")
        expected = _rate(input_tokens, 0.25) + _rate(output_tokens, 2.00)

        assert list(summary.model_costs) == ["gpt-5-mini"]
        assert summary.model_costs["gpt-5-mini"].cost_usd == pytest.approx(expected)
        assert summary.model_costs["gpt-5-mini"].tokens == input_tokens + output_tokens
        assert summary.total_cost_usd == pytest.approx(expected)
        assert summary.total_cost_usd > 0

    def test_system_prompt_counts_as_input(self, fan_out_transcript):
        """The system prompt is part of every fan-out call's input."""
        without = calculate_conversation_cost(fan_out_transcript)
        with_prompt = calculate_conversation_cost(
            fan_out_transcript, system_prompt="You are a careful assistant." * 10
        )

        assert with_prompt.total_input_tokens > without.total_input_tokens
        assert with_prompt.total_output_tokens == without.total_output_tokens

    def test_synthesis_turn_priced_from_source_responses(self, fan_out_transcript):
        """Synthesis input is the source turn's successful responses."""
        transcript = [
            *fan_out_transcript,
            SynthesisTurn(model="gemini-2.5-flash", content="Combined answer", source_index=1),
        ]

        summary = calculate_conversation_cost(transcript)

        entry = summary.model_costs["gemini-2.5-flash"]
        input_tokens = estimate_tokens("Hello\n")
        output_tokens = estimate_tokens("Combined answer")
        assert entry.tokens == input_tokens + output_tokens
        assert entry.cost_usd == pytest.approx(
            _rate(input_tokens, 0.15) + _rate(output_tokens, 2.50)
        )

    def test_synthesis_defaults_to_preceding_turn(self, fan_out_transcript):
        """Without source_index, the preceding turn is the source."""
        explicit = calculate_conversation_cost(
            [*fan_out_transcript, SynthesisTurn(model="gpt-5", content="X", source_index=1)]
        )
        implicit = calculate_conversation_cost(
            [*fan_out_transcript, SynthesisTurn(model="gpt-5", content="X")]
        )

        assert implicit.model_costs["gpt-5"].tokens == explicit.model_costs["gpt-5"].tokens

    def test_totals_accumulate_across_turns(self, fan_out_transcript):
        """The same model is summed across several fan-outs."""
        transcript = [
            *fan_out_transcript,
            Message(role=Role.USER, content="And in German?"),
            MultiModelTurn(responses=[ModelResult.succeeded("gpt-5-mini", "Hallo")]),
        ]

        summary = calculate_conversation_cost(transcript)

        first = _rate(estimate_tokens("\nHi"), 0.25) + _rate(estimate_tokens("Hello"), 2.00)
        second_input = estimate_tokens("\nHi\nHello\nAnd in German?")
        second = _rate(second_input, 0.25) + _rate(estimate_tokens("Hallo"), 2.00)
        assert summary.model_costs["gpt-5-mini"].cost_usd == pytest.approx(first + second)
        assert summary.total_cost_usd == pytest.approx(
            sum(entry.cost_usd for entry in summary.model_costs.values())
        )

    def test_unknown_model_contributes_zero(self):
        """Models missing from the registry are skipped."""
        transcript = [
            Message(role=Role.USER, content="Hi"),
            MultiModelTurn(responses=[ModelResult.succeeded("retired-model", "Hello")]),
        ]

        summary = calculate_conversation_cost(transcript)

        assert summary.total_cost_usd == 0.0
        assert summary.model_costs == {}

    def test_synthesis_without_model_contributes_zero(self, fan_out_transcript):
        without = calculate_conversation_cost(fan_out_transcript)

        summary = calculate_conversation_cost(
            [*fan_out_transcript, SynthesisTurn(content="Summary")]
        )

        assert summary == without

    def test_recomputed_after_edit(self, fan_out_transcript):
        """Costs follow the current text of the transcript."""
        before = calculate_conversation_cost(fan_out_transcript)

        edited = [
            fan_out_transcript[0],
            MultiModelTurn(
                responses=[ModelResult.succeeded("gpt-5-mini", "Hello there, " * 20)]
            ),
        ]
        after = calculate_conversation_cost(edited)

        assert after.total_output_tokens > before.total_output_tokens

    def test_transcript_not_modified(self, fan_out_transcript):
        """Aggregation does not mutate the transcript."""
        snapshot = [turn.model_dump() for turn in fan_out_transcript]

        calculate_conversation_cost(fan_out_transcript, system_prompt="Be brief.")

        assert [turn.model_dump() for turn in fan_out_transcript] == snapshot

    def test_summary_dataclass_defaults(self):
        """A fresh summary is empty."""
        summary = ConversationCost()

        assert summary.total_tokens == 0
        assert summary.model_costs == {}
