"""
Conversation Cost Aggregator

Walks a transcript and sums estimated costs across every multi-model and
synthesis turn, per model and overall.

Costs are regenerated from the transcript text on every call and never
cached: transcripts are editable, so a stored per-turn figure could go stale.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from quorum.metrics.cost import CostBreakdown, CostCalculator, format_cost, get_cost_calculator
from quorum.schemas.conversation import Message, MultiModelTurn, Role, SynthesisTurn


Turn = Message | MultiModelTurn | SynthesisTurn


@dataclass
class ModelCostSummary:
    """Accumulated cost and tokens for one model across a conversation."""

    cost_usd: float = 0.0
    tokens: int = 0


@dataclass
class ConversationCost:
    """
    Estimated cost of a whole conversation.

    Attributes:
        total_cost_usd: Sum of all priced calls
        total_input_tokens: Sum of estimated input tokens
        total_output_tokens: Sum of estimated output tokens
        model_costs: Per-model totals keyed by model ID
    """

    total_cost_usd: float = 0.0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    model_costs: dict[str, ModelCostSummary] = field(default_factory=dict)

    @property
    def total_tokens(self) -> int:
        """Total tokens processed (input + output)."""
        return self.total_input_tokens + self.total_output_tokens

    @property
    def formatted(self) -> str:
        """Total cost rendered as a fixed-precision dollar string."""
        return format_cost(self.total_cost_usd)

    def add(self, breakdown: CostBreakdown) -> None:
        """Fold one call's cost into the totals."""
        summary = self.model_costs.setdefault(breakdown.model_used, ModelCostSummary())
        summary.cost_usd += breakdown.total_cost_usd
        summary.tokens += breakdown.total_tokens
        self.total_cost_usd += breakdown.total_cost_usd
        self.total_input_tokens += breakdown.input_tokens
        self.total_output_tokens += breakdown.output_tokens


def build_input_text(turns: Sequence[Turn], system_prompt: str | None = None) -> str:
    """
    Reconstruct the text a model saw as input before a given point.

    Starts from the system prompt and appends, newline-separated, every user
    message, every assistant message, and every successful response of prior
    multi-model turns. Failed responses and synthesis turns add no text.

    Args:
        turns: The turns preceding the call being priced
        system_prompt: System prompt sent with every call

    Returns:
        Concatenated input text
    """
    text = system_prompt or ""
    for turn in turns:
        if isinstance(turn, MultiModelTurn):
            for result in turn.successful_responses:
                text += "\n" + result.response
        elif isinstance(turn, Message):
            if turn.role == Role.USER or (turn.role == Role.ASSISTANT and turn.content):
                text += "\n" + turn.content
    return text


def _synthesis_input_text(turns: Sequence[Turn], index: int, turn: SynthesisTurn) -> str:
    """Successful responses of the multi-model turn a synthesis summarizes."""
    source_index = turn.source_index if turn.source_index is not None else index - 1
    if source_index < 0 or source_index >= len(turns):
        return ""
    source = turns[source_index]
    if not isinstance(source, MultiModelTurn):
        return ""
    return "".join(result.response + "\n" for result in source.successful_responses)


def calculate_conversation_cost(
    turns: Sequence[Turn],
    system_prompt: str | None = "",
    calculator: CostCalculator | None = None,
) -> ConversationCost:
    """
    Estimate the total cost of a conversation.

    For each multi-model turn, every successful model is priced with the
    whole preceding conversation as input and its own response as output.
    For each synthesis turn, the synthesis model is priced with the source
    turn's successful responses as input. Turns whose model is missing,
    unknown or unpriced contribute nothing.

    Args:
        turns: Full transcript in conversation order
        system_prompt: System prompt sent with every fan-out call
        calculator: Cost calculator (defaults to the global instance)

    Returns:
        ConversationCost with overall and per-model totals
    """
    calculator = calculator or get_cost_calculator()
    summary = ConversationCost()

    for index, turn in enumerate(turns):
        if isinstance(turn, MultiModelTurn):
            input_text = build_input_text(turns[:index], system_prompt)
            for result in turn.successful_responses:
                if not result.response:
                    continue
                breakdown = calculator.price(result.model, input_text, result.response)
                if breakdown:
                    summary.add(breakdown)
        elif isinstance(turn, SynthesisTurn):
            if not turn.model:
                continue
            input_text = _synthesis_input_text(turns, index, turn)
            breakdown = calculator.price(turn.model, input_text, turn.content)
            if breakdown:
                summary.add(breakdown)

    return summary
