"""
Metrics Module: Cost Estimation

Estimates what calls and whole conversations cost, from text length and
registry pricing.

Components:
    estimate_tokens: Approximate token count (about four characters per token)
    CostCalculator: Price a single call from its input and output text
    CostBreakdown: Detailed cost information for a single call
    calculate_conversation_cost: Sum costs across a transcript
    ConversationCost: Overall and per-model conversation totals

Usage:
    from quorum.metrics import get_cost_calculator, calculate_conversation_cost

    cost = get_cost_calculator().price("gpt-5-mini", "What is 2+2?", "4")
    if cost:
        print(cost.formatted)

    summary = calculate_conversation_cost(transcript, system_prompt="Be brief.")
    print(summary.formatted, summary.model_costs)

Singleton Access:
    get_cost_calculator(): Returns global CostCalculator instance
"""

from quorum.metrics.cost import (
    CostBreakdown,
    CostCalculator,
    estimate_tokens,
    format_cost,
    get_cost_calculator,
)

from quorum.metrics.conversation import (
    ConversationCost,
    ModelCostSummary,
    build_input_text,
    calculate_conversation_cost,
)


__all__ = [
    # Per-call costs
    "CostBreakdown",
    "CostCalculator",
    "estimate_tokens",
    "format_cost",
    "get_cost_calculator",
    # Conversation costs
    "ConversationCost",
    "ModelCostSummary",
    "build_input_text",
    "calculate_conversation_cost",
]
