"""
Cost Estimator for Model Calls

Estimates the cost of a single model call from the text that went in and
the text that came back, using model pricing from the registry.

Token counts are a coarse heuristic (about four characters per token), not
a provider tokenizer. Every figure derived here is an estimate.
"""

import math
from dataclasses import dataclass

from quorum.registry.models import ModelMetadata, get_model_registry


CHARS_PER_TOKEN = 4


def estimate_tokens(text: str | None) -> int:
    """
    Approximate the token count of a text.

    Args:
        text: Any text; None counts as empty.

    Returns:
        ceil(len(text) / 4)
    """
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def format_cost(cost_usd: float) -> str:
    """Render a USD amount with six decimal places, e.g. '$0.000125'."""
    return f"${cost_usd:.6f}"


@dataclass
class CostBreakdown:
    """
    Estimated cost breakdown for a single model call.

    Attributes:
        input_tokens: Estimated tokens sent to the model
        output_tokens: Estimated tokens returned by the model
        input_cost_usd: Cost for input tokens in USD
        output_cost_usd: Cost for output tokens in USD
        total_cost_usd: Total cost (input + output)
        model_used: ID of the model that was priced
    """

    input_tokens: int
    output_tokens: int
    input_cost_usd: float
    output_cost_usd: float
    total_cost_usd: float
    model_used: str

    @property
    def total_tokens(self) -> int:
        """Total tokens processed (input + output)."""
        return self.input_tokens + self.output_tokens

    @property
    def formatted(self) -> str:
        """Total cost rendered as a fixed-precision dollar string."""
        return format_cost(self.total_cost_usd)


class CostCalculator:
    """
    Calculate estimated call costs.

    The calculator only performs read operations on the model registry,
    so a single instance can be shared across concurrent requests.

    Example:
        calculator = CostCalculator()
        cost = calculator.price("gpt-5-mini", "What is 2+2?", "4")
        print(cost.formatted)
    """

    def calculate(
        self, model: ModelMetadata, input_tokens: int, output_tokens: int
    ) -> CostBreakdown | None:
        """
        Calculate cost breakdown from token counts.

        Args:
            model: Model metadata with pricing information
            input_tokens: Number of input tokens
            output_tokens: Number of output tokens

        Returns:
            CostBreakdown, or None if the model has no price entry
        """
        if not model.is_priced:
            return None

        input_cost = (input_tokens / 1_000_000) * model.cost_per_1m_input_tokens
        output_cost = (output_tokens / 1_000_000) * model.cost_per_1m_output_tokens

        return CostBreakdown(
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            input_cost_usd=input_cost,
            output_cost_usd=output_cost,
            total_cost_usd=input_cost + output_cost,
            model_used=model.model_id,
        )

    def price(
        self, model_id: str, input_text: str | None, output_text: str | None
    ) -> CostBreakdown | None:
        """
        Estimate the cost of a call from its input and output text.

        Never raises for unknown models; the caller decides how to
        render an unknown cost.

        Args:
            model_id: ID of the model in the registry
            input_text: Everything sent to the model
            output_text: The model's response

        Returns:
            CostBreakdown if the model is known and priced, None otherwise
        """
        model = get_model_registry().get_model(model_id)
        if model is None:
            return None
        return self.calculate(
            model, estimate_tokens(input_text), estimate_tokens(output_text)
        )


_calculator: CostCalculator | None = None


def get_cost_calculator() -> CostCalculator:
    """
    Get the global cost calculator instance.

    Returns:
        Singleton CostCalculator instance
    """
    global _calculator
    if _calculator is None:
        _calculator = CostCalculator()
    return _calculator
