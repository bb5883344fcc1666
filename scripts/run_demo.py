#!/usr/bin/env python3
"""
Demo Runner Script

Sends one prompt to several models through the Quorum dispatch engine and
reports each model's answer, an optional synthesis, and the estimated cost.

This script:
1. Resolves API keys (server-held keys from .env/environment, or --key)
2. Fans the prompt out to every selected model concurrently
3. Optionally synthesizes the successful answers into one
4. Optionally sends a follow-up with the first round as history
5. Prints the estimated conversation cost, per model

Usage:
    python scripts/run_demo.py "What is a monad?"                      # Default models
    python scripts/run_demo.py "Hi" --models gpt-5-mini claude-sonnet-4
    python scripts/run_demo.py "Hi" --synthesize                       # Add a synthesis
    python scripts/run_demo.py "Hi" --follow-up "Why?"                 # Second round
    python scripts/run_demo.py "Hi" --key OPENAI_API_KEY=sk-...       # Caller key
    python scripts/run_demo.py --list-models                           # Show the registry
"""

import argparse
import asyncio
import sys
import time
from pathlib import Path

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from quorum.config import get_settings
from quorum.credentials import PROVIDER_KEY_NAMES, get_credential_resolver
from quorum.dispatcher.handlers import dispatch_many
from quorum.errors import QuorumError
from quorum.metrics.conversation import calculate_conversation_cost
from quorum.providers.base import close_http_client
from quorum.registry.models import get_model_registry
from quorum.schemas.conversation import (
    Message,
    ModelResult,
    MultiModelTurn,
    Role,
    SynthesisTurn,
    display_name_for,
    to_model_messages,
)
from quorum.synthesis import synthesize

DEFAULT_MODELS = ["gpt-5-mini", "claude-sonnet-4", "gemini-2.5-flash"]


def parse_keys(pairs: list[str]) -> dict[str, str]:
    """Parse NAME=VALUE pairs into a caller key mapping."""
    keys: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Expected NAME=VALUE, got {pair!r}")
        keys[name.strip().upper()] = value.strip()
    return keys


def print_models(api_keys: dict[str, str]) -> None:
    """Print the registry grouped by provider, marking models with a usable key."""
    resolver = get_credential_resolver()

    print(f"\n  {'Model':<28} {'Input/1M':>9} {'Output/1M':>10}  Key")
    print(f"  {'-'*28} {'-'*9} {'-'*10}  {'-'*3}")
    for provider, models in get_model_registry().list_models_by_provider().items():
        has_key = resolver.resolve(provider, api_keys) is not None
        print(f"\n  {provider.value} ({PROVIDER_KEY_NAMES[provider]})")
        for model in models:
            print(
                f"  {model.model_id:<28} "
                f"${model.cost_per_1m_input_tokens:>8.3f} "
                f"${model.cost_per_1m_output_tokens:>9.3f}  "
                f"{'yes' if has_key else 'no'}"
            )


def print_results(results: list[ModelResult]) -> None:
    """Print each model's answer or failure."""
    for result in results:
        name = display_name_for(result.model)
        if result.success:
            print(f"\n[{name}]")
            print(result.response)
        else:
            print(f"\n[{name}] FAILED ({result.error_code}): {result.error}")


async def run_demo(
    prompt: str,
    model_ids: list[str],
    system_prompt: str | None,
    api_keys: dict[str, str],
    run_synthesis: bool,
    synthesis_model: str | None,
    follow_up: str | None = None,
) -> int:
    """
    Fan a prompt out, optionally synthesize and ask a follow-up, and print a report.

    The follow-up is sent with the transcript flattened back into plain
    messages, so every model sees the others' earlier answers.

    Returns:
        Process exit code: 0 if at least one model answered
    """
    temperature = get_settings().default_temperature
    transcript: list[Message | MultiModelTurn | SynthesisTurn] = [
        Message(role=Role.USER, content=prompt)
    ]

    print(f"\nSending to {len(model_ids)} models...")
    print("-" * 60)

    start_time = time.time()
    results = await dispatch_many(
        to_model_messages(transcript),
        model_ids,
        temperature=temperature,
        system_prompt=system_prompt,
        api_keys=api_keys,
    )
    elapsed = time.time() - start_time

    print_results(results)
    transcript.append(MultiModelTurn(responses=results))
    succeeded = sum(1 for r in results if r.success)

    if run_synthesis and succeeded:
        print("\n" + "-" * 60)
        try:
            turn = await synthesize(
                results,
                synthesis_model=synthesis_model,
                api_keys=api_keys,
                source_index=len(transcript) - 1,
            )
        except QuorumError as e:
            print(f"Synthesis FAILED ({e.code}): {e}")
        else:
            print(f"Synthesis by {display_name_for(turn.model)}:\n")
            print(turn.content)
            transcript.append(turn)

    if follow_up and succeeded:
        print("\n" + "-" * 60)
        print(f"Follow-up: {follow_up}")
        transcript.append(Message(role=Role.USER, content=follow_up))
        follow_up_results = await dispatch_many(
            to_model_messages(transcript),
            model_ids,
            temperature=temperature,
            system_prompt=system_prompt,
            api_keys=api_keys,
        )
        print_results(follow_up_results)
        transcript.append(MultiModelTurn(responses=follow_up_results))

    summary = calculate_conversation_cost(transcript, system_prompt or "")

    print("\n" + "=" * 60)
    print("QUORUM DEMO RESULTS")
    print("=" * 60)
    print(f"\nModels answered: {succeeded}/{len(results)}")
    print(f"Fan-out time:    {elapsed:.2f}s")
    print("\nCost Analysis (estimated):")
    print(f"  Total:  {summary.formatted}  ({summary.total_tokens} tokens)")
    for model_id, entry in summary.model_costs.items():
        print(f"    {model_id:<28} ${entry.cost_usd:.6f}  {entry.tokens:>6} tokens")
    print("\n" + "=" * 60)

    return 0 if succeeded else 1


async def _main_async(args: argparse.Namespace, api_keys: dict[str, str]) -> int:
    try:
        return await run_demo(
            args.prompt,
            args.models,
            args.system_prompt,
            api_keys,
            args.synthesize,
            args.synthesis_model,
            args.follow_up,
        )
    finally:
        await close_http_client()


def main():
    """Main entry point for the demo runner."""

    parser = argparse.ArgumentParser(
        description="Send a prompt to several models and compare their answers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_demo.py "Explain CRDTs"                 Default models
  python scripts/run_demo.py "Hi" --models grok-4 gpt-5      Pick models
  python scripts/run_demo.py "Hi" --synthesize               Add a synthesis
  python scripts/run_demo.py --list-models                   Show the registry
        """
    )

    parser.add_argument(
        "prompt",
        nargs="?",
        help="Prompt to send"
    )
    parser.add_argument(
        "--models", "-m",
        nargs="+",
        default=DEFAULT_MODELS,
        help=f"Model IDs to query (default: {' '.join(DEFAULT_MODELS)})"
    )
    parser.add_argument(
        "--system-prompt", "-s",
        help="System prompt sent to every model"
    )
    parser.add_argument(
        "--synthesize",
        action="store_true",
        help="Synthesize the successful answers into one"
    )
    parser.add_argument(
        "--synthesis-model",
        help="Preferred synthesis model (default: SYNTHESIS_MODEL setting)"
    )
    parser.add_argument(
        "--follow-up", "-f",
        help="Second prompt, sent with the first round's answers as history"
    )
    parser.add_argument(
        "--key", "-k",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Caller API key, e.g. OPENAI_API_KEY=sk-... (repeatable)"
    )
    parser.add_argument(
        "--list-models",
        action="store_true",
        help="List registered models and exit"
    )

    args = parser.parse_args()

    print("=" * 60)
    print("Quorum Demo Runner")
    print("=" * 60)

    try:
        api_keys = parse_keys(args.key)
    except ValueError as e:
        print(f"ERROR: {e}")
        sys.exit(2)

    if args.list_models:
        print_models(api_keys)
        sys.exit(0)

    if not args.prompt:
        parser.error("a prompt is required unless --list-models is given")

    registry = get_model_registry()
    unknown = [m for m in args.models if registry.get_model(m) is None]
    if unknown:
        print(f"ERROR: Unknown model(s): {', '.join(unknown)}")
        print("Use --list-models to see the available models.")
        sys.exit(2)

    sys.exit(asyncio.run(_main_async(args, api_keys)))


if __name__ == "__main__":
    main()
