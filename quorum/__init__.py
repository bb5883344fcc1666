"""
Quorum: Multi-Provider LLM Dispatch and Aggregation

Sends one conversation to several large-language-model backends at once,
collects every response (successes and failures together), estimates the
token cost of each call, and can synthesize the successful responses into a
single consolidated answer.
"""

__version__ = "0.1.0"
