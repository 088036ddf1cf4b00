"""
Backoff policies used between retries of a failed batch.

Engines rate-limit requests, so a failed batch waits before it is sent
again. The policy is injected into the pipeline; tests use a zero delay.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict


@dataclass
class FixedBackoff:
    """Wait the same delay before every retry."""

    delay: float = 1.0
    sleep: Callable[[float], None] = time.sleep

    def get_delay(self, attempt: int) -> float:
        return self.delay

    def wait(self, attempt: int) -> float:
        """Sleep before retry number attempt (1-indexed) and return the delay used."""
        delay = self.get_delay(attempt)
        if delay > 0:
            self.sleep(delay)
        return delay


@dataclass
class ExponentialBackoff:
    """
    Delay growing exponentially with each retry.

    Formula: initial_delay * (exponential_base ** (attempt - 1)), capped at max_delay
    Example: initial=1.0, base=2.0 gives 1s, 2s, 4s, 8s, 16s...
    """

    initial_delay: float = 1.0
    exponential_base: float = 2.0
    max_delay: float = 30.0
    sleep: Callable[[float], None] = time.sleep

    def get_delay(self, attempt: int) -> float:
        delay = self.initial_delay * (self.exponential_base ** max(attempt - 1, 0))
        return min(delay, self.max_delay)

    def wait(self, attempt: int) -> float:
        delay = self.get_delay(attempt)
        if delay > 0:
            self.sleep(delay)
        return delay


def create_backoff(translation_config: Dict[str, Any]):
    """
    Build the backoff policy from the translation config section.

    Raises:
        ValueError: If the backoff kind is unknown
    """
    kind = str(translation_config.get("backoff", "fixed")).lower()
    delay = float(translation_config.get("retry_delay", 1.0))
    if kind == "fixed":
        return FixedBackoff(delay=delay)
    if kind == "exponential":
        return ExponentialBackoff(
            initial_delay=delay,
            max_delay=float(translation_config.get("max_retry_delay", 30.0)),
        )
    raise ValueError(f"Unknown backoff policy '{kind}' (expected 'fixed' or 'exponential')")
