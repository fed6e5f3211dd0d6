"""Errors raised by the bot detection engine."""
from typing import List, Sequence


class InvalidInput(ValueError):
    """The record list cannot be analyzed (empty, malformed, or wrong pair)."""

    def __init__(self, errors: Sequence[str]):
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid input")
