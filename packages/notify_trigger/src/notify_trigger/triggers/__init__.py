"""
Trigger objects.

A trigger wraps a rule together with the number of occurrences it has
already produced. The date arithmetic itself lives in the pure resolver.
"""

from .base import Trigger
from .match import MatchTrigger

__all__ = [
    "MatchTrigger",
    "Trigger",
]
