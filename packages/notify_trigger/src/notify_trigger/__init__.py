"""
Recurring notification triggers.

A RecurrenceRule pins calendar fields (minute, hour, day, weekday, week of
month, week of year, month). The resolver turns a rule and a base instant
into the next matching instant, honouring an optional occurrence count and
an optional ``before`` cut-off.
"""

from .calendar import Candidate, TriggerUnit
from .manager import TriggerManager
from .resolver import RULE_STEPS, apply_rule, compute_next, is_exhausted
from .schemas import RecurrenceRule, ScheduledTrigger
from .triggers import MatchTrigger, Trigger

__all__ = [
    "RULE_STEPS",
    "Candidate",
    "MatchTrigger",
    "RecurrenceRule",
    "ScheduledTrigger",
    "Trigger",
    "TriggerManager",
    "TriggerUnit",
    "apply_rule",
    "compute_next",
    "is_exhausted",
]
