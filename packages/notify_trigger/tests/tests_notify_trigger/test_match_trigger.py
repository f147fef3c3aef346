from datetime import datetime, timedelta, timezone

import pytest
from notify_trigger.schemas import RecurrenceRule
from notify_trigger.triggers import MatchTrigger, Trigger


class SimpleTrigger(Trigger):
    """A basic implementation for testing."""

    def __init__(self, interval: int, before=None):
        super().__init__(before=before)
        self.interval = interval

    def calculate_next(self, base):
        return base + timedelta(minutes=self.interval)

    def is_last_occurrence(self):
        return False


class OtherTrigger(Trigger):
    def calculate_next(self, base):
        return None

    def is_last_occurrence(self):
        return True


def test_equality():
    """Equality depends on same class and same attributes."""
    t1 = SimpleTrigger(interval=10)
    t2 = SimpleTrigger(interval=10)
    t3 = SimpleTrigger(interval=20)

    assert t1 == t2
    assert t1 != t3
    assert t1 != "string"
    assert t1 != OtherTrigger()


def test_hashing():
    t1 = MatchTrigger(RecurrenceRule(hour=9))
    t2 = MatchTrigger(RecurrenceRule(hour=9))
    assert hash(t1) == hash(t2)
    assert len({t1, t2}) == 1


def test_repr():
    assert repr(SimpleTrigger(interval=99)) == (
        "SimpleTrigger(before=None, occurrence=0, interval=99)"
    )


def test_next_trigger_counts_occurrences():
    trigger = SimpleTrigger(interval=5)
    base = datetime(2026, 10, 18, 12, 0)
    assert trigger.next_trigger(base) == datetime(2026, 10, 18, 12, 5)
    assert trigger.occurrence == 1


def test_no_next_trigger_is_not_counted():
    trigger = OtherTrigger()
    assert trigger.next_trigger(datetime(2026, 10, 18)) is None
    assert trigger.occurrence == 0


def test_match_trigger_runs_until_count(sunday_oct_18, utc):
    trigger = MatchTrigger(RecurrenceRule(hour=9, minute=30, count=2))
    assert trigger.is_last_occurrence() is False

    first = trigger.next_trigger(sunday_oct_18)
    assert first == datetime(2026, 10, 19, 9, 30, tzinfo=utc)
    assert trigger.is_last_occurrence() is False

    second = trigger.next_trigger(first)
    assert second == datetime(2026, 10, 20, 9, 30, tzinfo=utc)
    assert trigger.is_last_occurrence() is True

    assert trigger.next_trigger(second) is None
    assert trigger.occurrence == 2


def test_match_trigger_restored_occurrence(sunday_oct_18):
    trigger = MatchTrigger(RecurrenceRule(hour=9, count=3), occurrence=3)
    assert trigger.is_last_occurrence() is True
    assert trigger.calculate_next(sunday_oct_18) is None


def test_match_trigger_before_window(sunday_oct_18, utc):
    cutoff = datetime(2026, 10, 20, 9, 0, tzinfo=utc)
    trigger = MatchTrigger(RecurrenceRule(hour=9, before=cutoff))

    assert trigger.is_within_before(cutoff - timedelta(seconds=1)) is True
    assert trigger.is_within_before(cutoff) is False

    first = trigger.next_trigger(sunday_oct_18)
    assert first == datetime(2026, 10, 19, 9, 0, tzinfo=utc)
    assert trigger.next_trigger(first) is None


def test_next_trigger_drops_occurrences_past_before():
    base = datetime(2026, 10, 18, 12, 0)
    trigger = SimpleTrigger(interval=30, before=datetime(2026, 10, 18, 13, 0))

    assert trigger.next_trigger(base) == datetime(2026, 10, 18, 12, 30)
    # 13:00 is not before the cut-off
    assert trigger.next_trigger(datetime(2026, 10, 18, 12, 30)) is None
    assert trigger.occurrence == 1


def test_match_trigger_without_before_accepts_everything():
    trigger = MatchTrigger(RecurrenceRule(minute=0))
    assert trigger.is_within_before(datetime.max) is True


@pytest.mark.parametrize("first_weekday", [0, 6])
def test_match_trigger_first_weekday(sunday_oct_18, utc, first_weekday):
    trigger = MatchTrigger(RecurrenceRule(weekday=6, hour=18), first_weekday=first_weekday)
    assert trigger.calculate_next(sunday_oct_18) == datetime(2026, 10, 18, 18, 0, tzinfo=utc)
