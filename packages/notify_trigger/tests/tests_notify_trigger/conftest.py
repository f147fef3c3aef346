from datetime import datetime, timezone

import pytest


@pytest.fixture
def utc():
    return timezone.utc


@pytest.fixture
def sunday_oct_18(utc):
    """
    Sunday, Oct 18th 2026 12:00:00 UTC.
    October 2026 starts on a Thursday; Jan 1st 2026 is a Thursday too.
    """
    return datetime(2026, 10, 18, 12, 0, 0, tzinfo=utc)


@pytest.fixture
def monday_jun_1(utc):
    """Monday, Jun 1st 2026 08:00 UTC: a month whose 1st is a Monday."""
    return datetime(2026, 6, 1, 8, 0, 0, tzinfo=utc)
