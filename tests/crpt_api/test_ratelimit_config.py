"""Tests for rate string parsing and window normalization."""

from datetime import timedelta

import pytest
from pyrate_limiter import Duration

from CrptApi.errors import ConfigurationError
from CrptApi.ratelimit.config import RateSpec, interval_to_ms, parse_rate_string


@pytest.mark.parametrize(
    ("text", "limit", "interval_ms"),
    [
        ("5/second", 5, 1_000),
        ("5/sec", 5, 1_000),
        ("300 / minute", 300, 60_000),
        ("10/hr", 10, 3_600_000),
        ("2/day", 2, 86_400_000),
        ("10/15s", 10, 15_000),
        ("3/2 minutes", 3, 120_000),
    ],
)
def test_parse_rate_string(text, limit, interval_ms):
    assert parse_rate_string(text) == RateSpec(limit=limit, interval_ms=interval_ms)


@pytest.mark.parametrize("text", ["", "five/second", "5", "5/fortnight", "0/second", "5/0s"])
def test_parse_rate_string_rejects_bad_input(text):
    with pytest.raises(ConfigurationError):
        parse_rate_string(text)


def test_rate_spec_per_unit_mirrors_duration():
    spec = RateSpec.per(Duration.SECOND, 5)
    assert spec.interval == 1.0
    assert spec.rps == 5.0
    assert str(spec) == "5/second"


def test_rate_spec_str_for_uncommon_window():
    assert str(RateSpec(limit=3, interval_ms=1_500)) == "3/1500ms"


def test_interval_to_ms_accepts_timedelta_and_seconds():
    assert interval_to_ms(timedelta(seconds=2)) == 2_000
    assert interval_to_ms(0.5) == 500


def test_interval_to_ms_rejects_bool():
    with pytest.raises(ConfigurationError):
        interval_to_ms(True)


@pytest.mark.parametrize("seconds", [0.0004, 0.0015, timedelta(microseconds=2500)])
def test_interval_to_ms_rejects_fractional_milliseconds(seconds):
    with pytest.raises(ConfigurationError, match="whole number of milliseconds"):
        interval_to_ms(seconds)


def test_interval_to_ms_tolerates_float_error():
    assert interval_to_ms(0.1) == 100
    assert interval_to_ms(0.001) == 1
