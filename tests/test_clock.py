from datetime import timedelta

import pytest

from umqtt.clock import Instant


def test_constructors_agree():
    assert Instant.from_seconds_since_epoch(10) == Instant.from_millis_since_epoch(10 * 1000)
    assert Instant.from_duration_since_epoch(timedelta(seconds=10)) == (
        Instant.from_seconds_since_epoch(10)
    )


def test_duration_truncates_to_millis():
    instant = Instant.from_duration_since_epoch(timedelta(microseconds=1500))
    assert instant.milliseconds == 1


def test_add_seconds():
    start = Instant.from_seconds_since_epoch(5)
    assert start.add_seconds(3) == Instant.from_seconds_since_epoch(8)


def test_add_and_subtract_duration_round_trip():
    start = Instant.from_millis_since_epoch(1234)
    step = timedelta(milliseconds=250)
    later = start + step
    assert later - start == step
    assert later - step == start


def test_in_place_operators():
    instant = Instant.from_seconds_since_epoch(1)
    original = instant
    instant += timedelta(seconds=2)
    assert instant - original == timedelta(seconds=2)
    instant -= timedelta(seconds=2)
    assert instant == original


def test_subtraction_saturates():
    early = Instant.from_seconds_since_epoch(1)
    late = Instant.from_seconds_since_epoch(2)
    assert early - late == timedelta(0)
    assert early - timedelta(seconds=10) == Instant.from_millis_since_epoch(0)


def test_ordering():
    assert Instant.from_millis_since_epoch(1) < Instant.from_millis_since_epoch(2)
    assert max(Instant.from_seconds_since_epoch(3), Instant.from_seconds_since_epoch(1)) == (
        Instant.from_seconds_since_epoch(3)
    )


def test_negative_duration_rejected():
    with pytest.raises(ValueError):
        Instant.from_duration_since_epoch(timedelta(seconds=-1))