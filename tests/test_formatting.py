#!/usr/bin/env python3
"""Tests for value formatting helpers."""
import pytest

from promconv.formatting import (
    add, args, div, format_decimal, humanize, humanize1024, humanize_duration,
    humanize_percentage, humanize_percentage_h, re_replace_all, readable_value,
    timeformat, timestamp, to_string,
)


@pytest.mark.parametrize("value,expected", [
    (3.0, "3"),
    (3.14, "3.14"),
    (0.0, "0"),
    (1.23456789, "1.23457"),
    (100.0, "100"),
    (-2.5, "-2.5"),
])
def test_readable_value(value, expected):
    assert readable_value(value) == expected


def test_humanize():
    assert humanize(1234567) == "1.235M"
    assert humanize(0.001234) == "1.234m"
    assert humanize(0) == "0"
    assert humanize("1500") == "1.5k"


def test_humanize1024():
    assert humanize1024(1048576) == "1Mi"
    assert humanize1024(512) == "512"
    assert humanize1024(1) == "1"


def test_humanize_duration():
    assert humanize_duration(90061) == "1d 1h 1m 1s"
    assert humanize_duration(3725) == "1h 2m 5s"
    assert humanize_duration(65) == "1m 5s"
    assert humanize_duration(12.5) == "12.5s"
    assert humanize_duration(0.25) == "250ms"
    assert humanize_duration(0) == "0s"
    assert humanize_duration(-65) == "-1m 5s"


def test_humanize_percentage():
    assert humanize_percentage(0.1234) == "12.34%"
    assert humanize_percentage_h(50) == "50.00%"


def test_arithmetic_accepts_numeric_strings():
    assert add("1.5", 2) == 3.5
    assert div(9, "3") == 3.0
    with pytest.raises(ZeroDivisionError):
        div(1, 0)


def test_misc_helpers():
    assert format_decimal(3.14159, 2) == "3.14"
    assert to_string(2.0) == "2"
    assert to_string("x") == "x"
    assert args("a", 1) == {"arg0": "a", "arg1": 1}
    assert re_replace_all(r":\d+$", "", "host:9100") == "host"


def test_time_formatting_is_utc():
    assert timeformat(0) == "1970-01-01 00:00:00"
    assert timeformat("86400", "%Y-%m-%d") == "1970-01-02"
    assert len(timestamp("%Y")) == 4
