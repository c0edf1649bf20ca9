# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import math

import pytest

from netverifier.utils import (
    cut_between,
    duration_to_bare_seconds,
    fix_leading_zeros_in_json,
    parse_duration,
    remove_timestamps,
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("xxBEGINpayloadENDxx", "payload"),
        ("BEGIN a END b END", " a END b "),
        ("BEGIN first BEGIN second END", " first BEGIN second "),
        ("no tokens here", ""),
        ("BEGIN but never finished", ""),
        ("END before BEGIN only", ""),
        ("BEGINEND", ""),
    ],
)
def test_cut_between(text, expected):
    assert cut_between(text, "BEGIN", "END") == expected


def test_cut_between_empty_tokens():
    assert cut_between("abc", "", "c") == ""
    assert cut_between("abc", "a", "") == ""


def test_fix_leading_zeros_in_json():
    assert fix_leading_zeros_in_json('{"http_code":000,"exitcode":7}') == '{"http_code":0,"exitcode":7}'
    assert fix_leading_zeros_in_json('{"a":061}') == '{"a":61}'
    # floats and regular numbers are untouched
    assert fix_leading_zeros_in_json('{"time_total":0.012,"b":10}') == '{"time_total":0.012,"b":10}'


def test_remove_timestamps():
    line = '@NV@{"url":"https://x.com:443",[2024-01-02T03:04:05.678]"exitcode":0}'
    assert remove_timestamps(line) == '@NV@{"url":"https://x.com:443","exitcode":0}'
    assert remove_timestamps("[not a timestamp]") == "[not a timestamp]"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("3s", 3.0),
        ("1m30s", 90.0),
        ("1.5h", 5400.0),
        ("250ms", 0.25),
        ("-2s", -2.0),
    ],
)
def test_parse_duration(value, expected):
    assert parse_duration(value) == pytest.approx(expected)


def test_parse_duration_rejects_bare_numbers():
    assert parse_duration("7") is None
    assert parse_duration("abc") is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("3s", 3.0),
        ("7", 7.0),
        ("1.5", 1.5),
        ("about 12 seconds", 12.0),
        ("", 0.0),
        (None, 0.0),
        ("none", 0.0),
    ],
)
def test_duration_to_bare_seconds(value, expected):
    assert duration_to_bare_seconds(value) == pytest.approx(expected)


def test_duration_to_bare_seconds_is_finite():
    assert math.isfinite(duration_to_bare_seconds("inf"))
    assert math.isfinite(duration_to_bare_seconds("NaN"))
