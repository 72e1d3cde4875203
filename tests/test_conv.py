#!/usr/bin/env python3
"""Tests for the result normalizer."""
import math

from promconv.conv import Observation, convert
from promconv.series import (
    Empty, InstantVector, LabelSet, RangeMatrix, Sample, SampleStream, Scalar,
    Unsupported, VectorSample,
)

NAN = float("nan")


def stream(labels, *points):
    return SampleStream(
        labels=LabelSet(labels),
        samples=tuple(Sample(timestamp=t, value=v) for t, v in points),
    )


def test_empty_result():
    """Empty and missing results produce no observations."""
    assert convert(Empty()) == []
    assert convert(None) == []


def test_unsupported_and_unknown_results():
    assert convert(Unsupported(result_type="string", raw=[1, "x"])) == []
    assert convert({"resultType": "vector"}) == []
    assert convert("not a result") == []


def test_scalar_nan_is_filtered():
    assert convert(Scalar(timestamp=100, value=NAN)) == []


def test_scalar_pass_through():
    result = convert(Scalar(timestamp=100, value=2.5))
    assert result == [Observation(key="{}", labels=LabelSet(), timestamp=100, value=2.5)]
    assert result[0].to_dict() == {"key": "{}", "labels": {}, "timestamp": 100, "value": 2.5}


def test_instant_vector_skips_nan_series():
    """Only the series with a real value survives."""
    a = VectorSample(labels=LabelSet({"__name__": "up", "job": "a"}), timestamp=40, value=NAN)
    b = VectorSample(labels=LabelSet({"__name__": "up", "job": "b"}), timestamp=50, value=7.0)

    result = convert(InstantVector(series=(a, b)))

    assert len(result) == 1
    obs = result[0]
    assert obs.key == 'up{job="b"}'
    assert obs.labels == {"__name__": "up", "job": "b"}
    assert obs.timestamp == 50
    assert obs.value == 7.0


def test_instant_vector_preserves_input_order():
    series = tuple(
        VectorSample(labels=LabelSet({"instance": name}), timestamp=1, value=float(i))
        for i, name in enumerate(["c", "a", "b"])
    )
    keys = [obs.key for obs in convert(InstantVector(series=series))]
    assert keys == ['{instance="c"}', '{instance="a"}', '{instance="b"}']


def test_timestamps_are_truncated_to_seconds():
    item = VectorSample(labels=LabelSet({"job": "a"}), timestamp=1700000000.781, value=1.0)
    assert convert(InstantVector(series=(item,)))[0].timestamp == 1700000000


def test_range_matrix_uses_last_sample():
    matrix = RangeMatrix(series=(stream({"job": "a"}, (1, 1.0), (2, 2.0), (3, 3.0)),))

    result = convert(matrix)

    assert len(result) == 1
    assert result[0].timestamp == 3
    assert result[0].value == 3.0
    assert result[0].key == '{job="a"}'


def test_range_matrix_nan_last_sample_skips_series():
    matrix = RangeMatrix(series=(
        stream({"job": "a"}, (1, 1.0), (2, NAN)),
        stream({"job": "b"}, (1, NAN), (2, 4.0)),
    ))

    result = convert(matrix)

    assert [(obs.key, obs.value) for obs in result] == [('{job="b"}', 4.0)]


def test_range_matrix_empty_series_stops_conversion():
    """A series without samples ends the conversion with what was collected."""
    matrix = RangeMatrix(series=(
        stream({"job": "s1"}, (1, 1.0)),
        stream({"job": "s2"}),
        stream({"job": "s3"}, (1, 3.0)),
    ))

    result = convert(matrix)

    assert [obs.key for obs in result] == ['{job="s1"}']


def test_range_matrix_empty_series_skip_policy():
    matrix = RangeMatrix(series=(
        stream({"job": "s1"}, (1, 1.0)),
        stream({"job": "s2"}),
        stream({"job": "s3"}, (1, 3.0)),
    ))

    result = convert(matrix, empty_series="skip")

    assert [obs.key for obs in result] == ['{job="s1"}', '{job="s3"}']


def test_malformed_containers_yield_nothing():
    assert convert(InstantVector(series=("bogus",))) == []
    assert convert(RangeMatrix(series=(stream({"job": "a"}, (1, 1.0)), 42))) == []


def test_no_nan_values_are_emitted():
    vector = InstantVector(series=tuple(
        VectorSample(labels=LabelSet({"i": str(i)}), timestamp=i, value=v)
        for i, v in enumerate([NAN, 1.0, NAN, float("inf"), 0.0])
    ))
    matrix = RangeMatrix(series=(
        stream({"i": "0"}, (1, NAN)),
        stream({"i": "1"}, (1, NAN), (2, 5.0)),
    ))

    for result in (vector, matrix, Scalar(timestamp=1, value=NAN)):
        for obs in convert(result):
            assert not math.isnan(obs.value)

    assert len(convert(vector)) == 3


def test_input_is_not_mutated():
    series = (stream({"job": "a"}, (1, 1.0), (2, 2.0)),)
    matrix = RangeMatrix(series=series)
    convert(matrix)
    assert matrix.series is series
    assert len(matrix.series[0].samples) == 2


def test_observation_readable_value():
    obs = Observation(key="{}", labels=LabelSet(), timestamp=1, value=3.14)
    assert obs.readable_value() == "3.14"


def test_non_numeric_values_yield_nothing():
    assert convert(Scalar(timestamp=1, value="2.5")) == []
    assert convert(Scalar(timestamp=None, value=2.5)) == []
    assert convert(Scalar(timestamp=NAN, value=2.5)) == []

    vector = InstantVector(series=(
        VectorSample(labels=LabelSet({"job": "a"}), timestamp=1, value=1.0),
        VectorSample(labels=LabelSet({"job": "b"}), timestamp=1, value="x"),
    ))
    assert convert(vector) == []

    matrix = RangeMatrix(series=(stream({"job": "a"}, (1, [1.0])),))
    assert convert(matrix) == []
    assert convert(RangeMatrix(series=(SampleStream(labels=LabelSet(), samples=((1, 2.0),)),))) == []
