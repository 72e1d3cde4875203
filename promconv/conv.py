"""Normalize metrics query results into a flat list of observations."""
from dataclasses import dataclass
from typing import Any, Dict, List, Literal
import logging

import numpy as np

from promconv.formatting import readable_value
from promconv.series import (
    InstantVector, LabelSet, QueryResult, RangeMatrix, Sample, SampleStream, Scalar,
    VectorSample,
)

logger = logging.getLogger(__name__)

SCALAR_KEY = "{}"

EmptySeriesPolicy = Literal["abort", "skip"]


@dataclass(frozen=True)
class Observation:
    """A single normalized sample, independent of the query shape."""
    key: str
    labels: LabelSet
    timestamp: int
    value: float

    def readable_value(self) -> str:
        return readable_value(self.value)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form for API responses and template contexts."""
        return {
            "key": self.key,
            "labels": self.labels.to_dict(),
            "timestamp": self.timestamp,
            "value": self.value,
        }


def _is_real(v) -> bool:
    return isinstance(v, (int, float, np.integer, np.floating)) and not isinstance(v, bool)


def _valid_sample(timestamp, value, variant: str) -> bool:
    if _is_real(timestamp) and np.isfinite(timestamp) and _is_real(value):
        return True
    logger.warning(
        f"Malformed {variant} sample: timestamp={timestamp!r} value={value!r}"
    )
    return False


def _observation(labels: LabelSet, timestamp: float, value: float) -> Observation:
    return Observation(
        key=str(labels),
        labels=labels,
        timestamp=int(timestamp),
        value=float(value),
    )


def _convert_vector(result: InstantVector) -> List[Observation]:
    lst: List[Observation] = []
    for item in result.series:
        if not isinstance(item, VectorSample):
            logger.warning(f"Malformed instant vector item: {type(item).__name__}")
            return []

        if not _valid_sample(item.timestamp, item.value, "instant vector"):
            return []

        if np.isnan(item.value):
            continue

        lst.append(_observation(item.labels, item.timestamp, item.value))
    return lst


def _convert_matrix(result: RangeMatrix, empty_series: EmptySeriesPolicy) -> List[Observation]:
    lst: List[Observation] = []
    for item in result.series:
        if not isinstance(item, SampleStream):
            logger.warning(f"Malformed range matrix item: {type(item).__name__}")
            return []

        if not item.samples:
            if empty_series == "skip":
                continue
            # Stops the whole conversion, not just this series.
            logger.debug(
                f"Series {item.labels} has no samples, returning "
                f"{len(lst)} of {len(result.series)} series"
            )
            return lst

        last = item.samples[-1]
        if not isinstance(last, Sample) or not _valid_sample(last.timestamp, last.value, "range matrix"):
            return []

        if np.isnan(last.value):
            continue

        lst.append(_observation(item.labels, last.timestamp, last.value))
    return lst


def _convert_scalar(result: Scalar) -> List[Observation]:
    if not _valid_sample(result.timestamp, result.value, "scalar"):
        return []
    if np.isnan(result.value):
        return []
    return [
        Observation(
            key=SCALAR_KEY,
            labels=LabelSet(),
            timestamp=int(result.timestamp),
            value=float(result.value),
        )
    ]


def convert(result: QueryResult, empty_series: EmptySeriesPolicy = "abort") -> List[Observation]:
    """
    Convert a query result into observations.

    Args:
        result: Any query result variant; ``None`` is treated as no data.
        empty_series: What to do with a range matrix series that has no
            samples. ``"abort"`` returns the observations collected so far,
            ``"skip"`` ignores that series and continues.

    Returns:
        Observations in the input's series order. NaN samples are dropped.
        Unknown or malformed inputs yield an empty list; nothing is raised.
    """
    if isinstance(result, InstantVector):
        return _convert_vector(result)
    if isinstance(result, RangeMatrix):
        return _convert_matrix(result, empty_series)
    if isinstance(result, Scalar):
        return _convert_scalar(result)

    if result is not None:
        logger.debug(
            f"No observations for result type "
            f"{getattr(result, 'result_type', type(result).__name__)}"
        )
    return []
