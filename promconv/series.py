"""Data structures for query results: label sets, samples and result variants."""
from dataclasses import dataclass, field
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union

METRIC_NAME_LABEL = "__name__"


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


class LabelSet(Mapping[str, str]):
    """Immutable set of label name/value pairs identifying a series.

    Ordering of the input mapping is irrelevant: two label sets with the same
    pairs compare equal, hash equal and serialize to the same string.
    """

    __slots__ = ("_labels", "_hash")

    def __init__(self, labels: Optional[Mapping[str, str]] = None):
        self._labels: Dict[str, str] = dict(labels or {})
        self._hash: Optional[int] = None

    def __getitem__(self, name: str) -> str:
        return self._labels[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __len__(self) -> int:
        return len(self._labels)

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(frozenset(self._labels.items()))
        return self._hash

    def __eq__(self, other) -> bool:
        if isinstance(other, LabelSet):
            return self._labels == other._labels
        if isinstance(other, Mapping):
            return self._labels == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"LabelSet({self._labels!r})"

    def __str__(self) -> str:
        """Canonical form, e.g. ``up{instance="a", job="node"}``."""
        name = self._labels.get(METRIC_NAME_LABEL, "")
        pairs = [
            f"{k}={_quote(v)}"
            for k, v in sorted(self._labels.items())
            if k != METRIC_NAME_LABEL
        ]
        if not pairs:
            return name if name else "{}"
        return f"{name}{{{', '.join(pairs)}}}"

    def to_dict(self) -> Dict[str, str]:
        """Return a plain, mutable copy of the labels."""
        return dict(self._labels)


@dataclass(frozen=True)
class Sample:
    """A single (timestamp, value) pair. Timestamps are Unix seconds."""
    timestamp: float
    value: float


@dataclass(frozen=True)
class VectorSample:
    """One series of an instant vector with its only sample."""
    labels: LabelSet
    timestamp: float
    value: float


@dataclass(frozen=True)
class SampleStream:
    """One series of a range matrix; samples are ordered by time."""
    labels: LabelSet
    samples: Tuple[Sample, ...] = ()


@dataclass(frozen=True)
class Empty:
    """No data."""
    result_type = "empty"


@dataclass(frozen=True)
class InstantVector:
    series: Tuple[VectorSample, ...] = ()
    result_type = "vector"


@dataclass(frozen=True)
class RangeMatrix:
    series: Tuple[SampleStream, ...] = ()
    result_type = "matrix"


@dataclass(frozen=True)
class Scalar:
    timestamp: float
    value: float
    result_type = "scalar"


@dataclass(frozen=True)
class Unsupported:
    """A result variant the normalizer does not handle (e.g. ``string``)."""
    result_type: str
    raw: object = field(default=None, compare=False, repr=False)


QueryResult = Union[Empty, InstantVector, RangeMatrix, Scalar, Unsupported]
