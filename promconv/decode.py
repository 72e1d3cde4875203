"""Decode Prometheus HTTP API query responses into query result variants."""
from typing import Any, Dict, List, Optional, Tuple
import logging

from promconv.series import (
    Empty, InstantVector, LabelSet, QueryResult, RangeMatrix, Sample,
    SampleStream, Scalar, Unsupported, VectorSample,
)

logger = logging.getLogger(__name__)


class MalformedPayload(ValueError):
    """Payload content does not match its declared result type."""


def _parse_pair(pair: Any) -> Tuple[float, float]:
    """Parse ``[<unix seconds>, "<value>"]``; values may be NaN or +/-Inf."""
    if not isinstance(pair, (list, tuple)) or len(pair) != 2:
        raise MalformedPayload(f"expected [timestamp, value], got {pair!r}")
    try:
        return float(pair[0]), float(pair[1])
    except (TypeError, ValueError) as e:
        raise MalformedPayload(f"invalid sample {pair!r}: {e}")


def _parse_labels(item: Dict[str, Any]) -> LabelSet:
    metric = item.get("metric") or {}
    if not isinstance(metric, dict):
        raise MalformedPayload(f"expected label object, got {metric!r}")
    return LabelSet({str(k): str(v) for k, v in metric.items()})


def _expect_list(result: Any, result_type: str) -> List[Any]:
    if not isinstance(result, list):
        raise MalformedPayload(f"{result_type} result must be a list, got {type(result).__name__}")
    for item in result:
        if not isinstance(item, dict):
            raise MalformedPayload(f"{result_type} item must be an object, got {item!r}")
    return result


def _decode_vector(result: Any) -> InstantVector:
    series = []
    for item in _expect_list(result, "vector"):
        ts, value = _parse_pair(item.get("value"))
        series.append(VectorSample(labels=_parse_labels(item), timestamp=ts, value=value))
    return InstantVector(series=tuple(series))


def _decode_matrix(result: Any) -> RangeMatrix:
    series = []
    for item in _expect_list(result, "matrix"):
        values = item.get("values") or []
        if not isinstance(values, list):
            raise MalformedPayload(f"matrix values must be a list, got {values!r}")
        samples = tuple(Sample(*_parse_pair(pair)) for pair in values)
        series.append(SampleStream(labels=_parse_labels(item), samples=samples))
    return RangeMatrix(series=tuple(series))


def _decode_scalar(result: Any) -> Scalar:
    ts, value = _parse_pair(result)
    return Scalar(timestamp=ts, value=value)


_DECODERS = {
    "vector": _decode_vector,
    "matrix": _decode_matrix,
    "scalar": _decode_scalar,
}


def _unwrap(payload: Any) -> Optional[Dict[str, Any]]:
    """Return the ``data`` object from a full response or a bare data object."""
    if not isinstance(payload, dict):
        return None
    if "resultType" in payload:
        return payload

    if payload.get("status") == "error":
        logger.warning(
            f"Query failed: {payload.get('errorType', 'unknown')}: {payload.get('error', '')}"
        )
        return None

    data = payload.get("data")
    return data if isinstance(data, dict) else None


def decode_query_result(payload: Any, strict: bool = False) -> QueryResult:
    """
    Decode a query response into a result variant.

    Accepts the full API envelope or its ``data`` object. Anything that
    cannot be decoded becomes ``Empty`` with a warning logged. With
    ``strict`` set, result data that does not match its declared type
    raises ``MalformedPayload`` instead.
    """
    data = _unwrap(payload)
    if data is None:
        if payload is not None:
            logger.warning(f"Query payload has no data object: {type(payload).__name__}")
        return Empty()

    result_type = data.get("resultType")
    result = data.get("result")
    if result is None:
        return Empty()

    if not isinstance(result_type, str):
        if strict:
            raise MalformedPayload(f"resultType must be a string, got {result_type!r}")
        logger.warning(f"Invalid resultType {result_type!r}, treating as no data")
        return Empty()

    decoder = _DECODERS.get(result_type)
    if decoder is None:
        return Unsupported(result_type=str(result_type), raw=result)

    try:
        return decoder(result)
    except MalformedPayload as e:
        if strict:
            raise
        logger.warning(f"Malformed {result_type} payload, treating as no data: {e}")
        return Empty()
