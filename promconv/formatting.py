"""Numeric and humanizing formatters used for display and templates."""
from datetime import datetime, timezone
from typing import Any, Dict, Union
import math
import re
import time

Number = Union[int, float, str]

_SI_LARGE = ["k", "M", "G", "T", "P", "E", "Z", "Y"]
_SI_SMALL = ["m", "u", "n", "p", "f", "a", "z", "y"]
_BINARY = ["ki", "Mi", "Gi", "Ti", "Pi", "Ei", "Zi", "Yi"]

DEFAULT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def readable_value(v: float) -> str:
    """Format to 5 decimals, then drop trailing zeros and a dangling point."""
    ret = "%.5f" % v
    ret = ret.rstrip("0")
    return ret.rstrip(".")


def to_float(v: Number) -> float:
    """Accept numbers or numeric strings, as template arguments often are."""
    if isinstance(v, str):
        return float(v.strip())
    return float(v)


def humanize(v: Number) -> str:
    """Scale with SI prefixes, e.g. 1234567 -> '1.235M'."""
    v = to_float(v)
    if v == 0 or math.isnan(v) or math.isinf(v):
        return "%.4g" % v

    prefix = ""
    if abs(v) >= 1:
        for p in _SI_LARGE:
            if abs(v) < 1000:
                break
            prefix = p
            v /= 1000
    else:
        for p in _SI_SMALL:
            if abs(v) >= 1:
                break
            prefix = p
            v *= 1000
    return "%.4g%s" % (v, prefix)


def humanize1024(v: Number) -> str:
    """Scale with binary prefixes, e.g. 1048576 -> '1Mi'."""
    v = to_float(v)
    if abs(v) <= 1 or math.isnan(v) or math.isinf(v):
        return "%.4g" % v

    prefix = ""
    for p in _BINARY:
        if abs(v) < 1024:
            break
        prefix = p
        v /= 1024
    return "%.4g%s" % (v, prefix)


def humanize_duration(v: Number) -> str:
    """Render seconds as '1d 2h 3m 4s', '12.5s' or '250ms'."""
    v = to_float(v)
    if math.isnan(v) or math.isinf(v):
        return "%.4g" % v
    if v == 0:
        return "%.4gs" % v

    if abs(v) >= 1:
        sign = ""
        if v < 0:
            sign = "-"
            v = -v
        whole = int(v)
        seconds = whole % 60
        minutes = (whole // 60) % 60
        hours = (whole // 3600) % 24
        days = whole // 86400
        if days:
            return f"{sign}{days}d {hours}h {minutes}m {seconds}s"
        if hours:
            return f"{sign}{hours}h {minutes}m {seconds}s"
        if minutes:
            return f"{sign}{minutes}m {seconds}s"
        return "%s%.4gs" % (sign, v)

    prefix = ""
    for p in _SI_SMALL:
        if abs(v) >= 1:
            break
        prefix = p
        v *= 1000
    return "%.4g%ss" % (v, prefix)


def humanize_percentage(v: Number) -> str:
    """Ratio to percentage: 0.1234 -> '12.34%'."""
    return "%.4g%%" % (to_float(v) * 100)


def humanize_percentage_h(v: Number) -> str:
    """Value already in percent: 12.345 -> '12.35%'."""
    return "%.2f%%" % to_float(v)


def format_decimal(v: Number, places: int = 2) -> str:
    return "%.*f" % (int(places), to_float(v))


def timeformat(ts: Number, fmt: str = DEFAULT_TIME_FORMAT) -> str:
    """Format a Unix timestamp (seconds) in UTC."""
    return datetime.fromtimestamp(to_float(ts), tz=timezone.utc).strftime(fmt)


def timestamp(fmt: str = DEFAULT_TIME_FORMAT) -> str:
    """Current UTC time, formatted."""
    return datetime.now(timezone.utc).strftime(fmt)


def now() -> float:
    return time.time()


def to_string(v: Any) -> str:
    if isinstance(v, float):
        return readable_value(v)
    return str(v)


def add(a: Number, b: Number) -> float:
    return to_float(a) + to_float(b)


def sub(a: Number, b: Number) -> float:
    return to_float(a) - to_float(b)


def mul(a: Number, b: Number) -> float:
    return to_float(a) * to_float(b)


def div(a: Number, b: Number) -> float:
    # ZeroDivisionError is left to the template renderer.
    return to_float(a) / to_float(b)


def args(*values: Any) -> Dict[str, Any]:
    """Bundle positional values as arg0, arg1, ... for nested templates."""
    return {f"arg{i}": v for i, v in enumerate(values)}


def re_replace_all(pattern: str, repl: str, text: str) -> str:
    return re.sub(pattern, repl, text)
