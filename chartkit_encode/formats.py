from __future__ import annotations

from datetime import date, datetime, timezone
from functools import lru_cache
import math
import re
from typing import Any, Callable

import numpy as np

from chartkit_encode.errors import EncodingSpecError
from chartkit_encode.ticks import format_tick


Formatter = Callable[[Any], str]

# d3-format style: [[fill]align][sign][symbol][0][width][,][.precision][~][type]
_NUMBER_FORMAT = re.compile(
    r"^(?:(?P<fill>.)?(?P<align>[<>=^]))?(?P<sign>[-+( ])?(?P<symbol>[$#])?(?P<zero>0)?"
    r"(?P<width>\d+)?(?P<comma>,)?(?:\.(?P<precision>\d+))?(?P<trim>~)?(?P<type>[bdeEfgGnosxX%])?$"
)
_SI_PREFIXES = {
    -8: "y", -7: "z", -6: "a", -5: "f", -4: "p", -3: "n", -2: "µ", -1: "m",
    0: "", 1: "k", 2: "M", 3: "G", 4: "T", 5: "P", 6: "E", 7: "Z", 8: "Y",
}
DEFAULT_TIME_FORMAT = "%Y-%m-%d"
DEFAULT_DATETIME_FORMAT = "%Y-%m-%d %H:%M"
EMPTY = ""
RADIX_TYPES = frozenset({"b", "o", "x", "X"})
INTEGER_TYPES = RADIX_TYPES | {"d"}
_RADIX_DIGITS = re.compile(r"^(\s*[-+ ]?(?:0[box])?)([0-9a-f]+)(\s*)$", re.IGNORECASE)


def to_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def to_datetime(value: Any) -> datetime | None:
    """Coerce datetimes, dates, ISO strings and epoch milliseconds."""

    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, np.datetime64):
        return datetime.fromtimestamp(float(value.astype("datetime64[ms]").astype(np.int64)) / 1000.0, tz=timezone.utc)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    number = to_number(value)
    if number is None or not math.isfinite(number):
        return None
    return datetime.fromtimestamp(number / 1000.0, tz=timezone.utc)


def smart_number_format(value: Any) -> str:
    if value is None:
        return EMPTY
    number = to_number(value)
    if number is None:
        return str(value)
    return format_tick(number)


def smart_time_format(value: Any) -> str:
    if value is None:
        return EMPTY
    moment = to_datetime(value)
    if moment is None:
        return str(value)
    if (moment.hour, moment.minute, moment.second, moment.microsecond) == (0, 0, 0, 0):
        return moment.strftime(DEFAULT_TIME_FORMAT)
    return moment.strftime(DEFAULT_DATETIME_FORMAT)


def plain_format(value: Any) -> str:
    if value is None:
        return EMPTY
    return str(value)


@lru_cache(maxsize=128)
def get_number_formatter(spec: str | None = None) -> Formatter:
    if not spec:
        return smart_number_format
    match = _NUMBER_FORMAT.match(spec)
    if match is None:
        raise EncodingSpecError(f"invalid number format: {spec!r}")
    parts = match.groupdict()
    fmt_type = parts["type"] or ""
    trim = parts["trim"] is not None or not fmt_type
    currency = parts["symbol"] == "$"
    precision = int(parts["precision"]) if parts["precision"] is not None else None

    if fmt_type == "s":
        return _si_formatter(precision if precision is not None else 6, trim=trim, currency=currency)

    py_type = {"": "g", "n": "g", "d": "d"}.get(fmt_type, fmt_type)
    sign = parts["sign"] if parts["sign"] in ("+", " ") else ""
    grouped = parts["comma"] is not None or fmt_type == "n"
    # Python only groups decimal output with ",".
    group_digits = grouped and py_type in RADIX_TYPES
    py_spec = "".join(
        (
            (parts["fill"] or "") + (parts["align"] or "") if parts["align"] else "",
            sign,
            "#" if parts["symbol"] == "#" else "",
            parts["zero"] or "",
            parts["width"] or "",
            "," if grouped and not group_digits else "",
            f".{precision}" if precision is not None and py_type not in INTEGER_TYPES else "",
            py_type,
        )
    )

    def _format(value: Any) -> str:
        if value is None:
            return EMPTY
        number = to_number(value)
        if number is None:
            return str(value)
        if not math.isfinite(number):
            return str(number)
        out = format(int(round(number)) if py_type in INTEGER_TYPES else number, py_spec)
        if group_digits:
            out = _group_thousands(out)
        if trim:
            out = _trim_insignificant_zeros(out)
        return f"${out}" if currency else out

    return _format


@lru_cache(maxsize=128)
def get_time_formatter(spec: str | None = None) -> Formatter:
    if not spec:
        return smart_time_format

    def _format(value: Any) -> str:
        if value is None:
            return EMPTY
        moment = to_datetime(value)
        if moment is None:
            return str(value)
        return moment.strftime(spec)

    return _format


def _si_formatter(precision: int, *, trim: bool, currency: bool) -> Formatter:
    digits = max(1, precision)

    def _format(value: Any) -> str:
        if value is None:
            return EMPTY
        number = to_number(value)
        if number is None:
            return str(value)
        if number == 0 or not math.isfinite(number):
            return format_tick(number)
        exponent = int(math.floor(math.log10(abs(number)) / 3))
        exponent = max(-8, min(8, exponent))
        scaled = number / (1000.0**exponent)
        int_digits = len(str(int(abs(scaled)))) if abs(scaled) >= 1 else 1
        out = f"{scaled:.{max(0, digits - int_digits)}f}"
        if trim:
            out = _trim_insignificant_zeros(out)
        out = out + _SI_PREFIXES[exponent]
        return f"${out}" if currency else out

    return _format


def _trim_insignificant_zeros(text: str) -> str:
    mantissa, sep, rest = text.partition("e")
    head, dot, tail = mantissa.partition(".")
    if not dot:
        return text
    suffix = ""
    while tail and not tail[-1].isdigit():
        suffix = tail[-1] + suffix
        tail = tail[:-1]
    tail = tail.rstrip("0")
    mantissa = f"{head}.{tail}" if tail else head
    return mantissa + suffix + sep + rest


def _group_thousands(text: str) -> str:
    match = _RADIX_DIGITS.match(text)
    if match is None:
        return text
    prefix, digits, suffix = match.groups()
    head = len(digits) % 3 or 3
    groups = [digits[:head]] + [digits[i : i + 3] for i in range(head, len(digits), 3)]
    return prefix + ",".join(groups) + suffix
