"""Duration text in the same notation the Clair configuration files use.

Values are a signed sequence of decimal numbers, each with a unit suffix,
e.g. ``"300ms"``, ``"-1.5h"`` or ``"2h45m"``. Valid units are ``ns``, ``us``
(or ``µs``), ``ms``, ``s``, ``m`` and ``h``. A bare ``"0"`` is also accepted.
"""

from __future__ import annotations

import re
from datetime import timedelta
from decimal import Decimal, InvalidOperation

_UNIT_NANOSECONDS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_COMPONENT_RE = re.compile(r"([0-9]+\.?[0-9]*|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(text: str) -> timedelta:
    """Parse duration text into a timedelta.

    Sub-microsecond precision is truncated. Raises ValueError on malformed input.
    """
    raw = text.strip()
    if not raw:
        raise ValueError("empty duration")

    sign = 1
    body = raw
    if body[0] in "+-":
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f"invalid duration {text!r}")

    total_ns = Decimal(0)
    pos = 0
    while pos < len(body):
        match = _COMPONENT_RE.match(body, pos)
        if match is None:
            raise ValueError(f"invalid duration {text!r}")
        number, unit = match.groups()
        try:
            total_ns += Decimal(number) * _UNIT_NANOSECONDS[unit]
        except InvalidOperation as e:
            raise ValueError(f"invalid duration {text!r}") from e
        pos = match.end()

    microseconds = int(total_ns // 1000)
    try:
        return timedelta(microseconds=sign * microseconds)
    except OverflowError as e:
        raise ValueError(f"invalid duration {text!r}: out of range") from e


def format_duration(value: timedelta) -> str:
    """Render a timedelta as duration text, e.g. ``1h0m0s`` or ``1.5s``."""
    total_us = (value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds
    if total_us == 0:
        return "0s"

    sign = "-" if total_us < 0 else ""
    total_us = abs(total_us)

    if total_us < 1_000_000:
        if total_us < 1000:
            return f"{sign}{total_us}µs"
        return f"{sign}{_trim_fraction(total_us, 1000)}ms"

    hours, rem = divmod(total_us, 3600 * 1_000_000)
    minutes, rem = divmod(rem, 60 * 1_000_000)
    seconds = _trim_fraction(rem, 1_000_000)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def _trim_fraction(value: int, scale: int) -> str:
    whole, frac = divmod(value, scale)
    if not frac:
        return str(whole)
    digits = len(str(scale)) - 1
    return f"{whole}.{frac:0{digits}d}".rstrip("0")
