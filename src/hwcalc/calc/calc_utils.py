# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/hwcalc/calc/calc_utils.py

"""Helpers shared by the calculators: CLI arguments, unit parsing, shareable
query strings and number formatting.
"""

from __future__ import annotations

import argparse
import logging
import math
from functools import lru_cache
from math import ceil
from typing import Annotated, Any, Callable, Literal, Mapping, Sequence
from urllib.parse import parse_qsl, urlencode

import yaml
from pint import UnitRegistry
from pint.errors import PintError
from pydantic import BeforeValidator

logger = logging.getLogger(__name__)

SECONDS_PER_YEAR = 365.25 * 24 * 3600


@lru_cache(maxsize=1)
def _get_ureg() -> Any:
    """Return the shared pint registry (building one is slow)."""
    return UnitRegistry()


def parse_quantity(value: str | int | float, unit: str) -> float:
    """Parse a number or a pint unit string (e.g. '156.25 MHz') into `unit`.

    Bare numbers, numeric strings included, are taken to be in `unit`.
    """
    if isinstance(value, bool):
        raise ValueError(f"Expected a number in {unit}, got {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    try:
        quantity: Any = _get_ureg().Quantity(value)
        if quantity.dimensionless:
            return float(quantity.magnitude)
        return float(quantity.to(unit).magnitude)
    except (PintError, TypeError, AttributeError) as exc:
        raise ValueError(f"Cannot convert {value!r} to {unit}: {exc}") from exc


def parse_mhz(value: str | int | float) -> float:
    """Parse a frequency, returning MHz."""
    return parse_quantity(value, "MHz")


def parse_ns(value: str | int | float) -> float:
    """Parse a time, returning ns."""
    return parse_quantity(value, "ns")


def parse_ps(value: str | int | float) -> float:
    """Parse a time, returning ps."""
    return parse_quantity(value, "ps")


def parse_number(value: str | int | float) -> float:
    """Parse a plain number or numeric string."""
    if isinstance(value, bool):
        raise ValueError(f"Expected a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Expected a number, got {value!r}") from exc


def _nan_on_error(parse: Callable[[Any], float]) -> Callable[[Any], float]:
    def lenient(value: Any) -> float:
        try:
            return parse(value)
        except ValueError as exc:
            logger.warning("%s, searching with NaN", exc)
            return math.nan

    return lenient


# Fields accept unit strings ('1.1 GHz', '50 ps') or bare numbers in the
# field's unit, and validate to a float in that unit.
MegaHertz = Annotated[float, BeforeValidator(parse_mhz)]
Nanoseconds = Annotated[float, BeforeValidator(parse_ns)]
Picoseconds = Annotated[float, BeforeValidator(parse_ps)]

# Divider search inputs: unparseable values become NaN and the search
# reports them as invalid input.
SearchMegaHertz = Annotated[float, BeforeValidator(_nan_on_error(parse_mhz))]
SearchNumber = Annotated[float, BeforeValidator(_nan_on_error(parse_number))]


def apply_margin(
    val: int,
    margin_type: Literal["percentage", "absolute"],
    margin_val: int,
) -> int:
    """Apply margin to a value."""
    if margin_type == "percentage":
        return int(ceil(val * (100 + margin_val) / 100))
    return val + margin_val


def get_args(
    argv: Sequence[str] | None = None, description: str = ""
) -> argparse.Namespace:
    """Parse command line arguments for the calculators.

    Provides standard arguments for spec file path, output directory, and
    logging verbosity.
    """
    ap = argparse.ArgumentParser(
        description=description,
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    ap.add_argument(
        "spec",
        nargs="+",
        help="YAML spec file path(s) or shareable '?calc=...' query string(s)",
    )
    ap.add_argument("--outdir", help="output directory")
    ap.add_argument("--results-name", default="results", help="results name prefix")
    ap.add_argument(
        "--verbosity",
        choices=["critical", "error", "warning", "info", "debug"],
        default="info",
        help="logging level",
    )
    args = ap.parse_args(argv)

    # Solvers take a single spec
    if len(args.spec) == 1:
        args.spec = args.spec[0]

    return args


def is_query(spec: str) -> bool:
    """Return True if a CLI spec argument is a shareable query string."""
    return spec.startswith("?") or spec.startswith("calc=")


def spec_to_query(calc_type: str, spec: Mapping[str, Any]) -> str:
    """Encode a calculator spec as a shareable '?calc=...' query string."""
    pairs = [("calc", calc_type)]
    for key, value in spec.items():
        if value is None or key == "calc_type":
            continue
        if isinstance(value, bool):
            pairs.append((key, "true" if value else "false"))
        else:
            pairs.append((key, str(value)))
    return "?" + urlencode(pairs)


def spec_from_query(query: str) -> dict[str, Any]:
    """Decode a '?calc=...' query string into a spec dictionary.

    Values are read as YAML scalars, so numbers and booleans come back typed
    and unit strings stay strings.
    """
    spec: dict[str, Any] = {}
    for key, raw in parse_qsl(query.lstrip("?"), strict_parsing=True):
        if key == "calc":
            spec["calc_type"] = raw
        else:
            spec[key] = yaml.safe_load(raw)
    if "calc_type" not in spec:
        raise ValueError(f"Missing 'calc' field in query {query!r}")
    logger.debug("Decoded query %s -> %s", query, spec)
    return spec


def format_number(n: float) -> str:
    """Format a value with 6 significant digits, or 3 decimals of exponent
    form when it is very large or very small.
    """
    if abs(n) >= 1000 or (abs(n) < 0.001 and n != 0):
        return f"{n:.3e}"
    return f"{n:.6g}"


def format_duration(seconds: float, log10_seconds: float | None = None) -> str:
    """Format a duration from seconds up to billions of years.

    Durations too long for a float are formatted from `log10_seconds`.
    """
    minute, hour, day, year = 60.0, 3600.0, 86400.0, SECONDS_PER_YEAR
    if not math.isfinite(seconds):
        if log10_seconds is None:
            return "inf years"
        log10_years = log10_seconds - math.log10(year)
        exponent = math.floor(log10_years)
        mantissa = 10 ** (log10_years - exponent)
        return f"{mantissa:.2f}e+{exponent} years"
    if seconds < minute:
        return f"{seconds:.2f} seconds"
    if seconds < hour:
        return f"{seconds / minute:.2f} minutes"
    if seconds < day:
        return f"{seconds / hour:.2f} hours"
    if seconds < year:
        return f"{seconds / day:.2f} days"
    if seconds < 1e3 * year:
        return f"{seconds / year:.2f} years"
    if seconds < 1e6 * year:
        return f"{seconds / (1e3 * year):.2f}k years"
    if seconds < 1e9 * year:
        return f"{seconds / (1e6 * year):.2f}M years"
    if seconds < 1e12 * year:
        return f"{seconds / (1e9 * year):.2f}B years"
    return f"{seconds / year:.2e} years"


def format_rate(per_second: float, unit: str = "txns/s") -> str:
    """Format an event rate with G/M prefixes."""
    if per_second >= 1e9:
        return f"{per_second / 1e9:.2f} G {unit}"
    if per_second >= 1e6:
        return f"{per_second / 1e6:.1f} M {unit}"
    return f"{per_second:.0f} {unit}"
