# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/hwcalc/calc/divider_search.py

"""Bounded divider search shared by the PLL and SerDes calculators.

A device family exposes one or more topologies. Each topology is a fixed
frequency-synthesis path described only by data:

    vco    = refclk * multiplier / (divisor * unit_divisor)
    output = vco * scale_factor / output_divider

``unit_divisor`` converts the reference clock (always MHz) into the VCO unit
(1 for MHz VCOs, 1000 for GHz VCOs). ``scale_factor`` is 1 for single-rate
outputs, 2 for double-data-rate line rates and 4 for PAM4 over DDR.

``search`` enumerates every multiplier/divisor pair of every topology, keeps
the VCO frequencies inside the topology bands, enumerates the output
dividers, keeps the outputs inside the declared output ranges and ranks the
survivors by ppm error against the target. Candidates with equal error are
ordered by topology declaration order, then multiplier, divisor and output
divider, so identical requests always give identical results.

Every failure is reported in the returned ``SearchResult``; nothing is
raised at query time. Inconsistent topology data raises
``ConfigurationTableError`` when the ``Topology`` or ``DeviceFamily`` is
constructed, which for the static tables means at import time.
"""

from __future__ import annotations

import logging
import math
from bisect import bisect_left, bisect_right
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Sequence

logger = logging.getLogger(__name__)

EXACT_PPM = 0.1
MAX_RESULTS = 10


class ConfigurationTableError(ValueError):
    """Raised when a static topology or device entry is inconsistent."""


class FailureReason(str, Enum):
    """Why a search produced no candidates."""

    INVALID_TARGET = "invalid_target"
    INVALID_REFERENCE_CLOCK = "invalid_reference_clock"
    TARGET_BELOW_MINIMUM = "target_below_minimum"
    TARGET_ABOVE_MAXIMUM = "target_above_maximum"
    NO_CONFIGURATION_FOUND = "no_configuration_found"

    @property
    def category(self) -> str:
        """Return the failure class this reason belongs to."""
        if self in (
            FailureReason.INVALID_TARGET,
            FailureReason.INVALID_REFERENCE_CLOCK,
        ):
            return "InvalidInput"
        if self in (
            FailureReason.TARGET_BELOW_MINIMUM,
            FailureReason.TARGET_ABOVE_MAXIMUM,
        ):
            return "TargetOutOfDeviceRange"
        return "NoConfigurationFound"


@dataclass(frozen=True)
class Band:
    """Inclusive frequency interval."""

    low: float
    high: float

    def __contains__(self, value: object) -> bool:
        if not isinstance(value, (int, float)):
            return False
        return self.low <= value <= self.high

    def __str__(self) -> str:
        return f"{self.low:g}-{self.high:g}"

    def check(self, what: str) -> None:
        """Raise ConfigurationTableError unless 0 < low <= high."""
        if not (math.isfinite(self.low) and math.isfinite(self.high)):
            raise ConfigurationTableError(f"{what}: non-finite bound {self}")
        if self.low <= 0 or self.low > self.high:
            raise ConfigurationTableError(f"{what}: invalid band {self}")


def _check_values(what: str, values: Sequence[int]) -> None:
    """Value sets must be non-empty, positive and strictly increasing."""
    if len(values) == 0:
        raise ConfigurationTableError(f"{what}: empty value set")
    prev = 0
    for v in values:
        if not isinstance(v, int) or v <= prev:
            raise ConfigurationTableError(
                f"{what}: values must be increasing positive integers, got {v!r}"
            )
        prev = v


@dataclass(frozen=True)
class Topology:  # pylint: disable=too-many-instance-attributes
    """One divider/multiplier path of a device.

    Attributes:
        name: Display name, unique within the device family.
        multipliers: Feedback multiplier values.
        divisors: Reference divider values.
        output_dividers: Output divider values.
        vco_bands: Valid VCO intervals, in the VCO unit.
        scale_factor: Output multiplier applied to the VCO.
        refclk_range: Valid reference clock input in MHz, None if unconstrained.
        output_range: Output sub-range of this path, None to use the device range.
        pfd_range: Recommended phase detector range in MHz. Advisory only.
        max_error_ppm: Candidates with larger error are dropped, None keeps all.
        param_names: Display names for (multiplier, divisor, output_divider).
    """

    name: str
    multipliers: Sequence[int]
    divisors: Sequence[int]
    output_dividers: Sequence[int]
    vco_bands: tuple[Band, ...]
    scale_factor: int = 1
    refclk_range: Band | None = None
    output_range: Band | None = None
    pfd_range: Band | None = None
    max_error_ppm: float | None = None
    param_names: tuple[str, str, str] = ("M", "D", "O")

    def __post_init__(self) -> None:
        _check_values(f"{self.name}.multipliers", self.multipliers)
        _check_values(f"{self.name}.divisors", self.divisors)
        _check_values(f"{self.name}.output_dividers", self.output_dividers)
        if not self.vco_bands:
            raise ConfigurationTableError(f"{self.name}: no VCO band")
        for band in self.vco_bands:
            band.check(f"{self.name}.vco_bands")
        for what, band in (
            ("refclk_range", self.refclk_range),
            ("output_range", self.output_range),
            ("pfd_range", self.pfd_range),
        ):
            if band is not None:
                band.check(f"{self.name}.{what}")
        if not isinstance(self.scale_factor, int) or self.scale_factor <= 0:
            raise ConfigurationTableError(f"{self.name}: {self.scale_factor=}")
        if self.max_error_ppm is not None and self.max_error_ppm <= 0:
            raise ConfigurationTableError(f"{self.name}: {self.max_error_ppm=}")

    def vco_ok(self, vco: float) -> bool:
        """Return True if vco lies in any of the VCO bands."""
        return any(vco in band for band in self.vco_bands)

    def output_dividers_for(self, vco: float, target: float) -> Sequence[int]:
        """Return the output dividers worth evaluating for this vco.

        With an error ceiling only dividers that can land within the ceiling
        are returned. The divider set is sorted, so this is a slice.
        """
        if self.max_error_ppm is None:
            return self.output_dividers
        tol = self.max_error_ppm / 1e6
        lo = vco * self.scale_factor / (target * (1 + tol))
        i = bisect_left(self.output_dividers, math.floor(lo))
        if tol >= 1:
            return self.output_dividers[i:]
        hi = vco * self.scale_factor / (target * (1 - tol))
        j = bisect_right(self.output_dividers, math.ceil(hi))
        return self.output_dividers[i:j]


@dataclass(frozen=True)
class DeviceFamily:  # pylint: disable=too-many-instance-attributes
    """A selectable device: its topologies and absolute output bounds."""

    device_id: str
    name: str
    topologies: tuple[Topology, ...]
    output_range: Band | None = None
    unit: str = "MHz"
    unit_divisor: int = 1
    max_results: int = MAX_RESULTS
    suggest_below: str | None = None
    suggest_above: str | None = None

    def __post_init__(self) -> None:
        if not self.topologies:
            raise ConfigurationTableError(f"{self.device_id}: no topologies")
        names = [t.name for t in self.topologies]
        if len(set(names)) != len(names):
            raise ConfigurationTableError(f"{self.device_id}: duplicate {names=}")
        if self.output_range is not None:
            self.output_range.check(f"{self.device_id}.output_range")
        if self.unit_divisor <= 0:
            raise ConfigurationTableError(f"{self.device_id}: {self.unit_divisor=}")
        if self.max_results <= 0:
            raise ConfigurationTableError(f"{self.device_id}: {self.max_results=}")


@dataclass(frozen=True)
class Candidate:  # pylint: disable=too-many-instance-attributes
    """One parameter assignment that satisfies every range constraint."""

    topology: str
    multiplier: int
    divisor: int
    output_divider: int
    vco: float
    output: float
    error_ppm: float
    pfd_ok: bool = True

    @property
    def exact(self) -> bool:
        """True if the error is below EXACT_PPM."""
        return self.error_ppm < EXACT_PPM

    def to_dict(self) -> dict[str, str | int | float | bool]:
        """Return a JSON friendly dictionary."""
        return {
            "topology": self.topology,
            "multiplier": self.multiplier,
            "divisor": self.divisor,
            "output_divider": self.output_divider,
            "vco": self.vco,
            "output": self.output,
            "error_ppm": self.error_ppm,
            "pfd_ok": self.pfd_ok,
            "exact": self.exact,
        }


@dataclass(frozen=True)
class RefclkWarning:
    """A topology skipped because the reference clock is outside its range."""

    topology: str
    refclk_mhz: float
    valid: Band

    def __str__(self) -> str:
        return (
            f"RefClk {self.refclk_mhz:g} MHz outside {self.topology} "
            f"input range ({self.valid} MHz)"
        )


@dataclass
class SearchResult:  # pylint: disable=too-many-instance-attributes
    """Ranked candidates plus everything needed to explain an empty result."""

    device_id: str
    target: float
    refclk_mhz: float
    candidates: list[Candidate] = field(default_factory=list)
    total_found: int = 0
    warnings: list[RefclkWarning] = field(default_factory=list)
    failure_reason: FailureReason | None = None
    valid_range: Band | None = None
    suggested_device: str | None = None

    @property
    def ok(self) -> bool:
        """True if at least one candidate was found."""
        return self.failure_reason is None

    def to_dict(self) -> dict:
        """Return a JSON friendly dictionary."""
        return {
            "device_id": self.device_id,
            "target": self.target,
            "refclk_mhz": self.refclk_mhz,
            "candidates": [c.to_dict() for c in self.candidates],
            "total_found": self.total_found,
            "warnings": [str(w) for w in self.warnings],
            "failure_reason": (
                self.failure_reason.value if self.failure_reason else None
            ),
            "valid_range": (
                [self.valid_range.low, self.valid_range.high]
                if self.valid_range
                else None
            ),
            "suggested_device": self.suggested_device,
        }


def _is_positive(value: float) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value) and value > 0


def _in_range(value: float, band: Band | None) -> bool:
    return band is None or value in band


def _enumerate(
    topology: Topology, family: DeviceFamily, target: float, refclk_mhz: float
) -> Iterator[Candidate]:
    """Yield every candidate of one topology."""
    for mult in topology.multipliers:
        for div in topology.divisors:
            vco = refclk_mhz * mult / (div * family.unit_divisor)
            if not topology.vco_ok(vco):
                continue
            pfd_ok = _in_range(refclk_mhz / div, topology.pfd_range)
            for outdiv in topology.output_dividers_for(vco, target):
                output = vco * topology.scale_factor / outdiv
                if not _in_range(output, topology.output_range):
                    continue
                if not _in_range(output, family.output_range):
                    continue
                error_ppm = abs(output - target) / target * 1e6
                ceiling = topology.max_error_ppm
                if ceiling is not None and error_ppm > ceiling:
                    continue
                yield Candidate(
                    topology=topology.name,
                    multiplier=mult,
                    divisor=div,
                    output_divider=outdiv,
                    vco=vco,
                    output=output,
                    error_ppm=error_ppm,
                    pfd_ok=pfd_ok,
                )


def search(target: float, refclk_mhz: float, family: DeviceFamily) -> SearchResult:
    """Find the divider settings of `family` closest to `target`.

    Args:
        target: Requested output, in the unit of the family (MHz or Gbps).
        refclk_mhz: Reference clock in MHz.
        family: Device family to search.

    Returns:
        SearchResult with at most ``family.max_results`` candidates, best first.
    """
    result = SearchResult(
        device_id=family.device_id, target=target, refclk_mhz=refclk_mhz
    )

    if not _is_positive(target):
        result.failure_reason = FailureReason.INVALID_TARGET
        return result
    if not _is_positive(refclk_mhz):
        result.failure_reason = FailureReason.INVALID_REFERENCE_CLOCK
        return result

    device_range = family.output_range
    if device_range is not None and target not in device_range:
        if target < device_range.low:
            result.failure_reason = FailureReason.TARGET_BELOW_MINIMUM
            result.suggested_device = family.suggest_below
        else:
            result.failure_reason = FailureReason.TARGET_ABOVE_MAXIMUM
            result.suggested_device = family.suggest_above
        result.valid_range = device_range
        logger.debug(
            "%s: target %g %s outside %s",
            family.device_id,
            target,
            family.unit,
            device_range,
        )
        return result

    order = {t.name: i for i, t in enumerate(family.topologies)}
    found: list[Candidate] = []
    for topology in family.topologies:
        if not _in_range(refclk_mhz, topology.refclk_range):
            result.warnings.append(
                RefclkWarning(topology.name, refclk_mhz, topology.refclk_range)
            )
            continue
        found.extend(_enumerate(topology, family, target, refclk_mhz))

    result.total_found = len(found)
    logger.debug("%s: %d candidates", family.device_id, len(found))
    if not found:
        result.failure_reason = FailureReason.NO_CONFIGURATION_FOUND
        return result

    found.sort(
        key=lambda c: (
            c.error_ppm,
            order[c.topology],
            c.multiplier,
            c.divisor,
            c.output_divider,
        )
    )
    result.candidates = found[: family.max_results]
    return result
