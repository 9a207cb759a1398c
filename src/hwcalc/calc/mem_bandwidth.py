# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/hwcalc/calc/mem_bandwidth.py

"""DDR memory bandwidth efficiency estimate.

Peak bandwidth is data_rate * bus_width / 8 (MT/s * bits -> MB/s). The
sustained fraction of it is estimated with an empirical linear model:

    raw = BASE
          - (1 - page_hit) * PAGE_MISS_COEFF
          - 2 * rd * (1 - rd) * TURNAROUND_COEFF
          - tRFC / tREFI
          + generation bonus + rank bonus
    efficiency = clamp(raw * controller factor, 0.15, 0.95)

``2 * rd * (1 - rd)`` is the probability that two consecutive accesses
switch direction when a fraction rd of them are reads. The coefficients are
taken as given constants and are not derived here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal, Mapping, NamedTuple, cast

from pydantic import Field, PositiveFloat, PositiveInt, model_validator

from hwcalc.calc.calc_base import (
    CalcBaseModel,
    CalcBaseParams,
    CalcBaseResults,
    CalcSolver,
)
from hwcalc.calc.calc_utils import format_rate
from hwcalc.calc.report import Row
from hwcalc.utils import red, yellow

logger = logging.getLogger(__name__)

DdrGen = Literal["ddr3", "ddr4", "ddr5", "lpddr4", "lpddr5"]
Controller = Literal["fpga_basic", "fpga_optimized", "desktop", "server"]


@dataclass(frozen=True)
class DdrSpec:  # pylint: disable=too-many-instance-attributes
    """JEDEC-typical characteristics of one DRAM generation (times in ns)."""

    name: str
    burst_lengths: tuple[int, ...]
    default_burst_len: int
    t_rfc: float
    t_refi: float
    t_rcd: float
    t_rp: float
    data_rates: tuple[int, ...]


DDR_SPECS: Mapping[str, DdrSpec] = MappingProxyType(
    {
        "ddr3": DdrSpec(
            name="DDR3",
            burst_lengths=(4, 8),
            default_burst_len=8,
            t_rfc=260,
            t_refi=7800,
            t_rcd=13.75,
            t_rp=13.75,
            data_rates=(800, 1066, 1333, 1600, 1866, 2133),
        ),
        "ddr4": DdrSpec(
            name="DDR4",
            burst_lengths=(4, 8),
            default_burst_len=8,
            t_rfc=350,
            t_refi=7800,
            t_rcd=13.75,
            t_rp=13.75,
            data_rates=(1600, 1866, 2133, 2400, 2666, 2933, 3200),
        ),
        "ddr5": DdrSpec(
            name="DDR5",
            burst_lengths=(8, 16),
            default_burst_len=16,
            t_rfc=295,
            t_refi=3900,
            t_rcd=14.16,
            t_rp=14.16,
            data_rates=tuple(range(4000, 8801, 400)),
        ),
        "lpddr4": DdrSpec(
            name="LPDDR4",
            burst_lengths=(16, 32),
            default_burst_len=16,
            t_rfc=210,
            t_refi=3900,
            t_rcd=18,
            t_rp=18,
            data_rates=(1600, 2133, 3200, 3733, 4266),
        ),
        "lpddr5": DdrSpec(
            name="LPDDR5",
            burst_lengths=(16, 32),
            default_burst_len=16,
            t_rfc=210,
            t_refi=3900,
            t_rcd=18,
            t_rp=18,
            data_rates=(4267, 5500, 6400, 7500, 8533),
        ),
    }
)

BASE_EFFICIENCY = 0.88
PAGE_MISS_COEFF = 0.30
TURNAROUND_COEFF = 0.16
RANK_BONUS = 0.02
MIN_EFFICIENCY = 0.15
MAX_EFFICIENCY = 0.95

CONTROLLER_FACTORS: Mapping[str, float] = MappingProxyType(
    {"fpga_basic": 0.85, "fpga_optimized": 0.92, "desktop": 0.94, "server": 0.97}
)
GENERATION_BONUS: Mapping[str, float] = MappingProxyType(
    {"ddr3": 0.0, "ddr4": 0.0, "ddr5": 0.03, "lpddr4": -0.02, "lpddr5": 0.01}
)

# Largest loss -> (title, suggestions)
TIPS: Mapping[str, tuple[str, tuple[str, ...]]] = MappingProxyType(
    {
        "Page Miss Penalty": (
            "Improve Page Hit Rate",
            (
                "Use sequential access patterns where possible",
                "Increase burst sizes to read more data per row activation",
                "Reorganize data structures for better locality",
                "Use memory prefetching to hide row activation latency",
                "Consider tiling/blocking algorithms for matrix operations",
            ),
        ),
        "R/W Turnaround Penalty": (
            "Reduce Read/Write Turnaround",
            (
                "Batch reads together, then batch writes",
                "Use write-combining buffers to coalesce writes",
                "Double-buffer: read from one buffer while writing another",
                "For FPGA: separate read and write AXI ports if supported",
            ),
        ),
        "Refresh Overhead": (
            "Refresh Overhead (Limited Control)",
            (
                "Refresh is inherent to DRAM and cannot be eliminated",
                "DDR5 same-bank refresh helps but still has overhead",
                "Check whether the application is bandwidth or latency limited",
                "For FPGA: some controllers schedule refresh opportunistically",
            ),
        ),
        "Controller Quality": (
            "Upgrade Controller Quality",
            (
                "FPGA: enable command reordering in the memory controller",
                "FPGA: configure multiple bank machines (8 for DDR4)",
                "FPGA: use bank-aware address mapping",
                "FPGA: consider IP cores with better scheduling",
            ),
        ),
    }
)


class BreakdownItem(NamedTuple):
    """One line of the efficiency breakdown, value in percent."""

    factor: str
    value: float
    note: str
    subtotal: bool = False


def rate_efficiency(efficiency: float) -> str:
    """Return a one-line rating of an efficiency fraction."""
    if efficiency >= 0.80:
        return "Excellent efficiency, close to streaming-optimized workloads."
    if efficiency >= 0.65:
        return "Good efficiency, typical for well-optimized mixed workloads."
    if efficiency >= 0.50:
        return "Moderate efficiency, review the largest losses."
    return "Low efficiency, significant optimization potential exists."


class MemBandwidthModel(CalcBaseModel):
    """Memory bandwidth configuration model.

    Attributes:
        ddr_gen: DRAM generation.
        data_rate: Transfer rate in MT/s.
        bus_width: Data bus width in bits.
        ranks: Number of ranks.
        burst_len: Burst length, defaults to the generation default.
        page_hit: Row buffer hit rate in percent.
        rw_ratio: Share of reads in percent.
        controller: Controller quality class.
        t_rfc: Refresh cycle time in ns, defaults to the generation typical.
        t_refi: Refresh interval in ns, defaults to the generation value.
    """

    ddr_gen: DdrGen = "ddr4"
    data_rate: PositiveFloat
    bus_width: PositiveInt
    ranks: PositiveInt = 1
    burst_len: PositiveInt | None = None
    page_hit: float = Field(ge=0, le=100)
    rw_ratio: float = Field(ge=0, le=100)
    controller: Controller = "desktop"
    t_rfc: PositiveFloat | None = None
    t_refi: PositiveFloat | None = None

    @model_validator(mode="after")
    def _fill_generation_defaults(self) -> "MemBandwidthModel":
        spec = DDR_SPECS[self.ddr_gen]
        if self.burst_len is None:
            self.burst_len = spec.default_burst_len
        if self.t_rfc is None:
            self.t_rfc = spec.t_rfc
        if self.t_refi is None:
            self.t_refi = spec.t_refi
        return self


class MemBandwidthParams(CalcBaseParams):  # pylint: disable=too-many-instance-attributes
    """Runtime parameters for the bandwidth estimate, ratios as fractions."""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        *,
        ddr_gen: str,
        data_rate: float,
        bus_width: int,
        ranks: int,
        burst_len: int,
        page_hit: float,
        rw_ratio: float,
        controller: str,
        t_rfc: float,
        t_refi: float,
    ) -> None:
        self.ddr_gen = ddr_gen
        self.data_rate = data_rate
        self.bus_width = bus_width
        self.ranks = ranks
        self.burst_len = burst_len
        self.page_hit = page_hit
        self.rw_ratio = rw_ratio
        self.controller = controller
        self.t_rfc = t_rfc
        self.t_refi = t_refi

    @classmethod
    def from_model(cls, model: CalcBaseModel) -> "MemBandwidthParams":
        """Create MemBandwidthParams from a validated MemBandwidthModel instance."""
        if not isinstance(model, MemBandwidthModel):
            raise TypeError(f"Expected MemBandwidthModel, got {type(model).__name__}")
        assert model.burst_len is not None
        assert model.t_rfc is not None and model.t_refi is not None
        return cls(
            ddr_gen=model.ddr_gen,
            data_rate=float(model.data_rate),
            bus_width=int(model.bus_width),
            ranks=int(model.ranks),
            burst_len=int(model.burst_len),
            page_hit=model.page_hit / 100,
            rw_ratio=model.rw_ratio / 100,
            controller=model.controller,
            t_rfc=float(model.t_rfc),
            t_refi=float(model.t_refi),
        )

    def check(self) -> None:
        """Validate parameter constraints and warn on unusual settings."""
        if self.ddr_gen not in DDR_SPECS:
            raise ValueError(f"{self.ddr_gen=}")
        if self.controller not in CONTROLLER_FACTORS:
            raise ValueError(f"{self.controller=}")
        if not 0 <= self.page_hit <= 1:
            raise ValueError(f"{self.page_hit=}")
        if not 0 <= self.rw_ratio <= 1:
            raise ValueError(f"{self.rw_ratio=}")
        for w in self.warnings():
            logger.warning(yellow(w))

    def warnings(self) -> list[str]:
        """Return advisory messages about unusual but legal inputs."""
        spec = DDR_SPECS[self.ddr_gen]
        result = []
        lo, hi = min(spec.data_rates), max(spec.data_rates)
        if self.data_rate < lo * 0.8 or self.data_rate > hi * 1.2:
            result.append(
                f"Data rate {self.data_rate:g} MT/s is unusual for {spec.name}. "
                f"Expected {lo}-{hi} MT/s."
            )
        if self.burst_len not in spec.burst_lengths:
            result.append(
                f"Burst length {self.burst_len} is not native to {spec.name} "
                f"({', '.join(map(str, spec.burst_lengths))})."
            )
        return result

    def export_rows(self) -> list[Row]:
        return [
            ("Memory", DDR_SPECS[self.ddr_gen].name),
            ("Data Rate", f"{self.data_rate:g} MT/s"),
            ("Bus Width", f"{self.bus_width} bits"),
            ("Ranks", str(self.ranks)),
            ("Burst Length", str(self.burst_len)),
            ("Page Hit Rate", f"{self.page_hit * 100:g}%"),
            ("Read Ratio", f"{self.rw_ratio * 100:g}%"),
            ("Controller", self.controller),
            ("tRFC / tREFI", f"{self.t_rfc:g} / {self.t_refi:g} ns"),
        ]


class MemBandwidthResults(CalcBaseResults):  # pylint: disable=too-many-instance-attributes
    """Results from the bandwidth estimate.

    Attributes:
        peak_gbps: Theoretical bandwidth in GB/s.
        efficiency: Sustained fraction of peak after clamping.
        raw_efficiency: Efficiency before the controller factor.
        effective_gbps: peak_gbps * efficiency.
        data_per_burst: Bytes moved per burst.
        burst_time_ns: Duration of one burst on the bus.
        peak_txns: Bursts per second at peak bandwidth.
        effective_txns: Bursts per second at effective bandwidth.
        bottleneck: Largest loss factor, empty if there is none.
        rating: One-line efficiency rating.
        breakdown: Contribution of every factor in percent.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        *,
        basic_checks_pass: bool = False,
        msg: str = "",
        peak_gbps: float,
        efficiency: float,
        raw_efficiency: float,
        data_per_burst: float,
        burst_time_ns: float,
        breakdown: list[BreakdownItem],
    ) -> None:
        super().__init__(basic_checks_pass=basic_checks_pass, msg=msg)
        self.peak_gbps = peak_gbps
        self.efficiency = efficiency
        self.raw_efficiency = raw_efficiency
        self.effective_gbps = peak_gbps * efficiency
        self.data_per_burst = data_per_burst
        self.burst_time_ns = burst_time_ns
        self.peak_txns = peak_gbps * 1e9 / data_per_burst
        self.effective_txns = self.effective_gbps * 1e9 / data_per_burst
        self.breakdown = breakdown
        losses = [b for b in breakdown if b.value < 0 and not b.subtotal]
        self.bottleneck = min(losses, key=lambda b: b.value).factor if losses else ""
        self.rating = rate_efficiency(efficiency)

    def check(self) -> None:
        """Validate the clamp and the bandwidth ordering."""
        self.basic_checks_pass = True
        if not MIN_EFFICIENCY <= self.efficiency <= MAX_EFFICIENCY:
            self.basic_checks_pass = False
            logger.error(red("Internal error: efficiency outside clamp"))
        if self.effective_gbps > self.peak_gbps:
            self.basic_checks_pass = False
            logger.error(red("Internal error: effective exceeds peak"))

    @property
    def tips(self) -> tuple[str, tuple[str, ...]] | None:
        """Return the suggestions for the largest loss, if any."""
        return TIPS.get(self.bottleneck)

    def export_rows(self) -> list[Row]:
        rows = [
            ("Peak Bandwidth", f"{self.peak_gbps:.2f} GB/s"),
            (
                "Effective Bandwidth",
                f"{self.effective_gbps:.2f} GB/s "
                f"({self.efficiency * 100:.1f}% efficiency)",
            ),
            ("Data per Burst", f"{self.data_per_burst:g} bytes"),
            ("Burst Time", f"{self.burst_time_ns:.2f} ns"),
            ("Peak Transactions", format_rate(self.peak_txns)),
            ("Effective Transactions", format_rate(self.effective_txns)),
        ]
        for item in self.breakdown:
            rows.append((item.factor, f"{item.value:+.1f}% ({item.note})"))
        rows.append(("Rating", self.rating))
        if self.tips:
            title, suggestions = self.tips
            rows.append((title, "; ".join(suggestions)))
        return rows


class MemBandwidthSolver(CalcSolver):
    """DDR bandwidth efficiency solver."""

    calc_type = "membw"
    title = "Memory Bandwidth Calculator"

    def __init__(self) -> None:
        super().__init__()
        self.model_class = MemBandwidthModel
        self.params_class = MemBandwidthParams

    def get_results(self) -> None:
        """Evaluate the efficiency model."""
        assert self.params is not None, "Must call get_params() first"
        p = cast(MemBandwidthParams, self.params)

        peak = p.data_rate * p.bus_width / 8 / 1000
        page_miss = (1 - p.page_hit) * PAGE_MISS_COEFF
        turnaround_rate = 2 * p.rw_ratio * (1 - p.rw_ratio)
        turnaround = turnaround_rate * TURNAROUND_COEFF
        refresh = p.t_rfc / p.t_refi
        generation = GENERATION_BONUS[p.ddr_gen]
        rank = RANK_BONUS if p.ranks > 1 else 0.0
        factor = CONTROLLER_FACTORS[p.controller]

        raw = BASE_EFFICIENCY - page_miss - turnaround - refresh + generation + rank
        efficiency = min(max(raw * factor, MIN_EFFICIENCY), MAX_EFFICIENCY)

        breakdown = [
            BreakdownItem(
                "Base Efficiency", BASE_EFFICIENCY * 100, "empirical baseline"
            ),
            BreakdownItem(
                "Page Miss Penalty",
                -page_miss * 100,
                f"{(1 - p.page_hit) * 100:.0f}% misses",
            ),
            BreakdownItem(
                "R/W Turnaround Penalty",
                -turnaround * 100,
                f"{turnaround_rate * 100:.1f}% transitions",
            ),
            BreakdownItem(
                "Refresh Overhead",
                -refresh * 100,
                f"tRFC={p.t_rfc:g}ns / tREFI={p.t_refi:g}ns",
            ),
            BreakdownItem(
                "DDR Generation", generation * 100, DDR_SPECS[p.ddr_gen].name
            ),
        ]
        if p.ranks > 1:
            breakdown.append(
                BreakdownItem("Rank Interleaving", rank * 100, f"{p.ranks} ranks")
            )
        breakdown.append(
            BreakdownItem("Raw Efficiency", raw * 100, "before controller", True)
        )
        breakdown.append(
            BreakdownItem(
                "Controller Quality",
                (factor - 1) * raw * 100,
                f"{p.controller} (x{factor:.2f})",
            )
        )

        self.results = MemBandwidthResults(
            msg="Empirical model.",
            peak_gbps=peak,
            efficiency=efficiency,
            raw_efficiency=raw,
            data_per_burst=p.burst_len * p.bus_width / 8,
            burst_time_ns=p.burst_len * 1000 / p.data_rate,
            breakdown=breakdown,
        )
