# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/hwcalc/calc/cdc_mtbf.py

"""Mean time between failures of a multi-flop clock domain synchronizer.

Each synchronizer stage gets one sampling period minus the flop setup time
and the routing delay to resolve metastability:

    t_resolve = (1 / f_sample - t_setup - t_routing) * stages

    MTBF = exp(t_resolve / tau) / (f_data * f_sample * t_window)

tau and t_window are properties of the flop (see the device presets). The
exponent reaches the thousands for slow clocks, far beyond what a float can
hold, so the MTBF is computed as log10 first and only converted to seconds
when it fits.

Recommendation thresholds: 1000 years or more is acceptable, 1 year or more
suggests one more stage, anything less needs more stages.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import cast

from pydantic import PositiveInt, field_validator

from hwcalc.calc.calc_base import (
    CalcBaseModel,
    CalcBaseParams,
    CalcBaseResults,
    CalcSolver,
)
from hwcalc.calc.calc_utils import (
    SECONDS_PER_YEAR,
    MegaHertz,
    Nanoseconds,
    Picoseconds,
    format_duration,
)
from hwcalc.calc.report import Row
from hwcalc.utils import PlotLine, red, yellow

logger = logging.getLogger(__name__)

TARGET_YEARS = 1000.0
# Largest stage count considered when searching for the minimum
MAX_STAGES = 10


class CdcMtbfModel(CalcBaseModel):
    """CDC MTBF configuration model for YAML specification validation.

    Attributes:
        f_data: Toggle rate of the crossing signal in MHz.
        f_sample: Destination (sampling) clock in MHz.
        t_window: Metastability capture window in ps.
        tau: Metastability resolution time constant in ps.
        stages: Number of synchronizer flops.
        t_setup: Flop setup time in ns.
        t_routing: Routing delay between stages in ns.
    """

    f_data: MegaHertz
    f_sample: MegaHertz
    t_window: Picoseconds
    tau: Picoseconds
    stages: PositiveInt = 2
    t_setup: Nanoseconds = 0.0
    t_routing: Nanoseconds = 0.0

    @field_validator("f_data", "f_sample", "t_window", "tau")
    @classmethod
    def _check_positive(cls, v: float) -> float:
        """Ensure rates and device constants are positive."""
        if v <= 0:
            raise ValueError(f"Value must be positive, got {v}")
        return v


class CdcMtbfParams(CalcBaseParams):  # pylint: disable=too-many-instance-attributes
    """Runtime parameters for CDC MTBF calculation, in MHz, ps and ns."""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        *,
        f_data: float,
        f_sample: float,
        t_window: float,
        tau: float,
        stages: int = 2,
        t_setup: float = 0.0,
        t_routing: float = 0.0,
    ) -> None:
        self.f_data = f_data
        self.f_sample = f_sample
        self.t_window = t_window
        self.tau = tau
        self.stages = stages
        self.t_setup = t_setup
        self.t_routing = t_routing

    @classmethod
    def from_model(cls, model: CalcBaseModel) -> "CdcMtbfParams":
        """Create CdcMtbfParams from a validated CdcMtbfModel instance."""
        if not isinstance(model, CdcMtbfModel):
            raise TypeError(f"Expected CdcMtbfModel, got {type(model).__name__}")
        return cls(
            f_data=float(model.f_data),
            f_sample=float(model.f_sample),
            t_window=float(model.t_window),
            tau=float(model.tau),
            stages=int(model.stages),
            t_setup=float(model.t_setup),
            t_routing=float(model.t_routing),
        )

    @property
    def t_stage_ns(self) -> float:
        """Resolution time available per stage in ns."""
        return 1000.0 / self.f_sample - self.t_setup - self.t_routing

    def check(self) -> None:
        """Validate parameter constraints."""
        for name in ("f_data", "f_sample", "t_window", "tau"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name}={getattr(self, name)}")
        if self.stages <= 0:
            raise ValueError(f"{self.stages=}")
        if self.t_stage_ns <= 0:
            logger.warning(
                yellow(
                    f"Setup plus routing ({self.t_setup + self.t_routing:g} ns) "
                    f"leaves no resolution time at {self.f_sample:g} MHz"
                )
            )

    def export_rows(self) -> list[Row]:
        return [
            ("Data Clock", f"{self.f_data:g} MHz"),
            ("Sampling Clock", f"{self.f_sample:g} MHz"),
            ("Metastability Window", f"{self.t_window:g} ps"),
            ("Time Constant (tau)", f"{self.tau:g} ps"),
            ("Sync Stages", str(self.stages)),
            ("Setup Time", f"{self.t_setup:g} ns"),
            ("Routing Delay", f"{self.t_routing:g} ns"),
        ]


def log10_mtbf_seconds(params: CdcMtbfParams, stages: int) -> float:
    """Return log10 of the MTBF in seconds for `stages` flops."""
    t_resolve_ps = params.t_stage_ns * 1000.0 * stages
    exponent = t_resolve_ps / params.tau
    # MHz * MHz * ps = 1e6 * 1e6 * 1e-12 = 1 per second
    rate = params.f_data * params.f_sample * params.t_window
    return exponent / math.log(10) - math.log10(rate)


def recommend(stages: int, mtbf_years: float) -> str:
    """Return the stage recommendation for an MTBF in years."""
    if mtbf_years >= TARGET_YEARS:
        return f"{stages} stages OK"
    if mtbf_years >= 1:
        return f"Consider {stages + 1} stages"
    return "Add more stages!"


class CdcMtbfResults(CalcBaseResults):  # pylint: disable=too-many-instance-attributes
    """Results from CDC MTBF calculation.

    Attributes:
        t_resolve_ns: Total resolution time over all stages.
        mtbf_log10_s: log10 of the MTBF in seconds.
        mtbf_seconds: MTBF in seconds, inf when it does not fit in a float.
        mtbf_years: MTBF in years, inf when it does not fit in a float.
        mtbf_text: Human readable MTBF.
        recommendation: Stage count advice.
        min_stages: Fewest stages reaching 1000 years, 0 if none in the sweep.
        sweep: log10 MTBF in years for 1..max(MAX_STAGES, stages) stages.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        *,
        basic_checks_pass: bool = False,
        msg: str = "",
        t_resolve_ns: float,
        mtbf_log10_s: float,
        min_stages: int,
        stages: int,
        sweep: list[float],
    ) -> None:
        super().__init__(basic_checks_pass=basic_checks_pass, msg=msg)
        self.t_resolve_ns = t_resolve_ns
        self.mtbf_log10_s = mtbf_log10_s
        self.mtbf_seconds = _from_log10(mtbf_log10_s)
        self.mtbf_years = _from_log10(mtbf_log10_s - math.log10(SECONDS_PER_YEAR))
        self.mtbf_text = format_duration(self.mtbf_seconds, mtbf_log10_s)
        self.recommendation = recommend(stages, self.mtbf_years)
        self.min_stages = min_stages
        self.sweep = sweep

    def check(self) -> None:
        """Validate that MTBF grows with every added stage."""
        self.basic_checks_pass = True
        increasing = all(b > a for a, b in zip(self.sweep, self.sweep[1:]))
        if self.t_resolve_ns > 0 and not increasing:
            self.basic_checks_pass = False
            logger.error(red("Internal error: MTBF does not grow with more stages"))

    def export_rows(self) -> list[Row]:
        return [
            ("Resolution Time", f"{self.t_resolve_ns:.2f} ns"),
            ("MTBF", self.mtbf_text),
            ("Recommendation", self.recommendation),
        ]

    def save_plot(self, outdir: Path, name: str) -> None:
        """Generate and save a plot of log10 MTBF versus stage count."""
        xs = list(range(1, len(self.sweep) + 1))
        p = PlotLine(outdir)
        p.add_line(xs, self.sweep, label="MTBF", marker="o")
        p.add_threshold(math.log10(TARGET_YEARS), label=f"{TARGET_YEARS:g} years")
        p.set_labels("Synchronizer stages", "log10(MTBF / years)", "CDC MTBF")
        p.format()
        p.save(f"{name}_plot")

    def save(self, outdir: Path, name: str) -> None:
        """Save scalars and the stage sweep plot."""
        super().save(outdir, name)
        self.save_plot(outdir, name)


def _from_log10(value: float) -> float:
    """Return 10**value, or inf when it overflows."""
    try:
        return 10.0**value
    except OverflowError:
        return math.inf


class CdcMtbfSolver(CalcSolver):
    """Synchronizer MTBF solver."""

    calc_type = "cdc"
    title = "CDC MTBF Calculator"

    def __init__(self) -> None:
        super().__init__()
        self.model_class = CdcMtbfModel
        self.params_class = CdcMtbfParams

    def get_results(self) -> None:
        """Evaluate MTBF for the requested stages and sweep stage counts."""
        assert self.params is not None, "Must call get_params() first"
        params = cast(CdcMtbfParams, self.params)

        log10_year = math.log10(SECONDS_PER_YEAR)
        stage_counts = range(1, max(MAX_STAGES, params.stages) + 1)
        sweep = [log10_mtbf_seconds(params, n) - log10_year for n in stage_counts]
        min_stages = next(
            (n for n, v in zip(stage_counts, sweep) if v >= math.log10(TARGET_YEARS)),
            0,
        )

        self.results = CdcMtbfResults(
            msg="Analytic results.",
            t_resolve_ns=params.t_stage_ns * params.stages,
            mtbf_log10_s=log10_mtbf_seconds(params, params.stages),
            min_stages=min_stages,
            stages=params.stages,
            sweep=sweep,
        )
