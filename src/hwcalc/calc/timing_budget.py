# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/hwcalc/calc/timing_budget.py

"""Register-to-register timing budget.

    period    = 1000 / freq                            (ns, freq in MHz)
    available = period - t_setup - t_uncert - t_clkq
    levels    = floor(available / t_lut)

A non-positive budget means negative slack and zero logic levels.
"""

from __future__ import annotations

import logging
from math import floor
from typing import cast

from pydantic import field_validator

from hwcalc.calc.calc_base import (
    CalcBaseModel,
    CalcBaseParams,
    CalcBaseResults,
    CalcSolver,
)
from hwcalc.calc.calc_utils import MegaHertz, Nanoseconds
from hwcalc.calc.report import Row
from hwcalc.utils import red, yellow

logger = logging.getLogger(__name__)


class TimingBudgetModel(CalcBaseModel):
    """Timing budget configuration model.

    Attributes:
        freq: Clock frequency in MHz.
        t_setup: Capture flop setup time in ns.
        t_uncert: Clock uncertainty (jitter plus skew) in ns.
        t_clkq: Launch flop clock-to-Q in ns.
        t_lut: Delay of one logic level including routing in ns.
    """

    freq: MegaHertz
    t_setup: Nanoseconds = 0.0
    t_uncert: Nanoseconds = 0.0
    t_clkq: Nanoseconds = 0.0
    t_lut: Nanoseconds = 0.0

    @field_validator("freq")
    @classmethod
    def _check_positive_frequency(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Clock frequency must be positive, got {v}")
        return v


class TimingBudgetParams(CalcBaseParams):
    """Runtime parameters for the timing budget, in MHz and ns."""

    def __init__(
        self,
        *,
        freq: float,
        t_setup: float = 0.0,
        t_uncert: float = 0.0,
        t_clkq: float = 0.0,
        t_lut: float = 0.0,
    ) -> None:
        self.freq = freq
        self.t_setup = t_setup
        self.t_uncert = t_uncert
        self.t_clkq = t_clkq
        self.t_lut = t_lut

    @classmethod
    def from_model(cls, model: CalcBaseModel) -> "TimingBudgetParams":
        """Create TimingBudgetParams from a validated TimingBudgetModel instance."""
        if not isinstance(model, TimingBudgetModel):
            raise TypeError(f"Expected TimingBudgetModel, got {type(model).__name__}")
        return cls(
            freq=float(model.freq),
            t_setup=float(model.t_setup),
            t_uncert=float(model.t_uncert),
            t_clkq=float(model.t_clkq),
            t_lut=float(model.t_lut),
        )

    def check(self) -> None:
        """Validate parameter constraints."""
        if self.freq <= 0:
            raise ValueError(f"{self.freq=}")
        for name in ("t_setup", "t_uncert", "t_clkq", "t_lut"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name}={getattr(self, name)}")

    def export_rows(self) -> list[Row]:
        return [
            ("Clock Frequency", f"{self.freq:g} MHz"),
            ("Setup Time", f"{self.t_setup:g} ns"),
            ("Clock Uncertainty", f"{self.t_uncert:g} ns"),
            ("Clock-to-Q", f"{self.t_clkq:g} ns"),
            ("LUT Delay", f"{self.t_lut:g} ns"),
        ]


class TimingBudgetResults(CalcBaseResults):
    """Results from the timing budget.

    Attributes:
        period_ns: Clock period.
        available_ns: Time left for logic after flop overheads.
        negative_slack: True if nothing is left for logic.
        levels: Estimated logic levels, -1 if t_lut is zero.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        *,
        basic_checks_pass: bool = False,
        msg: str = "",
        period_ns: float,
        available_ns: float,
        negative_slack: bool,
        levels: int,
    ) -> None:
        super().__init__(basic_checks_pass=basic_checks_pass, msg=msg)
        self.period_ns = period_ns
        self.available_ns = available_ns
        self.negative_slack = negative_slack
        self.levels = levels

    def check(self, t_lut: float) -> None:
        """Validate that the estimated levels fit in the available time."""
        self.basic_checks_pass = True
        if self.levels > 0 and self.levels * t_lut > self.available_ns + 1e-9:
            self.basic_checks_pass = False
            logger.error(red("Internal error: levels exceed available time"))

    def export_rows(self) -> list[Row]:
        if self.negative_slack:
            available = "Negative slack"
        else:
            available = f"{self.available_ns:.3f} ns"
        levels = "--" if self.levels < 0 else f"~{self.levels} levels"
        return [
            ("Clock Period", f"{self.period_ns:.3f} ns"),
            ("Available for Logic", available),
            ("Est. Logic Levels", levels),
        ]


class TimingBudgetSolver(CalcSolver):
    """Timing budget solver."""

    calc_type = "timing"
    title = "Timing Budget Calculator"

    def __init__(self) -> None:
        super().__init__()
        self.model_class = TimingBudgetModel
        self.params_class = TimingBudgetParams

    def get_results(self) -> None:
        """Closed-form timing budget."""
        assert self.params is not None, "Must call get_params() first"
        params = cast(TimingBudgetParams, self.params)

        period = 1000.0 / params.freq
        available = period - params.t_setup - params.t_uncert - params.t_clkq
        negative_slack = available <= 0
        if negative_slack:
            levels = 0
            logger.warning(yellow(f"Negative slack at {params.freq:g} MHz"))
        elif params.t_lut > 0:
            levels = floor(available / params.t_lut)
        else:
            levels = -1

        self.results = TimingBudgetResults(
            msg="Analytic results.",
            period_ns=period,
            available_ns=available,
            negative_slack=negative_slack,
            levels=levels,
        )
        self.results_check_args = {"t_lut": params.t_lut}
