# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/hwcalc/calc/fifo_depth.py

"""FIFO depth for a write burst crossing into a slower or faster read clock.

While a burst of B words is written at f_write, the reader drains at f_read.
If the writer is faster, the words still queued at the end of the burst are

    B - B * f_read / f_write  ~=  B * (f_write - f_read) / f_read

and the FIFO must hold the burst plus that backlog plus the read latency:

    depth = ceil(B + B * (f_write - f_read) / f_read + latency)

If the reader is at least as fast, depth = B + latency. The result is
reported as is and rounded up to a power of two, after the optional margin.
"""

from __future__ import annotations

import logging
from math import ceil
from typing import Literal, cast

from pydantic import NonNegativeInt, PositiveInt, field_validator

from hwcalc.calc.calc_base import (
    CalcBaseModel,
    CalcBaseParams,
    CalcBaseResults,
    CalcSolver,
)
from hwcalc.calc.calc_utils import MegaHertz, apply_margin
from hwcalc.calc.report import Row
from hwcalc.utils import red, round_value

logger = logging.getLogger(__name__)


class FifoDepthModel(CalcBaseModel):
    """FIFO depth configuration model for YAML specification validation.

    Attributes:
        f_write: Write clock in MHz (accepts unit strings like '100 MHz').
        f_read: Read clock in MHz.
        burst: Burst length in words.
        latency: Read side latency in read cycles.
        margin_type: How margin_val is applied to the minimum depth.
        margin_val: Margin in percent or words.
        rounding: Rounding applied to the reported depth.
    """

    f_write: MegaHertz
    f_read: MegaHertz
    burst: PositiveInt
    latency: NonNegativeInt = 0
    margin_type: Literal["percentage", "absolute"] = "absolute"
    margin_val: NonNegativeInt = 0
    rounding: Literal["power2", "none"] = "none"

    @field_validator("f_write", "f_read")
    @classmethod
    def _check_positive_frequency(cls, v: float) -> float:
        """Ensure clock frequencies are positive to prevent division by zero."""
        if v <= 0:
            raise ValueError(f"Clock frequency must be positive, got {v}")
        return v


class FifoDepthParams(CalcBaseParams):
    """Runtime parameters for FIFO depth calculation."""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        *,
        f_write: float,
        f_read: float,
        burst: int,
        latency: int = 0,
        margin_type: Literal["percentage", "absolute"] = "absolute",
        margin_val: int = 0,
        rounding: Literal["power2", "none"] = "none",
    ) -> None:
        self.f_write = f_write
        self.f_read = f_read
        self.burst = burst
        self.latency = latency
        self.margin_type = margin_type
        self.margin_val = margin_val
        self.rounding = rounding

    @classmethod
    def from_model(cls, model: CalcBaseModel) -> "FifoDepthParams":
        """Create FifoDepthParams from a validated FifoDepthModel instance."""
        if not isinstance(model, FifoDepthModel):
            raise TypeError(f"Expected FifoDepthModel, got {type(model).__name__}")
        return cls(
            f_write=float(model.f_write),
            f_read=float(model.f_read),
            burst=int(model.burst),
            latency=int(model.latency),
            margin_type=model.margin_type,
            margin_val=int(model.margin_val),
            rounding=model.rounding,
        )

    def check(self) -> None:
        """Validate parameter constraints."""
        if self.f_write <= 0:
            raise ValueError(f"{self.f_write=}")
        if self.f_read <= 0:
            raise ValueError(f"{self.f_read=}")
        if self.burst <= 0:
            raise ValueError(f"{self.burst=}")
        if self.latency < 0:
            raise ValueError(f"{self.latency=}")
        if self.margin_val < 0:
            raise ValueError(f"{self.margin_val=}")

    def export_rows(self) -> list[Row]:
        return [
            ("Write Clock", f"{self.f_write:g} MHz"),
            ("Read Clock", f"{self.f_read:g} MHz"),
            ("Burst Length", f"{self.burst} words"),
            ("Read Latency", f"{self.latency} cycles"),
        ]


class FifoDepthResults(CalcBaseResults):
    """Results from FIFO depth calculation.

    Attributes:
        min_depth: Burst plus backlog plus latency, rounded up.
        backlog: Words left over at the end of the burst.
        depth: min_depth after margin and rounding.
        pow2_depth: depth rounded up to a power of two.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        *,
        basic_checks_pass: bool = False,
        msg: str = "",
        min_depth: int,
        backlog: float,
        depth: int,
        pow2_depth: int,
    ) -> None:
        super().__init__(basic_checks_pass=basic_checks_pass, msg=msg)
        self.min_depth = min_depth
        self.backlog = backlog
        self.depth = depth
        self.pow2_depth = pow2_depth

    def check(self, burst: int) -> None:
        """Validate that depths are ordered and hold at least one burst."""
        self.basic_checks_pass = True
        if self.min_depth < burst:
            self.basic_checks_pass = False
            logger.error(red("Internal error: min_depth < burst"))
        if not self.min_depth <= self.depth <= self.pow2_depth:
            self.basic_checks_pass = False
            logger.error(red("Internal error: depths out of order"))
        if self.pow2_depth & (self.pow2_depth - 1):
            self.basic_checks_pass = False
            logger.error(red("Internal error: pow2_depth is not a power of two"))

    def export_rows(self) -> list[Row]:
        return [
            ("Minimum Depth", str(self.min_depth)),
            ("Depth with Margin", str(self.depth)),
            ("Power of 2", str(self.pow2_depth)),
        ]


class FifoDepthSolver(CalcSolver):
    """Burst FIFO depth solver."""

    calc_type = "fifo"
    title = "FIFO Depth Calculator"

    def __init__(self) -> None:
        super().__init__()
        self.model_class = FifoDepthModel
        self.params_class = FifoDepthParams

    def get_results(self) -> None:
        """Closed-form depth for one burst."""
        assert self.params is not None, "Must call get_params() first"
        params = cast(FifoDepthParams, self.params)

        backlog = 0.0
        if params.f_write > params.f_read:
            backlog = params.burst * (params.f_write - params.f_read) / params.f_read
        min_depth = int(ceil(params.burst + backlog + params.latency))

        depth = apply_margin(min_depth, params.margin_type, params.margin_val)
        depth = round_value(depth, params.rounding)

        self.results = FifoDepthResults(
            msg="Analytic results.",
            min_depth=min_depth,
            backlog=backlog,
            depth=depth,
            pow2_depth=round_value(depth, "power2"),
        )
        self.results_check_args = {"burst": params.burst}
