# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/hwcalc/calc/pll_config.py

"""PLL/MMCM M/D/O configuration search.

    f_vco = f_in * M / D        f_out = f_vco / O

The limits come from a device preset or from the spec. Candidates within 1%
of the target are ranked by ppm error. The phase detector frequency f_in / D
is flagged, not filtered, when it leaves the usual 10-450 MHz window.
"""

from __future__ import annotations

import logging
from typing import cast

from pydantic import PositiveInt, model_validator

from hwcalc.calc.calc_base import (
    CalcBaseModel,
    CalcBaseParams,
    CalcSolver,
    DividerResults,
)
from hwcalc.calc.calc_utils import MegaHertz, SearchMegaHertz
from hwcalc.calc.divider_search import DeviceFamily, search
from hwcalc.calc.divider_tables import PLL_FAMILIES, make_pll_family
from hwcalc.calc.presets import PLL_PRESETS
from hwcalc.calc.report import Row, format_search

logger = logging.getLogger(__name__)


class PllConfigModel(CalcBaseModel):
    """PLL search configuration model.

    Attributes:
        f_in: Input clock in MHz.
        f_out: Target output clock in MHz.
        vco_min: Lowest VCO frequency in MHz.
        vco_max: Highest VCO frequency in MHz.
        m_max: Largest feedback multiplier M (M starts at 2).
        d_max: Largest input divider D.
        o_max: Largest output divider O.
    """

    f_in: SearchMegaHertz
    f_out: SearchMegaHertz
    vco_min: MegaHertz
    vco_max: MegaHertz
    m_max: PositiveInt = 64
    d_max: PositiveInt = 10
    o_max: PositiveInt = 128

    @model_validator(mode="after")
    def _check_limits(self) -> "PllConfigModel":
        if not 0 < self.vco_min <= self.vco_max:
            raise ValueError(
                f"Need 0 < vco_min <= vco_max, got {self.vco_min}, {self.vco_max}"
            )
        if self.m_max < 2:
            raise ValueError(f"m_max must be at least 2, got {self.m_max}")
        return self


class PllConfigParams(CalcBaseParams):  # pylint: disable=too-many-instance-attributes
    """Runtime parameters for the PLL search, frequencies in MHz."""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        *,
        f_in: float,
        f_out: float,
        vco_min: float,
        vco_max: float,
        m_max: int,
        d_max: int,
        o_max: int,
        preset: str | None = None,
    ) -> None:
        self.f_in = f_in
        self.f_out = f_out
        self.vco_min = vco_min
        self.vco_max = vco_max
        self.m_max = m_max
        self.d_max = d_max
        self.o_max = o_max
        self.preset = preset

    @classmethod
    def from_model(cls, model: CalcBaseModel) -> "PllConfigParams":
        """Create PllConfigParams from a validated PllConfigModel instance."""
        if not isinstance(model, PllConfigModel):
            raise TypeError(f"Expected PllConfigModel, got {type(model).__name__}")
        return cls(
            f_in=float(model.f_in),
            f_out=float(model.f_out),
            vco_min=float(model.vco_min),
            vco_max=float(model.vco_max),
            m_max=int(model.m_max),
            d_max=int(model.d_max),
            o_max=int(model.o_max),
            preset=model.preset,
        )

    @property
    def limits(self) -> tuple[float, float, int, int, int]:
        """Return (vco_min, vco_max, m_max, d_max, o_max)."""
        return (self.vco_min, self.vco_max, self.m_max, self.d_max, self.o_max)

    def check(self) -> None:
        """Validate the search limits. Bad frequencies are reported by the search."""
        if not 0 < self.vco_min <= self.vco_max:
            raise ValueError(f"{self.vco_min=}, {self.vco_max=}")
        if self.m_max < 2:
            raise ValueError(f"{self.m_max=}")
        if self.d_max < 1:
            raise ValueError(f"{self.d_max=}")
        if self.o_max < 1:
            raise ValueError(f"{self.o_max=}")

    def export_rows(self) -> list[Row]:
        return [
            ("Input", f"{self.f_in:g} MHz"),
            ("Target", f"{self.f_out:g} MHz"),
            ("VCO Range", f"{self.vco_min:g}-{self.vco_max:g} MHz"),
            ("M / D / O max", f"{self.m_max} / {self.d_max} / {self.o_max}"),
        ]


def family_limits(family: DeviceFamily) -> tuple[float, float, int, int, int]:
    """Return (vco_min, vco_max, m_max, d_max, o_max) of a generic PLL family."""
    topology = family.topologies[0]
    band = topology.vco_bands[0]
    return (
        band.low,
        band.high,
        topology.multipliers[-1],
        topology.divisors[-1],
        topology.output_dividers[-1],
    )


def get_pll_family(params: PllConfigParams) -> DeviceFamily:
    """Return the preset family when its limits are unchanged, else a custom one."""
    family = PLL_FAMILIES.get(params.preset or "")
    if family is not None and family_limits(family) == params.limits:
        return family
    name = "Custom PLL"
    if params.preset in PLL_PRESETS:
        name = f"{PLL_PRESETS[params.preset]['name']} (modified)"
    return make_pll_family(
        name=name,
        vco_min=params.vco_min,
        vco_max=params.vco_max,
        m_max=params.m_max,
        d_max=params.d_max,
        o_max=params.o_max,
    )


class PllConfigSolver(CalcSolver):
    """PLL/MMCM divider solver."""

    calc_type = "pll"
    title = "PLL/MMCM Configuration"

    def __init__(self) -> None:
        super().__init__()
        self.model_class = PllConfigModel
        self.params_class = PllConfigParams

    def get_results(self) -> None:
        """Search M/D/O for the target output."""
        assert self.params is not None, "Must call get_params() first"
        params = cast(PllConfigParams, self.params)

        family = get_pll_family(params)
        result = search(params.f_out, params.f_in, family)
        self.results = DividerResults(
            msg=f"Showing {len(result.candidates)} of {result.total_found}",
            search=result,
            family=family,
        )
        cast(DividerResults, self.results).log_advice()

    def get_export(self) -> str:
        """Return the candidate table as a markdown document."""
        assert self.params is not None, "Must call get_params() first"
        results = cast(DividerResults, self.results)
        assert results.search is not None and results.family is not None
        return format_search(
            self.title, self.params.export_rows(), results.search, results.family
        )
