# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/hwcalc/calc/serdes_config.py

"""SerDes transceiver PLL configuration search.

Finds the PLL type and divider settings of a transceiver that produce a
requested line rate from a reference clock. The device tables are in
``divider_tables``; the search is ``divider_search.search``.
"""

from __future__ import annotations

import logging
from typing import cast

from pydantic import field_validator

from hwcalc.calc.calc_base import (
    CalcBaseModel,
    CalcBaseParams,
    CalcSolver,
    DividerResults,
)
from hwcalc.calc.calc_utils import SearchMegaHertz, SearchNumber
from hwcalc.calc.divider_search import search
from hwcalc.calc.divider_tables import SERDES_FAMILIES, get_serdes_family
from hwcalc.calc.report import Row, format_results, format_search
from hwcalc.utils import yellow

logger = logging.getLogger(__name__)

SELECT_DEVICE = "Select a transceiver type to search"


class SerdesConfigModel(CalcBaseModel):
    """SerDes search configuration model.

    Attributes:
        line_rate: Target line rate in Gbps.
        refclk: Reference clock in MHz (accepts unit strings like '156.25 MHz').
        device: Transceiver family id, None when not selected yet.
    """

    line_rate: SearchNumber
    refclk: SearchMegaHertz
    device: str | None = None

    @field_validator("device")
    @classmethod
    def _check_device(cls, v: str | None) -> str | None:
        if v is not None and v not in SERDES_FAMILIES:
            raise ValueError(
                f"Unknown device {v!r}, expected one of {sorted(SERDES_FAMILIES)}"
            )
        return v


class SerdesConfigParams(CalcBaseParams):
    """Runtime parameters for the SerDes search."""

    def __init__(
        self,
        *,
        line_rate: float,
        refclk: float,
        device: str | None = None,
    ) -> None:
        self.line_rate = line_rate
        self.refclk = refclk
        self.device = device

    @classmethod
    def from_model(cls, model: CalcBaseModel) -> "SerdesConfigParams":
        """Create SerdesConfigParams from a validated SerdesConfigModel instance."""
        if not isinstance(model, SerdesConfigModel):
            raise TypeError(f"Expected SerdesConfigModel, got {type(model).__name__}")
        return cls(
            line_rate=float(model.line_rate),
            refclk=float(model.refclk),
            device=model.device,
        )

    def export_rows(self) -> list[Row]:
        device = "--"
        if self.device is not None:
            device = SERDES_FAMILIES[self.device].name
        return [
            ("Transceiver", device),
            ("Line Rate", f"{self.line_rate:g} Gbps"),
            ("Reference Clock", f"{self.refclk:g} MHz"),
        ]


class SerdesConfigSolver(CalcSolver):
    """Transceiver PLL solver."""

    calc_type = "serdes"
    title = "SerDes PLL Configuration"

    def __init__(self) -> None:
        super().__init__()
        self.model_class = SerdesConfigModel
        self.params_class = SerdesConfigParams

    def get_results(self) -> None:
        """Search the selected transceiver, or report that none is selected."""
        assert self.params is not None, "Must call get_params() first"
        params = cast(SerdesConfigParams, self.params)

        if params.device is None:
            logger.warning(yellow(SELECT_DEVICE))
            self.results = DividerResults(msg=SELECT_DEVICE, search=None, family=None)
            return

        family = get_serdes_family(params.device)
        result = search(params.line_rate, params.refclk, family)
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
        if results.search is None or results.family is None:
            return format_results(
                self.title, self.params.export_rows(), [("Status", SELECT_DEVICE)]
            )
        return format_search(
            self.title, self.params.export_rows(), results.search, results.family
        )
