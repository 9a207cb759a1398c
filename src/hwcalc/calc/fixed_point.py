# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/hwcalc/calc/fixed_point.py

"""Fixed-point format sizing.

Given a value range and a required resolution, pick the integer and
fraction widths:

    int_bits  = ceil(log2(max(|min|, |max|) + 1)) (+1 sign bit if signed)
    frac_bits = ceil(-log2(precision))

The format is reported in Q notation, SQ(i-1).f for signed values and
UQi.f for unsigned ones, with its exact representable range and LSB.
"""

from __future__ import annotations

import logging
import math
from typing import cast

from pydantic import model_validator

from hwcalc.calc.calc_base import (
    CalcBaseModel,
    CalcBaseParams,
    CalcBaseResults,
    CalcSolver,
)
from hwcalc.calc.calc_utils import format_number
from hwcalc.calc.report import Row
from hwcalc.utils import red

logger = logging.getLogger(__name__)


class FixedPointModel(CalcBaseModel):
    """Fixed-point sizing model.

    Attributes:
        min: Smallest value to represent.
        max: Largest value to represent.
        precision: Required resolution (largest acceptable LSB).
        signed: Two's complement if True.
    """

    min: float
    max: float
    precision: float
    signed: bool = True

    @model_validator(mode="after")
    def _check_range(self) -> "FixedPointModel":
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        if self.precision <= 0:
            raise ValueError(f"precision must be positive, got {self.precision}")
        if not self.signed and self.min < 0:
            raise ValueError(f"Unsigned format cannot hold negative min {self.min}")
        return self


class FixedPointParams(CalcBaseParams):
    """Runtime parameters for fixed-point sizing."""

    def __init__(
        self,
        *,
        min_value: float,
        max_value: float,
        precision: float,
        signed: bool = True,
    ) -> None:
        self.min_value = min_value
        self.max_value = max_value
        self.precision = precision
        self.signed = signed

    @classmethod
    def from_model(cls, model: CalcBaseModel) -> "FixedPointParams":
        """Create FixedPointParams from a validated FixedPointModel instance."""
        if not isinstance(model, FixedPointModel):
            raise TypeError(f"Expected FixedPointModel, got {type(model).__name__}")
        return cls(
            min_value=float(model.min),
            max_value=float(model.max),
            precision=float(model.precision),
            signed=bool(model.signed),
        )

    def check(self) -> None:
        """Validate parameter constraints."""
        if self.min_value > self.max_value:
            raise ValueError(f"{self.min_value=}, {self.max_value=}")
        if self.precision <= 0:
            raise ValueError(f"{self.precision=}")
        if not self.signed and self.min_value < 0:
            raise ValueError(f"{self.signed=}, {self.min_value=}")

    def export_rows(self) -> list[Row]:
        return [
            ("Min Value", format_number(self.min_value)),
            ("Max Value", format_number(self.max_value)),
            ("Required Precision", format_number(self.precision)),
            ("Signed", "Yes" if self.signed else "No"),
        ]


class FixedPointResults(CalcBaseResults):  # pylint: disable=too-many-instance-attributes
    """Results from fixed-point sizing.

    Attributes:
        int_bits: Integer bits, including the sign bit when signed.
        frac_bits: Fraction bits (negative when the LSB weight exceeds 1).
        total_bits: int_bits + frac_bits.
        q_notation: Q format string.
        actual_min: Smallest representable value.
        actual_max: Largest representable value.
        actual_precision: LSB weight.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        *,
        basic_checks_pass: bool = False,
        msg: str = "",
        int_bits: int,
        frac_bits: int,
        signed: bool,
    ) -> None:
        super().__init__(basic_checks_pass=basic_checks_pass, msg=msg)
        self.int_bits = int_bits
        self.frac_bits = frac_bits
        self.total_bits = int_bits + frac_bits
        self.actual_precision = 2.0**-frac_bits
        if signed:
            self.q_notation = f"SQ{int_bits - 1}.{frac_bits}"
            self.actual_min = -(2.0 ** (int_bits - 1))
            self.actual_max = 2.0 ** (int_bits - 1) - self.actual_precision
        else:
            self.q_notation = f"UQ{int_bits}.{frac_bits}"
            self.actual_min = 0.0
            self.actual_max = 2.0**int_bits - self.actual_precision

    def check(self, min_value: float, max_value: float, precision: float) -> None:
        """Validate that the format covers the range at the required precision."""
        self.basic_checks_pass = True
        if self.actual_precision > precision:
            self.basic_checks_pass = False
            logger.error(red("Internal error: LSB coarser than precision"))
        # The top of the range may fall short by up to one LSB
        top = self.actual_max + self.actual_precision
        if self.actual_min > min_value or top < max_value:
            self.basic_checks_pass = False
            logger.error(red("Internal error: range not covered"))

    def export_rows(self) -> list[Row]:
        return [
            ("Integer Bits", str(self.int_bits)),
            ("Fractional Bits", str(self.frac_bits)),
            ("Total Width", f"{self.total_bits} bits"),
            ("Q Notation", self.q_notation),
            (
                "Actual Range",
                f"[{format_number(self.actual_min)}, {format_number(self.actual_max)}]",
            ),
            ("Actual Precision", format_number(self.actual_precision)),
        ]


def integer_bits(max_abs: float, signed: bool) -> int:
    """Return the integer width for magnitudes up to max_abs."""
    bits = math.ceil(math.log2(max_abs + 1)) if max_abs > 0 else 0
    if signed:
        bits += 1
    return max(bits, 1)


def fraction_bits(precision: float) -> int:
    """Return the fraction width for an LSB no larger than precision."""
    return math.ceil(-math.log2(precision))


class FixedPointSolver(CalcSolver):
    """Fixed-point width solver."""

    calc_type = "fixedpoint"
    title = "Fixed-Point Calculator"

    def __init__(self) -> None:
        super().__init__()
        self.model_class = FixedPointModel
        self.params_class = FixedPointParams

    def get_results(self) -> None:
        """Closed-form widths."""
        assert self.params is not None, "Must call get_params() first"
        params = cast(FixedPointParams, self.params)

        max_abs = max(abs(params.min_value), abs(params.max_value))
        self.results = FixedPointResults(
            msg="Analytic results.",
            int_bits=integer_bits(max_abs, params.signed),
            frac_bits=fraction_bits(params.precision),
            signed=params.signed,
        )
        self.results_check_args = {
            "min_value": params.min_value,
            "max_value": params.max_value,
            "precision": params.precision,
        }
