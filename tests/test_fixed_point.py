# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/test_fixed_point.py

"""Tests for the fixed-point sizing solver."""

from __future__ import annotations

from typing import cast

import pytest

from hwcalc.calc.fixed_point import (
    FixedPointResults,
    FixedPointSolver,
    fraction_bits,
    integer_bits,
)


def _solve(spec: dict) -> FixedPointResults:
    return cast(FixedPointResults, FixedPointSolver().solve(spec))


def test_signed_defaults():
    results = _solve({})
    assert results.int_bits == 5
    assert results.frac_bits == 10
    assert results.total_bits == 15
    assert results.q_notation == "SQ4.10"
    assert results.actual_min == -16.0
    assert results.actual_max == 15.9990234375
    assert results.actual_precision == 0.0009765625
    assert results.basic_checks_pass


def test_unsigned_byte():
    results = _solve({"min": 0, "max": 255, "precision": 1, "signed": False})
    assert results.q_notation == "UQ8.0"
    assert results.actual_min == 0.0
    assert results.actual_max == 255.0
    assert results.basic_checks_pass


def test_coarse_precision():
    results = _solve({"min": 0, "max": 1000, "precision": 4, "signed": False})
    assert results.frac_bits == -2
    assert results.actual_precision == 4.0
    assert results.basic_checks_pass


def test_width_helpers():
    assert integer_bits(0.0, signed=False) == 1
    assert integer_bits(0.0, signed=True) == 1
    assert integer_bits(1.0, signed=True) == 2
    assert fraction_bits(0.5) == 1
    assert fraction_bits(0.3) == 2


@pytest.mark.parametrize(
    "spec",
    [
        {"min": 5, "max": 1},
        {"precision": 0},
        {"min": -1, "max": 1, "signed": False},
    ],
)
def test_bad_spec(spec):
    with pytest.raises(ValueError):
        _solve(spec)
