# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/test_timing_budget.py

"""Tests for the timing budget solver."""

from __future__ import annotations

from typing import cast

import pytest

from hwcalc.calc.timing_budget import TimingBudgetResults, TimingBudgetSolver


def _solve(spec: dict) -> TimingBudgetResults:
    return cast(TimingBudgetResults, TimingBudgetSolver().solve(spec))


def test_defaults():
    results = _solve({})
    assert results.period_ns == pytest.approx(5.0)
    assert results.available_ns == pytest.approx(4.65)
    assert not results.negative_slack
    assert results.levels == 46
    assert results.basic_checks_pass


def test_negative_slack():
    results = _solve({"freq": "5 GHz"})
    assert results.period_ns == pytest.approx(0.2)
    assert results.negative_slack
    assert results.levels == 0
    assert ("Available for Logic", "Negative slack") in results.export_rows()


def test_preset():
    results = _solve({"preset": "xilinx-ultrascale+"})
    assert results.available_ns == pytest.approx(4.775)
    assert results.levels == 73


def test_zero_lut_delay():
    results = _solve({"t_lut": 0})
    assert results.levels == -1
    assert ("Est. Logic Levels", "--") in results.export_rows()


@pytest.mark.parametrize("spec", [{"freq": 0}, {"t_setup": -0.1}, {"preset": "asic"}])
def test_bad_spec(spec):
    with pytest.raises(ValueError):
        _solve(spec)
