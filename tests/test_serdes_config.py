# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/test_serdes_config.py

"""Tests for the SerDes transceiver solver."""

from __future__ import annotations

from typing import cast

import pytest

from hwcalc.calc.calc_base import DividerResults
from hwcalc.calc.serdes_config import SELECT_DEVICE, SerdesConfigSolver


def _solve(spec: dict) -> tuple[SerdesConfigSolver, DividerResults]:
    solver = SerdesConfigSolver()
    results = cast(DividerResults, solver.solve(spec))
    return solver, results


def test_10g_ethernet_on_gth():
    _, results = _solve({"device": "gth-us+"})
    assert results.basic_checks_pass
    assert results.device_id == "gth-us+"
    assert results.best_output == 10.3125
    assert results.exact
    assert 0 < results.shown <= 10
    assert results.search is not None
    assert results.search.candidates[0].topology == "QPLL0"


def test_no_device_prompts_for_selection():
    solver, results = _solve({})
    assert results.msg == SELECT_DEVICE
    assert results.search is None
    assert results.total_found == 0
    assert results.basic_checks_pass
    assert SELECT_DEVICE in solver.get_export()


def test_refclk_unit_string():
    _, results = _solve({"device": "gtx", "refclk": "156.25 MHz", "line_rate": 12.5})
    assert results.exact
    assert results.best_output == pytest.approx(12.5)


def test_rate_above_device_maximum():
    solver, results = _solve({"device": "gtx", "line_rate": 20})
    assert results.failure_reason == "target_above_maximum"
    assert "Suggested device: gth-us+" in results.advice
    assert any("Valid range: 0.5-12.5 Gbps" in line for line in results.advice)
    text = solver.get_export()
    assert "above maximum" in text
    assert "Try GTH" in text


def test_refclk_warning_in_export():
    solver, results = _solve({"device": "gtx", "refclk": 700, "line_rate": 5.6})
    assert any("QPLL" in w and "40-670" in w for w in results.warnings)
    assert "> RefClk 700 MHz outside QPLL" in solver.get_export()


@pytest.mark.parametrize(
    "spec, reason",
    [
        ({"device": "gtx", "refclk": "abc"}, "invalid_reference_clock"),
        ({"device": "gtx", "line_rate": "fast"}, "invalid_target"),
        ({"device": "gtx", "line_rate": None}, "invalid_target"),
    ],
)
def test_non_numeric_input_is_reported_not_raised(spec, reason):
    solver, results = _solve(spec)
    assert results.failure_reason == reason
    assert results.shown == 0
    assert results.advice
    assert results.basic_checks_pass
    assert "Enter a positive" in solver.get_export()


def test_unknown_device():
    with pytest.raises(ValueError):
        _solve({"device": "gtz"})
