# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/test_pll_config.py

"""Tests for the PLL/MMCM solver."""

from __future__ import annotations

from typing import cast

import pytest

from hwcalc.calc.calc_base import DividerResults
from hwcalc.calc.pll_config import PllConfigParams, PllConfigSolver, get_pll_family


def _solve(spec: dict) -> tuple[PllConfigSolver, DividerResults]:
    solver = PllConfigSolver()
    results = cast(DividerResults, solver.solve(spec))
    return solver, results


def test_defaults():
    _, results = _solve({})
    assert results.basic_checks_pass
    assert results.failure_reason == ""
    assert results.exact
    assert results.best_output == 150.0
    assert results.best_error_ppm == 0.0
    assert results.shown == 15
    assert results.total_found >= 29
    assert results.device_id == "custom"


def test_preset_family_is_reused():
    _, results = _solve({"preset": "xilinx-7series-mmcm", "f_out": 125})
    assert results.device_id == "xilinx-7series-mmcm"
    assert results.exact


def test_modified_preset_builds_custom_family():
    solver, results = _solve({"preset": "xilinx-7series-mmcm", "vco_max": 1000})
    params = cast(PllConfigParams, solver.params)
    family = get_pll_family(params)
    assert results.device_id == "custom"
    assert family.name == "Xilinx 7-Series MMCM (modified)"
    assert results.family is not None
    assert results.family.topologies[0].vco_bands[0].high == 1000


def test_unit_strings():
    _, results = _solve({"f_in": "0.1 GHz", "f_out": "150 MHz"})
    assert results.best_output == pytest.approx(150.0)


def test_invalid_target_is_reported_not_raised():
    _, results = _solve({"f_out": 0})
    assert results.failure_reason == "invalid_target"
    assert results.shown == 0
    assert results.advice
    assert results.basic_checks_pass


@pytest.mark.parametrize(
    "spec, reason",
    [
        ({"f_in": 100, "f_out": "abc"}, "invalid_target"),
        ({"f_in": "abc", "f_out": 150}, "invalid_reference_clock"),
        ({"f_in": 100, "f_out": "5 ns"}, "invalid_target"),
    ],
)
def test_non_numeric_input_is_reported_not_raised(spec, reason):
    solver, results = _solve(spec)
    assert results.failure_reason == reason
    assert results.shown == 0
    assert results.advice
    assert results.basic_checks_pass
    assert solver.get_export().startswith("## PLL/MMCM Configuration")


def test_unreachable_target_gives_troubleshooting():
    _, results = _solve({"f_out": 5000})
    assert results.failure_reason == "no_configuration_found"
    assert any(line.startswith("1. ") for line in results.advice)


@pytest.mark.parametrize(
    "spec",
    [
        {"vco_min": 1200, "vco_max": 600},
        {"m_max": 1},
        {"d_max": 0},
        {"unknown": 1},
        {"preset": "no-such-pll"},
    ],
)
def test_bad_spec(spec):
    with pytest.raises(ValueError):
        _solve(spec)


def test_export():
    solver, _ = _solve({})
    text = solver.get_export()
    assert text.startswith("## PLL/MMCM Configuration")
    assert "| PLL | M | D | O | VCO (MHz) | Output (MHz) | Error (ppm) |" in text
    assert "| PLL M/D/O | 6 | 1 | 4 | 600.0000 | 150 | exact |" in text
    assert "Showing 15 of" in text
    assert solver.get_link().startswith("?calc=pll&")
