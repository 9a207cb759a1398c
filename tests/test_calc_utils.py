# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/test_calc_utils.py

"""Tests for unit parsing, query strings and formatting helpers."""

from __future__ import annotations

import math

import pytest

from hwcalc.calc.calc_utils import (
    apply_margin,
    format_duration,
    format_number,
    format_rate,
    get_args,
    is_query,
    parse_mhz,
    parse_ns,
    parse_number,
    parse_ps,
    spec_from_query,
    spec_to_query,
)
from hwcalc.calc.presets import resolve_spec


def test_parse_units():
    assert parse_mhz(156.25) == 156.25
    assert parse_mhz("156.25") == 156.25
    assert parse_mhz("1.1 GHz") == pytest.approx(1100.0)
    assert parse_mhz("156.25 MHz") == pytest.approx(156.25)
    assert parse_ns("100 ps") == pytest.approx(0.1)
    assert parse_ps("0.02 ns") == pytest.approx(20.0)


@pytest.mark.parametrize("value", ["5 ns", "xyz", True])
def test_parse_units_rejects(value):
    with pytest.raises(ValueError):
        parse_mhz(value)


def test_parse_number():
    assert parse_number(10.3125) == 10.3125
    assert parse_number("8") == 8.0
    for value in ("fast", None, False):
        with pytest.raises(ValueError):
            parse_number(value)


def test_query_decode():
    assert spec_from_query("?calc=pll&f_in=100&f_out=148.5") == {
        "calc_type": "pll",
        "f_in": 100,
        "f_out": 148.5,
    }
    spec = spec_from_query("?calc=serdes&refclk=156.25%20MHz&device=gth-us%2B")
    assert spec["refclk"] == "156.25 MHz"
    assert spec["device"] == "gth-us+"
    assert spec_from_query("calc=fixedpoint&signed=false")["signed"] is False


def test_query_encode():
    spec = {"line_rate": 10.3125, "device": "gty", "preset": None}
    query = spec_to_query("serdes", spec)
    assert query == "?calc=serdes&line_rate=10.3125&device=gty"
    assert spec_from_query(query)["line_rate"] == 10.3125
    query = spec_to_query("fixedpoint", {"signed": True})
    assert query == "?calc=fixedpoint&signed=true"


def test_query_errors():
    with pytest.raises(ValueError, match="Missing 'calc'"):
        spec_from_query("?f_in=100")
    with pytest.raises(ValueError):
        spec_from_query("?calc")


def test_is_query():
    assert is_query("?calc=pll")
    assert is_query("calc=pll")
    assert not is_query("examples/pll.yaml")


def test_get_args():
    args = get_args(["spec.yaml"])
    assert args.spec == "spec.yaml"
    assert args.outdir is None
    assert args.results_name == "results"
    assert args.verbosity == "info"
    args = get_args(["a.yaml", "b.yaml", "--verbosity", "debug"])
    assert args.spec == ["a.yaml", "b.yaml"]


def test_apply_margin():
    assert apply_margin(100, "percentage", 10) == 110
    assert apply_margin(101, "percentage", 10) == 112
    assert apply_margin(100, "absolute", 10) == 110


def test_format_duration():
    assert format_duration(30) == "30.00 seconds"
    assert format_duration(90) == "1.50 minutes"
    assert format_duration(5 * 3600) == "5.00 hours"
    assert format_duration(3 * 86400) == "3.00 days"
    assert format_duration(10 * 365.25 * 86400) == "10.00 years"
    assert format_duration(2e3 * 365.25 * 86400) == "2.00k years"
    assert format_duration(math.inf, 400.0).endswith("e+392 years")
    assert format_duration(math.inf) == "inf years"


def test_format_number_and_rate():
    assert format_number(0.5) == "0.5"
    assert format_number(25000) == "2.500e+04"
    assert format_number(0.0001) == "1.000e-04"
    assert format_number(0) == "0"
    assert format_rate(2.5e9) == "2.50 G txns/s"
    assert format_rate(4e8) == "400.0 M txns/s"
    assert format_rate(10) == "10 txns/s"


def test_resolve_spec_precedence():
    spec = resolve_spec("pll", {"preset": "xilinx-7series-pll", "vco_max": 1500})
    assert spec["vco_min"] == 800
    assert spec["vco_max"] == 1500
    assert spec["f_in"] == 100
    assert spec["preset"] == "xilinx-7series-pll"
    assert "name" not in spec


def test_resolve_spec_unknown_preset():
    with pytest.raises(ValueError, match="Unknown cdc preset"):
        resolve_spec("cdc", {"preset": "xilinx-9series"})
    with pytest.raises(ValueError):
        resolve_spec("fifo", {"preset": "anything"})
