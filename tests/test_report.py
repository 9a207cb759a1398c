# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/test_report.py

"""Tests for markdown export and search advice."""

from __future__ import annotations

from hwcalc import __version__
from hwcalc.calc.divider_search import Band, search
from hwcalc.calc.divider_tables import SERDES_FAMILIES
from hwcalc.calc.report import (
    BELOW_MINIMUM_ADVICE,
    TROUBLESHOOTING,
    advice_for,
    format_results,
    format_search,
    format_table,
)


def test_no_advice_on_success():
    gth = SERDES_FAMILIES["gth-us+"]
    assert advice_for(search(10.3125, 156.25, gth), gth) == []


def test_above_maximum_advice():
    gtx = SERDES_FAMILIES["gtx"]
    lines = advice_for(search(20.0, 156.25, gtx), gtx)
    assert lines[0] == (
        "20 Gbps is above maximum for GTX (7-Series). Valid range: 0.5-12.5 Gbps."
    )
    assert lines[1].startswith("Try GTH")
    assert lines[-1] == "Suggested device: gth-us+"


def test_below_minimum_generic_advice():
    gty = SERDES_FAMILIES["gty"]
    lines = advice_for(search(0.1, 156.25, gty), gty)
    assert "below minimum" in lines[0]
    assert BELOW_MINIMUM_ADVICE in lines
    gtm = SERDES_FAMILIES["gtm"]
    lines = advice_for(search(5.0, 156.25, gtm), gtm)
    assert lines[1] == "GTM starts at 9.8 Gbps. Use GTY for lower line rates."


def test_no_configuration_advice(single_path_family):
    family = single_path_family(refclk_range=Band(60.0, 800.0))
    lines = advice_for(search(9.0, 900.0, family), family)
    assert lines[0] == "No valid configuration found for 9 Gbps."
    assert lines[1].startswith("RefClk 900 MHz outside PLL")
    assert lines[-len(TROUBLESHOOTING):] == [
        f"{i}. {step}" for i, step in enumerate(TROUBLESHOOTING, start=1)
    ]


def test_invalid_input_advice():
    gtx = SERDES_FAMILIES["gtx"]
    lines = advice_for(search(10.0, 0.0, gtx), gtx)
    assert lines == ["Enter a positive reference clock (MHz), got 0.0."]


def test_format_table():
    text = format_table(["A", "B"], [["1", "2"], ["3", "4"]])
    assert text == "| A | B |\n| --- | --- |\n| 1 | 2 |\n| 3 | 4 |\n"


def test_format_results():
    text = format_results("Calc", [("In", "1")], [("Out", "2")])
    assert text.startswith("## Calc\n\n- **In:** 1\n\n### Results\n\n- **Out:** 2\n")
    assert f"Generated by hwcalc {__version__}" in text


def test_format_search_table():
    gth = SERDES_FAMILIES["gth-us+"]
    result = search(10.3125, 156.25, gth)
    text = format_search("SerDes", [("Line Rate", "10.3125 Gbps")], result, gth)
    header = "| PLL | N | M | OUT_DIV | VCO (GHz) | Output (Gbps) | Error (ppm) |"
    assert header in text
    assert "| QPLL0 | 66 | 1 | 1 | 10.3125 | 10.3125 | exact |" in text
    assert f"Showing {len(result.candidates)} of {result.total_found}" in text


def test_format_search_failure():
    gtx = SERDES_FAMILIES["gtx"]
    text = format_search("SerDes", [], search(20.0, 156.25, gtx), gtx)
    assert "| PLL |" not in text
    assert "Suggested device: gth-us+" in text
