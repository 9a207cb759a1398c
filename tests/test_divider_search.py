# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/test_divider_search.py

"""Tests for the bounded divider search."""

from __future__ import annotations

import math

import pytest

from hwcalc.calc.divider_search import (
    EXACT_PPM,
    Band,
    ConfigurationTableError,
    DeviceFamily,
    FailureReason,
    Topology,
    search,
)
from hwcalc.calc.divider_tables import SERDES_FAMILIES, make_pll_family


@pytest.fixture
def pll_family() -> DeviceFamily:
    return make_pll_family(vco_min=600, vco_max=1200, m_max=64, d_max=10, o_max=128)


def _params(c) -> tuple[int, int, int]:
    return (c.multiplier, c.divisor, c.output_divider)


def test_pll_exact_candidates_ranked_by_multiplier(pll_family):
    result = search(150.0, 100.0, pll_family)
    assert result.ok
    assert result.failure_reason is None
    assert len(result.candidates) == pll_family.max_results == 15
    assert result.total_found >= 29
    assert all(c.exact for c in result.candidates)
    assert _params(result.candidates[0]) == (6, 1, 4)
    assert (12, 1, 8) in [_params(c) for c in result.candidates]


def test_pll_candidates_satisfy_constraints(pll_family):
    result = search(133.33, 100.0, pll_family)
    assert result.candidates
    for c in result.candidates:
        assert 600 <= c.vco <= 1200
        assert c.vco == pytest.approx(100.0 * c.multiplier / c.divisor)
        assert c.output == pytest.approx(c.vco / c.output_divider)
        assert c.error_ppm == pytest.approx(abs(c.output - 133.33) / 133.33 * 1e6)
        assert c.error_ppm <= 10_000
    errors = [c.error_ppm for c in result.candidates]
    assert errors == sorted(errors)


def test_pll_pfd_is_advisory(pll_family):
    # 1 MHz reference: every D gives a PFD below 10 MHz, candidates still found
    family = make_pll_family(vco_min=600, vco_max=1200, m_max=1200, d_max=2, o_max=12)
    result = search(100.0, 1.0, family)
    assert result.candidates
    assert not any(c.pfd_ok for c in result.candidates)
    assert all(c.pfd_ok for c in search(150.0, 100.0, pll_family).candidates)


def test_gth_10g_ethernet_prefers_qpll0():
    result = search(10.3125, 156.25, SERDES_FAMILIES["gth-us+"])
    best, second = result.candidates[0], result.candidates[1]
    assert best.topology == "QPLL0"
    assert _params(best) == (66, 1, 1)
    assert best.vco == 10.3125
    assert best.error_ppm < EXACT_PPM
    assert second.topology == "QPLL1"
    assert _params(second) == (66, 1, 1)
    assert len(result.candidates) <= 10


def test_gtx_range_boundaries_are_inclusive():
    gtx = SERDES_FAMILIES["gtx"]
    top = search(12.5, 156.25, gtx)
    assert top.ok
    assert top.candidates[0].topology == "QPLL"
    assert _params(top.candidates[0]) == (80, 1, 1)
    assert top.candidates[0].exact
    bottom = search(0.5, 156.25, gtx)
    assert bottom.failure_reason is not FailureReason.TARGET_BELOW_MINIMUM


def test_gtx_out_of_range():
    gtx = SERDES_FAMILIES["gtx"]
    above = search(20.0, 156.25, gtx)
    assert above.failure_reason is FailureReason.TARGET_ABOVE_MAXIMUM
    assert above.failure_reason.category == "TargetOutOfDeviceRange"
    assert above.valid_range == Band(0.5, 12.5)
    assert above.suggested_device == "gth-us+"
    assert above.candidates == []
    over = search(13.5, 156.25, gtx)
    assert over.failure_reason is FailureReason.TARGET_ABOVE_MAXIMUM
    below = search(0.4, 156.25, gtx)
    assert below.failure_reason is FailureReason.TARGET_BELOW_MINIMUM
    assert below.suggested_device is None


@pytest.mark.parametrize("target", [0.0, -1.0, math.nan, math.inf])
def test_invalid_target(target):
    result = search(target, 156.25, SERDES_FAMILIES["gtx"])
    assert result.failure_reason is FailureReason.INVALID_TARGET
    assert result.failure_reason.category == "InvalidInput"
    assert result.candidates == []


@pytest.mark.parametrize("refclk", [0.0, -156.25, math.nan])
def test_invalid_reference_clock(refclk):
    result = search(10.3125, refclk, SERDES_FAMILIES["gtx"])
    assert result.failure_reason is FailureReason.INVALID_REFERENCE_CLOCK


def test_refclk_outside_every_topology(single_path_family):
    family = single_path_family(refclk_range=Band(60.0, 800.0))
    result = search(9.0, 900.0, family)
    assert result.failure_reason is FailureReason.NO_CONFIGURATION_FOUND
    assert result.failure_reason.category == "NoConfigurationFound"
    assert len(result.warnings) == 1
    assert "60-800" in str(result.warnings[0])
    assert "900" in str(result.warnings[0])


def test_no_configuration_without_warnings(single_path_family):
    family = single_path_family(
        vco_bands=(Band(1.0, 2.0),),
        output_range=Band(5.0, 6.0),
        family_range=Band(0.1, 10.0),
    )
    result = search(5.5, 150.0, family)
    assert result.failure_reason is FailureReason.NO_CONFIGURATION_FOUND
    assert result.warnings == []
    assert result.total_found == 0


def test_topology_output_range_limits_candidates():
    result = search(25.0, 156.25, SERDES_FAMILIES["gtm"])
    assert result.candidates[0].topology == "LCPLL-NRZ"
    assert result.candidates[0].exact
    pam4 = search(50.0, 156.25, SERDES_FAMILIES["gtm"])
    assert pam4.candidates[0].topology == "LCPLL-PAM4"
    assert pam4.candidates[0].exact
    assert _params(pam4.candidates[0]) == (80, 1, 1)
    # NRZ fills the remaining slots, within its own output range
    nrz = [c for c in pam4.candidates if c.topology == "LCPLL-NRZ"]
    assert all(c.output <= 29.0 for c in nrz)
    low = search(5.0, 156.25, SERDES_FAMILIES["gtm"])
    assert low.failure_reason is FailureReason.TARGET_BELOW_MINIMUM
    assert low.suggested_device == "gty"


def test_intel_atx_before_fpll():
    result = search(10.3125, 156.25, SERDES_FAMILIES["cyclone10gx"])
    best = result.candidates[0]
    assert best.topology == "ATX PLL"
    assert _params(best) == (66, 1, 2)
    assert best.exact


def test_search_is_deterministic(pll_family):
    first = search(148.5, 27.0, pll_family)
    second = search(148.5, 27.0, pll_family)
    assert first.to_dict() == second.to_dict()


def test_to_dict():
    d = search(20.0, 156.25, SERDES_FAMILIES["gtx"]).to_dict()
    assert d["failure_reason"] == "target_above_maximum"
    assert d["valid_range"] == [0.5, 12.5]
    assert d["candidates"] == []


@pytest.mark.parametrize(
    "kwargs",
    [
        {"multipliers": ()},
        {"multipliers": (4, 4)},
        {"divisors": (2, 1)},
        {"output_dividers": (0, 1)},
        {"vco_bands": ()},
        {"vco_bands": (Band(2.0, 1.0),)},
        {"vco_bands": (Band(0.0, 1.0),)},
        {"scale_factor": 0},
        {"max_error_ppm": 0.0},
        {"refclk_range": Band(800.0, 60.0)},
    ],
)
def test_inconsistent_topology(kwargs):
    base = {
        "name": "PLL",
        "multipliers": (10,),
        "divisors": (1,),
        "output_dividers": (1,),
        "vco_bands": (Band(1.0, 2.0),),
    }
    base.update(kwargs)
    with pytest.raises(ConfigurationTableError):
        Topology(**base)


def test_inconsistent_family():
    topology = Topology(
        name="PLL",
        multipliers=(10,),
        divisors=(1,),
        output_dividers=(1,),
        vco_bands=(Band(1.0, 2.0),),
    )
    with pytest.raises(ConfigurationTableError):
        DeviceFamily(device_id="x", name="X", topologies=())
    with pytest.raises(ConfigurationTableError):
        DeviceFamily(device_id="x", name="X", topologies=(topology, topology))
    with pytest.raises(ConfigurationTableError):
        DeviceFamily(device_id="x", name="X", topologies=(topology,), max_results=0)
    assert issubclass(ConfigurationTableError, ValueError)
