# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/hwcalc/calc/divider_tables.py

"""Static device tables for the divider search.

SerDes families describe transceiver PLLs in GHz with line rates in Gbps.
AMD/Xilinx GT naming is N (feedback), M (reference divider) and the output
divider; Intel naming is M (feedback), N (reference divider) and L.

    AMD CPLL:   line rate = refclk * N / M * 2 / OUT_DIV
    AMD QPLL:   line rate = refclk * N / M / OUT_DIV
    Intel:      line rate = refclk * M / N * 2 / L

Generic PLL/MMCM families work in MHz and are built by ``make_pll_family``,
once per preset here and once per request for user supplied limits.

All families are constructed at import time, so an inconsistent entry raises
``ConfigurationTableError`` before any search runs.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from hwcalc.calc.divider_search import Band, DeviceFamily, Topology
from hwcalc.calc.presets import PLL_PRESETS

PLL_MAX_RESULTS = 15
SERDES_MAX_RESULTS = 10

# Recommended phase detector input range for generic PLLs, MHz
PLL_PFD_RANGE = Band(10.0, 450.0)
# Generic PLL candidates further than 1% from the target are dropped
PLL_MAX_ERROR_PPM = 10_000.0

_AMD_N = (4, 5, 8, 10, 12, 15, 16, 20, 25)
_AMD_M = (1, 2)
_AMD_OUTDIV = (1, 2, 4, 8, 16)
_GTX_QPLL_N = (16, 20, 32, 40, 64, 66, 80, 100)
_US_QPLL_N = (
    16, 20, 32, 40, 60, 64, 66, 75, 80, 84, 90, 96, 100, 112, 120, 125, 128, 150, 160,
)
_QPLL_M = (1, 2, 3, 4)

_INTEL_M = range(8, 128)
_INTEL_N = (1, 2, 4, 8)
_INTEL_L = (1, 2, 4, 8)
_INTEL_REFCLK = Band(50.0, 800.0)


def _gtx() -> DeviceFamily:
    return DeviceFamily(
        device_id="gtx",
        name="GTX (7-Series)",
        topologies=(
            Topology(
                name="CPLL",
                multipliers=_AMD_N,
                divisors=_AMD_M,
                output_dividers=_AMD_OUTDIV,
                vco_bands=(Band(1.6, 3.3),),
                scale_factor=2,
                refclk_range=Band(60.0, 800.0),
                param_names=("N", "M", "OUT_DIV"),
            ),
            Topology(
                name="QPLL",
                multipliers=_GTX_QPLL_N,
                divisors=_QPLL_M,
                output_dividers=_AMD_OUTDIV,
                vco_bands=(Band(5.93, 8.0), Band(9.8, 12.5)),
                refclk_range=Band(40.0, 670.0),
                param_names=("N", "M", "OUT_DIV"),
            ),
        ),
        output_range=Band(0.5, 12.5),
        unit="Gbps",
        unit_divisor=1000,
        max_results=SERDES_MAX_RESULTS,
        suggest_above="gth-us+",
    )


def _ultrascale_plus(device_id: str, name: str) -> DeviceFamily:
    refclk = Band(60.0, 820.0)
    return DeviceFamily(
        device_id=device_id,
        name=name,
        topologies=(
            Topology(
                name="CPLL",
                multipliers=_AMD_N,
                divisors=_AMD_M,
                output_dividers=_AMD_OUTDIV,
                vco_bands=(Band(2.0, 6.25),),
                scale_factor=2,
                refclk_range=refclk,
                param_names=("N", "M", "OUT_DIV"),
            ),
            Topology(
                name="QPLL0",
                multipliers=_US_QPLL_N,
                divisors=_QPLL_M,
                output_dividers=_AMD_OUTDIV,
                vco_bands=(Band(9.8, 16.375),),
                refclk_range=refclk,
                param_names=("N", "M", "OUT_DIV"),
            ),
            Topology(
                name="QPLL1",
                multipliers=_US_QPLL_N,
                divisors=_QPLL_M,
                output_dividers=_AMD_OUTDIV,
                vco_bands=(Band(8.0, 13.0),),
                refclk_range=refclk,
                param_names=("N", "M", "OUT_DIV"),
            ),
        ),
        output_range=Band(0.5, 16.375),
        unit="Gbps",
        unit_divisor=1000,
        max_results=SERDES_MAX_RESULTS,
        suggest_above="gtm",
    )


def _gtm() -> DeviceFamily:
    # Representative LCPLL limits and N/M sets, not datasheet values.
    # NRZ and PAM4 share the LC tank; PAM4 doubles the symbol payload
    refclk = Band(60.0, 820.0)
    return DeviceFamily(
        device_id="gtm",
        name="GTM (Virtex UltraScale+ 58G)",
        topologies=(
            Topology(
                name="LCPLL-NRZ",
                multipliers=_US_QPLL_N,
                divisors=_QPLL_M,
                output_dividers=(1, 2, 4),
                vco_bands=(Band(9.8, 14.5),),
                scale_factor=2,
                refclk_range=refclk,
                output_range=Band(9.8, 29.0),
                param_names=("N", "M", "OUT_DIV"),
            ),
            Topology(
                name="LCPLL-PAM4",
                multipliers=_US_QPLL_N,
                divisors=_QPLL_M,
                output_dividers=(1, 2, 4),
                vco_bands=(Band(9.8, 14.5),),
                scale_factor=4,
                refclk_range=refclk,
                output_range=Band(19.6, 58.0),
                param_names=("N", "M", "OUT_DIV"),
            ),
        ),
        output_range=Band(9.8, 58.0),
        unit="Gbps",
        unit_divisor=1000,
        max_results=SERDES_MAX_RESULTS,
        suggest_below="gty",
    )


def _intel(  # pylint: disable=too-many-arguments
    device_id: str,
    name: str,
    *,
    atx_vco: Band,
    line_rate: Band,
    suggest_above: str | None,
) -> DeviceFamily:
    return DeviceFamily(
        device_id=device_id,
        name=name,
        topologies=(
            Topology(
                name="ATX PLL",
                multipliers=_INTEL_M,
                divisors=_INTEL_N,
                output_dividers=_INTEL_L,
                vco_bands=(atx_vco,),
                scale_factor=2,
                refclk_range=_INTEL_REFCLK,
                param_names=("M", "N", "L"),
            ),
            Topology(
                name="fPLL",
                multipliers=_INTEL_M,
                divisors=_INTEL_N,
                output_dividers=_INTEL_L,
                vco_bands=(Band(4.8, 14.0),),
                scale_factor=2,
                refclk_range=_INTEL_REFCLK,
                param_names=("M", "N", "L"),
            ),
        ),
        output_range=line_rate,
        unit="Gbps",
        unit_divisor=1000,
        max_results=SERDES_MAX_RESULTS,
        suggest_above=suggest_above,
    )


def make_pll_family(  # pylint: disable=too-many-arguments
    *,
    device_id: str = "custom",
    name: str = "Custom PLL",
    vco_min: float,
    vco_max: float,
    m_max: int,
    d_max: int,
    o_max: int,
) -> DeviceFamily:
    """Build a generic M/D/O PLL family.

    f_vco = f_in * M / D with M in 2..m_max and D in 1..d_max, and
    f_out = f_vco / O with O in 1..o_max. The output is bounded only by the
    VCO band and the 1% error ceiling.
    """
    return DeviceFamily(
        device_id=device_id,
        name=name,
        topologies=(
            Topology(
                name="PLL M/D/O",
                multipliers=range(2, m_max + 1),
                divisors=range(1, d_max + 1),
                output_dividers=range(1, o_max + 1),
                vco_bands=(Band(vco_min, vco_max),),
                pfd_range=PLL_PFD_RANGE,
                max_error_ppm=PLL_MAX_ERROR_PPM,
            ),
        ),
        max_results=PLL_MAX_RESULTS,
    )


SERDES_FAMILIES: Mapping[str, DeviceFamily] = MappingProxyType(
    {
        "gtx": _gtx(),
        "gth-us+": _ultrascale_plus("gth-us+", "GTH (UltraScale+)"),
        "gty": _ultrascale_plus("gty", "GTY (UltraScale+)"),
        "gtm": _gtm(),
        "cyclone10gx": _intel(
            "cyclone10gx",
            "Cyclone 10 GX",
            atx_vco=Band(7.2, 11.4),
            line_rate=Band(0.6, 12.5),
            suggest_above="arria10gx",
        ),
        "arria10gx": _intel(
            "arria10gx",
            "Arria 10 GX",
            atx_vco=Band(7.2, 14.4),
            line_rate=Band(0.6, 17.4),
            suggest_above="stratix10",
        ),
        "stratix10": _intel(
            "stratix10",
            "Stratix 10 L-Tile",
            atx_vco=Band(7.2, 14.4),
            line_rate=Band(0.6, 17.4),
            suggest_above=None,
        ),
    }
)

PLL_FAMILIES: Mapping[str, DeviceFamily] = MappingProxyType(
    {
        key: make_pll_family(
            device_id=key,
            name=preset["name"],
            vco_min=preset["vco_min"],
            vco_max=preset["vco_max"],
            m_max=preset["m_max"],
            d_max=preset["d_max"],
            o_max=preset["o_max"],
        )
        for key, preset in PLL_PRESETS.items()
    }
)


def get_serdes_family(device_id: str) -> DeviceFamily:
    """Return the SerDes family for `device_id`."""
    try:
        return SERDES_FAMILIES[device_id]
    except KeyError:
        raise ValueError(
            f"Unknown device {device_id!r}, expected one of {sorted(SERDES_FAMILIES)}"
        ) from None
