# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/hwcalc/calc/presets.py

"""Device presets and default inputs for each calculator.

Presets are keyed by the spec ``preset`` field. A spec is resolved as
defaults, then the preset values, then the explicit spec values, so anything
written in the spec file wins.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Mapping

logger = logging.getLogger(__name__)

# CDC synchronizer characteristics: t_window and tau in ps, t_setup in ns
CDC_PRESETS: Mapping[str, Mapping[str, Any]] = MappingProxyType(
    {
        "xilinx-7series": {
            "name": "Xilinx 7-Series",
            "t_window": 40,
            "tau": 18,
            "t_setup": 0.06,
        },
        "xilinx-ultrascale": {
            "name": "Xilinx UltraScale",
            "t_window": 35,
            "tau": 12,
            "t_setup": 0.04,
        },
        "xilinx-ultrascale+": {
            "name": "Xilinx UltraScale+",
            "t_window": 30,
            "tau": 10,
            "t_setup": 0.035,
        },
        "intel-cyclone-v": {
            "name": "Intel Cyclone V",
            "t_window": 55,
            "tau": 22,
            "t_setup": 0.08,
        },
        "intel-cyclone-10": {
            "name": "Intel Cyclone 10",
            "t_window": 50,
            "tau": 20,
            "t_setup": 0.07,
        },
        "intel-arria-10": {
            "name": "Intel Arria 10",
            "t_window": 40,
            "tau": 15,
            "t_setup": 0.05,
        },
        "intel-stratix-10": {
            "name": "Intel Stratix 10",
            "t_window": 35,
            "tau": 12,
            "t_setup": 0.04,
        },
    }
)
# Register timing, all in ns. t_lut is one LUT plus typical routing.
TIMING_PRESETS: Mapping[str, Mapping[str, Any]] = MappingProxyType(
    {
        "xilinx-7series": {
            "name": "Xilinx 7-Series",
            "t_setup": 0.06,
            "t_uncert": 0.1,
            "t_clkq": 0.2,
            "t_lut": 0.1,
        },
        "xilinx-ultrascale": {
            "name": "Xilinx UltraScale",
            "t_setup": 0.04,
            "t_uncert": 0.08,
            "t_clkq": 0.15,
            "t_lut": 0.08,
        },
        "xilinx-ultrascale+": {
            "name": "Xilinx UltraScale+",
            "t_setup": 0.035,
            "t_uncert": 0.07,
            "t_clkq": 0.12,
            "t_lut": 0.065,
        },
        "intel-cyclone-v": {
            "name": "Intel Cyclone V",
            "t_setup": 0.08,
            "t_uncert": 0.12,
            "t_clkq": 0.25,
            "t_lut": 0.12,
        },
        "intel-cyclone-10": {
            "name": "Intel Cyclone 10",
            "t_setup": 0.07,
            "t_uncert": 0.1,
            "t_clkq": 0.22,
            "t_lut": 0.1,
        },
        "intel-arria-10": {
            "name": "Intel Arria 10",
            "t_setup": 0.05,
            "t_uncert": 0.08,
            "t_clkq": 0.15,
            "t_lut": 0.07,
        },
        "intel-stratix-10": {
            "name": "Intel Stratix 10",
            "t_setup": 0.04,
            "t_uncert": 0.07,
            "t_clkq": 0.12,
            "t_lut": 0.055,
        },
    }
)

# PLL/MMCM limits, VCO in MHz (slowest speed grade)
PLL_PRESETS: Mapping[str, Mapping[str, Any]] = MappingProxyType(
    {
        "xilinx-7series-mmcm": {
            "name": "Xilinx 7-Series MMCM",
            "vco_min": 600,
            "vco_max": 1200,
            "m_max": 64,
            "d_max": 106,
            "o_max": 128,
        },
        "xilinx-7series-pll": {
            "name": "Xilinx 7-Series PLL",
            "vco_min": 800,
            "vco_max": 1600,
            "m_max": 64,
            "d_max": 56,
            "o_max": 128,
        },
        "xilinx-ultrascale-mmcm": {
            "name": "Xilinx UltraScale MMCM",
            "vco_min": 800,
            "vco_max": 1600,
            "m_max": 128,
            "d_max": 106,
            "o_max": 128,
        },
        "xilinx-ultrascale+-mmcm": {
            "name": "Xilinx UltraScale+ MMCM",
            "vco_min": 800,
            "vco_max": 1600,
            "m_max": 128,
            "d_max": 106,
            "o_max": 128,
        },
        "intel-cyclone-v": {
            "name": "Intel Cyclone V PLL",
            "vco_min": 600,
            "vco_max": 1300,
            "m_max": 512,
            "d_max": 512,
            "o_max": 512,
        },
        "intel-cyclone-10": {
            "name": "Intel Cyclone 10 PLL",
            "vco_min": 600,
            "vco_max": 1300,
            "m_max": 512,
            "d_max": 512,
            "o_max": 512,
        },
        "intel-arria-10": {
            "name": "Intel Arria 10 PLL",
            "vco_min": 500,
            "vco_max": 1500,
            "m_max": 160,
            "d_max": 80,
            "o_max": 128,
        },
        "intel-stratix-10": {
            "name": "Intel Stratix 10 PLL",
            "vco_min": 500,
            "vco_max": 1500,
            "m_max": 160,
            "d_max": 80,
            "o_max": 128,
        },
    }
)

# Memory access patterns: page hit and read share in percent
WORKLOAD_PRESETS: Mapping[str, Mapping[str, Any]] = MappingProxyType(
    {
        "stream": {
            "name": "STREAM Benchmark",
            "page_hit": 95,
            "rw_ratio": 67,
            "controller": "server",
        },
        "video": {
            "name": "Video Processing",
            "page_hit": 90,
            "rw_ratio": 85,
            "controller": "desktop",
        },
        "database": {
            "name": "Database OLTP",
            "page_hit": 60,
            "rw_ratio": 60,
            "controller": "server",
        },
        "ml-inference": {
            "name": "ML Inference",
            "page_hit": 85,
            "rw_ratio": 90,
            "controller": "server",
        },
        "ml-training": {
            "name": "ML Training",
            "page_hit": 75,
            "rw_ratio": 40,
            "controller": "server",
        },
        "random": {
            "name": "Random Access",
            "page_hit": 20,
            "rw_ratio": 50,
            "controller": "server",
        },
    }
)

PRESETS: Mapping[str, Mapping[str, Mapping[str, Any]]] = MappingProxyType(
    {
        "cdc": CDC_PRESETS,
        "timing": TIMING_PRESETS,
        "pll": PLL_PRESETS,
        "membw": WORKLOAD_PRESETS,
    }
)

DEFAULTS: Mapping[str, Mapping[str, Any]] = MappingProxyType(
    {
        "fifo": {"f_write": 100, "f_read": 80, "burst": 256, "latency": 4},
        "cdc": {
            "f_data": 100,
            "f_sample": 125,
            "t_window": 50,
            "tau": 20,
            "stages": 2,
            "t_setup": 0.1,
            "t_routing": 0.3,
        },
        "timing": {
            "freq": 200,
            "t_setup": 0.05,
            "t_uncert": 0.1,
            "t_clkq": 0.2,
            "t_lut": 0.1,
        },
        "fixedpoint": {"min": -10, "max": 10, "precision": 0.001, "signed": True},
        "pll": {
            "f_in": 100,
            "f_out": 150,
            "vco_min": 600,
            "vco_max": 1200,
            "m_max": 64,
            "d_max": 10,
            "o_max": 128,
        },
        "serdes": {"line_rate": 10.3125, "refclk": 156.25},
        "membw": {
            "ddr_gen": "ddr4",
            "data_rate": 3200,
            "bus_width": 64,
            "ranks": 1,
            "page_hit": 80,
            "rw_ratio": 67,
            "controller": "fpga_optimized",
        },
    }
)


def resolve_spec(calc_type: str, spec: Mapping[str, Any]) -> dict[str, Any]:
    """Merge defaults, the named preset and the spec for one calculator.

    Raises:
        ValueError: If the spec names a preset that does not exist.
    """
    resolved: dict[str, Any] = dict(DEFAULTS.get(calc_type, {}))
    preset_key = spec.get("preset")
    if preset_key:
        presets = PRESETS.get(calc_type, {})
        if preset_key not in presets:
            raise ValueError(
                f"Unknown {calc_type} preset {preset_key!r}, "
                f"expected one of {sorted(presets)}"
            )
        values = {k: v for k, v in presets[preset_key].items() if k != "name"}
        logger.info("Applying %s preset %s: %s", calc_type, preset_key, values)
        resolved.update(values)
    resolved.update(spec)
    return resolved
