# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/conftest.py

"""Shared pytest configuration."""

from __future__ import annotations

import matplotlib
import pytest

from hwcalc.calc.divider_search import Band, DeviceFamily, Topology

# Plots are written to files only
matplotlib.use("Agg")


@pytest.fixture
def single_path_family():
    """Build a one-topology GHz family with the given topology overrides."""

    def _build(
        *, family_range: Band | None = Band(0.5, 20.0), **topology_kwargs
    ) -> DeviceFamily:
        kwargs = {
            "name": "PLL",
            "multipliers": (10,),
            "divisors": (1,),
            "output_dividers": (1,),
            "vco_bands": (Band(1.0, 20.0),),
        }
        kwargs.update(topology_kwargs)
        return DeviceFamily(
            device_id="test",
            name="Test PLL",
            topologies=(Topology(**kwargs),),
            output_range=family_range,
            unit="Gbps",
            unit_divisor=1000,
        )

    return _build
