# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/hwcalc/__init__.py

"""hwcalc: Calculators for FPGA and ASIC hardware design.

Main Components:

calc:
    Closed-form and search-based sizing tools:
    - PLL/MMCM and SerDes transceiver divider search
    - Async FIFO depth, synchronizer MTBF and timing budget
    - Fixed-point format sizing and memory bandwidth estimation

utils:
    Common logging, plotting and formatting helpers
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

try:
    __version__ = pkg_version("hwcalc")
except PackageNotFoundError:
    __version__ = "0+local"
