# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/hwcalc/calc/__init__.py

"""Hardware design calculators.

Modules:

Clock Configuration:
- divider_search: Bounded search over multiplier/divider settings
- divider_tables: Transceiver and generic PLL configuration tables
- pll_config: PLL/MMCM M/D/O search
- serdes_config: SerDes transceiver PLL search

Closed-form Calculators:
- fifo_depth: Async FIFO depth for bursty writes
- cdc_mtbf: Synchronizer MTBF and stage recommendation
- timing_budget: Clock period budget and logic levels
- fixed_point: Fixed-point width and Q notation
- mem_bandwidth: DDR/LPDDR/HBM effective bandwidth

Infrastructure:
- calc: Main CLI and orchestration
- calc_base: Base classes for models, parameters, results and solvers
- calc_utils: Unit parsing, CLI arguments, query strings and formatting
- presets: Named presets and defaults
- report: Markdown export and troubleshooting advice
- examples/: Example YAML specs
"""
