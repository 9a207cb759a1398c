# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/hwcalc/calc/calc.py

"""Hardware calculator orchestrator."""

from __future__ import annotations

import json
import logging
import shutil
import time
from pathlib import Path
from typing import Sequence, cast

import yaml

from hwcalc.calc.calc_base import CalcBaseResults, CalcSolver
from hwcalc.calc.calc_utils import get_args, is_query, spec_from_query
from hwcalc.calc.cdc_mtbf import CdcMtbfSolver
from hwcalc.calc.fifo_depth import FifoDepthSolver
from hwcalc.calc.fixed_point import FixedPointSolver
from hwcalc.calc.mem_bandwidth import MemBandwidthSolver
from hwcalc.calc.pll_config import PllConfigSolver
from hwcalc.calc.serdes_config import SerdesConfigSolver
from hwcalc.calc.timing_budget import TimingBudgetSolver
from hwcalc.utils import configure_logger, green, red

SOLVERS: dict[str, type[CalcSolver]] = {
    "fifo": FifoDepthSolver,
    "cdc": CdcMtbfSolver,
    "timing": TimingBudgetSolver,
    "fixedpoint": FixedPointSolver,
    "membw": MemBandwidthSolver,
    "pll": PllConfigSolver,
    "serdes": SerdesConfigSolver,
}


def _get_calc_type(spec: dict) -> str:
    """
    Extract the calculator type from a specification.

    Returns calc_type from spec (one of the SOLVERS keys).
    """
    if "calc_type" not in spec:
        raise ValueError("Missing 'calc_type' field in spec.")
    calc_type = str(spec["calc_type"])
    if calc_type not in SOLVERS:
        raise ValueError(f"{calc_type=}, expected one of {sorted(SOLVERS)}")
    return calc_type


def _get_logger(outdir: Path, verbosity: str) -> logging.Logger:
    """
    Configure and return logger for a calculation.

    Creates log file in outdir and sets level based on verbosity.
    """
    log_file = outdir / "run.log"
    logger = configure_logger(verbosity, log_file)
    logger.info("Logging to console and %s", log_file)
    return logger


def _get_outdir(spec_arg: str, user_outdir: str | None) -> Path:
    """
    Determine output directory for calculation results.

    Uses command-line override if provided, otherwise creates a directory
    named after the spec file, or after the calculator for a query string.
    """
    if user_outdir:
        outdir = Path(user_outdir)
    elif is_query(spec_arg):
        calc_type = spec_from_query(spec_arg).get("calc_type", "query")
        outdir = Path(f"out_hwcalc_{calc_type}")
    else:
        outdir = Path(f"out_hwcalc_{Path(spec_arg).stem}")
    # Start from an empty output directory
    if outdir.exists():
        shutil.rmtree(outdir)
    outdir.mkdir(parents=True)
    return outdir


def _get_solver_argv(
    spec_arg: str, outdir: Path, results: str, verbosity: str
) -> list[str]:
    """
    Build command-line arguments for an individual calculator solver.
    """
    solver_argv = [spec_arg, "--outdir", str(outdir)]
    if results:
        solver_argv.extend(["--results-name", results])
    if verbosity:
        solver_argv.extend(["--verbosity", verbosity])
    return solver_argv


def _get_spec(spec_arg: str, logger: logging.Logger) -> dict:
    """
    Load a YAML specification file or decode a query string.
    """
    if is_query(spec_arg):
        spec = spec_from_query(spec_arg)
        logger.debug("Decoded query:\n%s", json.dumps(spec, indent=2))
        return spec
    spec_path = Path(spec_arg)
    if not spec_path.exists():
        raise SystemExit(f"ERROR: Spec file not found: {spec_arg}")
    with open(spec_path, encoding="utf-8") as f:
        s = f.read()
        logger.debug("Input spec:\n%s", s)
        spec = cast(dict, yaml.safe_load(s) or {})
        logger.debug("Loaded spec:\n%s", json.dumps(spec, indent=2))
    return spec


def _get_solver(calc_type: str) -> CalcSolver:
    """Return a solver instance for the calculator type."""
    return SOLVERS[calc_type]()


def _handle_results(results: CalcBaseResults, logger: logging.Logger) -> int:
    """
    Log the validation status of the results.

    Returns 1 if validation fails, 0 if validation passes.
    """
    name = results.__class__.__name__
    s = f"{name}: {results.basic_checks_pass=}"
    if results.basic_checks_pass:
        logger.info(green(s))
        return 0
    logger.error(red(s))
    return 1


def _log_elapsed_time(
    start_time: float, spec_arg: str, logger: logging.Logger
) -> None:
    """
    Log processing time for a specification in HH:MM:SS format.
    """
    elapsed_time = time.time() - start_time
    hours, remainder = divmod(int(elapsed_time), 3600)
    minutes, seconds = divmod(remainder, 60)
    logger.info("Completed %s in %d:%02d:%02d", spec_arg, hours, minutes, seconds)


def main(
    argv: Sequence[str] | None = None,
) -> int:
    """
    Run one calculation per spec file or query string.

    Returns 0 on success. Raises RuntimeError if a calculation fails its
    validation checks.
    """

    args = get_args(argv, "Hardware design calculators")

    # Ensure args.spec is always a list for iteration
    spec_args = [args.spec] if isinstance(args.spec, str) else args.spec

    for spec_arg in spec_args:

        start_time = time.time()
        outdir = _get_outdir(spec_arg, args.outdir)
        logger = _get_logger(outdir, args.verbosity)
        spec = _get_spec(spec_arg, logger)
        calc_type = _get_calc_type(spec)

        solver_argv = _get_solver_argv(
            spec_arg, outdir, args.results_name, args.verbosity
        )
        logger.info("command: %s %s", calc_type, " ".join(solver_argv))
        solver = _get_solver(calc_type)
        solver.run(solver_argv)
        assert solver.results is not None, "Results should be set after run()"
        if _handle_results(solver.results, logger) != 0:
            raise RuntimeError(f"{calc_type} failed validation checks")

        _log_elapsed_time(start_time, spec_arg, logger)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
