# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/hwcalc/utils.py

"""Utility functions shared by the calculators and the CLI."""

from __future__ import annotations

import logging
import re
import time
from os import PathLike
from pathlib import Path
from typing import Sequence, Union

import matplotlib.pyplot as plt

RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RESET = "\033[0m"


class NoColorFormatter(logging.Formatter):
    """Formatter that strips ANSI color codes from log messages."""

    ANSI_ESCAPE = re.compile(r"\033\[[0-9;]*m")

    def format(self, record: logging.LogRecord) -> str:
        """Format the record and strip ANSI codes."""
        formatted = super().format(record)
        return self.ANSI_ESCAPE.sub("", formatted)


class PlotLine:
    """Reusable wrapper for simple matplotlib line plots."""

    def __init__(
        self,
        outdir: Union[str, Path] = "output",
        figsize: tuple[int, int] = (10, 6),
    ):
        """Initialize with output directory and figure size."""
        self.outdir = ensure_dir(outdir, True)
        self.figsize = figsize
        self.title: str | None = None
        self.xlabel: str = ""
        self.ylabel: str = ""
        self.log_y = False
        self._initialized = False

    def _init_plot(self) -> None:
        """Create figure once, if not already done."""
        if not self._initialized:
            plt.figure(figsize=self.figsize)
            self._initialized = True

    # pylint: disable=too-many-positional-arguments
    def add_line(  # pylint: disable=too-many-arguments
        self,
        xs: Sequence[float],
        ys: Sequence[float],
        label: str,
        color: str = "blue",
        linestyle: str = "-",
        marker: str = "",
        linewidth: float = 2.0,
    ) -> None:
        """Add a labeled line to the plot."""
        self._init_plot()
        plt.plot(
            xs,
            ys,
            label=label,
            color=color,
            linestyle=linestyle,
            marker=marker,
            linewidth=linewidth,
        )

    def add_threshold(self, y: float, label: str, color: str = "red") -> None:
        """Add a dashed horizontal reference line."""
        self._init_plot()
        plt.axhline(y, label=label, color=color, linestyle="--", linewidth=1.0)

    def set_labels(
        self, xlabel: str, ylabel: str, title: str = "", log_y: bool = False
    ) -> None:
        """Set plot title, axis labels and y-axis scale."""
        self.xlabel = xlabel
        self.ylabel = ylabel
        self.title = title
        self.log_y = log_y

    def format(self) -> None:
        """Apply grid, layout, labels, and legend."""
        plt.xlabel(self.xlabel)
        plt.ylabel(self.ylabel)
        if self.title:
            plt.title(self.title)
        if self.log_y:
            plt.yscale("symlog")
        plt.grid(True)
        plt.legend()
        plt.tight_layout()

    def save(self, filename: str, fmt: str = "png") -> None:
        """Save the plot to disk and release the figure."""
        path = self.outdir / f"{filename}.{fmt}"
        plt.savefig(path)
        plt.close()
        self._initialized = False
        logging.debug("Saved plot: %s", path)


def configure_logger(
    verbosity: str = "info", log_file: Path | None = None
) -> logging.Logger:
    """Configure and return a logger with console and optional file handlers.

    Args:
        verbosity: Log level (critical, error, warning, info, debug, notset)
        log_file: Optional path to log file. If provided, logs to both console and file.

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger()
    logger.setLevel(verbosity.upper())

    # Remove any existing handlers to avoid duplicates
    logger.handlers.clear()

    fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"

    # Console keeps colors, the log file does not
    console_handler = logging.StreamHandler()
    console_handler.setLevel(verbosity.upper())
    console_handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(verbosity.upper())
        file_handler.setFormatter(NoColorFormatter(fmt=fmt, datefmt=datefmt))
        logger.addHandler(file_handler)

    return logging.getLogger(__name__)


def ensure_dir(
    d: Union[str, Path, PathLike[str]], make_if_not_exists: bool = False
) -> Path:
    """Return absolute path if directory exists, optionally create it."""
    path = Path(d)
    if not path.exists():
        if make_if_not_exists:
            path.mkdir(parents=True, exist_ok=True)
            logging.info("Created directory: %s", path)
        else:
            raise FileNotFoundError(f"Directory does not exist: {path}")
    if not path.is_dir():
        raise NotADirectoryError(f"Not a directory: {path}")
    return path.resolve()


def green(s: str) -> str:
    """Wrap text in green ANSI escape codes."""
    return f"{GREEN}{s}{RESET}"


def iso_utc() -> str:
    """Return current time in ISO8601 Z format (UTC)."""
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def red(s: str) -> str:
    """Wrap text in red ANSI escape codes."""
    return f"{RED}{s}{RESET}"


def round_value(value: int, rounding: str) -> int:
    """Round a value according to the specified method."""
    if rounding == "none":
        return value
    if rounding == "power2":
        if value <= 1:
            return 1
        p = 1
        while p < value:
            p <<= 1
        return p
    raise ValueError(f"Unknown rounding: {rounding}")


def yellow(s: str) -> str:
    """Wrap text in yellow ANSI escape codes."""
    return f"{YELLOW}{s}{RESET}"
