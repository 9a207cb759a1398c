# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/hwcalc/calc/calc_base.py

"""Base classes for the calculators.

Every calculator follows the same pipeline: load a spec, merge presets and
defaults, validate it with a pydantic model, convert it to a parameter
object, compute results, check them and save them.
"""

from __future__ import annotations

import argparse
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Mapping, Self, Sequence, Type

import yaml
from pydantic import BaseModel, ConfigDict

from hwcalc.calc.calc_utils import get_args, is_query, spec_from_query, spec_to_query
from hwcalc.calc.divider_search import DeviceFamily, SearchResult
from hwcalc.calc.presets import resolve_spec
from hwcalc.calc.report import Row, advice_for, format_results
from hwcalc.utils import PlotLine, red, yellow

logger = logging.getLogger(__name__)


class CalcBaseModel(BaseModel):
    """Base model providing JSON serialization and file saving capabilities for
    calculator specs.
    """

    model_config = ConfigDict(extra="forbid")

    preset: str | None = None

    def __str__(self) -> str:
        """Return JSON-formatted string representation of the model."""
        return f"{self.__class__.__name__}:\n" + json.dumps(self.model_dump(), indent=2)

    def save(self, outdir: Path, name: str = "") -> None:
        """Save the model to a JSON file in the specified output directory.

        Args:
            outdir: Output directory path where the JSON file will be created
            name: Optional name for the output file (defaults to class name)
        """
        name = name if name else self.__class__.__name__
        (outdir / f"{name}.json").write_text(
            json.dumps(self.model_dump(), indent=2) + "\n"
        )


class CalcBaseParams(ABC):
    """Abstract base class for parameter objects derived from validated models."""

    @classmethod
    @abstractmethod
    def from_model(cls, model: CalcBaseModel) -> Self:
        """Create parameter object from a validated model instance."""

    def __str__(self) -> str:
        """Return JSON-formatted string representation of the parameters."""
        return f"{self.__class__.__name__}:\n" + json.dumps(vars(self), indent=2)

    def check(self) -> None:
        """Validate all parameter constraints."""

    @abstractmethod
    def export_rows(self) -> list[Row]:
        """Return (label, value) rows describing the inputs."""

    def save(self, outdir: Path, name: str = "") -> None:
        """Save the parameters to a JSON file in the specified output directory."""
        name = name if name else self.__class__.__name__
        (outdir / f"{name}.json").write_text(json.dumps(vars(self), indent=2) + "\n")


class CalcBaseResults:
    """Container for calculator results with validation status tracking."""

    def __init__(
        self,
        *,
        basic_checks_pass: bool = False,
        msg: str = "",
    ) -> None:
        self.basic_checks_pass = basic_checks_pass
        self.msg = msg

    def __str__(self) -> str:
        """Return JSON-formatted string representation of all results."""
        return json.dumps(vars(self), indent=2, default=str)

    def scalars_to_dict(self) -> dict[str, int | float | str | bool]:
        """Extract scalar attributes (int, float, str, bool) to dictionary,
        excluding private and sequence attributes.
        """
        result: dict[str, int | float | str | bool] = {}
        for key, value in vars(self).items():
            if key.startswith("_"):
                continue
            if isinstance(value, (int, float, str, bool)):
                result[key] = value
        return result

    def scalars_to_str(self) -> str:
        """Return JSON-formatted string of scalar results only."""
        return json.dumps(self.scalars_to_dict(), indent=2)

    def export_rows(self) -> list[Row]:
        """Return (label, value) rows describing the results."""
        return [(key, str(value)) for key, value in self.scalars_to_dict().items()]

    def save_scalars(self, outdir: Path, name: str) -> None:
        """Save scalar results to a JSON file."""
        (outdir / f"{name}_scalars.json").write_text(
            json.dumps(self.scalars_to_dict(), indent=2) + "\n"
        )

    def save(self, outdir: Path, name: str) -> None:
        """Save all results data to the output directory."""
        self.save_scalars(outdir, name)


class CalcSolver(ABC):  # pylint: disable=too-many-instance-attributes
    """Abstract base class orchestrating a calculation from spec loading through
    result validation.

    Subclasses set calc_type, title, model_class and params_class and
    implement get_results().
    """

    calc_type: str
    title: str
    model_class: Type[CalcBaseModel]
    params_class: Type[CalcBaseParams]

    def __init__(self) -> None:
        self.args: argparse.Namespace | None = None
        self.outdir: Path | None = None
        self.spec: dict = {}
        self.flat_spec: dict[str, Any] = {}
        self.model: CalcBaseModel | None = None
        self.params: CalcBaseParams | None = None
        self.results: CalcBaseResults | None = None
        self.results_check_args: dict = {}
        self.results_name: str | None = None

    def run(self, argv: Sequence[str] | None = None) -> None:
        """Execute the complete workflow from CLI parsing through result
        validation and saving.
        """
        self.get_cli(argv)
        self.get_spec()
        self.solve()
        self.log_results()
        self.save_results()
        self.handle_results()

    def solve(self, spec: Mapping[str, Any] | None = None) -> CalcBaseResults:
        """Compute and check results for `spec`, or for the loaded spec."""
        if spec is not None:
            self.spec = dict(spec)
        self.get_flat_spec()
        self.get_model()
        self.log_model()
        self.get_params()
        self.log_params()
        self.check_params()
        self.get_results()
        self.check_results()
        assert self.results is not None, "get_results() must set results"
        return self.results

    def get_cli(self, argv: Sequence[str] | None = None) -> None:
        """Parse command line arguments and initialize output directory path."""
        self.args = get_args(argv, self.title)
        self.outdir = Path(self.args.outdir or ".")

    def get_spec(self) -> None:
        """Load the YAML spec file or query string from the CLI arguments."""
        assert self.args is not None, "Must call get_cli() first"
        if is_query(self.args.spec):
            self.spec = spec_from_query(self.args.spec)
            return
        spec_path = Path(self.args.spec)
        if not spec_path.exists():
            raise SystemExit(f"ERROR: Spec file not found: {spec_path}")
        with open(spec_path, encoding="utf-8") as f:
            self.spec = yaml.safe_load(f) or {}

    def get_flat_spec(self) -> None:
        """Merge defaults and the named preset under the spec values."""
        calc_type = self.spec.get("calc_type", self.calc_type)
        if calc_type != self.calc_type:
            raise ValueError(f"{calc_type=}, expected {self.calc_type!r}")
        spec = {k: v for k, v in self.spec.items() if k != "calc_type"}
        self.flat_spec = resolve_spec(self.calc_type, spec)

    def get_model(self) -> None:
        """Validate the flattened specification against the Pydantic model schema."""
        self.model = self.model_class.model_validate(self.flat_spec)

    def log_model(self) -> None:
        """Log the validated model to the logger."""
        logger.info(self.model)

    def get_params(self) -> None:
        """Convert validated model into parameter object for solver use."""
        assert self.model is not None, "Must call get_model() first"
        self.params = self.params_class.from_model(self.model)

    def log_params(self) -> None:
        """Log parameter summary to the logger."""
        assert self.params is not None, "Must call get_params() first"
        logger.info(self.params)

    def check_params(self) -> None:
        """Validate parameter constraints."""
        assert self.params is not None, "Must call get_params() first"
        self.params.check()

    @abstractmethod
    def get_results(self) -> None:
        """Compute results from self.params and store them in self.results."""

    def check_results(self) -> None:
        """Validate computed results against expected constraints."""
        assert self.results is not None, "Must call get_results() first"
        check_method = getattr(self.results, "check", None)
        if callable(check_method):
            check_method(**self.results_check_args)  # pylint: disable=not-callable

    def log_results(self) -> None:
        """Log scalar results summary to the logger."""
        assert self.results is not None, "Must call get_results() first"
        logger.info("%s:\n%s", self._get_results_name(), self.results.scalars_to_str())

    def get_export(self) -> str:
        """Return the results as a markdown document."""
        assert self.params is not None, "Must call get_params() first"
        assert self.results is not None, "Must call get_results() first"
        return format_results(
            self.title, self.params.export_rows(), self.results.export_rows()
        )

    def get_link(self) -> str:
        """Return a query string that reproduces this calculation."""
        assert self.model is not None, "Must call get_model() first"
        return spec_to_query(self.calc_type, self.model.model_dump())

    def save_results(self) -> None:
        """Write model, parameters, results, export and link to the output
        directory.
        """
        assert self.model is not None, "Must call get_model() first"
        assert self.params is not None, "Must call get_params() first"
        assert self.results is not None, "Must call solve() first"
        assert self.outdir is not None, "Must call get_cli() first"
        self.outdir.mkdir(parents=True, exist_ok=True)
        name = self._get_results_name()
        self.model.save(self.outdir, f"{name}_model")
        self.params.save(self.outdir, f"{name}_params")
        self.results.save(self.outdir, name)
        (self.outdir / f"{name}_export.md").write_text(self.get_export())
        (self.outdir / f"{name}_link.txt").write_text(self.get_link() + "\n")

    def handle_results(self) -> None:
        """Raise ValueError if result validation checks did not pass."""
        assert self.results is not None, "Must call get_results() first"
        if not self.results.basic_checks_pass:
            raise ValueError("Result validation failed")

    def _get_results_name(self) -> str:
        """Return a name for the results based on CLI arguments or class name."""
        if self.results_name is not None:
            return self.results_name
        if self.args is not None and self.args.results_name:
            return str(self.args.results_name)
        return self.results.__class__.__name__


class DividerResults(CalcBaseResults):  # pylint: disable=too-many-instance-attributes
    """Results of a divider search, shared by the PLL and SerDes solvers.

    Attributes:
        device_id: Searched device family, empty if none was selected.
        total_found: Candidates found before truncation.
        shown: Candidates kept.
        failure_reason: FailureReason value, empty on success.
        best_output: Output of the best candidate, 0.0 if none.
        best_error_ppm: Error of the best candidate, -1.0 if none.
        exact: True if the best candidate is an exact match.
        warnings: Reference clock warnings.
        advice: Text explaining an empty result.
    """

    def __init__(
        self,
        *,
        basic_checks_pass: bool = False,
        msg: str = "",
        search: SearchResult | None,
        family: DeviceFamily | None,
    ) -> None:
        super().__init__(basic_checks_pass=basic_checks_pass, msg=msg)
        self._search = search
        self._family = family
        self.device_id = family.device_id if family else ""
        self.total_found = search.total_found if search else 0
        self.shown = len(search.candidates) if search else 0
        reason = search.failure_reason if search else None
        self.failure_reason = reason.value if reason else ""
        best = search.candidates[0] if search and search.candidates else None
        self.best_output = best.output if best else 0.0
        self.best_error_ppm = best.error_ppm if best else -1.0
        self.exact = best.exact if best else False
        self.warnings = [str(w) for w in search.warnings] if search else []
        self.advice = advice_for(search, family) if search and family else []

    @property
    def search(self) -> SearchResult | None:
        """The underlying search result."""
        return self._search

    @property
    def family(self) -> DeviceFamily | None:
        """The searched device family."""
        return self._family

    def check(self) -> None:
        """Validate ranking, truncation and exact-match flags."""
        self.basic_checks_pass = True
        if self._search is None or self._family is None:
            return
        candidates = self._search.candidates
        errors = [c.error_ppm for c in candidates]
        if errors != sorted(errors):
            self.basic_checks_pass = False
            logger.error(red("Internal error: candidates not ranked by error"))
        if len(candidates) > self._family.max_results:
            self.basic_checks_pass = False
            logger.error(red("Internal error: more candidates than the cap"))
        if self._search.total_found < len(candidates):
            self.basic_checks_pass = False
            logger.error(red("Internal error: total_found < candidates"))
        if bool(candidates) == (self._search.failure_reason is not None):
            self.basic_checks_pass = False
            logger.error(red("Internal error: failure reason inconsistent"))

    def log_advice(self) -> None:
        """Log warnings and advice for the search outcome."""
        for w in self.warnings:
            logger.warning(yellow(w))
        for line in self.advice:
            logger.warning(yellow(line))

    def save_candidates(self, outdir: Path, name: str) -> None:
        """Save the full search result to a JSON file."""
        data = self._search.to_dict() if self._search else {}
        (outdir / f"{name}_candidates.json").write_text(
            json.dumps(data, indent=2) + "\n"
        )

    def save_plot(self, outdir: Path, name: str) -> None:
        """Generate and save a plot of candidate error by rank."""
        if self._search is None or not self._search.candidates:
            return
        errors = [c.error_ppm for c in self._search.candidates]
        xs = list(range(1, len(errors) + 1))
        p = PlotLine(outdir)
        p.add_line(xs, errors, label="error", marker="o")
        p.set_labels("Rank", "Error (ppm)", "Candidate error", log_y=True)
        p.format()
        p.save(f"{name}_plot")

    def save(self, outdir: Path, name: str) -> None:
        """Save scalars, candidates and the error plot."""
        super().save(outdir, name)
        self.save_candidates(outdir, name)
        self.save_plot(outdir, name)
