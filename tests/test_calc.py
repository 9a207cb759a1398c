# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/test_calc.py

"""End-to-end tests of the hwcalc command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

import hwcalc.calc
from hwcalc.calc.calc import SOLVERS, main

EXAMPLES = sorted((Path(hwcalc.calc.__file__).parent / "examples").glob("*.yaml"))

OUTPUTS = (
    "run.log",
    "results_scalars.json",
    "results_export.md",
    "results_link.txt",
    "results_model.json",
    "results_params.json",
)


def test_every_calculator_has_an_example():
    assert EXAMPLES
    calc_types = {yaml.safe_load(p.read_text())["calc_type"] for p in EXAMPLES}
    assert calc_types == set(SOLVERS)


@pytest.mark.parametrize("spec", EXAMPLES, ids=lambda p: p.stem)
def test_examples(spec: Path, tmp_path: Path):
    outdir = tmp_path / "out"
    assert main([str(spec), "--outdir", str(outdir)]) == 0
    for name in OUTPUTS:
        assert (outdir / name).exists(), name
    scalars = json.loads((outdir / "results_scalars.json").read_text())
    assert scalars["basic_checks_pass"] is True
    link = (outdir / "results_link.txt").read_text().strip()
    assert link.startswith("?calc=")


def test_divider_outputs(tmp_path: Path):
    spec = tmp_path / "pll.yaml"
    spec.write_text("calc_type: pll\nf_in: 100 MHz\nf_out: 150 MHz\n")
    outdir = tmp_path / "out"
    main([str(spec), "--outdir", str(outdir), "--results-name", "pll"])
    candidates = json.loads((outdir / "pll_candidates.json").read_text())
    assert candidates["candidates"][0]["multiplier"] == 6
    assert (outdir / "pll_plot.png").exists()
    assert "| PLL M/D/O | 6 | 1 | 4 |" in (outdir / "pll_export.md").read_text()


def test_default_outdir_from_spec_name(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    spec = tmp_path / "fast_clock.yaml"
    spec.write_text("calc_type: timing\nfreq: 500\n")
    main([str(spec)])
    assert (tmp_path / "out_hwcalc_fast_clock" / "results_scalars.json").exists()


def test_query_string(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    main(["?calc=timing&freq=250%20MHz"])
    outdir = tmp_path / "out_hwcalc_timing"
    scalars = json.loads((outdir / "results_scalars.json").read_text())
    assert scalars["period_ns"] == pytest.approx(4.0)
    link = (outdir / "results_link.txt").read_text().strip()
    assert link.startswith("?calc=timing&freq=250.0")


def test_rerun_from_link(tmp_path: Path):
    first = tmp_path / "first"
    main([str(EXAMPLES[0]), "--outdir", str(first)])
    link = (first / "results_link.txt").read_text().strip()
    second = tmp_path / "second"
    main([link, "--outdir", str(second)])
    assert json.loads((first / "results_scalars.json").read_text()) == json.loads(
        (second / "results_scalars.json").read_text()
    )


def test_missing_spec(tmp_path: Path):
    with pytest.raises(SystemExit):
        main([str(tmp_path / "missing.yaml"), "--outdir", str(tmp_path / "out")])


def test_unknown_calc_type(tmp_path: Path):
    spec = tmp_path / "bad.yaml"
    spec.write_text("calc_type: adc\n")
    with pytest.raises(ValueError, match="calc_type"):
        main([str(spec), "--outdir", str(tmp_path / "out")])
