# SPDX-FileCopyrightText: 2026 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/hwcalc/calc/report.py

"""Text presentation of calculator results.

Results are exported as markdown: a title, the inputs as a bullet list and a
``### Results`` section. Divider searches are exported as tables. Advisory
text for empty searches lives here, keyed by failure reason and device, so
the search itself only returns structured reasons.
"""

from __future__ import annotations

from typing import Sequence

from hwcalc import __version__
from hwcalc.calc.divider_search import DeviceFamily, FailureReason, SearchResult
from hwcalc.utils import iso_utc

Row = tuple[str, str]

TROUBLESHOOTING = (
    "Check that the reference clock is within the valid input range of at "
    "least one PLL type.",
    "Try a common reference clock: 100, 125 or 156.25 MHz.",
    "Verify the requested rate against the protocol specification.",
    "Try a different device or transceiver type.",
)

BELOW_MINIMUM_ADVICE = (
    "Use a higher line rate, or select a different GT type that supports "
    "lower rates."
)

# (device_id, reason) -> advisory text
DEVICE_ADVICE: dict[tuple[str, FailureReason], str] = {
    ("gtx", FailureReason.TARGET_ABOVE_MAXIMUM): (
        "Try GTH (up to 16.375 Gbps) or GTY (up to 16.375 Gbps in standard mode)."
    ),
    ("gth-us+", FailureReason.TARGET_ABOVE_MAXIMUM): (
        "Rates near the limit need QPLL with CLKOUT_RATE=FULL. Consult UG576. "
        "Above 16.375 Gbps consider GTM."
    ),
    ("gty", FailureReason.TARGET_ABOVE_MAXIMUM): (
        "Rates near the limit need QPLL with CLKOUT_RATE=FULL. Consult UG578. "
        "Above 16.375 Gbps consider GTM."
    ),
    ("gtm", FailureReason.TARGET_BELOW_MINIMUM): (
        "GTM starts at 9.8 Gbps. Use GTY for lower line rates."
    ),
    ("cyclone10gx", FailureReason.TARGET_ABOVE_MAXIMUM): (
        "Try Arria 10 GX (up to 17.4 Gbps) or Stratix 10 L-Tile."
    ),
    ("arria10gx", FailureReason.TARGET_ABOVE_MAXIMUM): (
        "Stratix 10 L-Tile can reach 26 Gbps with special PLL configuration."
    ),
    ("stratix10", FailureReason.TARGET_ABOVE_MAXIMUM): (
        "Stratix 10 L-Tile can reach 26 Gbps with special PLL configuration."
    ),
}


def advice_for(result: SearchResult, family: DeviceFamily) -> list[str]:
    """Return human readable lines explaining an unsuccessful search."""
    reason = result.failure_reason
    if reason is None:
        return []
    unit = family.unit
    if reason is FailureReason.INVALID_TARGET:
        return [f"Enter a positive target ({unit}), got {result.target!r}."]
    if reason is FailureReason.INVALID_REFERENCE_CLOCK:
        return [f"Enter a positive reference clock (MHz), got {result.refclk_mhz!r}."]
    if reason in (
        FailureReason.TARGET_BELOW_MINIMUM,
        FailureReason.TARGET_ABOVE_MAXIMUM,
    ):
        below = reason is FailureReason.TARGET_BELOW_MINIMUM
        side = "below minimum" if below else "above maximum"
        lines = [
            f"{result.target:g} {unit} is {side} for {family.name}. "
            f"Valid range: {result.valid_range} {unit}."
        ]
        text = DEVICE_ADVICE.get((family.device_id, reason))
        if text is None and below:
            text = BELOW_MINIMUM_ADVICE
        if text:
            lines.append(text)
        if result.suggested_device:
            lines.append(f"Suggested device: {result.suggested_device}")
        return lines
    lines = [f"No valid configuration found for {result.target:g} {unit}."]
    lines.extend(str(w) for w in result.warnings)
    lines.extend(f"{i}. {step}" for i, step in enumerate(TROUBLESHOOTING, start=1))
    return lines


def format_results(title: str, inputs: Sequence[Row], results: Sequence[Row]) -> str:
    """Format inputs and results as a markdown document."""
    text = f"## {title}\n\n"
    text += "".join(f"- **{label}:** {value}\n" for label, value in inputs)
    text += "\n### Results\n\n"
    text += "".join(f"- **{label}:** {value}\n" for label, value in results)
    return text + footer()


def format_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Format rows as a markdown table."""
    text = "| " + " | ".join(headers) + " |\n"
    text += "| " + " | ".join("---" for _ in headers) + " |\n"
    for row in rows:
        text += "| " + " | ".join(row) + " |\n"
    return text


def format_search(
    title: str, inputs: Sequence[Row], result: SearchResult, family: DeviceFamily
) -> str:
    """Format a divider search as markdown: inputs, table or advice."""
    text = f"## {title}\n\n"
    text += "".join(f"- **{label}:** {value}\n" for label, value in inputs)
    text += "\n### Results\n\n"
    if not result.candidates:
        text += "".join(f"{line}\n" for line in advice_for(result, family))
        return text + footer()

    names = _param_names(result, family)
    unit = family.unit
    vco_unit = "MHz" if family.unit_divisor == 1 else "GHz"
    headers = ["PLL", *names, f"VCO ({vco_unit})", f"Output ({unit})", "Error (ppm)"]
    rows = []
    for c in result.candidates:
        error = "exact" if c.exact else f"{c.error_ppm:.2f}"
        if not c.pfd_ok:
            error += " (PFD out of range)"
        rows.append(
            [
                c.topology,
                str(c.multiplier),
                str(c.divisor),
                str(c.output_divider),
                f"{c.vco:.4f}",
                f"{c.output:.6g}",
                error,
            ]
        )
    text += format_table(headers, rows)
    text += f"\nShowing {len(result.candidates)} of {result.total_found}\n"
    for warning in result.warnings:
        text += f"\n> {warning}\n"
    return text + footer()


def footer() -> str:
    """Return the export footer."""
    return f"\n---\n*Generated by hwcalc {__version__} at {iso_utc()}*\n"


def _param_names(result: SearchResult, family: DeviceFamily) -> tuple[str, ...]:
    """Return the parameter headers, generic when topologies disagree."""
    used = {c.topology for c in result.candidates}
    names = {t.param_names for t in family.topologies if t.name in used}
    if len(names) == 1:
        return names.pop()
    return ("Mult", "Div", "OutDiv")
