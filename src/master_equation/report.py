"""Human-readable reporting utilities.

Plain-text tables for steady states, trajectories and generator checks.
Nothing here is required for the numerics; it is strictly presentation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from .dynamics import Trajectory


@dataclass
class ReportOptions:
    """Tunable knobs for report verbosity."""

    precision: int = 4
    every: int = 1
    max_rows: int = 50


def _names(n: int, species_names: Optional[Sequence[str]]) -> List[str]:
    if species_names is None:
        return [f"X{i+1}" for i in range(n)]
    return [str(s) for s in species_names]


def _fmt(value: float, precision: int) -> str:
    return f"{float(value):.{int(precision)}g}"


def format_steady_state(
    means: Sequence[float],
    species_names: Optional[Sequence[str]] = None,
    *,
    options: Optional[ReportOptions] = None,
) -> str:
    """Format stationary means as 'name = value' lines."""
    opt = options or ReportOptions()
    means = np.asarray(means, dtype=float)
    names = _names(means.size, species_names)
    width = max(len(s) for s in names)
    lines = ["Stationary mean copy numbers:"]
    for name, m in zip(names, means):
        lines.append(f"  {name:<{width}} = {_fmt(m, opt.precision)}")
    return "\n".join(lines)


def format_trajectory(trajectory: Trajectory, *, options: Optional[ReportOptions] = None) -> str:
    """Format a trajectory as a whitespace-aligned table, one row per reported time point."""
    opt = options or ReportOptions()
    names = _names(trajectory.n_species, trajectory.species_names)
    header = ["t"] + names

    rows: List[List[str]] = []
    idx = list(range(0, trajectory.time_grid.size, max(1, int(opt.every))))
    last = trajectory.time_grid.size - 1
    if idx[-1] != last:
        idx.append(last)
    for i in idx:
        row = [_fmt(trajectory.time_grid[i], opt.precision)]
        row += [_fmt(v, opt.precision) for v in trajectory.means[:, i]]
        rows.append(row)

    skipped = 0
    if len(rows) > opt.max_rows:
        skipped = len(rows) - opt.max_rows
        rows = rows[: opt.max_rows - 1] + rows[-1:]

    widths = [max(len(r[c]) for r in [header] + rows) for c in range(len(header))]
    lines = ["  ".join(h.rjust(w) for h, w in zip(header, widths))]
    for r in rows:
        lines.append("  ".join(v.rjust(w) for v, w in zip(r, widths)))
    if skipped:
        lines.insert(-1, f"... ({skipped} rows omitted)")
    return "\n".join(lines)


def format_generator_check(check: Dict[str, Any]) -> str:
    """Format the dict returned by `check_generator`."""
    status = "valid" if check.get("is_valid") else "INVALID"
    return (
        f"Generator {status}: max |column sum| = {check['column_sum_error']:.3e}, "
        f"min off-diagonal = {check['min_offdiagonal']:.3e}"
    )
