"""Warning categories for numerical diagnostics.

Numerical trouble (an Euler step that is too large, a dominant eigenvalue
that is degenerate or complex, probability mass lost to the truncation box)
is reported through :mod:`warnings` rather than raised, since the caller can
usually recover by choosing a smaller ``dt`` or a larger ``max_num``.

Escalate them in tests or scripts with::

    warnings.simplefilter("error", NumericalStabilityWarning)
"""

from __future__ import annotations


class NumericalStabilityWarning(RuntimeWarning):
    """Euler stepping or eigen-analysis produced a numerically suspect result."""


class TruncationWarning(RuntimeWarning):
    """A significant amount of probability mass lies outside the truncated state space."""
