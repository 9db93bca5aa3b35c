"""
Degree functionals used to truncate the basis.

A degree assigns a non-negative complexity to every one-particle
function; the degree of a product of one-particle functions is the sum
of the degrees of its factors.  Only products whose degree does not
exceed ``maxdeg`` enter the basis.

"""

import math
from numbers import Real
from typing import Dict, Mapping, Union

from .exceptions import ConfigurationError

__author__ = "The acebasis developers"
__date__ = "2024-05-02"

MaxDegree = Union[Real, Mapping[int, Real]]


class SparsePSHDegree(object):
    """
    Degree ``n + wL * l`` of a one-particle function with radial index
    ``n >= 1`` and angular momentum ``l``.

    Parameters
    ----------
    wL : float
        Weight of the angular momentum relative to the radial index.
        Values above 1 favour radial over angular resolution.

    """

    def __init__(self, wL: float = 1.5):
        if not isinstance(wL, Real) or not wL > 0:
            raise ConfigurationError(
                "wL must be a positive number, got {}".format(wL))
        self.wL = float(wL)

    def __repr__(self):
        return "SparsePSHDegree(wL={})".format(self.wL)

    def __eq__(self, other):
        return isinstance(other, SparsePSHDegree) and other.wL == self.wL

    def degree(self, b) -> float:
        """Degree of a single one-particle function."""
        return b.n + self.wL * b.l

    def tuple_degree(self, oneps) -> float:
        """Degree of a product of one-particle functions."""
        return sum(self.degree(b) for b in oneps)

    def get_maxn(self, maxdeg: MaxDegree) -> int:
        """Largest radial index that can occur within ``maxdeg``."""
        return int(math.floor(_largest(maxdeg)))

    def get_maxL(self, maxdeg: MaxDegree) -> int:
        """Largest angular momentum that can occur within ``maxdeg``."""
        return max(0, int(math.floor((_largest(maxdeg) - 1) / self.wL)))


def maxdeg_per_order(maxdeg: MaxDegree, N: int) -> Dict[int, float]:
    """
    Resolve a degree bound into one bound per correlation order.

    Arguments:
      maxdeg   a single number used for all orders, or a mapping
               {order: bound} that covers every order 1..N
      N        maximum correlation order

    Returns:
      dict {order: bound} for orders 0..N; order 0 has bound 0

    """
    if isinstance(maxdeg, Mapping):
        missing = [n for n in range(1, N + 1) if n not in maxdeg]
        if missing:
            raise ConfigurationError(
                "No degree bound given for correlation order(s) "
                "{}".format(missing))
        bounds = {n: _check_bound(maxdeg[n]) for n in range(1, N + 1)}
    else:
        bound = _check_bound(maxdeg)
        bounds = {n: bound for n in range(1, N + 1)}
    bounds[0] = 0.0
    return bounds


def _check_bound(value) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ConfigurationError(
            "Degree bound must be a real number, got {!r}".format(value))
    if not math.isfinite(value) or value < 0:
        raise ConfigurationError(
            "Degree bound must be finite and non-negative, "
            "got {}".format(value))
    return float(value)


def _largest(maxdeg: MaxDegree) -> float:
    if isinstance(maxdeg, Mapping):
        if len(maxdeg) == 0:
            raise ConfigurationError("Empty mapping of degree bounds.")
        return max(_check_bound(v) for v in maxdeg.values())
    return _check_bound(maxdeg)
