"""
Chebyshev radial basis with polynomial envelopes.

The radial functions are Chebyshev polynomials of the first kind in a
rescaled distance, multiplied by an envelope that vanishes at the outer
(and optionally the inner) cutoff:

    R_n(r) = T_{n-1}(x) * (1 - x)^pcut * (1 + x)^pin,    n = 1..maxn
    x = (2*r - rin - rcut) / (rcut - rin)

The polynomials are evaluated with the explicit cosine form
T_k(x) = cos(k * arccos(x)).

"""

from typing import Tuple

import numpy as np

from .exceptions import ConfigurationError

__author__ = "The acebasis developers"
__date__ = "2024-05-02"


class ChebyshevPolynomials(object):
    """
    Vectorized Chebyshev polynomial evaluation using the cosine form.

    Parameters
    ----------
    max_order : int
        Maximum Chebyshev polynomial order to compute
    r_min : float
        Distance mapped to x = -1
    r_max : float
        Distance mapped to x = +1

    Examples
    --------
    >>> cheb = ChebyshevPolynomials(max_order=5, r_min=0.5, r_max=4.0)
    >>> T = cheb.evaluate(np.array([1.0, 2.0, 3.0]))  # Shape: (3, 6)
    """

    def __init__(self, max_order: int, r_min: float, r_max: float):
        self.max_order = max_order
        self.r_min = r_min
        self.r_max = r_max
        self.orders = np.arange(max_order + 1, dtype=np.float64)

    def rescale_distances(self, r: np.ndarray) -> np.ndarray:
        """
        Rescale distances from [r_min, r_max] to [-1, 1].

        Values outside the interval are clamped to [-1, 1].
        """
        x = (2.0 * r - self.r_min - self.r_max) / (self.r_max - self.r_min)
        return np.clip(x, -1.0, 1.0)

    def evaluate(self, r: np.ndarray) -> np.ndarray:
        """
        Evaluate the polynomials, shape (len(r), max_order + 1).
        """
        arccos_x = np.arccos(self.rescale_distances(r))
        return np.cos(self.orders * arccos_x[:, np.newaxis])

    def evaluate_with_derivatives(
            self, r: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Evaluate the polynomials and their derivatives with respect to r.

        Uses dT_n/dx = n * U_{n-1}(x) with the second-kind polynomials
        U_n(x) = sin((n+1)*arccos(x)) / sqrt(1-x^2).  Where the distance
        was clamped, the derivative is zero.
        """
        x = (2.0 * r - self.r_min - self.r_max) / (self.r_max - self.r_min)
        inside = np.abs(x) < 1.0
        x = np.clip(x, -1.0, 1.0)
        arccos_x = np.arccos(x)

        T = np.cos(self.orders * arccos_x[:, np.newaxis])

        sqrt_term = np.sqrt(np.clip(1.0 - x**2, 1e-10, None))
        U = np.sin((self.orders + 1) * arccos_x[:, np.newaxis]
                   ) / sqrt_term[:, np.newaxis]

        dT_dx = np.zeros_like(T)
        if self.max_order >= 1:
            dT_dx[:, 1:] = self.orders[1:] * U[:, :-1]

        dx_dr = np.where(inside, 2.0 / (self.r_max - self.r_min), 0.0)
        return T, dT_dx * dx_dr[:, np.newaxis]


class ChebyshevRadialBasis(object):
    """
    Radial basis R_n(r), n = 1..maxn, with envelope powers pcut and pin.

    Parameters
    ----------
    maxn : int
        Number of radial functions
    rcut : float
        Outer cutoff radius; all functions vanish for r >= rcut
    rin : float, optional
        Inner radius (default: 0.0).  With pin > 0 all functions vanish
        for r <= rin; with pin = 0 they are constant below rin.
    pcut : int, optional
        Power of the outer envelope (default: 2)
    pin : int, optional
        Power of the inner envelope (default: 2)

    Examples
    --------
    >>> rb = ChebyshevRadialBasis(maxn=6, rcut=5.0, rin=1.0)
    >>> R = rb.evaluate(np.array([1.5, 2.5]))  # Shape: (2, 6)
    """

    def __init__(self, maxn: int, rcut: float, rin: float = 0.0,
                 pcut: int = 2, pin: int = 2):
        if maxn < 1:
            raise ConfigurationError(
                "maxn must be at least 1, got {}".format(maxn))
        if not 0.0 <= rin < rcut:
            raise ConfigurationError(
                "Radii must satisfy 0 <= rin < rcut, got rin={}, "
                "rcut={}".format(rin, rcut))
        if pcut < 0 or pin < 0:
            raise ConfigurationError(
                "Envelope powers must be non-negative, got pcut={}, "
                "pin={}".format(pcut, pin))
        self.maxn = int(maxn)
        self.rcut = float(rcut)
        self.rin = float(rin)
        self.pcut = pcut
        self.pin = pin
        self.cheb = ChebyshevPolynomials(
            max_order=self.maxn - 1, r_min=self.rin, r_max=self.rcut)

    def __len__(self):
        return self.maxn

    def __repr__(self):
        return ("ChebyshevRadialBasis(maxn={}, rcut={}, rin={}, pcut={}, "
                "pin={})".format(self.maxn, self.rcut, self.rin,
                                 self.pcut, self.pin))

    def envelope(self, r: np.ndarray) -> np.ndarray:
        x = self.cheb.rescale_distances(r)
        fc = (1.0 - x)**self.pcut * (1.0 + x)**self.pin
        return np.where(r < self.rcut, fc, 0.0)

    def envelope_derivative(self, r: np.ndarray) -> np.ndarray:
        x = (2.0 * r - self.rin - self.rcut) / (self.rcut - self.rin)
        inside = np.abs(x) < 1.0
        x = np.clip(x, -1.0, 1.0)
        p, q = self.pcut, self.pin
        dfc_dx = np.zeros_like(x)
        if p > 0:
            dfc_dx -= p * (1.0 - x)**(p - 1) * (1.0 + x)**q
        if q > 0:
            dfc_dx += q * (1.0 - x)**p * (1.0 + x)**(q - 1)
        return np.where(inside, dfc_dx * 2.0 / (self.rcut - self.rin), 0.0)

    def evaluate(self, r: np.ndarray) -> np.ndarray:
        """
        Radial functions for the distances r, shape (len(r), maxn).
        """
        r = np.asarray(r, dtype=np.float64)
        T = self.cheb.evaluate(r)
        return T * self.envelope(r)[:, np.newaxis]

    def evaluate_d(self, r: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Radial functions and their derivatives with respect to r.

        Uses the product rule d(T*fc)/dr = dT/dr * fc + T * dfc/dr.

        Returns
        -------
        R : np.ndarray
            Shape (len(r), maxn)
        dR : np.ndarray
            Shape (len(r), maxn)
        """
        r = np.asarray(r, dtype=np.float64)
        T, dT_dr = self.cheb.evaluate_with_derivatives(r)
        fc = self.envelope(r)
        dfc_dr = self.envelope_derivative(r)
        R = T * fc[:, np.newaxis]
        dR = dT_dr * fc[:, np.newaxis] + T * dfc_dr[:, np.newaxis]
        return R, dR
