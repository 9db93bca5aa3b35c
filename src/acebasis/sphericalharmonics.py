"""
Complex spherical harmonics and their Cartesian gradients.

The harmonics are orthonormal on the unit sphere and include the
Condon-Shortley phase.  They are written as polynomials of the unit
vector u = R/|R|,

    Y_lm(u) = (-1)^m N_lm Q_lm(u_z) (u_x + i u_y)^m,    m >= 0
    Y_l,-m  = (-1)^m conj(Y_lm)

where Q_lm is the m-th derivative of the Legendre polynomial P_l.  This
form has no coordinate singularity at the poles, so gradients are well
defined for every non-zero R.

Harmonics are stored in a flat array with index  l*l + l + m.

"""

import math
from typing import Tuple

import numpy as np
from numpy.polynomial import legendre
from numpy.polynomial import polynomial

__author__ = "The acebasis developers"
__date__ = "2024-05-02"


def lm_index(l: int, m: int) -> int:
    return l * l + l + m


class SphericalHarmonics(object):
    """
    Complex spherical harmonics up to angular momentum ``maxL``.

    Parameters
    ----------
    maxL : int
        Largest angular momentum

    Examples
    --------
    >>> sh = SphericalHarmonics(maxL=3)
    >>> Y = sh.evaluate(np.array([[0.0, 0.0, 1.0]]))  # Shape: (1, 16)
    """

    def __init__(self, maxL: int):
        if maxL < 0:
            raise ValueError("maxL must be non-negative, got {}".format(maxL))
        self.maxL = int(maxL)
        # power-series coefficients of Q_lm and dQ_lm/dz for m >= 0
        self._Q = {}
        self._dQ = {}
        self._norm = {}
        for l in range(self.maxL + 1):
            Pl = legendre.leg2poly([0] * l + [1])
            for m in range(l + 1):
                Q = polynomial.polyder(Pl, m) if m > 0 else Pl
                self._Q[l, m] = Q
                self._dQ[l, m] = polynomial.polyder(Q)
                self._norm[l, m] = (-1)**m * math.sqrt(
                    (2 * l + 1) / (4 * math.pi)
                    * math.factorial(l - m) / math.factorial(l + m))

    def __len__(self):
        return (self.maxL + 1)**2

    def __repr__(self):
        return "SphericalHarmonics(maxL={})".format(self.maxL)

    def evaluate(self, R: np.ndarray) -> np.ndarray:
        """
        Spherical harmonics of the directions of the vectors R.

        Parameters
        ----------
        R : np.ndarray
            Shape (n, 3); vectors must be non-zero

        Returns
        -------
        np.ndarray
            Complex array of shape (n, (maxL+1)**2)
        """
        Y, _ = self._evaluate(R, gradients=False)
        return Y

    def evaluate_d(self, R: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Spherical harmonics and their gradients with respect to R.

        Returns
        -------
        Y : np.ndarray
            Complex array of shape (n, (maxL+1)**2)
        dY : np.ndarray
            Complex array of shape (n, (maxL+1)**2, 3); dY[i, k, a] is the
            derivative of Y[i, k] with respect to R[i, a]
        """
        return self._evaluate(R, gradients=True)

    def _evaluate(self, R, gradients):
        R = np.asarray(R, dtype=np.float64).reshape(-1, 3)
        r = np.linalg.norm(R, axis=1)
        u = R / r[:, np.newaxis]
        uz = u[:, 2]
        w = u[:, 0] + 1j * u[:, 1]

        nR = len(R)
        Y = np.zeros((nR, len(self)), dtype=np.complex128)
        dYu = np.zeros((nR, len(self), 3), dtype=np.complex128)

        # powers w^m, m = 0..maxL
        wpow = np.ones((nR, self.maxL + 1), dtype=np.complex128)
        for m in range(1, self.maxL + 1):
            wpow[:, m] = wpow[:, m - 1] * w

        for l in range(self.maxL + 1):
            for m in range(l + 1):
                c = self._norm[l, m]
                Q = polynomial.polyval(uz, self._Q[l, m])
                Y[:, lm_index(l, m)] = c * Q * wpow[:, m]
                if gradients:
                    dQ = polynomial.polyval(uz, self._dQ[l, m])
                    if m > 0:
                        dw = c * Q * m * wpow[:, m - 1]
                        dYu[:, lm_index(l, m), 0] = dw
                        dYu[:, lm_index(l, m), 1] = 1j * dw
                    dYu[:, lm_index(l, m), 2] = c * dQ * wpow[:, m]
                if m > 0:
                    sign = (-1)**m
                    Y[:, lm_index(l, -m)] = sign * np.conj(
                        Y[:, lm_index(l, m)])
                    if gradients:
                        dYu[:, lm_index(l, -m), :] = sign * np.conj(
                            dYu[:, lm_index(l, m), :])

        if not gradients:
            return Y, None

        # chain rule through u = R/|R|:  dY/dR = (I - u u^T) dY/du / |R|
        proj = np.einsum('ika,ia->ik', dYu, u)
        dY = (dYu - proj[:, :, np.newaxis] * u[:, np.newaxis, :]
              ) / r[:, np.newaxis, np.newaxis]
        return Y, dY
