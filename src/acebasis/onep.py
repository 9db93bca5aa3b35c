"""
One-particle basis of the Atomic Cluster Expansion.

Every one-particle function is a product of a radial function, a
spherical harmonic and a species indicator,

    phi_nlmz(R, Z) = delta(Z, z) R_n(|R|) Y_lm(R/|R|).

Its neighbour sum over an environment is the atomic base A_nlmz.

"""

from typing import NamedTuple, Optional, Sequence, Tuple

import numpy as np

from .exceptions import ConfigurationError, DomainError, UnknownSpeciesError
from .radial import ChebyshevRadialBasis
from .sphericalharmonics import SphericalHarmonics, lm_index
from .staticdata import atomic_symbols, to_atomic_number

__author__ = "The acebasis developers"
__date__ = "2024-05-02"


class PSH1pBasisFcn(NamedTuple):
    """
    Descriptor of a one-particle function.  The tuple order (n, l, m, z)
    is the total order used to canonicalize products.
    """
    n: int
    l: int
    m: int
    z: int

    def __str__(self):
        return "({},{},{}|{})".format(self.n, self.l, self.m, self.z)


class BasicPSH1pBasis(object):
    """
    Product of a radial basis and complex spherical harmonics, one copy
    per neighbour species.

    Parameters
    ----------
    rbasis : ChebyshevRadialBasis
        Radial basis; provides the functions n = 1..len(rbasis)
    maxL : int
        Largest angular momentum
    species : sequence of str or int
        Chemical symbols or atomic numbers; the order defines the species
        index used throughout the basis

    """

    def __init__(self, rbasis: ChebyshevRadialBasis, maxL: int,
                 species: Sequence = ("X",)):
        if isinstance(species, (str, int)):
            species = [species]
        zlist = tuple(to_atomic_number(s) for s in species)
        if len(zlist) == 0:
            raise ConfigurationError("The species list is empty.")
        if len(set(zlist)) != len(zlist):
            raise ConfigurationError(
                "Duplicate species in {}".format(list(species)))
        if maxL < 0:
            raise ConfigurationError(
                "maxL must be non-negative, got {}".format(maxL))
        self.J = rbasis
        self.SH = SphericalHarmonics(maxL)
        self.maxL = int(maxL)
        self.zlist = zlist

        # lookup table atomic number -> species index (-1 = unknown)
        self._z2i = np.full(len(atomic_symbols), -1, dtype=np.intp)
        for iz, z in enumerate(self.zlist):
            self._z2i[z] = iz

        self.spec = sorted(
            PSH1pBasisFcn(n, l, m, z)
            for z in self.zlist
            for n in range(1, len(self.J) + 1)
            for l in range(self.maxL + 1)
            for m in range(-l, l + 1))
        self.b2iA = {b: i for i, b in enumerate(self.spec)}
        self._iz = np.array([self._z2i[b.z] for b in self.spec],
                            dtype=np.intp)
        self._in = np.array([b.n - 1 for b in self.spec], dtype=np.intp)
        self._ilm = np.array([lm_index(b.l, b.m) for b in self.spec],
                             dtype=np.intp)

    def __len__(self):
        return len(self.spec)

    def __repr__(self):
        return "BasicPSH1pBasis({!r}, maxL={}, species={})".format(
            self.J, self.maxL, [atomic_symbols[z] for z in self.zlist])

    @property
    def numz(self) -> int:
        return len(self.zlist)

    def z2i(self, z) -> int:
        """Species index of a chemical symbol or atomic number."""
        try:
            z = to_atomic_number(z)
        except (ConfigurationError, TypeError, ValueError):
            raise UnknownSpeciesError(z) from None
        iz = int(self._z2i[z])
        if iz < 0:
            raise UnknownSpeciesError(z)
        return iz

    def i2z(self, iz: int) -> int:
        return self.zlist[iz]

    def degree(self, b: PSH1pBasisFcn, D) -> float:
        return D.degree(b)

    def species_indices(self, Zs) -> np.ndarray:
        """
        Species indices of the neighbour species Zs (atomic numbers or
        chemical symbols).
        """
        Zs = np.asarray(Zs)
        if Zs.ndim != 1:
            raise DomainError(
                "Species must be a one-dimensional sequence, got shape "
                "{}".format(Zs.shape))
        if Zs.dtype.kind in "US":
            return np.array([self.z2i(str(s)) for s in Zs], dtype=np.intp)
        if Zs.dtype.kind not in "iu" and len(Zs) > 0:
            raise DomainError(
                "Species must be atomic numbers or chemical symbols.")
        Zs = Zs.astype(np.intp)
        outside = (Zs < 0) | (Zs >= len(self._z2i))
        if np.any(outside):
            raise UnknownSpeciesError(int(Zs[outside][0]))
        iZs = self._z2i[Zs]
        if np.any(iZs < 0):
            raise UnknownSpeciesError(int(Zs[iZs < 0][0]))
        return iZs

    def check_environment(self, Rs, Zs) -> Tuple[np.ndarray, np.ndarray]:
        """
        Validate a neighbour environment.

        Returns
        -------
        Rs : np.ndarray
            (nR, 3) float64 array of neighbour positions
        iZs : np.ndarray
            (nR,) species indices of the neighbours
        """
        Rs = np.asarray(Rs, dtype=np.float64)
        if Rs.size == 0:
            Rs = Rs.reshape(0, 3)
        if Rs.ndim != 2 or Rs.shape[1] != 3:
            raise DomainError(
                "Neighbour positions must have shape (n, 3), got "
                "{}".format(Rs.shape))
        iZs = self.species_indices(Zs)
        if len(iZs) != len(Rs):
            raise DomainError(
                "Got {} neighbour positions but {} species".format(
                    len(Rs), len(iZs)))
        if not np.all(np.isfinite(Rs)):
            raise DomainError("Neighbour positions must be finite.")
        if np.any(np.linalg.norm(Rs, axis=1) == 0.0):
            raise DomainError("Neighbour at zero distance from the centre.")
        return Rs, iZs

    def alloc_temp(self, nR: int = 0) -> dict:
        return {"A": np.zeros(len(self), dtype=np.complex128)}

    def alloc_temp_d(self, nR: int) -> dict:
        return {"A": np.zeros(len(self), dtype=np.complex128),
                "dA": np.zeros((nR, len(self), 3), dtype=np.complex128)}

    def _radial_angular(self, Rs, iZs, gradients):
        r = np.linalg.norm(Rs, axis=1)
        mask = iZs[:, np.newaxis] == self._iz[np.newaxis, :]
        if not gradients:
            Rn = self.J.evaluate(r)[:, self._in] * mask
            Ylm = self.SH.evaluate(Rs)[:, self._ilm]
            return Rn, Ylm
        R, dR = self.J.evaluate_d(r)
        Y, dY = self.SH.evaluate_d(Rs)
        Rn = R[:, self._in] * mask
        dRn = dR[:, self._in] * mask
        return Rn, dRn, Y[:, self._ilm], dY[:, self._ilm, :], r

    def evaluate(self, Rs: np.ndarray, iZs: np.ndarray,
                 A: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Atomic base A[k] = sum_j phi_k(Rs[j], Zs[j]).

        Parameters
        ----------
        Rs : np.ndarray
            (nR, 3) neighbour positions relative to the centre
        iZs : np.ndarray
            (nR,) species indices of the neighbours
        A : np.ndarray, optional
            Output buffer of length len(self)

        Returns
        -------
        np.ndarray
            Complex array of length len(self)
        """
        if A is None:
            A = np.zeros(len(self), dtype=np.complex128)
        if len(Rs) == 0:
            A[:] = 0.0
            return A
        Rn, Ylm = self._radial_angular(Rs, iZs, gradients=False)
        np.sum(Rn * Ylm, axis=0, out=A)
        return A

    def evaluate_d(self, Rs: np.ndarray, iZs: np.ndarray,
                   A: Optional[np.ndarray] = None,
                   dA: Optional[np.ndarray] = None
                   ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Atomic base and its derivatives with respect to the neighbours.

        Since neighbour j only enters through phi_k(Rs[j]), the gradient
        of A[k] with respect to Rs[j] is the gradient of phi_k(Rs[j]).

        Returns
        -------
        A : np.ndarray
            Complex array of length len(self)
        dA : np.ndarray
            Complex array of shape (nR, len(self), 3)
        """
        nR = len(Rs)
        if A is None:
            A = np.zeros(len(self), dtype=np.complex128)
        if dA is None:
            dA = np.zeros((nR, len(self), 3), dtype=np.complex128)
        if nR == 0:
            A[:] = 0.0
            return A, dA
        Rn, dRn, Ylm, dYlm, r = self._radial_angular(Rs, iZs, gradients=True)
        np.sum(Rn * Ylm, axis=0, out=A)
        u = Rs / r[:, np.newaxis]
        # d/dR [R_n(|R|) Y_lm(R)] = R_n'(|R|) u Y_lm + R_n dY_lm/dR
        np.multiply((dRn * Ylm)[:, :, np.newaxis], u[:, np.newaxis, :],
                    out=dA)
        dA += Rn[:, :, np.newaxis] * dYlm
        return A, dA
