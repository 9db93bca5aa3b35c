"""
Rotation- and permutation-invariant (RPI) basis.

The RPI basis B is a sparse linear projection of the permutation
invariant basis AA,

    B[Bz0inds[iz0]] = A2Bmaps[iz0] @ AA(iz0),

with one projection per centre species.  The projections are assembled
once from coupling coefficients; evaluation only reads them.

"""

from typing import List, Optional, Tuple

import numpy as np
import pandas as pd
from scipy import sparse

from .coupling import Rot3DCoeffs
from .exceptions import ConfigurationError, DomainError
from .onep import PSH1pBasisFcn
from .pibasis import PIBasis, PIBasisFcn
from .staticdata import atomic_symbols

__author__ = "The acebasis developers"
__date__ = "2024-05-02"


class RPIBasis(object):
    """
    Rotation- and permutation-invariant ACE basis.

    Parameters
    ----------
    basis1p : BasicPSH1pBasis
        One-particle basis
    N : int
        Maximum correlation order
    D : SparsePSHDegree
        Degree functional
    maxdeg : float or dict
        Degree bound, or one bound per correlation order
    rotc : Rot3DCoeffs, optional
        Coupling-coefficient oracle; a new one is created if omitted.
        Passing the same instance to several constructions reuses its
        caches.

    Attributes
    ----------
    pibasis : PIBasis
        The underlying permutation-invariant basis
    A2Bmaps : tuple of scipy.sparse.csr_matrix
        Projection AA -> B for each centre species
    Bz0inds : tuple of range
        Slice of the combined B vector for each centre species

    Examples
    --------
    >>> basis = RPIBasis(basis1p, 3, SparsePSHDegree(), 8)
    >>> B = basis.evaluate(Rs, Zs, z0)
    """

    def __init__(self, basis1p, N: int, D, maxdeg,
                 rotc: Optional[Rot3DCoeffs] = None):
        self.pibasis = PIBasis(basis1p, N, D, maxdeg, filter=rpi_filter)

        if rotc is None:
            rotc = Rot3DCoeffs()
        A2Bmaps = []
        Bspecs = []
        for iz0 in range(self.pibasis.numz):
            A2B, specs = _rpi_A2B_matrix(rotc, self.pibasis, iz0)
            A2Bmaps.append(A2B)
            Bspecs.append(specs)
        self.A2Bmaps = tuple(A2Bmaps)
        self._Bspecs = tuple(Bspecs)

        # the slices of the combined B vector the A2Bmaps map to
        Bz0inds = []
        idx0 = 0
        for A2B in self.A2Bmaps:
            Bz0inds.append(range(idx0, idx0 + A2B.shape[0]))
            idx0 += A2B.shape[0]
        self.Bz0inds = tuple(Bz0inds)

    def __len__(self):
        return sum(self.length(iz0) for iz0 in range(self.numz))

    def __repr__(self):
        return "RPIBasis(N={}, maxdeg={}, species={}, length={})".format(
            self.pibasis.N, self.pibasis.maxdeg,
            [atomic_symbols[z] for z in self.species], len(self))

    def length(self, iz0: int) -> int:
        """Number of basis functions of the centre species index iz0."""
        return self.A2Bmaps[iz0].shape[0]

    def length_z(self, z0) -> int:
        """Number of basis functions of the centre species z0."""
        return self.length(self.pibasis.z2i(z0))

    @property
    def numz(self) -> int:
        return self.pibasis.numz

    @property
    def species(self) -> Tuple[int, ...]:
        return self.pibasis.zlist

    @property
    def dtype(self):
        return np.float64

    def get_basis_spec(self, iz0: int, i: int) -> PIBasisFcn:
        """
        The (z, n, l) block, as its all-m-zero PI function, from which
        basis function i of species index iz0 was built.
        """
        return self._Bspecs[iz0][i]

    def basis_table(self) -> pd.DataFrame:
        """
        Table of all basis functions in the order of the combined B
        vector.

        Returns
        -------
        pd.DataFrame
            Columns: index, z0, species, order, zz, nn, ll, degree
        """
        rows = []
        for iz0, inds in enumerate(self.Bz0inds):
            for i, idx in enumerate(inds):
                pib = self._Bspecs[iz0][i]
                rows.append({
                    "index": idx,
                    "z0": pib.z0,
                    "species": atomic_symbols[pib.z0],
                    "order": pib.order,
                    "zz": tuple(b.z for b in pib.oneps),
                    "nn": tuple(b.n for b in pib.oneps),
                    "ll": tuple(b.l for b in pib.oneps),
                    "degree": self.pibasis.degree(pib),
                })
        columns = ["index", "z0", "species", "order", "zz", "nn", "ll",
                   "degree"]
        return pd.DataFrame(rows, columns=columns)

    # ------------------------------------------------------------------
    #    Evaluation code
    # ------------------------------------------------------------------

    def alloc_B(self) -> np.ndarray:
        return np.zeros(len(self), dtype=np.float64)

    def alloc_dB(self, nR: int) -> np.ndarray:
        return np.zeros((len(self), nR, 3), dtype=np.float64)

    def alloc_temp(self, nR: int = 0) -> dict:
        """
        Scratch buffers for evaluate().  Every thread evaluating the basis
        concurrently needs its own set.
        """
        AA = self.pibasis.alloc_B()
        return {"AA": AA,
                "AAr": np.zeros(len(AA), dtype=np.float64),
                "tmp_pibasis": self.pibasis.alloc_temp(nR)}

    def alloc_temp_d(self, nR: int) -> dict:
        """
        Scratch buffers for evaluate_d() for environments of up to nR
        neighbours.  Every thread needs its own set.
        """
        dAAj = self.pibasis.alloc_dB()
        return {"dAAj": dAAj,
                "dAAr": np.zeros(dAAj.shape, dtype=np.float64),
                "tmpd_pibasis": self.pibasis.alloc_temp_d(nR)}

    def evaluate(self, Rs, Zs, z0, B: Optional[np.ndarray] = None,
                 tmp: Optional[dict] = None) -> np.ndarray:
        """
        Evaluate the basis for one atomic environment.

        Parameters
        ----------
        Rs : array_like
            (nR, 3) neighbour positions relative to the centre atom
        Zs : array_like
            (nR,) neighbour species (atomic numbers or chemical symbols)
        z0 : int or str
            Centre species
        B : np.ndarray, optional
            Output buffer of length len(self)
        tmp : dict, optional
            Scratch buffers from alloc_temp()

        Returns
        -------
        np.ndarray
            B; entries outside the block of z0 are zero

        Raises
        ------
        DomainError
            If z0 or a neighbour species is not part of the basis, or if
            the positions and species do not match
        """
        iz0 = self.pibasis.z2i(z0)
        Rs, iZs = self.pibasis.basis1p.check_environment(Rs, Zs)
        if B is None:
            B = self.alloc_B()
        elif B.shape != (len(self),):
            raise DomainError("B must have shape ({},), got {}".format(
                len(self), B.shape))
        if tmp is None:
            tmp = self.alloc_temp(len(Rs))
        AA = self.pibasis.evaluate(Rs, iZs, iz0, AA=tmp["AA"],
                                   tmp=tmp["tmp_pibasis"])
        inds = self.Bz0inds[iz0]
        B[:] = 0.0
        AAr = tmp["AAr"][:len(AA)]
        np.copyto(AAr, AA.real)
        B[inds.start:inds.stop] = self.A2Bmaps[iz0] @ AAr
        return B

    def evaluate_d(self, Rs, Zs, z0, dB: Optional[np.ndarray] = None,
                   tmpd: Optional[dict] = None) -> np.ndarray:
        """
        Gradient of the basis with respect to the neighbour positions.

        Parameters are as for evaluate(); tmpd comes from alloc_temp_d().

        Returns
        -------
        np.ndarray
            dB of shape (len(self), nR, 3); dB[i, j, :] is the gradient of
            basis function i with respect to Rs[j]
        """
        iz0 = self.pibasis.z2i(z0)
        Rs, iZs = self.pibasis.basis1p.check_environment(Rs, Zs)
        nR = len(Rs)
        if dB is None:
            dB = self.alloc_dB(nR)
        elif dB.shape != (len(self), nR, 3):
            raise DomainError("dB must have shape {}, got {}".format(
                (len(self), nR, 3), dB.shape))
        if tmpd is None:
            tmpd = self.alloc_temp_d(nR)
        A2B = self.A2Bmaps[iz0]
        inds = self.Bz0inds[iz0]
        dB[:] = 0.0
        self.pibasis.precompute_grads(Rs, iZs, iz0, tmpd["tmpd_pibasis"])
        dAAr = tmpd["dAAr"][:self.pibasis.length(iz0)]
        for j in range(nR):
            # dAA / dR_j
            dAAj = self.pibasis.evaluate_d_Rj(
                tmpd["dAAj"], tmpd["tmpd_pibasis"], iz0, j)
            np.copyto(dAAr, dAAj.real)
            dB[inds.start:inds.stop, j, :] = A2B @ dAAr
        return dB


# ------------------------------------------------------------------------
#    Basis construction code
# ------------------------------------------------------------------------


def rpi_filter(pib: PIBasisFcn) -> bool:
    """
    PI functions that can contribute to a rotation invariant: no constant,
    only l = 0 at order 1, and at higher order an even sum of the l and a
    vanishing sum of the m.
    """
    if pib.order == 0:
        return False
    if pib.order == 1:
        return pib.oneps[0].l == 0
    return (sum(b.l for b in pib.oneps) % 2 == 0
            and sum(b.m for b in pib.oneps) == 0)


def _rpi_A2B_matrix(rotc: Rot3DCoeffs, pibasis: PIBasis, iz0: int
                    ) -> Tuple[sparse.csr_matrix, List[PIBasisFcn]]:
    """
    Projection from the PI basis of species index iz0 to its RPI basis.

    Returns
    -------
    A2B : scipy.sparse.csr_matrix
        Shape (number of RPI functions, pibasis.length(iz0))
    Bspecs : list of PIBasisFcn
        For every row, the all-m-zero PI function of its (z, n, l) block
    """
    inner = pibasis.inner[iz0]
    # (row, col) -> value
    entries = {}
    Bspecs = []
    # number of RPI functions so far = number of rows
    idxB = 0
    for pib in inner.specs:
        # each (z, n, l) block is handled once, through its all-m-zero
        # member
        if any(b.m != 0 for b in pib.oneps):
            continue
        U, bcols = _rpi_coupling_coeffs(rotc, pib)
        for irow in range(U.shape[0]):
            for icol, bcol in enumerate(bcols):
                # bcol is stored in canonical order, so permutations of
                # the same m-tuple share one AA index and their
                # coefficients are summed
                try:
                    idxAA = inner.b2iAA[bcol]
                except KeyError:
                    raise ConfigurationError(
                        "Coupling column {} of {} is not part of the PI "
                        "basis; inconsistent one-particle basis".format(
                            bcol, pib)) from None
                key = (idxB, idxAA)
                entries[key] = entries.get(key, 0.0) + U[irow, icol]
            Bspecs.append(pib)
            idxB += 1

    rows = np.fromiter((k[0] for k in entries), dtype=np.intp,
                       count=len(entries))
    cols = np.fromiter((k[1] for k in entries), dtype=np.intp,
                       count=len(entries))
    vals = np.fromiter(entries.values(), dtype=np.float64,
                       count=len(entries))
    A2B = sparse.csr_matrix((vals, (rows, cols)),
                            shape=(idxB, len(inner)))
    A2B.eliminate_zeros()
    return A2B, Bspecs


def _rpi_coupling_coeffs(rotc: Rot3DCoeffs, pib: PIBasisFcn
                         ) -> Tuple[np.ndarray, List[PIBasisFcn]]:
    """
    Coupling coefficients of the (z, n, l) block of pib, with the
    columns translated into PI basis functions.
    """
    zz = tuple(b.z for b in pib.oneps)
    nn = tuple(b.n for b in pib.oneps)
    ll = tuple(b.l for b in pib.oneps)
    U, Ms = rotc.rpi_basis(zz, nn, ll)
    bcols = [PIBasisFcn(pib.z0, tuple(PSH1pBasisFcn(n, l, m, z)
                                      for n, l, m, z in zip(nn, ll, mm, zz)))
             for mm in Ms]
    return U, bcols
