"""
Permutation-invariant (PI) basis.

A PI basis function of correlation order N is the product

    AA_{k_1..k_N} = A_{k_1} * ... * A_{k_N}

of N atomic base functions A_k (neighbour sums of one-particle
functions).  It is symmetric in its factors, so it is identified by the
unordered tuple of one-particle descriptors.  Tuples are stored in
canonical (sorted) form so that permutation-equivalent tuples coincide.

"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from .degree import maxdeg_per_order
from .exceptions import ConfigurationError, DomainError
from .onep import PSH1pBasisFcn

__author__ = "The acebasis developers"
__date__ = "2024-05-02"

# slack for floating point degree comparisons
DEGREE_TOL = 1.0e-10


@dataclass(frozen=True)
class PIBasisFcn:
    """
    Permutation-invariant product of one-particle functions around a
    centre of species z0.  The factors are always kept sorted.
    """

    z0: int
    oneps: Tuple[PSH1pBasisFcn, ...]

    def __post_init__(self):
        object.__setattr__(self, "oneps", tuple(sorted(self.oneps)))

    @property
    def order(self) -> int:
        return len(self.oneps)

    def __str__(self):
        return "PIBasisFcn[{}]({})".format(
            self.z0, ",".join(str(b) for b in self.oneps))


class InnerPIBasis(object):
    """
    PI basis functions of a single centre species.

    Attributes
    ----------
    z0 : int
        Centre species (atomic number)
    specs : tuple of PIBasisFcn
        The basis functions; position = AA-index
    b2iAA : dict
        Inverse map PIBasisFcn -> AA-index
    blocks : list of (order, start, stop, iA)
        Contiguous ranges of functions of equal order together with the
        (stop - start, order) array of one-particle indices of the factors
    """

    def __init__(self, z0: int, specs: List[PIBasisFcn],
                 b2iA: Dict[PSH1pBasisFcn, int]):
        self.z0 = z0
        self.specs = tuple(specs)
        self.b2iAA = {b: i for i, b in enumerate(self.specs)}
        if len(self.b2iAA) != len(self.specs):
            raise ConfigurationError(
                "Duplicate PI basis functions for species {}".format(z0))
        self.blocks = []
        start = 0
        while start < len(self.specs):
            order = self.specs[start].order
            stop = start
            while (stop < len(self.specs)
                   and self.specs[stop].order == order):
                stop += 1
            iA = np.array([[b2iA[b] for b in pib.oneps]
                           for pib in self.specs[start:stop]],
                          dtype=np.intp).reshape(stop - start, order)
            self.blocks.append((order, start, stop, iA))
            start = stop

    def __len__(self):
        return len(self.specs)


class PIBasis(object):
    """
    Permutation-invariant basis up to correlation order N.

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
    filter : callable, optional
        Predicate PIBasisFcn -> bool; only functions for which it returns
        True are kept (default: keep all)

    """

    def __init__(self, basis1p, N: int, D, maxdeg,
                 filter: Optional[Callable[[PIBasisFcn], bool]] = None):
        if isinstance(N, bool) or not isinstance(N, (int, np.integer)) \
                or N < 0:
            raise ConfigurationError(
                "Correlation order must be a non-negative integer, "
                "got {!r}".format(N))
        self.basis1p = basis1p
        self.N = int(N)
        self.D = D
        self.maxdeg = maxdeg
        bounds = maxdeg_per_order(maxdeg, self.N)

        tuples = _enumerate_tuples(
            [D.degree(b) for b in basis1p.spec], self.N, bounds)

        self.inner = []
        for z0 in basis1p.zlist:
            specs = []
            for t in tuples:
                pib = PIBasisFcn(z0, tuple(basis1p.spec[i] for i in t))
                if filter is None or filter(pib):
                    specs.append(pib)
            self.inner.append(InnerPIBasis(z0, specs, basis1p.b2iA))
        self.inner = tuple(self.inner)

    def __len__(self):
        return sum(len(inner) for inner in self.inner)

    def __repr__(self):
        return "PIBasis(N={}, maxdeg={}, numz={}, length={})".format(
            self.N, self.maxdeg, self.numz, len(self))

    def length(self, iz0: int) -> int:
        return len(self.inner[iz0])

    @property
    def numz(self) -> int:
        return self.basis1p.numz

    @property
    def zlist(self) -> Tuple[int, ...]:
        return self.basis1p.zlist

    def z2i(self, z0) -> int:
        return self.basis1p.z2i(z0)

    def i2z(self, iz0: int) -> int:
        return self.basis1p.i2z(iz0)

    def get_basis_spec(self, iz0: int, i: int) -> PIBasisFcn:
        return self.inner[iz0].specs[i]

    def degree(self, pib: PIBasisFcn) -> float:
        return self.D.tuple_degree(pib.oneps)

    # ------------------------------------------------------------------
    #    Evaluation code
    # ------------------------------------------------------------------

    def alloc_B(self) -> np.ndarray:
        """AA buffer large enough for every centre species."""
        maxlen = max([len(inner) for inner in self.inner] + [0])
        return np.zeros(maxlen, dtype=np.complex128)

    def alloc_temp(self, nR: int = 0) -> dict:
        return {"tmp_basis1p": self.basis1p.alloc_temp(nR)}

    def evaluate(self, Rs: np.ndarray, iZs: np.ndarray, iz0: int,
                 AA: Optional[np.ndarray] = None,
                 tmp: Optional[dict] = None) -> np.ndarray:
        """
        Evaluate the PI basis of centre species index iz0.

        Parameters
        ----------
        Rs : np.ndarray
            (nR, 3) neighbour positions (validated)
        iZs : np.ndarray
            (nR,) neighbour species indices
        iz0 : int
            Centre species index
        AA : np.ndarray, optional
            Buffer from alloc_B(); the result is a view into it
        tmp : dict, optional
            Temporaries from alloc_temp()

        Returns
        -------
        np.ndarray
            Complex array of length self.length(iz0)
        """
        inner = self.inner[iz0]
        if AA is None:
            AA = self.alloc_B()
        if tmp is None:
            tmp = self.alloc_temp(len(Rs))
        if len(AA) < len(inner):
            raise DomainError("AA buffer too small: {} < {}".format(
                len(AA), len(inner)))
        A = self.basis1p.evaluate(Rs, iZs, A=tmp["tmp_basis1p"]["A"])
        AA = AA[:len(inner)]
        for order, start, stop, iA in inner.blocks:
            out = AA[start:stop]
            if order == 0:
                out[:] = 1.0
                continue
            np.take(A, iA[:, 0], out=out)
            for t in range(1, order):
                out *= A[iA[:, t]]
        return AA

    # ------- gradient

    def alloc_dB(self) -> np.ndarray:
        """Buffer for the gradient of AA with respect to one neighbour."""
        maxlen = max([len(inner) for inner in self.inner] + [0])
        return np.zeros((maxlen, 3), dtype=np.complex128)

    def alloc_temp_d(self, nR: int) -> dict:
        return {"tmpd_basis1p": self.basis1p.alloc_temp_d(nR),
                "dprod": None,
                "iz0": None}

    def precompute_grads(self, Rs: np.ndarray, iZs: np.ndarray, iz0: int,
                         tmpd: dict) -> Tuple[np.ndarray, np.ndarray]:
        """
        Evaluate the atomic base A, its per-neighbour derivatives dA and,
        for every block of order N, the products of all factors but one,

            dprod[:, t] = prod_{s != t} A[iA[:, s]],

        which do not depend on the neighbour and are stored in tmpd.

        Returns
        -------
        A : np.ndarray
            Complex array of length len(basis1p)
        dA : np.ndarray
            Complex array of shape (nR, len(basis1p), 3)
        """
        nR = len(Rs)
        buffers = tmpd["tmpd_basis1p"]
        if len(buffers["dA"]) < nR:
            raise DomainError(
                "Temporaries allocated for {} neighbours, got {}".format(
                    len(buffers["dA"]), nR))
        A, dA = self.basis1p.evaluate_d(
            Rs, iZs, A=buffers["A"], dA=buffers["dA"][:nR])
        dprod = []
        for order, start, stop, iA in self.inner[iz0].blocks:
            if order == 0:
                dprod.append(None)
                continue
            Ablock = A[iA]
            dp = np.ones_like(Ablock)
            for t in range(order):
                for s in range(order):
                    if s != t:
                        dp[:, t] *= Ablock[:, s]
            dprod.append(dp)
        tmpd["dprod"] = dprod
        tmpd["iz0"] = iz0
        return A, dA

    def evaluate_d_Rj(self, dAAj: np.ndarray, tmpd: dict, iz0: int,
                      j: int) -> np.ndarray:
        """
        Gradient of all AA functions of species index iz0 with respect to
        the position of neighbour j, using the product rule

            dAA/dR_j = sum_t prod_{s != t} A_{k_s} * dA_{k_t}/dR_j.

        precompute_grads() must have been called for the same
        environment and centre species.

        Returns
        -------
        np.ndarray
            Complex view of shape (self.length(iz0), 3) into dAAj
        """
        if tmpd.get("iz0") != iz0:
            raise DomainError(
                "Gradient temporaries were prepared for another species.")
        inner = self.inner[iz0]
        dA = tmpd["tmpd_basis1p"]["dA"][j]
        dAAj = dAAj[:len(inner)]
        dAAj[:] = 0.0
        for (order, start, stop, iA), dp in zip(inner.blocks, tmpd["dprod"]):
            if order == 0:
                continue
            out = dAAj[start:stop]
            for t in range(order):
                out += dp[:, t, np.newaxis] * dA[iA[:, t]]
        return dAAj


def _enumerate_tuples(degrees: List[float], N: int,
                      bounds: Dict[int, float]) -> List[Tuple[int, ...]]:
    """
    All non-decreasing index tuples of length 0..N whose total degree
    is within the bound for their length, ordered by length and then
    lexicographically.  Non-decreasing tuples of indices into a sorted
    list of one-particle functions are exactly the canonical tuples.
    """
    degrees = np.asarray(degrees, dtype=np.float64)
    nA = len(degrees)
    # smallest degree among the functions start..nA-1
    suffix_min = np.full(nA + 1, np.inf)
    if nA > 0:
        suffix_min[:nA] = np.minimum.accumulate(degrees[::-1])[::-1]

    tuples = [()]
    for order in range(1, N + 1):
        bound = bounds[order] + DEGREE_TOL
        prefix = []

        def extend(start, deg):
            remaining = order - len(prefix)
            if remaining == 0:
                tuples.append(tuple(prefix))
                return
            if deg + remaining * suffix_min[start] > bound:
                return
            # i >= start such that the tuple can still be completed
            cand = np.flatnonzero(
                deg + degrees[start:]
                + (remaining - 1) * suffix_min[start:nA] <= bound) + start
            for i in cand:
                prefix.append(int(i))
                extend(int(i), deg + degrees[i])
                prefix.pop()

        extend(0, 0.0)
    return tuples
