"""
Generalized Clebsch-Gordan coupling coefficients.

Products of N spherical harmonics Y_{l_1 m_1} ... Y_{l_N m_N} transform
like a tensor product of angular momentum states.  Coupling them
sequentially,

    l_1 x l_2 -> L_2,  L_2 x l_3 -> L_3,  ...,  L_{N-1} x l_N -> 0,

produces rotation invariants.  ``Rot3DCoeffs.rpi_basis`` reduces these
invariants to a linearly independent set modulo the permutations that
leave the (z, n, l) signature unchanged, which is the coupling space of
one (z, n, l) block of the RPI basis.

References
----------
    R. Drautz, PRB 99 (2019) 014104
    G. Dusson et al., J. Comput. Phys. 454 (2022) 110946

"""

import itertools
from fractions import Fraction
from math import sqrt
from typing import Dict, List, Sequence, Tuple

import numpy as np
from scipy import special

__author__ = "The acebasis developers"
__date__ = "2024-05-02"

# relative tolerance for the rank of the permutation Gramian
RANK_RTOL = 1.0e-7


def clebsch_gordan(j1: int, m1: int, j2: int, m2: int,
                   j3: int, m3: int) -> float:
    """
    Clebsch-Gordan coefficient <j1 m1 j2 m2 | j3 m3> (Condon-Shortley
    convention) for integer angular momenta.

    Uses the closed-form binomial representation with exact integer
    arithmetic, see Eqs. 4-5 of https://hal.inria.fr/hal-01851097/document

    """
    # selection rules
    if not (abs(j1 - j2) <= j3 <= j1 + j2):
        return 0.0
    if m3 != m1 + m2 or abs(m1) > j1 or abs(m2) > j2 or abs(m3) > j3:
        return 0.0

    fact = special.factorial
    N2 = (fact(j1 + m1, exact=True) * fact(j1 - m1, exact=True)
          * fact(j2 + m2, exact=True) * fact(j2 - m2, exact=True)
          * fact(j3 + m3, exact=True) * fact(j3 - m3, exact=True))
    N3 = (fact(j1 + j2 - j3, exact=True) * fact(j1 - j2 + j3, exact=True)
          * fact(-j1 + j2 + j3, exact=True)
          * fact(j1 + j2 + j3 + 1, exact=True))
    N = Fraction((2 * j3 + 1) * N2, N3)

    G = 0
    for k in range(0, min(j1 - m1, j2 + m2) + 1):
        G += ((-1)**k * special.comb(j1 + j2 - j3, k, exact=True)
              * special.comb(j1 - j2 + j3, j1 - m1 - k, exact=True)
              * special.comb(-j1 + j2 + j3, j2 + m2 - k, exact=True))
    return sqrt(N) * G


class Rot3DCoeffs(object):
    """
    Coupling-coefficient oracle with caches for Clebsch-Gordan values,
    rotation-invariant couplings (per l-tuple) and permutation-reduced
    couplings (per (z, n, l) signature).

    The caches are filled during basis construction and are not meant to
    be shared between threads while they are being filled.

    """

    def __init__(self):
        self._cg: Dict[Tuple[int, ...], float] = {}
        self._ri: Dict[Tuple[int, ...], Tuple[np.ndarray, List]] = {}
        self._rpi: Dict[Tuple, Tuple[np.ndarray, List]] = {}

    def cg(self, j1, m1, j2, m2, j3, m3) -> float:
        key = (j1, m1, j2, m2, j3, m3)
        if key not in self._cg:
            self._cg[key] = clebsch_gordan(*key)
        return self._cg[key]

    def ri_basis(self, ll: Sequence[int]) -> Tuple[np.ndarray, List]:
        """
        Rotation-invariant couplings of Y_{l_1} x ... x Y_{l_N}.

        Returns
        -------
        C : np.ndarray
            (n_trees, len(Ms)) coupling coefficients; the rows are
            orthonormal
        Ms : list of tuple
            All m-tuples with |m_i| <= l_i and sum(m) == 0, in
            lexicographic order
        """
        ll = tuple(int(l) for l in ll)
        if ll not in self._ri:
            self._ri[ll] = self._ri_basis(ll)
        return self._ri[ll]

    def _ri_basis(self, ll):
        Ms = [mm for mm in itertools.product(*[range(-l, l + 1) for l in ll])
              if sum(mm) == 0]
        N = len(ll)
        if N == 0:
            return np.ones((1, 1)), Ms
        if N == 1:
            if ll[0] == 0:
                return np.ones((1, 1)), Ms
            return np.zeros((0, len(Ms))), Ms

        trees = list(_coupling_trees(ll))
        C = np.zeros((len(trees), len(Ms)))
        for itree, LL in enumerate(trees):
            for im, mm in enumerate(Ms):
                C[itree, im] = self._tree_coefficient(ll, LL, mm)
        return C, Ms

    def _tree_coefficient(self, ll, LL, mm) -> float:
        # LL = (L_1 = l_1, L_2, ..., L_{N-1}, L_N = 0)
        c = 1.0
        M = mm[0]
        for k in range(1, len(ll)):
            c *= self.cg(LL[k - 1], M, ll[k], mm[k], LL[k], M + mm[k])
            if c == 0.0:
                return 0.0
            M += mm[k]
        return c

    def rpi_basis(self, zz: Sequence[int], nn: Sequence[int],
                  ll: Sequence[int]) -> Tuple[np.ndarray, List]:
        """
        Rotation- and permutation-invariant couplings of the signature
        (zz, nn, ll).

        Returns
        -------
        U : np.ndarray
            (n_rows, len(Ms)) real coupling matrix; each row defines one
            basis function, n_rows may be zero
        Ms : list of tuple
            The m-tuples labelling the columns of U
        """
        key = (tuple(zz), tuple(nn), tuple(ll))
        if key not in self._rpi:
            self._rpi[key] = self._rpi_basis(*key)
        return self._rpi[key]

    def _rpi_basis(self, zz, nn, ll):
        C, Ms = self.ri_basis(ll)
        if C.shape[0] == 0:
            return np.zeros((0, len(Ms))), Ms
        G, nperm = _gramian(zz, nn, ll, C, Ms)
        W, S, _ = np.linalg.svd(G)
        # the eigenvalues of G lie in [0, nperm]
        rank = int(np.sum(S > RANK_RTOL * nperm))
        U = np.sqrt(S[:rank])[:, np.newaxis] * (W[:, :rank].T @ C)
        return U, Ms


def _coupling_trees(ll):
    """
    Intermediate angular momenta (L_1, ..., L_N) of all sequential
    couplings of ll to a total angular momentum of zero.
    """
    N = len(ll)

    def extend(LL):
        k = len(LL)
        if k == N - 1:
            if LL[-1] == ll[-1]:
                yield tuple(LL) + (0,)
            return
        L = LL[-1]
        for Lk in range(abs(L - ll[k]), L + ll[k] + 1):
            yield from extend(LL + [Lk])

    yield from extend([ll[0]])


def _gramian(zz, nn, ll, C, Ms) -> Tuple[np.ndarray, int]:
    """
    Gramian of the couplings C under all permutations sigma that leave
    (zz, nn, ll) invariant,

        G = sum_sigma C P_sigma C^T,

    where P_sigma maps the m-tuple mm to mm[sigma].  Its rank is the
    number of linearly independent permutation-symmetric invariants.
    Also returns the number of permutations in the sum.
    """
    N = len(ll)
    sig = list(zip(zz, nn, ll))
    col = {mm: i for i, mm in enumerate(Ms)}
    G = np.zeros((C.shape[0], C.shape[0]))
    nperm = 0
    for sigma in itertools.permutations(range(N)):
        if any(sig[sigma[i]] != sig[i] for i in range(N)):
            continue
        perm = [col[tuple(mm[s] for s in sigma)] for mm in Ms]
        G += C @ C[:, perm].T
        nperm += 1
    return G, nperm
