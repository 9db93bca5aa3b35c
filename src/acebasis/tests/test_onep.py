"""
Tests for the degree functional and the one-particle basis.
"""

import numpy as np
import pytest

from ..degree import SparsePSHDegree, maxdeg_per_order
from ..exceptions import ConfigurationError, DomainError, UnknownSpeciesError
from ..onep import BasicPSH1pBasis, PSH1pBasisFcn
from ..radial import ChebyshevRadialBasis
from ..testing import fd_gradient, rand_environment


class TestDegree:

    def test_degree(self):
        D = SparsePSHDegree(wL=1.5)
        assert D.degree(PSH1pBasisFcn(1, 0, 0, 0)) == 1.0
        assert D.degree(PSH1pBasisFcn(2, 2, -1, 0)) == 5.0
        assert D.tuple_degree([PSH1pBasisFcn(1, 0, 0, 0),
                               PSH1pBasisFcn(2, 2, -1, 0)]) == 6.0
        assert D.tuple_degree([]) == 0

    def test_maxn_maxL(self):
        D = SparsePSHDegree(wL=1.5)
        assert D.get_maxn(8) == 8
        assert D.get_maxL(8) == 4
        assert D.get_maxn({1: 10, 2: 7}) == 10
        assert D.get_maxL({1: 10, 2: 7}) == 6
        assert D.get_maxL(0.5) == 0

    def test_maxdeg_per_order(self):
        assert maxdeg_per_order(6, 2) == {0: 0.0, 1: 6.0, 2: 6.0}
        assert maxdeg_per_order({1: 8, 2: 6, 3: 4}, 3) == \
            {0: 0.0, 1: 8.0, 2: 6.0, 3: 4.0}

    @pytest.mark.parametrize("maxdeg", [-1, float("nan"), float("inf"),
                                        "8", {1: 6}, True])
    def test_invalid_maxdeg(self, maxdeg):
        with pytest.raises(ConfigurationError):
            maxdeg_per_order(maxdeg, 2)

    def test_invalid_weight(self):
        with pytest.raises(ConfigurationError):
            SparsePSHDegree(wL=0.0)


class TestBasicPSH1pBasis:

    @pytest.fixture
    def basis1p(self):
        rb = ChebyshevRadialBasis(maxn=3, rcut=4.0, rin=0.5)
        return BasicPSH1pBasis(rb, 2, species=["Si", "O"])

    def test_enumeration(self, basis1p):
        assert len(basis1p) == 2 * 3 * 9
        assert basis1p.spec == sorted(basis1p.spec)
        assert len(set(basis1p.spec)) == len(basis1p.spec)
        assert basis1p.zlist == (14, 8)
        assert basis1p.numz == 2
        for i, b in enumerate(basis1p.spec):
            assert basis1p.b2iA[b] == i
            assert 1 <= b.n <= 3 and abs(b.m) <= b.l <= 2

    def test_enumeration_order(self, basis1p):
        """Descriptors run over n, then l, then m, then atomic number."""
        spec = basis1p.spec
        assert spec[0] == PSH1pBasisFcn(1, 0, 0, 8)
        assert spec[1] == PSH1pBasisFcn(1, 0, 0, 14)
        assert spec[2] == PSH1pBasisFcn(1, 1, -1, 8)
        assert spec[-1] == PSH1pBasisFcn(3, 2, 2, 14)
        keys = [(b.n, b.l, b.m, b.z) for b in spec]
        assert keys == sorted(keys)

    def test_species_lookup(self, basis1p):
        assert basis1p.z2i("Si") == 0
        assert basis1p.z2i(8) == 1
        assert basis1p.i2z(1) == 8
        with pytest.raises(UnknownSpeciesError):
            basis1p.z2i("Fe")
        with pytest.raises(DomainError):
            basis1p.z2i("Xx")
        assert np.array_equal(basis1p.species_indices([8, 14, 8]),
                              [1, 0, 1])
        assert np.array_equal(basis1p.species_indices(["O", "Si"]),
                              [1, 0])

    def test_invalid_construction(self):
        rb = ChebyshevRadialBasis(maxn=3, rcut=4.0)
        with pytest.raises(ConfigurationError):
            BasicPSH1pBasis(rb, 2, species=[])
        with pytest.raises(ConfigurationError):
            BasicPSH1pBasis(rb, 2, species=["Si", 14])
        with pytest.raises(ConfigurationError):
            BasicPSH1pBasis(rb, -1)

    def test_check_environment(self, basis1p):
        Rs = np.array([[1.0, 0.0, 0.0], [0.0, 1.5, 0.0]])
        with pytest.raises(DomainError):
            basis1p.check_environment(Rs[:, :2], [14, 8])
        with pytest.raises(DomainError):
            basis1p.check_environment(Rs, [14])
        with pytest.raises(DomainError):
            basis1p.check_environment(np.zeros((2, 3)), [14, 8])
        with pytest.raises(DomainError):
            basis1p.check_environment([[np.nan, 0, 0], [1, 1, 1]], [14, 8])
        with pytest.raises(UnknownSpeciesError):
            basis1p.check_environment(Rs, [14, 26])
        Rs2, iZs = basis1p.check_environment(Rs.tolist(), ["Si", "O"])
        assert Rs2.dtype == np.float64
        assert np.array_equal(iZs, [0, 1])

    def test_species_selection(self, basis1p):
        """Only functions of the neighbour's species are non-zero."""
        Rs = np.array([[1.0, 0.5, -0.3]])
        A = basis1p.evaluate(Rs, basis1p.species_indices([8]))
        for b, a in zip(basis1p.spec, A):
            if b.z == 14:
                assert a == 0.0
        assert np.any(A != 0.0)

    def test_neighbour_sum(self, basis1p):
        Rs, Zs = rand_environment(4, species=(14, 8), rmax=3.5,
                                  rng=np.random.default_rng(0))
        iZs = basis1p.species_indices(Zs)
        A = basis1p.evaluate(Rs, iZs)
        A_sum = sum(basis1p.evaluate(Rs[j:j + 1], iZs[j:j + 1])
                    for j in range(len(Rs)))
        assert np.allclose(A, A_sum)

    def test_gradient_finite_difference(self, basis1p):
        Rs, Zs = rand_environment(3, species=(14, 8), rmax=3.5,
                                  rng=np.random.default_rng(1))
        iZs = basis1p.species_indices(Zs)
        A, dA = basis1p.evaluate_d(Rs, iZs)
        assert np.allclose(A, basis1p.evaluate(Rs, iZs))
        assert dA.shape == (3, len(basis1p), 3)
        grad_re = fd_gradient(lambda x: basis1p.evaluate(x, iZs).real, Rs)
        grad_im = fd_gradient(lambda x: basis1p.evaluate(x, iZs).imag, Rs)
        # fd_gradient is indexed (function, neighbour, component)
        assert np.allclose(dA.real, grad_re.transpose(1, 0, 2), atol=1e-7)
        assert np.allclose(dA.imag, grad_im.transpose(1, 0, 2), atol=1e-7)

    def test_empty_environment(self, basis1p):
        Rs, iZs = basis1p.check_environment(np.zeros((0, 3)), [])
        A = basis1p.evaluate(Rs, iZs)
        assert np.all(A == 0.0)
        A, dA = basis1p.evaluate_d(Rs, iZs)
        assert dA.shape == (0, len(basis1p), 3)
