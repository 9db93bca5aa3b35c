"""
Unit tests for the Chebyshev radial basis.

Tests known polynomial values, the cutoff behaviour of the envelope and
the radial derivatives against finite differences.
"""

import numpy as np
import pytest

from ..exceptions import ConfigurationError
from ..radial import ChebyshevPolynomials, ChebyshevRadialBasis


class TestChebyshevPolynomials:
    """Test Chebyshev polynomial evaluation."""

    def test_rescaling_boundaries(self):
        """Test distance rescaling at boundary values."""
        cheb = ChebyshevPolynomials(max_order=5, r_min=0.5, r_max=4.0)
        x = cheb.rescale_distances(np.array([0.5, 4.0, 2.25]))
        assert np.allclose(x, [-1.0, 1.0, 0.0])

    def test_rescaling_clamping(self):
        """Test that rescaling clamps values outside [r_min, r_max]."""
        cheb = ChebyshevPolynomials(max_order=5, r_min=0.5, r_max=4.0)
        x = cheb.rescale_distances(np.array([0.1, 5.0]))
        assert np.allclose(x, [-1.0, 1.0])

    def test_known_chebyshev_values(self):
        """Test against known Chebyshev polynomial values."""
        cheb = ChebyshevPolynomials(max_order=3, r_min=-1.0, r_max=1.0)

        # T_0(0.5)=1, T_1(0.5)=0.5, T_2(0.5)=-0.5, T_3(0.5)=-1.0
        T = cheb.evaluate(np.array([0.5]))
        assert np.allclose(T, [[1.0, 0.5, -0.5, -1.0]], atol=1e-12)

        # T_0(0)=1, T_1(0)=0, T_2(0)=-1, T_3(0)=0
        T = cheb.evaluate(np.array([0.0]))
        assert np.allclose(T, [[1.0, 0.0, -1.0, 0.0]], atol=1e-12)

    def test_matches_numpy_chebyshev(self):
        """Cosine form agrees with numpy's Chebyshev series."""
        cheb = ChebyshevPolynomials(max_order=6, r_min=-1.0, r_max=1.0)
        x = np.linspace(-0.99, 0.99, 17)
        T = cheb.evaluate(x)
        for k in range(7):
            coef = np.zeros(k + 1)
            coef[k] = 1.0
            assert np.allclose(T[:, k], np.polynomial.chebyshev.chebval(
                x, coef), atol=1e-12)

    def test_derivatives_finite_difference(self):
        cheb = ChebyshevPolynomials(max_order=6, r_min=0.5, r_max=4.0)
        r = np.linspace(0.6, 3.9, 23)
        _, dT = cheb.evaluate_with_derivatives(r)
        h = 1.0e-6
        dT_fd = (cheb.evaluate(r + h) - cheb.evaluate(r - h)) / (2 * h)
        assert np.allclose(dT, dT_fd, rtol=1e-6, atol=1e-6)


class TestChebyshevRadialBasis:

    @pytest.fixture
    def rbasis(self):
        return ChebyshevRadialBasis(maxn=6, rcut=5.0, rin=1.0)

    def test_shape(self, rbasis):
        R = rbasis.evaluate(np.array([1.5, 2.5, 3.5]))
        assert len(rbasis) == 6
        assert R.shape == (3, 6)

    def test_vanishes_beyond_cutoff(self, rbasis):
        R, dR = rbasis.evaluate_d(np.array([5.0, 5.5, 10.0]))
        assert np.all(R == 0.0)
        assert np.all(dR == 0.0)

    def test_vanishes_inside_inner_radius(self, rbasis):
        R = rbasis.evaluate(np.array([0.2, 0.9, 1.0]))
        assert np.allclose(R, 0.0, atol=1e-14)

    def test_constant_inside_inner_radius_without_envelope(self):
        rb = ChebyshevRadialBasis(maxn=4, rcut=5.0, rin=1.0, pin=0)
        R, dR = rb.evaluate_d(np.array([0.3, 0.6, 0.9]))
        assert np.allclose(R, R[0])
        assert np.all(dR == 0.0)
        assert not np.allclose(R[0], 0.0)

    def test_first_function_is_envelope(self, rbasis):
        r = np.linspace(1.1, 4.9, 7)
        R = rbasis.evaluate(r)
        assert np.allclose(R[:, 0], rbasis.envelope(r))

    @pytest.mark.parametrize("pcut,pin", [(2, 2), (3, 0), (2, 4)])
    def test_derivatives_finite_difference(self, pcut, pin):
        rb = ChebyshevRadialBasis(maxn=8, rcut=5.0, rin=1.0,
                                  pcut=pcut, pin=pin)
        r = np.linspace(1.05, 4.95, 31)
        R, dR = rb.evaluate_d(r)
        h = 1.0e-6
        dR_fd = (rb.evaluate(r + h) - rb.evaluate(r - h)) / (2 * h)
        assert np.allclose(R, rb.evaluate(r))
        assert np.allclose(dR, dR_fd, rtol=1e-6, atol=1e-6)

    @pytest.mark.parametrize("kwargs", [
        dict(maxn=0, rcut=5.0),
        dict(maxn=4, rcut=5.0, rin=5.0),
        dict(maxn=4, rcut=5.0, rin=-1.0),
        dict(maxn=4, rcut=5.0, pcut=-1),
    ])
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(ConfigurationError):
            ChebyshevRadialBasis(**kwargs)
