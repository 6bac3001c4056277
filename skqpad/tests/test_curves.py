"""Unit test for cumulative detection curves

"""

import unittest as ut
import numpy as np
import numpy.testing as npt
from scipy.special import expit
from statsmodels.tools.numdiff import approx_fprime
import skqpad.likelihood as lik
from skqpad.errors import DomainError


class TestCurves(ut.TestCase):
    """Test `Curve` subclasses and cell probabilities

    """
    @classmethod
    def setUpClass(cls):
        """Initialize tests

        Attributes
        ----------
        D : ndarray
            Boundaries for two protocols, the second with unlimited last
            interval and an unobserved trailing cell.
        X : ndarray
            Design matrix with intercept and one covariate.
        coefs : dict
            Coefficients for each model type, matching `X`.

        """
        nan = np.nan
        cls.D = np.array([[0.5, 1, 2, 3],
                          [0.5, 1, np.inf, nan],
                          [3, 5, 10, nan]])
        cls.X = np.column_stack((np.ones(3), [-1.0, 0.0, 1.5]))
        cls.coefs = {"rem": np.array([-0.5, 0.3]),
                     "dis": np.array([0.1, -0.2]),
                     "fmix": np.array([-0.5, 0.3, 0.8]),
                     "mix": np.array([-0.5, 0.4, -0.7])}
        cls.t = np.tile(np.linspace(0, 20, 201), (3, 1))

    def test_get_curve(self):
        for tag, cls in lik.CURVES.items():
            curve = lik.get_curve(tag)
            self.assertIsInstance(curve, cls)
            self.assertEqual(curve.tag, tag)
            self.assertIn("Class {} object".format(cls.__name__),
                          curve.__str__())
        curve = lik.Removal()
        self.assertIs(lik.get_curve(curve), curve)
        self.assertRaises(KeyError, lik.get_curve, "hazard")

    def test_coef_names(self):
        xnames = ["Intercept", "jday"]
        names = lik.get_curve("rem").coef_names(xnames)
        self.assertListEqual(names, ["log.phi_Intercept", "log.phi_jday"])
        names = lik.get_curve("fmix").coef_names(xnames)
        self.assertListEqual(names, ["log.phi_Intercept", "log.phi_jday",
                                     "logit.c"])
        names = lik.get_curve("mix").coef_names(xnames)
        self.assertListEqual(names, ["log.phi", "logit.c_Intercept",
                                     "logit.c_jday"])
        self.assertEqual(lik.get_curve("mix").ncoefs(2), 3)

    def test_monotone(self):
        for tag, coefs in self.coefs.items():
            curve = lik.get_curve(tag)
            etas = curve.build_linear_predictor(coefs, self.X)
            cdf = curve.evaluate_cdf(self.t, etas)
            self.assertTrue(np.all(np.diff(cdf, axis=1) >= 0))
            self.assertTrue(np.all((cdf >= 0) & (cdf <= 1)))

    def test_origin(self):
        t0 = np.zeros((3, 1))
        for tag in ["rem", "dis"]:
            curve = lik.get_curve(tag)
            etas = curve.build_linear_predictor(self.coefs[tag], self.X)
            npt.assert_array_equal(curve.evaluate_cdf(t0, etas), 0)
        for tag in ["fmix", "mix"]:
            curve = lik.get_curve(tag)
            etas = curve.build_linear_predictor(self.coefs[tag], self.X)
            c = curve.natural(etas)["c"]
            npt.assert_allclose(curve.evaluate_cdf(t0, etas)[:, 0], 1 - c)
            npt.assert_allclose(c, expit(etas[1]))

    def test_infinite(self):
        tinf = np.full((3, 1), np.inf)
        for tag, coefs in self.coefs.items():
            curve = lik.get_curve(tag)
            etas = curve.build_linear_predictor(coefs, self.X)
            npt.assert_array_equal(curve.evaluate_cdf(tinf, etas), 1)
            for deriv in curve.cdf_deriv(tinf, etas):
                npt.assert_array_equal(deriv, 0)

    def test_negative(self):
        for tag, coefs in self.coefs.items():
            curve = lik.get_curve(tag)
            etas = curve.build_linear_predictor(coefs, self.X)
            self.assertRaises(DomainError, curve.evaluate_cdf,
                              -self.D, etas)
            self.assertRaises(DomainError, curve.cdf_deriv, -self.D, etas)

    def test_cell_probs(self):
        rng = np.random.default_rng(42)
        for tag, coefs in self.coefs.items():
            for i in range(20):
                coefs_i = coefs + rng.normal(scale=2, size=coefs.size)
                P, never = lik.cell_probs(tag, coefs_i, self.D, self.X)
                self.assertEqual(P.shape, self.D.shape)
                npt.assert_array_equal(np.isnan(P), np.isnan(self.D))
                totals = np.nansum(P, axis=1)
                self.assertTrue(np.all(totals <= 1 + 1e-12))
                npt.assert_allclose(totals + never, 1, atol=1e-12)
            # Unlimited last interval leaves nothing undetected
            self.assertEqual(never[1], 0)

    def test_mixture_atom(self):
        # Atom at zero falls in the first interval
        coefs = self.coefs["fmix"]
        P, never = lik.cell_probs("fmix", coefs, self.D, self.X)
        curve = lik.get_curve("fmix")
        etas = curve.build_linear_predictor(coefs, self.X)
        pars = curve.natural(etas)
        p1 = 1 - pars["c"] * np.exp(-self.D[:, 0] * pars["phi"])
        npt.assert_allclose(P[:, 0], p1)
        self.assertTrue(np.all(P[:, 0] >= 1 - pars["c"]))

    def test_homogeneous(self):
        # Intercept-only design gives the same probabilities for rows
        # sharing a protocol
        D = np.array([[3, 5, 10], [3, 5, 10]])
        P, never = lik.cell_probs("rem", [np.log(0.3)], D)
        npt.assert_allclose(P[0], P[1])
        expected = np.diff(1 - np.exp(-0.3 * np.array([0, 3, 5, 10])))
        npt.assert_allclose(P[0], expected)
        npt.assert_allclose(never, np.exp(-3))

    def test_cdf_deriv(self):
        D = self.D[:, :2]       # finite, fully observed
        for tag, coefs in self.coefs.items():
            curve = lik.get_curve(tag)
            etas = curve.build_linear_predictor(coefs, self.X)
            derivs = curve.cdf_deriv(D, etas)
            self.assertEqual(len(derivs), len(curve.predictors))
            for k, deriv in enumerate(derivs):
                for i in range(D.shape[0]):
                    def cdf_row(eta_k):
                        etas_i = [np.array([eta[i]]) for eta in etas]
                        etas_i[k] = np.atleast_1d(eta_k)
                        return(curve.evaluate_cdf(D[[i]], etas_i)[0])

                    num = approx_fprime(np.array([etas[k][i]]), cdf_row,
                                        centered=True)
                    npt.assert_allclose(deriv[i], np.ravel(num),
                                        rtol=1e-5, atol=1e-8)

    def test_init_coefs(self):
        D = np.array([[3, 5, 10], [3, 5, 10]])
        X = np.column_stack((np.ones(2), [0.5, 1]))
        inits = lik.get_curve("rem").init_coefs(D, X)
        npt.assert_allclose(inits, [-np.log(5), 0])
        inits = lik.get_curve("dis").init_coefs(D, X)
        npt.assert_allclose(inits, [np.log(5), 0])
        inits = lik.get_curve("mix").init_coefs(D, X)
        npt.assert_allclose(inits, [-np.log(5), 0, 0])
        inits = lik.get_curve("fmix").init_coefs(D, X)
        npt.assert_allclose(inits, [-np.log(5), 0, 0])


if __name__ == '__main__':
    ut.main()
