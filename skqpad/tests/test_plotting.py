"""Unit test for reporting plots

"""

import unittest as ut
import numpy as np
import numpy.testing as npt
import pandas as pd
import skqpad.likelihood as lik
from skqpad.plotting import observed_cdf, plot_fit
from skqpad.tests import simulate_removal
import matplotlib as mpl
mpl.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402


class TestPlotting(ut.TestCase):
    """Test observed and fitted curve plots

    """
    @classmethod
    def setUpClass(cls):
        rng = np.random.default_rng(5)
        breaks = [[3, 5, 10], [3, 5]]
        x = rng.uniform(-1, 1, size=800)
        X = pd.DataFrame({"x": x})
        phi = np.exp(np.log(0.3) + 0.4 * x)
        cls.counts = simulate_removal(800, phi, breaks, X=X, rng=rng)
        cls.fit = lik.cmulti("~ x", cls.counts, type="rem")
        cls.fit0 = lik.cmulti_fit(cls.counts.Y, cls.counts.D)

    def tearDown(self):
        plt.close("all")

    def test_observed_cdf(self):
        obs = observed_cdf(self.fit, self.counts, newdata=self.counts.X)
        self.assertIsInstance(obs, pd.Series)
        npt.assert_array_equal(obs.index, [3, 5, 10])
        self.assertTrue(np.all(np.diff(obs) > 0))
        self.assertTrue(np.all((obs > 0) & (obs <= 1)))
        # Close to the fitted curve averaged over units
        pred = self.fit.cdf([3, 5, 10], newdata=self.counts.X).mean(axis=0)
        npt.assert_allclose(obs, pred, atol=0.05)

    def test_plot_fit(self):
        fig, ax = plt.subplots()
        out = plot_fit(self.fit, self.counts, newdata=self.counts.X, ax=ax)
        self.assertIs(out, ax)
        self.assertEqual(len(ax.lines), 1)
        self.assertEqual(len(ax.collections), 1)
        xdata = ax.lines[0].get_xdata()
        self.assertEqual(xdata[-1], 10)
        # Homogeneous model on the current axes
        plt.figure()
        ax = plot_fit(self.fit0, self.counts)
        self.assertEqual(len(ax.lines), 1)


if __name__ == '__main__':
    ut.main()
