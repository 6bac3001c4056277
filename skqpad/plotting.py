"""Plotting module

Reporting plots for fitted models.  These do not take part in model
fitting.

"""

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

__all__ = ["observed_cdf", "plot_fit"]


def _unit_design(fit, counts, X, newdata):
    Xd = fit.design(X, newdata)
    if Xd.shape[0] == 1:
        Xd = np.tile(Xd, (counts.nobs, 1))
    return(Xd)


def observed_cdf(fit, counts, X=None, newdata=None):
    """Observed cumulative proportions on the scale of the fitted curve

    Cumulative proportions of each unit's total count are scaled by the
    fitted probability of registration by the unit's last boundary, so
    they are comparable with the fitted cumulative curve across
    protocols.  Units without detections and infinite boundaries are
    ignored.

    Parameters
    ----------
    fit : CMultiFit
    counts : IntervalCounts
        Data the model was fitted to.
    X, newdata : optional
        Covariates for each unit in `counts`.  See
        :meth:`~skqpad.likelihood.CMultiFit.design`.

    Returns
    -------
    pandas.Series
        Mean scaled cumulative proportion, indexed by boundary value.

    """
    Xd = _unit_design(fit, counts, X, newdata)
    ok = counts.total > 0
    Y = counts.Y[ok]
    D = counts.D[ok]
    etas = fit.curve.build_linear_predictor(fit.coef.to_numpy(), Xd[ok])
    cdf = fit.curve.evaluate_cdf(D, etas)
    rows = np.arange(D.shape[0])
    last = (~np.isnan(D)).sum(axis=1) - 1
    p_last = cdf[rows, last]
    cumprop = np.nancumsum(Y, axis=1) / np.nansum(Y, axis=1)[:, np.newaxis]
    scaled = np.where(np.isnan(D), np.nan, cumprop * p_last[:, np.newaxis])
    obs = pd.DataFrame({"t": D.ravel(), "cdf": scaled.ravel()}).dropna()
    obs = obs[np.isfinite(obs["t"])]

    return(obs.groupby("t")["cdf"].mean())


def plot_fit(fit, counts, X=None, newdata=None, ax=None):
    """Plot observed and fitted cumulative probability of registration

    Parameters
    ----------
    fit : CMultiFit
    counts : IntervalCounts
        Data the model was fitted to.
    X, newdata : optional
        Covariates for each unit in `counts`.
    ax : matplotlib.Axes instance
        An Axes instance to use as target.

    Returns
    -------
    ax : `matplotlib.Axes`

    """
    obs = observed_cdf(fit, counts, X, newdata)
    Xd = _unit_design(fit, counts, X, newdata)

    t_pred = np.linspace(0, obs.index.max(), num=101)
    t_grid = np.tile(t_pred, (Xd.shape[0], 1))
    etas = fit.curve.build_linear_predictor(fit.coef.to_numpy(), Xd)
    # Average curve over units
    y_pred = fit.curve.evaluate_cdf(t_grid, etas).mean(axis=0)

    if ax is None:
        ax = plt.gca()

    ax.scatter(obs.index, obs.to_numpy(), color="k", label="observed")
    ax.plot(t_pred, y_pred, label="model")
    ax.set_ylim(0, 1.05)
    ax.legend(loc="lower right")
    ax.set_xlabel("duration or distance")
    ax.set_ylabel("cumulative probability")

    return(ax)
