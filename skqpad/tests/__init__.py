"""scikit-QPAD tests"""

import numpy as np
import pandas as pd
from skqpad.counts import IntervalCounts

__all__ = ["simulate_counts", "simulate_removal", "simulate_distance",
           "simulate_mixture"]


def _protocol_matrix(breaks, nunits, rng):
    """Boundary matrix with protocols assigned at random to units"""
    if np.ndim(breaks[0]) == 0:
        breaks = [breaks]
    ncols = max(len(brks) for brks in breaks)
    protocols = np.full((len(breaks), ncols), np.nan)
    for i, brks in enumerate(breaks):
        protocols[i, :len(brks)] = brks
    chooser = rng.choice(len(breaks), size=nunits, replace=True)
    return(protocols[chooser])


def simulate_counts(nunits, sampler, breaks, lam=5, X=None, rng=None):
    r"""Simulate interval counts from event times or distances

    Each unit has a Poisson number of individuals, each registered at the
    value drawn by `sampler`.  Individuals registered beyond a unit's
    last boundary are not counted.

    Parameters
    ----------
    nunits : int
        Number of sampling units.
    sampler : callable
        Called as ``sampler(i, size, rng)`` to return `size` registration
        times or distances for unit `i`.
    breaks : array_like or list of array_like
        Cumulative interval boundaries.  A list of sequences defines
        several protocols, assigned to units at random.
    lam : float, optional
        Mean number of individuals per unit.
    X : pandas.DataFrame, optional
        Covariates stored in the output.
    rng : Generator
        Random number generator object.  If not provided, a default one is
        used.

    Returns
    -------
    IntervalCounts

    """
    if rng is None:
        rng = np.random.default_rng()

    D = _protocol_matrix(breaks, nunits, rng)
    Y = np.where(np.isnan(D), np.nan, 0.0)
    nind = rng.poisson(lam, size=nunits)
    for i in range(nunits):
        brks = D[i][~np.isnan(D[i])]
        times = sampler(i, nind[i], rng)
        # Interval j covers (brks[j - 1], brks[j]]; zero falls in the first
        ibin = np.searchsorted(brks, times, side="left")
        Y[i, :brks.size] = np.bincount(ibin,
                                       minlength=brks.size + 1)[:brks.size]

    if X is not None:
        X = pd.DataFrame(X)

    return(IntervalCounts(Y, D, X))


def simulate_removal(nunits, phi, breaks, lam=5, X=None, rng=None):
    r"""Simulate time-removal counts

    Times to first cue are exponential with rate :math:`\phi`.

    Parameters
    ----------
    nunits : int
        Number of sampling units.
    phi : float or array_like
        Cue rate, either common or one per unit.
    breaks, lam, X, rng :
        See :func:`simulate_counts`.

    Returns
    -------
    IntervalCounts

    Examples
    --------
    >>> rng = np.random.default_rng(123)
    >>> counts = simulate_removal(100, 0.3, [3, 5, 10], rng=rng)
    >>> counts.Y.shape
    (100, 3)

    """
    phi = np.broadcast_to(phi, (nunits,))

    def sampler(i, size, rng):
        return(rng.exponential(1 / phi[i], size=size))

    return(simulate_counts(nunits, sampler, breaks, lam=lam, X=X, rng=rng))


def simulate_distance(nunits, tau, breaks, lam=5, X=None, rng=None):
    r"""Simulate distance-band counts from a half-normal detection function

    Distances of detected individuals, uniformly distributed in space,
    have cumulative distribution :math:`1 - e^{-(r/\tau)^2}`.

    Parameters
    ----------
    nunits : int
        Number of sampling units.
    tau : float or array_like
        Effective detection radius, either common or one per unit.
    breaks, lam, X, rng :
        See :func:`simulate_counts`.

    Returns
    -------
    IntervalCounts

    """
    tau = np.broadcast_to(tau, (nunits,))

    def sampler(i, size, rng):
        return(tau[i] * np.sqrt(-np.log(rng.uniform(size=size))))

    return(simulate_counts(nunits, sampler, breaks, lam=lam, X=X, rng=rng))


def simulate_mixture(nunits, phi, c, breaks, lam=5, X=None, rng=None):
    r"""Simulate time-removal counts from a two-point finite mixture

    A proportion :math:`c` of individuals give cues at rate :math:`\phi`,
    and the remainder are registered at time zero.

    Parameters
    ----------
    nunits : int
        Number of sampling units.
    phi : float or array_like
        Cue rate of infrequent singers, common or one per unit.
    c : float or array_like
        Proportion of infrequent singers, common or one per unit.
    breaks, lam, X, rng :
        See :func:`simulate_counts`.

    Returns
    -------
    IntervalCounts

    """
    phi = np.broadcast_to(phi, (nunits,))
    c = np.broadcast_to(c, (nunits,))

    def sampler(i, size, rng):
        infrequent = rng.uniform(size=size) < c[i]
        times = rng.exponential(1 / phi[i], size=size)
        return(np.where(infrequent, times, 0.0))

    return(simulate_counts(nunits, sampler, breaks, lam=lam, X=X, rng=rng))
