r"""Correction factors and offsets for point-count abundance models

Raw counts are scaled by the expected proportion of individuals counted,
:math:`C = A p q`, where :math:`p` is the availability (probability of
giving a cue within the survey duration), :math:`q` is the perceptibility
(probability of detecting an available individual, averaged over the
sampled area) and :math:`A` is the sampled area.  For a half-normal
distance function with scale :math:`\tau` and truncation distance
:math:`r`:

.. math::

   q = \frac{\tau^2}{r^2} (1 - e^{-(r/\tau)^2}), \quad A = \pi r^2

and for unlimited distance :math:`q = 1` and :math:`A = \pi \tau^2`.
:math:`log\ C` is used as an offset in log-linear models of counts.

"""

import logging
import numpy as np
import pandas as pd
from skqpad.errors import DataError, DomainError

logger = logging.getLogger(__name__)
# Add the null handler if importing as library; whatever using this library
# should set up logging.basicConfig() as needed
logger.addHandler(logging.NullHandler())

__all__ = ["availability", "perceptibility", "sampled_area", "correction",
           "qpad_offsets"]


def _nonnegative(x, what):
    x = np.asarray(x, dtype=float)
    if np.any(x < 0):
        msg = "{} must be non-negative".format(what)
        logger.error(msg)
        raise DomainError(msg)
    return(x)


def availability(phi, duration, c=1):
    """Probability of giving a cue within `duration`

    Parameters
    ----------
    phi : float or array_like
        Cue rate.
    duration : float or array_like
        Survey duration, in the time units of `phi`.
    c : float or array_like, optional
        Proportion of infrequent singers in a finite mixture.  The
        default gives the removal model.

    Returns
    -------
    ndarray

    """
    duration = _nonnegative(duration, "Duration")
    return(1 - np.asarray(c) * np.exp(-duration * np.asarray(phi)))


def perceptibility(tau, max_distance):
    """Average probability of detection within `max_distance`

    Parameters
    ----------
    tau : float or array_like
        Half-normal scale (effective detection radius).
    max_distance : float or array_like
        Truncation distance; ``inf`` for unlimited distance.

    Returns
    -------
    ndarray

    """
    max_distance = _nonnegative(max_distance, "Distance")
    tau = np.asarray(tau, dtype=float)
    ratio = (max_distance / tau) ** 2
    with np.errstate(divide="ignore", invalid="ignore"):
        q = -np.expm1(-ratio) / ratio
    q = np.where(np.isinf(max_distance), 1.0, q)
    # Limit at zero distance
    return(np.where(ratio == 0, 1.0, q))


def sampled_area(tau, max_distance):
    """Area sampled within `max_distance`

    Effective area :math:`\\pi \\tau^2` for unlimited distance.

    """
    max_distance = _nonnegative(max_distance, "Distance")
    tau = np.asarray(tau, dtype=float)
    return(np.where(np.isinf(max_distance), np.pi * tau ** 2,
                    np.pi * max_distance ** 2))


def correction(p, q, area):
    """Multiplicative correction factor :math:`C = A p q`"""
    return(np.asarray(area) * np.asarray(p) * np.asarray(q))


def qpad_offsets(rem_fit, dis_fit, duration, max_distance, newdata=None,
                 X_rem=None, X_dis=None):
    """Offsets from fitted availability and perceptibility models

    Parameters
    ----------
    rem_fit : CMultiFit
        Fitted removal ("rem") or finite mixture ("fmix", "mix") model.
    dis_fit : CMultiFit
        Fitted distance ("dis") model.
    duration : float or array_like
        Survey duration for each unit.
    max_distance : float or array_like
        Truncation distance for each unit; ``inf`` for unlimited.
    newdata : pandas.DataFrame, optional
        Covariates used by both fits' formulas.
    X_rem, X_dis : array_like, optional
        Ready-made design matrices for each fit.

    Returns
    -------
    pandas.DataFrame
        Columns `p`, `q`, `A`, `C` and `offset` (:math:`log\\ C`).

    """
    if dis_fit.type != "dis":
        msg = "dis_fit must be a distance (\"dis\") model"
        logger.error(msg)
        raise KeyError(msg)
    if rem_fit.type not in ("rem", "fmix", "mix"):
        msg = "rem_fit must be a removal or finite mixture model"
        logger.error(msg)
        raise KeyError(msg)

    avail = rem_fit.natural(X_rem, newdata)
    percept = dis_fit.natural(X_dis, newdata)
    c = avail["c"].to_numpy() if "c" in avail else 1
    p = availability(avail["phi"].to_numpy(), duration, c)
    tau = percept["tau"].to_numpy()
    q = perceptibility(tau, max_distance)
    area = sampled_area(tau, max_distance)
    corr = correction(p, q, area)
    nrows = np.broadcast(p, q, area).size
    index = None if newdata is None else newdata.index
    if index is not None and len(index) != nrows:
        msg = ("newdata has {} rows but offsets have {}"
               .format(len(index), nrows))
        logger.error(msg)
        raise DataError(msg)
    logger.info("Computed offsets for {} units".format(nrows))
    return(pd.DataFrame({"p": np.broadcast_to(p, nrows),
                         "q": np.broadcast_to(q, nrows),
                         "A": np.broadcast_to(area, nrows),
                         "C": np.broadcast_to(corr, nrows),
                         "offset": np.broadcast_to(np.log(corr), nrows)},
                        index=index))
