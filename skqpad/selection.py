"""Information criterion tables for competing models

"""

import logging
import numpy as np
import pandas as pd
from skqpad.errors import DataError

logger = logging.getLogger(__name__)
# Add the null handler if importing as library; whatever using this library
# should set up logging.basicConfig() as needed
logger.addHandler(logging.NullHandler())

__all__ = ["model_table"]

_IC_METHODS = {"AIC": "aic", "AICc": "aicc", "BIC": "bic"}


def model_table(fits, names=None, ic="AIC"):
    """Rank fitted models by an information criterion

    Parameters
    ----------
    fits : list of CMultiFit or dict
        Models fitted to the same sampling units.  A dictionary maps model
        names to fits.
    names : list, optional
        Model names for a list of `fits`.  Default is the position in the
        list.
    ic : {"AIC", "AICc", "BIC"}, optional
        Information criterion.

    Returns
    -------
    pandas.DataFrame
        Indexed by model name, sorted by `ic`, with columns `type`, `df`,
        `logLik`, `ic`, `delta` (difference from the best model) and
        `weight` (Akaike weights).

    Examples
    --------
    >>> model_table({"m0": fit0, "m1": fit1})  # doctest: +SKIP

    """
    if ic not in _IC_METHODS:
        msg = "ic must be one of: {}".format(list(_IC_METHODS.keys()))
        logger.error(msg)
        raise KeyError(msg)

    if isinstance(fits, dict):
        names = list(fits.keys())
        fits = list(fits.values())
    elif names is None:
        names = list(range(len(fits)))

    if len(fits) == 0:
        msg = "No models to compare"
        logger.error(msg)
        raise DataError(msg)
    if len(names) != len(fits):
        msg = "names must have one entry per fit"
        logger.error(msg)
        raise DataError(msg)

    nobs = {fit.nobs for fit in fits}
    if len(nobs) > 1:
        msg = ("Models were fitted to different numbers of units: {}"
               .format(sorted(nobs)))
        logger.error(msg)
        raise DataError(msg)

    unreliable = [name for name, fit in zip(names, fits)
                  if not fit.reliable]
    if unreliable:
        logger.warning("Unreliable fits in table: {}".format(unreliable))

    ics = [getattr(fit, _IC_METHODS[ic])() for fit in fits]
    tab = pd.DataFrame({"type": [fit.type for fit in fits],
                        "df": [fit.df for fit in fits],
                        "logLik": [fit.loglik for fit in fits],
                        ic: ics},
                       index=pd.Index(names, name="model"))
    if not np.any(np.isfinite(tab[ic])):
        msg = ("No model has a finite {}; use another criterion"
               .format(ic))
        logger.error(msg)
        raise DataError(msg)

    tab = tab.sort_values(ic, kind="stable")
    tab["delta"] = tab[ic] - tab[ic].min()
    rel_lik = np.exp(-tab["delta"] / 2)
    tab["weight"] = rel_lik / rel_lik.sum()

    return(tab)
