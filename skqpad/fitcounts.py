"""Fit models to count tables on disk, following a configuration file

"""

import logging
import numpy as np
import pandas as pd
from skqpad.counts import IntervalCounts
from skqpad.likelihood import cmulti
import skqpad.fitconfig as fitconfig
import skqpad.offsets as offsets

logger = logging.getLogger(__name__)
# Add the null handler if importing as library; whatever using this library
# should set up logging.basicConfig() as needed
logger.addHandler(logging.NullHandler())

__all__ = ["read_counts", "fit_from_files"]


def read_counts(counts_file, boundaries_file, covariates_file=None):
    """Read count, boundary and covariate tables from CSV files

    Each file has the sampling unit identifier in its first column.
    Count and boundary files have one column per interval, empty where
    a unit did not use the interval.

    Parameters
    ----------
    counts_file, boundaries_file : str or file-like
        Paths to the count and boundary tables.
    covariates_file : str or file-like, optional
        Path to the covariate table.

    Returns
    -------
    IntervalCounts

    """
    Y = pd.read_csv(counts_file, index_col=0)
    D = pd.read_csv(boundaries_file, index_col=0)
    if D.shape[1] == Y.shape[1]:
        D = D.set_axis(Y.columns, axis=1)
    D = D.reindex(Y.index)
    X = None
    if covariates_file is not None:
        X = pd.read_csv(covariates_file, index_col=0).reindex(Y.index)

    return(IntervalCounts(Y, D, X))


def fit_from_files(counts_file, boundaries_file, covariates_file=None,
                   config_file=None):
    """Fit a conditional multinomial model as set up in a config file

    This function is a convenience wrapper around :func:`read_counts`,
    :func:`~skqpad.likelihood.cmulti`, and the functions in
    :mod:`skqpad.offsets`.

    Parameters
    ----------
    counts_file, boundaries_file : str or file-like
        Paths to the count and boundary tables.
    covariates_file : str or file-like, optional
        Path to the covariate table.
    config_file : str, optional
        A valid string path for the configuration file.  Default
        settings are used if not given.

    Returns
    -------
    fit : CMultiFit
    table : pandas.DataFrame
        Parameters on their natural scale for every sampling unit, with
        availability (`p`) or perceptibility (`q`) and area (`A`) columns
        if offsets are required.

    See Also
    --------
    skqpad.fitconfig.dump_config_template : configuration template

    """
    config = fitconfig.read_config(config_file)

    logger.setLevel(config["log_level"])

    counts = read_counts(counts_file, boundaries_file, covariates_file)
    logger.info("Read counts:\n{}".format(counts))

    model = config["model"]
    logger.info("Model config: {}, optimizer config: {}"
                .format(model, config["optimizer"]))
    fit = cmulti(model["formula"], counts, type=model["type"],
                 on_failure=config["on_failure"], **config["optimizer"])

    newdata = counts.X
    if newdata is None:
        newdata = pd.DataFrame(index=counts.index)
    table = fit.natural(newdata=newdata)

    off_cfg = config["offsets"]
    if off_cfg["required"]:
        logger.info("Offsets config: {}".format(off_cfg))
        if fit.type == "dis":
            max_distance = float(off_cfg["max_distance"])
            table["q"] = offsets.perceptibility(table["tau"], max_distance)
            table["A"] = offsets.sampled_area(table["tau"], max_distance)
        else:
            c = table["c"] if "c" in table else 1
            table["p"] = offsets.availability(table["phi"],
                                              float(off_cfg["duration"]),
                                              c)
        logger.info("Mean correction components:\n{}"
                    .format(table.mean(numeric_only=True)))

    table.insert(0, "total", np.asarray(counts.total))
    return(fit, table)
