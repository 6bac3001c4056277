"""Binned interval-count data for removal and distance sampling

"""

import logging
import numpy as np
import pandas as pd
from skqpad.errors import DataError, DomainError

logger = logging.getLogger(__name__)
# Add the null handler if importing as library; whatever using this library
# should set up logging.basicConfig() as needed
logger.addHandler(logging.NullHandler())

__all__ = ["IntervalCounts"]


def _as_frame(x):
    """Coerce array-like to a float DataFrame, keeping existing labels"""
    if isinstance(x, pd.DataFrame):
        return(x.astype(float))

    arr = np.asarray(x, dtype=float)
    if arr.ndim == 1:
        arr = arr.reshape((1, -1))
    elif arr.ndim != 2:
        msg = "Expected a 2-D array, got {} dimensions".format(arr.ndim)
        logger.error(msg)
        raise DataError(msg)

    return(pd.DataFrame(arr))


def _readonly(arr):
    arr = np.array(arr, dtype=float)
    arr.setflags(write=False)
    return(arr)


class IntervalCounts:
    """Counts of new individuals by time or distance interval

    Immutable container for the observation matrix `Y` (rows are sampling
    units, columns are ordered intervals), the matching matrix of
    cumulative interval boundaries `D`, and an optional covariate table
    `X` with one row per sampling unit.  Intervals a unit did not use are
    ``NaN`` in both `Y` and `D`, and must form a trailing block in the
    row.  The last observed boundary may be ``inf``.

    Attributes
    ----------
    Y : ndarray, shape (n, k)
        Read-only counts of newly detected individuals.
    D : ndarray, shape (n, k)
        Read-only cumulative upper boundaries of each interval.
    X : pandas.DataFrame or None
        Covariates indexed like the rows of `Y`.
    index : pandas.Index
        Labels for the sampling units.
    intervals : pandas.Index
        Labels for the intervals.

    Examples
    --------
    >>> counts = IntervalCounts([[2, 1, 0]], [[3, 5, 10]])
    >>> counts.total
    array([3.])

    """
    def __init__(self, Y, D, X=None):
        """Validate and set up attributes for `IntervalCounts` objects

        Parameters
        ----------
        Y : array_like or pandas.DataFrame
            2-D counts; a 1-D input is taken as a single sampling unit.
        D : array_like or pandas.DataFrame
            2-D interval boundaries with the same shape as `Y`.
        X : pandas.DataFrame, optional
            Covariates, one row per sampling unit.

        """
        Y = _as_frame(Y)
        D = _as_frame(D)
        if Y.shape != D.shape:
            msg = ("Shape of Y {} does not match shape of D {}"
                   .format(Y.shape, D.shape))
            logger.error(msg)
            raise DataError(msg)

        yy = Y.to_numpy()
        dd = D.to_numpy()
        self._check(yy, dd)

        if X is not None:
            X = pd.DataFrame(X)
            if X.shape[0] != yy.shape[0]:
                msg = ("X has {} rows but Y has {}"
                       .format(X.shape[0], yy.shape[0]))
                logger.error(msg)
                raise DataError(msg)
            X = X.set_axis(Y.index, axis=0)

        self._Y = _readonly(yy)
        self._D = _readonly(dd)
        self._X = X
        self.index = Y.index
        self.intervals = Y.columns

    @staticmethod
    def _check(yy, dd):
        """Check invariants of count and boundary matrices"""
        observed = ~np.isnan(dd)
        if np.any(np.isnan(yy) != ~observed):
            msg = "Unobserved cells in Y and D must coincide"
            logger.error(msg)
            raise DataError(msg)

        # Observed cells must be a contiguous prefix of each row
        nobs_row = observed.sum(axis=1)
        prefix = np.arange(dd.shape[1]) < nobs_row[:, np.newaxis]
        if np.any(observed != prefix):
            msg = "Observed intervals must be a contiguous prefix of rows"
            logger.error(msg)
            raise DataError(msg)
        if np.any(nobs_row == 0):
            msg = "Every row needs at least one observed interval"
            logger.error(msg)
            raise DataError(msg)

        if np.any(yy[observed] < 0):
            msg = "Counts must be non-negative"
            logger.error(msg)
            raise DataError(msg)

        if np.any(dd[observed] <= 0):
            msg = "Interval boundaries must be strictly positive"
            logger.error(msg)
            raise DomainError(msg)

        # Only the last observed boundary of a row may be infinite
        inner = np.arange(dd.shape[1]) < (nobs_row - 1)[:, np.newaxis]
        if np.any(np.isinf(dd[inner])):
            msg = "Only the last observed boundary may be infinite"
            logger.error(msg)
            raise DomainError(msg)

        steps = np.diff(dd, axis=1)
        steps = steps[~np.isnan(steps)]
        if np.any(steps < 0):
            msg = "Interval boundaries must be non-decreasing within rows"
            logger.error(msg)
            raise DataError(msg)
        if np.any(steps == 0):
            msg = "Interval boundaries must be strictly increasing"
            logger.error(msg)
            raise DomainError(msg)

    def __str__(self):
        objcls = ("Class {} object\n".format(self.__class__.__name__))
        dim_str = ("{0:<20} {1} units x {2} intervals\n"
                   .format("dimensions:", self.nobs, self.nintervals))
        det_str = ("{0:<20} {1}\n"
                   .format("units with counts:",
                           int((self.total > 0).sum())))
        if self._X is None:
            cov_str = "{0:<20} {1}".format("covariates:", "none")
        else:
            cov_str = ("{0:<20} {1}"
                       .format("covariates:", list(self._X.columns)))
        return(objcls + dim_str + det_str + cov_str)

    @property
    def Y(self):
        return(self._Y)

    @property
    def D(self):
        return(self._D)

    @property
    def X(self):
        if self._X is None:
            return(None)
        return(self._X.copy())

    @property
    def nobs(self):
        """Number of sampling units"""
        return(self._Y.shape[0])

    @property
    def nintervals(self):
        """Number of interval columns"""
        return(self._Y.shape[1])

    @property
    def total(self):
        """Total count per sampling unit"""
        return(np.nansum(self._Y, axis=1))

    @property
    def last_boundary(self):
        """Last observed boundary per sampling unit"""
        nobs_row = (~np.isnan(self._D)).sum(axis=1)
        return(self._D[np.arange(self.nobs), nobs_row - 1])

    def to_frames(self):
        """Return `Y` and `D` as labelled DataFrames

        Returns
        -------
        Y, D : pandas.DataFrame

        """
        Y = pd.DataFrame(self._Y, index=self.index, columns=self.intervals)
        D = pd.DataFrame(self._D, index=self.index, columns=self.intervals)
        return(Y, D)

    def subset(self, rows):
        """New `IntervalCounts` with selected rows

        Parameters
        ----------
        rows : array_like
            Boolean mask or integer positions.

        Returns
        -------
        IntervalCounts

        """
        Y, D = self.to_frames()
        X = self._X
        if X is not None:
            X = X.iloc[rows]
        return(IntervalCounts(Y.iloc[rows], D.iloc[rows], X))

    def nonzero(self):
        """New `IntervalCounts` with only rows having detections"""
        return(self.subset(self.total > 0))

    @classmethod
    def from_long(cls, records, unit, interval, boundaries, count=None,
                  covariates=None):
        """Cross-tabulate long-format detections into counts

        Parameters
        ----------
        records : pandas.DataFrame
            One row per detection (or per group of detections if `count`
            is given).
        unit : str
            Column in `records` identifying the sampling unit.
        interval : str
            Column in `records` identifying the interval of first
            detection; values must be column labels of `boundaries`.
        boundaries : pandas.DataFrame or array_like
            Cumulative interval boundaries.  A DataFrame is indexed by
            sampling unit, with intervals as columns and ``NaN`` where a
            unit's protocol has no such interval.  A Series (indexed by
            interval) or 1-D sequence (intervals labelled by position)
            applies the same boundaries to every unit in `records`.
        count : str, optional
            Column in `records` with the number of individuals.
        covariates : pandas.DataFrame, optional
            Covariates indexed by sampling unit.

        Returns
        -------
        IntervalCounts

        Examples
        --------
        >>> recs = pd.DataFrame({"site": ["a", "a", "b"],
        ...                      "tbin": [0, 1, 0]})
        >>> ic = IntervalCounts.from_long(recs, "site", "tbin", [3, 5, 10])
        >>> ic.Y
        array([[1., 1., 0.],
               [1., 0., 0.]])

        """
        if not isinstance(boundaries, pd.DataFrame):
            if isinstance(boundaries, pd.Series):
                labels = boundaries.index
            else:
                labels = None
            brks = np.asarray(boundaries, dtype=float)
            units = pd.Index(pd.unique(records[unit]))
            boundaries = pd.DataFrame(np.tile(brks, (units.size, 1)),
                                      index=units, columns=labels)

        unknown = ~records[interval].isin(boundaries.columns)
        if unknown.any():
            msg = ("Intervals not in boundaries: {}"
                   .format(records.loc[unknown, interval].unique()))
            logger.error(msg)
            raise DataError(msg)
        unknown = ~records[unit].isin(boundaries.index)
        if unknown.any():
            msg = ("Units not in boundaries: {}"
                   .format(records.loc[unknown, unit].unique()))
            logger.error(msg)
            raise DataError(msg)

        values = None if count is None else records[count]
        aggfunc = None if count is None else "sum"
        xtab = pd.crosstab(records[unit], records[interval], values=values,
                           aggfunc=aggfunc)
        Y = (xtab.reindex(index=boundaries.index,
                          columns=boundaries.columns)
             .fillna(0)
             .where(boundaries.notna()))

        if covariates is not None:
            covariates = covariates.reindex(boundaries.index)

        return(cls(Y, boundaries, covariates))
