"""Conditional multinomial maximum likelihood fitting

"""

import logging
import numpy as np
import pandas as pd
import patsy
from scipy.optimize import minimize
from scipy.special import gammaln
from scipy.stats import norm
from statsmodels.tools.numdiff import approx_fprime
from statsmodels.tools import eval_measures
from skqpad.counts import IntervalCounts
from skqpad.errors import DataError, ConvergenceError
from .curves import get_curve

logger = logging.getLogger(__name__)
# Add the null handler if importing as library; whatever using this library
# should set up logging.basicConfig() as needed
logger.addHandler(logging.NullHandler())

__all__ = ["cell_probs", "loglik", "score", "cmulti_fit", "cmulti_fit1",
           "cmulti", "CMultiFit"]

_TINY = np.finfo(float).tiny
_HUGE = np.finfo(float).max
_ON_FAILURE = ["flag", "raise"]


def _last_observed(D):
    return((~np.isnan(D)).sum(axis=1) - 1)


def cell_probs(type, coefs, D, X=None):
    """Multinomial cell probabilities for each interval

    Parameters
    ----------
    type : {"rem", "dis", "fmix", "mix"} or Curve
        Model type.
    coefs : array_like
        Coefficients on the link scale.
    D : array_like, shape (n, k)
        Cumulative interval boundaries; ``NaN`` for unobserved intervals.
    X : array_like, shape (n, p), optional
        Design matrix.  Default is an intercept only.

    Returns
    -------
    P : ndarray, shape (n, k)
        Probability of first registration in each interval (``NaN`` for
        unobserved intervals).
    never : ndarray, shape (n,)
        Probability of not being registered by the last observed boundary.

    """
    curve = get_curve(type)
    D = np.atleast_2d(np.asarray(D, dtype=float))
    X = _design_array(X, D.shape[0])
    etas = curve.build_linear_predictor(coefs, X)
    cdf = curve.evaluate_cdf(D, etas)
    P = np.diff(cdf, axis=1, prepend=0)
    never = 1 - cdf[np.arange(D.shape[0]), _last_observed(D)]
    return(P, never)


def _design_array(X, nrows):
    if X is None:
        return(np.ones((nrows, 1)))
    X = np.asarray(X, dtype=float)
    if X.ndim == 1:
        X = X.reshape((-1, 1))
    if X.shape[0] != nrows:
        msg = ("Design has {} rows but data have {}"
               .format(X.shape[0], nrows))
        logger.error(msg)
        raise DataError(msg)
    return(X)


def _loglik_parts(coefs, curve, Y, D, X, deriv=True):
    """Conditional log-likelihood and its gradient

    Zero-count rows must be removed beforehand.

    """
    nrows = Y.shape[0]
    rows = np.arange(nrows)
    last = _last_observed(D)
    etas = curve.build_linear_predictor(coefs, X)
    cdf = curve.evaluate_cdf(D, etas)
    P = np.diff(cdf, axis=1, prepend=0)
    Psum = np.maximum(cdf[rows, last], _TINY)
    Ysum = np.nansum(Y, axis=1)
    PPsum = np.clip(P / Psum[:, np.newaxis], _TINY, _HUGE)
    lconst = np.sum(gammaln(Ysum + 1) - np.nansum(gammaln(Y + 1), axis=1))
    ll = np.nansum(Y * np.log(PPsum)) + lconst
    if not deriv:
        return(ll, None)

    Pc = np.maximum(P, _TINY)
    grads = []
    for dcdf, design in zip(curve.cdf_deriv(D, etas), curve.designs(X)):
        dP = np.diff(dcdf, axis=1, prepend=0)
        g_eta = (np.nansum(Y * dP / Pc, axis=1) -
                 Ysum * dcdf[rows, last] / Psum)
        grads.append(design.T @ g_eta)

    return(ll, np.concatenate(grads))


def loglik(type, coefs, Y, D, X=None):
    """Conditional multinomial log-likelihood

    Rows without detections carry no information and are dropped.

    Parameters
    ----------
    type : {"rem", "dis", "fmix", "mix"} or Curve
        Model type.
    coefs : array_like
        Coefficients on the link scale.
    Y : array_like, shape (n, k)
        Counts of new individuals per interval.
    D : array_like, shape (n, k)
        Cumulative interval boundaries.
    X : array_like, shape (n, p), optional
        Design matrix.  Default is an intercept only.

    Returns
    -------
    float

    """
    curve = get_curve(type)
    Y, D, X = _prepare(Y, D, X)
    return(_loglik_parts(coefs, curve, Y, D, X, deriv=False)[0])


def score(type, coefs, Y, D, X=None):
    """Gradient of :func:`loglik` with respect to `coefs`"""
    curve = get_curve(type)
    Y, D, X = _prepare(Y, D, X)
    return(_loglik_parts(coefs, curve, Y, D, X)[1])


def _prepare(Y, D, X):
    """Validate inputs and keep rows with detections"""
    counts = IntervalCounts(Y, D)
    X = _design_array(X, counts.nobs)
    ok = counts.total > 0
    if not np.any(ok):
        msg = "No sampling units with detections"
        logger.error(msg)
        raise DataError(msg)
    return(counts.Y[ok], counts.D[ok], X[ok])


class CMultiFit:
    """Fitted conditional multinomial model

    Instances are created by :func:`cmulti_fit` and are not meant to be
    modified.

    Attributes
    ----------
    curve : Curve
        Curve family of the model.
    loglik : float
        Maximized log-likelihood.
    nobs : int
        Number of sampling units with detections used in the fit.
    converged : bool
        Whether the optimizer reported success.
    reliable : bool
        Whether the fit converged and the covariance is usable.
    message : str
        Optimizer message.
    niter : int
        Number of optimizer iterations.
    design_info : patsy.DesignInfo or None
        Design information used to build covariates for new data.

    """
    def __init__(self, curve, coef, vcov, loglik, nobs, converged,
                 reliable, message, niter, design_info=None):
        self.curve = curve
        self._coef = coef
        self._vcov = vcov
        self.loglik = loglik
        self.nobs = nobs
        self.converged = converged
        self.reliable = reliable
        self.message = message
        self.niter = niter
        self.design_info = design_info

    def __str__(self):
        objcls = ("Class {} object\n".format(self.__class__.__name__))
        type_str = "{0:<20} {1}\n".format("type:", self.type)
        nobs_str = "{0:<20} {1}\n".format("sampling units:", self.nobs)
        ll_str = "{0:<20} {1:.4f}\n".format("log-likelihood:", self.loglik)
        rel_str = "{0:<20} {1}\n".format("reliable:", self.reliable)
        coef_str = ("{0:<20}\n{1}"
                    .format("coefficients:", self.summary()))
        return(objcls + type_str + nobs_str + ll_str + rel_str + coef_str)

    @property
    def type(self):
        return(self.curve.tag)

    @property
    def coef(self):
        """Coefficients on the link scale"""
        return(self._coef.copy())

    @property
    def vcov(self):
        """Covariance matrix of the coefficients"""
        return(self._vcov.copy())

    @property
    def se(self):
        """Standard errors of the coefficients"""
        return(pd.Series(np.sqrt(np.diag(self._vcov.to_numpy())),
                         index=self._coef.index, name="se"))

    @property
    def df(self):
        """Number of estimated coefficients"""
        return(self._coef.size)

    @property
    def xnames(self):
        """Names of the covariate design columns"""
        ncov = [name for name, cov in self.curve.predictors if cov]
        prefix = "{}_".format(ncov[0])
        return([name[len(prefix):] for name in self._coef.index
                if name.startswith(prefix)])

    def summary(self):
        """Table of coefficients with Wald tests

        Returns
        -------
        pandas.DataFrame

        """
        est = self._coef
        se = self.se
        zval = est / se
        pval = 2 * norm.sf(np.abs(zval))
        return(pd.DataFrame({"estimate": est, "std_error": se,
                             "z_value": zval, "p_value": pval}))

    def aic(self):
        """Akaike information criterion"""
        return(eval_measures.aic(self.loglik, self.nobs, self.df))

    def aicc(self):
        """Small sample corrected AIC"""
        if self.nobs - self.df - 1 <= 0:
            return(np.inf)
        return(eval_measures.aicc(self.loglik, self.nobs, self.df))

    def bic(self):
        """Bayesian information criterion"""
        return(eval_measures.bic(self.loglik, self.nobs, self.df))

    def design(self, X=None, newdata=None):
        """Design matrix for covariates

        Parameters
        ----------
        X : array_like, optional
            Ready-made design matrix with columns matching the fit.
        newdata : pandas.DataFrame, optional
            Covariate table, transformed with the formula of the fit.

        Returns
        -------
        ndarray

        """
        if X is not None:
            X = _design_array(X, np.shape(X)[0])
        elif newdata is not None:
            if (self.design_info is None and
                    self.xnames == ["Intercept"]):
                X = np.ones((newdata.shape[0], 1))
            elif self.design_info is None:
                msg = "Fit has no formula to build a design from newdata"
                logger.error(msg)
                raise LookupError(msg)
            else:
                X = _build_design(self.design_info, newdata)
        elif self.xnames == ["Intercept"]:
            X = np.ones((1, 1))
        else:
            msg = "Covariate model requires X or newdata"
            logger.error(msg)
            raise DataError(msg)

        if X.shape[1] != len(self.xnames):
            msg = ("Design has {} columns but fit has {}"
                   .format(X.shape[1], len(self.xnames)))
            logger.error(msg)
            raise DataError(msg)

        return(X)

    def natural(self, X=None, newdata=None):
        """Model parameters on their natural scale

        Parameters
        ----------
        X, newdata : optional
            See :meth:`design`.

        Returns
        -------
        pandas.DataFrame
            One row per row of the design; columns are the natural
            parameters (``phi``, ``tau``, ``c``).  Indexed like `newdata`
            when the design is built from it.

        """
        index = None
        if X is None and newdata is not None:
            index = newdata.index
        X = self.design(X, newdata)
        etas = self.curve.build_linear_predictor(self._coef.to_numpy(), X)
        return(pd.DataFrame(self.curve.natural(etas), index=index))

    def cdf(self, t, X=None, newdata=None):
        """Cumulative probability of registration by `t`

        Parameters
        ----------
        t : float or array_like
            Durations or radii.
        X, newdata : optional
            See :meth:`design`.

        Returns
        -------
        ndarray, shape (n, m)
            For `n` design rows and `m` values of `t`.

        """
        X = self.design(X, newdata)
        tt = np.atleast_1d(np.asarray(t, dtype=float))
        tt = np.tile(tt, (X.shape[0], 1))
        etas = self.curve.build_linear_predictor(self._coef.to_numpy(), X)
        return(self.curve.evaluate_cdf(tt, etas))


def _build_design(design_info, data):
    """Evaluate design info on `data`"""
    try:
        X = patsy.build_design_matrices([design_info], data,
                                        NA_action="raise",
                                        return_type="dataframe")[0]
    except patsy.PatsyError as e:
        msg = "Could not build design matrix: {}".format(e)
        logger.error(msg)
        raise DataError(msg) from e

    X_arr = X.to_numpy()
    nrows = data.shape[0]
    # Formulas without variables give a single row
    if X_arr.shape[0] == 1 and nrows > 1:
        X_arr = np.tile(X_arr, (nrows, 1))
    return(X_arr)


def _vcov(coefs, objfun):
    """Covariance from the observed information at `coefs`

    Returns the covariance matrix and whether it is usable.

    """
    hess = np.atleast_2d(approx_fprime(coefs, lambda b: objfun(b)[1],
                                       centered=True))
    info = -(hess + hess.T) / 2
    try:
        vcov = np.linalg.inv(info)
    except np.linalg.LinAlgError:
        return(np.full(info.shape, np.nan), False)

    ok = np.all(np.isfinite(vcov)) and np.all(np.diag(vcov) > 0)
    if not ok:
        vcov = np.full(info.shape, np.nan)
    return(vcov, ok)


def cmulti_fit(Y, D, X=None, type="rem", inits=None, method="BFGS",
               maxiter=1000, gtol=1e-6, on_failure="flag", xnames=None,
               design_info=None, **kwargs):
    r"""Fit conditional multinomial model by maximum likelihood

    The log-likelihood of each sampling unit with at least one detection
    is multinomial, with cell probabilities conditional on registration
    by the last observed boundary.  Coefficients are estimated on the
    link scale with :func:`scipy.optimize.minimize`, using the analytic
    gradient.

    Parameters
    ----------
    Y : array_like, shape (n, k)
        Counts of new individuals per interval; ``NaN`` for unobserved
        trailing intervals.
    D : array_like, shape (n, k)
        Cumulative interval boundaries, ``NaN`` where `Y` is ``NaN``.
    X : array_like, shape (n, p), optional
        Design matrix.  Default is an intercept only.
    type : {"rem", "dis", "fmix", "mix"} or Curve
        Model type: removal, half-normal distance, finite mixture with
        covariates on :math:`\phi`, or finite mixture with covariates on
        :math:`c`.
    inits : array_like, optional
        Starting values on the link scale.
    method : str, optional
        Passed to :func:`scipy.optimize.minimize`.
    maxiter : int, optional
        Maximum number of optimizer iterations.
    gtol : float, optional
        Gradient norm tolerance for the optimizer.
    on_failure : {"flag", "raise"}, optional
        Whether a fit that did not converge, or whose Hessian cannot be
        inverted, is returned flagged as unreliable or raises
        :class:`~skqpad.errors.ConvergenceError`.
    xnames : list, optional
        Names of the design columns.  Taken from `X` if it is a
        DataFrame.
    design_info : patsy.DesignInfo, optional
        Stored in the output to build designs for new data.
    **kwargs : optional keyword arguments
        Passed to :func:`scipy.optimize.minimize`.

    Returns
    -------
    CMultiFit

    Examples
    --------
    >>> fit = cmulti_fit([[2, 1, 0]], [[3, 5, 10]], type="rem")
    >>> fit.natural()  # doctest: +SKIP

    """
    if on_failure not in _ON_FAILURE:
        msg = "on_failure must be one of: {}".format(_ON_FAILURE)
        logger.error(msg)
        raise KeyError(msg)

    curve = get_curve(type)
    if xnames is None:
        if isinstance(X, pd.DataFrame):
            xnames = list(X.columns)
        elif X is None:
            xnames = ["Intercept"]
        else:
            xnames = ["x{}".format(i)
                      for i in range(np.atleast_2d(X).shape[1])]
    Y, D, X = _prepare(Y, D, X)
    names = curve.coef_names(xnames)
    if len(names) != curve.ncoefs(X.shape[1]):
        msg = "xnames must have one name per design column"
        logger.error(msg)
        raise DataError(msg)

    if inits is None:
        inits = curve.init_coefs(D, X)
    else:
        inits = np.asarray(inits, dtype=float)
        if inits.shape != (len(names),):
            msg = ("inits must have length {}, got {}"
                   .format(len(names), inits.size))
            logger.error(msg)
            raise DataError(msg)

    def objfun(coefs):
        return(_loglik_parts(coefs, curve, Y, D, X))

    # Optimize the mean log-likelihood per unit
    nunits = Y.shape[0]

    def negll(coefs):
        ll, grad = objfun(coefs)
        return(-ll / nunits, -grad / nunits)

    logger.info("Fitting type={0} to {1} units, inits={2}"
                .format(curve.tag, Y.shape[0], inits))
    options = dict(maxiter=maxiter, gtol=gtol)
    options.update(kwargs.pop("options", {}))
    if method not in ("BFGS", "CG", "L-BFGS-B", "TNC", "trust-constr"):
        options.pop("gtol")
    res = minimize(negll, x0=inits, jac=True, method=method,
                   options=options, **kwargs)
    logger.info("N iter: {0}, LL={1}, message: {2}"
                .format(res.get("nit", 0), -res.fun * nunits, res.message))

    vcov, vcov_ok = _vcov(res.x, objfun)
    converged = bool(res.success)
    fit = CMultiFit(curve,
                    coef=pd.Series(res.x, index=names, name="coef"),
                    vcov=pd.DataFrame(vcov, index=names, columns=names),
                    loglik=float(objfun(res.x)[0]), nobs=nunits,
                    converged=converged, reliable=converged and vcov_ok,
                    message=str(res.message), niter=int(res.get("nit", 0)),
                    design_info=design_info)

    if not fit.reliable:
        if not converged:
            msg = "Optimizer did not converge: {}".format(res.message)
        else:
            msg = "Hessian not invertible; standard errors unavailable"
        if on_failure == "raise":
            logger.error(msg)
            raise ConvergenceError(msg, result=fit)
        logger.warning(msg)

    return(fit)


def cmulti_fit1(y, d, type="rem", **kwargs):
    """Fit a model to a single sampling unit

    Convenience wrapper around :func:`cmulti_fit` for a single row of
    counts and boundaries.

    Parameters
    ----------
    y : array_like, shape (k,)
        Counts per interval.
    d : array_like, shape (k,)
        Cumulative interval boundaries.
    type : {"rem", "dis", "fmix", "mix"} or Curve
        Model type.
    **kwargs : optional keyword arguments
        Passed to :func:`cmulti_fit`.

    Returns
    -------
    CMultiFit

    """
    y = np.asarray(y, dtype=float).reshape((1, -1))
    d = np.asarray(d, dtype=float).reshape((1, -1))
    return(cmulti_fit(y, d, X=None, type=type, **kwargs))


def cmulti(formula, counts, type="rem", **kwargs):
    """Fit model with covariates given by a formula

    Parameters
    ----------
    formula : str
        Right-hand side formula on the covariates of `counts`,
        e.g. ``"~ JDAY + TSSR"``; ``"~ 1"`` for a homogeneous model.
    counts : IntervalCounts
        Counts, boundaries and covariates.
    type : {"rem", "dis", "fmix", "mix"} or Curve
        Model type.
    **kwargs : optional keyword arguments
        Passed to :func:`cmulti_fit`.

    Returns
    -------
    CMultiFit

    """
    data = counts.X
    if data is None:
        data = pd.DataFrame(index=counts.index)
    dmat = _dmatrix_info(formula, data)
    X = _build_design(dmat, data)
    return(cmulti_fit(counts.Y, counts.D, X=X, type=type,
                      xnames=dmat.column_names, design_info=dmat,
                      **kwargs))


def _dmatrix_info(formula, data):
    try:
        return(patsy.dmatrix(formula, data, NA_action="raise").design_info)
    except patsy.PatsyError as e:
        msg = "Could not build design matrix: {}".format(e)
        logger.error(msg)
        raise DataError(msg) from e
