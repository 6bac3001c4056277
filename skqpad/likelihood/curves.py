"""Cumulative detection curves for conditional multinomial models

Each curve gives the probability that an individual has been registered
by boundary value `t` (a duration or a radius).  Parameters enter
through linear predictors on the link scale, so that any real
coefficient vector is valid.

"""

import logging
from abc import ABCMeta, abstractmethod
import numpy as np
from scipy.special import expit
from skqpad.errors import DomainError

logger = logging.getLogger(__name__)
# Add the null handler if importing as library; whatever using this library
# should set up logging.basicConfig() as needed
logger.addHandler(logging.NullHandler())

__all__ = ["Curve", "Removal", "HalfNormal", "FiniteMixturePhi",
           "FiniteMixtureC", "CURVES", "get_curve"]


def _check_domain(t):
    t = np.asarray(t, dtype=float)
    if np.any(t < 0):
        msg = "Curve evaluated at negative duration or distance"
        logger.error(msg)
        raise DomainError(msg)
    return(t)


def _xexpx(x):
    """x * exp(-x), with its limit 0 at x = inf"""
    with np.errstate(invalid="ignore"):
        res = x * np.exp(-x)
    return(np.where(np.isposinf(x), 0.0, res))


def _intercept_column(X):
    """Position of the first all-ones column in design `X`, or None"""
    ones = np.all(X == 1, axis=0)
    if np.any(ones):
        return(int(np.argmax(ones)))
    return(None)


class Curve(metaclass=ABCMeta):
    """Abstract base class for cumulative detection curves

    Subclasses define the linear predictors of the model and the
    cumulative probability function evaluated at interval boundaries.

    Attributes
    ----------
    tag : str
        Short type name of the model.
    predictors : tuple
        Pairs ``(name, uses_covariates)`` for each linear predictor, in
        the order their coefficients appear in the coefficient vector.
        Predictors not using covariates have a single coefficient.

    """
    tag = None
    predictors = ()

    def __str__(self):
        objcls = ("Class {} object\n".format(self.__class__.__name__))
        tag_str = "{0:<20} {1}\n".format("type:", self.tag)
        pred_str = ("{0:<20} {1}"
                    .format("linear predictors:",
                            [name for name, _ in self.predictors]))
        return(objcls + tag_str + pred_str)

    def ncoefs(self, ncov):
        """Number of coefficients given `ncov` design columns"""
        return(sum(ncov if cov else 1 for _, cov in self.predictors))

    def coef_names(self, xnames):
        """Coefficient names given the design column names `xnames`"""
        names = []
        for name, cov in self.predictors:
            if cov:
                names.extend(["{}_{}".format(name, x) for x in xnames])
            else:
                names.append(name)
        return(names)

    def build_linear_predictor(self, coefs, X):
        """Row-wise linear predictors

        Parameters
        ----------
        coefs : array_like
            1-D coefficient vector, ordered as `predictors`.
        X : ndarray, shape (n, k)
            Covariate design matrix.

        Returns
        -------
        etas : list of ndarray
            One array of shape (n,) per linear predictor.

        """
        coefs = np.asarray(coefs, dtype=float)
        nrows, ncov = X.shape
        etas = []
        pos = 0
        for _, cov in self.predictors:
            if cov:
                etas.append(X @ coefs[pos:pos + ncov])
                pos += ncov
            else:
                etas.append(np.repeat(coefs[pos], nrows))
                pos += 1
        return(etas)

    def designs(self, X):
        """Design matrix multiplying each linear predictor"""
        ones = np.ones((X.shape[0], 1))
        return([X if cov else ones for _, cov in self.predictors])

    @abstractmethod
    def evaluate_cdf(self, t, etas):
        """Cumulative probability of registration by `t`

        Parameters
        ----------
        t : ndarray, shape (n, k)
            Interval boundaries; ``inf`` is allowed and ``NaN`` marks
            unobserved cells.
        etas : list of ndarray
            Linear predictors, each of shape (n,).

        Returns
        -------
        ndarray, shape (n, k)

        """
        pass

    @abstractmethod
    def cdf_deriv(self, t, etas):
        """Derivatives of the cdf with respect to each linear predictor

        Returns
        -------
        list of ndarray
            Each with the shape of `t`.

        """
        pass

    @abstractmethod
    def natural(self, etas):
        """Back-transform linear predictors to model parameters

        Returns
        -------
        dict
            Parameter name to array of shape (n,).

        """
        pass

    @abstractmethod
    def init_coefs(self, D, X):
        """Starting values for the coefficient vector"""
        pass

    def _init_scale(self, D):
        # Median finite boundary sets the time or distance scale
        finite = D[np.isfinite(D)]
        if finite.size == 0:
            return(1.0)
        return(float(np.median(finite)))

    def _init_predictor(self, value, X, cov):
        if not cov:
            return([value])
        init = np.zeros(X.shape[1])
        icol = _intercept_column(X)
        if icol is not None:
            init[icol] = value
        return(list(init))


class Removal(Curve):
    r"""Time-removal model with constant cue rate

    .. math::

       P(t) = 1 - e^{-t \phi}, \quad \phi = e^{\eta}

    With an intercept-only design this is the homogeneous removal model.

    """
    tag = "rem"
    predictors = (("log.phi", True),)

    def evaluate_cdf(self, t, etas):
        t = _check_domain(t)
        phi = np.exp(etas[0])[:, np.newaxis]
        return(-np.expm1(-t * phi))

    def cdf_deriv(self, t, etas):
        t = _check_domain(t)
        phi = np.exp(etas[0])[:, np.newaxis]
        return([_xexpx(t * phi)])

    def natural(self, etas):
        return({"phi": np.exp(etas[0])})

    def init_coefs(self, D, X):
        return(np.array(self._init_predictor(-np.log(self._init_scale(D)),
                                             X, True)))


class HalfNormal(Curve):
    r"""Half-normal distance model

    .. math::

       P(r) = 1 - e^{-(r / \tau)^2}, \quad \tau = e^{\eta}

    """
    tag = "dis"
    predictors = (("log.tau", True),)

    def evaluate_cdf(self, t, etas):
        t = _check_domain(t)
        tau = np.exp(etas[0])[:, np.newaxis]
        return(-np.expm1(-(t / tau) ** 2))

    def cdf_deriv(self, t, etas):
        t = _check_domain(t)
        tau = np.exp(etas[0])[:, np.newaxis]
        return([-2 * _xexpx((t / tau) ** 2)])

    def natural(self, etas):
        return({"tau": np.exp(etas[0])})

    def init_coefs(self, D, X):
        return(np.array(self._init_predictor(np.log(self._init_scale(D)),
                                             X, True)))


class _FiniteMixture(Curve):
    r"""Two-point finite mixture of removal processes

    A proportion :math:`c` of individuals give cues at rate :math:`\phi`,
    and the remaining :math:`1 - c` are registered immediately:

    .. math::

       P(t) = 1 - c e^{-t \phi}

    The atom of mass :math:`1 - c` at zero falls in the first interval.

    """
    def evaluate_cdf(self, t, etas):
        t = _check_domain(t)
        phi = np.exp(etas[0])[:, np.newaxis]
        c = expit(etas[1])[:, np.newaxis]
        return(1 - c * np.exp(-t * phi))

    def cdf_deriv(self, t, etas):
        t = _check_domain(t)
        phi = np.exp(etas[0])[:, np.newaxis]
        c = expit(etas[1])[:, np.newaxis]
        d_phi = c * _xexpx(t * phi)
        d_c = -c * (1 - c) * np.exp(-t * phi)
        return([d_phi, d_c])

    def natural(self, etas):
        return({"phi": np.exp(etas[0]), "c": expit(etas[1])})

    def init_coefs(self, D, X):
        phi_cov, c_cov = [cov for _, cov in self.predictors]
        init = self._init_predictor(-np.log(self._init_scale(D)), X,
                                    phi_cov)
        init.extend(self._init_predictor(0.0, X, c_cov))
        return(np.array(init))


class FiniteMixturePhi(_FiniteMixture):
    """Finite mixture with covariates on the cue rate, constant `c`"""
    tag = "fmix"
    predictors = (("log.phi", True), ("logit.c", False))


class FiniteMixtureC(_FiniteMixture):
    """Finite mixture with covariates on the mixing proportion `c`"""
    tag = "mix"
    predictors = (("log.phi", False), ("logit.c", True))


CURVES = {curve.tag: curve for curve in
          (Removal, HalfNormal, FiniteMixturePhi, FiniteMixtureC)}


def get_curve(type):
    """Curve instance for model type tag

    Parameters
    ----------
    type : {"rem", "dis", "fmix", "mix"} or Curve
        Model type.

    Returns
    -------
    Curve

    """
    if isinstance(type, Curve):
        return(type)
    try:
        return(CURVES[type]())
    except KeyError:
        msg = ("type must be one of: {}".format(list(CURVES.keys())))
        logger.error(msg)
        raise KeyError(msg) from None
