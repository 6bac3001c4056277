r"""Conditional multinomial models for binned removal and distance data

For each sampling unit, counts of new individuals :math:`Y_{ij}` in
intervals :math:`j = 1, \dots, k` with cumulative boundaries
:math:`t_j` (durations or radii) are modelled as multinomial, with cell
probabilities derived from a cumulative detection curve :math:`P(t)`:

.. math::
   :label: 1

   \pi_{ij} = P(t_{ij}) - P(t_{i,j-1}), \quad P(t_{i0}) = 0

Only the probability of registration by the last observed boundary,
:math:`P(t_{ik})`, is available to the counts, so the likelihood is
conditioned on it:

.. math::
   :label: 2

   log\ L = \sum_i \left[ log\ N_i! - \sum_j log\ Y_{ij}! +
                          \sum_j Y_{ij} log \frac{\pi_{ij}}{P(t_{ik})}
                   \right]

where :math:`N_i` is the total count of unit :math:`i`.  Units with
:math:`N_i = 0` carry no information and are dropped.

Four curve families are implemented as subclasses of :class:`Curve`:

``rem``
   Removal model, :math:`P(t) = 1 - e^{-t \phi}`, with
   :math:`log\ \phi` linear in covariates.

``dis``
   Half-normal distance model, :math:`P(r) = 1 - e^{-(r/\tau)^2}`, with
   :math:`log\ \tau` linear in covariates.

``fmix``
   Finite mixture, :math:`P(t) = 1 - c e^{-t \phi}`, with
   :math:`log\ \phi` linear in covariates and constant :math:`c`.

``mix``
   Finite mixture as above, with :math:`logit\ c` linear in covariates
   and constant :math:`\phi`.

Coefficients are estimated on the link scale by maximizing :eq:`2` with
:func:`scipy.optimize.minimize`, and their covariance is the inverse of
the observed information.

Functions & classes summary
---------------------------

.. autosummary::

   cmulti
   cmulti_fit
   cmulti_fit1
   cell_probs
   loglik
   score
   CMultiFit
   Curve
   get_curve


API
---

"""

from .curves import (Curve, Removal, HalfNormal, FiniteMixturePhi,
                     FiniteMixtureC, CURVES, get_curve)
from .cmultifit import (cmulti, cmulti_fit, cmulti_fit1, cell_probs,
                        loglik, score, CMultiFit)

__all__ = ["cmulti", "cmulti_fit", "cmulti_fit1", "cell_probs", "loglik",
           "score", "CMultiFit", "Curve", "Removal", "HalfNormal",
           "FiniteMixturePhi", "FiniteMixtureC", "CURVES", "get_curve"]
