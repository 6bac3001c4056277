"""Conditional likelihood models for heterogeneous point-count surveys

Point counts of birds are collected with many protocols: different survey
durations, time intervals, truncation distances, and distance bands.
scikit-QPAD estimates the components of detectability from such data by
fitting conditional multinomial ("cmulti") models to counts of new
individuals in successive time or distance intervals:

1. Availability (:math:`p`), from time-removal models of the cue rate
   :math:`\\phi`, optionally as a finite mixture of frequent and
   infrequent singers.
2. Perceptibility (:math:`q`), from half-normal distance models of the
   effective detection radius :math:`\\tau`.
3. Correction factors :math:`C = A p q` combining them with the sampled
   area :math:`A`, for use as offsets in log-linear abundance models.

Each sampling unit may use its own interval boundaries, so data from
different protocols are analyzed together.  Counts, boundaries, and
covariates are held by :class:`IntervalCounts`; models are fitted by
:func:`cmulti` (formula interface) or :func:`cmulti_fit` (design
matrices), and compared with :func:`model_table`.

Data and fitting
----------------

.. autosummary::

   IntervalCounts
   IntervalCounts.from_long
   cmulti
   cmulti_fit
   cmulti_fit1
   CMultiFit

Model comparison and offsets
----------------------------

.. autosummary::

   model_table
   qpad_offsets

Functions
---------

.. autosummary::

   fit_from_files
   dump_config_template

"""

from skqpad.counts import IntervalCounts
from skqpad.likelihood import cmulti, cmulti_fit, cmulti_fit1, CMultiFit
from skqpad.selection import model_table
from skqpad.offsets import qpad_offsets
from skqpad.fitcounts import fit_from_files
from skqpad.fitconfig import dump_config_template
from skqpad.errors import DataError, DomainError, ConvergenceError

__author__ = "Sebastian Luque <spluque@gmail.com>"
__license__ = "AGPLv3"
__version__ = "0.1.0"
__all__ = ["IntervalCounts", "cmulti", "cmulti_fit", "cmulti_fit1",
           "CMultiFit", "model_table", "qpad_offsets", "fit_from_files",
           "dump_config_template", "DataError", "DomainError",
           "ConvergenceError"]
