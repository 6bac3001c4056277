"""Exceptions raised by scikit-QPAD

"""

__all__ = ["DataError", "DomainError", "ConvergenceError"]


class DataError(ValueError):
    """Malformed count or boundary data

    Raised for mismatched shapes, non-monotonic boundaries, gaps in the
    observed intervals, or input without any detections.

    """


class DomainError(ValueError):
    """Curve evaluated outside its domain

    Raised for negative (or zero) durations and distances, and for
    boundary sequences that are not strictly increasing.

    """


class ConvergenceError(RuntimeError):
    """Optimizer failed to converge or Hessian is not invertible

    Attributes
    ----------
    result : CMultiFit or None
        Best-effort fit, flagged as unreliable.

    """
    def __init__(self, msg, result=None):
        super().__init__(msg)
        self.result = result
