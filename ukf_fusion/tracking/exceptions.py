"""
Tracking Exceptions
"""


class NumericalError(ArithmeticError):
    """
    Raised when a filter step cannot be completed numerically.

    Covers a covariance that has no Cholesky factor (not positive definite,
    usually accumulated drift) and an innovation covariance that cannot be
    inverted. Fatal to the current observation only.
    """
