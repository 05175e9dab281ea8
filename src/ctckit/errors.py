"""Error types raised by ctckit."""

from __future__ import annotations


class InvalidInputError(ValueError):
    """Raised when emissions or labels are structurally malformed.

    Zero-probability labels are not errors; they surface as a log-likelihood
    of ``-inf`` with zero gradients.
    """
