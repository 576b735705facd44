"""Error taxonomy shared by the simulation core.

Segment breaks and censored exit times are ordinary outcomes and are never
reported through these exceptions.
"""

from __future__ import annotations


class IndexEffectivenessError(Exception):
    """Base class for all errors raised by this package."""


class InvalidParameter(IndexEffectivenessError, ValueError):
    """A distribution or experiment was configured outside its domain.

    Raised at construction time, before any simulation work starts.
    """


class PreconditionViolation(IndexEffectivenessError, ValueError):
    """The segmentation engine received points out of order.

    x must be strictly increasing and y non-decreasing over admitted points.
    """

    def __init__(self, message: str, *, x: float, y: float) -> None:
        self.x = x
        self.y = y
        super().__init__(message)
