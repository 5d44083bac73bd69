"""
Exceptions raised by the material laws.
"""


class MaterialLawError(Exception):
    """Base class of all errors raised by pymatlaw."""


class NotFinalizedError(MaterialLawError):
    """A parameter was read before the parameter set was finalized."""


class InvalidParameterError(MaterialLawError, ValueError):
    """A coefficient lies outside its valid domain."""


class DomainError(MaterialLawError):
    """The requested phase/state is not modeled by the law."""


class NumericalSingularity(MaterialLawError, ArithmeticError):
    """
    An evaluation hit an unregularized end point of the raw curve
    (effective saturation or capillary pressure exactly at zero).
    """
