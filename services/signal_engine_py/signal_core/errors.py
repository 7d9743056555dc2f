"""Exceptions raised by the indicator library and signal generator."""


class IndicatorError(ValueError):
    """Raised when indicator inputs or parameters are malformed."""


class InsufficientDataError(IndicatorError):
    """Raised when a series is too short to produce a single output value."""


class MisalignedInputError(IndicatorError):
    """Raised when parallel price/volume series differ in length."""
