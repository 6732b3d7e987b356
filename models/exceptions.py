class KineticsError(ValueError):
    """Base class for errors raised by the kinetic solver and the sweep evaluator."""


class InvalidParameter(KineticsError):
    """A rate, an initial amount, a time grid or a sweep definition is not valid."""


class DegenerateRates(KineticsError):
    """
    Splicing and decay rates coincide (within tolerance) and the caller asked
    for an error instead of the repeated-eigenvalue solution.
    """
