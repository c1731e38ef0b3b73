"""Exception classes for PyBycatch.

Exceptions raised inside species tasks cross process boundaries, so every
class with a custom constructor defines ``__reduce__`` to rebuild itself
from its constructor arguments.
"""


class BycatchError(Exception):
    """Base exception for bycatch simulation errors."""

    pass


class UndefinedElasticityError(BycatchError, ValueError):
    """Raised when the elasticity transform has no numeric value.

    This happens when the bycatch mortality rate is zero (the decline
    cannot be attributed to bycatch) or when an input is missing.
    """

    def __init__(self, delta: float, fe: float, message: str = None):
        if message is None:
            message = f"Elasticity transform undefined for delta={delta}, fe={fe}"
        super().__init__(message)
        self.delta = delta
        self.fe = fe
        self.message = message

    def __reduce__(self):
        return (type(self), (self.delta, self.fe, self.message))


class MissingInputError(BycatchError):
    """Raised when a run has no species, no stocks or lacks required columns."""

    pass


class SpeciesSimulationError(BycatchError):
    """Raised when a single species cannot be simulated."""

    def __init__(self, species: str, message: str):
        super().__init__(f"{species}: {message}")
        self.species = species
        self.message = message

    def __reduce__(self):
        return (type(self), (self.species, self.message))
