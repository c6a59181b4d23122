"""Error taxonomy for the matchup simulation engine.

Every failure is raised synchronously to the caller.  Numeric degeneracy
(e.g. a zero-variance trial population) is not an error: it is logged and
recorded on the summary instead.
"""


class SimulationError(Exception):
    """Base class for all engine failures."""


class ConfigurationError(SimulationError, ZeroDivisionError):
    """Raised when a baseline or configuration cannot support normalization.

    Typical causes are a league metric with zero standard deviation (a
    single-team or constant-valued season) or an invalid config knob.
    """


class InvalidInputError(SimulationError, ValueError):
    """Raised when a run request is rejected before any trial executes."""


class ConcurrentRunError(SimulationError, RuntimeError):
    """Raised when a run is requested while another run is still active."""
