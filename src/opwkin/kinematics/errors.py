"""Error types for the OPW kinematics solver."""

from enum import Enum


class InvalidParameterError(ValueError):
    """Raised when a geometric parameter set cannot describe an OPW arm."""


class IKErrorKind(Enum):
    """Expected failure outcomes of an inverse kinematics query.

    These are returned inside a :class:`~opwkin.kinematics.selection.SelectionResult`
    and never raised.
    """

    UNREACHABLE = "unreachable"
    NO_SOLUTION_WITHIN_LIMITS = "no_solution_within_limits"
