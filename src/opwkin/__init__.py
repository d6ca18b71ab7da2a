from .kinematics import (
    GeometricParameters,
    IKErrorKind,
    InvalidParameterError,
    JointLimits,
    OPWSolver,
    Pose,
    SelectionMode,
    SelectionResult,
    SolverConfig,
    forward,
    inverse_raw,
    select,
)

__all__ = [
    "GeometricParameters",
    "IKErrorKind",
    "InvalidParameterError",
    "JointLimits",
    "OPWSolver",
    "Pose",
    "SelectionMode",
    "SelectionResult",
    "SolverConfig",
    "forward",
    "inverse_raw",
    "select",
]
