"""Factory functions for the geometry and joint limits of supported robots."""

import math

from .params import GeometricParameters
from .selection import JointLimits

# Shorthand constants used in the offset tables.
_HALF_PI = math.pi / 2


def _deg(lower: float, upper: float) -> tuple[float, float]:
    return math.radians(lower), math.radians(upper)


def kuka_kr6_r700_sixx() -> GeometricParameters:
    """OPW parameters of the KUKA KR 6 R700 sixx.

    Joint 2 reads zero with the upper arm horizontal, hence the -pi/2 offset.
    Axes 1, 4 and 6 turn the opposite way to the OPW convention.
    """
    return GeometricParameters(
        a1=0.025,
        a2=-0.035,
        b=0.000,
        c1=0.400,
        c2=0.315,
        c3=0.365,
        c4=0.080,
        offsets=(0.0, -_HALF_PI, 0.0, 0.0, 0.0, 0.0),
        sign_corrections=(-1, 1, 1, -1, 1, -1),
    )


def kuka_kr6_r700_sixx_limits() -> JointLimits:
    """Software limits of the KR 6 R700 sixx, from the data sheet."""
    return JointLimits(
        (
            _deg(-170.0, 170.0),
            _deg(-190.0, 45.0),
            _deg(-120.0, 156.0),
            _deg(-185.0, 185.0),
            _deg(-120.0, 120.0),
            _deg(-350.0, 350.0),
        )
    )


def abb_irb2400() -> GeometricParameters:
    """OPW parameters of the ABB IRB 2400/10.

    Joint 3 reads zero with the forearm horizontal while the upper arm is
    vertical, hence the -pi/2 offset.
    """
    return GeometricParameters(
        a1=0.100,
        a2=-0.135,
        b=0.000,
        c1=0.615,
        c2=0.705,
        c3=0.755,
        c4=0.085,
        offsets=(0.0, 0.0, -_HALF_PI, 0.0, 0.0, 0.0),
    )


def abb_irb2400_limits() -> JointLimits:
    return JointLimits(
        (
            _deg(-180.0, 180.0),
            _deg(-100.0, 110.0),
            _deg(-60.0, 65.0),
            _deg(-200.0, 200.0),
            _deg(-120.0, 120.0),
            _deg(-400.0, 400.0),
        )
    )
