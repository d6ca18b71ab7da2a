"""Geometric parameter model of an offset-shoulder, spherical-wrist arm."""

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

import numpy as np
from numpy.typing import NDArray

from .errors import InvalidParameterError

N_JOINTS = 6

_LENGTH_NAMES = ("c1", "c2", "c3", "c4")
_OFFSET_NAMES = ("a1", "a2", "b")


@dataclass(frozen=True)
class GeometricParameters:
    """The seven OPW lengths/offsets plus per-joint corrections.

    Attributes:
        a1: Shoulder offset along the arm plane X axis, in meters.
        a2: Elbow offset perpendicular to the forearm, in meters (often negative).
        b: Lateral offset out of the arm plane, in meters.
        c1: Height of the shoulder axis above the base, in meters.
        c2: Upper-arm length, in meters.
        c3: Forearm length (elbow to wrist center), in meters.
        c4: Wrist center to flange distance, in meters.
        offsets: Per-joint zero offsets in radians.
        sign_corrections: Per-joint direction flips, each +1 or -1.
        has_parallelogram: The forearm is driven through a parallelogram, so the
            elbow joint reading already contains the shoulder angle.

    Joint readings and model angles are related by
    ``model = joint * sign - offset``.
    """

    a1: float
    a2: float
    b: float
    c1: float
    c2: float
    c3: float
    c4: float
    offsets: tuple[float, ...] = field(default=(0.0,) * N_JOINTS)
    sign_corrections: tuple[int, ...] = field(default=(1,) * N_JOINTS)
    has_parallelogram: bool = False

    def __post_init__(self) -> None:
        for name in _OFFSET_NAMES + _LENGTH_NAMES:
            value = getattr(self, name)
            if not math.isfinite(value):
                raise InvalidParameterError(f"{name} must be finite, got {value}")
        for name in _LENGTH_NAMES:
            if getattr(self, name) < 0.0:
                raise InvalidParameterError(
                    f"{name} is a length and must be >= 0, got {getattr(self, name)}"
                )

        if len(self.offsets) != N_JOINTS:
            raise InvalidParameterError(
                f"Expected {N_JOINTS} joint offsets, got {len(self.offsets)}"
            )
        if len(self.sign_corrections) != N_JOINTS:
            raise InvalidParameterError(
                f"Expected {N_JOINTS} sign corrections, got {len(self.sign_corrections)}"
            )
        if not all(math.isfinite(o) for o in self.offsets):
            raise InvalidParameterError(f"offsets must be finite, got {self.offsets}")
        if any(s not in (1, -1) for s in self.sign_corrections):
            raise InvalidParameterError(
                f"sign_corrections must be +1 or -1, got {self.sign_corrections}"
            )

        # Normalize container types so instances compare and hash by value.
        object.__setattr__(self, "offsets", tuple(float(o) for o in self.offsets))
        object.__setattr__(
            self, "sign_corrections", tuple(int(s) for s in self.sign_corrections)
        )

    def to_model(self, joint_angles_rad: NDArray[np.float64]) -> NDArray[np.float64]:
        """Convert joint readings to the angles used by the OPW equations."""
        q = np.asarray(joint_angles_rad, dtype=np.float64)
        return q * np.asarray(self.sign_corrections) - np.asarray(self.offsets)

    def to_joint(self, model_angles_rad: NDArray[np.float64]) -> NDArray[np.float64]:
        """Inverse of :meth:`to_model`."""
        q = np.asarray(model_angles_rad, dtype=np.float64)
        return (q + np.asarray(self.offsets)) * np.asarray(self.sign_corrections)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GeometricParameters":
        """Build parameters from a flat OPW configuration mapping.

        Required keys are ``a1``, ``a2``, ``b``, ``c1``, ``c2``, ``c3`` and ``c4``.
        ``offsets``, ``sign_corrections`` and ``has_parallelogram`` are optional.
        """
        missing = [k for k in _OFFSET_NAMES + _LENGTH_NAMES if k not in data]
        if missing:
            raise InvalidParameterError(f"Missing geometric parameters: {missing}")

        kwargs: dict[str, Any] = {k: float(data[k]) for k in _OFFSET_NAMES + _LENGTH_NAMES}
        if "offsets" in data:
            kwargs["offsets"] = tuple(float(o) for o in data["offsets"])
        if "sign_corrections" in data:
            kwargs["sign_corrections"] = tuple(data["sign_corrections"])
        if "has_parallelogram" in data:
            kwargs["has_parallelogram"] = bool(data["has_parallelogram"])
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Return the flat configuration mapping accepted by :meth:`from_dict`."""
        return {
            "a1": self.a1,
            "a2": self.a2,
            "b": self.b,
            "c1": self.c1,
            "c2": self.c2,
            "c3": self.c3,
            "c4": self.c4,
            "offsets": list(self.offsets),
            "sign_corrections": list(self.sign_corrections),
            "has_parallelogram": self.has_parallelogram,
        }
