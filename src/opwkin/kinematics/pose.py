"""Tool pose representation: a rotation and a translation in the base frame."""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .transforms import homogeneous


@dataclass(frozen=True, eq=False)
class Pose:
    """Rigid transform of the tool frame expressed in the robot base frame.

    Attributes:
        rotation: (3, 3) rotation matrix (orthonormal, determinant +1).
        translation: (3,) position in meters.
    """

    rotation: NDArray[np.float64]
    translation: NDArray[np.float64]

    def __post_init__(self) -> None:
        rotation = np.array(self.rotation, dtype=np.float64)
        translation = np.array(self.translation, dtype=np.float64).reshape(-1)
        if rotation.shape != (3, 3):
            raise ValueError(f"Expected a (3, 3) rotation, got shape {rotation.shape}")
        if translation.shape != (3,):
            raise ValueError(f"Expected 3 translation elements, got {translation.size}")
        rotation.setflags(write=False)
        translation.setflags(write=False)
        object.__setattr__(self, "rotation", rotation)
        object.__setattr__(self, "translation", translation)

    def to_matrix(self) -> NDArray[np.float64]:
        """Return the 4x4 homogeneous matrix."""
        return homogeneous(self.rotation, self.translation)

    @classmethod
    def from_matrix(cls, T: NDArray[np.float64]) -> "Pose":
        """Construct from a 4x4 homogeneous matrix."""
        T = np.asarray(T, dtype=np.float64)
        if T.shape != (4, 4):
            raise ValueError(f"Expected a (4, 4) matrix, got shape {T.shape}")
        return cls(rotation=T[:3, :3], translation=T[:3, 3])

    def is_close(self, other: "Pose", atol: float = 1e-6) -> bool:
        """Element-wise comparison of rotation and translation within ``atol``."""
        return bool(
            np.allclose(self.rotation, other.rotation, rtol=0.0, atol=atol)
            and np.allclose(self.translation, other.translation, rtol=0.0, atol=atol)
        )
