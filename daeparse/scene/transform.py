"""Node transform operations and their composition into 4x4 matrices.

A COLLADA node lists any number of ``<lookat>``, ``<rotate>``,
``<translate>``, ``<scale>``, ``<skew>`` and ``<matrix>`` elements. Their
order matters: the node's local matrix is the product of the individual
matrices in document order, using column vectors (``M = T0 @ T1 @ ... @ Tn``).
Each operation is therefore expressed in the frame set up by the ones
before it; the last listed operation is the first one applied to a point.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

import numpy as np
from numpy.typing import NDArray
from scipy.spatial.transform import Rotation

from ..xml.reader import ElementReader


class TransformKind(str, Enum):
    """Transform element tags, valued by their XML name."""

    LOOKAT = "lookat"
    ROTATE = "rotate"
    TRANSLATE = "translate"
    SCALE = "scale"
    SKEW = "skew"
    MATRIX = "matrix"

    @property
    def arity(self) -> int:
        """Number of values the element carries."""
        return _ARITY[self]


_ARITY = {
    TransformKind.LOOKAT: 9,
    TransformKind.ROTATE: 4,
    TransformKind.TRANSLATE: 3,
    TransformKind.SCALE: 3,
    TransformKind.SKEW: 7,
    TransformKind.MATRIX: 16,
}

TRANSFORM_TAGS = frozenset(kind.value for kind in TransformKind)


def _normalized(v: NDArray[np.float64]) -> NDArray[np.float64]:
    norm = np.linalg.norm(v)
    if norm < 1e-12:
        return np.zeros(3, dtype=np.float64)
    return v / norm


@dataclass(frozen=True, eq=False)
class Transform:
    """A single transform operation.

    The payload is a fixed 16-slot buffer. Only the first ``kind.arity``
    slots are meaningful, the rest are zero:

    - lookat: eye xyz, target xyz, up xyz
    - rotate: axis xyz, angle in degrees
    - translate / scale: xyz
    - skew: angle in degrees, rotation axis xyz, translation axis xyz
    - matrix: 16 values in row-major order
    """

    kind: TransformKind
    values: NDArray[np.float64]

    def __post_init__(self) -> None:
        raw = np.asarray(self.values, dtype=np.float64).ravel()
        if len(raw) != self.kind.arity:
            raise ValueError(
                f"{self.kind.value} expects {self.kind.arity} values, got {len(raw)}"
            )
        buffer = np.zeros(16, dtype=np.float64)
        buffer[: len(raw)] = raw
        buffer.flags.writeable = False
        object.__setattr__(self, "values", buffer)

    @property
    def data(self) -> NDArray[np.float64]:
        """The meaningful part of the payload."""
        return self.values[: self.kind.arity]

    def to_matrix(self) -> NDArray[np.float64]:
        """Return the 4x4 homogeneous matrix of this operation."""
        f = self.values
        m = np.eye(4, dtype=np.float64)

        if self.kind is TransformKind.TRANSLATE:
            m[:3, 3] = f[0:3]

        elif self.kind is TransformKind.SCALE:
            m[0, 0], m[1, 1], m[2, 2] = f[0:3]

        elif self.kind is TransformKind.ROTATE:
            axis = _normalized(f[0:3])
            angle = np.radians(f[3])
            m[:3, :3] = Rotation.from_rotvec(axis * angle).as_matrix()

        elif self.kind is TransformKind.MATRIX:
            m = f.reshape(4, 4).copy()

        elif self.kind is TransformKind.LOOKAT:
            eye, target, up = f[0:3], f[3:6], f[6:9]
            direction = _normalized(target - eye)
            right = _normalized(np.cross(direction, up))
            true_up = np.cross(right, direction)
            m[:3, 0] = right
            m[:3, 1] = true_up
            m[:3, 2] = -direction
            m[:3, 3] = eye

        elif self.kind is TransformKind.SKEW:
            # Shift along the translation axis proportional to the
            # distance along the rotation axis.
            angle = np.radians(f[0])
            around = _normalized(f[1:4])
            along = _normalized(f[4:7])
            m[:3, :3] += np.tan(angle) * np.outer(along, around)

        return m

    def __repr__(self) -> str:
        values = ", ".join(f"{v:g}" for v in self.data)
        return f"Transform({self.kind.value}: {values})"


def read_transform(reader: ElementReader, kind: TransformKind | str) -> Transform:
    """Read the numeric payload of a transform element.

    The reader must be positioned on the transform's opening tag; it is
    left on the closing tag.

    Raises:
        MissingContentError: If the element is empty
        NumericFormatError: On bad numbers or the wrong number of values
    """
    kind = TransformKind(kind)
    values = reader.read_floats(arity=kind.arity)
    reader.verify_closing(kind.value)
    return Transform(kind=kind, values=values)


def compose_transforms(transforms: Sequence[Transform]) -> NDArray[np.float64]:
    """Fold transform operations into one 4x4 matrix.

    Operations are multiplied in document order, so ``[A, B]`` gives
    ``A @ B``. An empty sequence gives the identity matrix.
    """
    result = np.eye(4, dtype=np.float64)
    for transform in transforms:
        result = result @ transform.to_matrix()
    return result


def apply_to_points(
    matrix: NDArray[np.float64],
    points: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Apply a 4x4 matrix to an Nx3 array of points.

    Args:
        matrix: 4x4 homogeneous transformation matrix
        points: Nx3 array of XYZ coordinates

    Returns:
        Transformed Nx3 array of points
    """
    points = np.atleast_2d(np.asarray(points, dtype=np.float64))

    # Convert to homogeneous coordinates (Nx4)
    ones = np.ones((len(points), 1), dtype=np.float64)
    homogeneous = np.hstack([points, ones])

    transformed = (matrix @ homogeneous.T).T
    return transformed[:, :3]
