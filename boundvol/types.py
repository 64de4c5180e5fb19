# boundvol/types.py
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, NewType, Sequence, TypeAlias

import numpy as np

EntityId = NewType("EntityId", int)
SystemId = NewType("SystemId", str)

Scalar: TypeAlias = float


@dataclass(frozen=True, slots=True)
class Vector3:
    x: Scalar
    y: Scalar
    z: Scalar

    @staticmethod
    def from_array(values: Sequence[float] | np.ndarray) -> Vector3:
        x, y, z = (float(v) for v in values[:3])
        return Vector3(x, y, z)

    def to_array(self) -> np.ndarray:
        return np.array((self.x, self.y, self.z), dtype=np.float64)

    def __iter__(self) -> Iterator[Scalar]:
        yield self.x
        yield self.y
        yield self.z

    def __len__(self) -> int:
        return 3

    def __getitem__(self, index: int) -> Scalar:
        return (self.x, self.y, self.z)[index]

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> Vector3:
        return Vector3(-self.x, -self.y, -self.z)

    def __mul__(self, scalar: float) -> Vector3:
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    def dot(self, other: Vector3) -> Scalar:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def length(self) -> Scalar:
        return math.sqrt(self.dot(self))


@dataclass(frozen=True, slots=True)
class Quaternion:
    x: Scalar
    y: Scalar
    z: Scalar
    w: Scalar

    def __iter__(self) -> Iterator[Scalar]:
        yield self.x
        yield self.y
        yield self.z
        yield self.w

    @staticmethod
    def identity() -> Quaternion:
        return Quaternion(0.0, 0.0, 0.0, 1.0)

    @staticmethod
    def from_axis_angle(axis: Vector3, angle: float) -> Quaternion:
        """Rotation of `angle` radians about `axis` (need not be unit length)."""
        length = axis.length()
        if length == 0.0:
            raise ValueError("rotation axis must be non-zero")
        s = math.sin(angle * 0.5) / length
        return Quaternion(
            axis.x * s, axis.y * s, axis.z * s, math.cos(angle * 0.5)
        )

    @staticmethod
    def from_rotation_x(angle: float) -> Quaternion:
        return Quaternion(math.sin(angle * 0.5), 0.0, 0.0, math.cos(angle * 0.5))

    @staticmethod
    def from_rotation_y(angle: float) -> Quaternion:
        return Quaternion(0.0, math.sin(angle * 0.5), 0.0, math.cos(angle * 0.5))

    @staticmethod
    def from_rotation_z(angle: float) -> Quaternion:
        return Quaternion(0.0, 0.0, math.sin(angle * 0.5), math.cos(angle * 0.5))

    def __mul__(self, other: Quaternion) -> Quaternion:
        """Hamilton product. `a * b` rotates by `b` first, then by `a`."""
        x1, y1, z1, w1 = self.x, self.y, self.z, self.w
        x2, y2, z2, w2 = other.x, other.y, other.z, other.w
        return Quaternion(
            x=w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            y=w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            z=w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
            w=w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
        )

    def conjugate(self) -> Quaternion:
        return Quaternion(-self.x, -self.y, -self.z, self.w)

    def norm(self) -> Scalar:
        return math.sqrt(
            self.x * self.x + self.y * self.y + self.z * self.z + self.w * self.w
        )

    def normalized(self) -> Quaternion:
        n = self.norm()
        if n == 0.0:
            return Quaternion(0.0, 0.0, 0.0, 1.0)
        return Quaternion(self.x / n, self.y / n, self.z / n, self.w / n)

    def rotate(self, v: Vector3) -> Vector3:
        # v + 2.0 * cross(u, cross(u, v) + s * v)
        ux, uy, uz, s = self.x, self.y, self.z, self.w

        cx = uy * v.z - uz * v.y + s * v.x
        cy = uz * v.x - ux * v.z + s * v.y
        cz = ux * v.y - uy * v.x + s * v.z

        return Vector3(
            v.x + 2.0 * (uy * cz - uz * cy),
            v.y + 2.0 * (uz * cx - ux * cz),
            v.z + 2.0 * (ux * cy - uy * cx),
        )

    def to_matrix3(self) -> np.ndarray:
        """3x3 rotation matrix acting on column vectors."""
        x, y, z, w = self.normalized()

        xx = x * x
        yy = y * y
        zz = z * z
        xy = x * y
        xz = x * z
        yz = y * z
        wx = w * x
        wy = w * y
        wz = w * z

        return np.array(
            [
                [1.0 - 2.0 * (yy + zz), 2.0 * (xy - wz), 2.0 * (xz + wy)],
                [2.0 * (xy + wz), 1.0 - 2.0 * (xx + zz), 2.0 * (yz - wx)],
                [2.0 * (xz - wy), 2.0 * (yz + wx), 1.0 - 2.0 * (xx + yy)],
            ],
            dtype=np.float64,
        )


class VolumeKind(Enum):
    """The closed set of bounding volume shapes."""

    AXIS_ALIGNED_BOX = "aabb"
    ORIENTED_BOX = "obb"
    SPHERE = "sphere"
