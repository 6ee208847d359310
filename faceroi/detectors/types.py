"""Shared data structures passed between detectors and result assembly."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class Point2D:
    """A single landmark coordinate."""

    x: float
    y: float


@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned box with integer top-left corner and size."""

    x: int
    y: int
    width: int
    height: int

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (int(self.x), int(self.y), int(self.width), int(self.height))


@dataclass(frozen=True)
class FaceResult:
    """One detected face and its feature boxes, in policy order."""

    face: Rectangle
    features: Tuple[Rectangle, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DetectionResult:
    """All faces from one call, in the order the face detector returned them."""

    faces: Tuple[FaceResult, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.faces)

    def __iter__(self):
        return iter(self.faces)

    def __getitem__(self, index: int) -> FaceResult:
        return self.faces[index]
