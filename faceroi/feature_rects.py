#!/usr/bin/env python3
"""
Feature Rectangle Module
Derives eye, eyebrow and lip bounding boxes from a 68-point landmark set

Landmark index convention (0-based, inclusive):
    0-16  jaw line          27-35 nose
    17-21 left eyebrow      36-41 left eye
    22-26 right eyebrow     42-47 right eye
    48-59 outer lip         60-67 inner lip
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

import numpy as np

from .detectors.types import Point2D, Rectangle

LANDMARK_COUNT = 68


@dataclass(frozen=True)
class FeatureSpec:
    """A named landmark range and whether its box gets padded."""

    name: str
    start: int
    end: int
    padded: bool = False


@dataclass(frozen=True)
class FeatureExtractionPolicy:
    """Ordered set of feature ranges derived for every landmarked face."""

    name: str
    features: Tuple[FeatureSpec, ...]

    @property
    def feature_names(self) -> Tuple[str, ...]:
        return tuple(spec.name for spec in self.features)


EYES_POLICY = FeatureExtractionPolicy(
    name="eyes",
    features=(
        FeatureSpec("left_eye", 36, 41),
        FeatureSpec("right_eye", 42, 47, padded=True),
    ),
)

BROWS_AND_LIPS_POLICY = FeatureExtractionPolicy(
    name="brows_and_lips",
    features=(
        FeatureSpec("left_eyebrow", 17, 21),
        FeatureSpec("right_eyebrow", 22, 26),
        FeatureSpec("outer_lip", 48, 59),
    ),
)

POLICIES: Dict[str, FeatureExtractionPolicy] = {
    EYES_POLICY.name: EYES_POLICY,
    BROWS_AND_LIPS_POLICY.name: BROWS_AND_LIPS_POLICY,
}

DEFAULT_POLICY = EYES_POLICY


def get_policy(name: str) -> FeatureExtractionPolicy:
    """Resolve a registered policy by name."""
    try:
        return POLICIES[name]
    except KeyError:
        known = ", ".join(sorted(POLICIES))
        raise ValueError(f"Unknown feature policy '{name}' (known: {known})") from None


def _round_half_away(value: float) -> int:
    # Matches C round(): 0.5 goes away from zero
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def as_landmark_array(landmarks) -> np.ndarray:
    """Landmarks as an (N, 2) float32 array, from pairs, Point2D values or an array."""
    if isinstance(landmarks, np.ndarray):
        points = landmarks.astype(np.float32, copy=False)
    else:
        points = np.array(
            [(p.x, p.y) if isinstance(p, Point2D) else (p[0], p[1]) for p in landmarks],
            dtype=np.float32,
        )
    return points.reshape(-1, 2)


def _range_extent(landmarks, start: int, end: int) -> Tuple[float, float, float, float]:
    if not 0 <= start <= end < LANDMARK_COUNT:
        raise ValueError(
            f"Landmark range [{start}, {end}] must satisfy 0 <= start <= end <= {LANDMARK_COUNT - 1}"
        )

    points = as_landmark_array(landmarks)
    if len(points) <= end:
        raise ValueError(f"Landmark range [{start}, {end}] exceeds {len(points)} landmarks")

    subset = points[start : end + 1]
    min_x, min_y = subset.min(axis=0)
    max_x, max_y = subset.max(axis=0)
    return min_x, min_y, max_x, max_y


def _to_rectangle(min_x, min_y, max_x, max_y) -> Rectangle:
    return Rectangle(
        x=_round_half_away(float(min_x)),
        y=_round_half_away(float(min_y)),
        width=_round_half_away(float(max_x - min_x)),
        height=_round_half_away(float(max_y - min_y)),
    )


def plain_extent(landmarks, start: int, end: int) -> Rectangle:
    """
    Smallest axis-aligned box enclosing landmarks[start..end]
    Args:
        landmarks: Sequence of (x, y) pairs, Point2D values or an (N, 2) array
        start: First landmark index (inclusive)
        end: Last landmark index (inclusive)
    Returns:
        Rectangle with each of x, y, width, height rounded independently
    """
    return _to_rectangle(*_range_extent(landmarks, start, end))


def padded_extent(landmarks, start: int, end: int) -> Rectangle:
    """
    Box of landmarks[start..end] grown by its own width and height on every side
    The result is centred on the raw box and is three times its size.
    """
    min_x, min_y, max_x, max_y = _range_extent(landmarks, start, end)

    x_padding = max_x - min_x
    min_x -= x_padding
    max_x += x_padding
    y_padding = max_y - min_y
    min_y -= y_padding
    max_y += y_padding

    return _to_rectangle(min_x, min_y, max_x, max_y)


def derive_feature_rects(
    landmarks: Sequence,
    policy: FeatureExtractionPolicy = DEFAULT_POLICY,
) -> Tuple[Rectangle, ...]:
    """
    Derive one rectangle per policy feature, in policy order
    Args:
        landmarks: Landmark set for one face
        policy: Which ranges to box and which of them to pad
    Returns:
        Tuple of rectangles, empty when the face was not fully landmarked
    """
    if landmarks is None or len(landmarks) != LANDMARK_COUNT:
        return ()

    points = as_landmark_array(landmarks)
    rects = []
    for spec in policy.features:
        extent = padded_extent if spec.padded else plain_extent
        rects.append(extent(points, spec.start, spec.end))
    return tuple(rects)
