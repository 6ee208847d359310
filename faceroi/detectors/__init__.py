"""Detector collaborators: face rectangles and 68-point landmarks."""

from .face_rects import DnnFaceDetector
from .landmarks import FacemarkLandmarkDetector
from .types import DetectionResult, FaceResult, Point2D, Rectangle

__all__ = [
    "DnnFaceDetector",
    "FacemarkLandmarkDetector",
    "DetectionResult",
    "FaceResult",
    "Point2D",
    "Rectangle",
]
