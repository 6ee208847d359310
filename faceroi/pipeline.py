"""
Native detection section: image load, face rectangles, landmarks.

Nothing in here touches caller-owned state; it runs on a worker while the
caller is suspended (see ``faceroi.boundary``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Sequence

import cv2
import numpy as np

from .detectors.face_rects import DnnFaceDetector
from .detectors.landmarks import FacemarkLandmarkDetector
from .detectors.types import Rectangle
from .errors import ImageLoadError
from .feature_rects import as_landmark_array

logger = logging.getLogger(__name__)

FaceDetectorFactory = Callable[[str, str], DnnFaceDetector]
LandmarkDetectorFactory = Callable[[str], FacemarkLandmarkDetector]
ImageLoader = Callable[[str], np.ndarray]


@dataclass
class NativeDetection:
    """Raw detector output, order-aligned per face."""

    face_rects: List[Rectangle] = field(default_factory=list)
    landmarks: List[np.ndarray] = field(default_factory=list)


def load_image(path: str) -> np.ndarray:
    """Read a BGR image, failing loudly instead of returning an empty matrix."""
    try:
        image = cv2.imread(path)
    except cv2.error as exc:
        raise ImageLoadError(path, str(exc)) from exc

    if image is None or image.size == 0:
        logger.error("Could not read image %s", path)
        raise ImageLoadError(path, "unreadable or unsupported format")
    return image


def _align_landmarks(face_rects: Sequence[Rectangle], landmarks: Sequence) -> List[np.ndarray]:
    aligned: List[np.ndarray] = []
    for i in range(len(face_rects)):
        if i < len(landmarks) and landmarks[i] is not None:
            aligned.append(as_landmark_array(landmarks[i]))
        else:
            aligned.append(np.empty((0, 2), dtype=np.float32))
    return aligned


def run_native_detection(
    photo_path: str,
    face_config_path: str,
    face_weights_path: str,
    eyes_model_path: str,
    *,
    face_detector_factory: FaceDetectorFactory = DnnFaceDetector,
    landmark_detector_factory: LandmarkDetectorFactory = FacemarkLandmarkDetector,
    image_loader: ImageLoader = load_image,
) -> NativeDetection:
    """
    Run both detectors over one photo
    Args:
        photo_path: Image to analyse
        face_config_path: Face detector network description
        face_weights_path: Face detector weights
        eyes_model_path: Landmark model
        face_detector_factory: Builds the face detector from (config, weights)
        landmark_detector_factory: Builds the landmark detector from a model path
        image_loader: Reads the photo into a BGR array
    Returns:
        Face rectangles in detector order with one landmark array per face
    """
    # Models first so a bad artifact fails before any image work
    face_detector = face_detector_factory(face_config_path, face_weights_path)
    landmark_detector = landmark_detector_factory(eyes_model_path)

    image = image_loader(photo_path)
    face_rects = list(face_detector.detect_face_rectangles(image))
    if face_rects:
        landmarks = landmark_detector.detect_key_points(face_rects, image)
    else:
        landmarks = []

    logger.debug("%s: %d face(s)", photo_path, len(face_rects))
    return NativeDetection(face_rects=face_rects, landmarks=_align_landmarks(face_rects, landmarks))
