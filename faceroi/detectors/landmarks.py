"""68-point landmark detector backed by OpenCV's LBF facemark."""

from __future__ import annotations

import logging
import os
from typing import List, Sequence

import cv2
import numpy as np

from ..errors import ModelLoadError
from .types import Rectangle

logger = logging.getLogger(__name__)


class FacemarkLandmarkDetector:
    """Fits a 68-point landmark model inside each detected face rectangle."""

    def __init__(self, model_path: str) -> None:
        self.model_path = model_path
        self._facemark = self._load_model(model_path)

    @staticmethod
    def _load_model(model_path: str) -> "cv2.face.Facemark":
        if not model_path or not os.path.isfile(model_path):
            logger.error("Landmark model not found: %s", model_path)
            raise ModelLoadError(model_path, "file not found")

        try:
            facemark = cv2.face.createFacemarkLBF()
            facemark.loadModel(model_path)
        except cv2.error as exc:
            logger.error("Error loading landmark model %s: %s", model_path, exc)
            raise ModelLoadError(model_path, str(exc)) from exc

        logger.info("Loaded LBF facemark model from %s", model_path)
        return facemark

    def detect_key_points(
        self,
        face_rects: Sequence[Rectangle],
        image: np.ndarray,
    ) -> List[np.ndarray]:
        """
        Detect landmarks for every face rectangle
        Args:
            face_rects: Face rectangles from the face detector
            image: The image the rectangles were detected in
        Returns:
            One (N, 2) float32 array per rectangle, in the same order.
            An empty array marks a face the model could not fit.
        """
        if not face_rects:
            return []

        faces = np.array([rect.as_tuple() for rect in face_rects], dtype=np.int32)
        ok, fitted = self._facemark.fit(image, faces)
        if not ok:
            logger.debug("Landmark fitting failed for %d face(s)", len(face_rects))
            return [np.empty((0, 2), dtype=np.float32) for _ in face_rects]

        landmarks: List[np.ndarray] = []
        for i in range(len(face_rects)):
            if i < len(fitted):
                landmarks.append(np.asarray(fitted[i], dtype=np.float32).reshape(-1, 2))
            else:
                landmarks.append(np.empty((0, 2), dtype=np.float32))
        return landmarks
