"""OpenCV DNN face rectangle detector."""

from __future__ import annotations

import logging
import os
from typing import List, Sequence, Tuple

import cv2
import numpy as np

from ..errors import ModelLoadError
from .types import Rectangle

logger = logging.getLogger(__name__)


class DnnFaceDetector:
    """Face detection using an SSD-style OpenCV DNN network."""

    def __init__(
        self,
        config_path: str,
        weights_path: str,
        *,
        input_size: Tuple[int, int] = (300, 300),
        confidence_threshold: float = 0.5,
        mean: Sequence[float] = (104.0, 117.0, 123.0),
    ) -> None:
        """
        Load the face detector network
        Args:
            config_path: Network description (.prototxt / .pbtxt)
            weights_path: Network weights (.caffemodel / .pb)
            input_size: (width, height) of the network input blob
            confidence_threshold: Detections must score strictly above this to be kept
            mean: Per-channel BGR mean subtracted from the blob
        """
        self.config_path = config_path
        self.weights_path = weights_path
        self.input_size = (int(input_size[0]), int(input_size[1]))
        self.confidence_threshold = float(confidence_threshold)
        self.mean = tuple(float(v) for v in mean)

        self._net = self._load_model(config_path, weights_path)

    @staticmethod
    def _load_model(config_path: str, weights_path: str) -> "cv2.dnn.Net":
        for path in (config_path, weights_path):
            if not path or not os.path.isfile(path):
                logger.error("Face detector artifact not found: %s", path)
                raise ModelLoadError(path, "file not found")

        try:
            net = cv2.dnn.readNet(weights_path, config_path)
        except cv2.error as exc:
            logger.error("Error loading face detector from %s: %s", weights_path, exc)
            raise ModelLoadError(weights_path, str(exc)) from exc

        if net.empty():
            raise ModelLoadError(weights_path, "network is empty")

        logger.info("Loaded face detector from %s", weights_path)
        return net

    def detect_face_rectangles(self, image: np.ndarray) -> List[Rectangle]:
        """
        Detect faces in a BGR image
        Returns:
            Face rectangles in network output order
        """
        h, w = image.shape[:2]

        blob = cv2.dnn.blobFromImage(image, 1.0, self.input_size, self.mean)
        self._net.setInput(blob)
        detections = self._net.forward()

        faces: List[Rectangle] = []
        for i in range(detections.shape[2]):
            confidence = float(detections[0, 0, i, 2])
            if confidence <= self.confidence_threshold:
                continue

            x1 = int(detections[0, 0, i, 3] * w)
            y1 = int(detections[0, 0, i, 4] * h)
            x2 = int(detections[0, 0, i, 5] * w)
            y2 = int(detections[0, 0, i, 6] * h)

            faces.append(Rectangle(x1, y1, max(x2 - x1, 1), max(y2 - y1, 1)))

        logger.debug("Detected %d face(s)", len(faces))
        return faces
