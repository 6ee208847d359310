"""Tests for faceroi/pipeline.py: the native detection section."""

import numpy as np
import pytest

from faceroi.detectors.types import Point2D, Rectangle
from faceroi.errors import ImageLoadError
from faceroi.pipeline import load_image, run_native_detection

from .fixtures.detectors import FakeFaceDetector, FakeLandmarkDetector
from .fixtures.synthetic_landmarks import make_landmarks


def test_load_image(photo_path):
    image = load_image(photo_path)
    assert image.shape == (240, 320, 3)


def test_load_image_missing(tmp_path):
    with pytest.raises(ImageLoadError, match="missing.png"):
        load_image(str(tmp_path / "missing.png"))


def test_run_native_detection_aligns_landmarks(photo_path, model_paths):
    rects = [Rectangle(0, 0, 10, 10), Rectangle(20, 20, 10, 10)]
    built = {}

    class ShortLandmarkDetector(FakeLandmarkDetector):
        # Only the first face gets a landmark set back
        def detect_key_points(self, face_rects, image):
            return self.landmark_sets

    def face_factory(config, weights):
        built["face"] = (config, weights)
        return FakeFaceDetector(rects)

    def landmark_factory(model):
        built["landmarks"] = model
        return ShortLandmarkDetector([make_landmarks()])

    native = run_native_detection(
        photo_path,
        *model_paths,
        face_detector_factory=face_factory,
        landmark_detector_factory=landmark_factory,
    )

    assert built == {"face": model_paths[:2], "landmarks": model_paths[2]}
    assert native.face_rects == rects
    assert len(native.landmarks) == 2
    assert native.landmarks[0].shape == (68, 2)
    assert native.landmarks[1].shape == (0, 2)


def test_no_faces_skips_landmarks(photo_path, model_paths):
    class ExplodingLandmarkDetector:
        def detect_key_points(self, face_rects, image):
            raise AssertionError("should not be called without faces")

    native = run_native_detection(
        photo_path,
        *model_paths,
        face_detector_factory=lambda config, weights: FakeFaceDetector([]),
        landmark_detector_factory=lambda model: ExplodingLandmarkDetector(),
    )
    assert native.face_rects == []
    assert native.landmarks == []


def test_custom_image_loader(model_paths):
    seen = []

    def loader(path):
        seen.append(path)
        return np.zeros((4, 4, 3), dtype=np.uint8)

    run_native_detection(
        "virtual.jpg",
        *model_paths,
        face_detector_factory=lambda config, weights: FakeFaceDetector([]),
        landmark_detector_factory=lambda model: FakeLandmarkDetector([]),
        image_loader=loader,
    )
    assert seen == ["virtual.jpg"]


def test_point2d_landmark_sets(photo_path, model_paths):
    points = [Point2D(float(x), float(y)) for x, y in make_landmarks()]

    native = run_native_detection(
        photo_path,
        *model_paths,
        face_detector_factory=lambda config, weights: FakeFaceDetector([Rectangle(0, 0, 10, 10)]),
        landmark_detector_factory=lambda model: FakeLandmarkDetector([points]),
    )

    assert native.landmarks[0].dtype == np.float32
    np.testing.assert_array_equal(native.landmarks[0], make_landmarks())
