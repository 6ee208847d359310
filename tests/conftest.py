"""Pytest fixtures and config."""

import cv2
import numpy as np
import pytest

from .fixtures.synthetic_landmarks import make_landmarks


@pytest.fixture
def landmarks() -> np.ndarray:
    return make_landmarks()


@pytest.fixture
def photo_path(tmp_path) -> str:
    """A small real image on disk."""
    path = tmp_path / "photo.png"
    image = np.full((240, 320, 3), 127, dtype=np.uint8)
    assert cv2.imwrite(str(path), image)
    return str(path)


@pytest.fixture
def model_paths(tmp_path):
    """Placeholder artifact paths; only the fakes ever see them."""
    return (
        str(tmp_path / "deploy.prototxt"),
        str(tmp_path / "weights.caffemodel"),
        str(tmp_path / "lbfmodel.yaml"),
    )
