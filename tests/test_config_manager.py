"""Tests for faceroi/config_manager.py."""

import json

import pytest

from faceroi.config_manager import ConfigManager, load_config_file
from faceroi.errors import ConfigError


def test_defaults_when_file_missing(tmp_path):
    config = ConfigManager(str(tmp_path / "config.json"))
    assert config.get("feature_policy") == "eyes"
    assert config.get("models.face_detector.input_width") == 300
    assert config.get("models.nope.key", "fallback") == "fallback"


def test_file_overrides_are_deep_merged(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "feature_policy": "brows_and_lips",
        "models": {"face_detector": {"confidence_threshold": 0.8}},
    }))

    config = ConfigManager(str(path))

    assert config.get("feature_policy") == "brows_and_lips"
    assert config.get("models.face_detector.confidence_threshold") == 0.8
    # Untouched siblings keep their defaults
    assert config.get("models.face_detector.input_height") == 300
    assert config.get("models.landmark_detector.model_path") == "models/lbfmodel.yaml"


def test_set_and_artifact_paths(tmp_path):
    config = ConfigManager(str(tmp_path / "config.json"))
    config.set("models.face_detector.config_path", "a.prototxt")
    config.set("models.face_detector.weights_path", "b.caffemodel")
    config.set("models.landmark_detector.model_path", "c.yaml")
    config.set("extra.nested.value", 3)

    assert config.artifact_paths() == ("a.prototxt", "b.caffemodel", "c.yaml")
    assert config.get("extra.nested.value") == 3


def test_detector_options(tmp_path):
    config = ConfigManager(str(tmp_path / "config.json"))
    config.set("models.face_detector.input_width", 320)
    config.set("models.face_detector.input_height", 240)
    assert config.detector_options() == {"input_size": (320, 240), "confidence_threshold": 0.5}


def test_validate(tmp_path):
    config = ConfigManager(str(tmp_path / "config.json"))
    assert config.validate_config()

    config.set("feature_policy", "nose")
    assert not config.validate_config()

    config.set("feature_policy", "eyes")
    config.set("models.face_detector.confidence_threshold", 1.5)
    assert not config.validate_config()


@pytest.mark.parametrize("key,value", [
    ("feature_policy", ["eyes"]),
    ("feature_policy", None),
    ("models.face_detector.confidence_threshold", "0.5"),
    ("models.face_detector.confidence_threshold", True),
    ("models.face_detector.input_width", "300"),
    ("models.face_detector.input_height", None),
    ("models.landmark_detector.model_path", 7),
])
def test_validate_rejects_wrong_types(tmp_path, key, value):
    config = ConfigManager(str(tmp_path / "config.json"))
    config.set(key, value)
    assert not config.validate_config()


def test_detector_options_bad_value(tmp_path):
    config = ConfigManager(str(tmp_path / "config.json"))
    config.set("models.face_detector.input_width", [300])
    with pytest.raises(ConfigError):
        config.detector_options()

    config.set("models.face_detector.input_width", 300)
    config.set("models.face_detector.confidence_threshold", "high")
    with pytest.raises(ConfigError):
        config.detector_options()


def test_load_config_file_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    assert load_config_file(str(path)) is None
    assert ConfigManager(str(path)).get("feature_policy") == "eyes"
