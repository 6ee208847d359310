#!/usr/bin/env python3
"""
Configuration Management Module
Handles loading and validating configuration files
"""

import json
import logging
import os
from typing import Any, Dict, Optional, Tuple

from .errors import ConfigError
from .feature_rects import POLICIES

logger = logging.getLogger(__name__)


class ConfigManager:
    """Configuration manager for the face region extractor"""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration manager
        Args:
            config_path: Path to configuration file
        """
        self.config_path = config_path or "config.json"
        self.config = self._get_default_config()

        if os.path.exists(self.config_path):
            self.load_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration"""
        return {
            "feature_policy": "eyes",
            "models": {
                "face_detector": {
                    "config_path": "models/deploy.prototxt",
                    "weights_path": "models/res10_300x300_ssd_iter_140000.caffemodel",
                    "input_width": 300,
                    "input_height": 300,
                    "confidence_threshold": 0.5,
                },
                "landmark_detector": {
                    "model_path": "models/lbfmodel.yaml",
                },
            },
        }

    def load_config(self) -> bool:
        """
        Load configuration from file
        Returns:
            True if loaded successfully
        """
        loaded_config = load_config_file(self.config_path)
        if loaded_config is None:
            return False

        # Update default config with loaded values
        self._deep_update(self.config, loaded_config)
        logger.info("Configuration loaded from %s", self.config_path)
        return True

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value
        Args:
            key: Configuration key (supports dot notation, e.g., 'models.face_detector.config_path')
            default: Default value if key not found
        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self.config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any):
        """
        Set configuration value
        Args:
            key: Configuration key (supports dot notation)
            value: Value to set
        """
        keys = key.split('.')
        config = self.config

        # Navigate to parent of target key
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def _deep_update(self, base_dict: Dict, update_dict: Dict):
        for key, value in update_dict.items():
            if key in base_dict and isinstance(base_dict[key], dict) and isinstance(value, dict):
                self._deep_update(base_dict[key], value)
            else:
                base_dict[key] = value

    def artifact_paths(self) -> Tuple[str, str, str]:
        """(face config, face weights, landmark model) paths"""
        return (
            self.get('models.face_detector.config_path'),
            self.get('models.face_detector.weights_path'),
            self.get('models.landmark_detector.model_path'),
        )

    def detector_options(self) -> Dict[str, Any]:
        """Keyword options for DnnFaceDetector"""
        try:
            return {
                "input_size": (
                    int(self.get('models.face_detector.input_width', 300)),
                    int(self.get('models.face_detector.input_height', 300)),
                ),
                "confidence_threshold": float(self.get('models.face_detector.confidence_threshold', 0.5)),
            }
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid face detector options: {e}") from e

    def validate_config(self) -> bool:
        """
        Validate configuration values
        Returns:
            True if configuration is valid
        """
        errors = []

        policy = self.get('feature_policy')
        if not isinstance(policy, str) or policy not in POLICIES:
            errors.append(f"feature_policy must be one of {sorted(POLICIES)}, got {policy!r}")

        threshold = self.get('models.face_detector.confidence_threshold', 0)
        if not _is_number(threshold) or not 0 <= threshold <= 1:
            errors.append("models.face_detector.confidence_threshold must be a number between 0 and 1")

        for key in ('models.face_detector.input_width', 'models.face_detector.input_height'):
            size = self.get(key, 0)
            if not _is_number(size) or size <= 0:
                errors.append(f"{key} must be a positive number")

        for path in self.artifact_paths():
            if not isinstance(path, str) or not path:
                errors.append("Model artifact paths must be non-empty strings")
            elif not os.path.exists(path):
                logger.warning("Model artifact does not exist: %s", path)

        if errors:
            logger.error("Configuration validation errors:")
            for error in errors:
                logger.error("  - %s", error)
            return False

        return True


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def load_config_file(config_path: str) -> Optional[Dict]:
    """
    Load configuration from file
    Args:
        config_path: Path to configuration file
    Returns:
        Configuration dictionary or None if failed
    """
    try:
        with open(config_path, 'r') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Error loading config file %s: %s", config_path, e)
        return None
