#!/usr/bin/env python3
"""
Face Region Extraction
Face, eye, eyebrow and lip bounding boxes from a single photograph
"""

from .boundary import FaceRegionExtractor, PathBuffers, detect, marshal_result
from .config_manager import ConfigManager
from .detectors.types import DetectionResult, FaceResult, Point2D, Rectangle
from .errors import ConfigError, FaceRoiError, ImageLoadError, ModelLoadError
from .feature_rects import (
    BROWS_AND_LIPS_POLICY,
    EYES_POLICY,
    FeatureExtractionPolicy,
    FeatureSpec,
    derive_feature_rects,
    padded_extent,
    plain_extent,
)

__version__ = "1.0.0"

__all__ = [
    'detect',
    'FaceRegionExtractor',
    'PathBuffers',
    'marshal_result',
    'ConfigManager',
    'DetectionResult',
    'FaceResult',
    'Point2D',
    'Rectangle',
    'FaceRoiError',
    'ImageLoadError',
    'ModelLoadError',
    'ConfigError',
    'FeatureExtractionPolicy',
    'FeatureSpec',
    'EYES_POLICY',
    'BROWS_AND_LIPS_POLICY',
    'derive_feature_rects',
    'plain_extent',
    'padded_extent',
]
