#!/usr/bin/env python3
"""CLI entry point for the face region extractor."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from faceroi.boundary import FaceRegionExtractor
from faceroi.config_manager import ConfigManager
from faceroi.errors import ConfigError, FaceRoiError
from faceroi.feature_rects import POLICIES

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Detect faces and eye/eyebrow/lip regions in a photo",
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument("photo", type=str, help="Image file to analyse")
    parser.add_argument("--config", type=str, help="Configuration file path")
    parser.add_argument("--face-config", type=str, help="Face detector network description (.prototxt/.pbtxt)")
    parser.add_argument("--face-weights", type=str, help="Face detector weights (.caffemodel/.pb)")
    parser.add_argument("--landmark-model", type=str, help="68-point LBF landmark model (.yaml)")
    parser.add_argument(
        "--policy",
        type=str,
        choices=sorted(POLICIES),
        help="Feature rectangles to derive per face (default from config: eyes)",
    )
    parser.add_argument("--pretty", action="store_true", help="Indent the JSON output")
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser


def configure_logging(level_name: str) -> None:
    # stdout is reserved for the JSON result
    logging.basicConfig(
        level=getattr(logging, level_name),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    config = ConfigManager(args.config)
    if args.face_config:
        config.set("models.face_detector.config_path", args.face_config)
    if args.face_weights:
        config.set("models.face_detector.weights_path", args.face_weights)
    if args.landmark_model:
        config.set("models.landmark_detector.model_path", args.landmark_model)
    if args.policy:
        config.set("feature_policy", args.policy)

    try:
        if not config.validate_config():
            raise ConfigError("Invalid configuration")
        extractor = FaceRegionExtractor.from_config(config)
        face_config, face_weights, landmark_model = config.artifact_paths()
        faces = extractor.detect(args.photo, face_config, face_weights, landmark_model)
    except FaceRoiError as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    payload = [
        {"face": list(face_rect), "features": [list(rect) for rect in feature_rects]}
        for face_rect, feature_rects in faces
    ]
    print(json.dumps(payload, indent=2 if args.pretty else None))
    return 0


if __name__ == "__main__":
    sys.exit(main())
