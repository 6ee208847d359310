#!/usr/bin/env python3
"""
Result Assembly Module
Runs the detectors outside the caller's control and hands back a plain,
order-preserving nested result

Per call:
    1. copy the four paths into call-owned buffers
    2. suspend the caller (native work runs on a worker)
    3. build detectors, read the photo, detect faces and landmarks
    4. release the path buffers
    5. resume the caller
    6. derive feature rectangles and marshal the result
"""

from __future__ import annotations

import asyncio
import functools
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from .detectors.face_rects import DnnFaceDetector
from .detectors.landmarks import FacemarkLandmarkDetector
from .detectors.types import DetectionResult, FaceResult
from .errors import ConfigError
from .feature_rects import DEFAULT_POLICY, FeatureExtractionPolicy, derive_feature_rects, get_policy
from .pipeline import (
    FaceDetectorFactory,
    ImageLoader,
    LandmarkDetectorFactory,
    NativeDetection,
    load_image,
    run_native_detection,
)

logger = logging.getLogger(__name__)

RectTuple = Tuple[int, int, int, int]
FaceEntry = Tuple[RectTuple, List[RectTuple]]
PathLike = Union[str, bytes, "os.PathLike[str]"]


class PathBuffers:
    """Call-owned copies of the input paths.

    The class keeps a count of buffers that were copied but not yet
    released so leaks show up in ``PathBuffers.outstanding()``.

    That count is process-wide and guarded by ``_lock``. It is read only
    by diagnostics and tests; each call owns its own instance and no
    call reads another call's buffers or depends on the count.
    """

    _lock = threading.Lock()
    _outstanding = 0

    def __init__(self, encoded: Tuple[bytes, ...]) -> None:
        self._encoded: Optional[Tuple[bytes, ...]] = encoded

    @classmethod
    def copy(cls, *paths: PathLike) -> "PathBuffers":
        # Encode everything before registering so a bad path leaks nothing
        encoded = tuple(os.fsencode(path) for path in paths)
        with cls._lock:
            cls._outstanding += len(encoded)
        return cls(encoded)

    @classmethod
    def outstanding(cls) -> int:
        with cls._lock:
            return cls._outstanding

    @property
    def released(self) -> bool:
        return self._encoded is None

    def decoded(self) -> Tuple[str, ...]:
        if self._encoded is None:
            raise RuntimeError("Path buffers used after release")
        return tuple(os.fsdecode(raw) for raw in self._encoded)

    def release(self) -> None:
        if self._encoded is None:
            return
        count = len(self._encoded)
        self._encoded = None
        with PathBuffers._lock:
            PathBuffers._outstanding -= count

    def __enter__(self) -> "PathBuffers":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class RuntimeState:
    """Tracks whether the caller is currently suspended for native work."""

    def __init__(self) -> None:
        self._suspended = False

    @property
    def suspended(self) -> bool:
        return self._suspended

    def suspend(self) -> None:
        if self._suspended:
            raise RuntimeError("Caller is already suspended")
        self._suspended = True

    def resume(self) -> None:
        if not self._suspended:
            raise RuntimeError("Caller is not suspended")
        self._suspended = False


@contextmanager
def released_runtime(state: RuntimeState) -> Iterator[RuntimeState]:
    """Suspend the caller for the body and resume it on every exit path."""
    state.suspend()
    try:
        yield state
    finally:
        state.resume()


def assemble_result(native: NativeDetection, policy: FeatureExtractionPolicy) -> DetectionResult:
    """Pair each face rectangle with its feature rectangles, keeping detector order."""
    faces = []
    for face_rect, landmarks in zip(native.face_rects, native.landmarks):
        faces.append(FaceResult(face=face_rect, features=derive_feature_rects(landmarks, policy)))
    return DetectionResult(faces=tuple(faces))


def marshal_result(result: DetectionResult, state: Optional[RuntimeState] = None) -> List[FaceEntry]:
    """
    Convert a DetectionResult into plain Python containers
    Returns:
        [(face_rect, [feature_rect, ...]), ...] with every rect a 4-tuple of ints
    """
    if state is not None and state.suspended:
        raise RuntimeError("Cannot build the result while the caller is suspended")

    return [
        (face.face.as_tuple(), [rect.as_tuple() for rect in face.features])
        for face in result.faces
    ]


def _resolve_policy(policy: Union[str, FeatureExtractionPolicy, None]) -> FeatureExtractionPolicy:
    if policy is None:
        return DEFAULT_POLICY
    if isinstance(policy, FeatureExtractionPolicy):
        return policy
    try:
        return get_policy(policy)
    except ValueError as exc:
        raise ConfigError(str(exc)) from None


class FaceRegionExtractor:
    """Face and feature region extraction for single photos."""

    def __init__(
        self,
        policy: Union[str, FeatureExtractionPolicy, None] = None,
        *,
        face_detector_options: Optional[Dict[str, Any]] = None,
        face_detector_factory: Optional[FaceDetectorFactory] = None,
        landmark_detector_factory: Optional[LandmarkDetectorFactory] = None,
        image_loader: ImageLoader = load_image,
    ) -> None:
        """
        Args:
            policy: Feature policy or its registered name (default: eyes)
            face_detector_options: Keyword options for DnnFaceDetector
            face_detector_factory: Replaces DnnFaceDetector construction
            landmark_detector_factory: Replaces FacemarkLandmarkDetector construction
            image_loader: Replaces cv2-based image loading
        """
        self.policy = _resolve_policy(policy)
        if face_detector_factory is None:
            face_detector_factory = functools.partial(DnnFaceDetector, **(face_detector_options or {}))
        self.face_detector_factory = face_detector_factory
        self.landmark_detector_factory = landmark_detector_factory or FacemarkLandmarkDetector
        self.image_loader = image_loader

    @classmethod
    def from_config(cls, config, policy: Union[str, FeatureExtractionPolicy, None] = None) -> "FaceRegionExtractor":
        """Build an extractor from a ConfigManager."""
        return cls(
            policy if policy is not None else config.get("feature_policy"),
            face_detector_options=config.detector_options(),
        )

    def _run_native(self, buffers: PathBuffers) -> NativeDetection:
        photo_path, face_config_path, face_weights_path, eyes_model_path = buffers.decoded()
        return run_native_detection(
            photo_path,
            face_config_path,
            face_weights_path,
            eyes_model_path,
            face_detector_factory=self.face_detector_factory,
            landmark_detector_factory=self.landmark_detector_factory,
            image_loader=self.image_loader,
        )

    def _finish(self, native: NativeDetection, state: RuntimeState) -> DetectionResult:
        if state.suspended:
            raise RuntimeError("Result assembly requires a resumed caller")
        result = assemble_result(native, self.policy)
        logger.debug("Assembled %d face(s) with policy '%s'", len(result), self.policy.name)
        return result

    def _detect_sync(self, *paths: PathLike) -> Tuple[DetectionResult, RuntimeState]:
        state = RuntimeState()
        buffers = PathBuffers.copy(*paths)
        # Exit order: buffers released first, then the caller resumes
        with released_runtime(state), buffers:
            with ThreadPoolExecutor(max_workers=1, thread_name_prefix="faceroi-native") as executor:
                native = executor.submit(self._run_native, buffers).result()
        return self._finish(native, state), state

    def detect_result(
        self,
        photo_path: PathLike,
        face_config_path: PathLike,
        face_weights_path: PathLike,
        eyes_model_path: PathLike,
    ) -> DetectionResult:
        """Detect faces and feature regions, returning typed results."""
        result, _ = self._detect_sync(photo_path, face_config_path, face_weights_path, eyes_model_path)
        return result

    def detect(
        self,
        photo_path: PathLike,
        face_config_path: PathLike,
        face_weights_path: PathLike,
        eyes_model_path: PathLike,
    ) -> List[FaceEntry]:
        """Detect faces and feature regions, returning the plain nested result."""
        result, state = self._detect_sync(photo_path, face_config_path, face_weights_path, eyes_model_path)
        return marshal_result(result, state)

    async def detect_async(
        self,
        photo_path: PathLike,
        face_config_path: PathLike,
        face_weights_path: PathLike,
        eyes_model_path: PathLike,
    ) -> List[FaceEntry]:
        """Like ``detect`` but lets the event loop run other tasks meanwhile."""
        loop = asyncio.get_running_loop()
        state = RuntimeState()
        buffers = PathBuffers.copy(photo_path, face_config_path, face_weights_path, eyes_model_path)
        with released_runtime(state), buffers:
            native = await loop.run_in_executor(None, self._run_native, buffers)
        return marshal_result(self._finish(native, state), state)


def detect(
    photo_path: PathLike,
    face_config_path: PathLike,
    face_weights_path: PathLike,
    eyes_model_path: PathLike,
    policy: Union[str, FeatureExtractionPolicy, None] = None,
) -> List[FaceEntry]:
    """
    Detect faces and their feature rectangles in one photo
    Args:
        photo_path: Image file
        face_config_path: Face detector network description
        face_weights_path: Face detector weights
        eyes_model_path: 68-point landmark model
        policy: Feature policy name or object (default: eyes)
    Returns:
        [(face_rect, [feature_rect, ...]), ...] in detector order
    """
    extractor = FaceRegionExtractor(policy)
    return extractor.detect(photo_path, face_config_path, face_weights_path, eyes_model_path)
