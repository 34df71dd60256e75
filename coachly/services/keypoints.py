"""
Keypoint data model for single-frame technique analysis.

A frame is described by a set of named landmarks (COCO-style vocabulary:
"nose", "left_shoulder", "right_knee", ...) sharing one pixel space. The
side profile is derived from the relative confidence of the left and right
halves of the body.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import numpy as np
import structlog

logger = structlog.get_logger()

LEFT_PREFIX = "left_"
RIGHT_PREFIX = "right_"

# Minimum difference between mean side confidences to call a side profile
SIDE_CONFIDENCE_DIFF = 0.2


class SideProfile(str, Enum):
    """Lateral half of the body the camera is looking at"""
    LEFT = "left"
    RIGHT = "right"
    UNKNOWN = "unknown"


class Exercise(str, Enum):
    """Exercises with a technique rule set"""
    SQUAT = "squat"
    BENCH = "bench"
    DEADLIFT = "deadlift"


@dataclass(frozen=True)
class Landmark:
    """One detected anatomical point"""
    name: str
    confidence: float
    x: float
    y: float

    @property
    def point(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @property
    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite([self.confidence, self.x, self.y])))


class KeypointSet:
    """Landmarks detected for one subject in one frame.

    Every supplied landmark is kept for counting purposes, while lookups by
    name resolve to the first landmark supplied under that name.
    """

    def __init__(self, landmarks: Iterable[Landmark] = ()):
        self._landmarks: Tuple[Landmark, ...] = tuple(landmarks)
        index: Dict[str, Landmark] = {}
        for landmark in self._landmarks:
            index.setdefault(landmark.name, landmark)
        self._index = index

    @classmethod
    def coerce(cls, keypoints) -> "KeypointSet":
        if isinstance(keypoints, cls):
            return keypoints
        return cls(keypoints)

    def get(self, name: str) -> Optional[Landmark]:
        return self._index.get(name)

    def side_landmark(self, side: SideProfile, joint: str) -> Optional[Landmark]:
        return self._index.get(f"{side.value}_{joint}")

    def with_prefix(self, prefix: str) -> List[Landmark]:
        return [lm for lm in self._landmarks if lm.name.startswith(prefix)]

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __iter__(self) -> Iterator[Landmark]:
        return iter(self._landmarks)

    def __len__(self) -> int:
        return len(self._landmarks)

    def __repr__(self) -> str:
        return f"KeypointSet({len(self._landmarks)} landmarks)"


def _mean_confidence(landmarks: List[Landmark]) -> Optional[float]:
    if not landmarks:
        return None
    return float(np.mean([lm.confidence for lm in landmarks]))


def select_side_profile(keypoints) -> SideProfile:
    """Pick the side of the body facing the camera.

    The mean confidence of the ``left_`` and ``right_`` landmarks is compared;
    the side with the higher mean wins when the two differ by more than
    SIDE_CONFIDENCE_DIFF. A side with no landmarks at all counts as zero
    confidence, and a frame with neither side yields UNKNOWN.
    """
    keypoints = KeypointSet.coerce(keypoints)

    left_mean = _mean_confidence(keypoints.with_prefix(LEFT_PREFIX))
    right_mean = _mean_confidence(keypoints.with_prefix(RIGHT_PREFIX))

    if left_mean is None and right_mean is None:
        return SideProfile.UNKNOWN

    left_score = left_mean if left_mean is not None else 0.0
    right_score = right_mean if right_mean is not None else 0.0

    if abs(left_score - right_score) > SIDE_CONFIDENCE_DIFF:
        side = SideProfile.LEFT if left_score > right_score else SideProfile.RIGHT
    else:
        side = SideProfile.UNKNOWN

    logger.debug(
        "Side profile selected",
        left_mean=left_mean,
        right_mean=right_mean,
        side_profile=side.value
    )
    return side
