"""
Visibility checks applied before and alongside the exercise rules.
"""

from typing import Dict, List, Optional, Tuple

import structlog

from coachly.services.keypoints import Exercise, KeypointSet

logger = structlog.get_logger()

# Global low-visibility penalty
LOW_CONFIDENCE_THRESHOLD = 0.5
MAX_LOW_CONFIDENCE_KEYPOINTS = 3
LOW_VISIBILITY_PENALTY = 0.2
LOW_VISIBILITY_ISSUE = "Some body parts are not clearly visible"

# Per-exercise missing keypoint detection
MISSING_CONFIDENCE_THRESHOLD = 0.3
MAX_MISSING_FRACTION = 0.3


def _both_sides(*joints: str) -> List[str]:
    return [f"{side}_{joint}" for joint in joints for side in ("left", "right")]


REQUIRED_KEYPOINTS: Dict[Exercise, List[str]] = {
    Exercise.SQUAT: _both_sides("shoulder", "hip", "knee", "ankle"),
    Exercise.BENCH: _both_sides("shoulder", "elbow", "wrist"),
    Exercise.DEADLIFT: _both_sides("shoulder", "hip", "knee", "ankle"),
}

DEFAULT_REQUIRED_KEYPOINTS = _both_sides("shoulder", "hip")


def low_visibility_penalty(keypoints) -> Tuple[List[str], float]:
    """Issue and score penalty when too many landmarks are poorly detected."""
    keypoints = KeypointSet.coerce(keypoints)
    low_count = sum(1 for lm in keypoints if lm.confidence < LOW_CONFIDENCE_THRESHOLD)

    if low_count > MAX_LOW_CONFIDENCE_KEYPOINTS:
        logger.debug("Low visibility penalty applied", low_confidence_count=low_count)
        return [LOW_VISIBILITY_ISSUE], LOW_VISIBILITY_PENALTY
    return [], 0.0


def required_keypoints(exercise: Optional[Exercise] = None) -> List[str]:
    if exercise is None:
        return list(DEFAULT_REQUIRED_KEYPOINTS)
    return list(REQUIRED_KEYPOINTS[Exercise(exercise)])


def count_missing_keypoints(keypoints, exercise: Optional[Exercise] = None) -> int:
    # Any landmark supplied under a name can make that name visible
    visible = {
        lm.name for lm in KeypointSet.coerce(keypoints)
        if lm.confidence > MISSING_CONFIDENCE_THRESHOLD
    }
    return sum(1 for name in required_keypoints(exercise) if name not in visible)


def check_for_missing_keypoints(keypoints, exercise: Optional[Exercise] = None) -> bool:
    """
    Whether too many of the exercise's critical landmarks are not visible.

    A landmark counts as missing when no landmark under its name has a
    confidence above MISSING_CONFIDENCE_THRESHOLD. The frame is flagged when
    more than MAX_MISSING_FRACTION of the required landmarks are missing.
    """
    required = required_keypoints(exercise)
    missing = count_missing_keypoints(keypoints, exercise)
    return missing > len(required) * MAX_MISSING_FRACTION
