"""
Technique Analysis Module

Scores one frame of keypoints: global visibility penalty first, then the
selected exercise's rule table, combined into a score in [0, 1].
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import structlog

from coachly.services.keypoints import Exercise, KeypointSet, SideProfile, select_side_profile
from coachly.services.technique_rules import evaluate_exercise
from coachly.services.visibility import low_visibility_penalty

logger = structlog.get_logger()

BASE_SCORE = 1.0


@dataclass(frozen=True)
class AnalysisResult:
    """Technique analysis for a single frame"""
    score: float
    issues: Tuple[str, ...]
    side_profile: SideProfile


def _clamp_score(score: float) -> float:
    return min(1.0, max(0.0, score))


def analyze_technique(keypoints, exercise: Optional[Exercise] = None) -> AnalysisResult:
    """
    Analyze exercise technique from one frame of keypoints.

    Args:
        keypoints: KeypointSet or iterable of Landmark for one subject
        exercise: Exercise to check; when omitted only visibility is scored

    Returns:
        AnalysisResult with score, ordered issues and side profile
    """
    keypoints = KeypointSet.coerce(keypoints)
    side_profile = select_side_profile(keypoints)

    issues, penalty = low_visibility_penalty(keypoints)
    score = BASE_SCORE - penalty

    if exercise is not None:
        evaluation = evaluate_exercise(keypoints, exercise, side_profile)
        issues.extend(evaluation.issues)
        score *= evaluation.multiplier

    result = AnalysisResult(
        score=_clamp_score(score),
        issues=tuple(issues),
        side_profile=side_profile
    )

    logger.info(
        "Technique analyzed",
        exercise=Exercise(exercise).value if exercise is not None else None,
        keypoints=len(keypoints),
        side_profile=side_profile.value,
        score=result.score,
        issue_count=len(result.issues)
    )
    return result
