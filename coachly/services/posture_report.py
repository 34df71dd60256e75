"""
Posture report assembled around a technique analysis.

Combines the technique score with the person detection confidence and the
missing keypoint check into a single good/bad verdict with feedback.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import structlog

from coachly.config import settings
from coachly.services.feedback import get_exercise_specific_feedback
from coachly.services.keypoints import Exercise, KeypointSet, SideProfile
from coachly.services.technique_analysis import analyze_technique
from coachly.services.visibility import check_for_missing_keypoints

logger = structlog.get_logger()

UNKNOWN_EXERCISE = "unknown"


@dataclass
class PostureReport:
    is_good_posture: bool
    confidence: float
    exercise: str
    score: float
    side_profile: SideProfile
    missing_keypoints: bool
    feedback: List[str] = field(default_factory=list)
    detected_issues: List[str] = field(default_factory=list)


def build_posture_report(keypoints, person_confidence: float,
                         exercise: Optional[Exercise] = None) -> PostureReport:
    """
    Build a posture report for one frame.

    Args:
        keypoints: KeypointSet or iterable of Landmark for the detected person
        person_confidence: Confidence of the person detection itself
        exercise: Exercise being performed, if known

    Returns:
        PostureReport with verdict, feedback and detected issues
    """
    keypoints = KeypointSet.coerce(keypoints)
    exercise = Exercise(exercise) if exercise is not None else None

    analysis = analyze_technique(keypoints, exercise)
    missing_keypoints = check_for_missing_keypoints(keypoints, exercise)

    is_good_posture = (
        person_confidence > settings.good_posture_min_confidence
        and analysis.score > settings.good_posture_min_score
        and not missing_keypoints
    )

    feedback: List[str] = []
    detected_issues: List[str] = []

    if is_good_posture:
        feedback.append("Excellent form detected!")
        if exercise is not None:
            feedback.append(f"Your {exercise.value} technique looks great.")
        else:
            feedback.append("Your posture and alignment look great.")
    else:
        feedback.append("There are some areas for improvement in your form.")

        if exercise is not None:
            feedback.extend(get_exercise_specific_feedback(exercise, analysis.score))

        if analysis.issues:
            detected_issues.extend(analysis.issues)
            feedback.append("Focus on the highlighted areas for better form.")

        if person_confidence < settings.low_person_confidence:
            detected_issues.append("Person detection confidence is low")
            feedback.append("Make sure you're clearly visible in the camera frame.")

        if missing_keypoints:
            detected_issues.append("Some critical body parts are not visible")
            feedback.append("Adjust your position to ensure all key body parts are visible in the camera.")

    logger.info(
        "Posture report built",
        exercise=exercise.value if exercise is not None else UNKNOWN_EXERCISE,
        is_good_posture=is_good_posture,
        missing_keypoints=missing_keypoints,
        person_confidence=person_confidence
    )

    return PostureReport(
        is_good_posture=is_good_posture,
        confidence=person_confidence,
        exercise=exercise.value if exercise is not None else UNKNOWN_EXERCISE,
        score=analysis.score,
        side_profile=analysis.side_profile,
        missing_keypoints=missing_keypoints,
        feedback=feedback,
        detected_issues=detected_issues
    )
