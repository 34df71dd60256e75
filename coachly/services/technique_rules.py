"""
Exercise technique rule tables.

Each exercise is described by an ExerciseRules entry: the side-specific
joints that must be confidently detected before any check runs, the joints
that are used only when present, and an ordered list of checks. A single
interpreter evaluates every table the same way:

* a closed gate yields one "cannot analyze" issue and GATED_MULTIPLIER;
* triggered checks subtract their penalties from 1.0 cumulatively;
* the result never drops below MIN_MULTIPLIER.

Rules assume a side (sagittal) view. The right side is used unless the left
profile was detected.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

import structlog

from coachly.services.geometry import GeometryError, calculate_angle, point_above, segment_ratio
from coachly.services.keypoints import Exercise, KeypointSet, Landmark, SideProfile

logger = structlog.get_logger()

GATE_CONFIDENCE = 0.5
GATED_MULTIPLIER = 0.3
MIN_MULTIPLIER = 0.1

# Side-independent joints
CENTRAL_JOINTS = ("nose",)


class JointFrame(dict):
    """Joints read by one evaluation; derived measurements are computed once."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._measurements: Dict[Tuple, object] = {}

    def measure(self, key: Tuple, compute: Callable[[], float]) -> float:
        if key not in self._measurements:
            try:
                self._measurements[key] = compute()
            except GeometryError as e:
                logger.debug("Measurement undefined", measurement=key[0], error=str(e))
                self._measurements[key] = e
        value = self._measurements[key]
        if isinstance(value, GeometryError):
            raise value
        return value


@dataclass(frozen=True)
class TechniqueCheck:
    """One form check: when ``predicate`` holds, ``message`` is reported"""
    message: str
    penalty: float
    predicate: Callable[[JointFrame], bool]
    requires: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ExerciseRules:
    exercise: Exercise
    gate_joints: Tuple[str, ...]
    gate_message: str
    checks: Tuple[TechniqueCheck, ...]
    optional_joints: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ExerciseEvaluation:
    """Outcome of one exercise rule set"""
    issues: Tuple[str, ...]
    multiplier: float
    gated: bool = False


def _angle(j: JointFrame, first: str, vertex: str, last: str) -> float:
    return j.measure(
        ("angle", first, vertex, last),
        lambda: calculate_angle(j[first].point, j[vertex].point, j[last].point)
    )


def _angle_from_vertical(j: JointFrame, vertex: str, other: str, reach: float = 100) -> float:
    """Angle between straight up from ``vertex`` and the segment to ``other``."""
    origin = j[vertex].point
    return j.measure(
        ("angle_from_vertical", vertex, other, reach),
        lambda: calculate_angle(point_above(origin, reach), origin, j[other].point)
    )


def _hip_knee_ratio(j: JointFrame) -> float:
    return j.measure(
        ("hip_knee_ratio",),
        lambda: segment_ratio(j["hip"].y - j["knee"].y, j["knee"].y - j["ankle"].y)
    )


def _neck_angle(j: JointFrame) -> float:
    nose = j["nose"].point
    return j.measure(
        ("neck_angle",),
        lambda: calculate_angle(j["shoulder"].point, nose, point_above(nose, 50))
    )


SQUAT_RULES = ExerciseRules(
    exercise=Exercise.SQUAT,
    gate_joints=("ankle", "knee", "hip", "shoulder"),
    gate_message="Cannot analyze squat form - key body parts not visible",
    optional_joints=("nose",),
    checks=(
        TechniqueCheck(
            "Weight may be shifting to toes - focus on keeping heels down", 0.25,
            lambda j: abs(j["knee"].x - j["ankle"].x) > 60,
        ),
        TechniqueCheck(
            "Knees are tracking too far forward - sit back more into the squat", 0.2,
            lambda j: j["knee"].x > j["ankle"].x + 80,
        ),
        TechniqueCheck(
            "Chest is collapsing forward - keep your torso more upright", 0.3,
            lambda j: _angle_from_vertical(j, "hip", "shoulder") > 45,
        ),
        TechniqueCheck(
            "Try to squat deeper - aim for thighs parallel to the ground", 0.1,
            lambda j: _angle(j, "ankle", "knee", "hip") > 140,
        ),
        TechniqueCheck(
            "Excessive hip flexion detected - avoid excessive 'butt wink'", 0.15,
            lambda j: _angle(j, "knee", "hip", "shoulder") < 70,
        ),
        TechniqueCheck(
            "Maintain neutral head position - avoid looking too far up or down", 0.1,
            lambda j: abs(j["nose"].y - j["shoulder"].y) > 100,
            requires=("nose",),
        ),
    ),
)

DEADLIFT_RULES = ExerciseRules(
    exercise=Exercise.DEADLIFT,
    gate_joints=("ankle", "knee", "hip", "shoulder"),
    gate_message="Cannot analyze deadlift form - key body parts not visible",
    optional_joints=("nose",),
    checks=(
        TechniqueCheck(
            "Bar appears too far from your body - keep it close to your shins", 0.3,
            lambda j: j["shoulder"].x < j["ankle"].x - 30,
        ),
        TechniqueCheck(
            "Hips may be too high - lower them to engage your legs more", 0.2,
            lambda j: _hip_knee_ratio(j) > 2.5,
        ),
        TechniqueCheck(
            "Hips may be too low - this isn't a squat, raise them slightly", 0.2,
            lambda j: _hip_knee_ratio(j) < 0.8,
        ),
        TechniqueCheck(
            "Spine appears rounded - keep your chest up and shoulders back", 0.4,
            lambda j: _angle_from_vertical(j, "shoulder", "hip") > 60,
        ),
        TechniqueCheck(
            "Knees appear locked - maintain slight bend to engage leg muscles", 0.15,
            lambda j: _angle(j, "ankle", "knee", "hip") > 160,
        ),
        TechniqueCheck(
            "Avoid looking up excessively - maintain neutral neck position", 0.1,
            lambda j: _neck_angle(j) > 45,
            requires=("nose",),
        ),
        TechniqueCheck(
            "Avoid looking down - keep your head in neutral position", 0.1,
            lambda j: _neck_angle(j) < 15,
            requires=("nose",),
        ),
    ),
)

BENCH_RULES = ExerciseRules(
    exercise=Exercise.BENCH,
    gate_joints=("shoulder", "elbow", "wrist"),
    gate_message="Cannot analyze bench form - arm positions not clearly visible",
    optional_joints=("hip", "nose"),
    checks=(
        TechniqueCheck(
            "Shoulders may be shrugged up - retract and depress shoulder blades", 0.2,
            lambda j: j["shoulder"].y < j["hip"].y - 150,
            requires=("hip",),
        ),
        TechniqueCheck(
            "Elbows flared too wide - bring them closer to your body", 0.25,
            lambda j: _angle(j, "wrist", "elbow", "shoulder") > 100,
        ),
        TechniqueCheck(
            "Elbows tucked too tight - allow for slight flare", 0.15,
            lambda j: _angle(j, "wrist", "elbow", "shoulder") < 45,
        ),
        TechniqueCheck(
            "Wrist alignment could be improved - keep wrists straight and stacked", 0.2,
            lambda j: abs(j["wrist"].x - j["elbow"].x) > 40,
        ),
        TechniqueCheck(
            "Bar path may be too far toward your face - aim for lower chest", 0.3,
            lambda j: j["wrist"].x < j["shoulder"].x - 50,
        ),
        TechniqueCheck(
            "Excessive back arch detected - maintain moderate natural arch", 0.15,
            lambda j: abs(j["shoulder"].x - j["hip"].x) > 80,
            requires=("hip",),
        ),
        TechniqueCheck(
            "Keep your head on the bench - avoid lifting it during the press", 0.1,
            lambda j: j["nose"].y - j["shoulder"].y > 50,
            requires=("nose",),
        ),
    ),
)

EXERCISE_RULES: Dict[Exercise, ExerciseRules] = {
    Exercise.SQUAT: SQUAT_RULES,
    Exercise.BENCH: BENCH_RULES,
    Exercise.DEADLIFT: DEADLIFT_RULES,
}


def resolve_side(side_profile: SideProfile) -> SideProfile:
    """Side whose landmarks the rules read; only an explicit LEFT picks left."""
    if SideProfile(side_profile) == SideProfile.LEFT:
        return SideProfile.LEFT
    return SideProfile.RIGHT


def _lookup(keypoints: KeypointSet, side: SideProfile, joint: str) -> Optional[Landmark]:
    if joint in CENTRAL_JOINTS:
        return keypoints.get(joint)
    return keypoints.side_landmark(side, joint)


def evaluate_exercise(keypoints, exercise: Exercise,
                      side_profile: SideProfile = SideProfile.UNKNOWN) -> ExerciseEvaluation:
    """
    Run one exercise's rule table against a frame.

    Args:
        keypoints: KeypointSet or iterable of Landmark
        exercise: Exercise whose rules apply
        side_profile: Detected side profile

    Returns:
        Ordered issues and the score multiplier
    """
    keypoints = KeypointSet.coerce(keypoints)
    rules = EXERCISE_RULES[Exercise(exercise)]
    side = resolve_side(side_profile)

    joints = JointFrame()
    for joint in rules.gate_joints:
        landmark = _lookup(keypoints, side, joint)
        if landmark is None or not landmark.is_finite or landmark.confidence < GATE_CONFIDENCE:
            logger.info(
                "Required landmark not usable",
                exercise=rules.exercise.value,
                side=side.value,
                joint=joint,
                confidence=landmark.confidence if landmark else None
            )
            return ExerciseEvaluation(
                issues=(rules.gate_message,),
                multiplier=GATED_MULTIPLIER,
                gated=True
            )
        joints[joint] = landmark

    for joint in rules.optional_joints:
        landmark = _lookup(keypoints, side, joint)
        if landmark is not None and landmark.is_finite:
            joints[joint] = landmark

    issues: List[str] = []
    multiplier = 1.0
    for check in rules.checks:
        if any(name not in joints for name in check.requires):
            continue
        try:
            triggered = check.predicate(joints)
        except GeometryError:
            # Undefined measurement: the check neither passes nor fails
            continue
        if triggered:
            issues.append(check.message)
            multiplier -= check.penalty

    return ExerciseEvaluation(issues=tuple(issues), multiplier=max(MIN_MULTIPLIER, multiplier))


def analyze_squat_technique(keypoints, side_profile: SideProfile) -> ExerciseEvaluation:
    return evaluate_exercise(keypoints, Exercise.SQUAT, side_profile)


def analyze_deadlift_technique(keypoints, side_profile: SideProfile) -> ExerciseEvaluation:
    return evaluate_exercise(keypoints, Exercise.DEADLIFT, side_profile)


def analyze_bench_technique(keypoints, side_profile: SideProfile) -> ExerciseEvaluation:
    return evaluate_exercise(keypoints, Exercise.BENCH, side_profile)
