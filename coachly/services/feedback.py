from typing import Dict, List, Tuple

from coachly.services.keypoints import Exercise

# Score bands below which each tier of coaching cues is given
FIRST_TIER_SCORE = 0.8
SECOND_TIER_SCORE = 0.6

FEEDBACK_TIERS: Dict[Exercise, Tuple[List[str], List[str]]] = {
    Exercise.SQUAT: (
        [
            "Focus on the ankle → knee → hip → chest alignment",
            "Keep your weight on your heels throughout the movement",
            "Maintain an upright chest and avoid leaning forward",
        ],
        [
            "Work on hip and ankle mobility to improve squat depth",
            "Practice bodyweight squats to master the movement pattern",
        ],
    ),
    Exercise.DEADLIFT: (
        [
            "Keep the bar path close to your body throughout the lift",
            "Maintain a neutral spine - avoid rounding your back",
            "Focus on the ankle → knee → hip → chest chain alignment",
        ],
        [
            "Work on hip hinge mobility and posterior chain strength",
            "Consider starting with lighter weight to perfect your form",
        ],
    ),
    Exercise.BENCH: (
        [
            "Focus on shoulder → elbow → wrist → bar path alignment",
            "Retract your shoulder blades and maintain stability",
            "Keep your wrists straight and stacked over your forearms",
        ],
        [
            "Work on shoulder mobility and scapular stability",
            "Practice the movement with lighter weight or just the bar",
        ],
    ),
}


def get_exercise_specific_feedback(exercise: Exercise, score: float) -> List[str]:
    """Generic coaching cues for an exercise, keyed only by score band."""
    first_tier, second_tier = FEEDBACK_TIERS[Exercise(exercise)]
    feedback: List[str] = []
    if score < FIRST_TIER_SCORE:
        feedback.extend(first_tier)
    if score < SECOND_TIER_SCORE:
        feedback.extend(second_tier)
    return feedback
