import pytest
from coachly.services.keypoints import Exercise, KeypointSet, Landmark, SideProfile
from coachly.services.technique_analysis import AnalysisResult, analyze_technique
from coachly.services.visibility import LOW_VISIBILITY_ISSUE


def test_stacked_squat_scores_point_nine(stacked_squat_landmarks):
    """Test a well-aligned right-side squat only loses the depth penalty."""
    result = analyze_technique(stacked_squat_landmarks, Exercise.SQUAT)
    
    assert isinstance(result, AnalysisResult)
    assert result.issues == ("Try to squat deeper - aim for thighs parallel to the ground",)
    assert result.score == pytest.approx(0.9)
    assert result.side_profile == SideProfile.RIGHT


def test_low_confidence_squat_is_gated_and_penalized(make_landmarks, stacked_squat_points):
    """Test global penalty comes first and the gate multiplier applies on top."""
    landmarks = (
        make_landmarks(stacked_squat_points, confidence=0.2, side="left")
        + make_landmarks(stacked_squat_points, confidence=0.2, side="right")
    )
    
    result = analyze_technique(landmarks, Exercise.SQUAT)
    
    assert result.issues == (
        LOW_VISIBILITY_ISSUE,
        "Cannot analyze squat form - key body parts not visible",
    )
    assert result.score == pytest.approx(0.8 * 0.3)
    assert result.side_profile == SideProfile.UNKNOWN


def test_few_low_confidence_landmarks_only_gate(make_landmarks, stacked_squat_points):
    landmarks = make_landmarks(stacked_squat_points)
    landmarks[0] = Landmark("right_ankle", 0.2, 100, 500)
    
    result = analyze_technique(landmarks, Exercise.SQUAT)
    
    assert result.issues == ("Cannot analyze squat form - key body parts not visible",)
    assert result.score == pytest.approx(0.3)


def test_no_exercise_only_scores_visibility():
    """Test 5 of 8 low-confidence landmarks without an exercise scores 0.8."""
    landmarks = [
        Landmark("left_shoulder", 0.9, 0, 0),
        Landmark("left_hip", 0.9, 0, 0),
        Landmark("left_knee", 0.9, 0, 0),
        Landmark("left_ankle", 0.4, 0, 0),
        Landmark("right_shoulder", 0.3, 0, 0),
        Landmark("right_hip", 0.3, 0, 0),
        Landmark("right_knee", 0.3, 0, 0),
        Landmark("right_ankle", 0.3, 0, 0),
    ]
    
    result = analyze_technique(landmarks)
    
    assert result.score == pytest.approx(0.8)
    assert result.issues == (LOW_VISIBILITY_ISSUE,)
    assert result.side_profile == SideProfile.LEFT


def test_no_exercise_clean_frame_scores_one(both_sides_squat_landmarks):
    result = analyze_technique(both_sides_squat_landmarks)
    
    assert result.score == 1.0
    assert result.issues == ()
    assert result.side_profile == SideProfile.UNKNOWN


def test_empty_frame():
    """Test an empty frame is scored without errors."""
    assert analyze_technique([]) == AnalysisResult(score=1.0, issues=(), side_profile=SideProfile.UNKNOWN)
    
    result = analyze_technique([], Exercise.BENCH)
    
    assert result.score == pytest.approx(0.3)
    assert result.issues == ("Cannot analyze bench form - arm positions not clearly visible",)


def test_left_profile_uses_left_landmarks(make_landmarks, stacked_squat_points):
    leaning = {
        "ankle": (0, 500),
        "knee": (100, 480),
        "hip": (200, 460),
        "shoulder": (100, 400),
    }
    landmarks = (
        make_landmarks(stacked_squat_points, confidence=0.95, side="left")
        + make_landmarks(leaning, confidence=0.6, side="right")
    )
    
    result = analyze_technique(KeypointSet(landmarks), Exercise.SQUAT)
    
    assert result.side_profile == SideProfile.LEFT
    assert result.issues == ("Try to squat deeper - aim for thighs parallel to the ground",)


def test_exercise_accepts_plain_string(stacked_squat_landmarks):
    result = analyze_technique(stacked_squat_landmarks, "squat")
    
    assert result.score == pytest.approx(0.9)


@pytest.mark.parametrize("exercise", [None, Exercise.SQUAT, Exercise.BENCH, Exercise.DEADLIFT])
def test_score_stays_in_unit_interval(make_landmarks, exercise):
    """Test heavily penalized frames still score within [0, 1]."""
    points = {
        "ankle": (0, 500),
        "knee": (100, 480),
        "hip": (200, 460),
        "shoulder": (100, 400),
        "elbow": (0, 400),
        "wrist": (-200, 400),
        "nose": (100, 200),
    }
    landmarks = make_landmarks(points) + [Landmark(f"left_{n}", 0.1, 0, 0) for n in ("a", "b", "c", "d")]
    
    result = analyze_technique(landmarks, exercise)
    
    assert 0.0 <= result.score <= 1.0
    assert len(result.issues) == len(set(result.issues))


def test_non_finite_landmark_does_not_score_perfectly(make_landmarks, stacked_squat_points):
    landmarks = make_landmarks(stacked_squat_points)
    landmarks[1] = Landmark("right_knee", 0.9, float("nan"), 400)
    
    result = analyze_technique(landmarks, Exercise.SQUAT)
    
    assert result.issues == ("Cannot analyze squat form - key body parts not visible",)
    assert result.score == pytest.approx(0.3)
