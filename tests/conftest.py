import pytest
from fastapi.testclient import TestClient
from coachly.main import app
from coachly.services.keypoints import Landmark


def build_landmarks(points, confidence=0.9, side="right"):
    """Landmarks for ``{joint: (x, y)}`` on one side; "nose" stays unprefixed."""
    landmarks = []
    for joint, (x, y) in points.items():
        name = joint if joint == "nose" else f"{side}_{joint}"
        landmarks.append(Landmark(name=name, confidence=confidence, x=x, y=y))
    return landmarks


@pytest.fixture(scope="function")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def stacked_squat_points():
    """Ankle, knee, hip and shoulder stacked on one vertical line."""
    return {
        "ankle": (100, 500),
        "knee": (100, 400),
        "hip": (100, 300),
        "shoulder": (100, 150),
    }


@pytest.fixture
def stacked_squat_landmarks(stacked_squat_points):
    return build_landmarks(stacked_squat_points)


@pytest.fixture
def both_sides_squat_landmarks(stacked_squat_points):
    return (
        build_landmarks(stacked_squat_points, side="left")
        + build_landmarks(stacked_squat_points, side="right")
    )


@pytest.fixture
def clean_bench_points():
    return {
        "shoulder": (180, 340),
        "elbow": (250, 380),
        "wrist": (250, 300),
        "hip": (200, 340),
        "nose": (150, 330),
    }


@pytest.fixture
def sample_keypoint_payload():
    return [
        {"class": "right_ankle", "confidence": 0.9, "x": 100, "y": 500},
        {"class": "right_knee", "confidence": 0.9, "x": 100, "y": 400},
        {"class": "right_hip", "confidence": 0.9, "x": 100, "y": 300},
        {"class": "right_shoulder", "confidence": 0.9, "x": 100, "y": 150},
    ]


@pytest.fixture
def make_landmarks():
    return build_landmarks
