from fastapi import APIRouter, HTTPException, Query
from coachly.schemas.analysis import (
    AnalysisResponse,
    FeedbackResponse,
    PostureReportResponse,
    PostureRequest,
    TechniqueRequest,
)
from coachly.services.feedback import get_exercise_specific_feedback
from coachly.services.keypoints import Exercise, KeypointSet
from coachly.services.posture_report import build_posture_report
from coachly.services.technique_analysis import analyze_technique
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/analysis", tags=["analysis"])


@router.post("/technique", response_model=AnalysisResponse)
async def analyze_frame_technique(request: TechniqueRequest):
    """
    Score exercise technique for one frame of keypoints.
    
    Args:
        request: Keypoints for one person and the optional exercise
        
    Returns:
        Score, ordered issues and detected side profile
    """
    try:
        keypoints = KeypointSet(kp.to_landmark() for kp in request.keypoints)
        result = analyze_technique(keypoints, request.exercise)
        
        return AnalysisResponse(
            score=result.score,
            issues=list(result.issues),
            sideProfile=result.side_profile
        )
        
    except Exception as e:
        logger.error(
            "Failed to analyze technique",
            error=str(e),
            exercise=request.exercise
        )
        raise HTTPException(
            status_code=500,
            detail=f"Failed to analyze technique: {str(e)}"
        )


@router.post("/posture", response_model=PostureReportResponse)
async def analyze_frame_posture(request: PostureRequest):
    """
    Build a full posture report for one frame.
    
    Args:
        request: Keypoints, person detection confidence and optional exercise
        
    Returns:
        Good/bad verdict with feedback, detected issues and missing keypoint flag
    """
    try:
        keypoints = KeypointSet(kp.to_landmark() for kp in request.keypoints)
        report = build_posture_report(
            keypoints,
            person_confidence=request.personConfidence,
            exercise=request.exercise
        )
        
        return PostureReportResponse(
            isGoodPosture=report.is_good_posture,
            confidence=report.confidence,
            feedback=report.feedback,
            exercise=report.exercise,
            detectedIssues=report.detected_issues,
            missingKeypoints=report.missing_keypoints,
            score=report.score,
            sideProfile=report.side_profile
        )
        
    except Exception as e:
        logger.error(
            "Failed to build posture report",
            error=str(e),
            exercise=request.exercise
        )
        raise HTTPException(
            status_code=500,
            detail=f"Failed to build posture report: {str(e)}"
        )


@router.get("/feedback/{exercise}", response_model=FeedbackResponse)
async def get_feedback(exercise: Exercise, score: float = Query(..., ge=0.0, le=1.0)):
    """
    Coaching cues for an exercise at a given score.
    """
    return FeedbackResponse(
        exercise=exercise,
        score=score,
        feedback=get_exercise_specific_feedback(exercise, score)
    )
