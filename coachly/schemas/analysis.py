from pydantic import BaseModel, Field
from typing import List, Optional
from coachly.services.keypoints import Exercise, Landmark, SideProfile


class KeypointIn(BaseModel):
    name: str = Field(..., alias="class", min_length=1)
    confidence: float = Field(..., ge=0.0, le=1.0)
    x: float = Field(..., allow_inf_nan=False)
    y: float = Field(..., allow_inf_nan=False)

    class Config:
        populate_by_name = True

    def to_landmark(self) -> Landmark:
        return Landmark(name=self.name, confidence=self.confidence, x=self.x, y=self.y)


class TechniqueRequest(BaseModel):
    keypoints: List[KeypointIn]
    exercise: Optional[Exercise] = None


class PostureRequest(TechniqueRequest):
    personConfidence: float = Field(..., ge=0.0, le=1.0)


class AnalysisResponse(BaseModel):
    score: float
    issues: List[str]
    sideProfile: SideProfile


class PostureReportResponse(BaseModel):
    isGoodPosture: bool
    confidence: float
    feedback: List[str]
    exercise: str
    detectedIssues: List[str]
    missingKeypoints: bool
    score: float
    sideProfile: SideProfile


class FeedbackResponse(BaseModel):
    exercise: Exercise
    score: float
    feedback: List[str]
