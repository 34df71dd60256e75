from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Coachly Technique API"
    environment: str = "development"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    # Posture report thresholds
    good_posture_min_score: float = 0.6
    good_posture_min_confidence: float = 0.7
    low_person_confidence: float = 0.5

    class Config:
        env_file = ".env"


settings = Settings()
