from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Sum-Proof ZKP API"
    SERVICE_NAME: str = "zkp-api"
    API_PREFIX: str = "/api/proof"

    # Deployment
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CORS_METHODS: List[str] = ["GET", "POST", "OPTIONS"]
    CORS_HEADERS: List[str] = ["Content-Type", "Authorization"]

    # Proof backend
    ZKP_BACKEND: str = "zksnake"

    class Config:
        case_sensitive = True
        env_file = ".env"

settings = Settings()
