"""
Application settings.
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # OpenAI
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: Optional[str] = None
    EXTRACTION_MODEL: str = "gpt-4o"
    EXTRACTION_MAX_TOKENS: int = 1000
    STRUCTURING_MODEL: str = "gpt-4o"
    STRUCTURING_MAX_TOKENS: int = 1000
    STRUCTURING_TEMPERATURE: float = 0.1
    LLM_TIMEOUT: float = 120.0

    # 로깅
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # 파일 저장
    UPLOAD_DIR: str = "./uploads"
    UPLOAD_URL_PATH: str = "/uploads"
    PUBLIC_BASE_URL: str = ""
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
