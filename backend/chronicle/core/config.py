from pydantic_settings import BaseSettings
from typing import List, Any
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "IT Chronicle"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    SECRET_KEY: str
    API_VERSION: str = "v1"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_ECHO: bool = False

    # ==========================================
    # Authentication
    # ==========================================
    # Tokens are issued by the identity provider; we only verify them
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours

    # ==========================================
    # CORS
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://localhost:5173"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    # ==========================================
    # AI text endpoints (skill classification, log drafting)
    # ==========================================
    ANTHROPIC_API_KEY: str = ""
    ANTHROPIC_BASE_URL: str = ""  # Empty means use default Anthropic URL
    AI_MODEL: str = "claude-3-5-haiku-20241022"
    AI_MAX_TOKENS: int = 2048
    AI_TEMPERATURE: float = 0.3
    AI_REQUEST_TIMEOUT: int = 60  # seconds
    AI_CONNECT_TIMEOUT: int = 10  # seconds

    # ==========================================
    # Logbook workflow
    # ==========================================
    # When true, final sign-off is only accepted while the student is awaiting approval
    STRICT_FINAL_SIGNOFF: bool = False
    # When false, a student cannot submit two logs for the same week number
    ALLOW_DUPLICATE_WEEKS: bool = True
    SUPERVISOR_CODE_PREFIX: str = "SUPER-"
    SUPERVISOR_CODE_LENGTH: int = 6
    SYSTEM_EVENTS_LIMIT: int = 50

    # ==========================================
    # Background tasks
    # ==========================================
    TASK_FAILURE_HISTORY: int = 100  # Failed background tasks kept for inspection

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings


settings = Settings()
