from pydantic import BaseModel
import os

class Settings(BaseModel):
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./helpdesk.db")
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-only-secret-change-me-0123456789")
    jwt_audience: str = os.getenv("JWT_AUDIENCE", "authenticated")
    jwt_expires_min: int = int(os.getenv("JWT_EXPIRES_MIN", "120"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    cors_origins: list[str] = [
        o.strip()
        for o in os.getenv(
            "CORS_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000",
        ).split(",")
        if o.strip()
    ]
    # reopening a resolved/closed ticket clears resolved_at unless disabled
    clear_resolved_at_on_reopen: bool = os.getenv("CLEAR_RESOLVED_AT_ON_REOPEN", "true").lower() == "true"
    # reject (instead of downgrade) internal comments sent by reporters
    strict_internal_comments: bool = os.getenv("STRICT_INTERNAL_COMMENTS", "false").lower() == "true"

settings = Settings()
