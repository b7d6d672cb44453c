import json

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Resolve backend root (…/backend/) regardless of current working directory
BASE_DIR = Path(__file__).resolve().parents[2]
ENV_FILE = BASE_DIR / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "QuizHub API"
    ENV: str = "dev"
    # One origin or several, comma separated (or a JSON list)
    # Example: "http://localhost:5173,https://example.com"
    BACKEND_CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    DATABASE_URL: str = "sqlite:///./quizhub.db"
    # Dev convenience: create missing tables at startup. Production runs alembic.
    AUTO_CREATE_TABLES: bool = True

    LOG_LEVEL: str = "INFO"

    # ===== Auth =====
    JWT_SECRET_KEY: str = "dev-secret-change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440

    PASSWORD_MIN_LENGTH: int = 5
    # bcrypt cost factor (4..31). Tests drop this to 4.
    PASSWORD_BCRYPT_ROUNDS: int = 12

    # Optional admin bootstrap (startup is idempotent)
    ADMIN_USERNAME: str | None = None
    ADMIN_PASSWORD: str | None = None
    ADMIN_FULL_NAME: str = "Administrator"

    # ===== Access policy =====
    # Exam/question reads: protected by default, set false to make them public.
    CATALOG_READS_REQUIRE_AUTH: bool = True
    # Friend-request routes take ids from the body. When true, the token user
    # must be the acting party.
    RELATIONSHIP_ROUTES_REQUIRE_AUTH: bool = False

    # keep | cascade
    # - keep: delete the exam row only (questions keep a dangling exam_id)
    # - cascade: delete the exam's questions in the same transaction
    EXAM_DELETE_POLICY: str = "keep"

    SUGGESTIONS_DEFAULT_LIMIT: int = 10
    SUGGESTIONS_MAX_LIMIT: int = 100

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        if v is None or v == "":
            return []

        if isinstance(v, list):
            return v

        # JSON list first, then comma separated
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("["):
                try:
                    return json.loads(s)
                except ValueError:
                    pass
            return [item.strip() for item in s.split(",") if item.strip()]

        return v

    @field_validator("EXAM_DELETE_POLICY", mode="before")
    @classmethod
    def _parse_delete_policy(cls, v):
        policy = str(v or "keep").strip().lower()
        if policy not in {"keep", "cascade"}:
            raise ValueError("EXAM_DELETE_POLICY must be 'keep' or 'cascade'")
        return policy


settings = Settings()
