"""Application configuration with security-first defaults.

Environment variables override all defaults.
CRITICAL: JWT_SECRET must be set in .env - will fail fast if missing in production.
"""

import os
from pathlib import Path
from typing import List


from dotenv import load_dotenv

# Load backend/.env for local development; real environment variables win
_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


def _csv_env(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if not raw:
        return default
    return [part.strip() for part in raw.split(",") if part.strip()]


class Settings:
    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./telemed.db")

    # JWT Security - CRITICAL
    JWT_SECRET: str = os.getenv("JWT_SECRET", None)
    if not JWT_SECRET:
        if os.getenv("ENVIRONMENT", "development") == "production":
            raise ValueError(
                "CRITICAL: JWT_SECRET must be set in production environment. "
                "Generate with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
            )
        import warnings
        warnings.warn(
            "JWT_SECRET not set in environment. Using development default. "
            "Set JWT_SECRET in .env to a strong random value.",
            RuntimeWarning
        )
        JWT_SECRET = "development-only-weak-default-change-in-production"

    ALGORITHM: str = "HS256"
    # Token expiry: 1 hour, no refresh tokens
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    # CORS (Restrictive - specific origins only, no wildcards)
    CORS_ORIGINS: List[str] = _csv_env("CORS_ORIGINS", [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ])

    ALLOWED_HOSTS: List[str] = _csv_env("ALLOWED_HOSTS", [
        "localhost",
        "127.0.0.1",
    ])

    # Groq API Key (optional; symptom checker falls back to keyword rules)
    GROQ_API_KEY: str = os.getenv("GROQ_API_KEY", "")

    # Rate Limiting
    RATE_LIMIT_REQUESTS: int = int(os.getenv("RATE_LIMIT_REQUESTS", "100"))
    RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

    # Password Policy
    MIN_PASSWORD_LENGTH: int = int(os.getenv("MIN_PASSWORD_LENGTH", "8"))
    REQUIRE_NUMBERS: bool = os.getenv("REQUIRE_NUMBERS", "true").lower() == "true"

    # Admin account, provisioned at startup (never through /auth/register)
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@telemed.local")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "")

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"

    # Dev server (run_server.py)
    SERVER_HOST: str = os.getenv("SERVER_HOST", "127.0.0.1")
    SERVER_PORT: int = int(os.getenv("SERVER_PORT", "8000"))


settings = Settings()
