# backend/config.py
import os
from pathlib import Path

from dotenv import load_dotenv

# backend/.env first, then whatever the process already has
load_dotenv(Path(__file__).with_name(".env"))
load_dotenv()


class Settings:
    DATABASE_URL: str | None = os.getenv("DATABASE_URL")
    # verbose logging
    DEBUG: bool = os.getenv("DEBUG", "0").lower() not in ("0", "false")

    # ---- LLM ----
    OPENAI_API_KEY: str | None = os.getenv("OPENAI_API_KEY")
    MODEL_NAME: str = os.getenv("MODEL_NAME") or "gpt-4o-mini"
    MAX_TOKENS: int = int(os.getenv("MAX_TOKENS", "800"))
    TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.2"))
    LLM_TIMEOUT_S: int = int(os.getenv("LLM_TIMEOUT_S", "60"))  # per request budget

    # ---- session cookie ----
    JWT_SECRET: str = os.getenv("JWT_SECRET", "dev_secret_change_me")
    JWT_ALGO: str = "HS256"
    JWT_EXPIRE_MINUTES: int = int(os.getenv("JWT_EXPIRE_MINUTES", str(60 * 24 * 30)))

    CORS_ORIGINS: list[str] = [
        o.strip()
        for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
        if o.strip()
    ]

    # transcripts are stored as text, keep uploads small
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))


settings = Settings()
