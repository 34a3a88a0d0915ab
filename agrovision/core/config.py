import os
from functools import lru_cache
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()

DEFAULT_SECRET_KEY = "dev-secret-change-me"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


class Settings:
    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent.parent.parent
        self.APP_NAME: str = os.getenv("APP_NAME", "AgroVision API")
        self.ENV: str = os.getenv("ENV", "development")
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.DATABASE_URL: str = os.getenv(
            "DATABASE_URL",
            f"sqlite:///{(base_dir / 'agrovision.db').as_posix()}",
        )
        self.SECRET_KEY: str = os.getenv("SECRET_KEY", DEFAULT_SECRET_KEY)
        self.ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
        self.ACCESS_TOKEN_EXPIRE_HOURS: int = _env_int("ACCESS_TOKEN_EXPIRE_HOURS", 24)
        self.BCRYPT_ROUNDS: int = _env_int("BCRYPT_ROUNDS", 12)
        self.LOGIN_MAX_ATTEMPTS: int = _env_int("LOGIN_MAX_ATTEMPTS", 5)
        self.LOGIN_LOCKOUT_MINUTES: int = _env_int("LOGIN_LOCKOUT_MINUTES", 30)

        self.ADMIN_EMAIL: str | None = os.getenv("ADMIN_EMAIL")
        self.ADMIN_PASSWORD: str | None = os.getenv("ADMIN_PASSWORD")
        self.ADMIN_NAME: str = os.getenv("ADMIN_NAME", "Administrador")

        default_cors = [
            "http://localhost",
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ]
        cors_origins = os.getenv("BACKEND_CORS_ORIGINS")
        self.BACKEND_CORS_ORIGINS: List[str] = (
            [origin.strip() for origin in cors_origins.split(",") if origin.strip()]
            if cors_origins
            else default_cors
        )

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

    @property
    def access_token_expires_in(self) -> int:
        return self.ACCESS_TOKEN_EXPIRE_HOURS * 3600


@lru_cache
def get_settings() -> Settings:
    return Settings()
