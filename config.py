"""
Application settings

Everything is read from environment variables so the same build runs
locally and in a container. Defaults are for local development only.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: str = "mongodb://localhost:27017"
    database_name: str = "devconnector"
    jwt_secret: str = "dev_secret_change_me"
    jwt_algorithm: str = "HS256"
    jwt_expires_seconds: int = 360000  # 100 hours
    github_api_url: str = "https://api.github.com"
    github_client_id: Optional[str] = None
    github_secret: Optional[str] = None
    log_level: str = "INFO"
    port: int = 8000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            database_name=os.getenv("DATABASE_NAME", cls.database_name),
            jwt_secret=os.getenv("JWT_SECRET", cls.jwt_secret),
            jwt_expires_seconds=int(os.getenv("JWT_EXPIRES_SECONDS", cls.jwt_expires_seconds)),
            github_api_url=os.getenv("GITHUB_API_URL", cls.github_api_url),
            github_client_id=os.getenv("GITHUB_CLIENT_ID"),
            github_secret=os.getenv("GITHUB_SECRET"),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            port=int(os.getenv("PORT", cls.port)),
            cors_origins=_split_csv(os.getenv("CORS_ORIGINS", "*")),
        )


@lru_cache()
def get_settings() -> Settings:
    """Settings for the running process (read once)"""
    return Settings.from_env()
