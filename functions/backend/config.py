"""
Configuration and settings for the backend.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service and scripts."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/trpc")

    # Firebase. The inline JSON wins over the file path; with neither,
    # application default credentials are used when a project id is set.
    firebase_service_account_json: Optional[str] = Field(default=None)
    firebase_service_account_path: Optional[str] = Field(
        default="fitnesschronicle-firebase-adminsdk.json"
    )
    firebase_project_id: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)
    # Bearer token -> uid, used instead of Firebase Auth with in-memory backends.
    static_auth_tokens: Dict[str, str] = Field(default_factory=dict)

    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "https://fitnesschronicle-d9080.web.app"]
    )
    log_level: str = Field(default="INFO")

    @property
    def firebase_configured(self) -> bool:
        if self.firebase_service_account_json or self.firebase_project_id:
            return True
        path = self.firebase_service_account_path
        return bool(path) and Path(path).is_file()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
