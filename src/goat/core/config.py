"""Runtime configuration definitions."""

from datetime import date
from pathlib import Path
from typing import ClassVar

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from env and .env files."""

    _package_root: ClassVar[Path] = Path(__file__).resolve().parents[1]

    app_name: str = "The Goat"
    site_url: str = "http://localhost:3000"
    github_repo: str = "illscience/Goat"
    workflow_file: str = "goat-build.yml"
    workflow_ref: str = "main"
    catalog_path: str = str(_package_root / "catalog" / "data" / "features.json")
    build_logs_path: str = "data/build-logs.json"
    launch_date: date = date(2024, 12, 1)
    build_poll_interval_s: float = Field(default=5.0, gt=0)

    model_config = SettingsConfigDict(env_file=".env", env_prefix="GOAT_", extra="ignore")

    @model_validator(mode="after")
    def _normalize_paths(self) -> "Settings":
        self.catalog_path = str(Path(self.catalog_path).expanduser())
        self.build_logs_path = str(Path(self.build_logs_path).expanduser())
        return self
