"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache) — single instance per process
    - All discovery roots are resolved against project_root
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Discovery
    project_root: Path = Field(default_factory=Path.cwd)
    dependency_dir: str = "vendor"
    local_modules_dir: str = "modules"
    module_prefix: str = "edrm-"
    namespace_prefix: str = "@"
    build_subdir: str = "dist"

    # Server
    host: str = "0.0.0.0"
    server_port: int = 3000
    environment: str = "development"

    # API
    cors_origin: str = ""
    gzip_minimum_size: int = 1000
    swagger: bool = True
    swagger_config_file: str = "swagger.json"

    @field_validator("build_subdir", "dependency_dir", "local_modules_dir", mode="before")
    @classmethod
    def strip_slashes(cls, v: str) -> str:
        """`dist/` and `/dist` both mean the `dist` folder under the root."""
        if isinstance(v, str):
            return v.strip("/")
        return v

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def cors_origins(self) -> list[str]:
        """CORS_ORIGIN is a comma-separated list, or `*`; empty disables CORS."""
        return [o.strip() for o in self.cors_origin.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def dependency_path(self) -> Path:
        return self.project_root / self.dependency_dir

    @property
    def local_modules_path(self) -> Path:
        return self.project_root / self.local_modules_dir


@lru_cache
def get_settings() -> Settings:
    return Settings()
