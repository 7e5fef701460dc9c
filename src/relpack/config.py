"""Configuration settings for relpack.

Values come from ``RELPACK_*`` environment variables or a ``.env`` file;
CLI options override them.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RELPACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Release checkout holding packages/ and src/
    release_dir: Path = Field(default=Path("."))

    # Defaults to <release_dir>/src
    sources_dir: Path | None = None

    # Directory used by the local blob store
    blobstore_dir: Path = Field(default=Path(".relpack/blobs"))

    # JSONL build logs are written here when set
    log_dir: Path | None = None

    @property
    def resolved_sources_dir(self) -> Path:
        return self.sources_dir or self.release_dir / "src"

    def package_spec_path(self, name: str) -> Path:
        """Path of the spec file for package ``name``."""
        return self.release_dir / "packages" / name / "spec"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings cache (useful for testing)."""
    global _settings
    _settings = None
