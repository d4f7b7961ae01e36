"""Unified settings for internship-intake-api."""

import tomllib
from pathlib import Path
from typing import ClassVar, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


def read_pyproject(pyproject_path: Path) -> dict:
    """Read pyproject.toml into a dict."""
    with pyproject_path.open("rb") as file_handle:
        return tomllib.load(file_handle)


def get_version(base_dir: Path) -> str:
    """Get version from git tags or fallback to package metadata."""
    try:
        import git

        repo = git.Repo(base_dir, search_parent_directories=True)
        latest_tag = max(repo.tags, key=lambda t: t.commit.committed_datetime, default=None)
        return str(latest_tag) if latest_tag else "0.0.0"
    except Exception:
        try:
            import importlib.metadata

            return importlib.metadata.version("internship-intake-api")
        except Exception:
            return "0.0.0"


class Settings(BaseSettings):
    """Unified settings for internship-intake-api service."""

    DEBUG: bool = True
    ENVIRONMENT: Literal["DEV", "PROD"] = "DEV"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # ClassVar to prevent Pydantic from trying to load from env
    BASE_DIR: ClassVar[Path] = Path(__file__).parent.parent.parent
    PROJECT: ClassVar[dict] = read_pyproject(BASE_DIR / "pyproject.toml")
    API_NAME: ClassVar[str] = PROJECT.get("project", {}).get("name", "internship-intake-api")
    API_DESCRIPTION: ClassVar[str] = PROJECT.get("project", {}).get("description", "Internship intake API")
    API_VERSION: ClassVar[str] = get_version(BASE_DIR)

    # Server
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ALLOW_ORIGIN: str = "*"

    # Paths
    DATA_PATH: ClassVar[Path] = BASE_DIR / "data"

    # Multipart limits
    MULTIPART_MAX_BYTES: int = 10 * 1024 * 1024
    MULTIPART_MAX_FILES: int = 5
    STREAM_IDLE_TIMEOUT: float = 10.0
    STREAM_TOTAL_TIMEOUT: float = 30.0
    STREAM_CHUNK_SIZE: int = 64 * 1024

    # Persistence
    STORE_BACKEND: Literal["memory", "local"] = "memory"
    APPLICATIONS_COLLECTION: str = "applications"
    PERSIST_IN_BACKGROUND: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()  # type: ignore
