from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field


DATA_ROOT_ENV_VAR = "REGISTRY_MIRROR_DATA_DIR"
LOG_LEVEL_ENV_VAR = "REGISTRY_MIRROR_LOG_LEVEL"
HTTP_TIMEOUT_ENV_VAR = "REGISTRY_MIRROR_HTTP_TIMEOUT"
HTTP_RETRIES_ENV_VAR = "REGISTRY_MIRROR_HTTP_RETRIES"

# Resolve repository root (project root, not the Python package root)
_REPO_ROOT = Path(__file__).resolve().parents[2]
_DEFAULT_DATA_DIR = _REPO_ROOT / "data"


class Settings(BaseModel):
    """
    Process-wide settings, read from the environment.
    """

    data_dir: Path = Field(default=_DEFAULT_DATA_DIR)
    log_level: str = "INFO"
    http_timeout: float = Field(default=60.0, gt=0)
    http_retries: int = Field(default=3, ge=1)

    @property
    def registry_prefix(self) -> Path:
        """Root under which every source gets <kind>/<name>."""
        return self.data_dir / "registries"

    @property
    def registries_file(self) -> Path:
        return self.data_dir / "registries.yaml"

    @classmethod
    def from_env(cls) -> "Settings":
        values = {}
        env_path = os.environ.get(DATA_ROOT_ENV_VAR)
        if env_path:
            values["data_dir"] = Path(env_path).expanduser()
        if os.environ.get(LOG_LEVEL_ENV_VAR):
            values["log_level"] = os.environ[LOG_LEVEL_ENV_VAR].upper()
        if os.environ.get(HTTP_TIMEOUT_ENV_VAR):
            values["http_timeout"] = os.environ[HTTP_TIMEOUT_ENV_VAR]
        if os.environ.get(HTTP_RETRIES_ENV_VAR):
            values["http_retries"] = os.environ[HTTP_RETRIES_ENV_VAR]
        return cls(**values)
