"""
Backend configuration for collection tags.

Loads library connection settings from environment variables and .env files.
Priority: Environment vars > .env file > defaults
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Global config singleton
_config: Optional[Config] = None


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Config(BaseModel):
    """Library backend configuration loaded from environment."""

    # Backend selection
    library_backend: Literal["memory", "zotero"] = Field(default="memory")
    library_file: str = Field(default="")

    # Zotero
    zotero_library_id: str = Field(default="")
    zotero_api_key: str = Field(default="")
    zotero_library_type: Literal["user", "group"] = Field(default="user")
    zotero_local: bool = Field(default=False)

    # Logging
    log_level: str = Field(default="")
    debug: bool = Field(default=False)

    @classmethod
    def from_env(cls) -> Config:
        """Create config from environment variables."""
        library_type = os.getenv("ZOTERO_LIBRARY_TYPE", "user")
        if library_type not in ("user", "group"):
            library_type = "user"
        backend = os.getenv("LIBRARY_BACKEND", "memory").lower()
        if backend not in ("memory", "zotero"):
            backend = "memory"

        return cls(
            library_backend=backend,
            library_file=os.getenv("LIBRARY_FILE", ""),
            zotero_library_id=os.getenv("ZOTERO_LIBRARY_ID", ""),
            zotero_api_key=os.getenv("ZOTERO_API_KEY", ""),
            zotero_library_type=library_type,
            zotero_local=_env_flag("ZOTERO_LOCAL"),
            log_level=os.getenv("LOG_LEVEL", ""),
            debug=_env_flag("DEBUG"),
        )

    @classmethod
    def load(cls, env_file: str = ".env") -> Config:
        """Load config from .env file, then environment variables."""
        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(env_path)

        return cls.from_env()

    @property
    def has_zotero(self) -> bool:
        """Whether Zotero credentials are configured."""
        if self.zotero_local:
            return True
        return bool(self.zotero_library_id and self.zotero_api_key)


def get_config() -> Config:
    """Get or create the global config singleton."""
    global _config
    if _config is None:
        _config = Config.load()
    return _config


def reset_config() -> None:
    """Reset the global config (for testing)."""
    global _config
    _config = None
