"""
Configuration management.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


def _env_list(name: str) -> list[str]:
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    production: bool = field(
        default_factory=lambda: os.getenv("PRODUCTION", "").lower() == "true"
    )
    allowed_origins: list[str] = field(default_factory=lambda: _env_list("ALLOWED_ORIGINS"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    # Data
    data_dir: str = field(default_factory=lambda: os.getenv("DATA_DIR", "./data"))
    client_store_path: Optional[str] = field(
        default_factory=lambda: os.getenv("CLIENT_STORE_PATH")
    )
    audit_log_path: Optional[str] = field(default_factory=lambda: os.getenv("AUDIT_LOG_PATH"))

    def __post_init__(self) -> None:
        # Debug is never enabled in production
        if self.production:
            self.debug = False
        if not self.allowed_origins and not self.production:
            self.allowed_origins = ["http://localhost:8000", "http://127.0.0.1:8000"]

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    @property
    def store_path(self) -> Optional[str]:
        """
        JSON file backing the client store.

        Defaults to clients.json under data_dir; an empty CLIENT_STORE_PATH
        keeps the store in memory only.
        """
        if self.client_store_path is None:
            return str(Path(self.data_dir) / "clients.json")
        return self.client_store_path or None

    @property
    def audit_path(self) -> Optional[str]:
        """JSON Lines file for the audit trail, same defaulting as store_path."""
        if self.audit_log_path is None:
            return str(Path(self.data_dir) / "audit.jsonl")
        return self.audit_log_path or None

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "production": self.production,
            "allowed_origins": list(self.allowed_origins),
            "log_level": self.log_level,
            "data_dir": self.data_dir,
            "client_store_path": self.store_path,
            "audit_log_path": self.audit_path,
        }
