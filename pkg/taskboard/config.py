# Task board — configuration
# Override paths and endpoints via config.yaml, environment, or CLI args.

import os
import yaml
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

CONFIG_PATH = Path(__file__).resolve().parent.parent.parent / "config.yaml"


@dataclass
class Config:
    """Runtime configuration shared by the server and the board client."""

    # Storage
    db_path: str = "~/.local/share/taskboard/tasks.db"
    seed_sample_data: bool = False

    # HTTP server
    host: str = "127.0.0.1"
    port: int = 3000
    api_prefix: str = "/api"

    # Board client
    api_url: str = "http://127.0.0.1:3000/api"
    request_timeout: float = 5.0

    log_level: str = "INFO"

    def resolve(self):
        """Apply environment overrides and normalize values."""
        env_db = os.environ.get("TASKBOARD_DB")
        if env_db:
            self.db_path = env_db
        env_url = os.environ.get("TASKBOARD_API_URL")
        if env_url:
            self.api_url = env_url

        self.db_path = str(Path(self.db_path).expanduser())
        prefix = self.api_prefix.strip("/")
        self.api_prefix = f"/{prefix}" if prefix else ""
        self.api_url = self.api_url.rstrip("/")

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """Load config from YAML file, falling back to defaults."""
        cfg_path = Path(path) if path else CONFIG_PATH
        if cfg_path.exists():
            with open(cfg_path, "r") as f:
                data = yaml.safe_load(f) or {}
            cfg = cls(**{k: v for k, v in data.items() if hasattr(cls, k)})
        else:
            cfg = cls()
        cfg.resolve()
        return cfg
