"""
Engine configuration for GDA.

Defines the engine's identity, storage location and logging defaults.
Values come from dataclass defaults, overridden by GDA_* environment
variables (optionally loaded from a .env file).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "GDA_"
TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class EngineConfig:
    """Settlement engine configuration"""

    # Identity
    engine_address: str = "gda-engine"  # Custody account for in-flight payments

    # Persistence
    persist: bool = False  # Write auctions and state to SQLite
    db_name: str = "auctions.db"

    # Logging
    log_level: str = "INFO"
    log_to_file: bool = False

    # Paths
    data_dir: Path = Path("data")
    log_dir: Path = Path("logs")

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)
        self.log_dir = Path(self.log_dir)

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name

    def ensure_dirs(self):
        """Create data and log directories when they are needed."""
        if self.persist:
            self.data_dir.mkdir(exist_ok=True, parents=True)
        if self.log_to_file:
            self.log_dir.mkdir(exist_ok=True, parents=True)


def _env_flag(value: str) -> bool:
    return value.strip().lower() in TRUE_VALUES


def load_config(env_file: Optional[str] = None, **overrides) -> EngineConfig:
    """
    Load configuration from the environment.

    Args:
        env_file: Optional .env file; existing environment variables win
        **overrides: Explicit values that beat both file and environment

    Returns:
        EngineConfig instance
    """
    if env_file:
        load_dotenv(env_file, override=False)

    values = {}
    env = os.environ
    if f"{ENV_PREFIX}ENGINE_ADDRESS" in env:
        values["engine_address"] = env[f"{ENV_PREFIX}ENGINE_ADDRESS"]
    if f"{ENV_PREFIX}PERSIST" in env:
        values["persist"] = _env_flag(env[f"{ENV_PREFIX}PERSIST"])
    if f"{ENV_PREFIX}DB_NAME" in env:
        values["db_name"] = env[f"{ENV_PREFIX}DB_NAME"]
    if f"{ENV_PREFIX}LOG_LEVEL" in env:
        values["log_level"] = env[f"{ENV_PREFIX}LOG_LEVEL"].upper()
    if f"{ENV_PREFIX}LOG_TO_FILE" in env:
        values["log_to_file"] = _env_flag(env[f"{ENV_PREFIX}LOG_TO_FILE"])
    if f"{ENV_PREFIX}DATA_DIR" in env:
        values["data_dir"] = Path(env[f"{ENV_PREFIX}DATA_DIR"])
    if f"{ENV_PREFIX}LOG_DIR" in env:
        values["log_dir"] = Path(env[f"{ENV_PREFIX}LOG_DIR"])

    values.update({key: value for key, value in overrides.items() if value is not None})
    return EngineConfig(**values)
